from __future__ import annotations

import traceback

import pygame  # type: ignore[import-not-found]

from flashai.services.library import LibraryService

from ..app import AppContext
from ..scene_base import BaseScene, SceneTransition
from ..ui import DANGER, PAPER, Button, draw_text


class BootScene(BaseScene):
    def __init__(self, ctx: AppContext) -> None:
        super().__init__()
        self.ctx = ctx
        self._did_boot = False
        self._error: str | None = None
        self._quit_button: Button | None = None

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._quit_button is not None:
            self._quit_button.handle_event(event)

    def update(self, dt: float) -> SceneTransition | None:
        if self._did_boot:
            return None
        self._did_boot = True
        try:
            self.ctx.content.validate_all()
            self.ctx.paths.userdata_dir.mkdir(parents=True, exist_ok=True)
            self.ctx.library = LibraryService(self.ctx.paths.library_path, self.ctx.content)

            user = self.ctx.library.current_user
            self.ctx.telemetry.bind(user_id=user.id if user is not None else None)
            self.ctx.telemetry.log("boot", {"ok": True, "decks": len(self.ctx.library.data.decks)})

            from .auth import AuthScene
            from .library import LibraryScene

            if user is None:
                return SceneTransition(AuthScene(self.ctx))
            return SceneTransition(LibraryScene(self.ctx))
        except Exception as e:
            tb = traceback.format_exc(limit=8)
            self._error = f"{e}\n\n{tb}"
            self.ctx.telemetry.log("boot", {"ok": False, "error": str(e)})
            self._quit_button = Button(
                rect=pygame.Rect(20, 700, 140, 44),
                text="Quit",
                on_click=lambda: pygame.event.post(pygame.event.Event(pygame.QUIT)),
            )
            return None

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(PAPER)
        fonts = self.ctx.fonts
        draw_text(screen, fonts.big, "FlashAI", (20, 20))

        if self._error is None:
            draw_text(screen, fonts.ui, "Loading your library...", (20, 80))
        else:
            draw_text(screen, fonts.ui, "STARTUP ERROR", (20, 80), color=DANGER)
            y = 120
            for line in self._error.splitlines()[:26]:
                draw_text(screen, fonts.small, line[:120], (20, y))
                y += 20
            if self._quit_button is not None:
                self._quit_button.draw(screen, fonts.ui)
