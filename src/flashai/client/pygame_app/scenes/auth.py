from __future__ import annotations

import pygame  # type: ignore[import-not-found]

from flashai.services.library import LibraryError

from ..app import AppContext
from ..scene_base import BaseScene
from ..ui import ACCENT, DANGER, MUTED, PAPER, Button, TextInput, draw_text, focus_next


class AuthScene(BaseScene):
    """Login / registration form."""

    def __init__(self, ctx: AppContext) -> None:
        super().__init__()
        self.ctx = ctx
        self.is_login = True
        self._error = ""

        x, w = 312, 400
        self.in_username = TextInput(rect=pygame.Rect(x, 250, w, 40), placeholder="Username", max_len=40)
        self.in_password = TextInput(
            rect=pygame.Rect(x, 310, w, 40), placeholder="Password", secret=True, max_len=40,
            on_submit=lambda _t: self._on_submit(),
        )
        self.in_full_name = TextInput(rect=pygame.Rect(x, 370, w, 40), placeholder="Full name", max_len=60)
        self.btn_submit = Button(rect=pygame.Rect(x, 440, w, 48), text="Sign In", on_click=self._on_submit, primary=True)
        self.btn_switch = Button(
            rect=pygame.Rect(x, 500, w, 40), text="No account? Register", on_click=self._on_switch
        )

    def _inputs(self) -> list[TextInput]:
        if self.is_login:
            return [self.in_username, self.in_password]
        return [self.in_username, self.in_password, self.in_full_name]

    def _on_switch(self) -> None:
        self.is_login = not self.is_login
        self._error = ""
        self.btn_submit.text = "Sign In" if self.is_login else "Create Account"
        self.btn_switch.text = "No account? Register" if self.is_login else "Have an account? Sign in"

    def _on_submit(self) -> None:
        lib = self.ctx.library
        if lib is None:
            return
        self._error = ""
        try:
            if self.is_login:
                user = lib.login(self.in_username.text, self.in_password.text)
            else:
                user = lib.register(self.in_username.text, self.in_password.text, self.in_full_name.text)
        except LibraryError as e:
            self._error = str(e)
            self.ctx.telemetry.log("auth_failed", {"mode": "login" if self.is_login else "register"})
            return
        self.ctx.telemetry.bind(user_id=user.id)
        self.ctx.telemetry.log("login" if self.is_login else "register", {"username": user.username})

        from .library import LibraryScene

        self._go(LibraryScene(self.ctx))

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN and event.key == pygame.K_TAB:
            focus_next(self._inputs())
            return
        for b in (self.btn_submit, self.btn_switch):
            if b.handle_event(event):
                return
        for field in self._inputs():
            field.handle_event(event)

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(PAPER)
        fonts = self.ctx.fonts
        header = pygame.Rect(312, 90, 400, 130)
        pygame.draw.rect(screen, ACCENT, header, border_radius=18)
        draw_text(screen, fonts.big, "FlashAI", (header.x + 140, header.y + 30), color=(255, 255, 255))
        draw_text(
            screen, fonts.small, "Master vocabulary with AI & Flashcards", (header.x + 70, header.y + 80),
            color=(224, 231, 255),
        )
        for field in self._inputs():
            field.draw(screen, fonts.ui)
        self.btn_submit.rect.y = 440 if self.is_login else 440 + 30
        self.btn_switch.rect.y = self.btn_submit.rect.bottom + 12
        self.btn_submit.draw(screen, fonts.ui)
        self.btn_switch.draw(screen, fonts.small)
        if self._error:
            draw_text(screen, fonts.ui, self._error, (312, self.btn_switch.rect.bottom + 16), color=DANGER)
        draw_text(
            screen, fonts.small, "Accounts are stored on this computer only.", (312, 740), color=MUTED
        )
