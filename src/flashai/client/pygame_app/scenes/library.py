from __future__ import annotations

from typing import Literal

import pygame  # type: ignore[import-not-found]

from flashai.engine.types import Deck
from flashai.services.library import LibraryError, LibraryService

from ..app import AppContext
from ..scene_base import BaseScene
from ..ui import ACCENT, DANGER, MUTED, PAPER, Button, draw_text

Tab = Literal["home", "community"]

ROW_H = 64
GROUP_H = 34
LIST_TOP = 150


class LibraryScene(BaseScene):
    """Deck lists: the user's own decks and the community feed, grouped by folder."""

    def __init__(self, ctx: AppContext, tab: Tab = "home") -> None:
        super().__init__()
        self.ctx = ctx
        self.tab: Tab = tab
        self.scroll = 0
        self._message = ""
        self._confirm_delete: str | None = None
        self._row_buttons: list[Button] = []

        self.btn_home = Button(rect=pygame.Rect(40, 90, 160, 40), text="My Library", on_click=lambda: self._set_tab("home"))
        self.btn_community = Button(
            rect=pygame.Rect(210, 90, 160, 40), text="Community", on_click=lambda: self._set_tab("community")
        )
        self.btn_create = Button(
            rect=pygame.Rect(720, 24, 150, 44), text="Create Set", on_click=self._on_create, primary=True
        )
        self.btn_logout = Button(rect=pygame.Rect(884, 24, 110, 44), text="Logout", on_click=self._on_logout)
        self._rebuild()

    @property
    def library(self) -> LibraryService:
        assert self.ctx.library is not None
        return self.ctx.library

    def _set_tab(self, tab: Tab) -> None:
        self.tab = tab
        self.scroll = 0
        self._confirm_delete = None
        self._rebuild()

    def _decks(self) -> list[Deck]:
        if self.tab == "home":
            return self.library.my_decks()
        return self.library.community_decks()

    def _layout(self) -> list[tuple[str, Deck | str, int]]:
        """Rows as (kind, payload, y) where kind is "group" or "deck"."""
        rows: list[tuple[str, Deck | str, int]] = []
        y = LIST_TOP - self.scroll
        for folder, decks in LibraryService.decks_by_folder(self._decks()).items():
            rows.append(("group", folder, y))
            y += GROUP_H
            for d in decks:
                rows.append(("deck", d, y))
                y += ROW_H
        return rows

    def _rebuild(self) -> None:
        self.btn_home.primary = self.tab == "home"
        self.btn_community.primary = self.tab == "community"
        buttons: list[Button] = []
        for kind, payload, y in self._layout():
            if kind != "deck" or not isinstance(payload, Deck):
                continue
            deck = payload
            buttons.append(
                Button(rect=pygame.Rect(700, y + 10, 90, 40), text="Study", on_click=lambda d=deck: self._on_study(d))
            )
            if self.library.can_edit(deck):
                buttons.append(
                    Button(rect=pygame.Rect(800, y + 10, 80, 40), text="Edit", on_click=lambda d=deck: self._on_edit(d))
                )
                label = "Sure?" if self._confirm_delete == deck.id else "Delete"
                buttons.append(
                    Button(rect=pygame.Rect(890, y + 10, 90, 40), text=label, on_click=lambda d=deck: self._on_delete(d))
                )
        self._row_buttons = buttons

    def _on_create(self) -> None:
        from .editor import EditorScene

        self._go(EditorScene(self.ctx))

    def _on_logout(self) -> None:
        self.library.logout()
        self.ctx.telemetry.log("logout", {})
        self.ctx.telemetry.bind(user_id=None)
        from .auth import AuthScene

        self._go(AuthScene(self.ctx))

    def _on_study(self, deck: Deck) -> None:
        if not deck.cards:
            self._message = "This deck has no cards yet."
            return
        from .study import StudyScene

        self._go(StudyScene(self.ctx, deck, return_tab=self.tab))

    def _on_edit(self, deck: Deck) -> None:
        if not self.library.can_edit(deck):
            self._message = "You can only edit your own decks."
            return
        from .editor import EditorScene

        self._go(EditorScene(self.ctx, existing=deck))

    def _on_delete(self, deck: Deck) -> None:
        if self._confirm_delete != deck.id:
            self._confirm_delete = deck.id
            self._rebuild()
            return
        try:
            self.library.delete_deck(deck.id)
        except LibraryError as e:
            self._message = str(e)
        else:
            self.ctx.telemetry.log("deck_deleted", {"deck_id": deck.id})
            self._message = f"Deleted \"{deck.title}\"."
        self._confirm_delete = None
        self._rebuild()

    def handle_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.MOUSEWHEEL:
            self.scroll = max(0, self.scroll - event.y * 40)
            self._rebuild()
            return
        for b in (self.btn_home, self.btn_community, self.btn_create, self.btn_logout):
            if b.handle_event(event):
                return
        for b in list(self._row_buttons):
            if b.rect.top < LIST_TOP:
                continue
            if b.handle_event(event):
                return

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(PAPER)
        fonts = self.ctx.fonts
        draw_text(screen, fonts.big, "FlashAI", (40, 28), color=ACCENT)
        user = self.library.current_user
        if user is not None:
            draw_text(screen, fonts.ui, user.full_name, (200, 38))
        for b in (self.btn_home, self.btn_community, self.btn_create, self.btn_logout):
            b.draw(screen, fonts.ui)

        clip = screen.get_clip()
        screen.set_clip(pygame.Rect(0, LIST_TOP, screen.get_width(), screen.get_height() - LIST_TOP - 40))
        rows = self._layout()
        if not rows:
            empty = "No decks yet. Create your first set!" if self.tab == "home" else "No public decks yet."
            draw_text(screen, fonts.ui, empty, (40, LIST_TOP + 20), color=MUTED)
        for kind, payload, y in rows:
            if kind == "group":
                draw_text(screen, fonts.ui, str(payload), (40, y + 8), color=MUTED)
                continue
            assert isinstance(payload, Deck)
            rect = pygame.Rect(40, y, 950, ROW_H - 6)
            pygame.draw.rect(screen, (255, 255, 255), rect, border_radius=12)
            pygame.draw.rect(screen, (226, 232, 240), rect, width=2, border_radius=12)
            draw_text(screen, fonts.ui, payload.title[:60], (rect.x + 14, rect.y + 8))
            visibility = "Public" if payload.is_public else "Private"
            meta = f"{len(payload.cards)} cards  ·  {visibility}  ·  by {payload.author_name}"
            draw_text(screen, fonts.small, meta, (rect.x + 14, rect.y + 34), color=MUTED)
        for b in self._row_buttons:
            b.draw(screen, fonts.small)
        screen.set_clip(clip)

        if self._message:
            draw_text(screen, fonts.ui, self._message, (40, screen.get_height() - 34), color=DANGER)
