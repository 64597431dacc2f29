from __future__ import annotations

from typing import Literal

import pygame  # type: ignore[import-not-found]

from flashai.engine.match import remaining_pairs, tile_status
from flashai.engine.session import MatchSession
from flashai.engine.study import CardViewer
from flashai.engine.timers import TaskScheduler
from flashai.engine.types import Deck, Tile

from ..app import AppContext
from ..scene_base import BaseScene, SceneTransition
from ..ui import ACCENT, MUTED, PAPER, Button, draw_centered_lines, draw_text

StudyMode = Literal["flashcards", "match"]

GRID_COLS = 4
TILE_W, TILE_H, GAP = 225, 120, 14
GRID_X, GRID_Y = 40, 150

TILE_COLORS = {
    "word": ((240, 249, 255), (186, 230, 253)),
    "definition": ((255, 247, 237), (254, 215, 170)),
    "selected": ((224, 231, 255), (99, 102, 241)),
    "mismatched": ((254, 242, 242), (239, 68, 68)),
}


class StudyScene(BaseScene):
    """Study one deck: flip cards, or the timed matching game."""

    def __init__(self, ctx: AppContext, deck: Deck, return_tab: str = "home") -> None:
        super().__init__()
        self.ctx = ctx
        self.deck = deck
        self.return_tab = return_tab
        self.mode: StudyMode = "flashcards"
        self.viewer = CardViewer(deck.cards)
        self.scheduler = TaskScheduler()
        self.session: MatchSession | None = None

        self.btn_exit = Button(rect=pygame.Rect(20, 20, 110, 40), text="Exit", on_click=self._on_exit)
        self.btn_cards = Button(
            rect=pygame.Rect(380, 20, 140, 40), text="Flashcards", on_click=lambda: self._set_mode("flashcards")
        )
        self.btn_match = Button(rect=pygame.Rect(530, 20, 140, 40), text="Match", on_click=lambda: self._set_mode("match"))

        # Flashcards
        self.card_rect = pygame.Rect(212, 150, 600, 360)
        self.btn_prev = Button(rect=pygame.Rect(212, 540, 140, 48), text="< Prev", on_click=self._on_prev)
        self.btn_next = Button(rect=pygame.Rect(672, 540, 140, 48), text="Next >", on_click=self._on_next, primary=True)

        # Match
        self.btn_restart = Button(rect=pygame.Rect(840, 90, 150, 40), text="Restart", on_click=self._on_restart)
        self.btn_again = Button(rect=pygame.Rect(392, 460, 240, 54), text="Play Again", on_click=self._on_restart, primary=True)

    # -------- navigation --------
    def _on_exit(self) -> None:
        from .library import LibraryScene

        self._go(LibraryScene(self.ctx, tab="community" if self.return_tab == "community" else "home"))

    def _set_mode(self, mode: StudyMode) -> None:
        if mode == self.mode:
            return
        self.mode = mode
        if mode == "match":
            self.session = MatchSession(self.deck, self.scheduler, on_event=self.ctx.telemetry.log)
            self.session.start()
        else:
            self._close_session()

    def _close_session(self) -> None:
        if self.session is not None:
            self.session.close()
            self.session = None

    def leave(self) -> None:
        self._close_session()

    # -------- flashcards --------
    def _on_prev(self) -> None:
        self.viewer.prev()

    def _on_next(self) -> None:
        if self.viewer.is_finished:
            self.viewer.reset()
        else:
            self.viewer.next()

    # -------- match --------
    def _on_restart(self) -> None:
        if self.session is not None:
            self.session.restart()

    def _tile_rect(self, index: int) -> pygame.Rect:
        row, col = divmod(index, GRID_COLS)
        return pygame.Rect(GRID_X + col * (TILE_W + GAP), GRID_Y + row * (TILE_H + GAP), TILE_W, TILE_H)

    def _hit_test_tile(self, pos: tuple[int, int]) -> Tile | None:
        if self.session is None or self.session.state is None:
            return None
        for i, tile in enumerate(self.session.state.tiles):
            if self._tile_rect(i).collidepoint(pos):
                return tile
        return None

    # -------- scene protocol --------
    def handle_event(self, event: pygame.event.Event) -> None:
        for b in (self.btn_exit, self.btn_cards, self.btn_match):
            if b.handle_event(event):
                return
        if self.mode == "flashcards":
            self._handle_flashcards(event)
        else:
            self._handle_match(event)

    def _handle_flashcards(self, event: pygame.event.Event) -> None:
        for b in (self.btn_prev, self.btn_next):
            if b.handle_event(event):
                return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1 and self.card_rect.collidepoint(event.pos):
            self.viewer.flip()
        elif event.type == pygame.KEYDOWN:
            if event.key in (pygame.K_RIGHT, pygame.K_SPACE):
                self.viewer.next()
            elif event.key == pygame.K_LEFT:
                self.viewer.prev()
            elif event.key in (pygame.K_UP, pygame.K_DOWN, pygame.K_RETURN):
                self.viewer.flip()

    def _handle_match(self, event: pygame.event.Event) -> None:
        session = self.session
        if session is None:
            return
        if session.phase == "won":
            self.btn_again.handle_event(event)
            return
        if self.btn_restart.handle_event(event):
            return
        if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            tile = self._hit_test_tile(event.pos)
            if tile is not None:
                session.select(tile.tile_id)

    def update(self, dt: float) -> SceneTransition | None:
        if self.session is not None:
            self.scheduler.advance(dt)
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(PAPER)
        fonts = self.ctx.fonts
        self.btn_cards.primary = self.mode == "flashcards"
        self.btn_match.primary = self.mode == "match"
        for b in (self.btn_exit, self.btn_cards, self.btn_match):
            b.draw(screen, fonts.ui)
        draw_text(screen, fonts.ui, self.deck.title[:70], (40, 96))

        if self.mode == "flashcards":
            self._render_flashcards(screen)
        else:
            self._render_match(screen)

    def _render_flashcards(self, screen: pygame.Surface) -> None:
        fonts = self.ctx.fonts
        card = self.viewer.current
        rect = self.card_rect
        back = self.viewer.flipped
        pygame.draw.rect(screen, (255, 255, 255) if not back else (238, 242, 255), rect, border_radius=24)
        pygame.draw.rect(screen, (199, 210, 254), rect, width=3, border_radius=24)
        if not back:
            draw_centered_lines(screen, fonts.big, card.word, rect.inflate(0, -120))
            if card.pronunciation:
                img = fonts.ui.render(card.pronunciation, True, MUTED)
                screen.blit(img, img.get_rect(center=(rect.centerx, rect.centery + 50)).topleft)
            draw_text(screen, fonts.small, "Click to flip", (rect.x + 20, rect.bottom - 30), color=MUTED)
        else:
            draw_centered_lines(screen, fonts.ui, card.definition, pygame.Rect(rect.x, rect.y + 40, rect.width, 180))
            if card.example:
                draw_centered_lines(
                    screen, fonts.small, f"\"{card.example}\"", pygame.Rect(rect.x, rect.y + 220, rect.width, 100),
                    color=MUTED,
                )

        # progress bar
        bar = pygame.Rect(212, 520, 600, 6)
        pygame.draw.rect(screen, (226, 232, 240), bar, border_radius=3)
        filled = bar.copy()
        filled.width = int(bar.width * self.viewer.progress / 100.0)
        pygame.draw.rect(screen, ACCENT, filled, border_radius=3)
        counter = f"{self.viewer.index + 1} / {len(self.viewer.cards)}"
        draw_text(screen, fonts.ui, counter, (480, 555), color=MUTED)

        self.btn_prev.enabled = self.viewer.index > 0
        self.btn_next.text = "Restart" if self.viewer.is_finished else "Next >"
        self.btn_prev.draw(screen, fonts.ui)
        self.btn_next.draw(screen, fonts.ui)

    def _render_match(self, screen: pygame.Surface) -> None:
        fonts = self.ctx.fonts
        session = self.session
        if session is None or session.state is None:
            return
        state = session.state
        draw_text(screen, fonts.big, f"{state.elapsed:.1f}s", (700, 92), color=ACCENT)
        left = remaining_pairs(state)
        draw_text(screen, fonts.small, f"{left} pair{'' if left == 1 else 's'} left", (40, 126), color=MUTED)

        if state.won:
            draw_text(screen, fonts.big, "Great Job!", (430, 300))
            draw_text(
                screen, fonts.ui, f"You cleared the board in {state.elapsed:.1f} seconds.", (340, 360), color=MUTED
            )
            self.btn_again.draw(screen, fonts.ui)
            return

        self.btn_restart.draw(screen, fonts.ui)
        for i, tile in enumerate(state.tiles):
            status = tile_status(state, tile.tile_id)
            if status == "hidden":
                continue
            rect = self._tile_rect(i)
            key = tile.kind if status == "neutral" else status
            bg, border = TILE_COLORS[key]
            if status == "selected":
                rect = rect.inflate(6, 6)
            pygame.draw.rect(screen, bg, rect, border_radius=12)
            pygame.draw.rect(screen, border, rect, width=2, border_radius=12)
            font = fonts.ui if tile.kind == "word" else fonts.small
            text_rect = rect if not tile.pronunciation else rect.move(0, -10)
            draw_centered_lines(screen, font, tile.content, text_rect)
            if tile.kind == "word" and tile.pronunciation:
                img = fonts.small.render(tile.pronunciation, True, MUTED)
                screen.blit(img, img.get_rect(midbottom=(rect.centerx, rect.bottom - 10)).topleft)
