from __future__ import annotations

from typing import Literal

import pygame  # type: ignore[import-not-found]

from flashai.engine.types import CardDraft, Deck
from flashai.services.content import ContentError
from flashai.services.generator import LEVELS, GenerationError, GenerationParams
from flashai.services.library import LibraryError, LibraryService

from ..app import AppContext
from ..scene_base import BaseScene, SceneTransition
from ..ui import DANGER, MUTED, PAPER, Button, TextInput, Toggle, draw_text, focus_next

Mode = Literal["manual", "ai"]

ROWS_TOP = 330
ROW_H = 96


class CardRow:
    def __init__(self, y: int, draft: CardDraft | None = None) -> None:
        d = draft or CardDraft(word="", definition="")
        self.word = TextInput(rect=pygame.Rect(40, y, 300, 36), text=d.word, placeholder="Word")
        self.pronunciation = TextInput(
            rect=pygame.Rect(350, y, 200, 36), text=d.pronunciation or "", placeholder="/IPA/"
        )
        self.definition = TextInput(
            rect=pygame.Rect(560, y, 380, 36), text=d.definition, placeholder="Definition", max_len=160
        )
        self.example = TextInput(
            rect=pygame.Rect(40, y + 42, 900, 36), text=d.example, placeholder="Example sentence", max_len=200
        )
        self.remove = Button(rect=pygame.Rect(950, y, 40, 36), text="x", on_click=lambda: None)

    def inputs(self) -> list[TextInput]:
        return [self.word, self.pronunciation, self.definition, self.example]

    def move_to(self, y: int) -> None:
        for field in (self.word, self.pronunciation, self.definition, self.remove):
            field.rect.y = y
        self.example.rect.y = y + 42

    def draft(self) -> CardDraft:
        return CardDraft(
            word=self.word.text,
            definition=self.definition.text,
            example=self.example.text,
            pronunciation=self.pronunciation.text or None,
        )


class EditorScene(BaseScene):
    """Create a deck by hand or with the AI generator; edit an existing deck."""

    def __init__(self, ctx: AppContext, existing: Deck | None = None) -> None:
        super().__init__()
        self.ctx = ctx
        self.existing = existing
        self.mode: Mode = "manual"
        self.scroll = 0
        self._error = ""
        self._generating = 0  # frames until the request runs
        self.is_public = existing.is_public if existing is not None else False
        self.levels: list[str] = ["B1"]

        self.btn_back = Button(rect=pygame.Rect(20, 20, 110, 40), text="Cancel", on_click=self._on_cancel)
        self.btn_manual = Button(rect=pygame.Rect(150, 20, 150, 40), text="Manual", on_click=lambda: self._set_mode("manual"))
        self.btn_ai = Button(
            rect=pygame.Rect(310, 20, 150, 40), text="AI Generate", on_click=lambda: self._set_mode("ai"),
            enabled=existing is None,
        )
        self.btn_save = Button(rect=pygame.Rect(840, 20, 150, 40), text="Save Deck", on_click=self._on_save, primary=True)

        # Shared fields
        self.in_folder = TextInput(
            rect=pygame.Rect(40, 90, 300, 38), text=(existing.folder or "") if existing else "",
            placeholder="Folder (e.g. IELTS, Travel)",
        )
        self.toggle_public = Toggle(
            rect=pygame.Rect(360, 90, 260, 38), label="Public (share with community)",
            value=self.is_public, on_change=self._on_public,
        )

        # Manual mode
        self.in_title = TextInput(
            rect=pygame.Rect(40, 150, 600, 38), text=existing.title if existing else "", placeholder="Deck title"
        )
        self.in_desc = TextInput(
            rect=pygame.Rect(40, 200, 950, 38), text=existing.description if existing else "",
            placeholder="Description", max_len=200,
        )
        self.btn_add = Button(rect=pygame.Rect(40, 260, 160, 40), text="+ Add card", on_click=self._on_add_row)
        self.rows: list[CardRow] = []
        drafts = (
            [CardDraft(c.word, c.definition, c.example, c.pronunciation) for c in existing.cards]
            if existing is not None
            else [CardDraft(word="", definition="")]
        )
        for d in drafts:
            self.rows.append(CardRow(0, d))
        self._relayout_rows()

        # AI mode
        self.in_topic = TextInput(
            rect=pygame.Rect(40, 170, 600, 38), placeholder="Topic (e.g. Kitchen utensils)"
        )
        self.in_count = TextInput(rect=pygame.Rect(660, 170, 120, 38), text="10", placeholder="Count", max_len=2)
        self.level_toggles: list[Toggle] = []
        for i, level in enumerate(LEVELS):
            self.level_toggles.append(
                Toggle(
                    rect=pygame.Rect(40 + i * 110, 240, 100, 36),
                    label=level,
                    value=level in self.levels,
                    on_change=lambda v, lv=level: self._on_level(lv, v),
                )
            )
        self.btn_generate = Button(
            rect=pygame.Rect(40, 310, 260, 48), text="Generate with AI", on_click=self._on_generate, primary=True
        )

    @property
    def library(self) -> LibraryService:
        assert self.ctx.library is not None
        return self.ctx.library

    # -------- callbacks --------
    def _set_mode(self, mode: Mode) -> None:
        if mode == "ai" and self.existing is not None:
            return
        self.mode = mode
        self._error = ""

    def _on_public(self, value: bool) -> None:
        self.is_public = value

    def _on_level(self, level: str, value: bool) -> None:
        if value and level not in self.levels:
            self.levels.append(level)
        elif not value and level in self.levels:
            self.levels.remove(level)

    def _on_cancel(self) -> None:
        from .library import LibraryScene

        self._go(LibraryScene(self.ctx))

    def _on_add_row(self) -> None:
        self.rows.append(CardRow(0))
        self._relayout_rows()

    def _remove_row(self, row: CardRow) -> None:
        if row in self.rows:
            self.rows.remove(row)
            self._relayout_rows()

    def _relayout_rows(self) -> None:
        for i, row in enumerate(self.rows):
            row.move_to(ROWS_TOP + i * ROW_H - self.scroll)
            row.remove.on_click = lambda r=row: self._remove_row(r)

    def _finish(self, deck: Deck, event: str) -> None:
        try:
            self.library.save_deck(deck)
        except (LibraryError, ContentError) as e:
            self._error = str(e).splitlines()[0]
            return
        self.ctx.telemetry.log(event, {"deck_id": deck.id, "cards": len(deck.cards), "public": deck.is_public})
        from .library import LibraryScene

        self._go(LibraryScene(self.ctx))

    def _on_save(self) -> None:
        if self.mode == "ai":
            self._on_generate()
            return
        try:
            deck = self.library.build_deck(
                title=self.in_title.text,
                description=self.in_desc.text,
                folder=self.in_folder.text,
                is_public=self.is_public,
                drafts=[r.draft() for r in self.rows],
                existing=self.existing,
            )
        except LibraryError as e:
            self._error = str(e)
            return
        self._finish(deck, "deck_updated" if self.existing is not None else "deck_created")

    def _on_generate(self) -> None:
        if not self.in_topic.text.strip():
            self._error = "Please enter a topic."
            return
        if not self.levels:
            self._error = "Please select at least one proficiency level."
            return
        self._error = ""
        # Defer a frame so "Generating..." is drawn before the blocking call
        self._generating = 2

    def _run_generation(self) -> None:
        try:
            count = int(self.in_count.text or "0")
        except ValueError:
            self._error = "Number of words must be a number."
            return
        try:
            params = GenerationParams.from_levels(self.in_topic.text, count, [lv for lv in LEVELS if lv in self.levels])
            generated = self.ctx.generator().generate(params)
            deck = self.library.deck_from_generated(generated, folder=self.in_folder.text, is_public=self.is_public)
        except (GenerationError, LibraryError) as e:
            self.ctx.telemetry.log("generation_failed", {"topic": self.in_topic.text, "error": str(e)})
            self._error = "Failed to generate deck. Please check your connection or try a different topic."
            return
        self._finish(deck, "deck_generated")

    # -------- scene protocol --------
    def _inputs(self) -> list[TextInput]:
        if self.mode == "ai":
            return [self.in_folder, self.in_topic, self.in_count]
        fields = [self.in_folder, self.in_title, self.in_desc]
        for r in self.rows:
            fields.extend(r.inputs())
        return fields

    def handle_event(self, event: pygame.event.Event) -> None:
        if self._generating:
            return
        if event.type == pygame.KEYDOWN and event.key == pygame.K_TAB:
            focus_next(self._inputs())
            return
        if event.type == pygame.MOUSEWHEEL and self.mode == "manual":
            max_scroll = max(0, ROWS_TOP + len(self.rows) * ROW_H - 700)
            self.scroll = min(max_scroll, max(0, self.scroll - event.y * 40))
            self._relayout_rows()
            return
        for b in (self.btn_back, self.btn_manual, self.btn_ai, self.btn_save):
            if b.handle_event(event):
                return
        if self.toggle_public.handle_event(event):
            return
        if self.mode == "manual":
            if self.btn_add.handle_event(event):
                return
            for r in list(self.rows):
                if r.remove.rect.top >= ROWS_TOP - 10 and r.remove.handle_event(event):
                    return
        else:
            if self.btn_generate.handle_event(event):
                return
            for t in self.level_toggles:
                if t.handle_event(event):
                    return
        for field in self._inputs():
            field.handle_event(event)

    def update(self, dt: float) -> SceneTransition | None:
        if self._generating > 0 and self._next is None:
            self._generating -= 1
            if self._generating == 0:
                self._run_generation()
        return self._next

    def render(self, screen: pygame.Surface) -> None:
        screen.fill(PAPER)
        fonts = self.ctx.fonts
        self.btn_manual.primary = self.mode == "manual"
        self.btn_ai.primary = self.mode == "ai"
        for b in (self.btn_back, self.btn_manual, self.btn_ai, self.btn_save):
            b.draw(screen, fonts.ui)
        self.in_folder.draw(screen, fonts.ui)
        self.toggle_public.draw(screen, fonts.ui)

        if self.mode == "manual":
            self.in_title.draw(screen, fonts.ui)
            self.in_desc.draw(screen, fonts.ui)
            self.btn_add.draw(screen, fonts.ui)
            draw_text(screen, fonts.small, f"{len(self.rows)} cards", (220, 272), color=MUTED)
            clip = screen.get_clip()
            screen.set_clip(pygame.Rect(0, ROWS_TOP - 10, screen.get_width(), screen.get_height() - ROWS_TOP - 30))
            for r in self.rows:
                for field in r.inputs():
                    field.draw(screen, fonts.small)
                r.remove.draw(screen, fonts.ui)
            screen.set_clip(clip)
        else:
            draw_text(screen, fonts.ui, "What should the deck be about?", (40, 140), color=MUTED)
            self.in_topic.draw(screen, fonts.ui)
            self.in_count.draw(screen, fonts.ui)
            draw_text(screen, fonts.small, "Proficiency level", (40, 220), color=MUTED)
            for t in self.level_toggles:
                t.draw(screen, fonts.ui)
            self.btn_generate.enabled = self._generating == 0
            self.btn_generate.draw(screen, fonts.ui)
            if self._generating > 0:
                draw_text(screen, fonts.ui, "Generating...", (320, 322), color=MUTED)

        if self._error:
            draw_text(screen, fonts.ui, self._error, (40, screen.get_height() - 30), color=DANGER)
