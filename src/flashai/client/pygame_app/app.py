from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pygame  # type: ignore[import-not-found]

from flashai.paths import Paths
from flashai.services.content import ContentService
from flashai.services.generator import DeckGenerator, GenerationError
from flashai.services.library import LibraryService
from flashai.services.telemetry import TelemetryService

from .scene_base import Scene
from .ui import Fonts


@dataclass
class AppContext:
    screen: pygame.Surface
    clock: pygame.time.Clock
    paths: Paths
    fonts: Fonts
    content: ContentService
    telemetry: TelemetryService
    api_key: Optional[str] = None

    # Loaded at boot
    library: Optional[LibraryService] = None
    _generator: Optional[DeckGenerator] = None

    def generator(self) -> DeckGenerator:
        """Create the Gemini client on first use; raises GenerationError without a key."""
        if self._generator is None:
            if not self.api_key:
                raise GenerationError("AI generation needs an API key (--api-key or GEMINI_API_KEY).")
            self._generator = DeckGenerator(
                api_key=self.api_key,
                schema=self.content.schema("generated_deck.schema.json"),
            )
        return self._generator


class App:
    def __init__(self, ctx: AppContext, initial_scene: Scene) -> None:
        self.ctx = ctx
        self.scene: Scene = initial_scene
        self.running = True

    def run(self) -> int:
        while self.running:
            dt = self.ctx.clock.tick(60) / 1000.0
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    self.running = False
                    break
                self.scene.handle_event(event)

            tr = self.scene.update(dt)
            if tr is not None:
                self.scene.leave()
                self.scene = tr.next_scene

            self.scene.render(self.ctx.screen)
            pygame.display.flip()

        self.scene.leave()
        return 0
