"""Headless study engine for FlashAI: matching game, timers and flip cards.

IMPORTANT: This package must never import pygame.
"""

from .match import (
    DuplicateCardError,
    EmptyDeckError,
    MatchConfig,
    RoundState,
    StepResult,
    new_round,
    select_tile,
    tile_status,
)
from .session import MatchSession
from .study import CardViewer
from .timers import ScheduledTask, TaskScheduler
from .types import Card, Deck, Tile, TileKind, TileStatus

__all__ = [
    "Card",
    "CardViewer",
    "Deck",
    "DuplicateCardError",
    "EmptyDeckError",
    "MatchConfig",
    "MatchSession",
    "RoundState",
    "ScheduledTask",
    "StepResult",
    "TaskScheduler",
    "Tile",
    "TileKind",
    "TileStatus",
    "new_round",
    "select_tile",
    "tile_status",
]
