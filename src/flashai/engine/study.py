from __future__ import annotations

from collections.abc import Sequence

from .types import Card


class CardViewer:
    """Flip-card study state: one card at a time, front (word) or back."""

    def __init__(self, cards: Sequence[Card]) -> None:
        if not cards:
            raise ValueError("Nothing to study: deck has no cards.")
        self.cards = list(cards)
        self.index = 0
        self.flipped = False

    @property
    def current(self) -> Card:
        return self.cards[self.index]

    @property
    def progress(self) -> float:
        return (self.index + 1) / len(self.cards) * 100.0

    @property
    def is_finished(self) -> bool:
        return self.index == len(self.cards) - 1

    def flip(self) -> None:
        self.flipped = not self.flipped

    def _go(self, index: int) -> bool:
        if index < 0 or index >= len(self.cards) or index == self.index:
            return False
        self.index = index
        self.flipped = False
        return True

    def next(self) -> bool:
        return self._go(self.index + 1)

    def prev(self) -> bool:
        return self._go(self.index - 1)

    def reset(self) -> None:
        self.index = 0
        self.flipped = False
