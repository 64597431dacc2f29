from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TileKind = Literal["word", "definition"]
TileStatus = Literal["hidden", "mismatched", "selected", "neutral"]

SYSTEM_USER_ID = "system"


@dataclass(frozen=True)
class Card:
    id: str
    word: str
    definition: str
    example: str = ""
    pronunciation: str | None = None


@dataclass(frozen=True)
class Deck:
    """A titled, ordered collection of cards plus its library metadata."""

    id: str
    title: str
    cards: tuple[Card, ...]
    description: str = ""
    folder: str | None = None
    created_at: int = 0  # epoch milliseconds
    icon: str | None = None
    user_id: str = SYSTEM_USER_ID
    author_name: str = "System"
    is_public: bool = False

    def card_ids(self) -> list[str]:
        return [c.id for c in self.cards]


@dataclass(frozen=True)
class Tile:
    tile_id: str
    content: str
    kind: TileKind
    pair_id: str
    pronunciation: str | None = None

    @staticmethod
    def word_face(card: Card) -> "Tile":
        return Tile(
            tile_id=f"{card.id}-word",
            content=card.word,
            kind="word",
            pair_id=card.id,
            pronunciation=card.pronunciation,
        )

    @staticmethod
    def definition_face(card: Card) -> "Tile":
        return Tile(tile_id=f"{card.id}-def", content=card.definition, kind="definition", pair_id=card.id)


@dataclass(frozen=True)
class CardDraft:
    """Card fields as typed into a form or returned by the generator, before an id is assigned."""

    word: str
    definition: str
    example: str = ""
    pronunciation: str | None = None

    def is_blank(self) -> bool:
        return not self.word.strip() or not self.definition.strip()

    def to_card(self, card_id: str) -> Card:
        return Card(
            id=card_id,
            word=self.word.strip(),
            definition=self.definition.strip(),
            example=self.example.strip(),
            pronunciation=(self.pronunciation or "").strip() or None,
        )
