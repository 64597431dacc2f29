from __future__ import annotations

from typing import Mapping

from .match import RoundState, tile_status
from .types import SYSTEM_USER_ID, Card, Deck, Tile


class RecordError(ValueError):
    pass


def _tile_to_dict(state: RoundState, t: Tile) -> dict[str, object]:
    return {
        "tile_id": t.tile_id,
        "content": t.content,
        "kind": t.kind,
        "pair_id": t.pair_id,
        "pronunciation": t.pronunciation,
        "status": tile_status(state, t.tile_id),
    }


def snapshot(state: RoundState) -> dict[str, object]:
    """Return a JSON-serializable snapshot of a round, as a host renders it."""
    return {
        "deck_id": state.deck_id,
        "num_pairs": state.num_pairs,
        "tiles": [_tile_to_dict(state, t) for t in state.tiles],
        "selected": list(state.selected),
        "matched": sorted(state.matched),
        "mismatched": list(state.mismatched),
        "elapsed": state.elapsed,
        "won": state.won,
    }


def card_to_dict(c: Card) -> dict[str, object]:
    d: dict[str, object] = {
        "id": c.id,
        "word": c.word,
        "definition": c.definition,
        "example": c.example,
    }
    if c.pronunciation:
        d["pronunciation"] = c.pronunciation
    return d


def deck_to_dict(deck: Deck) -> dict[str, object]:
    return {
        "id": deck.id,
        "title": deck.title,
        "description": deck.description,
        "folder": deck.folder,
        "created_at": deck.created_at,
        "icon": deck.icon,
        "user_id": deck.user_id,
        "author_name": deck.author_name,
        "is_public": deck.is_public,
        "cards": [card_to_dict(c) for c in deck.cards],
    }


def _str(d: Mapping[str, object], key: str, default: str | None = None) -> str:
    v = d.get(key, default)
    if not isinstance(v, str):
        raise RecordError(f"Expected string for {key}")
    return v


def _opt_str(d: Mapping[str, object], key: str) -> str | None:
    v = d.get(key)
    if v is None or v == "":
        return None
    if not isinstance(v, str):
        raise RecordError(f"Expected string for {key}")
    return v


def card_from_dict(d: Mapping[str, object]) -> Card:
    return Card(
        id=_str(d, "id"),
        word=_str(d, "word"),
        definition=_str(d, "definition"),
        example=_str(d, "example", ""),
        pronunciation=_opt_str(d, "pronunciation"),
    )


def deck_from_dict(d: Mapping[str, object]) -> Deck:
    raw_cards = d.get("cards", [])
    if not isinstance(raw_cards, list):
        raise RecordError("cards must be a list")
    cards = tuple(card_from_dict(c) for c in raw_cards if isinstance(c, dict))
    seen: set[str] = set()
    for c in cards:
        if c.id in seen:
            raise RecordError(f"Duplicate card id {c.id}")
        seen.add(c.id)
    created = d.get("created_at", 0)
    return Deck(
        id=_str(d, "id"),
        title=_str(d, "title"),
        description=_str(d, "description", ""),
        cards=cards,
        folder=_opt_str(d, "folder"),
        created_at=int(created) if isinstance(created, int) else 0,
        icon=_opt_str(d, "icon"),
        user_id=_str(d, "user_id", SYSTEM_USER_ID),
        author_name=_str(d, "author_name", "System"),
        is_public=bool(d.get("is_public", False)),
    )
