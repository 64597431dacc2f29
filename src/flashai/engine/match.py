from __future__ import annotations

import random
from dataclasses import dataclass, field

from .types import Deck, Tile, TileStatus

Event = dict[str, object]


class EmptyDeckError(ValueError):
    pass


class DuplicateCardError(ValueError):
    pass


@dataclass(frozen=True)
class MatchConfig:
    max_pairs: int = 6
    mismatch_delay: float = 0.8  # seconds a wrong pair stays visible
    tick_interval: float = 0.1  # seconds between elapsed-time updates


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class RoundState:
    deck_id: str
    tiles: tuple[Tile, ...]
    started_at: float = 0.0
    selected: list[str] = field(default_factory=list)
    matched: set[str] = field(default_factory=set)
    mismatched: list[str] = field(default_factory=list)
    elapsed: float = 0.0
    won: bool = False

    @property
    def num_pairs(self) -> int:
        return len(self.tiles) // 2

    def tile(self, tile_id: str) -> Tile | None:
        for t in self.tiles:
            if t.tile_id == tile_id:
                return t
        return None

    def selected_tiles(self) -> list[Tile]:
        out: list[Tile] = []
        for tid in self.selected:
            t = self.tile(tid)
            if t is not None:
                out.append(t)
        return out


def _reject(msg: str) -> StepResult:
    return StepResult(ok=False, events=[], error=msg)


def new_round(
    deck: Deck,
    rng: random.Random,
    config: MatchConfig | None = None,
    now: float = 0.0,
) -> RoundState:
    """Deal a fresh board for `deck`.

    Up to `config.max_pairs` cards are sampled without replacement, each is
    split into a word tile and a definition tile, and the tiles are shuffled
    with a second, independent permutation.
    """
    cfg = config or MatchConfig()
    num_pairs = min(len(deck.cards), cfg.max_pairs)
    if num_pairs <= 0:
        raise EmptyDeckError(f"Deck {deck.id!r} has no cards to play.")
    ids = deck.card_ids()
    if len(set(ids)) != len(ids):
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        raise DuplicateCardError(f"Deck {deck.id!r} repeats card ids: {', '.join(dupes)}")

    chosen = rng.sample(list(deck.cards), num_pairs)
    tiles: list[Tile] = []
    for card in chosen:
        tiles.append(Tile.word_face(card))
        tiles.append(Tile.definition_face(card))
    rng.shuffle(tiles)

    return RoundState(deck_id=deck.id, tiles=tuple(tiles), started_at=now)


def advance_clock(state: RoundState, now: float) -> None:
    """Bring `elapsed` up to `now`. Frozen once the round is won."""
    if state.won:
        return
    state.elapsed = max(state.elapsed, now - state.started_at)


def clear_mismatch(state: RoundState) -> None:
    state.selected = []
    state.mismatched = []


def select_tile(
    state: RoundState,
    tile_id: str,
    now: float | None = None,
    config: MatchConfig | None = None,
) -> StepResult:
    """Apply a tile click to the round.

    Mutates `state` in place. Selections that cannot apply (round over,
    unknown tile, matched pair, tile already picked, two tiles pending) are
    reported with ok=False and leave the state untouched.
    """
    cfg = config or MatchConfig()
    if state.won:
        return _reject("Round already won.")
    tile = state.tile(tile_id)
    if tile is None:
        return _reject("Unknown tile.")
    if tile.pair_id in state.matched:
        return _reject("Pair already matched.")
    if tile_id in state.selected:
        return _reject("Tile already selected.")
    if len(state.selected) >= 2:
        return _reject("Two tiles are still being compared.")

    state.selected.append(tile_id)
    events: list[Event] = [{"type": "TILE_SELECTED", "tile_id": tile_id}]
    if len(state.selected) < 2:
        return StepResult(ok=True, events=events)

    first, second = state.selected_tiles()
    if first.pair_id == second.pair_id:
        state.matched.add(first.pair_id)
        state.selected = []
        events.append({"type": "PAIR_MATCHED", "pair_id": first.pair_id, "matched": len(state.matched)})
        # elapsed freezes at the completing click
        if len(state.matched) == state.num_pairs:
            if now is not None:
                advance_clock(state, now)
            state.won = True
            events.append({"type": "ROUND_WON", "elapsed": state.elapsed})
        return StepResult(ok=True, events=events)

    state.mismatched = [first.tile_id, second.tile_id]
    events.append(
        {
            "type": "PAIR_MISMATCHED",
            "tile_ids": list(state.mismatched),
            "clear_after": cfg.mismatch_delay,
        }
    )
    return StepResult(ok=True, events=events)


def tile_status(state: RoundState, tile_id: str) -> TileStatus:
    tile = state.tile(tile_id)
    if tile is None or tile.pair_id in state.matched:
        return "hidden"
    if tile_id in state.mismatched:
        return "mismatched"
    if tile_id in state.selected:
        return "selected"
    return "neutral"


def remaining_pairs(state: RoundState) -> int:
    return state.num_pairs - len(state.matched)
