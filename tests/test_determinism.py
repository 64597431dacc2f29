from __future__ import annotations

import random

from flashai.engine.match import clear_mismatch, new_round, select_tile
from flashai.engine.serialize import snapshot
from flashai.engine.types import Card, Deck
from flashai.paths import get_paths
from flashai.services.content import ContentService


def _deck(n: int) -> Deck:
    cards = tuple(Card(id=f"c{i}", word=f"w{i}", definition=f"d{i}") for i in range(n))
    return Deck(id="deck", title="Deck", cards=cards)


def _play(deck: Deck, seed: int) -> tuple[list[dict], list[str]]:
    """Deal, then pair the first open tile with each later one until the round is won."""
    rng = random.Random(seed)
    state = new_round(deck, rng)
    clicks: list[str] = []
    snaps: list[dict] = []
    t = 0.0
    while not state.won:
        open_tiles = [tile.tile_id for tile in state.tiles if tile.pair_id not in state.matched]
        first = open_tiles[0]
        for other in open_tiles[1:]:
            for tile_id in (first, other):
                t += 0.25
                assert select_tile(state, tile_id, now=t).ok
                clicks.append(tile_id)
            snaps.append(snapshot(state))
            if not state.mismatched:
                break
            clear_mismatch(state)
    return snaps, clicks


def test_same_seed_replays_identically() -> None:
    deck = _deck(8)
    snaps1, clicks1 = _play(deck, seed=424242)
    snaps2, clicks2 = _play(deck, seed=424242)
    assert clicks1 == clicks2
    assert snaps1 == snaps2
    assert snaps1[-1]["won"] is True


def test_different_rounds_sample_different_subsets() -> None:
    deck = _deck(10)
    rng = random.Random(2024)
    subsets = set()
    seen: set[str] = set()
    for _ in range(200):
        state = new_round(deck, rng)
        pairs = frozenset(t.pair_id for t in state.tiles)
        subsets.add(pairs)
        seen |= pairs
    assert len(subsets) > 1
    assert seen == {c.id for c in deck.cards}


def test_layout_does_not_keep_pairs_together() -> None:
    deck = _deck(6)
    rng = random.Random(7)
    adjacent = 0
    total = 0
    for _ in range(500):
        state = new_round(deck, rng)
        ids = [t.pair_id for t in state.tiles]
        for a, b in zip(ids, ids[1:]):
            if a == b:
                adjacent += 1
        total += state.num_pairs
    # uniform shuffle of 12 tiles puts a given pair side by side 1/6 of the time
    assert adjacent / total < 0.3


def test_sample_deck_deals_the_whole_deck() -> None:
    paths = get_paths()
    content = ContentService(paths.data_dir, paths.schema_dir)
    deck = content.load_sample_decks()[0]
    state = new_round(deck, random.Random(1))
    assert {t.pair_id for t in state.tiles} == set(deck.card_ids())
