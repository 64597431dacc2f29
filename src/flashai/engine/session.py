from __future__ import annotations

import random
from typing import Callable, Literal, Mapping

from .match import (
    MatchConfig,
    RoundState,
    StepResult,
    advance_clock,
    clear_mismatch,
    new_round,
    select_tile,
)
from .timers import ScheduledTask, TaskScheduler
from .types import Deck

Phase = Literal["idle", "playing", "won"]
EventHook = Callable[[str, Mapping[str, object]], None]


class MatchSession:
    """Owns the rounds played on one deck and the timers attached to them.

    The current round's periodic elapsed-time task and its pending
    mismatch clear are cancelled before any new round is installed, when the
    round is won (tick only) and on close. Use as a context manager to tie
    them to a block:

        with MatchSession(deck, scheduler) as session:
            session.select(tile_id)
    """

    def __init__(
        self,
        deck: Deck,
        scheduler: TaskScheduler,
        rng: random.Random | None = None,
        config: MatchConfig | None = None,
        on_event: EventHook | None = None,
        on_restart: Callable[[], None] | None = None,
    ) -> None:
        self.deck = deck
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.config = config or MatchConfig()
        self._on_event = on_event
        self._on_restart = on_restart
        self._state: RoundState | None = None
        self._tick: ScheduledTask | None = None
        self._clear: ScheduledTask | None = None
        self.rounds_started = 0

    def __enter__(self) -> "MatchSession":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @property
    def state(self) -> RoundState | None:
        return self._state

    @property
    def phase(self) -> Phase:
        if self._state is None:
            return "idle"
        return "won" if self._state.won else "playing"

    def _emit(self, event_type: str, payload: Mapping[str, object]) -> None:
        if self._on_event is not None:
            self._on_event(event_type, payload)

    def _cancel_tasks(self) -> None:
        if self._tick is not None:
            self._tick.cancel()
            self._tick = None
        if self._clear is not None:
            self._clear.cancel()
            self._clear = None

    def start(self) -> RoundState:
        # Build before tearing down so an empty deck leaves the old round alone
        state = new_round(self.deck, self.rng, self.config, now=self.scheduler.now())
        self._cancel_tasks()
        self._state = state
        self._tick = self.scheduler.call_every(
            self.config.tick_interval, lambda: advance_clock(state, self.scheduler.now())
        )
        self.rounds_started += 1
        self._emit("round_started", {"deck_id": self.deck.id, "pairs": state.num_pairs})
        return state

    def restart(self) -> RoundState:
        state = self.start()
        if self._on_restart is not None:
            self._on_restart()
        return state

    def select(self, tile_id: str) -> StepResult:
        state = self._state
        if state is None:
            return StepResult(ok=False, events=[], error="No round in progress.")
        res = select_tile(state, tile_id, now=self.scheduler.now(), config=self.config)
        for ev in res.events:
            etype = ev.get("type")
            if etype == "PAIR_MATCHED":
                self._emit("pair_matched", {"deck_id": self.deck.id, "pair_id": ev.get("pair_id")})
            elif etype == "PAIR_MISMATCHED":
                self._clear = self.scheduler.call_later(
                    self.config.mismatch_delay, lambda: self._finish_mismatch(state)
                )
                self._emit("pair_mismatched", {"deck_id": self.deck.id, "tile_ids": ev.get("tile_ids")})
            elif etype == "ROUND_WON":
                if self._tick is not None:
                    self._tick.cancel()
                    self._tick = None
                self._emit("round_won", {"deck_id": self.deck.id, "elapsed": round(state.elapsed, 3)})
        return res

    def _finish_mismatch(self, state: RoundState) -> None:
        if state is not self._state:
            return
        clear_mismatch(state)
        self._clear = None

    def close(self) -> None:
        self._cancel_tasks()
        if self._state is not None:
            self._emit("round_closed", {"deck_id": self.deck.id, "won": self._state.won})
        self._state = None
