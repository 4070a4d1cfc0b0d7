from __future__ import annotations

import logging

from tilepuzzle.components.game_session import GameKind
from tilepuzzle.events.bus import EventBus, EVENT_GAME_OVER, EVENT_STATS_UPDATED
from tilepuzzle.stats.records import (
    Clock,
    Match3Stats,
    StackStats,
    load_match3_stats,
    load_stack_stats,
    record_match3_game,
    record_stack_game,
    utc_now,
)
from tilepuzzle.stats.store import KeyValueStore

logger = logging.getLogger(__name__)


class GameStatsSystem:
    """Persists aggregate statistics whenever a game finishes."""

    def __init__(self, event_bus: EventBus, *, store: KeyValueStore, now: Clock = utc_now) -> None:
        self.event_bus = event_bus
        self.store = store
        self._now = now
        self.event_bus.subscribe(EVENT_GAME_OVER, self._on_game_over)

    def match3_stats(self) -> Match3Stats:
        return load_match3_stats(self.store)

    def stack_stats(self) -> StackStats:
        return load_stack_stats(self.store)

    def _on_game_over(self, sender, **payload) -> None:
        kind = payload.get("kind")
        counters = payload.get("counters")
        if counters is None:
            return
        if kind is GameKind.MATCH3:
            stats = record_match3_game(self.store, counters.score, counters.cleared_tiles, now=self._now)
        elif kind is GameKind.STACK:
            stats = record_stack_game(self.store, counters.moves, counters.cleared_triples, now=self._now)
        else:
            return
        logger.debug("Recorded %s stats: %s", kind.name, stats)
        self.event_bus.emit(EVENT_STATS_UPDATED, kind=kind, stats=stats)
