"""Aggregate statistics for both games, stored as whole records in a key/value store.

Stored records are never trusted: anything missing or garbled falls back to a
default instead of failing the caller.
"""
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional

from tilepuzzle.constants import MATCH3_STATS_KEY, STACK_STATS_KEY
from tilepuzzle.stats.store import KeyValueStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True, slots=True)
class Match3Stats:
    best_score: int = 0
    total_cleared: int = 0
    attempts: int = 0
    last_play: Optional[str] = None


@dataclass(frozen=True, slots=True)
class StackStats:
    # Fewest moves in a finished game; None until one is recorded. Lower is better.
    best_moves: Optional[int] = None
    total_clears: int = 0
    attempts: int = 0
    last_play: Optional[str] = None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(number):
        return 0
    return int(number)


def _as_best_moves(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return int(value)


def _as_timestamp(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _raw_record(store: KeyValueStore, key: str) -> Mapping[str, Any]:
    raw = store.get(key)
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        logger.warning("Stats record %r is not an object; using defaults", key)
        return {}
    return raw


def load_match3_stats(store: KeyValueStore) -> Match3Stats:
    raw = _raw_record(store, MATCH3_STATS_KEY)
    return Match3Stats(
        best_score=_as_count(raw.get("best_score")),
        total_cleared=_as_count(raw.get("total_cleared")),
        attempts=_as_count(raw.get("attempts")),
        last_play=_as_timestamp(raw.get("last_play")),
    )


def load_stack_stats(store: KeyValueStore) -> StackStats:
    raw = _raw_record(store, STACK_STATS_KEY)
    return StackStats(
        best_moves=_as_best_moves(raw.get("best_moves")),
        total_clears=_as_count(raw.get("total_clears")),
        attempts=_as_count(raw.get("attempts")),
        last_play=_as_timestamp(raw.get("last_play")),
    )


def save_match3_stats(store: KeyValueStore, stats: Match3Stats) -> None:
    store.set(MATCH3_STATS_KEY, asdict(stats))


def save_stack_stats(store: KeyValueStore, stats: StackStats) -> None:
    store.set(STACK_STATS_KEY, asdict(stats))


def record_match3_game(store: KeyValueStore, score: int, cleared: int, *, now: Clock = utc_now) -> Match3Stats:
    current = load_match3_stats(store)
    updated = Match3Stats(
        best_score=max(current.best_score, score),
        total_cleared=current.total_cleared + cleared,
        attempts=current.attempts + 1,
        last_play=now().isoformat(),
    )
    save_match3_stats(store, updated)
    return updated


def record_stack_game(
    store: KeyValueStore,
    moves: int,
    cleared_triples: int,
    *,
    now: Clock = utc_now,
) -> StackStats:
    """Count the attempt; any finished game with at least one move can lower ``best_moves``."""
    current = load_stack_stats(store)
    best_moves = current.best_moves
    if moves > 0:
        best_moves = moves if best_moves is None else min(best_moves, moves)
    updated = StackStats(
        best_moves=best_moves,
        total_clears=current.total_clears + cleared_triples,
        attempts=current.attempts + 1,
        last_play=now().isoformat(),
    )
    save_stack_stats(store, updated)
    return updated


def _format_last_play(last_play: Optional[str]) -> str:
    if last_play is None:
        return "never"
    try:
        return datetime.fromisoformat(last_play).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return last_play


def summarize_match3(stats: Match3Stats) -> str:
    return (
        f"Best score: {stats.best_score} | Total cleared: {stats.total_cleared} | "
        f"Attempts: {stats.attempts} | Last: {_format_last_play(stats.last_play)}"
    )


def summarize_stack(stats: StackStats) -> str:
    best = "-" if stats.best_moves is None else str(stats.best_moves)
    return (
        f"Best moves: {best} | Triples cleared: {stats.total_clears} | "
        f"Attempts: {stats.attempts} | Last: {_format_last_play(stats.last_play)}"
    )
