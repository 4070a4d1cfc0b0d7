"""Seeded pseudo-random helpers shared by the puzzle engines.

Any object exposing ``random() -> float`` in ``[0, 1)`` works as a source, so a
``random.Random`` instance can be passed wherever a ``Mulberry32`` is accepted.
"""
from __future__ import annotations

import math
import time
from typing import MutableSequence, Protocol, TypeVar

T = TypeVar("T")

_MASK_32 = 0xFFFFFFFF
_GOLDEN_STEP = 0x6D2B79F5


class RandomSource(Protocol):
    def random(self) -> float: ...


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK_32


class Mulberry32:
    """Small 32-bit generator with identical output on every platform for a given seed."""

    __slots__ = ("_state",)

    def __init__(self, seed: int) -> None:
        self._state = (int(seed) + _GOLDEN_STEP) & _MASK_32

    def next_uint32(self) -> int:
        self._state = (self._state + _GOLDEN_STEP) & _MASK_32
        x = self._state
        x = _imul(x ^ (x >> 15), 1 | x)
        x = (x ^ (x + _imul(x ^ (x >> 7), 61 | x))) & _MASK_32
        return (x ^ (x >> 14)) & _MASK_32

    def random(self) -> float:
        return self.next_uint32() / 4294967296


def wall_clock_seed() -> int:
    """Millisecond timestamp used when a new layout is requested without a seed."""
    return time.time_ns() // 1_000_000


def random_int(rng: RandomSource, low: int, high: int) -> int:
    """Inclusive integer in ``[low, high]``."""
    return math.floor(rng.random() * (high - low + 1)) + low


def shuffle_in_place(items: MutableSequence[T], rng: RandomSource) -> None:
    """Fisher-Yates shuffle scanning from the end."""
    for i in range(len(items) - 1, 0, -1):
        j = math.floor(rng.random() * (i + 1))
        items[i], items[j] = items[j], items[i]
