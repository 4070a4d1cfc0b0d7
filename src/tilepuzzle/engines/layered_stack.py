"""Layered stack engine: tiles piled at (col, row, layer) feeding a triple-clearing buffer.

A tile can be picked only while nothing with a higher layer sits on the same
(col, row). Selectability is always derived from the current columns and is
never stored on the tile.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tilepuzzle.utils.seeded_rng import (
    Mulberry32,
    RandomSource,
    random_int,
    shuffle_in_place,
    wall_clock_seed,
)

TRIPLE = 3


@dataclass(frozen=True, slots=True)
class StackTile:
    id: str
    type_name: str
    col: int
    row: int
    layer: int

    @property
    def cell(self) -> Tuple[int, int]:
        return self.col, self.row


Column = Tuple[StackTile, ...]
Columns = Tuple[Column, ...]
Buffer = Tuple[StackTile, ...]


@dataclass(frozen=True, slots=True)
class StackOptions:
    columns: int
    min_rows: int
    max_rows: int
    max_stack_height: int
    tile_set: Tuple[str, ...]
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.columns < 0:
            raise ValueError("columns must not be negative")
        if self.min_rows < 0 or self.min_rows > self.max_rows:
            raise ValueError(f"invalid row bounds [{self.min_rows}, {self.max_rows}]")
        if self.max_stack_height < 1:
            raise ValueError("max_stack_height must be at least 1")
        if not self.tile_set:
            raise ValueError("tile_set must contain at least one symbol")
        object.__setattr__(self, "tile_set", tuple(self.tile_set))


@dataclass(frozen=True, slots=True)
class TakeResult:
    ok: bool
    tile: Optional[StackTile]
    columns: Columns


@dataclass(frozen=True, slots=True)
class BufferResolution:
    buffer: Buffer
    cleared: int
    cleared_triples: int


def tile_id(col: int, row: int, layer: int, index: int) -> str:
    return f"c{col}-r{row}-l{layer}-{index}"


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------

def plan_stack_heights(
    columns: int,
    min_rows: int,
    max_rows: int,
    max_stack_height: int,
    rng: RandomSource,
) -> List[List[int]]:
    """Per column, per row stack heights; padded so the total is a multiple of three."""
    plans: List[List[int]] = []
    for _ in range(columns):
        rows = random_int(rng, min_rows, max_rows)
        plans.append([random_int(rng, 1, max_stack_height) for _ in range(rows)])
    total = sum(sum(heights) for heights in plans)
    remainder = total % TRIPLE
    if remainder and plans:
        extra = TRIPLE - remainder
        last = plans[-1]
        if last:
            last[-1] += extra
        else:
            last.append(extra)
    return plans


def build_tile_pool(total: int, tile_set: Sequence[str], rng: RandomSource) -> List[str]:
    pool = [tile_set[i % len(tile_set)] for i in range(total)]
    shuffle_in_place(pool, rng)
    return pool


def generate(
    columns: int,
    min_rows: int,
    max_rows: int,
    max_stack_height: int,
    tile_set: Sequence[str],
    seed: int,
) -> Columns:
    """Deterministic layout for ``seed``: same inputs, same tiles, ids and types."""
    rng = Mulberry32(seed)
    plans = plan_stack_heights(columns, min_rows, max_rows, max_stack_height, rng)
    pool = build_tile_pool(sum(sum(heights) for heights in plans), tile_set, rng)
    result: List[Column] = []
    cursor = 0
    for col, heights in enumerate(plans):
        tiles: List[StackTile] = []
        for row, height in enumerate(heights):
            for layer in range(height):
                tiles.append(StackTile(
                    id=tile_id(col, row, layer, cursor),
                    type_name=pool[cursor],
                    col=col,
                    row=row,
                    layer=layer,
                ))
                cursor += 1
        # Stable sort keeps creation order within a layer.
        tiles.sort(key=lambda tile: tile.layer)
        result.append(tuple(tiles))
    return tuple(result)


def generate_columns(options: StackOptions) -> Columns:
    seed = options.seed if options.seed is not None else wall_clock_seed()
    return generate(
        options.columns,
        options.min_rows,
        options.max_rows,
        options.max_stack_height,
        options.tile_set,
        seed,
    )


# ---------------------------------------------------------------------------
# Board queries
# ---------------------------------------------------------------------------

def flatten_columns(columns: Columns) -> List[StackTile]:
    return [tile for column in columns for tile in column]


def tile_index(columns: Columns) -> Dict[str, StackTile]:
    return {tile.id: tile for tile in flatten_columns(columns)}


def count_tiles(columns: Columns) -> int:
    return sum(len(column) for column in columns)


def is_selectable(tile: StackTile, columns: Columns) -> bool:
    return not any(
        other.id != tile.id
        and other.col == tile.col
        and other.row == tile.row
        and other.layer > tile.layer
        for other in flatten_columns(columns)
    )


def selectable_tiles(columns: Columns) -> List[StackTile]:
    # Highest layer per (col, row), computed once.
    top: Dict[Tuple[int, int], int] = {}
    for tile in flatten_columns(columns):
        if tile.layer > top.get(tile.cell, tile.layer - 1):
            top[tile.cell] = tile.layer
    return [tile for tile in flatten_columns(columns) if tile.layer == top[tile.cell]]


def take_tile(columns: Columns, tile_id: str) -> TakeResult:
    target = tile_index(columns).get(tile_id)
    if target is None or not is_selectable(target, columns):
        return TakeResult(ok=False, tile=None, columns=columns)
    remaining = tuple(
        tuple(tile for tile in column if tile.id != tile_id)
        for column in columns
    )
    return TakeResult(ok=True, tile=target, columns=remaining)


def is_board_empty(columns: Columns) -> bool:
    return all(len(column) == 0 for column in columns)


# ---------------------------------------------------------------------------
# Buffer
# ---------------------------------------------------------------------------

def push_to_buffer(buffer: Buffer, tile: StackTile) -> Buffer:
    return tuple(buffer) + (tile,)


def resolve_buffer(buffer: Iterable[StackTile]) -> BufferResolution:
    """Remove the earliest complete triples of every type; partial sets stay in place."""
    entries = tuple(buffer)
    positions_by_type: Dict[str, List[int]] = {}
    for idx, entry in enumerate(entries):
        positions_by_type.setdefault(entry.type_name, []).append(idx)

    doomed = set()
    for positions in positions_by_type.values():
        usable = (len(positions) // TRIPLE) * TRIPLE
        doomed.update(positions[:usable])

    if not doomed:
        return BufferResolution(buffer=entries, cleared=0, cleared_triples=0)
    survivors = tuple(entry for idx, entry in enumerate(entries) if idx not in doomed)
    return BufferResolution(buffer=survivors, cleared=len(doomed), cleared_triples=len(doomed) // TRIPLE)


def is_buffer_fail(buffer: Sequence[StackTile], slot_limit: int) -> bool:
    return len(buffer) >= slot_limit
