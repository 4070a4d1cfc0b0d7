"""Grid match-3 engine: bag-fed board, adjacent swaps, cascading clears.

Every function is pure. Boards and bags are tuples; each call returns fresh
snapshots and never mutates its arguments. Row 0 is the top of the board and
gravity pulls tiles towards the last row.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Sequence, Set, Tuple, Union

from tilepuzzle.utils.seeded_rng import Mulberry32, RandomSource, shuffle_in_place

DEFAULT_BAG_MULTIPLIER = 3
MIN_RUN = 3


class Empty(Enum):
    """Marker for a cell without a tile."""

    CELL = auto()

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = Empty.CELL

Cell = Union[str, Empty]
Row = Tuple[Cell, ...]
Board = Tuple[Row, ...]
Bag = Tuple[str, ...]
Position = Tuple[int, int]


class SwapRejection(Enum):
    NOT_ADJACENT = "not_adjacent"
    NO_MATCH = "no_match"


@dataclass(frozen=True, slots=True)
class GridOptions:
    rows: int
    cols: int
    tile_set: Tuple[str, ...]
    bag_multiplier: int = DEFAULT_BAG_MULTIPLIER

    def __post_init__(self) -> None:
        if self.rows <= 0 or self.cols <= 0:
            raise ValueError(f"board dimensions must be positive, got {self.rows}x{self.cols}")
        if not self.tile_set:
            raise ValueError("tile_set must contain at least one symbol")
        if self.bag_multiplier < 0:
            raise ValueError("bag_multiplier must not be negative")
        object.__setattr__(self, "tile_set", tuple(self.tile_set))

    @property
    def bag_size(self) -> int:
        return self.rows * self.cols * self.bag_multiplier


@dataclass(frozen=True, slots=True)
class GridState:
    board: Board
    bag: Bag


@dataclass(frozen=True, slots=True)
class SwapResult:
    board: Board
    bag: Bag
    cleared: int
    valid: bool
    reason: Optional[SwapRejection] = None
    rounds: int = 0


@dataclass(frozen=True, slots=True)
class Resolution:
    board: Board
    bag: Bag
    cleared: int
    rounds: int


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------

def build_tile_bag(size: int, tile_set: Sequence[str], rng: RandomSource) -> Bag:
    """Cycle through tile_set until size tiles exist, then shuffle them."""
    bag = [tile_set[i % len(tile_set)] for i in range(size)]
    shuffle_in_place(bag, rng)
    return tuple(bag)


def fill_board(rows: int, cols: int, bag: Bag) -> Tuple[Board, Bag]:
    """Fill row-major by drawing from the end of the bag; cells stay EMPTY once it runs dry."""
    remaining = list(bag)
    board: List[Row] = []
    for _ in range(rows):
        board.append(tuple(_draw(remaining) for _ in range(cols)))
    return tuple(board), tuple(remaining)


def create_grid(
    options: GridOptions,
    *,
    seed: int | None = None,
    rng: RandomSource | None = None,
) -> GridState:
    """Build a shuffled bag of ``rows*cols*bag_multiplier`` tiles and deal the board from it.

    ``rng`` wins over ``seed``. With neither, a private ``random.Random`` is used so
    the module never touches the global generator.
    """
    if rng is None:
        rng = Mulberry32(seed) if seed is not None else random.Random()
    bag = build_tile_bag(options.bag_size, options.tile_set, rng)
    board, bag = fill_board(options.rows, options.cols, bag)
    return GridState(board=board, bag=bag)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def board_dimensions(board: Board) -> Tuple[int, int]:
    rows = len(board)
    cols = len(board[0]) if rows else 0
    return rows, cols


def are_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return abs(ar - br) + abs(ac - bc) == 1


def has_any_tiles(board: Board) -> bool:
    return any(cell is not EMPTY for row in board for cell in row)


def is_cleared(board: Board, bag: Bag) -> bool:
    """Win by exhaustion: nothing on the board and nothing left to draw."""
    return not bag and not has_any_tiles(board)


def count_tiles(board: Board) -> int:
    return sum(1 for row in board for cell in row if cell is not EMPTY)


def find_matches(board: Board) -> List[Position]:
    """Positions of every horizontal or vertical run of length >= 3, deduplicated, row-major."""
    rows, cols = board_dimensions(board)
    matched: Set[Position] = set()
    for r in range(rows):
        matched.update(_runs_in_line(board[r], lambda c, r=r: (r, c)))
    for c in range(cols):
        column = tuple(board[r][c] for r in range(rows))
        matched.update(_runs_in_line(column, lambda r, c=c: (r, c)))
    return sorted(matched)


def _runs_in_line(line: Sequence[Cell], to_position) -> List[Position]:
    found: List[Position] = []
    run_start = 0
    for idx in range(1, len(line) + 1):
        if idx < len(line) and line[idx] is not EMPTY and line[idx] == line[run_start]:
            continue
        if line[run_start] is not EMPTY and idx - run_start >= MIN_RUN:
            found.extend(to_position(i) for i in range(run_start, idx))
        run_start = idx
    return found


def find_valid_swaps(board: Board) -> List[Tuple[Position, Position]]:
    """Enumerate adjacent swaps (right and down neighbours) that would clear at least one run."""
    rows, cols = board_dimensions(board)
    swaps: List[Tuple[Position, Position]] = []
    for r in range(rows):
        for c in range(cols):
            if board[r][c] is EMPTY:
                continue
            for dst in ((r, c + 1), (r + 1, c)):
                dr, dc = dst
                if dr >= rows or dc >= cols or board[dr][dc] is EMPTY:
                    continue
                if board[dr][dc] == board[r][c]:
                    continue
                if find_matches(swap_cells(board, (r, c), dst)):
                    swaps.append(((r, c), dst))
    return swaps


# ---------------------------------------------------------------------------
# Transformations
# ---------------------------------------------------------------------------

def swap_cells(board: Board, a: Position, b: Position) -> Board:
    grid = [list(row) for row in board]
    (ar, ac), (br, bc) = a, b
    grid[ar][ac], grid[br][bc] = grid[br][bc], grid[ar][ac]
    return tuple(tuple(row) for row in grid)


def clear_positions(board: Board, positions: Sequence[Position]) -> Board:
    grid = [list(row) for row in board]
    for r, c in positions:
        grid[r][c] = EMPTY
    return tuple(tuple(row) for row in grid)


def collapse_board(board: Board, bag: Bag) -> Tuple[Board, Bag]:
    """Compact every column downward, then top up exposed cells from the end of the bag."""
    rows, cols = board_dimensions(board)
    grid = [list(row) for row in board]
    remaining = list(bag)
    for c in range(cols):
        # Bottom-up so the draw order fills the lowest gap first.
        column = [grid[r][c] for r in range(rows - 1, -1, -1) if grid[r][c] is not EMPTY]
        while len(column) < rows:
            column.append(_draw(remaining))
        for offset, cell in enumerate(column):
            grid[rows - 1 - offset][c] = cell
    return tuple(tuple(row) for row in grid), tuple(remaining)


def resolve_board(board: Board, bag: Bag) -> Resolution:
    """Run find -> clear -> collapse/refill until the board is stable."""
    cleared = 0
    rounds = 0
    while True:
        matches = find_matches(board)
        if not matches:
            break
        rounds += 1
        cleared += len(matches)
        board, bag = collapse_board(clear_positions(board, matches), bag)
    return Resolution(board=board, bag=bag, cleared=cleared, rounds=rounds)


def attempt_swap(board: Board, bag: Bag, a: Position, b: Position) -> SwapResult:
    """Swap two adjacent cells and resolve; a swap that clears nothing is reverted."""
    if not are_adjacent(a, b):
        return SwapResult(board=board, bag=bag, cleared=0, valid=False, reason=SwapRejection.NOT_ADJACENT)
    resolution = resolve_board(swap_cells(board, a, b), bag)
    if resolution.cleared == 0:
        return SwapResult(board=board, bag=bag, cleared=0, valid=False, reason=SwapRejection.NO_MATCH)
    return SwapResult(
        board=resolution.board,
        bag=resolution.bag,
        cleared=resolution.cleared,
        valid=True,
        rounds=resolution.rounds,
    )


def _draw(remaining: List[str]) -> Cell:
    return remaining.pop() if remaining else EMPTY
