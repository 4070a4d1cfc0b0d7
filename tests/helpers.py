from __future__ import annotations

from typing import Sequence

from tilepuzzle.engines.grid_match import EMPTY, Board


def parse_board(rows: Sequence[str]) -> Board:
    """Build a board from strings such as ``"AB.C"``; ``.`` marks an empty cell."""
    return tuple(tuple(EMPTY if ch == '.' else ch for ch in row) for row in rows)


def has_run(board: Board, length: int = 3) -> bool:
    rows = len(board)
    cols = len(board[0]) if rows else 0
    lines = [list(row) for row in board]
    lines += [[board[r][c] for r in range(rows)] for c in range(cols)]
    for line in lines:
        run = 1
        for idx in range(1, len(line)):
            if line[idx] is not EMPTY and line[idx] == line[idx - 1]:
                run += 1
                if run >= length:
                    return True
            else:
                run = 1
    return False


def has_floating_gap(board: Board) -> bool:
    """True when a tile hangs over an empty cell somewhere below it in the same column."""
    rows = len(board)
    cols = len(board[0]) if rows else 0
    for c in range(cols):
        seen_empty = False
        for r in range(rows - 1, -1, -1):
            if board[r][c] is EMPTY:
                seen_empty = True
            elif seen_empty:
                return True
    return False
