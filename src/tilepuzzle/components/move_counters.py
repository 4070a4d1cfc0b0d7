from dataclasses import dataclass


@dataclass(slots=True)
class MoveCounters:
    """Running totals the shell shows while a game is in progress."""

    moves: int = 0
    invalid_moves: int = 0
    score: int = 0
    cleared_tiles: int = 0
    cleared_triples: int = 0

    def reset(self) -> None:
        self.moves = 0
        self.invalid_moves = 0
        self.score = 0
        self.cleared_tiles = 0
        self.cleared_triples = 0
