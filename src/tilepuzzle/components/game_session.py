"""Per-game session state: which game, whether it is still running, and its layout seed."""
from dataclasses import dataclass
from enum import Enum, auto


class GameKind(Enum):
    MATCH3 = auto()
    STACK = auto()


class GameStatus(Enum):
    PLAYING = auto()
    WIN = auto()
    LOSE = auto()


@dataclass(slots=True)
class GameSession:
    kind: GameKind
    seed: int
    status: GameStatus = GameStatus.PLAYING

    @property
    def is_over(self) -> bool:
        return self.status is not GameStatus.PLAYING
