from __future__ import annotations

import logging
from typing import Optional

import esper

from tilepuzzle.components.game_session import GameKind, GameSession, GameStatus
from tilepuzzle.components.grid_snapshot import GridSnapshot
from tilepuzzle.components.move_counters import MoveCounters
from tilepuzzle.constants import (
    MATCH3_BAG_MULTIPLIER,
    MATCH3_COLS,
    MATCH3_MAX_INVALID_MOVES,
    MATCH3_MAX_MOVES,
    MATCH3_ROWS,
    MATCH3_TILE_SET,
    SCORE_PER_TILE,
)
from tilepuzzle.engines.grid_match import (
    GridOptions,
    GridState,
    Position,
    attempt_swap,
    create_grid,
    is_cleared,
)
from tilepuzzle.events.bus import (
    EventBus,
    EVENT_GAME_OVER,
    EVENT_GAME_RESTART_REQUEST,
    EVENT_GAME_STARTED,
    EVENT_MATCH_CLEARED,
    EVENT_TILE_CLICK,
    EVENT_TILE_DESELECTED,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_VALID,
)
from tilepuzzle.utils.game_session import session_entity
from tilepuzzle.utils.seeded_rng import wall_clock_seed

logger = logging.getLogger(__name__)


def default_grid_options() -> GridOptions:
    return GridOptions(
        rows=MATCH3_ROWS,
        cols=MATCH3_COLS,
        tile_set=MATCH3_TILE_SET,
        bag_multiplier=MATCH3_BAG_MULTIPLIER,
    )


class Match3SessionSystem:
    """Turns tile clicks into swaps against the grid engine and tracks the outcome.

    Rules:
      - First click selects a cell, clicking it again deselects, a different cell attempts the swap.
      - Every attempted swap is a move. A rejected swap (not adjacent, or nothing cleared) is also an
        invalid move; reaching ``max_invalid_moves`` or ``max_moves`` loses.
      - Emptying both board and bag wins.
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        options: GridOptions | None = None,
        max_invalid_moves: int = MATCH3_MAX_INVALID_MOVES,
        max_moves: int = MATCH3_MAX_MOVES,
        score_per_tile: int = SCORE_PER_TILE,
        seed: int | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.options = options or default_grid_options()
        self.max_invalid_moves = max_invalid_moves
        self.max_moves = max_moves
        self.score_per_tile = score_per_tile
        self.selected: Optional[Position] = None
        self.entity = session_entity(GameKind.MATCH3)
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_GAME_RESTART_REQUEST, self.on_restart_request)
        self.start_game(seed)

    # ------------------------------------------------------------------
    # Component access
    # ------------------------------------------------------------------

    @property
    def session(self) -> GameSession:
        return esper.component_for_entity(self.entity, GameSession)

    @property
    def counters(self) -> MoveCounters:
        return esper.component_for_entity(self.entity, MoveCounters)

    @property
    def snapshot(self) -> GridSnapshot:
        return esper.component_for_entity(self.entity, GridSnapshot)

    @property
    def state(self) -> GridState:
        return self.snapshot.state

    # ------------------------------------------------------------------
    # Game lifecycle
    # ------------------------------------------------------------------

    def start_game(self, seed: int | None = None) -> None:
        seed = wall_clock_seed() if seed is None else seed
        state = create_grid(self.options, seed=seed)
        esper.add_component(self.entity, GameSession(kind=GameKind.MATCH3, seed=seed))
        esper.add_component(self.entity, MoveCounters())
        esper.add_component(self.entity, GridSnapshot(state=state, options=self.options))
        self.selected = None
        logger.info("Match-3 game started with seed %s (%d tiles in bag)", seed, len(state.bag))
        self.event_bus.emit(EVENT_GAME_STARTED, kind=GameKind.MATCH3, seed=seed)

    def on_restart_request(self, sender, **kwargs):
        if kwargs.get('kind') is not GameKind.MATCH3:
            return
        if kwargs.get('same_layout'):
            self.start_game(self.session.seed)
        else:
            self.start_game(kwargs.get('seed'))

    def _finish(self, status: GameStatus) -> None:
        session = self.session
        session.status = status
        self.selected = None
        counters = self.counters
        logger.info("Match-3 game over: %s after %d moves, score %d", status.name, counters.moves, counters.score)
        self.event_bus.emit(EVENT_GAME_OVER, kind=GameKind.MATCH3, status=status, counters=counters)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        if self.session.is_over:
            return
        options = self.snapshot.options
        if not (0 <= row < options.rows and 0 <= col < options.cols):
            return
        pos = (row, col)
        if self.selected is None:
            self.selected = pos
            self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col)
            return
        prev = self.selected
        self.selected = None
        if prev == pos:
            self.event_bus.emit(EVENT_TILE_DESELECTED, reason='same_tile', prev_row=row, prev_col=col)
            return
        self.swap(prev, pos)

    def swap(self, src: Position, dst: Position) -> bool:
        """Attempt a swap through the engine and apply counters and terminal checks."""
        if self.session.is_over:
            return False
        snapshot = self.snapshot
        counters = self.counters
        result = attempt_swap(snapshot.state.board, snapshot.state.bag, src, dst)
        counters.moves += 1

        if not result.valid:
            counters.invalid_moves += 1
            logger.debug("Rejected swap %s -> %s (%s)", src, dst, result.reason.value if result.reason else None)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, reason=result.reason)
            if counters.invalid_moves >= self.max_invalid_moves or counters.moves >= self.max_moves:
                self._finish(GameStatus.LOSE)
            return False

        snapshot.state = GridState(board=result.board, bag=result.bag)
        counters.score += result.cleared * self.score_per_tile
        counters.cleared_tiles += result.cleared
        logger.debug("Swap %s -> %s cleared %d tiles in %d rounds", src, dst, result.cleared, result.rounds)
        self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst, cleared=result.cleared, cascades=result.rounds)
        self.event_bus.emit(
            EVENT_MATCH_CLEARED,
            cleared=result.cleared,
            score=counters.score,
            bag_remaining=len(result.bag),
        )

        if is_cleared(result.board, result.bag):
            self._finish(GameStatus.WIN)
        elif counters.moves >= self.max_moves:
            self._finish(GameStatus.LOSE)
        return True
