from __future__ import annotations

import logging

import esper

from tilepuzzle.components.game_session import GameKind, GameSession, GameStatus
from tilepuzzle.components.move_counters import MoveCounters
from tilepuzzle.components.stack_snapshot import StackSnapshot
from tilepuzzle.constants import (
    STACK_COLUMNS,
    STACK_MAX_HEIGHT,
    STACK_MAX_ROWS,
    STACK_MIN_ROWS,
    STACK_SLOT_LIMIT,
    STACK_TILE_SET,
)
from tilepuzzle.engines.layered_stack import (
    StackOptions,
    StackTile,
    generate,
    is_board_empty,
    is_buffer_fail,
    push_to_buffer,
    resolve_buffer,
    selectable_tiles,
    take_tile,
)
from tilepuzzle.events.bus import (
    EventBus,
    EVENT_BUFFER_TRIPLES_CLEARED,
    EVENT_GAME_OVER,
    EVENT_GAME_RESTART_REQUEST,
    EVENT_GAME_STARTED,
    EVENT_STACK_TILE_CLICK,
    EVENT_STACK_TILE_REJECTED,
    EVENT_STACK_TILE_TAKEN,
)
from tilepuzzle.utils.game_session import session_entity
from tilepuzzle.utils.seeded_rng import wall_clock_seed

logger = logging.getLogger(__name__)


def default_stack_options() -> StackOptions:
    return StackOptions(
        columns=STACK_COLUMNS,
        min_rows=STACK_MIN_ROWS,
        max_rows=STACK_MAX_ROWS,
        max_stack_height=STACK_MAX_HEIGHT,
        tile_set=STACK_TILE_SET,
    )


class StackSessionSystem:
    """Moves clicked tiles into the holding buffer and decides win or loss.

    Logic:
      - A click on a covered or unknown tile is rejected and costs nothing.
      - An accepted tile joins the buffer, complete triples clear at once, and the move counter advances.
      - Empty columns win only with an empty buffer; otherwise a full buffer after clearing loses.
    """

    def __init__(
        self,
        event_bus: EventBus,
        *,
        options: StackOptions | None = None,
        slot_limit: int = STACK_SLOT_LIMIT,
        seed: int | None = None,
    ) -> None:
        self.event_bus = event_bus
        self.options = options or default_stack_options()
        self.slot_limit = slot_limit
        self.entity = session_entity(GameKind.STACK)
        self.event_bus.subscribe(EVENT_STACK_TILE_CLICK, self.on_tile_click)
        self.event_bus.subscribe(EVENT_GAME_RESTART_REQUEST, self.on_restart_request)
        if seed is None:
            seed = self.options.seed
        self.start_game(seed)

    @property
    def session(self) -> GameSession:
        return esper.component_for_entity(self.entity, GameSession)

    @property
    def counters(self) -> MoveCounters:
        return esper.component_for_entity(self.entity, MoveCounters)

    @property
    def snapshot(self) -> StackSnapshot:
        return esper.component_for_entity(self.entity, StackSnapshot)

    def selectable(self) -> list[StackTile]:
        return selectable_tiles(self.snapshot.columns)

    def start_game(self, seed: int | None = None) -> None:
        seed = wall_clock_seed() if seed is None else seed
        opts = self.options
        columns = generate(opts.columns, opts.min_rows, opts.max_rows, opts.max_stack_height, opts.tile_set, seed)
        esper.add_component(self.entity, GameSession(kind=GameKind.STACK, seed=seed))
        esper.add_component(self.entity, MoveCounters())
        esper.add_component(self.entity, StackSnapshot(columns=columns, slot_limit=self.slot_limit))
        logger.info("Stack game started with seed %s", seed)
        self.event_bus.emit(EVENT_GAME_STARTED, kind=GameKind.STACK, seed=seed)

    def on_restart_request(self, sender, **kwargs):
        if kwargs.get('kind') is not GameKind.STACK:
            return
        if kwargs.get('same_layout'):
            self.start_game(self.session.seed)
        else:
            self.start_game(kwargs.get('seed'))

    def on_tile_click(self, sender, **kwargs):
        tile_id = kwargs.get('tile_id')
        if tile_id is None:
            return
        self.take(tile_id)

    def take(self, tile_id: str) -> bool:
        if self.session.is_over:
            return False
        snapshot = self.snapshot
        taken = take_tile(snapshot.columns, tile_id)
        if not taken.ok:
            logger.debug("Rejected stack tile %s", tile_id)
            self.event_bus.emit(EVENT_STACK_TILE_REJECTED, tile_id=tile_id)
            return False

        resolved = resolve_buffer(push_to_buffer(snapshot.buffer, taken.tile))
        snapshot.columns = taken.columns
        snapshot.buffer = resolved.buffer
        counters = self.counters
        counters.moves += 1
        self.event_bus.emit(EVENT_STACK_TILE_TAKEN, tile=taken.tile, buffer_size=len(resolved.buffer))
        if resolved.cleared_triples:
            counters.cleared_triples += resolved.cleared_triples
            counters.cleared_tiles += resolved.cleared
            self.event_bus.emit(
                EVENT_BUFFER_TRIPLES_CLEARED,
                cleared=resolved.cleared,
                triples=resolved.cleared_triples,
                types=[taken.tile.type_name],
            )

        if is_board_empty(taken.columns):
            self._finish(GameStatus.WIN if not resolved.buffer else GameStatus.LOSE)
        elif is_buffer_fail(resolved.buffer, snapshot.slot_limit):
            self._finish(GameStatus.LOSE)
        return True

    def _finish(self, status: GameStatus) -> None:
        self.session.status = status
        counters = self.counters
        logger.info("Stack game over: %s after %d moves", status.name, counters.moves)
        self.event_bus.emit(EVENT_GAME_OVER, kind=GameKind.STACK, status=status, counters=counters)
