"""esper world bootstrap and the wiring of the headless game shell."""
from __future__ import annotations

from dataclasses import dataclass

import esper

from tilepuzzle.constants import STATS_FILE
from tilepuzzle.events.bus import EventBus
from tilepuzzle.stats.store import JsonKeyValueStore, KeyValueStore
from tilepuzzle.systems.game_stats_system import GameStatsSystem
from tilepuzzle.systems.match3_session_system import Match3SessionSystem
from tilepuzzle.systems.stack_session_system import StackSessionSystem

DEFAULT_WORLD = "tilepuzzle"


def create_world(name: str = DEFAULT_WORLD) -> str:
    """Make ``name`` the current esper world and empty it."""
    esper.switch_world(name)
    esper.clear_database()
    return name


@dataclass(slots=True)
class GameShell:
    """Every system a front end needs to drive both games."""

    world: str
    event_bus: EventBus
    match3: Match3SessionSystem
    stack: StackSessionSystem
    stats: GameStatsSystem


def create_shell(
    event_bus: EventBus | None = None,
    *,
    store: KeyValueStore | None = None,
    world_name: str = DEFAULT_WORLD,
    match3_seed: int | None = None,
    stack_seed: int | None = None,
) -> GameShell:
    event_bus = event_bus or EventBus()
    world = create_world(world_name)
    # Stats first so it is subscribed before any game can end.
    stats = GameStatsSystem(event_bus, store=store or JsonKeyValueStore(STATS_FILE))
    match3 = Match3SessionSystem(event_bus, seed=match3_seed)
    stack = StackSessionSystem(event_bus, seed=stack_seed)
    return GameShell(world=world, event_bus=event_bus, match3=match3, stack=stack, stats=stats)
