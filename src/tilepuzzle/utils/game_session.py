from __future__ import annotations

from typing import Tuple

import esper

from tilepuzzle.components.game_session import GameKind, GameSession


def find_session(kind: GameKind) -> Tuple[int, GameSession] | None:
    """Return the (entity, session) pair for ``kind`` in the current world, if one exists."""
    for entity, session in esper.get_component(GameSession):
        if session.kind is kind:
            return entity, session
    return None


def session_entity(kind: GameKind) -> int:
    found = find_session(kind)
    if found is None:
        return esper.create_entity()
    return found[0]
