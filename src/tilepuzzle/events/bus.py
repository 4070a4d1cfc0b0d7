from blinker import Signal
from typing import Dict

class EventBus:
    """Simple event bus leveraging blinker Signal objects."""
    def __init__(self):
        self._signals: Dict[str, Signal] = {}

    def subscribe(self, name: str, fn):
        sig = self._signals.setdefault(name, Signal(name))
        # Strong references so handlers on systems nobody else holds stay connected.
        sig.connect(fn, weak=False)

    def unsubscribe(self, name: str, fn):
        sig = self._signals.get(name)
        if sig:
            sig.disconnect(fn)

    def emit(self, name: str, **payload):
        sig = self._signals.get(name)
        if sig:
            sig.send(self, **payload)


# ============================================================================
# GRID MATCH-3
# ============================================================================
EVENT_TILE_CLICK = "tile_click"                    # payload: row, col
EVENT_TILE_SELECTED = "tile_selected"              # payload: row, col
EVENT_TILE_DESELECTED = "tile_deselected"          # payload: reason=str, prev_row, prev_col
EVENT_TILE_SWAP_VALID = "tile_swap_valid"          # payload: src=(r,c), dst=(r,c), cleared=int, cascades=int
EVENT_TILE_SWAP_INVALID = "tile_swap_invalid"      # payload: src=(r,c), dst=(r,c), reason=SwapRejection
EVENT_MATCH_CLEARED = "match_cleared"              # payload: cleared=int, score=int, bag_remaining=int


# ============================================================================
# LAYERED STACK
# ============================================================================
EVENT_STACK_TILE_CLICK = "stack_tile_click"            # payload: tile_id=str
EVENT_STACK_TILE_TAKEN = "stack_tile_taken"            # payload: tile=StackTile, buffer_size=int
EVENT_STACK_TILE_REJECTED = "stack_tile_rejected"      # payload: tile_id=str
EVENT_BUFFER_TRIPLES_CLEARED = "buffer_triples_cleared"  # payload: cleared=int, triples=int, types=list[str]


# ============================================================================
# GAME FLOW & STATE
# ============================================================================
EVENT_GAME_STARTED = "game_started"                # payload: kind=GameKind, seed=int
EVENT_GAME_RESTART_REQUEST = "game_restart_request"  # payload: kind=GameKind, same_layout=bool, seed=int|None
EVENT_GAME_OVER = "game_over"                      # payload: kind=GameKind, status=GameStatus, counters=MoveCounters
EVENT_STATS_UPDATED = "stats_updated"              # payload: kind=GameKind, stats=Match3Stats|StackStats
