from dataclasses import dataclass

from tilepuzzle.engines.grid_match import GridOptions, GridState


@dataclass(slots=True)
class GridSnapshot:
    """Holds the latest immutable board/bag pair; replaced wholesale after every accepted swap."""

    state: GridState
    options: GridOptions
