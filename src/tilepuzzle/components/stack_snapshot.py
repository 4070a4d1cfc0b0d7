from dataclasses import dataclass, field

from tilepuzzle.engines.layered_stack import Buffer, Columns


@dataclass(slots=True)
class StackSnapshot:
    """Current columns and holding buffer of a stack game."""

    columns: Columns
    slot_limit: int
    buffer: Buffer = field(default_factory=tuple)
