"""Metadata modes controlling how much of a subject's neighbourhood is returned.

A mode is either one of the names below or a ``D_N_X_A`` descriptor:

- ``D`` descendant depth: subjects pointing at the match through the parent
  property, ``0`` none, ``n`` levels, ``-1`` unbounded
- ``N`` reserved, must be ``0``
- ``X`` ``1`` excludes the matched subject's own statements
- ``A`` ancestor depth: subjects the match points at through the parent
  property, same values as ``D``

Missing trailing slots default to ``0``, so ``"0_0_0_-1"`` equals ``parents``
and ``""`` equals ``resource``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.exceptions import MalformedRequestError

UNBOUNDED = -1

META_NONE = "none"
META_IDS = "ids"
META_RESOURCE = "resource"
META_PARENTS = "parents"
META_PARENTS_ONLY = "parentsOnly"
META_CHILDREN = "children"
META_CHILDREN_ONLY = "childrenOnly"
META_RELATIVES = "relatives"
META_RELATIVES_ONLY = "relativesOnly"


class Direction(Enum):
    """Direction in which a relation property is followed."""

    UP = "up"  # subject -> object (towards ancestors)
    DOWN = "down"  # object -> subject (towards descendants)


@dataclass(frozen=True)
class MetadataMode:
    """Parsed metadata mode."""

    descendants: int = 0
    ancestors: int = 0
    include_self: bool = True
    labels_only: bool = False
    include_statements: bool = True

    @property
    def traversals(self) -> list[tuple[Direction, int]]:
        """Non-empty traversals as (direction, depth) pairs."""
        result = []
        if self.ancestors:
            result.append((Direction.UP, self.ancestors))
        if self.descendants:
            result.append((Direction.DOWN, self.descendants))
        return result

    @classmethod
    def parse(cls, mode: Optional[str]) -> "MetadataMode":
        """Parse a mode name or descriptor.

        Raises:
            MalformedRequestError: If the mode is unknown or the descriptor invalid.
        """
        if mode is None or mode == "":
            return cls()
        if mode in _NAMED:
            return _NAMED[mode]

        slots = mode.split("_")
        if len(slots) > 4:
            raise MalformedRequestError(f"Bad metadata mode {mode}")
        try:
            values = [int(s) for s in slots]
        except ValueError:
            raise MalformedRequestError(f"Bad metadata mode {mode}") from None
        values += [0] * (4 - len(values))
        descendants, reserved, exclude_self, ancestors = values
        if reserved != 0 or exclude_self not in (0, 1) or min(descendants, ancestors) < UNBOUNDED:
            raise MalformedRequestError(f"Bad metadata mode {mode}")
        return cls(descendants=descendants, ancestors=ancestors, include_self=not exclude_self)


_NAMED = {
    META_NONE: MetadataMode(include_statements=False),
    META_IDS: MetadataMode(labels_only=True),
    META_RESOURCE: MetadataMode(),
    META_PARENTS: MetadataMode(ancestors=UNBOUNDED),
    META_PARENTS_ONLY: MetadataMode(ancestors=UNBOUNDED, include_self=False),
    META_CHILDREN: MetadataMode(descendants=1),
    META_CHILDREN_ONLY: MetadataMode(descendants=1, include_self=False),
    META_RELATIVES: MetadataMode(descendants=UNBOUNDED, ancestors=UNBOUNDED),
    META_RELATIVES_ONLY: MetadataMode(
        descendants=UNBOUNDED, ancestors=UNBOUNDED, include_self=False
    ),
}
