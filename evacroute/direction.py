"""Single-glyph direction hint for minimal displays.

The first route segment is reduced to one of four cardinal directions.
Coordinates are screen-style: ``x`` grows east, ``y`` grows south.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .schemas import Route


NO_ROUTE_TEXT = "NO PATH"


class Cardinal(Enum):
    """Cardinal direction with its display glyph."""

    EAST = ">"
    NORTH = "^"
    WEST = "<"
    SOUTH = "v"
    INVALID = "?"

    @property
    def glyph(self) -> str:
        return self.value


def direction_of(route: Optional[Route], position: int = 0) -> Cardinal:
    """Direction of travel along the route segment leaving node ``position``.

    ``position`` defaults to the first node. Horizontal wins only when
    ``|dx| > |dy|``; equal magnitudes fall to the vertical branch. Fewer than
    two nodes from ``position`` onward yield ``INVALID``.
    """
    if route is None or position < 0 or len(route.nodes) - position < 2:
        return Cardinal.INVALID

    first, second = route.nodes[position], route.nodes[position + 1]
    dx = second.x - first.x
    dy = second.y - first.y

    if abs(dx) > abs(dy):
        return Cardinal.EAST if dx > 0 else Cardinal.WEST
    return Cardinal.SOUTH if dy > 0 else Cardinal.NORTH


def render_hint(route: Optional[Route], position: int = 0) -> str:
    """Text for the glyph display: an arrow, ``?``, or ``NO PATH``."""
    if route is None:
        return NO_ROUTE_TEXT
    return direction_of(route, position).glyph
