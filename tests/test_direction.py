"""Tests for the direction hint reduction."""

import pytest

from evacroute.direction import NO_ROUTE_TEXT, Cardinal, direction_of, render_hint
from evacroute.schemas import Route, RouteNode


def _route(*points):
    return Route(
        nodes=tuple(
            RouteNode(id=index, area_id=index, x=x, y=y)
            for index, (x, y) in enumerate(points, start=1)
        )
    )


@pytest.mark.parametrize(
    "target, expected",
    [
        ((10, 0), Cardinal.EAST),
        ((-10, 2), Cardinal.WEST),
        ((1, 10), Cardinal.SOUTH),
        ((-1, -10), Cardinal.NORTH),
        ((5, 5), Cardinal.SOUTH),
        ((5, -5), Cardinal.NORTH),
    ],
)
def test_first_segment_direction(target, expected):
    assert direction_of(_route((0, 0), target, (100, 100))) is expected


def test_glyphs():
    assert [c.glyph for c in Cardinal] == [">", "^", "<", "v", "?"]


def test_short_route_is_invalid():
    assert direction_of(_route((3, 3))) is Cardinal.INVALID
    assert direction_of(Route()) is Cardinal.INVALID
    assert render_hint(_route((3, 3))) == "?"


def test_missing_route_renders_no_path():
    assert direction_of(None) is Cardinal.INVALID
    assert render_hint(None) == NO_ROUTE_TEXT == "NO PATH"
    assert render_hint(_route((0, 0), (0, -4))) == "^"


def test_direction_from_a_later_position():
    route = _route((0, 0), (10, 0), (10, 10))

    assert direction_of(route, 1) is Cardinal.SOUTH
    assert render_hint(route, 1) == "v"
    assert direction_of(route, 2) is Cardinal.INVALID
    assert render_hint(route, 2) == "?"
