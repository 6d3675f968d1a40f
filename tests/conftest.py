"""Shared facility fixtures."""

import pytest

from evacroute.environment import FacilityGraph


def build_square_graph() -> FacilityGraph:
    """Four rooms on a 10x10 square plus a diagonal shortcut 1 -> 3."""
    graph = FacilityGraph()
    graph.add_node(1, 101, 0.0, 0.0)
    graph.add_node(2, 102, 10.0, 0.0)
    graph.add_node(3, 103, 10.0, 10.0)
    graph.add_node(4, 104, 0.0, 10.0)
    graph.add_edge(1, 1, 2, 10.0)
    graph.add_edge(2, 2, 3, 10.0)
    graph.add_edge(3, 3, 4, 10.0)
    graph.add_edge(4, 4, 1, 10.0)
    graph.add_edge(5, 1, 3, 14.14)
    return graph


def build_diamond_graph(upper_first: bool = True) -> FacilityGraph:
    """Two equal-cost branches from area 1 to exit area 4."""
    graph = FacilityGraph()
    graph.add_node(1, 1, 0.0, 0.0)
    branches = [(2, 2, 10.0, 0.0), (3, 3, 0.0, 10.0)]
    if not upper_first:
        branches.reverse()
    for node in branches:
        graph.add_node(*node)
    graph.add_node(4, 4, 10.0, 10.0)
    graph.add_edge(1, 1, 2, 10.0)
    graph.add_edge(2, 2, 4, 10.0)
    graph.add_edge(3, 1, 3, 10.0)
    graph.add_edge(4, 3, 4, 10.0)
    graph.register_area(4, name="Exit", is_exit=True)
    return graph


@pytest.fixture
def square_graph() -> FacilityGraph:
    return build_square_graph()


@pytest.fixture
def diamond_graph() -> FacilityGraph:
    return build_diamond_graph()
