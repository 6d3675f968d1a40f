"""
Risk-weighted A* search over a FacilityGraph.

Edge cost is ``distance * (1 + risk_weight * risk)``; the heuristic is the
Euclidean distance between node coordinates. The heuristic is admissible
whenever corridor lengths are at least the straight-line distance between
their endpoints, since risk only ever increases cost.

Tie-breaking: the open set is a heap keyed ``(f, node_index)`` where
``node_index`` is the node's insertion position in the graph. Among equal
``f`` values the earliest-inserted node is expanded first, which is exactly
the order a linear scan over the node table would pick.

Each search reads one RiskSnapshot taken at entry, so a concurrent risk
update cannot change edge weights halfway through a traversal.
"""

from __future__ import annotations

import heapq
import math
import time
from typing import Callable, Dict, List, Optional

from .environment import FacilityGraph, FacilityNode, RiskSnapshot
from .exceptions import RouteNotFoundError, SearchTimeoutError
from .logging_utils import log_error, log_success
from .risk_model import DEFAULT_RISK_WEIGHT, traversal_cost
from .schemas import Route, RouteNode


def euclidean(a: FacilityNode, b: FacilityNode) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


class PathFinder:
    """A* planner producing immutable Route objects.

    Args:
        graph: Facility graph to search
        risk_weight: Hazard multiplier in the edge cost (default 10)
        max_iterations: Optional cap on node expansions per search
        deadline_seconds: Optional wall-clock budget per search
        clock: Monotonic clock used for the deadline guard (injectable for tests)
    """

    def __init__(
        self,
        graph: FacilityGraph,
        risk_weight: float = DEFAULT_RISK_WEIGHT,
        max_iterations: Optional[int] = None,
        deadline_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if risk_weight < 0:
            raise ValueError("risk_weight must be >= 0")
        self.graph = graph
        self.risk_weight = risk_weight
        self.max_iterations = max_iterations
        self.deadline_seconds = deadline_seconds
        self.clock = clock

    # ------------------------------------------------------------------
    # Exit lookup
    # ------------------------------------------------------------------

    def find_nearest_exit(self, current_area: int) -> int:
        """Return the first exit area (registration order) present in the graph.

        Despite the name this does not measure distance from ``current_area``;
        it mirrors the fielded policy of taking the first listed exit.
        """
        for area_id in self.graph.exit_areas():
            if self.graph.has_area(area_id):
                return area_id
        raise RouteNotFoundError(
            f"No exit area available from area {current_area}",
            start_area=current_area,
        )

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    def find_path(self, start_area: int, end_area: int) -> Route:
        """Lowest-cost route between the representative nodes of two areas.

        Raises:
            RouteNotFoundError: If either area is absent or no route connects them
            SearchTimeoutError: If the iteration or deadline guard trips
        """
        start = self.graph.representative_node(start_area)
        goal = self.graph.representative_node(end_area)
        if start is None or goal is None:
            log_error(f"[PathFinder] Start area {start_area} or end area {end_area} not found in map")
            raise RouteNotFoundError(
                f"Start area {start_area} or end area {end_area} not found in map",
                start_area=start_area,
                end_area=end_area,
            )

        snapshot = self.graph.snapshot()
        nodes = self.graph.nodes
        index_of: Dict[int, int] = {node.id: index for index, node in enumerate(nodes)}
        start_idx = index_of[start.id]
        goal_idx = index_of[goal.id]

        g_score: Dict[int, float] = {start_idx: 0.0}
        parent: Dict[int, int] = {}
        closed: set[int] = set()
        open_heap: List[tuple[float, int]] = [(euclidean(start, goal), start_idx)]
        # Best f currently queued per node; heap entries with a different f are stale
        queued_f: Dict[int, float] = {start_idx: open_heap[0][0]}

        started_at = self.clock()
        iterations = 0

        while open_heap:
            f, current_idx = heapq.heappop(open_heap)
            if current_idx in closed or queued_f.get(current_idx) != f:
                continue

            if current_idx == goal_idx:
                route = self._reconstruct(parent, goal_idx, snapshot, start_area, end_area)
                log_success(
                    f"[PathFinder] Route from area {start_area} to area {end_area}: "
                    f"{len(route.nodes)} nodes, distance {route.total_distance:.2f}, "
                    f"risk {route.total_risk:.2f}"
                )
                return route

            iterations += 1
            self._check_guards(iterations, started_at, start_area, end_area)

            del queued_f[current_idx]
            closed.add(current_idx)
            current = nodes[current_idx]

            for edge in self.graph.outgoing(current.id):
                neighbor_idx = index_of[edge.target]
                if neighbor_idx in closed:
                    continue
                cost = traversal_cost(edge.distance, snapshot.risk_of_edge(edge.id), self.risk_weight)
                tentative = g_score[current_idx] + cost
                if neighbor_idx not in queued_f or tentative < g_score[neighbor_idx]:
                    parent[neighbor_idx] = current_idx
                    g_score[neighbor_idx] = tentative
                    neighbor_f = tentative + euclidean(nodes[neighbor_idx], goal)
                    queued_f[neighbor_idx] = neighbor_f
                    heapq.heappush(open_heap, (neighbor_f, neighbor_idx))

        log_error(f"[PathFinder] No path found from area {start_area} to area {end_area}")
        raise RouteNotFoundError(
            f"No path found from area {start_area} to area {end_area}",
            start_area=start_area,
            end_area=end_area,
        )

    def _check_guards(self, iterations: int, started_at: float, start_area: int, end_area: int) -> None:
        if self.max_iterations is not None and iterations > self.max_iterations:
            log_error(f"[PathFinder] Search exceeded {self.max_iterations} iterations")
            raise SearchTimeoutError(
                f"Search from area {start_area} to area {end_area} exceeded "
                f"{self.max_iterations} iterations",
                start_area=start_area,
                end_area=end_area,
                iterations=iterations,
            )
        if self.deadline_seconds is not None and self.clock() - started_at > self.deadline_seconds:
            log_error(f"[PathFinder] Search exceeded {self.deadline_seconds}s deadline")
            raise SearchTimeoutError(
                f"Search from area {start_area} to area {end_area} exceeded "
                f"{self.deadline_seconds}s deadline",
                start_area=start_area,
                end_area=end_area,
                iterations=iterations,
            )

    def _reconstruct(
        self,
        parent: Dict[int, int],
        goal_idx: int,
        snapshot: RiskSnapshot,
        start_area: int,
        end_area: int,
    ) -> Route:
        nodes = self.graph.nodes
        chain = [goal_idx]
        while chain[-1] in parent:
            chain.append(parent[chain[-1]])
        chain.reverse()

        route_nodes = tuple(
            RouteNode(id=nodes[i].id, area_id=nodes[i].area_id, x=nodes[i].x, y=nodes[i].y)
            for i in chain
        )

        total_distance = 0.0
        total_risk = 0.0
        for prev, curr in zip(route_nodes, route_nodes[1:]):
            edge = self.graph.edge_between(prev.id, curr.id)
            if edge is not None:
                total_distance += edge.distance
                total_risk += snapshot.risk_of_edge(edge.id)

        return Route(
            nodes=route_nodes,
            total_distance=total_distance,
            total_risk=total_risk,
            start_area=start_area,
            end_area=end_area,
            risk_version=snapshot.version,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def route_cost(self, route: Route, snapshot: Optional[RiskSnapshot] = None) -> float:
        """Risk-weighted cost of ``route`` under ``snapshot`` (default: current risk).

        Consecutive pairs without a matching directed edge make the cost infinite.
        """
        snapshot = snapshot or self.graph.snapshot()
        total = 0.0
        for prev, curr in zip(route.nodes, route.nodes[1:]):
            edge = self.graph.edge_between(prev.id, curr.id)
            if edge is None:
                return math.inf
            total += traversal_cost(edge.distance, snapshot.risk_of_edge(edge.id), self.risk_weight)
        return total

