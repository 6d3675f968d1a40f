"""
Replanning policy.

ReplanMonitor checks the active route against the latest area risk each
tick and re-runs the planner only when the route crosses an area whose
risk exceeds the threshold.

State machine:
- STABLE: the current route is unaffected; ``evaluate`` returns it as-is
  (same object, so callers can detect "no change" with ``is``)
- REPLANNING: a new search was triggered. Success returns to STABLE; a
  failed search leaves the monitor in REPLANNING so the next tick retries
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from .environment import RiskSnapshot
from .exceptions import RouteNotFoundError
from .logging_utils import log_error, log_hazard, log_success
from .pathfinder import PathFinder
from .schemas import Route


DEFAULT_HAZARD_THRESHOLD = 0.8


class ReplanState(Enum):
    STABLE = "stable"
    REPLANNING = "replanning"


class ReplanMonitor:
    """Decides per tick whether the active route must be replaced."""

    def __init__(self, pathfinder: PathFinder, threshold: float = DEFAULT_HAZARD_THRESHOLD):
        if not 0.0 <= threshold <= 1.0:
            raise ValueError("threshold must lie in [0, 1]")
        self.pathfinder = pathfinder
        self.threshold = threshold
        self.state = ReplanState.STABLE
        self.last_reason: str = "initial"
        self.replan_count = 0

    @property
    def safe_route_available(self) -> bool:
        return self.state is ReplanState.STABLE

    def hazardous_areas(self, route: Route, snapshot: RiskSnapshot) -> List[int]:
        """Distinct areas along ``route`` whose risk exceeds the threshold, in route order."""
        flagged: List[int] = []
        for area_id in route.area_ids:
            if area_id not in flagged and snapshot.risk_of_area(area_id) > self.threshold:
                flagged.append(area_id)
        return flagged

    def evaluate(
        self,
        route: Optional[Route],
        current_area: int,
        snapshot: Optional[RiskSnapshot] = None,
    ) -> Optional[Route]:
        """Return the route to follow from ``current_area``.

        Returns ``route`` itself when no replan is needed, a new Route after a
        successful replan, or ``None`` when no safe route exists.
        """
        snapshot = snapshot or self.pathfinder.graph.snapshot()

        if route is not None and self.state is ReplanState.STABLE:
            flagged = self.hazardous_areas(route, snapshot)
            if not flagged:
                self.last_reason = "route unaffected"
                return route
            self.last_reason = f"hazard above {self.threshold:.2f} in area(s) {flagged}"
            log_hazard(f"[Replan] Route crosses hazardous area(s) {flagged}; replanning")
        elif route is None and self.state is ReplanState.STABLE:
            self.last_reason = "no active route"
        else:
            self.last_reason = "retrying after failed replan"

        self.state = ReplanState.REPLANNING
        self.replan_count += 1
        try:
            exit_area = self.pathfinder.find_nearest_exit(current_area)
            new_route = self.pathfinder.find_path(current_area, exit_area)
        except RouteNotFoundError as exc:
            log_error(f"[Replan] No safe route from area {current_area}: {exc.reason}")
            self.last_reason = f"no safe route: {exc.reason}"
            return None

        self.state = ReplanState.STABLE
        log_success(
            f"[Replan] New route to exit area {exit_area}: {new_route.node_ids} "
            f"(cost {self.pathfinder.route_cost(new_route, snapshot):.1f})"
        )
        return new_route
