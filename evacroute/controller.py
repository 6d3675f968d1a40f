"""
Evacuation control loop.

Fully decoupled from sensors, displays and file I/O.
All collaborators are injected by the caller.

Each tick:
1. Read one HazardSnapshot from the injected HazardSource
2. Publish edge/area risk derived from it (RiskModel)
3. Let the ReplanMonitor keep or replace the active route
4. Reduce the route to a direction glyph
5. Evaluate the alert thresholds
6. Hand a GuidanceUpdate to every listener (display, alert, telemetry)
"""

import asyncio
from typing import Awaitable, Callable, List, Optional

from pydantic import BaseModel, Field

from .config import Config
from .direction import Cardinal, direction_of, render_hint
from .environment import FacilityGraph
from .hazard_source import HazardSource
from .logging_utils import (
    colored,
    Color,
    LOG_TAG_DETERMINISTIC,
    log_error,
    log_hazard,
    log_info,
    log_success,
)
from .pathfinder import PathFinder
from .replan import DEFAULT_HAZARD_THRESHOLD, ReplanMonitor
from .risk_model import AlertPolicy, RiskModel
from .schemas import HazardSnapshot, Route


DEFAULT_TICK_INTERVAL = 0.5


class GuidanceUpdate(BaseModel):
    """What the occupant-facing collaborators receive after each tick."""

    tick: int
    current_area: int = Field(..., description="Area the occupant is in when guidance is issued")
    route: Optional[Route] = Field(None, description="Active route, None when no safe route exists")
    direction: Cardinal = Cardinal.INVALID
    glyph: str = Field(..., description="Text for the glyph display (arrow, '?' or 'NO PATH')")
    replanned: bool = False
    safe_route_available: bool = True
    alert: bool = False
    hazard_level: float = Field(0.0, ge=0.0, le=1.0, description="Normalized facility-wide hazard")
    risk_version: int = 0
    position: int = Field(0, ge=0, description="Index of the occupant's node within the route")
    at_exit: bool = False


GuidanceListener = Callable[[GuidanceUpdate], None]


class EvacuationController:
    """
    Periodic planning loop for one occupant.

    Owns its graph instance; nothing is shared through module globals, so
    several controllers can run side by side in tests.
    """

    def __init__(
        self,
        graph: FacilityGraph,
        hazard_source: HazardSource,
        start_area: int,
        *,
        threshold: float = DEFAULT_HAZARD_THRESHOLD,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        risk_model: Optional[RiskModel] = None,
        pathfinder: Optional[PathFinder] = None,
        alert_policy: Optional[AlertPolicy] = None,
        listeners: Optional[List[GuidanceListener]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        advance_occupant: bool = False,
    ):
        """Initialize the controller with all collaborators injected.

        Args:
            graph: Facility graph; the controller is its only risk writer
            hazard_source: Supplies one HazardSnapshot per tick
            start_area: Area the occupant starts in
            threshold: Area risk above which the active route is replaced
            tick_interval: Seconds awaited between ticks in ``run``
            risk_model: Hazard-to-risk mapping (default: uniform RiskModel)
            pathfinder: Planner (default: PathFinder with default weight)
            alert_policy: Alert thresholds (default: 50 ppm gas, 1000 ppm CO2)
            listeners: Callables invoked with each GuidanceUpdate. Failures
                are logged and never stop the loop
            sleep: Awaitable used between ticks (injectable for tests)
            advance_occupant: Move the occupant one node along the route per
                tick, for demos without a positioning collaborator
        """
        if tick_interval < 0:
            raise ValueError("tick_interval must be >= 0")
        self.graph = graph
        self.hazard_source = hazard_source
        self.current_area = start_area
        self.tick_interval = tick_interval
        self.risk_model = risk_model or RiskModel(graph)
        self.pathfinder = pathfinder or PathFinder(graph)
        self.monitor = ReplanMonitor(self.pathfinder, threshold)
        self.alert_policy = alert_policy or AlertPolicy()
        self.listeners: List[GuidanceListener] = listeners or []
        self._sleep = sleep
        self.advance_occupant = advance_occupant
        self.route: Optional[Route] = None
        # Index into self.route.nodes of the node the occupant stands on
        self.position = 0

    @classmethod
    def from_config(
        cls,
        graph: FacilityGraph,
        hazard_source: HazardSource,
        start_area: int,
        *,
        per_area: bool = False,
        listeners: Optional[List[GuidanceListener]] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        advance_occupant: bool = False,
    ) -> "EvacuationController":
        """Build a controller whose tunables come from ``Config``."""
        Config.validate()
        return cls(
            graph,
            hazard_source,
            start_area,
            threshold=Config.HAZARD_THRESHOLD,
            tick_interval=Config.TICK_INTERVAL_SECONDS,
            risk_model=RiskModel(graph, Config.HAZARD_NORMALIZER, per_area=per_area),
            pathfinder=PathFinder(
                graph,
                risk_weight=Config.RISK_WEIGHT,
                max_iterations=Config.max_search_iterations(),
                deadline_seconds=Config.search_deadline_seconds(),
            ),
            alert_policy=AlertPolicy(Config.GAS_ALERT_PPM, Config.CO2_ALERT_PPM),
            listeners=listeners,
            sleep=sleep,
            advance_occupant=advance_occupant,
        )

    def add_listener(self, listener: GuidanceListener) -> None:
        self.listeners.append(listener)

    async def run(self, num_ticks: int) -> List[GuidanceUpdate]:
        """Run the loop for ``num_ticks`` ticks.

        Returns:
            One GuidanceUpdate per completed tick

        Raises:
            Exception: Whatever a tick raises; the hazard source is stopped first
        """
        if num_ticks < 0:
            raise ValueError("num_ticks must be >= 0")

        updates: List[GuidanceUpdate] = []
        self.hazard_source.on_start()
        try:
            log_info(
                f"Starting evacuation guidance from area {self.current_area} "
                f"({num_ticks} ticks, {self.tick_interval}s interval)"
            )
            for tick in range(1, num_ticks + 1):
                print(f"=== Tick {tick}/{num_ticks} ===")
                try:
                    updates.append(self.step(tick))
                except Exception as e:
                    log_error(f"ERROR at tick {tick}: {e}")
                    raise
                await self._sleep(self.tick_interval)

            log_success(f"Guidance loop finished after {len(updates)} ticks")
            return updates
        finally:
            self.hazard_source.on_stop()

    def step(self, tick: int) -> GuidanceUpdate:
        """Execute a single tick and return the guidance it produced."""
        hazard = self.hazard_source.read(tick)
        risk = self.risk_model.update_risks(hazard)

        previous = self.route
        route = self.monitor.evaluate(previous, self.current_area, risk)
        replanned = route is not previous
        self.route = route
        if replanned:
            self.position = 0

        alert = self.alert_policy.should_alert(hazard)
        if alert:
            log_hazard(
                f"[Alert] Gas {hazard.gas_concentration:.1f} ppm, "
                f"CO2 {hazard.co2_equivalent_ppm} ppm exceed alert thresholds"
            )

        direction = direction_of(route, self.position)
        update = GuidanceUpdate(
            tick=tick,
            current_area=self.current_area,
            route=route,
            direction=direction,
            glyph=render_hint(route, self.position),
            position=self.position,
            replanned=replanned,
            safe_route_available=self.monitor.safe_route_available,
            alert=alert,
            hazard_level=self.risk_model.last_hazard,
            risk_version=risk.version,
            at_exit=self._at_exit(),
        )
        self._print_tick_summary(update, hazard)

        for listener in self.listeners:
            try:
                listener(update)
            except Exception as exc:
                log_error(f"[Guidance] Listener failed: {exc}")

        if self.advance_occupant and route is not None:
            self._advance(route)

        return update

    def _at_exit(self) -> bool:
        return self.graph.area_info(self.current_area).is_exit

    def _advance(self, route: Route) -> None:
        """Move the occupant to the next node of ``route``; the route itself is unchanged."""
        if self.position + 1 >= len(route.nodes):
            return
        walked = route.nodes[self.position]
        self.position += 1
        next_node = route.nodes[self.position]
        self.current_area = next_node.area_id
        print(
            colored(
                f"  {LOG_TAG_DETERMINISTIC} [Occupant] Moved from node {walked.id} to node "
                f"{next_node.id} (area {next_node.area_id})",
                Color.BLUE,
            )
        )

    def _print_tick_summary(self, update: GuidanceUpdate, hazard: HazardSnapshot) -> None:
        path = update.route.node_ids if update.route is not None else []
        print(
            f"  Hazard: h={update.hazard_level:.2f} "
            f"(VOC {hazard.volatiles_ppb} ppb, CO2 {hazard.co2_equivalent_ppm} ppm)"
        )
        print(f"  Area {update.current_area} -> route {path} display '{update.glyph}'")
        if update.replanned:
            print(f"  Route updated: {self.monitor.last_reason}")
        print()
