"""
Pydantic schemas for the evacuation planning engine.

Data contracts exchanged with the collaborators that sit outside the core:
- HazardSnapshot: one tick of fused sensor readings (input)
- Route / RouteNode: the planner's answer (output to display and alert layers)
- MalformedMapLine / MapLoadReport: what the map loader skipped

Design Philosophy:
- Snapshots are replaced wholesale each tick; they carry no identity
- Routes are immutable; a replan produces a new Route object
- Validation happens at the boundary so the core can trust its inputs
"""

from datetime import datetime, timezone
from typing import Annotated, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


UINT16_MAX = 65535


# ============================================================================
# Hazard input
# ============================================================================

class HazardSnapshot(BaseModel):
    """Environmental readings for one planning tick.

    Produced by the sensor-fusion collaborator. ``area_levels`` is optional
    and only consulted when the risk model runs in per-area mode.
    """

    volatiles_ppb: int = Field(0, ge=0, le=UINT16_MAX, description="Total volatile organics (ppb)")
    co2_equivalent_ppm: int = Field(0, ge=0, le=UINT16_MAX, description="CO2-equivalent (ppm)")
    gas_voltage: float = Field(0.0, allow_inf_nan=False, description="Combustible-gas sensor output voltage")
    gas_concentration: float = Field(0.0, ge=0.0, allow_inf_nan=False, description="Combustible-gas concentration (ppm)")
    # Per-area normalized hazard in [0, 1]; areas not listed fall back to the
    # facility-wide scalar.
    area_levels: Dict[int, Annotated[float, Field(allow_inf_nan=False)]] = Field(
        default_factory=dict,
        description="Optional per-area hazard levels (area_id -> [0,1])",
    )


# ============================================================================
# Route output
# ============================================================================

class RouteNode(BaseModel):
    """Copy of a graph node as it appears in a route."""

    model_config = ConfigDict(frozen=True)

    id: int
    area_id: int
    x: float
    y: float


class Route(BaseModel):
    """Ordered, immutable sequence of nodes returned by the planner.

    ``total_distance`` and ``total_risk`` are sums over the directed edges
    matching each consecutive node pair. ``risk_version`` identifies the
    risk snapshot the search ran against.
    """

    model_config = ConfigDict(frozen=True)

    nodes: Tuple[RouteNode, ...] = Field(default_factory=tuple)
    total_distance: float = 0.0
    total_risk: float = 0.0
    start_area: Optional[int] = None
    end_area: Optional[int] = None
    risk_version: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def node_ids(self) -> List[int]:
        return [node.id for node in self.nodes]

    @property
    def area_ids(self) -> List[int]:
        return [node.area_id for node in self.nodes]

    @property
    def is_empty(self) -> bool:
        return not self.nodes


# ============================================================================
# Map loading report
# ============================================================================

class MalformedMapLine(BaseModel):
    """A map line that was skipped during loading."""

    line_number: int
    text: str
    reason: str


class MapLoadReport(BaseModel):
    """Summary of a map load: counts plus every skipped line."""

    source: Optional[str] = None
    nodes_loaded: int = 0
    edges_loaded: int = 0
    areas_loaded: int = 0
    skipped: List[MalformedMapLine] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.skipped
