"""Facility graph model: topology, area registry and risk snapshots."""

from .graph import (
    AreaInfo,
    CorridorEdge,
    FacilityGraph,
    FacilityNode,
    RiskSnapshot,
    clamp_unit,
)
from .schemas import (
    AreaState,
    CorridorEdgeState,
    FacilityGraphState,
    FacilityNodeState,
)

__all__ = [
    "AreaInfo",
    "CorridorEdge",
    "FacilityGraph",
    "FacilityNode",
    "RiskSnapshot",
    "clamp_unit",
    "AreaState",
    "CorridorEdgeState",
    "FacilityGraphState",
    "FacilityNodeState",
]
