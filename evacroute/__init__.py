"""
evacroute - risk-aware evacuation path planning.

Keeps a facility graph, turns per-tick hazard readings into edge risk, and
recomputes the safest route to an exit when the active route becomes unsafe.

No file I/O required. No global state. All collaborators injected by the user.
"""

__version__ = "0.1.0"

# Control loop
from .controller import EvacuationController, GuidanceUpdate

# Core components
from .environment import (
    AreaInfo,
    AreaState,
    CorridorEdge,
    CorridorEdgeState,
    FacilityGraph,
    FacilityGraphState,
    FacilityNode,
    FacilityNodeState,
    RiskSnapshot,
)
from .risk_model import AlertPolicy, RiskModel, hazard_scalar, traversal_cost
from .pathfinder import PathFinder
from .replan import ReplanMonitor, ReplanState
from .direction import Cardinal, direction_of, render_hint
from .hazard_source import HazardSource, ScriptedHazardSource

# Loading
from .scenario import (
    EvacuationScenario,
    ScenarioLoader,
    load_areas,
    load_map,
    load_scenario,
    parse_areas,
    parse_map,
)

# Core schemas
from .schemas import HazardSnapshot, MalformedMapLine, MapLoadReport, Route, RouteNode

# Errors
from .exceptions import (
    CapacityExceededError,
    DuplicateIdError,
    EvacRouteError,
    GraphError,
    MapFormatError,
    RouteNotFoundError,
    SearchTimeoutError,
    UnknownEndpointError,
)

from .config import Config

__all__ = [
    # Control loop
    "EvacuationController",
    "GuidanceUpdate",
    # Core components
    "AreaInfo",
    "AreaState",
    "CorridorEdge",
    "CorridorEdgeState",
    "FacilityGraph",
    "FacilityGraphState",
    "FacilityNode",
    "FacilityNodeState",
    "RiskSnapshot",
    "AlertPolicy",
    "RiskModel",
    "hazard_scalar",
    "traversal_cost",
    "PathFinder",
    "ReplanMonitor",
    "ReplanState",
    "Cardinal",
    "direction_of",
    "render_hint",
    "HazardSource",
    "ScriptedHazardSource",
    # Loading
    "EvacuationScenario",
    "ScenarioLoader",
    "load_areas",
    "load_map",
    "load_scenario",
    "parse_areas",
    "parse_map",
    # Schemas
    "HazardSnapshot",
    "MalformedMapLine",
    "MapLoadReport",
    "Route",
    "RouteNode",
    # Errors
    "CapacityExceededError",
    "DuplicateIdError",
    "EvacRouteError",
    "GraphError",
    "MapFormatError",
    "RouteNotFoundError",
    "SearchTimeoutError",
    "UnknownEndpointError",
    # Config
    "Config",
]
