"""Facility graph store.

Holds the static topology of a facility: waypoints (nodes) grouped into
areas and the directed corridors (edges) between them. Topology is built
once at startup and only grows through ``add_node``/``add_edge``; after
loading, the only mutable state is the per-edge and per-area risk, which is
replaced wholesale through ``publish_risks`` and read back through
``snapshot``.
"""

from __future__ import annotations

import math
import threading
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from ..exceptions import CapacityExceededError, DuplicateIdError, UnknownEndpointError
from ..logging_utils import log_error
from .schemas import AreaState, CorridorEdgeState, FacilityGraphState, FacilityNodeState


DEFAULT_MAX_NODES = 100
DEFAULT_MAX_EDGES = 200


def clamp_unit(value: float) -> float:
    """Clamp ``value`` to ``[0, 1]``. NaN maps to 1.0, the most hazardous value."""
    if math.isnan(value):
        return 1.0
    if value < 0.0:
        return 0.0
    if value > 1.0:
        return 1.0
    return float(value)


@dataclass(frozen=True)
class FacilityNode:
    """A waypoint with planar coordinates and an owning area."""

    id: int
    area_id: int
    x: float
    y: float


@dataclass(frozen=True)
class CorridorEdge:
    """A directed corridor ``source -> target``.

    Bidirectional corridors are two edges. Instances are immutable; a risk
    update in ``FacilityGraph.publish_risks`` swaps in a copy with the new
    ``risk``.
    """

    id: int
    source: int
    target: int
    distance: float
    risk: float = 0.0


@dataclass
class AreaInfo:
    """Descriptive metadata about an area (exit flag, static hazard level)."""

    area_id: int
    name: str = ""
    is_exit: bool = False
    hazard_level: float = 0.0


@dataclass(frozen=True)
class RiskSnapshot:
    """Read-only view of risk values as of one published version."""

    version: int
    edge_risk: Mapping[int, float] = field(default_factory=dict)
    area_risk: Mapping[int, float] = field(default_factory=dict)

    def risk_of_edge(self, edge_id: int) -> float:
        return self.edge_risk.get(edge_id, 0.0)

    def risk_of_area(self, area_id: int) -> float:
        return self.area_risk.get(area_id, 0.0)


class FacilityGraph:
    """Fixed-capacity directed graph of facility waypoints.

    Insertions are validated up front and either fully applied or rejected
    with an exception; nothing is truncated or overwritten. Lookups are
    linear scans in insertion order so tie-breaks (representative node,
    first matching edge) are deterministic.

    Risk values follow a single-writer/many-reader discipline: the writer
    replaces all values inside one critical section and bumps ``version``;
    readers copy a ``RiskSnapshot`` inside the same lock, so a search never
    observes a half-applied update.
    """

    def __init__(self, max_nodes: int = DEFAULT_MAX_NODES, max_edges: int = DEFAULT_MAX_EDGES):
        if max_nodes <= 0 or max_edges <= 0:
            raise ValueError("Graph capacities must be positive")
        self.max_nodes = max_nodes
        self.max_edges = max_edges
        self._nodes: List[FacilityNode] = []
        self._edges: List[CorridorEdge] = []
        self._areas: Dict[int, AreaInfo] = {}
        self._area_risk: Dict[int, float] = {}
        self._version = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_node(self, node_id: int, area_id: int, x: float, y: float) -> FacilityNode:
        """Append a node.

        Raises DuplicateIdError, CapacityExceededError, or ValueError for
        non-finite coordinates.
        """
        if self.get_node(node_id) is not None:
            log_error(f"[Graph] Node {node_id} already exists")
            raise DuplicateIdError("node", node_id)
        if len(self._nodes) >= self.max_nodes:
            log_error(f"[Graph] Maximum number of nodes ({self.max_nodes}) reached")
            raise CapacityExceededError("node", node_id, self.max_nodes)
        if not (math.isfinite(x) and math.isfinite(y)):
            raise ValueError(f"Node {node_id} has non-finite coordinates ({x}, {y})")

        node = FacilityNode(id=int(node_id), area_id=int(area_id), x=float(x), y=float(y))
        self._nodes.append(node)
        return node

    def add_edge(self, edge_id: int, source: int, target: int, distance: float) -> CorridorEdge:
        """Append a directed edge with ``risk = 0``.

        Raises DuplicateIdError, CapacityExceededError or UnknownEndpointError;
        ValueError for a negative or non-finite distance.
        """
        if not math.isfinite(distance) or distance < 0:
            raise ValueError(f"Edge {edge_id} has invalid distance {distance}")
        if any(edge.id == edge_id for edge in self._edges):
            log_error(f"[Graph] Edge {edge_id} already exists")
            raise DuplicateIdError("edge", edge_id)
        if len(self._edges) >= self.max_edges:
            log_error(f"[Graph] Maximum number of edges ({self.max_edges}) reached")
            raise CapacityExceededError("edge", edge_id, self.max_edges)

        missing = [node_id for node_id in (source, target) if self.get_node(node_id) is None]
        if missing:
            log_error(f"[Graph] Start node {source} or end node {target} not found")
            # Deduplicate while keeping order (source == target case)
            raise UnknownEndpointError(edge_id, source, target, list(dict.fromkeys(missing)))

        edge = CorridorEdge(id=int(edge_id), source=int(source), target=int(target), distance=float(distance))
        self._edges.append(edge)
        return edge

    def register_area(
        self,
        area_id: int,
        name: str = "",
        is_exit: bool = False,
        hazard_level: float = 0.0,
    ) -> AreaInfo:
        """Record descriptive metadata for an area, replacing any previous entry."""
        info = AreaInfo(
            area_id=int(area_id),
            name=name,
            is_exit=bool(is_exit),
            hazard_level=clamp_unit(hazard_level),
        )
        self._areas[info.area_id] = info
        return info

    def publish_risks(
        self,
        edge_risk: Mapping[int, float],
        area_risk: Optional[Mapping[int, float]] = None,
    ) -> int:
        """Replace risk values atomically and return the new version.

        Edges missing from ``edge_risk`` keep their previous value. Unknown
        edge ids are rejected before anything is written.
        """
        position = {edge.id: index for index, edge in enumerate(self._edges)}
        unknown = [edge_id for edge_id in edge_risk if edge_id not in position]
        if unknown:
            raise KeyError(f"Unknown edge id(s): {unknown}")

        with self._lock:
            for edge_id, value in edge_risk.items():
                index = position[edge_id]
                self._edges[index] = replace(self._edges[index], risk=clamp_unit(value))
            if area_risk is not None:
                self._area_risk = {int(area): clamp_unit(value) for area, value in area_risk.items()}
            self._version += 1
            return self._version

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def snapshot(self) -> RiskSnapshot:
        """Return a consistent copy of all risk values."""
        with self._lock:
            edge_risk = {edge.id: edge.risk for edge in self._edges}
            area_risk = dict(self._area_risk)
            version = self._version
        return RiskSnapshot(
            version=version,
            edge_risk=MappingProxyType(edge_risk),
            area_risk=MappingProxyType(area_risk),
        )

    @property
    def version(self) -> int:
        return self._version

    @property
    def nodes(self) -> Tuple[FacilityNode, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> Tuple[CorridorEdge, ...]:
        return tuple(self._edges)

    @property
    def areas(self) -> Dict[int, AreaInfo]:
        return dict(self._areas)

    @property
    def capacity(self) -> Tuple[int, int]:
        """(max_nodes, max_edges)."""
        return self.max_nodes, self.max_edges

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def node_index(self, node_id: int) -> int:
        """Return the insertion index of ``node_id``. Raises KeyError if absent."""
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                return index
        raise KeyError(f"Node {node_id} not found")

    def get_node(self, node_id: int) -> Optional[FacilityNode]:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def has_area(self, area_id: int) -> bool:
        return self.representative_node(area_id) is not None

    def representative_node(self, area_id: int) -> Optional[FacilityNode]:
        """Return the first-inserted node belonging to ``area_id``."""
        for node in self._nodes:
            if node.area_id == area_id:
                return node
        return None

    def outgoing(self, node_id: int) -> List[CorridorEdge]:
        """Edges leaving ``node_id`` in insertion order."""
        return [edge for edge in self._edges if edge.source == node_id]

    def edge_between(self, source: int, target: int) -> Optional[CorridorEdge]:
        """First inserted edge going ``source -> target`` (direction honoured)."""
        for edge in self._edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def area_ids(self) -> List[int]:
        """Areas that own at least one node, in order of first appearance."""
        return list(dict.fromkeys(node.area_id for node in self._nodes))

    def exit_areas(self) -> List[int]:
        """Areas flagged as exits, in registration order."""
        return [area_id for area_id, info in self._areas.items() if info.is_exit]

    def area_info(self, area_id: int) -> AreaInfo:
        """Registered metadata, or a default entry for unregistered areas."""
        return self._areas.get(area_id) or AreaInfo(area_id=area_id)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_state(self) -> FacilityGraphState:
        """Export topology, area metadata and current risk as a pydantic state."""
        snapshot = self.snapshot()
        return FacilityGraphState(
            max_nodes=self.max_nodes,
            max_edges=self.max_edges,
            nodes=[
                FacilityNodeState(id=n.id, area_id=n.area_id, x=n.x, y=n.y)
                for n in self._nodes
            ],
            edges=[
                CorridorEdgeState(
                    id=e.id,
                    source=e.source,
                    target=e.target,
                    distance=e.distance,
                    risk=snapshot.risk_of_edge(e.id),
                )
                for e in self._edges
            ],
            areas=[
                AreaState(
                    area_id=a.area_id,
                    name=a.name,
                    is_exit=a.is_exit,
                    hazard_level=a.hazard_level,
                )
                for a in self._areas.values()
            ],
        )

    @classmethod
    def from_state(cls, state: FacilityGraphState) -> "FacilityGraph":
        """Rebuild a graph from a state, validating every insertion."""
        graph = cls(max_nodes=state.max_nodes, max_edges=state.max_edges)
        for node in state.nodes:
            graph.add_node(node.id, node.area_id, node.x, node.y)
        for edge in state.edges:
            graph.add_edge(edge.id, edge.source, edge.target, edge.distance)
        for area in state.areas:
            graph.register_area(area.area_id, area.name, area.is_exit, area.hazard_level)
        risks = {edge.id: edge.risk for edge in state.edges if edge.risk}
        if risks:
            graph.publish_risks(risks)
        return graph
