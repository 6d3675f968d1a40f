"""Exception taxonomy for the planning engine.

Graph mutation errors are non-fatal: the insertion is rejected, the graph is
left untouched, and the caller may log and continue. Route errors are caught
by the control loop and turned into a "no safe route" guidance state.
"""

from typing import Optional


class EvacRouteError(Exception):
    """Base class for all evacroute errors."""


# =============================
# Graph mutation errors
# =============================

class GraphError(EvacRouteError):
    """Raised when a node or edge insertion is rejected."""


class DuplicateIdError(GraphError):
    """Raised when a node or edge id is already present."""

    def __init__(self, kind: str, item_id: int) -> None:
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind.capitalize()} {item_id} already exists")


class UnknownEndpointError(GraphError):
    """Raised when an edge references a node that was never added."""

    def __init__(self, edge_id: int, source: int, target: int, missing: list[int]) -> None:
        self.edge_id = edge_id
        self.source = source
        self.target = target
        self.missing = missing
        super().__init__(
            f"Edge {edge_id} ({source}->{target}) references unknown node(s): "
            + ", ".join(str(node_id) for node_id in missing)
        )


class CapacityExceededError(GraphError):
    """Raised when an insertion would exceed the configured capacity."""

    def __init__(self, kind: str, item_id: int, capacity: int) -> None:
        self.kind = kind
        self.item_id = item_id
        self.capacity = capacity
        super().__init__(
            f"Cannot add {kind} {item_id}: maximum of {capacity} {kind}s reached"
        )


# =============================
# Search errors
# =============================

class RouteNotFoundError(EvacRouteError):
    """Raised when an area cannot be resolved or no connecting route exists."""

    def __init__(
        self,
        reason: str,
        *,
        start_area: Optional[int] = None,
        end_area: Optional[int] = None,
    ) -> None:
        self.reason = reason
        self.start_area = start_area
        self.end_area = end_area
        super().__init__(reason)


class SearchTimeoutError(RouteNotFoundError):
    """Raised when the search exceeds its iteration or deadline guard."""

    def __init__(
        self,
        reason: str,
        *,
        start_area: Optional[int] = None,
        end_area: Optional[int] = None,
        iterations: int = 0,
    ) -> None:
        self.iterations = iterations
        super().__init__(reason, start_area=start_area, end_area=end_area)


# =============================
# Map loading errors
# =============================

class MapFormatError(EvacRouteError):
    """Raised when a map description cannot be loaded at all (missing header)."""

    def __init__(self, reason: str, *, source: Optional[str] = None) -> None:
        self.reason = reason
        self.source = source
        message = reason if source is None else f"{source}: {reason}"
        super().__init__(message)
