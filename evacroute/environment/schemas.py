"""Pydantic schemas for the facility graph.

These models mirror the dataclasses in ``graph.py`` but keep map snapshots
serializable (JSON scenarios, exports for the display collaborator).
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class FacilityNodeState(BaseModel):
    """Serializable waypoint."""

    id: int
    area_id: int
    x: float
    y: float


class CorridorEdgeState(BaseModel):
    """Serializable directed corridor."""

    id: int
    source: int = Field(..., description="Node id the corridor leaves from")
    target: int = Field(..., description="Node id the corridor arrives at")
    distance: float = Field(..., ge=0.0, description="Nominal length")
    risk: float = Field(0.0, ge=0.0, le=1.0, description="Current risk factor")


class AreaState(BaseModel):
    """Area metadata: exit flag and static hazard classification."""

    area_id: int
    name: str = ""
    is_exit: bool = False
    hazard_level: float = Field(0.0, ge=0.0, le=1.0)


class FacilityGraphState(BaseModel):
    """Complete facility description: capacity, topology and areas."""

    max_nodes: int = Field(100, gt=0)
    max_edges: int = Field(200, gt=0)
    nodes: List[FacilityNodeState] = Field(default_factory=list)
    edges: List[CorridorEdgeState] = Field(default_factory=list)
    areas: List[AreaState] = Field(
        default_factory=list,
        description="Area metadata in registration order (exit lookup follows this order)",
    )
