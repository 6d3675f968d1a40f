"""
Hazard-to-risk mapping.

Turns a tick's HazardSnapshot into per-edge and per-area risk factors and
publishes them to the FacilityGraph. This is the only writer of risk.

Reference behaviour is facility-wide: one normalized scalar
``h = clamp((volatiles + co2_equivalent) / 2000, 0, 1)`` is applied to every
edge. Per-area mode uses ``snapshot.area_levels`` (falling back to ``h``)
and gives each edge the larger risk of its two endpoint areas.

Areas also carry a static ``hazard_level`` from the area registry; an area's
associated risk is never lower than that value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from .environment import FacilityGraph, RiskSnapshot, clamp_unit
from .logging_utils import log_deterministic
from .schemas import HazardSnapshot


DEFAULT_RISK_WEIGHT = 10.0
DEFAULT_HAZARD_NORMALIZER = 2000.0


def hazard_scalar(snapshot: HazardSnapshot, normalizer: float = DEFAULT_HAZARD_NORMALIZER) -> float:
    """Normalized facility-wide hazard in ``[0, 1]``."""
    if normalizer <= 0:
        raise ValueError("normalizer must be positive")
    raw = (snapshot.volatiles_ppb + snapshot.co2_equivalent_ppm) / normalizer
    return clamp_unit(raw)


def traversal_cost(distance: float, risk: float, risk_weight: float = DEFAULT_RISK_WEIGHT) -> float:
    """Cost of walking an edge: ``distance * (1 + risk_weight * risk)``.

    Non-decreasing in both ``distance`` and ``risk`` for non-negative inputs.
    """
    return distance * (1.0 + risk_weight * risk)


class RiskModel:
    """Publishes risk derived from hazard snapshots onto a FacilityGraph."""

    def __init__(
        self,
        graph: FacilityGraph,
        normalizer: float = DEFAULT_HAZARD_NORMALIZER,
        per_area: bool = False,
    ):
        if normalizer <= 0:
            raise ValueError("normalizer must be positive")
        self.graph = graph
        self.normalizer = normalizer
        self.per_area = per_area
        self.last_hazard: float = 0.0

    def area_risks(self, snapshot: HazardSnapshot, hazard: float) -> Dict[int, float]:
        """Associated risk for every known area (nodes plus registered areas)."""
        area_ids = list(dict.fromkeys(self.graph.area_ids() + list(self.graph.areas)))
        risks: Dict[int, float] = {}
        for area_id in area_ids:
            dynamic = hazard
            if self.per_area:
                dynamic = clamp_unit(snapshot.area_levels.get(area_id, hazard))
            static = self.graph.area_info(area_id).hazard_level
            risks[area_id] = max(dynamic, static)
        return risks

    def update_risks(self, snapshot: HazardSnapshot) -> RiskSnapshot:
        """Compute and publish risk for every edge and area.

        Runs to completion before returning; searches that start afterwards
        see the new values, searches already running keep their snapshot.
        """
        hazard = hazard_scalar(snapshot, self.normalizer)
        self.last_hazard = hazard

        area_risk = self.area_risks(snapshot, hazard)
        if self.per_area:
            area_of = {node.id: node.area_id for node in self.graph.nodes}
            edge_risk = {
                edge.id: max(
                    area_risk.get(area_of[edge.source], hazard),
                    area_risk.get(area_of[edge.target], hazard),
                )
                for edge in self.graph.edges
            }
        else:
            edge_risk = {edge.id: hazard for edge in self.graph.edges}

        version = self.graph.publish_risks(edge_risk, area_risk)
        mode = "per-area" if self.per_area else "uniform"
        log_deterministic(
            f"[Risk] Edge risks updated ({mode}, h={hazard:.2f}, version {version})"
        )
        return self.graph.snapshot()


@dataclass(frozen=True)
class AlertPolicy:
    """Fixed thresholds that trigger the audible/visual alert collaborator."""

    gas_ppm: float = 50.0
    co2_ppm: int = 1000

    def should_alert(self, snapshot: HazardSnapshot) -> bool:
        return snapshot.gas_concentration > self.gas_ppm or snapshot.co2_equivalent_ppm > self.co2_ppm
