"""
Map and scenario loading.

Three input formats feed the FacilityGraph:

1. Map description (text), loaded once at startup::

       NODES
       <node_id> <area_id> <x> <y>
       ...
       EDGES
       <edge_id> <start_node_id> <end_node_id> <distance>
       ...

   The first meaningful line must start with ``NODES``; otherwise loading
   aborts with MapFormatError. Any other line that does not parse (wrong
   field count, non-numeric value) or that the graph rejects (duplicate id,
   unknown endpoint, capacity) is skipped and recorded in the MapLoadReport.
   Blank lines and ``#`` comments are ignored.

2. Area registry (CSV), one row per area::

       <area_id>,<name>,<is_exit>,<hazard_level>

   Provides the exit flags used by exit lookup and each area's static
   hazard level.

3. Scenario (JSON) bundling a map, areas, start area and a scripted list of
   hazard snapshots for demos and tests::

       {
         "name": "Mall east wing",
         "description": "...",
         "map": "mall.map",               // or "graph": {FacilityGraphState}
         "areas": "mall_areas.csv",       // or a list of AreaState objects
         "start_area": 101,
         "threshold": 0.8,                // optional
         "per_area": true,                // optional
         "hazards": [{"volatiles_ppb": 120, "co2_equivalent_ppm": 450}, ...]
       }

Usage:
    graph, report = load_map("facility.map")
    load_areas("areas.csv", graph, report)

    loader = ScenarioLoader(Path("examples/scenarios"))
    scenario, graph = loader.load("mall")
"""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from .config import Config
from .environment import AreaState, FacilityGraph, FacilityGraphState
from .exceptions import GraphError, MapFormatError
from .logging_utils import log_error, log_info, log_success
from .schemas import HazardSnapshot, MalformedMapLine, MapLoadReport


NODES_HEADER = "NODES"
EDGES_MARKER = "EDGES"

PathLike = Union[str, Path]


def _is_ignorable(line: str) -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith("#")


def _parse_node_line(line: str) -> Tuple[int, int, float, float]:
    parts = line.split()
    if len(parts) != 4:
        raise ValueError(f"expected 4 fields, got {len(parts)}")
    return int(parts[0]), int(parts[1]), float(parts[2]), float(parts[3])


def _parse_edge_line(line: str) -> Tuple[int, int, int, float]:
    parts = line.split()
    if len(parts) != 4:
        raise ValueError(f"expected 4 fields, got {len(parts)}")
    return int(parts[0]), int(parts[1]), int(parts[2]), float(parts[3])


def parse_map(
    text: str,
    graph: Optional[FacilityGraph] = None,
    *,
    source: Optional[str] = None,
) -> Tuple[FacilityGraph, MapLoadReport]:
    """Parse a map description into ``graph`` (a new one by default).

    Raises:
        MapFormatError: If the NODES header is missing or incorrect
    """
    graph = graph if graph is not None else FacilityGraph(Config.MAX_NODES, Config.MAX_EDGES)
    report = MapLoadReport(source=source)

    lines = text.splitlines()
    position = 0
    while position < len(lines) and _is_ignorable(lines[position]):
        position += 1

    if position >= len(lines) or not lines[position].strip().startswith(NODES_HEADER):
        log_error("[Map] Invalid map data format (missing NODES header)")
        raise MapFormatError("missing NODES header", source=source)

    section = "nodes"
    for line_number, line in enumerate(lines[position + 1:], start=position + 2):
        if _is_ignorable(line):
            continue
        if section == "nodes" and line.strip().startswith(EDGES_MARKER):
            section = "edges"
            continue

        try:
            if section == "nodes":
                graph.add_node(*_parse_node_line(line))
                report.nodes_loaded += 1
            else:
                graph.add_edge(*_parse_edge_line(line))
                report.edges_loaded += 1
        except (ValueError, GraphError) as exc:
            report.skipped.append(
                MalformedMapLine(line_number=line_number, text=line.rstrip("\n"), reason=str(exc))
            )

    if report.skipped:
        log_error(f"[Map] Skipped {len(report.skipped)} malformed line(s)")
    log_success(f"[Map] Map data loaded: {report.nodes_loaded} nodes, {report.edges_loaded} edges")
    return graph, report


def load_map(path: PathLike, graph: Optional[FacilityGraph] = None) -> Tuple[FacilityGraph, MapLoadReport]:
    """Load a map description file. See ``parse_map``.

    Raises:
        FileNotFoundError: If the file does not exist
        MapFormatError: If the NODES header is missing or incorrect
    """
    map_path = Path(path)
    if not map_path.exists():
        raise FileNotFoundError(f"Map file not found at {map_path}")
    return parse_map(map_path.read_text(), graph, source=str(map_path))


def _parse_bool(value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "y"):
        return True
    if normalized in ("0", "false", "no", "n", ""):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def parse_areas(text: str, graph: FacilityGraph, report: Optional[MapLoadReport] = None) -> MapLoadReport:
    """Register areas from CSV text ``id,name,is_exit,hazard_level``."""
    report = report or MapLoadReport()
    reader = csv.reader(io.StringIO(text))
    for line_number, row in enumerate(reader, start=1):
        if not row or not "".join(row).strip() or row[0].strip().startswith("#"):
            continue
        if line_number == 1 and row[0].strip().lower() in ("id", "area_id"):
            continue  # header row
        try:
            if len(row) != 4:
                raise ValueError(f"expected 4 fields, got {len(row)}")
            area_id = int(row[0])
            name = row[1].strip()
            is_exit = _parse_bool(row[2])
            hazard_level = float(row[3])
        except ValueError as exc:
            report.skipped.append(
                MalformedMapLine(line_number=line_number, text=",".join(row), reason=str(exc))
            )
            continue
        graph.register_area(area_id, name=name, is_exit=is_exit, hazard_level=hazard_level)
        report.areas_loaded += 1

    log_info(f"[Map] Registered {report.areas_loaded} area(s), {len(graph.exit_areas())} exit(s)")
    return report


def load_areas(path: PathLike, graph: FacilityGraph, report: Optional[MapLoadReport] = None) -> MapLoadReport:
    """Load an area registry CSV file into ``graph``."""
    areas_path = Path(path)
    if not areas_path.exists():
        raise FileNotFoundError(f"Areas file not found at {areas_path}")
    return parse_areas(areas_path.read_text(), graph, report)


class EvacuationScenario(BaseModel):
    """A facility plus the conditions to run the control loop against."""

    name: str
    description: str = ""
    start_area: int = Field(..., description="Area the occupant starts in")
    threshold: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Replan threshold override",
    )
    per_area: bool = Field(False, description="Use per-area hazard levels instead of one facility-wide scalar")
    hazards: List[HazardSnapshot] = Field(
        default_factory=list, description="Scripted hazard snapshots, one per tick",
    )
    load_report: MapLoadReport = Field(default_factory=MapLoadReport)


class ScenarioLoader:
    """Load and validate evacuation scenarios from JSON files.

    Directory structure:
    - Default: {PROJECT_ROOT}/examples/scenarios/
    - Override via constructor: ScenarioLoader(Path("/custom/scenarios"))
    - Scenario files: {scenario_name}.json, map/area files resolved relative
      to the same directory
    """

    REQUIRED_FIELDS = ("name", "start_area")

    def __init__(self, scenarios_dir: Optional[Path] = None):
        self.scenarios_dir = Path(scenarios_dir) if scenarios_dir else Config.SCENARIOS_DIR

    def load(self, scenario_name: str) -> Tuple[EvacuationScenario, FacilityGraph]:
        """Load a scenario by name.

        Returns:
            Tuple of (EvacuationScenario, populated FacilityGraph)

        Raises:
            FileNotFoundError: If the scenario or a referenced file is missing
            ValueError: If required fields are missing or both/neither of
                ``map`` and ``graph`` are given
            MapFormatError: If the referenced map has no NODES header
        """
        scenario_path = self.scenarios_dir / f"{scenario_name}.json"
        if not scenario_path.exists():
            raise FileNotFoundError(f"Scenario '{scenario_name}' not found at {scenario_path}")

        data = json.loads(scenario_path.read_text())
        self._validate_scenario(data)

        if "map" in data:
            graph, report = load_map(self.scenarios_dir / data["map"])
        else:
            graph = FacilityGraph.from_state(FacilityGraphState.model_validate(data["graph"]))
            report = MapLoadReport(
                source=str(scenario_path),
                nodes_loaded=graph.node_count,
                edges_loaded=graph.edge_count,
            )

        areas = data.get("areas")
        if isinstance(areas, str):
            load_areas(self.scenarios_dir / areas, graph, report)
        elif isinstance(areas, list):
            for raw in areas:
                area = AreaState.model_validate(raw)
                graph.register_area(area.area_id, area.name, area.is_exit, area.hazard_level)
                report.areas_loaded += 1

        scenario = EvacuationScenario(
            name=data["name"],
            description=data.get("description", ""),
            start_area=data["start_area"],
            threshold=data.get("threshold"),
            per_area=data.get("per_area", False),
            hazards=[HazardSnapshot.model_validate(h) for h in data.get("hazards", [])],
            load_report=report,
        )
        log_info(f"[Scenario] Loaded '{scenario.name}' ({graph.node_count} nodes, {graph.edge_count} edges)")
        return scenario, graph

    def _validate_scenario(self, data: dict) -> None:
        missing = [key for key in self.REQUIRED_FIELDS if key not in data]
        if missing:
            raise ValueError(f"Scenario missing required fields: {missing}")
        has_map = "map" in data
        has_graph = "graph" in data
        if has_map == has_graph:
            raise ValueError("Scenario must define exactly one of 'map' or 'graph'")


def load_scenario(
    scenario_name: str,
    scenarios_dir: Optional[Path] = None,
) -> Tuple[EvacuationScenario, FacilityGraph]:
    """Convenience wrapper around ``ScenarioLoader(scenarios_dir).load(name)``."""
    return ScenarioLoader(scenarios_dir).load(scenario_name)
