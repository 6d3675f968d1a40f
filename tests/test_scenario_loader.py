"""Tests for map parsing, the area registry and ScenarioLoader."""

import json
from pathlib import Path

import pytest

from evacroute.environment import FacilityGraph
from evacroute.exceptions import MapFormatError
from evacroute.scenario import (
    ScenarioLoader,
    load_areas,
    load_map,
    load_scenario,
    parse_areas,
    parse_map,
)


MAP_TEXT = """\
NODES
1 101 0 0
2 102 10 0
3 103 10 10
EDGES
1 1 2 10
2 2 3 10.5
"""


def test_parse_map_loads_nodes_and_edges():
    graph, report = parse_map(MAP_TEXT)

    assert [n.id for n in graph.nodes] == [1, 2, 3]
    assert graph.edge_between(2, 3).distance == 10.5
    assert report.nodes_loaded == 3
    assert report.edges_loaded == 2
    assert report.ok


def test_missing_header_is_fatal():
    with pytest.raises(MapFormatError):
        parse_map("1 101 0 0\nEDGES\n")
    with pytest.raises(MapFormatError):
        parse_map("")


def test_leading_comments_before_header_are_ignored():
    graph, _ = parse_map("# facility\n\n" + MAP_TEXT)
    assert graph.node_count == 3


def test_malformed_and_rejected_lines_are_skipped():
    text = """\
NODES
1 101 0 0
2 102 ten 0
3 103 10
3 103 10 10
3 104 5 5
EDGES
1 1 3 14
2 1 9 3
3 3 1
1 3 1 14
"""
    graph, report = parse_map(text, source="broken.map")

    assert [n.id for n in graph.nodes] == [1, 3]
    assert [e.id for e in graph.edges] == [1]
    assert not report.ok
    assert [line.line_number for line in report.skipped] == [3, 4, 6, 9, 10, 11]
    assert "already exists" in report.skipped[2].reason
    assert report.source == "broken.map"


def test_parse_map_into_existing_graph_respects_capacity():
    graph = FacilityGraph(max_nodes=2, max_edges=5)

    _, report = parse_map(MAP_TEXT, graph)

    assert graph.node_count == 2
    assert report.nodes_loaded == 2
    # Edge 2 -> 3 references the rejected node
    assert report.edges_loaded == 1
    assert len(report.skipped) == 2


def test_load_map_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_map(tmp_path / "nope.map")


def test_parse_areas_registers_exits():
    graph, _ = parse_map(MAP_TEXT)

    report = parse_areas(
        "id,name,is_exit,hazard_level\n"
        "103,Exit,1,0.0\n"
        "102,Kitchen,false,0.4\n"
        "bad,row,1,0\n",
        graph,
    )

    assert report.areas_loaded == 2
    assert len(report.skipped) == 1
    assert graph.exit_areas() == [103]
    assert graph.area_info(102).hazard_level == 0.4


def test_scenario_from_map_and_csv(tmp_path: Path):
    (tmp_path / "site.map").write_text(MAP_TEXT)
    (tmp_path / "site_areas.csv").write_text("103,Exit,yes,0\n")
    (tmp_path / "site.json").write_text(json.dumps({
        "name": "Site",
        "map": "site.map",
        "areas": "site_areas.csv",
        "start_area": 101,
        "threshold": 0.7,
        "hazards": [{"volatiles_ppb": 10}, {"co2_equivalent_ppm": 900, "area_levels": {"102": 0.5}}],
    }))

    scenario, graph = ScenarioLoader(tmp_path).load("site")

    assert scenario.name == "Site"
    assert scenario.start_area == 101
    assert scenario.threshold == 0.7
    assert scenario.per_area is False
    assert scenario.hazards[1].area_levels == {102: 0.5}
    assert scenario.load_report.areas_loaded == 1
    assert graph.exit_areas() == [103]


def test_scenario_with_inline_graph(tmp_path: Path):
    (tmp_path / "inline.json").write_text(json.dumps({
        "name": "Inline",
        "graph": {
            "nodes": [{"id": 1, "area_id": 1, "x": 0, "y": 0}, {"id": 2, "area_id": 2, "x": 3, "y": 4}],
            "edges": [{"id": 1, "source": 1, "target": 2, "distance": 5}],
        },
        "areas": [{"area_id": 2, "name": "Door", "is_exit": True}],
        "start_area": 1,
    }))

    scenario, graph = load_scenario("inline", tmp_path)

    assert scenario.threshold is None
    assert scenario.hazards == []
    assert graph.edge_count == 1
    assert graph.exit_areas() == [2]


def test_scenario_validation(tmp_path: Path):
    (tmp_path / "nameless.json").write_text(json.dumps({"map": "x.map", "start_area": 1}))
    (tmp_path / "both.json").write_text(json.dumps({
        "name": "Both", "map": "x.map", "graph": {}, "start_area": 1,
    }))
    loader = ScenarioLoader(tmp_path)

    with pytest.raises(ValueError):
        loader.load("nameless")
    with pytest.raises(ValueError):
        loader.load("both")
    with pytest.raises(FileNotFoundError):
        loader.load("missing")


def test_bundled_scenarios_load():
    scenario, graph = ScenarioLoader().load("mall_east_wing")

    assert scenario.per_area is True
    assert scenario.load_report.ok
    assert graph.exit_areas() == [5, 6]
    assert len(scenario.hazards) == 4

    _, atrium = ScenarioLoader().load("atrium_inline")
    assert atrium.exit_areas() == [103]


def test_load_areas_missing_file(tmp_path: Path):
    graph, _ = parse_map(MAP_TEXT)
    with pytest.raises(FileNotFoundError):
        load_areas(tmp_path / "areas.csv", graph)


def test_non_finite_values_are_malformed():
    text = MAP_TEXT + "3 1 3 nan\n4 3 1 inf\n"
    text = text.replace("3 103 10 10\n", "3 103 10 10\n4 104 nan 0\n")

    graph, report = parse_map(text)

    assert graph.node_count == 3
    assert [e.id for e in graph.edges] == [1, 2]
    assert [line.text for line in report.skipped] == ["4 104 nan 0", "3 1 3 nan", "4 3 1 inf"]
