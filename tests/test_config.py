"""Tests for Config validation and guard helpers."""

import pytest

from evacroute.config import Config


def test_defaults_validate():
    Config.validate()
    assert "evacroute Configuration:" in Config.display()


def test_guards_disabled_at_zero(monkeypatch):
    monkeypatch.setattr(Config, "MAX_SEARCH_ITERATIONS", 0)
    monkeypatch.setattr(Config, "SEARCH_DEADLINE_SECONDS", 0.0)

    assert Config.max_search_iterations() is None
    assert Config.search_deadline_seconds() is None

    monkeypatch.setattr(Config, "SEARCH_DEADLINE_SECONDS", 0.05)
    assert Config.search_deadline_seconds() == 0.05


@pytest.mark.parametrize(
    "attribute, value",
    [
        ("MAX_NODES", 0),
        ("MAX_EDGES", -1),
        ("HAZARD_THRESHOLD", 1.2),
        ("RISK_WEIGHT", -0.5),
        ("HAZARD_NORMALIZER", 0.0),
        ("TICK_INTERVAL_SECONDS", -1.0),
    ],
)
def test_out_of_range_values_rejected(monkeypatch, attribute, value):
    monkeypatch.setattr(Config, attribute, value)

    with pytest.raises(ValueError):
        Config.validate()


def test_scenarios_dir_points_at_bundled_examples():
    assert Config.SCENARIOS_DIR.name == "scenarios"
    assert (Config.SCENARIOS_DIR / "mall_east_wing.json").exists()
