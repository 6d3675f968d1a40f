"""Tests for the colour-blind-safe tags printed by each log helper.

These tests assert that:
- Every helper prefixes its message with the matching tag
- EVAC_NO_COLOR strips ANSI codes, otherwise output is wrapped in them
- Rejected graph insertions and failed searches print the [!] tag
"""

from __future__ import annotations

import contextlib
import io

import pytest

from evacroute.exceptions import DuplicateIdError, RouteNotFoundError
from evacroute.logging_utils import (
    LOG_TAG_DETERMINISTIC,
    LOG_TAG_ERROR,
    LOG_TAG_HAZARD,
    LOG_TAG_INFO,
    LOG_TAG_SUCCESS,
    Color,
    colored,
    log_deterministic,
    log_error,
    log_hazard,
    log_info,
    log_success,
)
from evacroute.pathfinder import PathFinder


def _capture(fn, *args) -> str:
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer):
        fn(*args)
    return buffer.getvalue()


@pytest.mark.parametrize(
    "helper, tag",
    [
        (log_deterministic, LOG_TAG_DETERMINISTIC),
        (log_hazard, LOG_TAG_HAZARD),
        (log_error, LOG_TAG_ERROR),
        (log_success, LOG_TAG_SUCCESS),
        (log_info, LOG_TAG_INFO),
    ],
)
def test_helpers_prefix_tag(monkeypatch, helper, tag):
    monkeypatch.setenv("EVAC_NO_COLOR", "1")

    assert _capture(helper, "hello") == f"{tag} hello\n"


def test_colored_respects_no_color(monkeypatch):
    monkeypatch.delenv("EVAC_NO_COLOR", raising=False)
    assert colored("x", Color.RED) == f"{Color.RED.value}x{Color.RESET.value}"
    assert colored("x", Color.RED, bold=True).startswith(Color.BOLD.value)

    monkeypatch.setenv("EVAC_NO_COLOR", "1")
    assert colored("x", Color.RED) == "x"


def test_rejected_insertion_logs_error_tag(square_graph, monkeypatch):
    monkeypatch.setenv("EVAC_NO_COLOR", "1")
    buffer = io.StringIO()

    with contextlib.redirect_stdout(buffer), pytest.raises(DuplicateIdError):
        square_graph.add_node(1, 101, 0, 0)

    assert "[!] [Graph] Node 1 already exists" in buffer.getvalue()


def test_search_logs_success_and_failure(square_graph, monkeypatch):
    monkeypatch.setenv("EVAC_NO_COLOR", "1")
    finder = PathFinder(square_graph)

    found = _capture(finder.find_path, 101, 103)
    buffer = io.StringIO()
    with contextlib.redirect_stdout(buffer), pytest.raises(RouteNotFoundError):
        finder.find_path(102, 999)

    assert found.startswith("[✓] [PathFinder] Route from area 101 to area 103")
    assert "[!] [PathFinder]" in buffer.getvalue()
