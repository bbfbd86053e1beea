"""Unit tests for status interpretation."""

from __future__ import annotations

import pytest

from devharbor.orchestrator.lifecycle.status import (
    StatusView,
    interpret_release_status,
    interpret_workspace_status,
)

# ---------------------------------------------------------------------------
# Workspace -- one indicator per blob
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("blob", [None, {}, [], "garbage", 42])
def test_workspace_empty_or_malformed_is_stopped(blob: object) -> None:
    assert interpret_workspace_status(blob) == "Stopped"


@pytest.mark.parametrize(
    ("blob", "expected"),
    [
        ({"phase": "Running"}, "Running"),
        ({"phase": "Pending"}, "Pending"),
        ({"phase": "SomethingNew"}, "SomethingNew"),
        ({"state": "Stopping"}, "Stopping"),
        ({"running": True}, "Running"),
        ({"pending": True}, "Pending"),
        ({"terminated": True}, "Terminated"),
        ({"stopping": True}, "Stopping"),
        ({"network": {"type": "NodePort"}}, "Unknown"),
    ],
)
def test_workspace_single_indicator(blob: dict, expected: str) -> None:
    assert interpret_workspace_status(blob) == expected


def test_workspace_phase_wins_over_flags() -> None:
    assert interpret_workspace_status({"phase": "Stopped", "running": True}) == "Stopped"


def test_workspace_state_wins_over_flags() -> None:
    assert interpret_workspace_status({"state": "Pending", "running": True}) == "Pending"


def test_workspace_ignores_conditions() -> None:
    blob = {"conditions": [{"type": "Ready", "status": "True"}]}
    assert interpret_workspace_status(blob) == "Unknown"


def test_workspace_non_string_phase_is_ignored() -> None:
    assert interpret_workspace_status({"phase": {"nested": 1}, "pending": True}) == "Pending"


# ---------------------------------------------------------------------------
# Release -- one indicator per blob
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("blob", [None, {}, "garbage"])
def test_release_empty_is_pending(blob: object) -> None:
    assert interpret_release_status(blob) == "Pending"


@pytest.mark.parametrize(
    ("blob", "expected"),
    [
        ({"phase": "Success"}, "Success"),
        ({"conditions": [{"type": "Ready", "status": "True"}]}, "Success"),
        ({"conditions": [{"type": "Failed", "status": "True"}]}, "Failed"),
        ({"conditions": [{"type": "Building", "status": "True"}]}, "Building"),
        ({"conditions": [{"status": "True"}]}, "Processing"),
        ({"state": "Queued"}, "Queued"),
        ({"ready": True}, "Success"),
        ({"ready": False}, "Failed"),
        ({"ready": "yes"}, "Processing"),
        ({"other": 1}, "Processing"),
    ],
)
def test_release_single_indicator(blob: dict, expected: str) -> None:
    assert interpret_release_status(blob) == expected


def test_release_latest_condition_wins() -> None:
    blob = {
        "conditions": [
            {"type": "Ready", "status": "True", "lastTransitionTime": "2026-01-01T00:00:05Z"},
            {"type": "Failed", "status": "True", "lastTransitionTime": "2026-01-01T00:00:01Z"},
            {"type": "Building", "status": "True"},
        ]
    }
    assert interpret_release_status(blob) == "Success"


def test_release_ready_false_condition_echoes_type() -> None:
    blob = {"conditions": [{"type": "Ready", "status": "False"}]}
    assert interpret_release_status(blob) == "Ready"


def test_release_phase_wins_over_conditions() -> None:
    blob = {"phase": "Pending", "conditions": [{"type": "Ready", "status": "True"}]}
    assert interpret_release_status(blob) == "Pending"


def test_release_conditions_win_over_ready_flag() -> None:
    blob = {"ready": False, "conditions": [{"type": "Ready", "status": "True"}]}
    assert interpret_release_status(blob) == "Success"


# ---------------------------------------------------------------------------
# StatusView
# ---------------------------------------------------------------------------


def test_status_view_drops_malformed_members() -> None:
    view = StatusView.parse(
        {
            "conditions": ["not-a-dict", {"type": "Ready", "lastTransitionTime": "not-a-date"}],
            "ready": "maybe",
        }
    )
    assert not view.empty
    assert len(view.conditions) == 1
    assert view.ready is None


def test_interpretation_is_deterministic() -> None:
    blob = {"conditions": [{"type": "A", "lastTransitionTime": "2026-01-01T00:00:00Z"}, {"type": "B"}]}
    assert {interpret_release_status(blob) for _ in range(5)} == {"A"}
