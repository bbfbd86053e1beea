"""Shared test fixtures.

Tests never touch a real cluster: orchestrator tests run against the
in-memory ``FakeGateway`` (``tests/orchestrator/fakes.py``) and gateway tests
mock the Kubernetes client.
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

from devharbor.orchestrator.settings import get_settings


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate every test from DEVHARBOR_* variables in the environment."""
    for key in list(os.environ):
        if key.startswith("DEVHARBOR_"):
            monkeypatch.delenv(key)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
