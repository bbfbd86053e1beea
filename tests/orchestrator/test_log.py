"""Tests for the loguru setup: namespace tagging, client log levels, token masking."""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator

import pytest
from loguru import logger

from devharbor.orchestrator.log import redact, setup_logging


@pytest.fixture
def messages() -> Iterator[list[str]]:
    setup_logging("INFO", namespace="ns-test")
    captured: list[str] = []
    logger.add(lambda msg: captured.append(str(msg).rstrip("\n")), format="{extra[namespace]} {message}")
    yield captured
    logger.remove()
    logger.configure(extra={}, patcher=None)
    logger.add(sys.stderr)
    logging.basicConfig(handlers=[], force=True)


def test_lines_carry_namespace(messages: list[str]) -> None:
    logger.info("listing workspaces")
    assert "ns-test listing workspaces" in messages


def test_bearer_token_masked(messages: list[str]) -> None:
    logger.warning("request failed: Authorization: Bearer abc.def.ghi")
    assert messages[-1] == "ns-test request failed: Authorization: Bearer ***"


def test_stdlib_records_are_intercepted_and_masked(messages: list[str]) -> None:
    logging.getLogger("kubernetes.client.rest").warning("kubectl --token s3cret get devbox")
    assert messages[-1] == "ns-test kubectl --token *** get devbox"


def test_client_loggers_follow_service_level() -> None:
    setup_logging("INFO")
    assert logging.getLogger("kubernetes.client.rest").level == logging.WARNING
    assert logging.getLogger("urllib3.connectionpool").level == logging.WARNING

    setup_logging("debug")
    assert logging.getLogger("kubernetes.client.rest").level == logging.DEBUG
    assert logging.getLogger("uvicorn.access").level == logging.WARNING

    logger.remove()
    logger.configure(extra={}, patcher=None)
    logger.add(sys.stderr)
    logging.basicConfig(handlers=[], force=True)


def test_redact_leaves_plain_text() -> None:
    assert redact("created release demo-1-1.0.0") == "created release demo-1-1.0.0"
    assert redact("--token=abc") == "--token=***"
