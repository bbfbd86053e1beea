"""Shared enumerations used across the orchestrator."""

from __future__ import annotations

from enum import StrEnum

# -- Phases ------------------------------------------------------------------


class WorkspacePhase(StrEnum):
    """Canonical workspace lifecycle phase, derived from the status blob."""

    PENDING = "Pending"
    RUNNING = "Running"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    TERMINATED = "Terminated"
    UNKNOWN = "Unknown"


class ReleasePhase(StrEnum):
    """Canonical release phase, derived from the status blob."""

    PENDING = "Pending"
    PROCESSING = "Processing"
    SUCCESS = "Success"
    FAILED = "Failed"


# -- Intent ------------------------------------------------------------------


class StateIntent(StrEnum):
    """Declared ``spec.state`` of a workspace."""

    RUNNING = "Running"
    STOPPED = "Stopped"


# -- Resources ---------------------------------------------------------------


class ResourceKind(StrEnum):
    WORKSPACE = "Devbox"
    RELEASE = "DevBoxRelease"
    SERVICE = "Service"
    ROUTE = "Ingress"
    SECRET = "Secret"


class PortType(StrEnum):
    """Origin of an entry in the workspace ports view."""

    APP = "app"
    CONTAINER = "container"
    EXTRA = "extra"
