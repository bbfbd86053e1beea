"""Workspace views returned by the orchestrator.

A workspace is a ``Devbox`` custom resource.  None of these models is
persisted -- they are projections of the latest object read from the
control plane, and ``status`` is always recomputed from the raw blob.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from devharbor.orchestrator.models.enums import PortType


class AppPort(BaseModel):
    name: str | None = None
    port: int | None = None
    target_port: int | None = None
    protocol: str | None = None


class PortInfo(BaseModel):
    """One entry of the merged ports view (app, container, extra)."""

    name: str | None = None
    port: int | None = None
    protocol: str | None = None
    target_port: int | None = None
    url: str | None = None
    is_primary: bool = False
    type: PortType


class CommitRecord(BaseModel):
    image: str | None = None
    time: str | None = None
    status: str | None = None
    node: str | None = None


class WorkspaceSummary(BaseModel):
    """Result of a successful provisioning run."""

    name: str
    status: str
    url: str | None = None
    cpu: str
    memory: str
    created_at: str
    namespace: str


class WorkspaceListItem(WorkspaceSummary):
    """Summary row with the extra fields shown in listings."""

    uid: str = ""
    image: str = ""
    template_id: str = ""
    phase: str = "Unknown"
    network_type: str = ""
    node_port: int | None = None
    app_ports: list[AppPort] = Field(default_factory=list)
    last_commit: CommitRecord | None = None
    last_state: dict | None = None
    current_state: Any = None


class WorkspaceRuntime(BaseModel):
    last_running_node: str | None = None
    last_running_pod: str | None = None
    last_start_time: str | None = None
    commit_history: list[dict] = Field(default_factory=list)


class WorkspaceDetail(BaseModel):
    """Full view of a single workspace."""

    name: str
    namespace: str | None = None
    uid: str | None = None
    resource_version: str | None = None
    generation: int | None = None
    created_at: str | None = None

    state: str
    phase: str = "Unknown"

    network_type: str = "Unknown"
    node_port: int | None = None
    url: str
    ports: list[PortInfo] = Field(default_factory=list)

    cpu: str | None = None
    memory: str | None = None
    image: str | None = None
    template_id: str | None = None

    user: str | None = None
    working_dir: str | None = None
    release_command: list[str] | None = None
    release_args: list[str] | None = None

    runtime: WorkspaceRuntime = Field(default_factory=WorkspaceRuntime)

    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    finalizers: list[str] = Field(default_factory=list)

    spec: dict | None = None
    status: dict | None = None


class TeardownResult(BaseModel):
    success: bool = True
    message: str
    warnings: list[str] = Field(default_factory=list)


class MutationResult(BaseModel):
    success: bool = True
    message: str
