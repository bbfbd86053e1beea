"""Data models for the orchestrator."""

from devharbor.orchestrator.models.api import (
    ReleaseCreate,
    WorkspaceCreate,
    WorkspaceResourcesUpdate,
)
from devharbor.orchestrator.models.enums import (
    PortType,
    ReleasePhase,
    ResourceKind,
    StateIntent,
    WorkspacePhase,
)
from devharbor.orchestrator.models.release import (
    ReleaseCreateResult,
    ReleaseDetail,
    ReleaseSummary,
    release_key,
)
from devharbor.orchestrator.models.workspace import (
    AppPort,
    CommitRecord,
    MutationResult,
    PortInfo,
    TeardownResult,
    WorkspaceDetail,
    WorkspaceListItem,
    WorkspaceRuntime,
    WorkspaceSummary,
)

__all__ = [
    "AppPort",
    "CommitRecord",
    "MutationResult",
    "PortInfo",
    "PortType",
    "ReleaseCreate",
    "ReleaseCreateResult",
    "ReleaseDetail",
    "ReleasePhase",
    "ReleaseSummary",
    "ResourceKind",
    "StateIntent",
    "TeardownResult",
    "WorkspaceCreate",
    "WorkspaceDetail",
    "WorkspaceListItem",
    "WorkspacePhase",
    "WorkspaceResourcesUpdate",
    "WorkspaceRuntime",
    "WorkspaceSummary",
    "release_key",
]
