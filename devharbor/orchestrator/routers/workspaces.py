"""Workspace endpoints (RPC-style).

Thin HTTP adapter -- delegates to the workspace manager.  All write
operations use POST; reads use GET.
"""

from __future__ import annotations

from fastapi import APIRouter, status

from devharbor.orchestrator.deps import WorkspaceMgr
from devharbor.orchestrator.errors import OrchestratorError
from devharbor.orchestrator.models.api import WorkspaceCreate, WorkspaceResourcesUpdate
from devharbor.orchestrator.models.workspace import (
    MutationResult,
    TeardownResult,
    WorkspaceDetail,
    WorkspaceListItem,
    WorkspaceSummary,
)
from devharbor.orchestrator.routers.common import to_http

router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.post("/create", response_model=WorkspaceSummary, status_code=status.HTTP_201_CREATED)
async def create_workspace(body: WorkspaceCreate, manager: WorkspaceMgr) -> WorkspaceSummary:
    """Provision a workspace and wait until it is running."""
    try:
        return await manager.create_workspace(body)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.get("/list", response_model=list[WorkspaceListItem])
async def list_workspaces(manager: WorkspaceMgr) -> list[WorkspaceListItem]:
    try:
        return await manager.list_workspaces()
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.get("/{name}/get", response_model=WorkspaceDetail)
async def get_workspace(name: str, manager: WorkspaceMgr) -> WorkspaceDetail:
    try:
        return await manager.get_workspace(name)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.post("/{name}/delete", response_model=TeardownResult)
async def delete_workspace(name: str, manager: WorkspaceMgr) -> TeardownResult:
    """Delete a workspace and everything it owns.  Dependent failures come back as warnings."""
    try:
        return await manager.delete_workspace(name)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.post("/{name}/start", response_model=MutationResult)
async def start_workspace(name: str, manager: WorkspaceMgr) -> MutationResult:
    try:
        return await manager.start(name)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.post("/{name}/stop", response_model=MutationResult)
async def stop_workspace(name: str, manager: WorkspaceMgr) -> MutationResult:
    try:
        return await manager.stop(name)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.post("/{name}/update", response_model=MutationResult)
async def update_workspace(name: str, body: WorkspaceResourcesUpdate, manager: WorkspaceMgr) -> MutationResult:
    """Update CPU and/or memory.  Omitted fields are left unchanged."""
    try:
        return await manager.update_resources(name, cpu=body.cpu, memory=body.memory)
    except OrchestratorError as exc:
        raise to_http(exc) from None
