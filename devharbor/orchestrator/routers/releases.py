"""Release endpoints (RPC-style).

Thin HTTP adapter -- delegates to the release orchestrator.  A create
against a running workspace returns ``needs_waiting=true``; poll ``get`` to
learn when the release appears.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from devharbor.orchestrator.deps import ReleaseMgr
from devharbor.orchestrator.errors import OrchestratorError
from devharbor.orchestrator.models.api import ReleaseCreate
from devharbor.orchestrator.models.release import ReleaseCreateResult, ReleaseDetail, ReleaseSummary
from devharbor.orchestrator.registry import ShuttingDownError
from devharbor.orchestrator.routers.common import to_http

router = APIRouter(prefix="/releases", tags=["releases"])


@router.post("/create", response_model=ReleaseCreateResult, status_code=status.HTTP_202_ACCEPTED)
async def create_release(body: ReleaseCreate, orchestrator: ReleaseMgr) -> ReleaseCreateResult:
    try:
        return await orchestrator.create_release(body.workspace, body.tag, body.notes)
    except (OrchestratorError, ShuttingDownError) as exc:
        raise to_http(exc) from None


@router.get("/list", response_model=list[ReleaseSummary])
async def list_releases(
    orchestrator: ReleaseMgr,
    workspace: str | None = Query(None, description="Only releases of this workspace."),
) -> list[ReleaseSummary]:
    try:
        return await orchestrator.list_releases(workspace)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.get("/{workspace}/{tag}/get", response_model=ReleaseDetail)
async def get_release(workspace: str, tag: str, orchestrator: ReleaseMgr) -> ReleaseDetail:
    try:
        return await orchestrator.get_release(workspace, tag)
    except OrchestratorError as exc:
        raise to_http(exc) from None


@router.post("/{workspace}/{tag}/delete", status_code=status.HTTP_204_NO_CONTENT)
async def delete_release(workspace: str, tag: str, orchestrator: ReleaseMgr) -> None:
    try:
        await orchestrator.delete_release(workspace, tag)
    except OrchestratorError as exc:
        raise to_http(exc) from None
