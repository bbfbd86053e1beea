"""FastAPI dependency injection for the orchestrators.

Usage in route handlers::

    @router.get("/{name}/get")
    async def get_workspace(name: str, manager: WorkspaceMgr) -> WorkspaceDetail:
        ...

The orchestrators are built once in the app lifespan and stored on
``app.state``.  Dependencies raise HTTP 503 if the control plane could not
be configured at startup.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from devharbor.orchestrator.managers.releases import ReleaseOrchestrator
from devharbor.orchestrator.managers.workspaces import WorkspaceManager


def _unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Control plane not configured (see DEVHARBOR_* settings).",
    )


async def get_workspace_manager(request: Request) -> WorkspaceManager:
    manager: WorkspaceManager | None = getattr(request.app.state, "workspace_manager", None)
    if manager is None:
        raise _unavailable()
    return manager


async def get_release_orchestrator(request: Request) -> ReleaseOrchestrator:
    orchestrator: ReleaseOrchestrator | None = getattr(request.app.state, "release_orchestrator", None)
    if orchestrator is None:
        raise _unavailable()
    return orchestrator


# -- Annotated type aliases for concise route signatures ---------------------

WorkspaceMgr = Annotated[WorkspaceManager, Depends(get_workspace_manager)]
"""Annotated dependency: workspace reads, mutations, create and delete."""

ReleaseMgr = Annotated[ReleaseOrchestrator, Depends(get_release_orchestrator)]
"""Annotated dependency: release create, get, list and delete."""
