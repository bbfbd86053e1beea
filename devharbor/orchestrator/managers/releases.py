"""Release lifecycle: create, inspect, list and delete workspace releases.

A release can only be cut from a stopped workspace.  When the workspace is
still running, ``create_release`` returns at once with ``needs_waiting=True``
and a background task stops the workspace, waits for ``Stopped`` and then
creates the release object.  That task reports nothing back: callers learn
the outcome by polling ``get_release``.  A task that times out is abandoned
with a log line and leaves no trace in the control plane.
"""

from __future__ import annotations

from loguru import logger

from devharbor.orchestrator.errors import (
    AlreadyExistsError,
    NotFoundError,
    OrchestratorError,
    OwnershipMismatchError,
    ReleaseTimeoutError,
)
from devharbor.orchestrator.gateway.base import ControlPlaneGateway
from devharbor.orchestrator.lifecycle.manifests import build_release_body
from devharbor.orchestrator.lifecycle.patches import state_patch
from devharbor.orchestrator.lifecycle.polling import poll_until
from devharbor.orchestrator.lifecycle.status import interpret_release_status, interpret_workspace_status, status_blob
from devharbor.orchestrator.models.enums import ReleasePhase, ResourceKind, StateIntent, WorkspacePhase
from devharbor.orchestrator.models.release import (
    ReleaseCreateResult,
    ReleaseDetail,
    ReleaseSummary,
    release_key,
)
from devharbor.orchestrator.registry import TaskRegistry

# ---------------------------------------------------------------------------
# Object -> view conversion
# ---------------------------------------------------------------------------


def release_summary(obj: dict) -> ReleaseSummary:
    metadata = obj.get("metadata") or {}
    spec = obj.get("spec") or {}
    raw_status = status_blob(obj) or None
    return ReleaseSummary(
        name=metadata.get("name") or "",
        namespace=metadata.get("namespace"),
        workspace=spec.get("devboxName"),
        tag=spec.get("newTag"),
        notes=spec.get("notes"),
        created_at=metadata.get("creationTimestamp"),
        owner_references=metadata.get("ownerReferences"),
        uid=metadata.get("uid"),
        status=interpret_release_status(raw_status),
        phase=(raw_status or {}).get("phase") or "Unknown",
        raw_status=raw_status,
    )


def release_detail(obj: dict) -> ReleaseDetail:
    return ReleaseDetail(**release_summary(obj).model_dump(), spec=obj.get("spec") or {})


class ReleaseOrchestrator:
    def __init__(
        self,
        gateway: ControlPlaneGateway,
        registry: TaskRegistry,
        *,
        poll_interval: float = 1.0,
        timeout: float = 120.0,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._poll_interval = poll_interval
        self._timeout = timeout

    # -- Create ----------------------------------------------------------------

    async def create_release(self, workspace: str, tag: str, notes: str = "") -> ReleaseCreateResult:
        """Create release ``<workspace>-<tag>``, stopping the workspace first if needed.

        Raises ``NotFoundError`` if the workspace is missing and
        ``AlreadyExistsError`` if the release key is already taken.
        """
        ws = await self._gateway.get_workspace(workspace)
        key = release_key(workspace, tag)
        await self._ensure_release_absent(key)

        uid = (ws.get("metadata") or {}).get("uid")
        phase = interpret_workspace_status(ws.get("status"))

        if phase == WorkspacePhase.STOPPED:
            body = build_release_body(workspace, tag, notes, uid)
            try:
                created = await self._gateway.create_release(body)
            except AlreadyExistsError:
                logger.info("Release: {} created concurrently, treating as in progress", key)
                return ReleaseCreateResult(
                    needs_waiting=False,
                    message=f"Release {key} is already in progress",
                    release=self._pending_summary(workspace, tag, notes, ReleasePhase.PROCESSING),
                )
            logger.info("Release: created {} from stopped workspace", key)
            return ReleaseCreateResult(
                needs_waiting=False,
                message=f"Release {key} created",
                release=release_summary(created or body),
            )

        self._registry.spawn(
            self._release_when_stopped(workspace, tag, notes, uid, phase),
            name=f"release:{key}",
        )
        logger.info("Release: workspace {} is {}, release {} deferred", workspace, phase, key)
        return ReleaseCreateResult(
            needs_waiting=True,
            message=f"Workspace {workspace} is being stopped; release {key} will be created once it is Stopped",
            release=self._pending_summary(workspace, tag, notes, ReleasePhase.PROCESSING),
        )

    async def _ensure_release_absent(self, key: str) -> None:
        try:
            await self._gateway.get_release(key)
        except NotFoundError:
            return
        raise AlreadyExistsError(ResourceKind.RELEASE, key)

    def _pending_summary(self, workspace: str, tag: str, notes: str, status: ReleasePhase) -> ReleaseSummary:
        return ReleaseSummary(
            name=release_key(workspace, tag),
            namespace=self._gateway.namespace,
            workspace=workspace,
            tag=tag,
            notes=notes,
            status=status,
        )

    # -- Background path -------------------------------------------------------

    async def _release_when_stopped(
        self,
        workspace: str,
        tag: str,
        notes: str,
        uid: str | None,
        phase: str,
    ) -> None:
        key = release_key(workspace, tag)
        try:
            await self._stop_then_release(workspace, tag, notes, uid, phase)
        except ReleaseTimeoutError as exc:
            logger.warning("Release: abandoning {}: {}", key, exc)
        except OrchestratorError as exc:
            logger.error("Release: background task for {} failed: {}", key, exc)

    async def _stop_then_release(
        self,
        workspace: str,
        tag: str,
        notes: str,
        uid: str | None,
        phase: str,
    ) -> None:
        key = release_key(workspace, tag)
        if phase != WorkspacePhase.STOPPING:
            await self._gateway.patch_workspace(workspace, state_patch(StateIntent.STOPPED))
            logger.debug("Release: stop requested for {}", workspace)

        stopped = await poll_until(
            lambda: self._gateway.get_workspace(workspace),
            lambda ws: interpret_workspace_status(ws.get("status")) == WorkspacePhase.STOPPED,
            interval=self._poll_interval,
            timeout=self._timeout,
            label=f"release:{key}",
        )
        if stopped is None:
            raise ReleaseTimeoutError(workspace, self._timeout)

        uid = (stopped.get("metadata") or {}).get("uid") or uid
        try:
            await self._gateway.create_release(build_release_body(workspace, tag, notes, uid))
        except AlreadyExistsError:
            logger.info("Release: {} already exists, nothing to do", key)
            return
        logger.info("Release: created {} after stopping workspace", key)

    # -- Read / delete ---------------------------------------------------------

    async def _get_owned(self, workspace: str, tag: str) -> dict:
        key = release_key(workspace, tag)
        obj = await self._gateway.get_release(key)
        owner = (obj.get("spec") or {}).get("devboxName")
        if owner != workspace:
            raise OwnershipMismatchError(key, workspace, owner)
        return obj

    async def get_release(self, workspace: str, tag: str) -> ReleaseDetail:
        """Raises ``NotFoundError`` or ``OwnershipMismatchError``."""
        return release_detail(await self._get_owned(workspace, tag))

    async def delete_release(self, workspace: str, tag: str) -> None:
        """Delete a release after checking it exists and belongs to *workspace*."""
        await self._get_owned(workspace, tag)
        key = release_key(workspace, tag)
        await self._gateway.delete_release(key)
        logger.info("Release: deleted {}", key)

    async def list_releases(self, workspace: str | None = None) -> list[ReleaseSummary]:
        """All releases in the namespace, optionally only those of *workspace*."""
        items = await self._gateway.list_releases()
        summaries = [release_summary(obj) for obj in items]
        if workspace is not None:
            summaries = [s for s in summaries if s.workspace == workspace]
        return summaries
