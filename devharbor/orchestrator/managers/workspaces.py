"""Workspace operations exposed to the API layer.

Reads (list, get) and the state/resource mutations live here; create and
delete delegate to the provisioning and teardown orchestrators.  Mutations
only patch the declared intent and return: callers that need to know when a
workspace actually started or stopped poll ``get_workspace``.
"""

from __future__ import annotations

import json

from loguru import logger

from devharbor.orchestrator.errors import TransportError
from devharbor.orchestrator.gateway.base import ControlPlaneGateway
from devharbor.orchestrator.lifecycle.endpoints import build_ports, lookup_route, resolve_url
from devharbor.orchestrator.lifecycle.patches import PatchBuilder, state_patch
from devharbor.orchestrator.lifecycle.status import interpret_workspace_status, status_blob
from devharbor.orchestrator.managers.provisioning import ProvisioningOrchestrator
from devharbor.orchestrator.managers.teardown import TeardownOrchestrator
from devharbor.orchestrator.models.api import WorkspaceCreate
from devharbor.orchestrator.models.enums import StateIntent
from devharbor.orchestrator.models.workspace import (
    AppPort,
    CommitRecord,
    MutationResult,
    TeardownResult,
    WorkspaceDetail,
    WorkspaceListItem,
    WorkspaceRuntime,
    WorkspaceSummary,
)

# ---------------------------------------------------------------------------
# Object -> view conversion
# ---------------------------------------------------------------------------


def workspace_list_item(obj: dict) -> WorkspaceListItem:
    metadata = obj.get("metadata") or {}
    spec = obj.get("spec") or {}
    status = status_blob(obj)
    resource = spec.get("resource") or {}
    history = status.get("commitHistory") or []
    last = history[0] if history and isinstance(history[0], dict) else None
    return WorkspaceListItem(
        name=metadata.get("name") or "Unknown",
        status=interpret_workspace_status(status),
        cpu=resource.get("cpu") or "Unknown",
        memory=resource.get("memory") or "Unknown",
        created_at=metadata.get("creationTimestamp") or "",
        namespace=metadata.get("namespace") or "",
        uid=metadata.get("uid") or "",
        image=spec.get("image") or "",
        template_id=spec.get("templateID") or "",
        phase=status.get("phase") or "Unknown",
        network_type=(spec.get("network") or {}).get("type") or "",
        node_port=(status.get("network") or {}).get("nodePort"),
        app_ports=[
            AppPort(
                name=port.get("name"),
                port=port.get("port"),
                target_port=port.get("targetPort"),
                protocol=port.get("protocol"),
            )
            for port in (spec.get("config") or {}).get("appPorts") or []
        ],
        last_commit=CommitRecord(**{k: last.get(k) for k in ("image", "time", "status", "node")}) if last else None,
        last_state=status.get("lastState"),
        current_state=status.get("state"),
    )


def workspace_detail(obj: dict, route: dict | None) -> WorkspaceDetail:
    metadata = obj.get("metadata") or {}
    spec = obj.get("spec") or {}
    status = status_blob(obj)
    config = spec.get("config") or {}
    resource = spec.get("resource") or {}
    history = status.get("commitHistory") or []
    last = history[0] if history and isinstance(history[0], dict) else {}
    return WorkspaceDetail(
        name=metadata.get("name") or "",
        namespace=metadata.get("namespace"),
        uid=metadata.get("uid"),
        resource_version=metadata.get("resourceVersion"),
        generation=metadata.get("generation"),
        created_at=metadata.get("creationTimestamp"),
        state=interpret_workspace_status(status),
        phase=status.get("phase") or "Unknown",
        network_type=(status.get("network") or {}).get("type") or "Unknown",
        node_port=(status.get("network") or {}).get("nodePort"),
        url=resolve_url(obj, route),
        ports=build_ports(obj, route),
        cpu=resource.get("cpu"),
        memory=resource.get("memory"),
        image=spec.get("image"),
        template_id=spec.get("templateID"),
        user=config.get("user"),
        working_dir=config.get("workingDir"),
        release_command=config.get("releaseCommand"),
        release_args=config.get("releaseArgs"),
        runtime=WorkspaceRuntime(
            last_running_node=last.get("node"),
            last_running_pod=last.get("pod"),
            last_start_time=((status.get("lastState") or {}).get("running") or {}).get("startedAt"),
            commit_history=history,
        ),
        labels=metadata.get("labels") or {},
        annotations=metadata.get("annotations") or {},
        finalizers=metadata.get("finalizers") or [],
        spec=obj.get("spec"),
        status=status or None,
    )


class WorkspaceManager:
    def __init__(
        self,
        gateway: ControlPlaneGateway,
        provisioning: ProvisioningOrchestrator,
        teardown: TeardownOrchestrator,
    ) -> None:
        self._gateway = gateway
        self._provisioning = provisioning
        self._teardown = teardown

    # -- Lifecycle -------------------------------------------------------------

    async def create_workspace(self, params: WorkspaceCreate) -> WorkspaceSummary:
        return await self._provisioning.create(params)

    async def delete_workspace(self, name: str) -> TeardownResult:
        return await self._teardown.delete(name)

    # -- Reads -----------------------------------------------------------------

    async def list_workspaces(self) -> list[WorkspaceListItem]:
        """All workspaces in the namespace.

        Falls back to ``kubectl get devbox -o json`` when the API read fails.
        """
        try:
            items = await self._gateway.list_workspaces()
        except TransportError as exc:
            logger.warning("Workspaces: API list failed, falling back to kubectl: {}", exc)
            items = await self._list_via_kubectl()
        return [workspace_list_item(obj) for obj in items]

    async def _list_via_kubectl(self) -> list[dict]:
        result = await self._gateway.execute(["get", "devbox", "-o", "json"])
        if not result.success:
            msg = f"kubectl list failed: {result.error or result.stderr}"
            raise TransportError(msg)
        try:
            data = json.loads(result.stdout or "{}")
        except json.JSONDecodeError as exc:
            msg = f"Unparseable kubectl output: {exc}"
            raise TransportError(msg) from None
        return list(data.get("items") or [])

    async def get_workspace(self, name: str) -> WorkspaceDetail:
        """Full view of *name*.  Raises ``NotFoundError`` if missing."""
        obj = await self._gateway.get_workspace(name)
        route = await lookup_route(self._gateway, name)
        return workspace_detail(obj, route)

    # -- Mutations -------------------------------------------------------------

    async def start(self, name: str) -> MutationResult:
        await self._gateway.patch_workspace(name, state_patch(StateIntent.RUNNING))
        logger.info("Workspaces: start requested for {}", name)
        return MutationResult(message=f"Workspace {name} start requested")

    async def stop(self, name: str) -> MutationResult:
        await self._gateway.patch_workspace(name, state_patch(StateIntent.STOPPED))
        logger.info("Workspaces: stop requested for {}", name)
        return MutationResult(message=f"Workspace {name} stop requested")

    async def update_resources(self, name: str, cpu: str | None = None, memory: str | None = None) -> MutationResult:
        """Patch only the supplied quantities.  Raises ``ValidationError`` if neither is given."""
        builder = PatchBuilder().cpu(cpu).memory(memory)
        patch = builder.build()
        await self._gateway.patch_workspace(name, patch)
        changes = ", ".join(f"{field}={patch['spec']['resource'][field]}" for field in builder.fields())
        logger.info("Workspaces: resources of {} updated ({})", name, changes)
        return MutationResult(message=f"Workspace {name} resources updated ({changes})")
