"""Workspace provisioning.

``create`` validates input, probes for an existing workspace, applies the
workspace, service and route objects strictly in that order, then waits for
the workspace to report ``Running``.  Application is not atomic: a failure
on object *k* leaves objects before it in place.  Cleaning up is left to an
explicit teardown.
"""

from __future__ import annotations

import re

from loguru import logger

from devharbor.orchestrator.errors import (
    AlreadyExistsError,
    NotFoundError,
    OrchestratorError,
    ProvisioningFailedError,
    ProvisioningTimeoutError,
    ValidationError,
)
from devharbor.orchestrator.gateway.base import ControlPlaneGateway
from devharbor.orchestrator.lifecycle.endpoints import lookup_route, resolve_url
from devharbor.orchestrator.lifecycle.manifests import DEFAULT_CPU, DEFAULT_MEMORY, render_manifests
from devharbor.orchestrator.lifecycle.polling import poll_until
from devharbor.orchestrator.lifecycle.status import interpret_workspace_status
from devharbor.orchestrator.models.api import WorkspaceCreate
from devharbor.orchestrator.models.enums import ResourceKind, WorkspacePhase
from devharbor.orchestrator.models.workspace import WorkspaceSummary

NAME_PATTERN = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")
NAME_MAX_LENGTH = 63
URL_PREFIX_MIN_LENGTH = 8
URL_PREFIX_MAX_LENGTH = 20


def validate_create_params(params: WorkspaceCreate) -> None:
    """Raise ``ValidationError`` if *params* cannot be provisioned."""
    for field in ("name", "url_prefix", "url_suffix", "template_id", "image"):
        value = getattr(params, field)
        if not value or not value.strip():
            msg = f"Missing required field: {field}"
            raise ValidationError(msg)

    if len(params.name) > NAME_MAX_LENGTH or not NAME_PATTERN.match(params.name):
        msg = (
            f"Invalid workspace name {params.name!r}: must be 1-{NAME_MAX_LENGTH} lowercase "
            "alphanumeric characters or '-', starting and ending with an alphanumeric character"
        )
        raise ValidationError(msg)

    if not URL_PREFIX_MIN_LENGTH <= len(params.url_prefix) <= URL_PREFIX_MAX_LENGTH:
        msg = f"url_prefix must be {URL_PREFIX_MIN_LENGTH}-{URL_PREFIX_MAX_LENGTH} characters long"
        raise ValidationError(msg)


class ProvisioningOrchestrator:
    def __init__(
        self,
        gateway: ControlPlaneGateway,
        *,
        poll_interval: float = 5.0,
        timeout: float = 120.0,
    ) -> None:
        self._gateway = gateway
        self._poll_interval = poll_interval
        self._timeout = timeout

    async def create(self, params: WorkspaceCreate) -> WorkspaceSummary:
        """Provision a workspace and wait until it is ``Running``.

        Raises:
            ValidationError: bad input; no control-plane call was made.
            AlreadyExistsError: a workspace with this name exists.
            ProvisioningFailedError: applying one of the objects failed.
            ProvisioningTimeoutError: the workspace never reached ``Running``.
        """
        validate_create_params(params)
        await self._ensure_absent(params.name)

        manifests = render_manifests(
            name=params.name,
            url_prefix=params.url_prefix,
            url_suffix=params.url_suffix,
            template_id=params.template_id,
            image=params.image,
            cpu=params.cpu,
            memory=params.memory,
        )
        for kind, body in manifests.documents():
            await self._apply(kind, body)

        logger.info("Provisioning: objects applied for {}, waiting for Running", params.name)
        workspace = await poll_until(
            lambda: self._gateway.get_workspace(params.name),
            lambda ws: interpret_workspace_status(ws.get("status")) == WorkspacePhase.RUNNING,
            interval=self._poll_interval,
            timeout=self._timeout,
            label=f"provision:{params.name}",
        )
        if workspace is None:
            logger.warning("Provisioning: {} not Running after {}s", params.name, self._timeout)
            raise ProvisioningTimeoutError(params.name, self._timeout)

        route = await lookup_route(self._gateway, params.name)
        resource = (workspace.get("spec") or {}).get("resource") or {}
        metadata = workspace.get("metadata") or {}
        logger.info("Provisioning: {} is Running", params.name)
        return WorkspaceSummary(
            name=params.name,
            status=WorkspacePhase.RUNNING,
            url=resolve_url(workspace, route),
            cpu=resource.get("cpu") or params.cpu or DEFAULT_CPU,
            memory=resource.get("memory") or params.memory or DEFAULT_MEMORY,
            created_at=metadata.get("creationTimestamp") or "",
            namespace=metadata.get("namespace") or self._gateway.namespace,
        )

    async def _ensure_absent(self, name: str) -> None:
        try:
            await self._gateway.get_workspace(name)
        except NotFoundError:
            return
        except OrchestratorError as exc:
            # An unreadable workspace must not block creation.
            logger.warning("Provisioning: existence probe for {} failed, proceeding: {}", name, exc)
            return
        raise AlreadyExistsError(ResourceKind.WORKSPACE, name)

    async def _apply(self, kind: ResourceKind, body: dict) -> None:
        creators = {
            ResourceKind.WORKSPACE: self._gateway.create_workspace,
            ResourceKind.SERVICE: self._gateway.create_service,
            ResourceKind.ROUTE: self._gateway.create_route,
        }
        try:
            await creators[kind](body)
        except OrchestratorError as exc:
            logger.error("Provisioning: failed to apply {} {}: {}", kind, body["metadata"]["name"], exc)
            raise ProvisioningFailedError(kind, exc) from exc
        logger.debug("Provisioning: applied {} {}", kind, body["metadata"]["name"])
