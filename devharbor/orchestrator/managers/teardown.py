"""Best-effort cascading workspace deletion.

Dependent objects go first, the workspace object last:

1. Service ``<name>`` and the legacy ``<name>-svc``
2. every route carrying the workspace's ownership label
3. Secret ``<name>``
4. the workspace itself

An object that is already gone counts as deleted.  Any other failure on a
dependent object becomes a warning and the cascade carries on; only a
failure deleting the workspace object fails the whole operation.  Running
it twice is therefore safe, and it cleans up after a partial provisioning.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from loguru import logger

from devharbor.orchestrator.errors import NotFoundError, OrchestratorError, TransportError
from devharbor.orchestrator.gateway.base import ControlPlaneGateway
from devharbor.orchestrator.lifecycle.manifests import owner_selector
from devharbor.orchestrator.models.enums import ResourceKind
from devharbor.orchestrator.models.workspace import TeardownResult


class TeardownOrchestrator:
    def __init__(self, gateway: ControlPlaneGateway) -> None:
        self._gateway = gateway

    async def delete(self, name: str) -> TeardownResult:
        """Delete *name* and everything it owns.

        Raises ``TransportError`` only if the workspace object itself could
        not be deleted.
        """
        warnings: list[str] = []

        await self._best_effort(ResourceKind.SERVICE, name, self._gateway.delete_service, warnings)
        await self._best_effort(ResourceKind.SERVICE, f"{name}-svc", self._gateway.delete_service, warnings)

        try:
            routes = await self._gateway.list_routes(owner_selector(name))
        except OrchestratorError as exc:
            warnings.append(f"Failed to list {ResourceKind.ROUTE} objects for {name}: {exc}")
            routes = []
        for route in routes:
            route_name = (route.get("metadata") or {}).get("name")
            if route_name:
                await self._best_effort(ResourceKind.ROUTE, route_name, self._gateway.delete_route, warnings)

        await self._best_effort(ResourceKind.SECRET, name, self._gateway.delete_secret, warnings)

        try:
            await self._gateway.delete_workspace(name)
        except NotFoundError:
            logger.debug("Teardown: workspace {} already absent", name)
        except OrchestratorError as exc:
            logger.error("Teardown: failed to delete workspace {}: {}", name, exc)
            if isinstance(exc, TransportError):
                raise
            msg = f"Failed to delete {ResourceKind.WORKSPACE} {name}: {exc}"
            raise TransportError(msg) from exc

        for warning in warnings:
            logger.warning("Teardown: {}", warning)
        logger.info("Teardown: workspace {} deleted ({} warnings)", name, len(warnings))
        return TeardownResult(
            success=True,
            message=f"Workspace {name} deleted",
            warnings=warnings,
        )

    async def _best_effort(
        self,
        kind: ResourceKind,
        name: str,
        delete: Callable[[str], Awaitable[None]],
        warnings: list[str],
    ) -> None:
        try:
            await delete(name)
        except NotFoundError:
            return
        except OrchestratorError as exc:
            warnings.append(f"Failed to delete {kind} {name}: {exc}")
