from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.routing import APIRouter
from loguru import logger

from devharbor.orchestrator.gateway.base import ControlPlaneGateway
from devharbor.orchestrator.gateway.kube import KubeGateway
from devharbor.orchestrator.log import setup_logging
from devharbor.orchestrator.managers.provisioning import ProvisioningOrchestrator
from devharbor.orchestrator.managers.releases import ReleaseOrchestrator
from devharbor.orchestrator.managers.teardown import TeardownOrchestrator
from devharbor.orchestrator.managers.workspaces import WorkspaceManager
from devharbor.orchestrator.registry import TaskRegistry
from devharbor.orchestrator.settings import DevharborSettings, get_settings


def build_orchestrators(
    gateway: ControlPlaneGateway,
    registry: TaskRegistry,
    settings: DevharborSettings,
) -> tuple[WorkspaceManager, ReleaseOrchestrator]:
    """Wire the orchestrators around one shared gateway."""
    provisioning = ProvisioningOrchestrator(
        gateway,
        poll_interval=settings.provision_poll_interval,
        timeout=settings.provision_timeout,
    )
    workspaces = WorkspaceManager(gateway, provisioning, TeardownOrchestrator(gateway))
    releases = ReleaseOrchestrator(
        gateway,
        registry,
        poll_interval=settings.release_poll_interval,
        timeout=settings.release_timeout,
    )
    return workspaces, releases


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    # -- Startup ---------------------------------------------------------------
    settings = get_settings()
    setup_logging(settings.log_level, namespace=settings.namespace)
    logger.info("Devharbor starting (host={}, port={}, namespace={})", settings.host, settings.port, settings.namespace)

    # -- Initialise state fields (always present, possibly None) ----------------
    _app.state.gateway = None
    _app.state.workspace_manager = None
    _app.state.release_orchestrator = None

    registry = TaskRegistry(max_concurrency=settings.max_background_tasks)
    _app.state.registry = registry

    # -- Control plane ---------------------------------------------------------
    gateway: KubeGateway | None = None
    try:
        gateway = KubeGateway.from_settings(settings)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Kubernetes: no usable configuration ({}) -- workspace features disabled", exc)

    if gateway is not None:
        if not await gateway.verify_connection():
            logger.warning("Kubernetes: namespace {} is not reachable yet", settings.namespace)
        _app.state.gateway = gateway
        _app.state.workspace_manager, _app.state.release_orchestrator = build_orchestrators(
            gateway, registry, settings
        )
        logger.info("Orchestrators: initialised (namespace={})", gateway.namespace)

    yield

    # -- Shutdown --------------------------------------------------------------
    logger.info("Devharbor shutting down (background_tasks={})", registry.active_count)

    # 1. Stop accepting new background work.
    registry.begin_shutdown()

    # 2. Let in-flight release tasks finish.
    if registry.active_count > 0:
        timeout = settings.graceful_shutdown_timeout
        logger.info("Waiting for {} background tasks to finish (timeout={}s)...", registry.active_count, timeout)
        drained = await registry.wait_until_drained(timeout=timeout)
        if not drained:
            registry.cancel_all()
            await registry.wait_until_drained(timeout=5.0)

    if gateway is not None:
        gateway.close()
        logger.info("Kubernetes: client closed")


app = FastAPI(title="Devharbor Workspace Orchestrator", lifespan=lifespan)

# ---------------------------------------------------------------------------
# API router -- all backend endpoints live under /api
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")


@api.get("/health")
async def health(request: Request) -> dict[str, str]:
    configured = getattr(request.app.state, "gateway", None) is not None
    return {"status": "ok", "control_plane": "configured" if configured else "unconfigured"}


# -- Routers -----------------------------------------------------------------
from devharbor.orchestrator.routers.releases import router as releases_router  # noqa: E402
from devharbor.orchestrator.routers.workspaces import router as workspaces_router  # noqa: E402

api.include_router(workspaces_router)
api.include_router(releases_router)

app.include_router(api)
