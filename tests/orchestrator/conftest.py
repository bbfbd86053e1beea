"""Shared fixtures for orchestrator tests."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from fakes import FakeGateway
from httpx import ASGITransport, AsyncClient

from devharbor.orchestrator.app import app, build_orchestrators
from devharbor.orchestrator.managers.provisioning import ProvisioningOrchestrator
from devharbor.orchestrator.managers.releases import ReleaseOrchestrator
from devharbor.orchestrator.managers.teardown import TeardownOrchestrator
from devharbor.orchestrator.managers.workspaces import WorkspaceManager
from devharbor.orchestrator.registry import TaskRegistry
from devharbor.orchestrator.settings import DevharborSettings

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
async def registry() -> AsyncIterator[TaskRegistry]:
    reg = TaskRegistry(max_concurrency=4)
    yield reg
    reg.begin_shutdown()
    if not await reg.wait_until_drained(timeout=1.0):
        reg.cancel_all()
        await reg.wait_until_drained(timeout=1.0)


@pytest.fixture
def provisioning(gateway: FakeGateway) -> ProvisioningOrchestrator:
    return ProvisioningOrchestrator(gateway, poll_interval=0.01, timeout=0.2)


@pytest.fixture
def releases(gateway: FakeGateway, registry: TaskRegistry) -> ReleaseOrchestrator:
    return ReleaseOrchestrator(gateway, registry, poll_interval=0.01, timeout=0.2)


@pytest.fixture
def teardown(gateway: FakeGateway) -> TeardownOrchestrator:
    return TeardownOrchestrator(gateway)


@pytest.fixture
def manager(
    gateway: FakeGateway,
    provisioning: ProvisioningOrchestrator,
    teardown: TeardownOrchestrator,
) -> WorkspaceManager:
    return WorkspaceManager(gateway, provisioning, teardown)


@pytest.fixture
async def client(gateway: FakeGateway, registry: TaskRegistry) -> AsyncIterator[AsyncClient]:
    """Async HTTP client wired to the app with the fake gateway.

    The app lifespan does NOT run under ``ASGITransport``, so state fields
    are pre-set here.
    """
    settings = DevharborSettings(
        provision_poll_interval=0.01,
        provision_timeout=0.2,
        release_poll_interval=0.01,
        release_timeout=0.2,
    )
    app.state.gateway = gateway
    app.state.registry = registry
    app.state.workspace_manager, app.state.release_orchestrator = build_orchestrators(gateway, registry, settings)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.state.gateway = None
    app.state.workspace_manager = None
    app.state.release_orchestrator = None
