"""Tests for workspace reads and mutations."""

from __future__ import annotations

import json

import pytest
from fakes import FakeGateway, owned_route, workspace_obj

from devharbor.orchestrator.errors import NotFoundError, TransportError, ValidationError
from devharbor.orchestrator.gateway.base import CommandResult
from devharbor.orchestrator.managers.workspaces import WorkspaceManager

# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def test_start_and_stop_patch_state(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.workspaces["demo-1"] = workspace_obj("demo-1", {"phase": "Running"})

    await manager.stop("demo-1")
    await manager.start("demo-1")

    assert [patch for _, patch in gateway.patches] == [
        {"spec": {"state": "Stopped"}},
        {"spec": {"state": "Running"}},
    ]
    assert "get_workspace" not in gateway.methods()


async def test_stop_missing_workspace(manager: WorkspaceManager) -> None:
    with pytest.raises(NotFoundError):
        await manager.stop("ghost")


async def test_update_only_cpu_leaves_memory(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.workspaces["demo-1"] = workspace_obj("demo-1")

    result = await manager.update_resources("demo-1", cpu="4000m")

    assert gateway.patches == [("demo-1", {"spec": {"resource": {"cpu": "4000m"}}})]
    assert gateway.workspaces["demo-1"]["spec"]["resource"] == {"cpu": "4000m", "memory": "2048Mi"}
    assert "cpu=4000m" in result.message


async def test_update_requires_a_field(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.workspaces["demo-1"] = workspace_obj("demo-1")
    with pytest.raises(ValidationError):
        await manager.update_resources("demo-1")
    assert gateway.calls == []


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def test_get_workspace_detail(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    status = {
        "phase": "Running",
        "network": {"type": "NodePort", "nodePort": 31022},
        "lastState": {"running": {"startedAt": "2026-01-01T00:00:00Z"}},
        "commitHistory": [{"node": "node-a", "pod": "demo-1-abc", "image": "img:1", "status": "Success"}],
    }
    gateway.workspaces["demo-1"] = workspace_obj(
        "demo-1",
        status,
        image="img:1",
        templateID="tpl-1",
        config={"user": "devbox", "workingDir": "/home/devbox/project", "appPorts": [{"name": "web", "port": 8080}]},
    )
    gateway.routes["demo-1-r"] = owned_route("demo-1", "demo-1-r", host="web.example.org")

    detail = await manager.get_workspace("demo-1")

    assert detail.state == "Running"
    assert detail.url == "https://web.example.org"
    assert detail.node_port == 31022
    assert detail.network_type == "NodePort"
    assert detail.user == "devbox"
    assert detail.template_id == "tpl-1"
    assert detail.runtime.last_running_node == "node-a"
    assert detail.runtime.last_running_pod == "demo-1-abc"
    assert detail.runtime.last_start_time == "2026-01-01T00:00:00Z"
    assert detail.ports[0].url == "https://web.example.org"
    assert detail.status == status


async def test_get_missing_workspace(manager: WorkspaceManager) -> None:
    with pytest.raises(NotFoundError):
        await manager.get_workspace("ghost")


async def test_list_workspaces(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.workspaces["a"] = workspace_obj(
        "a",
        {"phase": "Running", "commitHistory": [{"image": "img:1", "node": "n1"}]},
        network={"type": "NodePort"},
    )
    gateway.workspaces["b"] = workspace_obj("b")

    items = {item.name: item for item in await manager.list_workspaces()}

    assert items["a"].status == "Running"
    assert items["a"].network_type == "NodePort"
    assert items["a"].last_commit is not None
    assert items["a"].last_commit.node == "n1"
    assert items["b"].status == "Stopped"
    assert items["b"].last_commit is None


async def test_non_mapping_status_is_tolerated(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    obj = workspace_obj("demo-1")
    obj["status"] = ["unexpected"]
    gateway.workspaces["demo-1"] = obj

    (item,) = await manager.list_workspaces()
    detail = await manager.get_workspace("demo-1")

    assert item.status == "Stopped"
    assert item.phase == "Unknown"
    assert detail.state == "Stopped"
    assert detail.status is None


async def test_list_falls_back_to_kubectl(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.fail("list_workspaces", TransportError("api down", status=503))
    gateway.kubectl_output = CommandResult(
        success=True,
        stdout=json.dumps({"items": [workspace_obj("from-kubectl", {"phase": "Stopped"})]}),
    )

    (item,) = await manager.list_workspaces()

    assert item.name == "from-kubectl"
    assert ("execute", "get devbox -o json") in gateway.calls


async def test_list_fallback_failure_raises(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.fail("list_workspaces", TransportError("api down", status=503))
    gateway.kubectl_output = CommandResult(success=False, stderr="no route to host", error="exit 1")

    with pytest.raises(TransportError):
        await manager.list_workspaces()


# ---------------------------------------------------------------------------
# Delegation
# ---------------------------------------------------------------------------


async def test_delete_delegates_to_teardown(manager: WorkspaceManager, gateway: FakeGateway) -> None:
    gateway.workspaces["demo-1"] = workspace_obj("demo-1")
    result = await manager.delete_workspace("demo-1")
    assert result.success
    assert gateway.workspaces == {}
