"""Unit tests for URL resolution and the ports view."""

from __future__ import annotations

from fakes import FakeGateway, owned_route, workspace_obj

from devharbor.orchestrator.errors import TransportError
from devharbor.orchestrator.lifecycle.endpoints import build_ports, lookup_route, resolve_url
from devharbor.orchestrator.lifecycle.manifests import DOMAIN_LABEL
from devharbor.orchestrator.models.enums import PortType

# ---------------------------------------------------------------------------
# resolve_url
# ---------------------------------------------------------------------------


def test_url_from_label() -> None:
    ws = workspace_obj("demo-1")
    ws["metadata"]["labels"] = {DOMAIN_LABEL: "label.example.org"}
    ws["metadata"]["annotations"] = {DOMAIN_LABEL: "annotation.example.org"}
    route = owned_route("demo-1", "demo-1-r", host="route.example.org")
    assert resolve_url(ws, route) == "https://label.example.org"


def test_url_from_annotation() -> None:
    ws = workspace_obj("demo-1")
    ws["metadata"]["annotations"] = {DOMAIN_LABEL: "annotation.example.org"}
    assert resolve_url(ws) == "https://annotation.example.org"


def test_url_from_route_host() -> None:
    route = owned_route("demo-1", "demo-1-r", host="route.example.org")
    assert resolve_url(workspace_obj("demo-1"), route) == "https://route.example.org"


def test_url_from_route_domain_label() -> None:
    route = owned_route("demo-1", "demo-1-r")
    route["metadata"]["labels"][DOMAIN_LABEL] = "labelled.example.org"
    assert resolve_url(workspace_obj("demo-1"), route) == "https://labelled.example.org"


def test_url_placeholder() -> None:
    assert resolve_url(workspace_obj("demo-1")) == "https://demo-1.example.com"
    assert resolve_url({}) == "https://unknown.example.com"


# ---------------------------------------------------------------------------
# lookup_route
# ---------------------------------------------------------------------------


async def test_lookup_route_returns_first_owned(gateway: FakeGateway) -> None:
    gateway.routes["other"] = owned_route("someone-else", "other", host="x.example.org")
    gateway.routes["mine"] = owned_route("demo-1", "mine", host="mine.example.org")
    route = await lookup_route(gateway, "demo-1")
    assert route is not None
    assert route["metadata"]["name"] == "mine"


async def test_lookup_route_failure_is_none(gateway: FakeGateway) -> None:
    gateway.fail("list_routes", TransportError("boom", status=500))
    assert await lookup_route(gateway, "demo-1") is None


# ---------------------------------------------------------------------------
# build_ports
# ---------------------------------------------------------------------------


def _ports_workspace() -> dict:
    return workspace_obj(
        "demo-1",
        config={
            "appPorts": [{"name": "web", "port": 8080, "protocol": "TCP", "targetPort": 8080}],
            "ports": [
                {"containerPort": 22, "name": "devbox-ssh-port", "protocol": "TCP"},
                {"containerPort": 8080, "name": "dup", "protocol": "TCP"},
            ],
        },
        network={"type": "NodePort", "extraPorts": [{"containerPort": 8080}, {"containerPort": 9000}]},
    )


def test_ports_merge_and_dedupe() -> None:
    ports = build_ports(_ports_workspace())
    assert [(p.port, p.type) for p in ports] == [
        (8080, PortType.APP),
        (22, PortType.CONTAINER),
        (9000, PortType.EXTRA),
    ]
    extra = ports[2]
    assert extra.name == "extra-9000"
    assert extra.protocol == "TCP"


def test_ports_primary_and_url() -> None:
    route = owned_route("demo-1", "demo-1-r", host="web.example.org")
    app, ssh, _ = build_ports(_ports_workspace(), route)
    assert app.is_primary
    assert app.url == "https://web.example.org"
    assert not ssh.is_primary
    assert ssh.url is None


def test_ports_no_url_without_route_host() -> None:
    (app, *_) = build_ports(_ports_workspace())
    assert app.url is None


def test_single_app_port_is_primary() -> None:
    ws = workspace_obj("demo-1", config={"appPorts": [{"name": "api", "port": 3000}]})
    (port,) = build_ports(ws)
    assert port.is_primary


def test_unnamed_container_port() -> None:
    ws = workspace_obj("demo-1", config={"ports": [{"containerPort": 5432}]})
    (port,) = build_ports(ws)
    assert port.name == "port-5432"
    assert port.type == PortType.CONTAINER


def test_ports_empty_workspace() -> None:
    assert build_ports({}) == []
