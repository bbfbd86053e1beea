"""External URL and ports view of a workspace.

Both derive from the workspace object plus, optionally, the first route
carrying its ownership label.  The route lookup is the only I/O here and it
never raises: a failed lookup is the same as no route.
"""

from __future__ import annotations

from loguru import logger

from devharbor.orchestrator.errors import OrchestratorError
from devharbor.orchestrator.gateway.base import ControlPlaneGateway
from devharbor.orchestrator.lifecycle.manifests import APP_PORT, DOMAIN_LABEL, owner_selector
from devharbor.orchestrator.models.enums import PortType
from devharbor.orchestrator.models.workspace import PortInfo


async def lookup_route(gateway: ControlPlaneGateway, workspace: str) -> dict | None:
    """First route owned by *workspace*, or ``None``."""
    try:
        routes = await gateway.list_routes(owner_selector(workspace))
    except OrchestratorError as exc:
        logger.warning("Route lookup for workspace {} failed: {}", workspace, exc)
        return None
    return routes[0] if routes else None


def route_rule_host(route: dict | None) -> str | None:
    if not route:
        return None
    rules = (route.get("spec") or {}).get("rules") or []
    if rules and isinstance(rules[0], dict):
        return rules[0].get("host") or None
    return None


def resolve_url(workspace: dict, route: dict | None = None) -> str:
    """External URL of *workspace*.

    Resolution order: the domain label on the workspace, the same key as an
    annotation, the route's first rule host, the route's domain label, and
    finally the placeholder ``https://<name>.example.com``.
    """
    metadata = workspace.get("metadata") or {}
    domain = (metadata.get("labels") or {}).get(DOMAIN_LABEL) or (metadata.get("annotations") or {}).get(
        DOMAIN_LABEL
    )
    if domain:
        return f"https://{domain}"

    host = route_rule_host(route)
    if host:
        return f"https://{host}"
    if route:
        route_domain = ((route.get("metadata") or {}).get("labels") or {}).get(DOMAIN_LABEL)
        if route_domain:
            return f"https://{route_domain}"

    return f"https://{metadata.get('name') or 'unknown'}.example.com"


def build_ports(workspace: dict, route: dict | None = None) -> list[PortInfo]:
    """Merged ports view: app ports, then container ports, then extra ports.

    Container and extra ports whose number is already listed are skipped.
    Only app ports get a URL, and only when the route declares a host.
    """
    spec = workspace.get("spec") or {}
    app_ports = (spec.get("config") or {}).get("appPorts") or []
    container_ports = (spec.get("config") or {}).get("ports") or []
    extra_ports = (spec.get("network") or {}).get("extraPorts") or []

    host = route_rule_host(route)
    url = f"https://{host}" if host else None

    ports = [
        PortInfo(
            name=port.get("name"),
            port=port.get("port"),
            protocol=port.get("protocol"),
            target_port=port.get("targetPort"),
            url=url,
            is_primary=port.get("port") == APP_PORT or len(app_ports) == 1,
            type=PortType.APP,
        )
        for port in app_ports
    ]
    seen = {p.port for p in ports}

    for port in container_ports:
        number = port.get("containerPort")
        if number in seen:
            continue
        seen.add(number)
        ports.append(
            PortInfo(
                name=port.get("name") or f"port-{number}",
                port=number,
                protocol=port.get("protocol"),
                target_port=number,
                type=PortType.CONTAINER,
            )
        )

    for port in extra_ports:
        number = port.get("containerPort")
        if number in seen:
            continue
        seen.add(number)
        ports.append(
            PortInfo(
                name=f"extra-{number}",
                port=number,
                protocol=port.get("protocol") or "TCP",
                target_port=number,
                type=PortType.EXTRA,
            )
        )

    return ports
