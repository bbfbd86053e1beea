"""Control-plane gateway implementations."""

from devharbor.orchestrator.gateway.base import CommandResult, ControlPlaneGateway, Patch
from devharbor.orchestrator.gateway.kube import KubeGateway

__all__ = ["CommandResult", "ControlPlaneGateway", "KubeGateway", "Patch"]
