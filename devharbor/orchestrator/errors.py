"""Domain exceptions raised by the gateway and the orchestrators.

Managers raise these, never HTTP exceptions -- translating them into status
codes is the router's responsibility (see ``routers/``).
"""

from __future__ import annotations

from devharbor.orchestrator.models.enums import ResourceKind


class OrchestratorError(Exception):
    """Base class for every error surfaced by the orchestrator."""


class ValidationError(OrchestratorError, ValueError):
    """Input failed validation.  Raised before any control-plane call."""


class NotFoundError(OrchestratorError, LookupError):
    """The referenced workspace or release does not exist."""

    def __init__(self, kind: ResourceKind | str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' not found")


class AlreadyExistsError(OrchestratorError):
    """An object with the same name (or composite key) already exists."""

    def __init__(self, kind: ResourceKind | str, name: str) -> None:
        self.kind = kind
        self.name = name
        super().__init__(f"{kind} '{name}' already exists")


class OwnershipMismatchError(OrchestratorError):
    """A release's declared owner disagrees with the workspace it was looked up under."""

    def __init__(self, release_name: str, expected: str, actual: str | None) -> None:
        self.release_name = release_name
        self.expected = expected
        self.actual = actual
        super().__init__(f"Release '{release_name}' belongs to '{actual}', not '{expected}'")


class ProvisioningFailedError(OrchestratorError):
    """Applying one of the provisioning objects failed.

    Objects applied before ``resource_kind`` are left in place.
    """

    def __init__(self, resource_kind: ResourceKind, cause: Exception) -> None:
        self.resource_kind = resource_kind
        self.cause = cause
        super().__init__(f"Failed to apply {resource_kind}: {cause}")


class ProvisioningTimeoutError(OrchestratorError, TimeoutError):
    """The workspace did not reach ``Running`` within the readiness budget."""

    def __init__(self, name: str, timeout: float) -> None:
        self.name = name
        self.timeout = timeout
        super().__init__(f"Workspace '{name}' was not ready within {timeout:g}s")


class ReleaseTimeoutError(OrchestratorError, TimeoutError):
    """The workspace did not reach ``Stopped`` in time for a release."""

    def __init__(self, name: str, timeout: float) -> None:
        self.name = name
        self.timeout = timeout
        super().__init__(f"Workspace '{name}' did not stop within {timeout:g}s")


class TransportError(OrchestratorError):
    """Any other control-plane failure."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)
