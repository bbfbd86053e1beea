"""Control-plane gateway interface.

The gateway is the only component that talks to the control plane.  It
exposes typed CRUD per resource kind and hides the client library: objects
go in and come out as plain JSON-shaped ``dict``s, and failures are mapped to
the domain exceptions in ``errors.py``:

- ``NotFoundError`` on a 404
- ``AlreadyExistsError`` on a 409 from a create
- ``TransportError`` for everything else

All operations are scoped to the namespace the gateway was constructed with.
One instance is created at process start and injected into every
orchestrator; tests substitute an in-memory fake.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

Patch = dict[str, Any]
"""A merge-patch document, sent as ``application/merge-patch+json``."""


@dataclass
class CommandResult:
    """Outcome of an out-of-band command (``execute``)."""

    success: bool
    stdout: str = ""
    stderr: str = ""
    error: str | None = None


@runtime_checkable
class ControlPlaneGateway(Protocol):
    """Async protocol for control-plane object access."""

    @property
    def namespace(self) -> str: ...

    # -- Workspaces ------------------------------------------------------------

    async def get_workspace(self, name: str) -> dict:
        """Read a workspace.  Raises ``NotFoundError`` if missing."""
        ...

    async def list_workspaces(self) -> list[dict]: ...

    async def create_workspace(self, body: dict) -> dict: ...

    async def patch_workspace(self, name: str, patch: Patch) -> dict:
        """Apply a merge patch."""
        ...

    async def delete_workspace(self, name: str) -> None: ...

    # -- Releases --------------------------------------------------------------

    async def get_release(self, name: str) -> dict:
        """Read a release by its composite name.  Raises ``NotFoundError`` if missing."""
        ...

    async def list_releases(self) -> list[dict]: ...

    async def create_release(self, body: dict) -> dict:
        """Create a release.  Raises ``AlreadyExistsError`` on a name conflict."""
        ...

    async def delete_release(self, name: str) -> None: ...

    # -- Services / routes / secrets -------------------------------------------

    async def create_service(self, body: dict) -> dict: ...

    async def delete_service(self, name: str) -> None: ...

    async def create_route(self, body: dict) -> dict: ...

    async def list_routes(self, label_selector: str) -> list[dict]: ...

    async def delete_route(self, name: str) -> None: ...

    async def delete_secret(self, name: str) -> None: ...

    # -- Misc ------------------------------------------------------------------

    async def verify_connection(self) -> bool:
        """Return True if the configured namespace can be read."""
        ...

    async def execute(self, args: list[str], stdin: str | None = None) -> CommandResult:
        """Run an out-of-band command against the control plane."""
        ...
