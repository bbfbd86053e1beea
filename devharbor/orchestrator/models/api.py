"""API request schemas.

These are deliberately loose (plain strings, no pattern constraints): the
orchestrators own input validation and raise ``ValidationError`` before any
control-plane call, so the same rules apply whether a request comes through
HTTP, the CLI, or a direct call.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Workspace
# ---------------------------------------------------------------------------


class WorkspaceCreate(BaseModel):
    """Input for provisioning a new workspace."""

    name: str
    url_prefix: str = Field(description="Hostname prefix token (8-20 chars).")
    url_suffix: str = Field(description="Domain the prefix is joined to.")
    template_id: str
    image: str
    cpu: str | None = Field(default=None, description="Defaults to 1000m.")
    memory: str | None = Field(default=None, description="Defaults to 2048Mi.")


class WorkspaceResourcesUpdate(BaseModel):
    """Partial resource update -- at least one field must be set."""

    cpu: str | None = None
    memory: str | None = None


# ---------------------------------------------------------------------------
# Release
# ---------------------------------------------------------------------------


class ReleaseCreate(BaseModel):
    workspace: str
    tag: str
    notes: str = ""
