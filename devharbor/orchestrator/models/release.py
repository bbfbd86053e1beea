"""Release (``DevBoxRelease``) views.

A release is an immutable, tagged snapshot request for a stopped workspace,
keyed by ``<workspace>-<tag>``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


def release_key(workspace: str, tag: str) -> str:
    """Composite object name: at most one release per (workspace, tag)."""
    return f"{workspace}-{tag}"


class ReleaseSummary(BaseModel):
    name: str
    namespace: str | None = None
    workspace: str | None = None
    tag: str | None = None
    notes: str | None = None
    created_at: str | None = None
    owner_references: list[dict] | None = None
    uid: str | None = None
    status: str
    """Canonical phase derived from ``raw_status``."""
    phase: str = "Unknown"
    """Raw ``status.phase`` as reported by the control plane."""
    raw_status: dict | None = None


class ReleaseDetail(ReleaseSummary):
    spec: dict = Field(default_factory=dict)


class ReleaseCreateResult(BaseModel):
    """Outcome of ``create_release``.

    ``needs_waiting`` is True when the workspace had to be stopped first; the
    release object will then only appear once a background task finishes, so
    callers poll ``get_release`` to learn the terminal outcome.
    """

    needs_waiting: bool
    message: str
    release: ReleaseSummary
