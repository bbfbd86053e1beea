"""Status interpretation -- opaque status blob -> canonical phase.

The control plane does not populate any single status field consistently
across versions, so interpretation goes through a structural view of the
blob and a fixed resolution order (first match wins):

1. empty / absent blob
2. explicit ``phase`` (returned verbatim)
3. ``conditions`` -- the most recently transitioned one (releases only)
4. explicit ``state`` string, then boolean flags
5. fallback

Both interpreters are pure and total: they never raise, whatever the blob
looks like.  Malformed members are treated as absent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from devharbor.orchestrator.models.enums import ReleasePhase, WorkspacePhase

_EPOCH = datetime.min.replace(tzinfo=UTC)


@dataclass(frozen=True)
class Condition:
    type: str | None = None
    status: str | None = None
    last_transition: datetime = _EPOCH


@dataclass(frozen=True)
class StatusView:
    """Structurally-typed projection of a raw status blob."""

    empty: bool = True
    phase: str | None = None
    conditions: tuple[Condition, ...] = ()
    state: str | None = None
    running: bool = False
    pending: bool = False
    terminated: bool = False
    stopping: bool = False
    ready: bool | None = None

    @classmethod
    def parse(cls, blob: Any) -> StatusView:
        if not isinstance(blob, dict) or not blob:
            return cls()

        phase = blob.get("phase")
        state = blob.get("state")
        ready = blob.get("ready")
        return cls(
            empty=False,
            phase=phase if isinstance(phase, str) and phase else None,
            conditions=_parse_conditions(blob.get("conditions")),
            state=state if isinstance(state, str) and state else None,
            running=bool(blob.get("running")),
            pending=bool(blob.get("pending")),
            terminated=bool(blob.get("terminated")),
            stopping=bool(blob.get("stopping")),
            ready=ready if isinstance(ready, bool) else None,
        )

    def latest_condition(self) -> Condition | None:
        if not self.conditions:
            return None
        # max() keeps the first of equally-timestamped conditions
        return max(self.conditions, key=lambda c: c.last_transition)


def _parse_conditions(raw: Any) -> tuple[Condition, ...]:
    if not isinstance(raw, list):
        return ()
    conditions = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        ctype = item.get("type")
        cstatus = item.get("status")
        conditions.append(
            Condition(
                type=ctype if isinstance(ctype, str) and ctype else None,
                status=str(cstatus) if cstatus is not None else None,
                last_transition=_parse_timestamp(item.get("lastTransitionTime")),
            )
        )
    return tuple(conditions)


def _parse_timestamp(value: Any) -> datetime:
    if not isinstance(value, str) or not value:
        return _EPOCH
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def status_blob(obj: dict) -> dict:
    """The object's ``status`` if it is a mapping, else ``{}``."""
    status = obj.get("status")
    return status if isinstance(status, dict) else {}


# ---------------------------------------------------------------------------
# Interpreters
# ---------------------------------------------------------------------------


def interpret_workspace_status(blob: Any) -> str:
    """Derive the workspace phase.  Returns a ``WorkspacePhase`` value unless
    the control plane reports a ``phase``/``state`` outside that set."""
    view = StatusView.parse(blob)

    if view.empty:
        return WorkspacePhase.STOPPED
    if view.phase:
        return view.phase
    if view.state:
        return view.state
    if view.running:
        return WorkspacePhase.RUNNING
    if view.pending:
        return WorkspacePhase.PENDING
    if view.terminated:
        return WorkspacePhase.TERMINATED
    if view.stopping:
        return WorkspacePhase.STOPPING
    return WorkspacePhase.UNKNOWN


def interpret_release_status(blob: Any) -> str:
    """Derive the release phase.  Condition types are echoed verbatim."""
    view = StatusView.parse(blob)

    if view.empty:
        return ReleasePhase.PENDING
    if view.phase:
        return view.phase

    latest = view.latest_condition()
    if latest is not None:
        if latest.type == "Ready" and latest.status == "True":
            return ReleasePhase.SUCCESS
        if latest.type == "Failed" and latest.status == "True":
            return ReleasePhase.FAILED
        return latest.type or ReleasePhase.PROCESSING

    if view.state:
        return view.state
    if view.ready is True:
        return ReleasePhase.SUCCESS
    if view.ready is False:
        return ReleasePhase.FAILED
    return ReleasePhase.PROCESSING
