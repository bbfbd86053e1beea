"""Merge-patch documents for workspace mutations.

Both mutations are sent as ``application/merge-patch+json``:

- ``{"spec": {"state": ...}}`` for start/stop;
- ``{"spec": {"resource": ...}}`` for cpu/memory updates, built by
  ``PatchBuilder`` so that only fields the caller supplied are emitted.
"""

from __future__ import annotations

from typing import Any

from devharbor.orchestrator.errors import ValidationError
from devharbor.orchestrator.models.enums import StateIntent


def state_patch(intent: StateIntent) -> dict[str, Any]:
    return {"spec": {"state": str(intent)}}


class PatchBuilder:
    """Accumulates explicitly-set resource fields into a merge patch.

    ``None`` means "not requested" and is never emitted, so a patch touching
    only ``cpu`` leaves ``memory`` as it is on the object.
    """

    def __init__(self) -> None:
        self._resource: dict[str, str] = {}

    def cpu(self, value: str | None) -> PatchBuilder:
        if value is not None:
            self._resource["cpu"] = value
        return self

    def memory(self, value: str | None) -> PatchBuilder:
        if value is not None:
            self._resource["memory"] = value
        return self

    @property
    def is_empty(self) -> bool:
        return not self._resource

    def fields(self) -> list[str]:
        return list(self._resource)

    def build(self) -> dict[str, Any]:
        """Return the merge patch.  Raises ``ValidationError`` if nothing was set."""
        if self.is_empty:
            raise ValidationError("At least one of cpu or memory must be provided")
        return {"spec": {"resource": dict(self._resource)}}
