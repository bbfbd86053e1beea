"""Domain exception -> HTTP status translation shared by the routers."""

from __future__ import annotations

from fastapi import HTTPException, status

from devharbor.orchestrator.errors import (
    AlreadyExistsError,
    NotFoundError,
    OrchestratorError,
    OwnershipMismatchError,
    ProvisioningFailedError,
    ProvisioningTimeoutError,
    ReleaseTimeoutError,
    TransportError,
    ValidationError,
)
from devharbor.orchestrator.registry import ShuttingDownError

_STATUS_BY_ERROR: list[tuple[type[Exception], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AlreadyExistsError, status.HTTP_409_CONFLICT),
    (OwnershipMismatchError, status.HTTP_409_CONFLICT),
    (ProvisioningFailedError, status.HTTP_502_BAD_GATEWAY),
    (ProvisioningTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (ReleaseTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (TransportError, status.HTTP_502_BAD_GATEWAY),
    (ShuttingDownError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http(exc: OrchestratorError | ShuttingDownError) -> HTTPException:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(code, detail=str(exc) or "Service is shutting down.")
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
