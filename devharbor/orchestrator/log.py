"""Logging configuration using loguru.

Intercepts stdlib logging so that uvicorn, the kubernetes client, urllib3,
etc. all flow through loguru.  Every line carries the control-plane
namespace the process manages, and bearer tokens are masked before any
sink sees them.
"""

from __future__ import annotations

import logging
import re
import sys
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from loguru import Record

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>ns={extra[namespace]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Request/response tracing from the kubernetes client; only let it through
# when the service itself runs at DEBUG.
_CLIENT_LOGGERS = ("kubernetes.client.rest", "urllib3.connectionpool")
_QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore")

_TOKEN_PATTERN = re.compile(r"(Bearer\s+|--token[=\s]+)\S+")


class _InterceptHandler(logging.Handler):
    """Bridge stdlib logging records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def redact(message: str) -> str:
    return _TOKEN_PATTERN.sub(r"\1***", message)


def _mask_tokens(record: Record) -> None:
    record["message"] = redact(record["message"])


def setup_logging(level: str = "INFO", *, namespace: str = "-") -> None:
    """Configure loguru as the sole logging sink.

    Call this once at process startup, before uvicorn or the Kubernetes
    client is created.
    """
    level = level.upper()

    logger.remove()
    logger.configure(extra={"namespace": namespace}, patcher=_mask_tokens)
    logger.add(sys.stderr, level=level, format=_FORMAT)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)

    client_level = logging.DEBUG if level == "DEBUG" else logging.WARNING
    for name in _CLIENT_LOGGERS:
        logging.getLogger(name).setLevel(client_level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialised (level={}, namespace={})", level, namespace)
