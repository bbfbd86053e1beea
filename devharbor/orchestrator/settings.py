"""Service configuration loaded from DEVHARBOR_* environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DevharborSettings(BaseSettings):
    """Devharbor orchestrator settings.

    All fields are read from environment variables with the ``DEVHARBOR_``
    prefix.  For example, ``DEVHARBOR_NAMESPACE=dev`` maps to ``namespace``.

    Control-plane credentials are resolved in this order (see
    ``gateway.kube.load_api_client``): ``kubeconfig_path``,
    ``kubeconfig_content``, ``apiserver`` + ``user_token``, in-cluster
    service account, then the local ``~/.kube/config``.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEVHARBOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- Logging ---------------------------------------------------------------
    log_level: str = "INFO"

    # -- Control plane ---------------------------------------------------------
    namespace: str = "default"
    """Namespace every workspace, release and dependent object lives in."""

    kubeconfig_path: str | None = None
    kubeconfig_content: str | None = None
    apiserver: str | None = None
    user_token: SecretStr | None = None
    user_name: str = "default-user"

    kubectl_binary: str = "kubectl"
    """Executable used for out-of-band commands (``gateway.execute``)."""

    # -- Polling ---------------------------------------------------------------
    provision_poll_interval: float = 5.0
    provision_timeout: float = 120.0
    """Seconds to wait for a new workspace to reach ``Running``."""

    release_poll_interval: float = 1.0
    release_timeout: float = 120.0
    """Seconds a background release task waits for the workspace to stop."""

    # -- Background work -------------------------------------------------------
    max_background_tasks: int = 16
    """Upper bound on concurrently running background release tasks."""

    # -- Server ----------------------------------------------------------------
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8000
    graceful_shutdown_timeout: int = 180
    """Seconds to wait for background release tasks during shutdown.

    Must cover ``release_timeout`` for an in-flight task to finish; tasks
    still running afterwards are cancelled.
    """


@lru_cache(maxsize=1)
def get_settings() -> DevharborSettings:
    """Return a cached settings instance.

    Reads from environment variables and ``.env`` on first call, then returns
    the same object.  Call ``get_settings.cache_clear()`` in tests to force a
    re-read after overriding env vars.
    """
    return DevharborSettings()
