"""Kubernetes implementation of the control-plane gateway.

Workspaces and releases are custom objects in ``devbox.sealos.io/v1alpha1``;
services, routes (ingresses) and secrets use the core and networking APIs.

The official ``kubernetes`` client is synchronous, so every call runs in the
thread pool via ``anyio.to_thread.run_sync``.  Out-of-band ``kubectl``
commands run through ``anyio.run_process``.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial
from typing import TYPE_CHECKING, Any

import anyio
import yaml
from anyio import to_thread
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from loguru import logger
from urllib3.exceptions import HTTPError

from devharbor.orchestrator.errors import AlreadyExistsError, NotFoundError, TransportError
from devharbor.orchestrator.gateway.base import CommandResult, Patch
from devharbor.orchestrator.models.enums import ResourceKind

if TYPE_CHECKING:
    from devharbor.orchestrator.settings import DevharborSettings

DEVBOX_GROUP = "devbox.sealos.io"
DEVBOX_VERSION = "v1alpha1"
WORKSPACE_PLURAL = "devboxes"
RELEASE_PLURAL = "devboxreleases"
MERGE_PATCH = "application/merge-patch+json"


def load_api_client(settings: DevharborSettings) -> client.ApiClient:
    """Build an ``ApiClient`` from the first credential source configured."""
    configuration = client.Configuration()

    if settings.kubeconfig_path:
        config.load_kube_config(config_file=settings.kubeconfig_path, client_configuration=configuration)
        logger.info("Kubernetes: loaded kubeconfig from {}", settings.kubeconfig_path)
    elif settings.kubeconfig_content:
        config.load_kube_config_from_dict(
            yaml.safe_load(settings.kubeconfig_content),
            client_configuration=configuration,
        )
        logger.info("Kubernetes: loaded inline kubeconfig")
    elif settings.apiserver and settings.user_token:
        configuration.host = settings.apiserver
        configuration.api_key = {"authorization": settings.user_token.get_secret_value()}
        configuration.api_key_prefix = {"authorization": "Bearer"}
        configuration.verify_ssl = False
        logger.info("Kubernetes: using token auth against {} (user={})", settings.apiserver, settings.user_name)
    else:
        try:
            config.load_incluster_config(client_configuration=configuration)
            logger.info("Kubernetes: loaded in-cluster configuration")
        except config.ConfigException:
            config.load_kube_config(client_configuration=configuration)
            logger.info("Kubernetes: loaded default kubeconfig")

    return client.ApiClient(configuration)


class KubeGateway:
    """``ControlPlaneGateway`` backed by the official Kubernetes client."""

    def __init__(
        self,
        api_client: client.ApiClient,
        namespace: str,
        *,
        kubectl_binary: str = "kubectl",
        kubectl_auth_args: list[str] | None = None,
    ) -> None:
        self._api_client = api_client
        self._namespace = namespace
        self._custom = client.CustomObjectsApi(api_client)
        self._core = client.CoreV1Api(api_client)
        self._networking = client.NetworkingV1Api(api_client)
        self._kubectl = kubectl_binary
        self._kubectl_auth_args = kubectl_auth_args or []

    @classmethod
    def from_settings(cls, settings: DevharborSettings) -> KubeGateway:
        auth_args: list[str] = []
        if settings.apiserver and settings.user_token:
            auth_args = [
                "--server",
                settings.apiserver,
                "--token",
                settings.user_token.get_secret_value(),
                "--insecure-skip-tls-verify",
            ]
        return cls(
            load_api_client(settings),
            settings.namespace,
            kubectl_binary=settings.kubectl_binary,
            kubectl_auth_args=auth_args,
        )

    @property
    def namespace(self) -> str:
        return self._namespace

    def close(self) -> None:
        self._api_client.close()

    # -- Call plumbing ---------------------------------------------------------

    async def _call(
        self,
        kind: ResourceKind,
        name: str,
        fn: Callable[..., Any],
        /,
        *,
        creating: bool = False,
        **kwargs: Any,
    ) -> Any:
        """Run a blocking client call in a worker thread and map its errors.

        ``kind`` and ``name`` only label the raised exception; ``kwargs`` are
        forwarded to ``fn`` unchanged.
        """
        try:
            return await to_thread.run_sync(partial(fn, **kwargs))
        except ApiException as exc:
            if exc.status == 404:
                raise NotFoundError(kind, name) from None
            if exc.status == 409 and creating:
                raise AlreadyExistsError(kind, name) from None
            msg = f"{kind} '{name}': {exc.status} {exc.reason}"
            raise TransportError(msg, status=exc.status) from exc
        except HTTPError as exc:
            msg = f"{kind} '{name}': {exc}"
            raise TransportError(msg) from exc

    def _to_dict(self, obj: Any) -> dict:
        if isinstance(obj, dict):
            return obj
        return self._api_client.sanitize_for_serialization(obj)

    def _custom_kwargs(self, plural: str) -> dict[str, str]:
        return {
            "group": DEVBOX_GROUP,
            "version": DEVBOX_VERSION,
            "namespace": self._namespace,
            "plural": plural,
        }

    # -- Workspaces ------------------------------------------------------------

    async def get_workspace(self, name: str) -> dict:
        return await self._call(
            ResourceKind.WORKSPACE,
            name,
            self._custom.get_namespaced_custom_object,
            name=name,
            **self._custom_kwargs(WORKSPACE_PLURAL),
        )

    async def list_workspaces(self) -> list[dict]:
        response = await self._call(
            ResourceKind.WORKSPACE,
            "*",
            self._custom.list_namespaced_custom_object,
            **self._custom_kwargs(WORKSPACE_PLURAL),
        )
        return list((response or {}).get("items") or [])

    async def create_workspace(self, body: dict) -> dict:
        return await self._call(
            ResourceKind.WORKSPACE,
            _object_name(body),
            self._custom.create_namespaced_custom_object,
            creating=True,
            body=body,
            **self._custom_kwargs(WORKSPACE_PLURAL),
        )

    async def patch_workspace(self, name: str, patch: Patch) -> dict:
        return await self._call(
            ResourceKind.WORKSPACE,
            name,
            self._custom.patch_namespaced_custom_object,
            name=name,
            body=patch,
            _content_type=MERGE_PATCH,
            **self._custom_kwargs(WORKSPACE_PLURAL),
        )

    async def delete_workspace(self, name: str) -> None:
        await self._call(
            ResourceKind.WORKSPACE,
            name,
            self._custom.delete_namespaced_custom_object,
            name=name,
            **self._custom_kwargs(WORKSPACE_PLURAL),
        )

    # -- Releases --------------------------------------------------------------

    async def get_release(self, name: str) -> dict:
        return await self._call(
            ResourceKind.RELEASE,
            name,
            self._custom.get_namespaced_custom_object,
            name=name,
            **self._custom_kwargs(RELEASE_PLURAL),
        )

    async def list_releases(self) -> list[dict]:
        response = await self._call(
            ResourceKind.RELEASE,
            "*",
            self._custom.list_namespaced_custom_object,
            **self._custom_kwargs(RELEASE_PLURAL),
        )
        return list((response or {}).get("items") or [])

    async def create_release(self, body: dict) -> dict:
        return await self._call(
            ResourceKind.RELEASE,
            _object_name(body),
            self._custom.create_namespaced_custom_object,
            creating=True,
            body=body,
            **self._custom_kwargs(RELEASE_PLURAL),
        )

    async def delete_release(self, name: str) -> None:
        await self._call(
            ResourceKind.RELEASE,
            name,
            self._custom.delete_namespaced_custom_object,
            name=name,
            **self._custom_kwargs(RELEASE_PLURAL),
        )

    # -- Services --------------------------------------------------------------

    async def create_service(self, body: dict) -> dict:
        created = await self._call(
            ResourceKind.SERVICE,
            _object_name(body),
            self._core.create_namespaced_service,
            creating=True,
            namespace=self._namespace,
            body=body,
        )
        return self._to_dict(created)

    async def delete_service(self, name: str) -> None:
        await self._call(
            ResourceKind.SERVICE,
            name,
            self._core.delete_namespaced_service,
            name=name,
            namespace=self._namespace,
        )

    # -- Routes ----------------------------------------------------------------

    async def create_route(self, body: dict) -> dict:
        created = await self._call(
            ResourceKind.ROUTE,
            _object_name(body),
            self._networking.create_namespaced_ingress,
            creating=True,
            namespace=self._namespace,
            body=body,
        )
        return self._to_dict(created)

    async def list_routes(self, label_selector: str) -> list[dict]:
        response = await self._call(
            ResourceKind.ROUTE,
            label_selector,
            self._networking.list_namespaced_ingress,
            namespace=self._namespace,
            label_selector=label_selector,
        )
        return [self._to_dict(item) for item in response.items or []]

    async def delete_route(self, name: str) -> None:
        await self._call(
            ResourceKind.ROUTE,
            name,
            self._networking.delete_namespaced_ingress,
            name=name,
            namespace=self._namespace,
        )

    # -- Secrets ---------------------------------------------------------------

    async def delete_secret(self, name: str) -> None:
        await self._call(
            ResourceKind.SECRET,
            name,
            self._core.delete_namespaced_secret,
            name=name,
            namespace=self._namespace,
        )

    # -- Misc ------------------------------------------------------------------

    async def verify_connection(self) -> bool:
        try:
            await to_thread.run_sync(partial(self._core.read_namespace, name=self._namespace))
        except (ApiException, HTTPError) as exc:
            logger.error("Kubernetes: connection check failed for namespace {}: {}", self._namespace, exc)
            return False
        return True

    async def execute(self, args: list[str], stdin: str | None = None) -> CommandResult:
        """Run ``kubectl <args> -n <namespace>`` with the configured credentials."""
        command = [self._kubectl, *args, "-n", self._namespace, *self._kubectl_auth_args]
        try:
            completed = await anyio.run_process(
                command,
                input=stdin.encode() if stdin is not None else None,
                check=False,
            )
        except OSError as exc:
            logger.error("kubectl: failed to launch {}: {}", self._kubectl, exc)
            return CommandResult(success=False, error=f"kubectl could not be started: {exc}")

        stdout = completed.stdout.decode(errors="replace").strip()
        stderr = completed.stderr.decode(errors="replace").strip()
        if completed.returncode != 0:
            return CommandResult(
                success=False,
                stdout=stdout,
                stderr=stderr,
                error=f"kubectl exited with code {completed.returncode}",
            )
        return CommandResult(success=True, stdout=stdout, stderr=stderr)

    async def apply_manifest(self, manifest: str) -> CommandResult:
        """``kubectl apply`` a rendered manifest, skipping OpenAPI validation."""
        return await self.execute(["apply", "-f", "-", "--validate=false"], stdin=manifest)


def _object_name(body: dict) -> str:
    return (body.get("metadata") or {}).get("name") or ""
