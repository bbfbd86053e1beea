import click


@click.group()
def main() -> None:
    """Devharbor - lifecycle orchestrator for Devbox workspaces on Kubernetes."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from DEVHARBOR_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from DEVHARBOR_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the orchestrator API server."""
    import uvicorn

    from devharbor.orchestrator.settings import DevharborSettings

    settings = DevharborSettings()

    uvicorn.run(
        "devharbor.orchestrator.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
        # Leave room for background release tasks to drain on shutdown.
        timeout_graceful_shutdown=settings.graceful_shutdown_timeout + 30,
    )


@main.command()
@click.argument("name")
@click.option("--url-prefix", required=True, help="Hostname prefix (8-20 characters).")
@click.option("--url-suffix", required=True, help="Domain the prefix is joined to.")
@click.option("--template-id", required=True, help="Devbox template identifier.")
@click.option("--image", required=True, help="Container image reference.")
@click.option("--cpu", default=None, help="CPU quantity (default: 1000m).")
@click.option("--memory", default=None, help="Memory quantity (default: 2048Mi).")
@click.option("--apply", "apply_", is_flag=True, default=False, help="kubectl apply the manifests instead of printing.")
def render(
    name: str,
    url_prefix: str,
    url_suffix: str,
    template_id: str,
    image: str,
    cpu: str | None,
    memory: str | None,
    apply_: bool,
) -> None:
    """Render the workspace, service and route manifests for NAME."""
    from devharbor.orchestrator.errors import ValidationError
    from devharbor.orchestrator.lifecycle.manifests import render_manifests
    from devharbor.orchestrator.managers.provisioning import validate_create_params
    from devharbor.orchestrator.models.api import WorkspaceCreate

    params = WorkspaceCreate(
        name=name,
        url_prefix=url_prefix,
        url_suffix=url_suffix,
        template_id=template_id,
        image=image,
        cpu=cpu,
        memory=memory,
    )
    try:
        validate_create_params(params)
    except ValidationError as exc:
        raise click.BadParameter(str(exc)) from None

    stream = render_manifests(**params.model_dump()).as_stream()
    if not apply_:
        click.echo(stream, nl=False)
        return

    import anyio

    from devharbor.orchestrator.gateway.kube import KubeGateway
    from devharbor.orchestrator.log import setup_logging
    from devharbor.orchestrator.settings import DevharborSettings

    settings = DevharborSettings()
    setup_logging(settings.log_level, namespace=settings.namespace)
    gw = KubeGateway.from_settings(settings)
    try:
        result = anyio.run(gw.apply_manifest, stream)
    finally:
        gw.close()
    if not result.success:
        raise click.ClickException(f"{result.error}: {result.stderr}")
    click.echo(result.stdout)


@main.command()
def check() -> None:
    """Verify the configured namespace is reachable."""
    import anyio

    from devharbor.orchestrator.gateway.kube import KubeGateway
    from devharbor.orchestrator.log import setup_logging
    from devharbor.orchestrator.settings import DevharborSettings

    settings = DevharborSettings()
    setup_logging(settings.log_level, namespace=settings.namespace)
    gw = KubeGateway.from_settings(settings)
    try:
        ok = anyio.run(gw.verify_connection)
    finally:
        gw.close()
    if not ok:
        raise click.ClickException(f"Namespace {settings.namespace!r} is not reachable.")
    click.echo(f"Namespace {settings.namespace!r} is reachable.")


if __name__ == "__main__":
    main()
