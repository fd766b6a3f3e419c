"""
CLI: ``nifi-deploy`` commands.

Provides:
- ``deploy``      full workflow (volumes, reconcile, destination, launch)
- ``volumes``     create the named volumes only
- ``dockerfile``  render the TLS image Dockerfile without building it
- ``status``      state of the containers this tool manages

Usage::

    nifi-deploy deploy                                   # interactive
    nifi-deploy deploy -d localhost -u admin --non-interactive
    nifi-deploy deploy --config staging.yaml --force
    nifi-deploy deploy -d server --dry-run --json

    nifi-deploy volumes
    nifi-deploy dockerfile --port 9443 --proxy-host nifi.example.com -u admin -o Dockerfile
    nifi-deploy status
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from nifi_deploy.core.errors import NifiDeployError
from nifi_deploy.core.logging import get_logger

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

_STEP_STYLES = {
    "PASSED": "green",
    "FAILED": "red bold",
    "SKIPPED": "dim",
    "RUNNING": "yellow",
    "PENDING": "dim",
}


# ── Deploy ───────────────────────────────────────────────────────────────


def deploy(
    destination: str | None = typer.Option(None, "--destination", "-d", help="localhost or server."),
    port: str | None = typer.Option(None, "--port", "-p", help="NiFi web port (default 8443)."),
    proxy_host: str | None = typer.Option(None, "--proxy-host", help="NIFI_WEB_PROXY_HOST value."),
    username: str | None = typer.Option(None, "--username", "-u", help="Single-user username."),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML deployment file."),
    work_dir: Path | None = typer.Option(
        None, "--work-dir", "-w", help="Directory holding the PKCS12 stores (default: cwd)."
    ),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", help="Never prompt; fail on missing values."
    ),
    force: bool = typer.Option(False, "--force", "-y", help="Delete an existing container without asking."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log docker commands instead of running them."),
    json_out: bool = typer.Option(False, "--json", help="Output the result as JSON."),
) -> None:
    """Deploy NiFi: create volumes, replace the old container, launch.

    Values not given as flags are taken from the config file, then from
    NIFI_DEPLOY_* variables, then (passwords only) from secret backends, and
    finally prompted for.
    """
    from nifi_deploy.deploy.config import DeploymentConfig
    from nifi_deploy.deploy.workflow import DeploymentRunner

    try:
        settings, file_data = _load_settings(config_file)
        config = DeploymentConfig.from_sources(
            settings,
            file_data,
            work_dir=work_dir,
            interactive=not non_interactive,
            force=force,
            dry_run=dry_run,
        )
        source = _input_chain(
            settings,
            file_data,
            flags={
                "destination": destination,
                "http_port": port,
                "proxy_host": proxy_host,
                "username": username,
            },
            interactive=not non_interactive,
        )
        containers = _container_manager(settings, dry_run)
    except NifiDeployError as exc:
        _fail(exc)

    if not json_out:
        label = " (dry run)" if dry_run else ""
        console.print(f"[bold]nifi-deploy[/]{label} · run_id: {config.run_id}")

    runner = DeploymentRunner(config, source, containers, proxy_host_policy=settings.proxy_host_policy)
    try:
        result = runner.run()
    except Exception as exc:
        logger.exception("deploy.crashed", run_id=config.run_id)
        err_console.print(f"[red]Unexpected error: {escape(str(exc))}[/]")
        raise typer.Exit(code=1) from exc

    if json_out:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _print_deployment_result(result)

    if result.error:
        raise typer.Exit(code=1)


# ── Volumes ──────────────────────────────────────────────────────────────


def volumes(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML deployment file."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log docker commands instead of running them."),
) -> None:
    """Create the NiFi repository and certificate volumes."""
    from nifi_deploy.deploy.config import DeploymentConfig
    from nifi_deploy.deploy.volumes import VolumeProvisioner, VolumeSet

    try:
        settings, file_data = _load_settings(config_file)
        config = DeploymentConfig.from_sources(settings, file_data, dry_run=dry_run)
        containers = _container_manager(settings, dry_run)
        volume_set = VolumeSet.for_prefix(config.names.volume_prefix, config.names.certs_volume)
        created = VolumeProvisioner(containers, volume_set).provision()
    except NifiDeployError as exc:
        _fail(exc)

    table = Table(title="Volumes")
    table.add_column("Volume", style="bold")
    table.add_column("Mount")
    for spec in volume_set:
        table.add_row(spec.name, spec.mount_path)
    console.print(table)
    console.print(f"[green]✓ {len(created)} volumes ready[/]")


# ── Dockerfile ───────────────────────────────────────────────────────────


def dockerfile(
    port: str | None = typer.Option(None, "--port", "-p", help="NiFi web port (default 8443)."),
    proxy_host: str | None = typer.Option(None, "--proxy-host", help="NIFI_WEB_PROXY_HOST value."),
    username: str | None = typer.Option(None, "--username", "-u", help="Single-user username."),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML deployment file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write here instead of stdout."),
    non_interactive: bool = typer.Option(
        False, "--non-interactive", help="Never prompt; fail on missing values."
    ),
) -> None:
    """Render the TLS image Dockerfile without building or running anything."""
    from nifi_deploy.deploy.collector import ConfigCollector
    from nifi_deploy.deploy.config import DeployDestination, DeploymentConfig
    from nifi_deploy.deploy.dockerfile import generate_dockerfile, write_dockerfile

    try:
        settings, file_data = _load_settings(config_file)
        config = DeploymentConfig.from_sources(
            settings,
            file_data,
            destination=DeployDestination.SERVER,
            interactive=not non_interactive,
        )
        source = _input_chain(
            settings,
            file_data,
            flags={"http_port": port, "proxy_host": proxy_host, "username": username},
            interactive=not non_interactive,
        )
        ConfigCollector(config, source, settings.proxy_host_policy).collect_launch_values()
        content = generate_dockerfile(config)
        if output is not None:
            path = write_dockerfile(content, output)
    except NifiDeployError as exc:
        _fail(exc)

    if output is None:
        typer.echo(content, nl=False)
    else:
        err_console.print(f"[green]✓ Dockerfile written to {path}[/]")


# ── Status ───────────────────────────────────────────────────────────────


def status(
    config_file: Path | None = typer.Option(None, "--config", "-c", help="YAML deployment file."),
    json_out: bool = typer.Option(False, "--json", help="Output as JSON."),
) -> None:
    """Show the state of the NiFi containers."""
    import json

    from nifi_deploy.deploy.config import DeploymentConfig

    try:
        settings, file_data = _load_settings(config_file)
        config = DeploymentConfig.from_sources(settings, file_data)
        containers = _container_manager(settings, dry_run=False)
        states = {name: containers.get_container_status(name) for name in config.names.containers}
    except NifiDeployError as exc:
        _fail(exc)

    if json_out:
        typer.echo(json.dumps(states, indent=2))
        return

    table = Table(title="NiFi Containers")
    table.add_column("Container", style="bold")
    table.add_column("Status")
    for name, state in states.items():
        style = {"running": "green", "exited": "red", "not_found": "dim"}.get(state, "yellow")
        table.add_row(name, f"[{style}]{state}[/{style}]")
    console.print(table)


# ── Helpers ──────────────────────────────────────────────────────────────


def _load_settings(config_file: Path | None) -> tuple[Any, dict[str, Any]]:
    from nifi_deploy.core.settings import get_settings
    from nifi_deploy.deploy.config import load_config_file

    settings = get_settings()
    file_data = load_config_file(config_file) if config_file else {}
    return settings, file_data


def _input_chain(
    settings: Any,
    file_data: dict[str, Any],
    flags: dict[str, Any],
    interactive: bool,
) -> Any:
    from nifi_deploy.core.secrets import default_resolver
    from nifi_deploy.deploy.config import DEPLOY_FIELDS
    from nifi_deploy.deploy.inputs import build_input_chain

    return build_input_chain(
        flags=flags,
        file_values={k: file_data.get(k) for k in DEPLOY_FIELDS},
        env_values={k: getattr(settings, k) for k in DEPLOY_FIELDS},
        resolver=default_resolver(settings.secrets_dir),
        interactive=interactive,
    )


def _container_manager(settings: Any, dry_run: bool) -> Any:
    from nifi_deploy.deploy.container import ContainerManager

    return ContainerManager(
        timeout=settings.docker_timeout_seconds,
        build_timeout=settings.build_timeout_seconds,
        dry_run=dry_run,
    )


def _fail(exc: NifiDeployError) -> NoReturn:
    """Report an error raised outside the runner and exit non-zero."""
    logger.error("command.failed", **exc.to_dict())
    err_console.print(f"[bold red]Error[/] ({type(exc).__name__}): {escape(exc.message)}")
    raise typer.Exit(code=exc.exit_code)


def _print_deployment_result(result: Any) -> None:
    """Pretty-print a DeploymentResult."""
    table = Table(title="Deployment Steps")
    table.add_column("Step", style="bold")
    table.add_column("Status")
    table.add_column("Duration", justify="right")
    table.add_column("Detail")

    for step in result.steps:
        style = _STEP_STYLES.get(step.status.value, "white")
        detail = step.error or ", ".join(f"{k}={v}" for k, v in step.detail.items())
        table.add_row(
            step.name,
            f"[{style}]{step.status.value}[/{style}]",
            f"{step.duration_seconds:.2f}s",
            escape(detail),
        )

    console.print(table)

    if result.error:
        err_console.print(f"\n[red]Error ({result.error_type}): {escape(result.error)}[/]")
    else:
        console.print(
            f"\n[green]✓ {result.container_name} started from {result.image}[/] ({result.summary})"
        )
