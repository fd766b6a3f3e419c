"""
Root Typer application for the nifi-deploy CLI.

Commands live in :mod:`nifi_deploy.cli.deploy` and are registered on the
root app directly, so the tool reads ``nifi-deploy deploy`` rather than a
nested group.
"""

from __future__ import annotations

import typer
from typer import Typer

from nifi_deploy import __version__

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

app = Typer(
    name="nifi-deploy",
    help="nifi-deploy: run Apache NiFi in Docker, plain HTTP or TLS.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"nifi-deploy {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="DEBUG, INFO, WARNING or ERROR (default: NIFI_DEPLOY_LOG_LEVEL)."
    ),
    json_logs: bool | None = typer.Option(
        None, "--json-logs/--console-logs", help="Render log events as JSON lines."
    ),
) -> None:
    """nifi-deploy CLI: volumes, container reconciliation and NiFi launch."""
    from nifi_deploy.core.logging import configure_logging
    from nifi_deploy.core.settings import get_settings

    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    if level not in _LOG_LEVELS:
        raise typer.BadParameter(f"unknown log level {level!r}", param_hint="--log-level")
    configure_logging(
        level=level,
        json_format=json_logs if json_logs is not None else settings.json_logs,
    )


# ── Command registration ─────────────────────────────────────────────────

from nifi_deploy.cli.deploy import deploy, dockerfile, status, volumes  # noqa: E402

app.command("deploy")(deploy)
app.command("volumes")(volumes)
app.command("dockerfile")(dockerfile)
app.command("status")(status)
