"""CLI main module for dui."""

from __future__ import annotations

from enum import Enum
from typing import Optional

import typer
from rich import get_console

from dui import __version__
from dui.config import Settings, get_settings
from dui.engine.client import EngineClient
from dui.engine.readiness import ReadinessProber
from dui.errors import EngineUnavailableError
from dui.logging_utils import configure_logging

from .actions import (
    ActionContext,
    report_errors,
    run_container_action,
    run_image_action,
    run_monitor_action,
    show_chart,
    show_networks,
    show_volumes,
)
from .charts import ChartRenderer
from .completion import CHART_TYPES, CONTAINER_ACTIONS, IMAGE_ACTIONS, MONITOR_ACTIONS
from .render import Renderer
from .shell import InteractiveShell

ContainerAction = Enum("ContainerAction", {name: name for name in CONTAINER_ACTIONS}, type=str)
ImageAction = Enum("ImageAction", {name: name for name in IMAGE_ACTIONS}, type=str)
MonitorType = Enum("MonitorType", {name: name for name in MONITOR_ACTIONS}, type=str)
ChartType = Enum("ChartType", {name: name for name in CHART_TYPES}, type=str)

PASS_THROUGH = {"allow_extra_args": True, "ignore_unknown_options": True}

app = typer.Typer(
    name="dui",
    help="An intuitive Docker management CLI with interactive menus and tab completion.",
    add_completion=False,
    rich_markup_mode="rich",
)


def build_context(settings: Settings, *, assume_yes: bool = False) -> ActionContext:
    """Create the engine client and renderers for one invocation."""
    # Same console as the cli log handler.
    console = get_console()
    return ActionContext(
        client=EngineClient(settings.engine_binary, logs_tail=settings.logs_tail),
        renderer=Renderer(console, assume_yes=assume_yes),
        charts=ChartRenderer(console),
    )


def build_prober(client: EngineClient, settings: Settings) -> ReadinessProber:
    return ReadinessProber(
        client,
        interval=settings.probe_interval,
        attempts=settings.probe_attempts,
        auto_start=settings.auto_start,
    )


def _open_session(*, assume_yes: bool = False) -> ActionContext | None:
    """Build the context and make sure the daemon answers; None when it does not."""
    settings = get_settings()
    configure_logging(profile=settings.log_profile, level=settings.log_level)
    ctx = build_context(settings, assume_yes=assume_yes)
    try:
        build_prober(ctx.client, settings).ensure_ready()
    except EngineUnavailableError as exc:
        ctx.renderer.error(str(exc))
        ctx.renderer.info("Please make sure Docker is installed and running.")
        return None
    return ctx


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"dui {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback, is_eager=True, help="Show the version and exit."
    ),
) -> None:
    if ctx.invoked_subcommand is None:
        interactive()


@app.command(context_settings=PASS_THROUGH)
def containers(
    action: ContainerAction = typer.Argument(..., help="Action to perform"),  # noqa: B008
    name: Optional[str] = typer.Argument(None, help="Container name or ID"),
    args: Optional[list[str]] = typer.Argument(None, help="Extra arguments for the action"),  # noqa: B008
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Manage Docker containers."""
    session = _open_session(assume_yes=yes)
    if session is None:
        return
    report_errors(session.renderer, run_container_action, session, action.value, name, args or [])


@app.command(context_settings=PASS_THROUGH)
def images(
    action: ImageAction = typer.Argument(..., help="Action to perform"),  # noqa: B008
    name: Optional[str] = typer.Argument(None, help="Image name, build path or archive file"),
    args: Optional[list[str]] = typer.Argument(None, help="Extra arguments for the action"),  # noqa: B008
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Manage Docker images."""
    session = _open_session(assume_yes=yes)
    if session is None:
        return
    report_errors(session.renderer, run_image_action, session, action.value, name, args or [])


@app.command()
def networks() -> None:
    """List Docker networks."""
    session = _open_session()
    if session is not None:
        report_errors(session.renderer, show_networks, session)


@app.command()
def volumes() -> None:
    """List Docker volumes."""
    session = _open_session()
    if session is not None:
        report_errors(session.renderer, show_volumes, session)


@app.command()
def monitor(kind: MonitorType = typer.Argument(..., help="Resource type to monitor")) -> None:  # noqa: B008
    """Monitor Docker resources."""
    session = _open_session()
    if session is not None:
        report_errors(session.renderer, run_monitor_action, session, kind.value)


@app.command()
def charts(chart: ChartType = typer.Argument("all", help="Chart to display")) -> None:  # noqa: B008
    """Display resource charts."""
    session = _open_session()
    if session is not None:
        report_errors(session.renderer, show_chart, session, ChartType(chart).value)


@app.command()
def interactive() -> None:
    """Launch interactive mode."""
    session = _open_session()
    if session is None:
        return
    session.renderer.welcome()
    InteractiveShell(session).run()


if __name__ == "__main__":
    app()
