"""Named container, image and monitoring actions.

The one-shot CLI, the interactive shell and the numbered sub-menus all resolve
actions through the tables below, so validation and messages stay identical
whichever surface the user types into.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from loguru import logger

from dui.engine.client import EngineClient
from dui.engine.models import ContainerStats
from dui.errors import DuiError, InputValidationError
from dui.utils import validate_container_name, validate_image_name

from .charts import ChartRenderer
from .completion import CHART_TYPES
from .render import Renderer


@dataclass
class ActionContext:
    """Collaborators an action needs; built once per session."""

    client: EngineClient
    renderer: Renderer
    charts: ChartRenderer


Handler = Callable[[ActionContext, str, list[str]], None]


@dataclass(frozen=True)
class Action:
    name: str
    usage: str
    handler: Handler
    min_args: int = 0
    confirm: str | None = None
    validate_target: Callable[[str], None] | None = None


def report_errors(renderer: Renderer, func: Callable[..., object], *args: object) -> bool:
    """Run one action, rendering any dui error instead of raising it."""
    try:
        func(*args)
    except DuiError as exc:
        logger.debug("action failed: {}: {}", type(exc).__name__, exc)
        renderer.error(str(exc))
        return False
    return True


# Container actions


def _lifecycle(method: str, gerund: str, past: str) -> Handler:
    def handler(ctx: ActionContext, name: str, _args: list[str]) -> None:
        ctx.renderer.loading(f"{gerund} container '{name}'...")
        getattr(ctx.client, method)(name)
        ctx.renderer.success(f"Container '{name}' {past} successfully")

    return handler


def _remove_container(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.loading(f"Removing container '{name}'...")
    ctx.client.remove_container(name)
    ctx.renderer.success(f"Container '{name}' removed successfully")


def _logs(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.rule(f"Logs for {name}")
    ctx.renderer.text(ctx.client.logs(name))


def _exec(ctx: ActionContext, name: str, args: list[str]) -> None:
    command = " ".join(args)
    ctx.renderer.loading(f"Executing '{command}' in '{name}'...")
    ctx.renderer.text(ctx.client.exec(name, command))


def _inspect(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.text(ctx.client.inspect(name))


def _size(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.info(f"Container '{name}' size: {ctx.client.container_size(name)}")


def _top(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.processes(name, ctx.client.container_processes(name))


def _attach(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.info(f"Attaching to '{name}'. Detach with Ctrl+P Ctrl+Q.")
    ctx.client.attach(name)


def _commit(ctx: ActionContext, name: str, args: list[str]) -> None:
    repository = args[0] if len(args) == 1 else f"{args[0]}:{args[1]}"
    validate_image_name(repository)
    image_id = ctx.client.commit(name, repository)
    ctx.renderer.success(f"Container '{name}' committed as '{repository}' {image_id}".rstrip())


def _copy(ctx: ActionContext, name: str, args: list[str]) -> None:
    source, destination = args[0], args[1]
    ctx.client.copy_from(name, source, destination)
    ctx.renderer.success(f"Copied '{name}:{source}' to '{destination}'")


def _diff(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.text(ctx.client.diff(name))


def _export(ctx: ActionContext, name: str, args: list[str]) -> None:
    ctx.renderer.loading(f"Exporting container '{name}'...")
    ctx.client.export(name, args[0])
    ctx.renderer.success(f"Container '{name}' exported to '{args[0]}'")


def _kill(ctx: ActionContext, name: str, args: list[str]) -> None:
    signal = args[0] if args else None
    ctx.client.kill(name, signal)
    ctx.renderer.success(f"Container '{name}' killed" + (f" with {signal}" if signal else ""))


def _port(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.text(ctx.client.port(name))


def _rename(ctx: ActionContext, name: str, args: list[str]) -> None:
    new_name = args[0]
    validate_container_name(new_name)
    ctx.client.rename(name, new_name)
    ctx.renderer.success(f"Container '{name}' renamed to '{new_name}'")


def _update(ctx: ActionContext, name: str, args: list[str]) -> None:
    ctx.client.update(name, args)
    ctx.renderer.success(f"Container '{name}' updated successfully")


def _wait(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.loading(f"Waiting for container '{name}' to stop...")
    status = ctx.client.wait(name)
    ctx.renderer.info(f"Container '{name}' exited with status {status}")


def _create(ctx: ActionContext, name: str, args: list[str]) -> None:
    image = args[0]
    validate_image_name(image)
    ports, volumes, env = (args[1:] + [None, None, None])[:3]
    ctx.renderer.loading(f"Creating container '{name}' from '{image}'...")
    ctx.client.create(name, image, ports=ports, volumes=volumes, env=env)
    ctx.renderer.success(f"Container '{name}' created successfully")


CONTAINER_ACTIONS: Mapping[str, Action] = {
    action.name: action
    for action in (
        Action("start", "start <name>", _lifecycle("start", "Starting", "started")),
        Action("stop", "stop <name>", _lifecycle("stop", "Stopping", "stopped")),
        Action("restart", "restart <name>", _lifecycle("restart", "Restarting", "restarted")),
        Action("pause", "pause <name>", _lifecycle("pause", "Pausing", "paused")),
        Action("unpause", "unpause <name>", _lifecycle("unpause", "Unpausing", "unpaused")),
        Action(
            "remove",
            "remove <name>",
            _remove_container,
            confirm="Are you sure you want to remove container '{target}'?",
        ),
        Action("logs", "logs <name>", _logs),
        Action("exec", "exec <name> <command...>", _exec, min_args=1),
        Action("inspect", "inspect <name>", _inspect),
        Action("info", "info <name>", _inspect),
        Action("size", "size <name>", _size),
        Action("top", "top <name>", _top),
        Action("attach", "attach <name>", _attach),
        Action("commit", "commit <name> <repository> [tag]", _commit, min_args=1),
        Action("cp", "cp <name> <source> <destination>", _copy, min_args=2),
        Action("diff", "diff <name>", _diff),
        Action("export", "export <name> <file>", _export, min_args=1),
        Action("kill", "kill <name> [signal]", _kill, confirm="Are you sure you want to kill container '{target}'?"),
        Action("port", "port <name>", _port),
        Action("rename", "rename <name> <new-name>", _rename, min_args=1),
        Action("update", "update <name> <options...>", _update, min_args=1),
        Action("wait", "wait <name>", _wait),
        Action(
            "create",
            "create <name> <image> [ports] [volumes] [env]",
            _create,
            min_args=1,
            validate_target=validate_container_name,
        ),
    )
}


# Image actions


def _pull(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.loading(f"Pulling image '{name}'...")
    ctx.client.pull(name)
    ctx.renderer.success(f"Image '{name}' pulled successfully")


def _build(ctx: ActionContext, path: str, args: list[str]) -> None:
    tag = args[0]
    validate_image_name(tag)
    ctx.renderer.loading(f"Building image '{tag}' from '{path}'...")
    ctx.client.build(path, tag)
    ctx.renderer.success(f"Image '{tag}' built successfully")


def _tag(ctx: ActionContext, source: str, args: list[str]) -> None:
    target = retag(source, args[0])
    validate_image_name(target)
    ctx.client.tag(source, target)
    ctx.renderer.success(f"Image '{source}' tagged as '{target}'")


def _push(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.loading(f"Pushing image '{name}'...")
    ctx.client.push(name)
    ctx.renderer.success(f"Image '{name}' pushed successfully")


def _remove_image(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.loading(f"Removing image '{name}'...")
    ctx.client.remove_image(name)
    ctx.renderer.success(f"Image '{name}' removed successfully")


def _history(ctx: ActionContext, name: str, _args: list[str]) -> None:
    ctx.renderer.rule(f"History of {name}")
    ctx.renderer.text(ctx.client.image_history(name))


def _import(ctx: ActionContext, path: str, args: list[str]) -> None:
    repository = args[0] if len(args) == 1 else f"{args[0]}:{args[1]}"
    validate_image_name(repository)
    ctx.client.import_image(path, repository)
    ctx.renderer.success(f"Imported '{path}' as '{repository}'")


def _load(ctx: ActionContext, path: str, _args: list[str]) -> None:
    ctx.renderer.loading(f"Loading images from '{path}'...")
    ctx.renderer.success(ctx.client.load_image(path) or f"Loaded '{path}'")


def _save(ctx: ActionContext, name: str, args: list[str]) -> None:
    ctx.renderer.loading(f"Saving image '{name}'...")
    ctx.client.save_image(name, args[0])
    ctx.renderer.success(f"Image '{name}' saved to '{args[0]}'")


def _skip_validation(_target: str) -> None:
    return None


IMAGE_ACTIONS: Mapping[str, Action] = {
    action.name: action
    for action in (
        Action("pull", "pull <image>", _pull),
        Action("build", "build <path> <tag>", _build, min_args=1, validate_target=_skip_validation),
        Action("tag", "tag <image> <new-tag>", _tag, min_args=1),
        Action("push", "push <image>", _push),
        Action(
            "remove",
            "remove <image>",
            _remove_image,
            confirm="Are you sure you want to remove image '{target}'?",
        ),
        Action("history", "history <image>", _history),
        Action("import", "import <file> <repository> [tag]", _import, min_args=1, validate_target=_skip_validation),
        Action("load", "load <file>", _load, validate_target=_skip_validation),
        Action("save", "save <image> <file>", _save, min_args=1),
    )
}


def retag(source: str, new_tag: str) -> str:
    """Expand a bare tag (``v1.0``) into a full reference on the source repository."""
    if ":" in new_tag or "/" in new_tag:
        return new_tag
    repository, sep, tag = source.rpartition(":")
    # A colon before the last slash belongs to a registry port, not a tag.
    if not sep or "/" in tag:
        repository = source
    return f"{repository}:{new_tag}"


def run_action(
    ctx: ActionContext,
    table: Mapping[str, Action],
    name: str,
    target: str | None,
    args: Sequence[str] = (),
    *,
    default_validator: Callable[[str], None],
) -> None:
    """Validate and run one named action; raises ``DuiError`` on failure."""
    action = table.get(name)
    if action is None:
        raise InputValidationError(f"Unknown action '{name}'. Available: {', '.join(table)}")
    if not target:
        raise InputValidationError(f"Missing argument. Usage: {action.usage}")
    (action.validate_target or default_validator)(target)
    extra = list(args)
    if len(extra) < action.min_args:
        raise InputValidationError(f"Missing argument. Usage: {action.usage}")
    if action.confirm and not ctx.renderer.confirm(action.confirm.format(target=target)):
        ctx.renderer.info("Cancelled.")
        return
    action.handler(ctx, target, extra)


def run_container_action(ctx: ActionContext, name: str, target: str | None, args: Sequence[str] = ()) -> None:
    if name == "list":
        ctx.renderer.containers(ctx.client.list_containers())
        return
    run_action(ctx, CONTAINER_ACTIONS, name, target, args, default_validator=validate_container_name)


def run_image_action(ctx: ActionContext, name: str, target: str | None, args: Sequence[str] = ()) -> None:
    if name == "list":
        ctx.renderer.images(ctx.client.list_images())
        return
    run_action(ctx, IMAGE_ACTIONS, name, target, args, default_validator=validate_image_name)


# Monitoring


def show_stats(ctx: ActionContext) -> None:
    ctx.renderer.loading("Fetching container statistics...")
    ctx.renderer.stats(ctx.client.container_stats())


def show_system(ctx: ActionContext) -> None:
    ctx.renderer.loading("Fetching system information...")
    ctx.renderer.rule("Docker System Information")
    ctx.renderer.text(ctx.client.system_info())


def follow_events(ctx: ActionContext) -> None:
    ctx.renderer.info("Monitoring Docker events (Press Ctrl+C to stop)...")
    ctx.client.stream_events(ctx.renderer.text)


def show_dashboard(ctx: ActionContext) -> None:
    ctx.charts.dashboard(ctx.client.container_stats())


def show_chart(ctx: ActionContext, chart: str) -> None:
    if chart not in CHART_TYPES:
        raise InputValidationError(f"Unknown chart type '{chart}'. Available: {', '.join(CHART_TYPES)}")
    if chart in ("status", "all"):
        ctx.charts.container_status(ctx.client.list_containers())
    if chart in ("images", "all"):
        ctx.charts.image_sizes(ctx.client.list_images())
    if chart in ("status", "images"):
        return

    stats = ctx.client.container_stats()
    renderers: dict[str, Callable[[Sequence[ContainerStats]], None]] = {
        "cpu": ctx.charts.cpu_usage,
        "memory": ctx.charts.memory_usage,
        "pie": ctx.charts.cpu_share,
        "network": ctx.charts.network_traffic,
        "storage": ctx.charts.storage_usage,
    }
    for name, render in renderers.items():
        if chart in (name, "all"):
            render(stats)


MONITOR_ACTIONS: Mapping[str, Callable[[ActionContext], None]] = {
    "stats": show_stats,
    "system": show_system,
    "events": follow_events,
    "dashboard": show_dashboard,
    "charts": lambda ctx: show_chart(ctx, "all"),
}


def run_monitor_action(ctx: ActionContext, name: str) -> None:
    action = MONITOR_ACTIONS.get(name)
    if action is None:
        raise InputValidationError(f"Unknown monitor type '{name}'. Available: {', '.join(MONITOR_ACTIONS)}")
    action(ctx)


def show_networks(ctx: ActionContext) -> None:
    ctx.renderer.networks(ctx.client.list_networks())


def show_volumes(ctx: ActionContext) -> None:
    ctx.renderer.volumes(ctx.client.list_volumes())
