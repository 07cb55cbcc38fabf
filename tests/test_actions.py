from __future__ import annotations

import io

import pytest
from rich.console import Console
from support import StubClient, make_container, make_context, make_image

from dui.cli.actions import (
    report_errors,
    retag,
    run_container_action,
    run_image_action,
    run_monitor_action,
    show_chart,
)
from dui.engine.models import ContainerStats
from dui.errors import InputValidationError


@pytest.mark.parametrize(
    ("source", "new_tag", "expected"),
    [
        ("nginx:latest", "v1.0", "nginx:v1.0"),
        ("nginx", "stable", "nginx:stable"),
        ("registry.local:5000/app", "dev", "registry.local:5000/app:dev"),
        ("registry.local:5000/app:1.2", "dev", "registry.local:5000/app:dev"),
        ("nginx:latest", "mirror/nginx:prod", "mirror/nginx:prod"),
    ],
)
def test_retag(source: str, new_tag: str, expected: str) -> None:
    assert retag(source, new_tag) == expected


def test_start_reports_success(console: Console, output: io.StringIO) -> None:
    client = StubClient()
    ctx = make_context(client, console)

    run_container_action(ctx, "start", "web3")

    assert client.called("start") == [("start", "web3")]
    assert "Container 'web3' started successfully" in output.getvalue()


def test_invalid_container_name_rejected_before_engine_call(console: Console) -> None:
    client = StubClient()
    ctx = make_context(client, console)

    with pytest.raises(InputValidationError, match="alphanumeric"):
        run_container_action(ctx, "stop", "bad name!")

    assert client.calls == []


def test_missing_target_reports_usage(console: Console) -> None:
    ctx = make_context(StubClient(), console)

    with pytest.raises(InputValidationError, match=r"Missing argument\. Usage: logs <name>"):
        run_container_action(ctx, "logs", None)


def test_missing_extra_argument_reports_usage(console: Console) -> None:
    client = StubClient()
    ctx = make_context(client, console)

    with pytest.raises(InputValidationError, match="Usage: cp <name> <source> <destination>"):
        run_container_action(ctx, "cp", "web1", ["/etc/hosts"])

    assert client.calls == []


def test_unknown_action_is_rejected(console: Console) -> None:
    with pytest.raises(InputValidationError, match="Unknown action 'explode'"):
        run_container_action(make_context(StubClient(), console), "explode", "web1")


def test_declined_confirmation_skips_engine(monkeypatch: pytest.MonkeyPatch, console: Console) -> None:
    client = StubClient()
    ctx = make_context(client, console, assume_yes=False)
    monkeypatch.setattr(ctx.renderer, "confirm", lambda _message: False)

    run_container_action(ctx, "remove", "web1")

    assert client.called("remove_container") == []


def test_kill_forwards_signal(console: Console, output: io.StringIO) -> None:
    client = StubClient()

    run_container_action(make_context(client, console), "kill", "web1", ["SIGKILL"])

    assert client.called("kill") == [("kill", "web1", "SIGKILL")]
    assert "killed with SIGKILL" in output.getvalue()


def test_rename_validates_new_name(console: Console) -> None:
    client = StubClient()

    with pytest.raises(InputValidationError):
        run_container_action(make_context(client, console), "rename", "web1", ["no spaces allowed"])

    assert client.called("rename") == []


def test_commit_joins_repository_and_tag(console: Console) -> None:
    client = StubClient()

    run_container_action(make_context(client, console), "commit", "web1", ["myapp", "v1.0"])

    assert client.called("commit") == [("commit", "web1", "myapp:v1.0")]


def test_list_renders_table(console: Console, output: io.StringIO) -> None:
    client = StubClient(containers=[make_container(1), make_container(2, status="Exited (0) 1 hour ago")])

    run_container_action(make_context(client, console), "list", None)

    text = output.getvalue()
    assert "web1" in text
    assert "Exited (0) 1 hour ago" in text


def test_image_tag_expands_bare_tag(console: Console) -> None:
    client = StubClient()

    run_image_action(make_context(client, console), "tag", "nginx:latest", ["v2"])

    assert client.called("tag") == [("tag", "nginx:latest", "nginx:v2")]


def test_image_build_accepts_path_target(console: Console) -> None:
    client = StubClient()

    run_image_action(make_context(client, console), "build", "./app", ["myapp:dev"])

    assert client.called("build") == [("build", "./app", "myapp:dev")]


def test_image_list_empty(console: Console, output: io.StringIO) -> None:
    run_image_action(make_context(StubClient(), console), "list", None)

    assert "No images found." in output.getvalue()


def test_report_errors_renders_message(console: Console, output: io.StringIO) -> None:
    ctx = make_context(StubClient(), console)

    ok = report_errors(ctx.renderer, run_container_action, ctx, "start", "")

    assert ok is False
    assert "✘ Error: Missing argument. Usage: start <name>" in output.getvalue()


def test_unknown_monitor_type(console: Console) -> None:
    with pytest.raises(InputValidationError, match="Unknown monitor type 'disk'"):
        run_monitor_action(make_context(StubClient(), console), "disk")


def test_unknown_chart_type(console: Console) -> None:
    client = StubClient()

    with pytest.raises(InputValidationError, match="Unknown chart type 'bubble'"):
        show_chart(make_context(client, console), "bubble")

    assert client.calls == []


def test_status_chart_counts_running_and_stopped(console: Console, output: io.StringIO) -> None:
    client = StubClient(containers=[make_container(1), make_container(2), make_container(3, status="Exited (1)")])

    show_chart(make_context(client, console), "status")

    text = output.getvalue()
    assert "Container Status" in text
    assert "(2)" in text
    assert "(1)" in text
    assert client.called("container_stats") == []


def test_images_chart_scales_to_largest(console: Console, output: io.StringIO) -> None:
    client = StubClient(images=[make_image("nginx", size="200MB"), make_image("alpine", size="8MB")])

    show_chart(make_context(client, console), "images")

    text = output.getvalue()
    assert "nginx:latest" in text
    assert "200.0 MB" in text
    assert "8.0 MB" in text


def test_cpu_chart_reports_no_running_containers(console: Console, output: io.StringIO) -> None:
    show_chart(make_context(StubClient(), console), "cpu")

    assert "No running containers to display CPU usage" in output.getvalue()


def test_dashboard_lists_stats(monkeypatch: pytest.MonkeyPatch, console: Console, output: io.StringIO) -> None:
    client = StubClient()
    stat = ContainerStats(
        name="web1",
        cpu_percent="85.50%",
        memory_usage="120MiB / 1GiB",
        memory_percent="11.72%",
        network_io="1kB / 2kB",
        block_io="0B / 0B",
    )
    monkeypatch.setattr(client, "container_stats", lambda: [stat])

    run_monitor_action(make_context(client, console), "dashboard")

    text = output.getvalue()
    assert "Real-Time System Dashboard" in text
    assert "85.50" in text
    assert "120MiB / 1GiB" in text
