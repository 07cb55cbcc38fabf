from __future__ import annotations

import io

from rich.console import Console
from support import make_container, make_image

from dui.cli.charts import ChartRenderer, level_style, percent_bar
from dui.cli.render import CONTAINER_MENU_ACTIONS, Renderer
from dui.engine.models import ContainerProcess, ContainerStats


def _stat(name: str, cpu: str, memory: str = "10.00%") -> ContainerStats:
    return ContainerStats(
        name=name,
        cpu_percent=cpu,
        memory_usage="64MiB / 1GiB",
        memory_percent=memory,
        network_io="648B / 0B",
        block_io="0B / 0B",
    )


def test_message_prefixes(renderer: Renderer, output: io.StringIO) -> None:
    renderer.info("Refreshing")
    renderer.success("Done")
    renderer.error("No such container: ghost")

    lines = output.getvalue().splitlines()
    assert lines == ["i Refreshing", "✔ Done", "✘ Error: No such container: ghost"]


def test_engine_text_is_not_interpreted_as_markup(renderer: Renderer, output: io.StringIO) -> None:
    renderer.text("[bold]literal[/bold]\n")
    renderer.text("")

    assert output.getvalue().splitlines() == ["[bold]literal[/bold]", "(no output)"]


def test_numbered_container_table(renderer: Renderer, output: io.StringIO) -> None:
    renderer.containers([make_container(1), make_container(2, status="Exited (137)")], numbered=True)

    rows = [line.split() for line in output.getvalue().splitlines() if "web" in line]
    assert [row[0] for row in rows] == ["1", "2"]
    assert rows[1][2] == "web2"


def test_image_table_and_empty_lists(renderer: Renderer, output: io.StringIO) -> None:
    renderer.images([make_image("nginx")])
    renderer.containers([])
    renderer.volumes([])

    text = output.getvalue()
    assert "nginx" in text
    assert "187MB" in text
    assert "No containers found." in text
    assert "No volumes found." in text


def test_process_table(renderer: Renderer, output: io.StringIO) -> None:
    process = ContainerProcess(pid="42", user="root", time="00:00:01", command="nginx -g daemon off;")

    renderer.processes("web1", [process])

    text = output.getvalue()
    assert "Processes in web1" in text
    assert "nginx -g daemon off;" in text


def test_menu_lists_actions(renderer: Renderer, output: io.StringIO) -> None:
    renderer.menu(CONTAINER_MENU_ACTIONS)

    text = output.getvalue()
    assert "Available actions:" in text
    assert "start <number>" in text
    assert "back" in text


def test_confirm_reads_answer(monkeypatch, console: Console) -> None:
    renderer = Renderer(console)
    monkeypatch.setattr(console, "input", lambda *_args, **_kwargs: "y")

    assert renderer.confirm("Remove container 'web1'?") is True


def test_level_style_thresholds() -> None:
    assert level_style(80.0) == "yellow"
    assert level_style(80.1) == "red"
    assert level_style(50.0) == "green"
    assert level_style(50.5) == "yellow"


def test_percent_bar_is_clamped() -> None:
    assert percent_bar(50.0, width=10).plain == "█" * 5 + "░" * 5
    assert percent_bar(250.0, width=10).plain == "█" * 10
    assert percent_bar(-5.0, width=10).plain == "░" * 10


def test_cpu_share_splits_total(console: Console, output: io.StringIO) -> None:
    ChartRenderer(console).cpu_share([_stat("web1", "30.00%"), _stat("web2", "10.00%")])

    text = output.getvalue()
    assert "75.0%" in text
    assert "25.0%" in text


def test_cpu_share_without_activity(console: Console, output: io.StringIO) -> None:
    ChartRenderer(console).cpu_share([_stat("web1", "0.00%")])

    assert "No CPU activity to display" in output.getvalue()


def test_unparseable_percent_counts_as_zero() -> None:
    assert _stat("web1", "--").cpu == 0.0
