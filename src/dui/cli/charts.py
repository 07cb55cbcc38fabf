"""ASCII charts for container statistics."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from dui.engine.models import Container, ContainerStats, Image
from dui.utils import format_size, parse_size, truncate_string

BAR_WIDTH = 50
NAME_WIDTH = 20
HIGH_THRESHOLD = 80.0
MEDIUM_THRESHOLD = 50.0


def level_style(percent: float) -> str:
    if percent > HIGH_THRESHOLD:
        return "red"
    if percent > MEDIUM_THRESHOLD:
        return "yellow"
    return "green"


def percent_bar(percent: float, width: int = BAR_WIDTH) -> Text:
    """A ``width``-cell bar, filled proportionally and clamped to 0..100 %."""
    clamped = min(max(percent, 0.0), 100.0)
    filled = int(clamped / 100.0 * width)
    bar = Text("█" * filled, style=level_style(percent))
    bar.append("░" * (width - filled), style="dim")
    return bar


class ChartRenderer:
    """Render bar charts and the dashboard on a rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def cpu_usage(self, stats: Sequence[ContainerStats]) -> None:
        if not stats:
            self._empty("No running containers to display CPU usage")
            return
        self._title("CPU Usage Chart")
        for stat in stats:
            self._bar_line(stat.name, stat.cpu)

    def memory_usage(self, stats: Sequence[ContainerStats]) -> None:
        if not stats:
            self._empty("No running containers to display memory usage")
            return
        self._title("Memory Usage Chart")
        for stat in stats:
            self._bar_line(stat.name, stat.memory, suffix=f" ({stat.memory_usage})")

    def cpu_share(self, stats: Sequence[ContainerStats]) -> None:
        """Each container's share of the total CPU in use."""
        total = sum(stat.cpu for stat in stats)
        if not stats or total <= 0:
            self._empty("No CPU activity to display")
            return
        self._title("CPU Distribution")
        for stat in stats:
            self._bar_line(stat.name, stat.cpu / total * 100.0)

    def network_traffic(self, stats: Sequence[ContainerStats]) -> None:
        self._io_table("Network I/O", stats, lambda stat: stat.network_io)

    def storage_usage(self, stats: Sequence[ContainerStats]) -> None:
        self._io_table("Block I/O", stats, lambda stat: stat.block_io)

    def container_status(self, containers: Sequence[Container]) -> None:
        if not containers:
            self._empty("No containers to display")
            return
        running = sum(1 for container in containers if container.running)
        stopped = len(containers) - running
        self._title("Container Status")
        for label, count in (("Running", running), ("Stopped", stopped)):
            self._bar_line(label, count / len(containers) * 100.0, suffix=f" ({count})", style_by_level=False)

    def image_sizes(self, images: Sequence[Image]) -> None:
        if not images:
            self._empty("No images to display")
            return
        sizes = [(image.reference, parse_size(image.size)) for image in images]
        largest = max(size for _, size in sizes) or 1
        self._title("Image Sizes")
        for name, size in sizes:
            self._bar_line(name, size / largest * 100.0, suffix=f" {format_size(size)}", show_percent=False)

    def dashboard(self, stats: Sequence[ContainerStats]) -> None:
        table = Table(
            title="Real-Time System Dashboard",
            title_style="bold cyan",
            header_style="bold",
            box=None,
            padding=(0, 2),
        )
        for column in ("CONTAINER", "CPU %", "MEMORY %", "MEMORY USAGE", "NETWORK I/O", "BLOCK I/O"):
            table.add_column(column)
        for stat in stats:
            table.add_row(
                escape(stat.name),
                Text(f"{stat.cpu:.2f}", style=level_style(stat.cpu)),
                Text(f"{stat.memory:.2f}", style=level_style(stat.memory)),
                Text(stat.memory_usage, style="cyan"),
                Text(stat.network_io, style="dim"),
                Text(stat.block_io, style="magenta"),
            )
        self.console.print(table)
        if not stats:
            self._empty("No running containers")

    def _bar_line(
        self,
        label: str,
        percent: float,
        *,
        suffix: str = "",
        show_percent: bool = True,
        style_by_level: bool = True,
    ) -> None:
        line = Text(f"{truncate_string(label, NAME_WIDTH):<{NAME_WIDTH}} ")
        bar = percent_bar(percent)
        if not style_by_level:
            bar.stylize("cyan", 0, int(min(max(percent, 0.0), 100.0) / 100.0 * BAR_WIDTH))
        line.append_text(bar)
        if show_percent:
            line.append(f" {percent:.1f}%", style="bold")
        line.append(suffix, style="dim")
        self.console.print(line)

    def _io_table(self, title: str, stats: Sequence[ContainerStats], value) -> None:
        if not stats:
            self._empty(f"No running containers to display {title.lower()}")
            return
        self._title(title)
        for stat in stats:
            self.console.print(Text(f"{truncate_string(stat.name, NAME_WIDTH):<{NAME_WIDTH}} ").append(value(stat)))

    def _title(self, title: str) -> None:
        self.console.print(f"\n[bold cyan]{escape(title)}[/bold cyan]")
        self.console.print("─" * 80, style="dim")

    def _empty(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")
