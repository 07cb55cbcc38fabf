"""Terminal rendering for dui."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from dui.engine.models import Container, ContainerProcess, ContainerStats, Image, Network, Volume

CONTAINER_MENU_ACTIONS: tuple[tuple[str, str], ...] = (
    ("start <number>", "Start container"),
    ("stop <number>", "Stop container"),
    ("restart <number>", "Restart container"),
    ("pause <number>", "Pause container"),
    ("unpause <number>", "Unpause container"),
    ("remove <number>", "Remove container"),
    ("logs <number>", "Show logs"),
    ("exec <number> <cmd>", "Execute command"),
    ("inspect <number>", "Inspect container"),
    ("info <number>", "Get container info"),
    ("size <number>", "Show container size"),
    ("top <number>", "Show processes"),
    ("attach <number>", "Attach to container"),
    ("commit <number> <repo>", "Commit container"),
    ("cp <number> <src> <dest>", "Copy files"),
    ("diff <number>", "Show diff"),
    ("export <number> <file>", "Export container"),
    ("kill <number> [signal]", "Kill container"),
    ("port <number>", "Show ports"),
    ("rename <number> <new>", "Rename container"),
    ("update <number> <options>", "Update container"),
    ("wait <number>", "Wait for container"),
    ("list / refresh", "Show the list again / re-fetch it"),
    ("back", "Back to main menu"),
)

IMAGE_MENU_ACTIONS: tuple[tuple[str, str], ...] = (
    ("remove <number>", "Remove image"),
    ("tag <number> <new-tag>", "Tag image"),
    ("push <number>", "Push image"),
    ("history <number>", "Show history"),
    ("save <number> <file>", "Save image"),
    ("list / refresh", "Show the list again / re-fetch it"),
    ("back", "Back to main menu"),
)

INTERACTIVE_HELP: tuple[tuple[str, tuple[tuple[str, str], ...]], ...] = (
    (
        "Containers",
        (
            ("containers", "List containers and open the numbered menu"),
            ("containers <action> <name> [args]", "Run a container action by name"),
        ),
    ),
    (
        "Images",
        (
            ("images", "List images and open the numbered menu"),
            ("images <action> <name> [args]", "Run an image action by name"),
        ),
    ),
    ("Networks & volumes", (("networks", "List networks"), ("volumes", "List volumes"))),
    (
        "Monitoring",
        (
            ("stats", "Show container statistics"),
            ("system", "Show Docker system information"),
            ("events", "Follow Docker events (Ctrl+C to stop)"),
            ("dashboard", "Show the system dashboard"),
            ("charts", "Display all charts"),
            ("cpu-chart / memory-chart / pie-chart", "Show one chart"),
        ),
    ),
    (
        "Utility",
        (
            ("help", "Show this help message"),
            ("clear", "Clear the screen"),
            ("exit / quit", "Leave interactive mode"),
        ),
    ),
)


class Renderer:
    """CLI renderer using Rich for terminal output."""

    def __init__(self, console: Console | None = None, *, assume_yes: bool = False) -> None:
        self.console: Console = console or Console()
        self._assume_yes = assume_yes

    def info(self, message: str) -> None:
        self._print(f"[blue]i[/blue] [blue]{escape(message)}[/blue]")

    def success(self, message: str) -> None:
        self._print(f"[green]✔ {escape(message)}[/green]")

    def error(self, message: str) -> None:
        self._print(f"[bold red]✘ Error:[/bold red] [red]{escape(message)}[/red]")

    def warning(self, message: str) -> None:
        self._print(f"[yellow]! {escape(message)}[/yellow]")

    def loading(self, message: str) -> None:
        self._print(f"[dim]… {escape(message)}[/dim]")

    def text(self, content: str) -> None:
        """Print engine output verbatim."""
        body = content.rstrip()
        if body:
            self.console.print(body, markup=False, highlight=False)
        else:
            self._print("[dim](no output)[/dim]")

    def confirm(self, message: str) -> bool:
        if self._assume_yes:
            return True
        return Confirm.ask(f"[yellow]{escape(message)}[/yellow]", console=self.console, default=False)

    def rule(self, title: str) -> None:
        self.console.print(Rule(f"[bold cyan]{escape(title)}[/bold cyan]", style="dim"))

    def clear(self) -> None:
        self.console.clear()

    def welcome(self) -> None:
        self._print("[bold magenta]dui[/bold magenta] [dim]- Docker, interactively.[/dim]")

    # Tables

    def containers(self, containers: Sequence[Container], *, numbered: bool = False) -> None:
        if not containers:
            self.info("No containers found.")
            return
        table = self._table("Docker Containers", numbered, ("ID", "NAME", "IMAGE", "STATUS", "PORTS"))
        for idx, container in enumerate(containers, start=1):
            status = Text(container.status, style="green" if container.running else "red")
            row = [container.short_id, container.name, container.image, status, container.ports]
            self._add_row(table, idx, numbered, row)
        self.console.print(table)

    def images(self, images: Sequence[Image], *, numbered: bool = False) -> None:
        if not images:
            self.info("No images found.")
            return
        table = self._table("Docker Images", numbered, ("ID", "REPOSITORY", "TAG", "SIZE", "CREATED"))
        for idx, image in enumerate(images, start=1):
            row = [image.short_id, image.repository, image.tag, image.size, image.created]
            self._add_row(table, idx, numbered, row)
        self.console.print(table)

    def stats(self, stats: Sequence[ContainerStats]) -> None:
        if not stats:
            self.info("No running containers.")
            return
        table = self._table(
            "Container Statistics", False, ("NAME", "CPU %", "MEM USAGE", "MEM %", "NET I/O", "BLOCK I/O")
        )
        for stat in stats:
            row = [stat.name, stat.cpu_percent, stat.memory_usage, stat.memory_percent, stat.network_io, stat.block_io]
            self._add_row(table, 0, False, row)
        self.console.print(table)

    def networks(self, networks: Sequence[Network]) -> None:
        if not networks:
            self.info("No networks found.")
            return
        table = self._table("Docker Networks", False, ("ID", "NAME", "DRIVER", "SCOPE"))
        for network in networks:
            self._add_row(table, 0, False, [network.id[:12], network.name, network.driver, network.scope])
        self.console.print(table)

    def volumes(self, volumes: Sequence[Volume]) -> None:
        if not volumes:
            self.info("No volumes found.")
            return
        table = self._table("Docker Volumes", False, ("NAME", "DRIVER", "MOUNTPOINT"))
        for volume in volumes:
            self._add_row(table, 0, False, [volume.name, volume.driver, volume.mountpoint])
        self.console.print(table)

    def processes(self, name: str, processes: Sequence[ContainerProcess]) -> None:
        if not processes:
            self.info(f"No processes running in '{name}'.")
            return
        table = self._table(f"Processes in {name}", False, ("PID", "USER", "TIME", "COMMAND"))
        for process in processes:
            self._add_row(table, 0, False, [process.pid, process.user, process.time, process.command])
        self.console.print(table)

    def menu(self, actions: Sequence[tuple[str, str]]) -> None:
        self._print("[bold yellow]Available actions:[/bold yellow]")
        self.console.print(_command_table(actions))

    def interactive_help(self) -> None:
        self._print("[bold yellow]Interactive mode commands[/bold yellow]")
        for title, commands in INTERACTIVE_HELP:
            self._print(f"\n[bold green]{title}[/bold green]")
            self.console.print(_command_table(commands))
        self._print("\n[dim]Press TAB to complete commands, actions, container and image names.[/dim]")

    def _table(self, title: str, numbered: bool, columns: Sequence[str]) -> Table:
        table = Table(title=title, title_style="bold cyan", header_style="bold", box=None, padding=(0, 2))
        if numbered:
            table.add_column("#", style="bold yellow", justify="right")
        for column in columns:
            table.add_column(column, overflow="fold")
        return table

    def _add_row(self, table: Table, idx: int, numbered: bool, row: Sequence[str | Text]) -> None:
        cells: list[str | Text] = [escape(cell) if isinstance(cell, str) else cell for cell in row]
        if numbered:
            cells.insert(0, str(idx))
        table.add_row(*cells)

    def _print(self, message: str) -> None:
        self.console.print(message)


def _command_table(commands: Sequence[tuple[str, str]]) -> Table:
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Command", style="cyan", no_wrap=True)
    table.add_column("Description", style="dim")
    for command, description in commands:
        table.add_row(escape(command), escape(description))
    return table
