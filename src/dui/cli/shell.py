"""Interactive shell loop and numbered sub-menus."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Generic, TypeVar

from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.document import Document
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.lexers import Lexer
from prompt_toolkit.patch_stdout import patch_stdout

from dui.engine.models import Container, Image
from dui.errors import DuiError, InputValidationError

from .actions import (
    CONTAINER_ACTIONS,
    IMAGE_ACTIONS,
    ActionContext,
    run_container_action,
    run_image_action,
    run_monitor_action,
    show_chart,
    show_networks,
    show_volumes,
)
from .completion import CompletionEngine, DuiCompleter
from .render import CONTAINER_MENU_ACTIONS, IMAGE_MENU_ACTIONS

ReadLine = Callable[[str], str]
Command = Callable[[list[str]], bool]
T = TypeVar("T")

PROMPT = "dui> "
EXIT_COMMANDS = frozenset({"exit", "quit", "q"})
EXIT_HINT = "Use 'exit' or 'quit' to leave interactive mode."
IMAGE_ONLY_ACTIONS = ("pull", "build", "tag", "push", "history", "import", "load", "save")
MENU_IMAGE_ACTIONS = ("remove", "tag", "push", "history", "save")
COMMAND_STYLES = {
    "containers": "ansicyan",
    "images": "ansigreen",
    "networks": "ansiblue",
    "volumes": "ansimagenta",
    "monitor": "ansiyellow",
}


class CommandLexer(Lexer):
    """Colour the input line by the command it starts with."""

    def lex_document(self, document: Document) -> Callable[[int], list[tuple[str, str]]]:
        lines = document.lines

        def get_line(lineno: int) -> list[tuple[str, str]]:
            line = lines[lineno] if lineno < len(lines) else ""
            style = next((style for command, style in COMMAND_STYLES.items() if line.startswith(command)), "")
            return [(style, line)]

        return get_line


def build_prompt_reader(engine: CompletionEngine) -> ReadLine:
    """Line reader with tab completion and in-memory history."""
    session: PromptSession[str] = PromptSession(
        completer=DuiCompleter(engine),
        history=InMemoryHistory(),
        lexer=CommandLexer(),
        complete_while_typing=False,
    )

    def read(prompt: str) -> str:
        with patch_stdout(raw=True):
            return session.prompt(prompt)

    return read


def resolve_index(snapshot: Sequence[T], token: str, noun: str) -> T:
    """Map a 1-based index typed by the user onto the displayed snapshot."""
    if not (token.isascii() and token.isdigit()):
        raise InputValidationError(f"Invalid {noun} number '{token}'. Enter a number between 1 and {len(snapshot)}.")
    index = int(token)
    if not 1 <= index <= len(snapshot):
        raise InputValidationError(f"{noun.capitalize()} number {index} is out of range (1-{len(snapshot)}).")
    return snapshot[index - 1]


def image_target(image: Image) -> str:
    if image.repository == "<none>" or image.tag == "<none>":
        return image.short_id
    return image.reference


class NumberedMenu(Generic[T]):
    """Nested loop acting on a numbered snapshot: ``<action> <number> [args...]``.

    The snapshot is fetched when the menu opens and only re-fetched on
    ``refresh``; indices always refer to the list the user last saw.
    """

    def __init__(
        self,
        ctx: ActionContext,
        read_line: ReadLine,
        *,
        kind: str,
        noun: str,
        fetch: Callable[[], list[T]],
        show: Callable[[Sequence[T]], None],
        target: Callable[[T], str],
        run: Callable[[ActionContext, str, str, list[str]], None],
        actions: Sequence[str],
        help_rows: Sequence[tuple[str, str]],
    ) -> None:
        self._ctx = ctx
        self._read_line = read_line
        self.kind = kind
        self._noun = noun
        self._fetch = fetch
        self._show = show
        self._target = target
        self._run = run
        self._actions = tuple(actions)
        self._help_rows = help_rows
        self.snapshot: list[T] = []

    def open(self) -> bool:
        """Run the menu; returns True when the user asked to end the session."""
        self.refresh()
        if not self.snapshot:
            return False
        while True:
            try:
                line = self._read_line(f"dui/{self.kind}> ")
            except KeyboardInterrupt:
                self._ctx.renderer.info("Use 'back' to return to the main menu or 'exit' to quit.")
                continue
            except EOFError:
                return True
            outcome = self.handle_line(line)
            if outcome is not None:
                return outcome

    def refresh(self) -> None:
        self.snapshot = list(self._fetch())
        self.display()

    def display(self) -> None:
        self._show(self.snapshot)
        if self.snapshot:
            self._ctx.renderer.menu(self._help_rows)

    def handle_line(self, line: str) -> bool | None:
        """Handle one sub-menu line: None stays in the menu, False goes back, True exits."""
        tokens = line.split()
        if tokens and tokens[0] == self.kind:
            tokens = tokens[1:]
        if not tokens:
            return None

        action, rest = tokens[0], tokens[1:]
        renderer = self._ctx.renderer
        if action in EXIT_COMMANDS:
            return True
        if action == "back":
            return False
        if action == "list":
            self.display()
            return None
        if action == "refresh":
            try:
                self.refresh()
            except DuiError as exc:
                renderer.error(str(exc))
            return None
        if action == "help":
            renderer.menu(self._help_rows)
            return None
        if action not in self._actions:
            renderer.error(f"Unknown action '{action}'. Type 'help' to see the available actions.")
            return None
        if not rest:
            renderer.error(f"Usage: {action} <number> [args...]")
            return None

        try:
            item = resolve_index(self.snapshot, rest[0], self._noun)
            self._run(self._ctx, action, self._target(item), rest[1:])
        except DuiError as exc:
            renderer.error(str(exc))
        except KeyboardInterrupt:
            renderer.warning("Interrupted.")
        return None


class InteractiveShell:
    """Read-eval loop over a fixed table of named commands."""

    def __init__(
        self,
        ctx: ActionContext,
        *,
        read_line: ReadLine | None = None,
        completion: CompletionEngine | None = None,
    ) -> None:
        self._ctx = ctx
        self._read_line = read_line or build_prompt_reader(completion or CompletionEngine(ctx.client))
        self._commands: dict[str, Command] = {
            "help": self._help,
            "clear": self._clear,
            "containers": self._containers,
            "images": self._images,
            "networks": lambda _args: self._call(show_networks),
            "volumes": lambda _args: self._call(show_volumes),
            "monitor": self._monitor,
            "stats": lambda _args: self._call(run_monitor_action, "stats"),
            "system": lambda _args: self._call(run_monitor_action, "system"),
            "events": lambda _args: self._call(run_monitor_action, "events"),
            "dashboard": lambda _args: self._call(run_monitor_action, "dashboard"),
            "charts": lambda args: self._call(show_chart, args[0] if args else "all"),
            "cpu-chart": lambda _args: self._call(show_chart, "cpu"),
            "memory-chart": lambda _args: self._call(show_chart, "memory"),
            "pie-chart": lambda _args: self._call(show_chart, "pie"),
            "interactive": lambda _args: self._note("Already in interactive mode."),
            "back": lambda _args: self._note("Already at the main menu."),
            "refresh": lambda _args: self._note("Use 'refresh' inside the containers or images menu."),
            "list": lambda _args: self._call(run_container_action, "list", None),
        }
        for action in CONTAINER_ACTIONS:
            self._commands.setdefault(action, self._direct(run_container_action, action))
        for action in IMAGE_ONLY_ACTIONS:
            self._commands.setdefault(action, self._direct(run_image_action, action))

    @property
    def commands(self) -> list[str]:
        return list(self._commands)

    def run(self) -> None:
        renderer = self._ctx.renderer
        renderer.info("Entering interactive mode. Type 'help' for available commands or 'exit' to quit.")
        while True:
            try:
                line = self._read_line(PROMPT)
            except KeyboardInterrupt:
                renderer.info(EXIT_HINT)
                continue
            except EOFError:
                break
            except OSError as exc:
                renderer.error(f"Error reading input: {exc}")
                break
            if self.handle_line(line):
                break
        renderer.info("Goodbye!")

    def handle_line(self, line: str) -> bool:
        """Dispatch one line; returns True when the session should end."""
        tokens = line.split()
        if not tokens:
            return False
        command, args = tokens[0], tokens[1:]
        if command in EXIT_COMMANDS:
            return True
        handler = self._commands.get(command)
        if handler is None:
            self._ctx.renderer.error(f"Unknown command '{command}'. Type 'help' for available commands.")
            return False
        logger.debug("dispatch {} {}", command, args)
        try:
            return handler(args)
        except KeyboardInterrupt:
            self._ctx.renderer.warning("Interrupted.")
            return False

    def container_menu(self) -> NumberedMenu[Container]:
        return NumberedMenu(
            self._ctx,
            self._read_line,
            kind="containers",
            noun="container",
            fetch=self._ctx.client.list_containers,
            show=lambda items: self._ctx.renderer.containers(items, numbered=True),
            target=lambda container: container.name,
            run=run_container_action,
            actions=[action for action in CONTAINER_ACTIONS if action != "create"],
            help_rows=CONTAINER_MENU_ACTIONS,
        )

    def image_menu(self) -> NumberedMenu[Image]:
        return NumberedMenu(
            self._ctx,
            self._read_line,
            kind="images",
            noun="image",
            fetch=self._ctx.client.list_images,
            show=lambda items: self._ctx.renderer.images(items, numbered=True),
            target=image_target,
            run=run_image_action,
            actions=MENU_IMAGE_ACTIONS,
            help_rows=IMAGE_MENU_ACTIONS,
        )

    def _containers(self, args: list[str]) -> bool:
        if args:
            return self._call(run_container_action, args[0], _at(args, 1), args[2:])
        return self._open_menu(self.container_menu())

    def _images(self, args: list[str]) -> bool:
        if args:
            return self._call(run_image_action, args[0], _at(args, 1), args[2:])
        return self._open_menu(self.image_menu())

    def _monitor(self, args: list[str]) -> bool:
        if not args:
            self._ctx.renderer.error("Usage: monitor <stats|system|events|dashboard|charts>")
            return False
        return self._call(run_monitor_action, args[0])

    def _open_menu(self, menu: NumberedMenu) -> bool:
        try:
            return menu.open()
        except DuiError as exc:
            self._ctx.renderer.error(str(exc))
            return False

    def _direct(self, run: Callable[..., None], action: str) -> Command:
        def command(args: list[str]) -> bool:
            return self._call(run, action, _at(args, 0), args[1:])

        return command

    def _call(self, func: Callable[..., None], *args: object) -> bool:
        try:
            func(self._ctx, *args)
        except DuiError as exc:
            self._ctx.renderer.error(str(exc))
        return False

    def _help(self, _args: list[str]) -> bool:
        self._ctx.renderer.interactive_help()
        return False

    def _clear(self, _args: list[str]) -> bool:
        self._ctx.renderer.clear()
        return False

    def _note(self, message: str) -> bool:
        self._ctx.renderer.info(message)
        return False


def _at(items: list[str], index: int) -> str | None:
    return items[index] if len(items) > index else None
