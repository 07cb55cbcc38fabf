"""Context-sensitive tab completion for the interactive shell."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from loguru import logger
from prompt_toolkit.completion import CompleteEvent, Completer, Completion
from prompt_toolkit.document import Document

from dui.engine.client import EngineClient
from dui.errors import DuiError


@dataclass(frozen=True)
class Candidate:
    """A single completion suggestion."""

    display: str
    replacement: str


class LiveEntities(Enum):
    """Grammar directive: fetch entity names from the engine at completion time."""

    CONTAINERS = "containers"
    IMAGES = "images"


CandidateSource = tuple[str, ...] | LiveEntities

TOP_LEVEL_COMMANDS: tuple[str, ...] = (
    "containers", "images", "networks", "volumes", "monitor", "interactive",
    "list", "start", "stop", "restart", "pause", "unpause", "remove", "logs", "exec", "inspect", "create", "size",
    "info", "attach", "commit", "cp", "diff", "export", "kill", "port", "rename", "top", "update", "wait",
    "pull", "build", "tag", "push", "history", "import", "load", "save",
    "stats", "system", "events", "dashboard", "charts", "cpu-chart", "memory-chart", "pie-chart",
    "help", "clear", "refresh", "exit", "quit", "back",
)  # fmt: skip

CONTAINER_ACTIONS: tuple[str, ...] = (
    "list", "start", "stop", "restart", "pause", "unpause", "remove",
    "logs", "exec", "inspect", "create", "size", "info", "attach",
    "commit", "cp", "diff", "export", "kill", "port", "rename",
    "top", "update", "wait",
)  # fmt: skip

IMAGE_ACTIONS: tuple[str, ...] = (
    "list", "pull", "build", "tag", "push", "remove", "history", "import", "load", "save",
)

MONITOR_ACTIONS: tuple[str, ...] = ("stats", "system", "events", "dashboard", "charts")

CHART_TYPES: tuple[str, ...] = ("cpu", "memory", "pie", "network", "storage", "status", "images", "all")

SUBCOMMANDS: Mapping[str, tuple[str, ...]] = {
    "containers": CONTAINER_ACTIONS,
    "images": IMAGE_ACTIONS,
    "monitor": MONITOR_ACTIONS,
    "charts": CHART_TYPES,
}

BUILD_PATHS = (".", "./", "../", "~/")
FILE_PATHS = ("./", "../", "~/", "/tmp/")
EXEC_COMMANDS = ("ls", "ps", "cat", "echo", "pwd", "whoami", "date", "top", "htop", "vim", "nano")
REPOSITORIES = ("myapp", "nginx", "postgres", "redis", "mysql", "ubuntu", "alpine")
COPY_PATHS = ("./", "/tmp/", "/var/", "/etc/", "/home/")
ARCHIVE_SUFFIXES = (".tar", ".tar.gz", ".tar.bz2")
SIGNALS = ("SIGTERM", "SIGKILL", "SIGINT", "SIGQUIT", "SIGHUP")
RENAME_PREFIXES = ("new-", "renamed-", "backup-", "old-")
TAGS = ("latest", "v1.0", "v1.1", "stable", "dev", "test", "prod")

_CONTAINER_TARGETS = (
    "start", "stop", "restart", "pause", "unpause", "remove", "logs", "inspect", "info", "attach",
    "diff", "kill", "port", "top", "update", "wait", "size", "exec", "commit", "cp", "export", "rename",
)  # fmt: skip
_IMAGE_TARGETS = ("pull", "remove", "push", "history", "save", "tag")


def _build_grammar() -> dict[tuple[str, str, int], CandidateSource]:
    grammar: dict[tuple[str, str, int], CandidateSource] = {}
    for action in _CONTAINER_TARGETS:
        grammar[("containers", action, 2)] = LiveEntities.CONTAINERS
    for action in _IMAGE_TARGETS:
        grammar[("images", action, 2)] = LiveEntities.IMAGES
    grammar.update({
        ("images", "build", 2): BUILD_PATHS,
        ("images", "import", 2): FILE_PATHS,
        ("images", "load", 2): FILE_PATHS,
        ("containers", "exec", 3): EXEC_COMMANDS,
        ("containers", "commit", 3): REPOSITORIES,
        ("containers", "cp", 3): COPY_PATHS,
        ("containers", "export", 3): ARCHIVE_SUFFIXES,
        ("containers", "kill", 3): SIGNALS,
        ("containers", "rename", 3): RENAME_PREFIXES,
        ("images", "tag", 3): TAGS,
        ("images", "import", 3): REPOSITORIES,
        ("images", "save", 3): ARCHIVE_SUFFIXES,
        ("containers", "commit", 4): TAGS,
        ("containers", "cp", 4): COPY_PATHS,
        ("images", "import", 4): TAGS,
    })
    return grammar


GRAMMAR: Mapping[tuple[str, str, int], CandidateSource] = _build_grammar()
MAX_POSITION = 4


class CompletionEngine:
    """Produce completion candidates for a partial input line.

    The engine client is shared with the shell; it is only used to list
    container and image names when the grammar asks for live entities.
    """

    def __init__(
        self,
        client: EngineClient | None = None,
        *,
        grammar: Mapping[tuple[str, str, int], CandidateSource] = GRAMMAR,
        subcommands: Mapping[str, tuple[str, ...]] = SUBCOMMANDS,
        commands: tuple[str, ...] = TOP_LEVEL_COMMANDS,
    ) -> None:
        self._client = client
        self._grammar = grammar
        self._subcommands = subcommands
        self._commands = commands
        self._fetchers: dict[LiveEntities, Callable[[], list[str]]] = {
            LiveEntities.CONTAINERS: self._container_names,
            LiveEntities.IMAGES: self._image_names,
        }

    def complete(self, line: str, cursor: int) -> tuple[int, list[Candidate]]:
        before = line[:cursor]
        tokens = before.split()
        if before and not before[-1].isspace() and tokens:
            partial = tokens.pop()
        else:
            partial = ""
        replace_from = _token_start(before)

        candidates = _filter(self._source_for(tokens), partial)
        return replace_from, candidates

    def _source_for(self, tokens: list[str]) -> Iterable[str]:
        position = len(tokens)
        if position == 0:
            return self._commands
        if position == 1:
            return self._subcommands.get(tokens[0], ())
        if position > MAX_POSITION:
            return ()

        source = self._grammar.get((tokens[0], tokens[1], position))
        if source is None:
            return ()
        if isinstance(source, LiveEntities):
            return self._fetchers[source]()
        return source

    def _container_names(self) -> list[str]:
        if self._client is None:
            return []
        try:
            return [container.name for container in self._client.list_containers()]
        except DuiError as exc:
            logger.debug("container name completion unavailable: {}", exc)
            return []

    def _image_names(self) -> list[str]:
        if self._client is None:
            return []
        try:
            return [image.reference for image in self._client.list_images()]
        except DuiError as exc:
            logger.debug("image name completion unavailable: {}", exc)
            return []


class DuiCompleter(Completer):
    """prompt_toolkit adapter over :class:`CompletionEngine`."""

    def __init__(self, engine: CompletionEngine) -> None:
        self._engine = engine

    def get_completions(self, document: Document, complete_event: CompleteEvent) -> Iterable[Completion]:
        cursor = document.cursor_position
        replace_from, candidates = self._engine.complete(document.text, cursor)
        for candidate in candidates:
            yield Completion(
                candidate.replacement,
                start_position=replace_from - cursor,
                display=candidate.display,
            )


def _filter(source: Iterable[str], partial: str) -> list[Candidate]:
    return [Candidate(display=word, replacement=word) for word in source if word.startswith(partial)]


def _token_start(before: str) -> int:
    for idx in range(len(before) - 1, -1, -1):
        if before[idx].isspace():
            return idx + 1
    return 0
