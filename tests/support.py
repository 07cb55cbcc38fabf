"""Test doubles shared across the suite."""

from __future__ import annotations

import subprocess
from collections.abc import Iterable
from typing import Any

from rich.console import Console

from dui.cli.actions import ActionContext
from dui.cli.charts import ChartRenderer
from dui.cli.render import Renderer
from dui.engine.models import Container, Image


class FakeRunner:
    """Stand-in for ``subprocess.run`` keyed on the arguments after the binary."""

    def __init__(self, responses: dict[tuple[str, ...], Any] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[list[str]] = []

    def __call__(self, command: list[str], **_kwargs: Any) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(command))
        response = self.responses.get(tuple(command[1:]), (0, "", ""))
        if isinstance(response, BaseException):
            raise response
        returncode, stdout, stderr = response
        return subprocess.CompletedProcess(command, returncode, stdout, stderr)


class BytesRunner:
    """Stand-in for ``subprocess.run`` that decodes raw bytes with the caller's text options."""

    def __init__(self, responses: dict[tuple[str, ...], bytes]) -> None:
        self.responses = responses

    def __call__(self, command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        raw = self.responses.get(tuple(command[1:]), b"")
        stdout = raw.decode(kwargs.get("encoding") or "utf-8", kwargs.get("errors") or "strict")
        return subprocess.CompletedProcess(command, 0, stdout, "")


class StubClient:
    """Engine client double recording every call made through it."""

    binary = "docker"

    def __init__(self, containers: Iterable[Container] = (), images: Iterable[Image] = ()) -> None:
        self.containers = list(containers)
        self.images = list(images)
        self.calls: list[tuple[Any, ...]] = []

    def list_containers(self) -> list[Container]:
        self.calls.append(("list_containers",))
        return list(self.containers)

    def list_images(self) -> list[Image]:
        self.calls.append(("list_images",))
        return list(self.images)

    def container_stats(self) -> list:
        self.calls.append(("container_stats",))
        return []

    def __getattr__(self, name: str):
        def record(*args: Any) -> str:
            self.calls.append((name, *args))
            return ""

        return record

    def called(self, name: str) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]


class ScriptedReader:
    """Line reader that replays scripted input, then signals EOF."""

    def __init__(self, lines: Iterable[Any]) -> None:
        self._lines = list(lines)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self._lines:
            raise EOFError
        item = self._lines.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


def make_container(index: int, status: str = "Up 2 minutes") -> Container:
    return Container(
        id=f"{index:02d}" + "a" * 62,
        name=f"web{index}",
        image="nginx:latest",
        status=status,
        ports="80/tcp",
    )


def make_image(repository: str, tag: str = "latest", size: str = "187MB") -> Image:
    return Image(
        id="sha256:" + "b" * 64,
        repository=repository,
        tag=tag,
        size=size,
        created="2026-01-01 10:00:00 +0000 UTC",
    )


def make_context(client: Any, console: Console, *, assume_yes: bool = True) -> ActionContext:
    return ActionContext(
        client=client,
        renderer=Renderer(console, assume_yes=assume_yes),
        charts=ChartRenderer(console),
    )
