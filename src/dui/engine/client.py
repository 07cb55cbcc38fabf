"""Subprocess client for the Docker command-line tool."""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from loguru import logger
from pydantic import ValidationError

from dui.errors import EngineCommandError, EngineNotInstalledError
from dui.utils import format_size

from .models import Container, ContainerProcess, ContainerStats, EngineRecord, Image, Network, Volume

Runner = Callable[..., "subprocess.CompletedProcess[str]"]
RecordT = TypeVar("RecordT", bound=EngineRecord)

LIVENESS_ARGS = ("info", "--format", "{{.ServerVersion}}")


@dataclass(frozen=True)
class EngineResult:
    """Captured outcome of one engine invocation."""

    args: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class EngineClient:
    """Run one engine subprocess per request, synchronously."""

    def __init__(
        self,
        binary: str = "docker",
        *,
        runner: Runner = subprocess.run,
        popen: Callable[..., subprocess.Popen[str]] = subprocess.Popen,
        logs_tail: int = 50,
    ) -> None:
        self.binary = binary
        self._runner = runner
        self._popen = popen
        self._logs_tail = logs_tail

    def run(self, args: Sequence[str], *, check: bool = True) -> EngineResult:
        command = [self.binary, *args]
        logger.debug("engine.run {}", " ".join(command))
        try:
            completed = self._runner(  # noqa: S603
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise EngineNotInstalledError(self.binary) from exc
        except OSError as exc:
            raise EngineCommandError(str(exc), command) from exc

        result = EngineResult(
            args=command,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
        if check and not result.ok:
            raise EngineCommandError(result.stderr, command, result.returncode)
        return result

    def is_installed(self) -> bool:
        try:
            return self.run(["--version"], check=False).ok
        except (EngineNotInstalledError, EngineCommandError):
            return False

    def is_live(self) -> bool:
        try:
            return self.run(LIVENESS_ARGS, check=False).ok
        except (EngineNotInstalledError, EngineCommandError):
            return False

    # Listings

    def list_containers(self) -> list[Container]:
        return self._list(["ps", "-a", "--format", "json"], Container)

    def list_images(self) -> list[Image]:
        return self._list(["images", "--format", "json"], Image)

    def container_stats(self) -> list[ContainerStats]:
        return self._list(["stats", "--no-stream", "--format", "json"], ContainerStats)

    def list_networks(self) -> list[Network]:
        return self._list(["network", "ls", "--format", "json"], Network)

    def list_volumes(self) -> list[Volume]:
        return self._list(["volume", "ls", "--format", "json"], Volume)

    def container_processes(self, name: str) -> list[ContainerProcess]:
        output = self.run(["top", name]).stdout
        return parse_process_table(output)

    def container_size(self, name: str) -> str:
        output = self.run(["ps", "-a", "-s", "--format", "json", "--filter", f"name={name}"]).stdout
        fallback: str | None = None
        for data in _json_lines(output, "container size"):
            size = data.get("Size")
            if not isinstance(size, str):
                continue
            rendered = format_size(int(size)) if size.isdigit() else size
            if data.get("Names") == name:
                return rendered
            fallback = fallback or rendered
        if fallback is None:
            raise EngineCommandError("Container not found or size information unavailable")
        return fallback

    def system_info(self) -> str:
        return self.run(["system", "info"]).stdout

    # Container operations

    def start(self, name: str) -> None:
        self.run(["start", name])

    def stop(self, name: str) -> None:
        self.run(["stop", name])

    def restart(self, name: str) -> None:
        self.run(["restart", name])

    def pause(self, name: str) -> None:
        self.run(["pause", name])

    def unpause(self, name: str) -> None:
        self.run(["unpause", name])

    def remove_container(self, name: str) -> None:
        self.run(["rm", name])

    def logs(self, name: str) -> str:
        result = self.run(["logs", "--tail", str(self._logs_tail), name])
        # The engine forwards the container's stderr stream on our stderr.
        return result.stdout + result.stderr

    def exec(self, name: str, command: str) -> str:
        return self.run(["exec", name, "sh", "-c", command]).stdout

    def inspect(self, name: str) -> str:
        return self.run(["inspect", name]).stdout

    def attach(self, name: str) -> int:
        """Attach the current terminal to a running container."""
        try:
            process = self._popen([self.binary, "attach", name])  # noqa: S603
        except FileNotFoundError as exc:
            raise EngineNotInstalledError(self.binary) from exc
        return process.wait()

    def commit(self, name: str, repository: str) -> str:
        return self.run(["commit", name, repository]).stdout.strip()

    def copy_from(self, name: str, source: str, destination: str) -> None:
        self.run(["cp", f"{name}:{source}", destination])

    def diff(self, name: str) -> str:
        return self.run(["diff", name]).stdout

    def export(self, name: str, path: str) -> None:
        self.run(["export", "-o", path, name])

    def kill(self, name: str, signal: str | None = None) -> None:
        args = ["kill"]
        if signal:
            args += ["-s", signal]
        self.run([*args, name])

    def port(self, name: str) -> str:
        return self.run(["port", name]).stdout

    def rename(self, name: str, new_name: str) -> None:
        self.run(["rename", name, new_name])

    def update(self, name: str, options: Sequence[str]) -> None:
        self.run(["update", *options, name])

    def wait(self, name: str) -> str:
        return self.run(["wait", name]).stdout.strip()

    def create(
        self,
        name: str,
        image: str,
        *,
        ports: str | None = None,
        volumes: str | None = None,
        env: str | None = None,
    ) -> str:
        args = ["run", "-d", "--name", name]
        if ports:
            args += ["-p", ports]
        if volumes:
            args += ["-v", volumes]
        if env:
            args += ["-e", env]
        return self.run([*args, image]).stdout.strip()

    # Image operations

    def pull(self, name: str) -> None:
        self.run(["pull", name])

    def build(self, path: str, tag: str) -> None:
        self.run(["build", "-t", tag, path])

    def tag(self, source: str, target: str) -> None:
        self.run(["tag", source, target])

    def push(self, name: str) -> None:
        self.run(["push", name])

    def remove_image(self, name: str) -> None:
        self.run(["rmi", name])

    def image_history(self, name: str) -> str:
        return self.run(["history", name]).stdout

    def import_image(self, path: str, repository: str) -> str:
        return self.run(["import", path, repository]).stdout.strip()

    def load_image(self, path: str) -> str:
        return self.run(["load", "-i", path]).stdout.strip()

    def save_image(self, name: str, path: str) -> None:
        self.run(["save", "-o", path, name])

    # Monitoring

    def stream_events(self, on_line: Callable[[str], None]) -> None:
        """Forward ``docker events`` lines until the stream ends or Ctrl+C."""
        command = [self.binary, "events"]
        try:
            process = self._popen(  # noqa: S603
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError as exc:
            raise EngineNotInstalledError(self.binary) from exc

        try:
            for line in process.stdout or ():
                on_line(line.rstrip("\n"))
        except KeyboardInterrupt:
            logger.info("event stream interrupted by user")
            process.terminate()
            process.wait()
            return

        returncode = process.wait()
        if returncode != 0:
            stderr = process.stderr.read() if process.stderr is not None else ""
            raise EngineCommandError(stderr, command, returncode)

    def _list(self, args: list[str], model: type[RecordT]) -> list[RecordT]:
        output = self.run(args).stdout
        return parse_records(output, model)


def parse_records(output: str, model: type[RecordT]) -> list[RecordT]:
    """Parse line-delimited JSON, skipping malformed lines."""

    records: list[RecordT] = []
    kind = model.__name__.lower()
    for data in _json_lines(output, kind):
        try:
            records.append(model.model_validate(data))
        except ValidationError as exc:
            logger.warning("Skipping {} record with unexpected shape: {}", kind, exc.errors()[0]["msg"])
    return records


def parse_process_table(output: str) -> list[ContainerProcess]:
    """Parse the whitespace-aligned table printed by ``docker top``."""

    lines = [line for line in output.splitlines() if line.strip()]
    if not lines:
        return []
    header = lines[0].split()
    columns = {name.upper(): idx for idx, name in enumerate(header)}
    pid_idx = columns.get("PID", 1)
    user_idx = columns.get("UID", columns.get("USER", 0))
    time_idx = columns.get("TIME", len(header) - 2)

    processes: list[ContainerProcess] = []
    for line in lines[1:]:
        # The command column is last and may contain spaces.
        fields = line.split(None, len(header) - 1)
        if len(fields) < len(header):
            logger.warning("Skipping malformed process row: {}", line)
            continue
        processes.append(
            ContainerProcess(
                pid=fields[pid_idx],
                user=fields[user_idx],
                time=fields[time_idx],
                command=fields[-1],
            )
        )
    return processes


def _json_lines(output: str, kind: str) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse {} JSON: {} for line: {}", kind, exc, line)
            continue
        if not isinstance(data, dict):
            logger.warning("Failed to parse {} JSON: expected an object for line: {}", kind, line)
            continue
        rows.append(data)
    return rows
