"""Daemon readiness probe with platform start strategies."""

from __future__ import annotations

import platform
import subprocess
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from loguru import logger

from dui.errors import EngineNotInstalledError, EngineStartError, EngineTimeoutError

from .client import EngineClient

PROBE_INTERVAL_SECONDS = 2.0
PROBE_ATTEMPTS = 30


@dataclass(frozen=True)
class StartStrategy:
    """One way of starting the daemon.

    A detached strategy spawns a long-lived process in its own session and
    reports success as soon as it is spawned.
    """

    name: str
    command: tuple[str, ...]
    detach: bool = False
    runner: Callable[..., subprocess.CompletedProcess[str]] = field(default=subprocess.run, compare=False)
    spawner: Callable[..., subprocess.Popen[bytes]] = field(default=subprocess.Popen, compare=False)

    def __call__(self) -> bool:
        logger.info("Trying to start the Docker daemon with {}", self.name)
        try:
            if self.detach:
                self.spawner(  # noqa: S603
                    list(self.command),
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=subprocess.DEVNULL,
                    start_new_session=True,
                )
                return True
            completed = self.runner(  # noqa: S603
                list(self.command), capture_output=True, text=True, encoding="utf-8", errors="replace"
            )
        except OSError as exc:
            logger.info("{} unavailable: {}", self.name, exc)
            return False
        if completed.returncode != 0:
            logger.info("{} failed: {}", self.name, (completed.stderr or "").strip())
            return False
        return True


def platform_start_strategies(system: str | None = None) -> list[StartStrategy]:
    """Ordered start strategies: service manager, service command, direct daemon."""

    system = system or platform.system()
    if system == "Darwin":
        return [
            StartStrategy("Docker Desktop", ("open", "-a", "Docker")),
            StartStrategy("brew services", ("brew", "services", "start", "docker")),
            StartStrategy("dockerd", ("dockerd",), detach=True),
        ]
    if system == "Windows":
        return [
            StartStrategy(
                "Docker Desktop",
                (
                    "powershell",
                    "-NoProfile",
                    "-Command",
                    "Start-Process -FilePath 'C:\\Program Files\\Docker\\Docker\\Docker Desktop.exe'",
                ),
            ),
            StartStrategy("net start", ("net", "start", "com.docker.service")),
            StartStrategy("dockerd", ("dockerd",), detach=True),
        ]
    return [
        StartStrategy("systemctl", ("systemctl", "start", "docker")),
        StartStrategy("service", ("service", "docker", "start")),
        StartStrategy("dockerd", ("dockerd",), detach=True),
    ]


class ReadinessProber:
    """Make sure the engine daemon answers before an operation runs."""

    def __init__(
        self,
        client: EngineClient,
        strategies: Sequence[Callable[[], bool]] | None = None,
        *,
        interval: float = PROBE_INTERVAL_SECONDS,
        attempts: int = PROBE_ATTEMPTS,
        auto_start: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._strategies = list(strategies) if strategies is not None else platform_start_strategies()
        self._interval = interval
        self._attempts = attempts
        self._auto_start = auto_start
        self._sleep = sleep

    def ensure_ready(self) -> None:
        """Return when the daemon is live, else raise an ``EngineUnavailableError``."""
        if not self._client.is_installed():
            raise EngineNotInstalledError(self._client.binary)
        if self._client.is_live():
            return
        if not self._auto_start:
            raise EngineStartError()

        self.start_daemon()
        self.wait_until_live()

    def start_daemon(self) -> str:
        tried: list[str] = []
        for strategy in self._strategies:
            name = getattr(strategy, "name", repr(strategy))
            tried.append(name)
            if strategy():
                logger.info("Start requested via {}", name)
                return name
        raise EngineStartError(tried)

    def wait_until_live(self) -> None:
        for attempt in range(1, self._attempts + 1):
            self._sleep(self._interval)
            if self._client.is_live():
                logger.info("Docker daemon ready after {} poll(s)", attempt)
                return
            logger.debug("Docker daemon not ready ({}/{})", attempt, self._attempts)
        raise EngineTimeoutError(self._interval * self._attempts)
