from __future__ import annotations

import subprocess
from dataclasses import dataclass, field

import pytest

from dui.engine.readiness import (
    PROBE_ATTEMPTS,
    PROBE_INTERVAL_SECONDS,
    ReadinessProber,
    StartStrategy,
    platform_start_strategies,
)
from dui.errors import EngineNotInstalledError, EngineStartError, EngineTimeoutError


@dataclass
class _Daemon:
    installed: bool = True
    live_after: int | None = None
    probes: int = 0
    binary: str = "docker"

    def is_installed(self) -> bool:
        return self.installed

    def is_live(self) -> bool:
        self.probes += 1
        return self.live_after is not None and self.probes > self.live_after


@dataclass
class _Strategy:
    name: str
    succeeds: bool
    calls: list[str] = field(default_factory=list)

    def __call__(self) -> bool:
        self.calls.append(self.name)
        return self.succeeds


def _prober(daemon: _Daemon, strategies, sleeps: list[float], **kwargs) -> ReadinessProber:
    return ReadinessProber(daemon, strategies, sleep=sleeps.append, **kwargs)  # type: ignore[arg-type]


def test_not_installed_runs_no_strategy() -> None:
    strategy = _Strategy("systemctl", True)
    sleeps: list[float] = []

    with pytest.raises(EngineNotInstalledError):
        _prober(_Daemon(installed=False), [strategy], sleeps).ensure_ready()

    assert strategy.calls == []
    assert sleeps == []


def test_live_daemon_returns_without_starting() -> None:
    strategy = _Strategy("systemctl", True)
    daemon = _Daemon(live_after=0)
    sleeps: list[float] = []

    _prober(daemon, [strategy], sleeps).ensure_ready()

    assert strategy.calls == []
    assert daemon.probes == 1
    assert sleeps == []


def test_strategies_run_in_order_until_one_succeeds() -> None:
    first = _Strategy("systemctl", False)
    second = _Strategy("service", True)
    third = _Strategy("dockerd", True)
    sleeps: list[float] = []

    _prober(_Daemon(live_after=1), [first, second, third], sleeps).ensure_ready()

    assert first.calls == ["systemctl"]
    assert second.calls == ["service"]
    assert third.calls == []
    assert sleeps == [PROBE_INTERVAL_SECONDS]


def test_all_strategies_failing_raises_start_error() -> None:
    strategies = [_Strategy("systemctl", False), _Strategy("service", False)]
    sleeps: list[float] = []

    with pytest.raises(EngineStartError) as exc_info:
        _prober(_Daemon(), strategies, sleeps).ensure_ready()

    assert exc_info.value.tried == ["systemctl", "service"]
    assert sleeps == []


def test_auto_start_disabled_raises_start_error() -> None:
    strategy = _Strategy("systemctl", True)

    with pytest.raises(EngineStartError):
        _prober(_Daemon(), [strategy], [], auto_start=False).ensure_ready()

    assert strategy.calls == []


def test_polls_exactly_thirty_times_before_timeout() -> None:
    daemon = _Daemon()
    sleeps: list[float] = []

    with pytest.raises(EngineTimeoutError) as exc_info:
        _prober(daemon, [_Strategy("systemctl", True)], sleeps).ensure_ready()

    assert PROBE_ATTEMPTS == 30
    assert sleeps == [2.0] * 30
    # One initial liveness check plus one per poll.
    assert daemon.probes == 31
    assert exc_info.value.seconds == 60.0


def test_daemon_coming_up_mid_poll_stops_polling() -> None:
    daemon = _Daemon(live_after=3)
    sleeps: list[float] = []

    _prober(daemon, [_Strategy("systemctl", True)], sleeps).ensure_ready()

    assert len(sleeps) == 3
    assert daemon.probes == 4


def test_custom_interval_and_attempts() -> None:
    sleeps: list[float] = []

    with pytest.raises(EngineTimeoutError, match="1.5 seconds"):
        _prober(_Daemon(), [_Strategy("systemctl", True)], sleeps, interval=0.5, attempts=3).ensure_ready()

    assert sleeps == [0.5, 0.5, 0.5]


@pytest.mark.parametrize(
    ("system", "expected"),
    [
        ("Linux", ["systemctl", "service", "dockerd"]),
        ("Darwin", ["Docker Desktop", "brew services", "dockerd"]),
        ("Windows", ["Docker Desktop", "net start", "dockerd"]),
    ],
)
def test_platform_strategies_order(system: str, expected: list[str]) -> None:
    strategies = platform_start_strategies(system)

    assert [strategy.name for strategy in strategies] == expected
    assert [strategy.detach for strategy in strategies] == [False, False, True]


def test_strategy_reports_non_zero_exit_as_failure() -> None:
    def runner(command, **_kwargs):
        return subprocess.CompletedProcess(command, 1, "", "Failed to start docker.service: Access denied")

    assert StartStrategy("systemctl", ("systemctl", "start", "docker"), runner=runner)() is False


def test_strategy_reports_missing_tool_as_failure() -> None:
    def runner(command, **_kwargs):
        raise FileNotFoundError(command[0])

    assert StartStrategy("service", ("service", "docker", "start"), runner=runner)() is False


def test_detached_strategy_spawns_in_new_session() -> None:
    spawned: list[tuple[list[str], dict]] = []

    def spawner(command, **kwargs):
        spawned.append((command, kwargs))

    assert StartStrategy("dockerd", ("dockerd",), detach=True, spawner=spawner)() is True
    command, kwargs = spawned[0]
    assert command == ["dockerd"]
    assert kwargs["start_new_session"] is True
    assert kwargs["stdout"] is subprocess.DEVNULL
