"""Application-level exception types for dui."""

from __future__ import annotations

from collections.abc import Sequence


class DuiError(Exception):
    """Base exception for dui."""


class EngineUnavailableError(DuiError):
    """Base exception for an unreachable container engine."""


class EngineNotInstalledError(EngineUnavailableError):
    """Raised when the engine command-line tool cannot be invoked at all."""

    def __init__(self, binary: str = "docker") -> None:
        super().__init__(f"{binary} is not installed or not on PATH.")
        self.binary = binary


class EngineStartError(EngineUnavailableError):
    """Raised when every daemon start strategy failed."""

    def __init__(self, tried: Sequence[str] = ()) -> None:
        detail = f" (tried: {', '.join(tried)})" if tried else ""
        super().__init__(f"Could not start the Docker daemon{detail}.")
        self.tried = list(tried)


class EngineTimeoutError(EngineUnavailableError):
    """Raised when the daemon did not become reachable within the polling budget."""

    def __init__(self, seconds: float) -> None:
        super().__init__(f"Docker daemon did not become ready within {seconds:g} seconds.")
        self.seconds = seconds


class EngineCommandError(DuiError):
    """Raised when one engine subprocess exits non-zero.

    The message is the captured standard error, verbatim.
    """

    def __init__(self, stderr: str, args: Sequence[str] = (), returncode: int = 1) -> None:
        message = stderr.strip() or f"command failed with exit code {returncode}"
        super().__init__(message)
        self.stderr = stderr
        self.command = list(args)
        self.returncode = returncode


class InputValidationError(DuiError):
    """Raised when user input is rejected before any engine call."""
