"""Command-line surfaces: typer commands and the interactive shell."""

from .app import app
from .completion import CompletionEngine
from .shell import InteractiveShell

__all__ = [
    "CompletionEngine",
    "InteractiveShell",
    "app",
]
