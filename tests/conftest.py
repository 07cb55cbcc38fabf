from __future__ import annotations

import io

import pytest
from rich.console import Console

from dui.cli.render import Renderer


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    return Console(file=output, no_color=True, width=200, force_terminal=False)


@pytest.fixture
def renderer(console: Console) -> Renderer:
    return Renderer(console, assume_yes=True)
