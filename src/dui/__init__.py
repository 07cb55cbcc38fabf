"""dui - Docker, interactively."""

__version__ = "0.1.0"
