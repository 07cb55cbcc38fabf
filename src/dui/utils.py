"""Formatting and validation helpers."""

from __future__ import annotations

import re

from dui.errors import InputValidationError

SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
MAX_CONTAINER_NAME_LENGTH = 63
CONTAINER_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
_SIZE_RE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([kmgt]?i?b?)\s*$", re.IGNORECASE)
_SIZE_FACTORS = {"": 1, "b": 1, "k": 1024, "m": 1024**2, "g": 1024**3, "t": 1024**4}


def format_size(num_bytes: int) -> str:
    """Render a byte count with a 1024 threshold per unit."""

    size = float(num_bytes)
    unit_index = 0
    while size >= 1024 and unit_index < len(SIZE_UNITS) - 1:
        size /= 1024
        unit_index += 1

    if unit_index == 0:
        return f"{int(size)} {SIZE_UNITS[0]}"
    return f"{size:.1f} {SIZE_UNITS[unit_index]}"


def parse_size(text: str) -> int:
    """Parse engine size strings such as ``1.2GB`` or ``500MB`` into bytes.

    Unparseable input yields 0.
    """

    match = _SIZE_RE.match(text)
    if match is None:
        return 0
    value, unit = match.groups()
    return int(float(value) * _SIZE_FACTORS.get(unit[:1].lower(), 1))


def truncate_string(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return f"{text[: max(max_len - 3, 0)]}..."


def validate_container_name(name: str) -> None:
    if not name:
        raise InputValidationError("Container name cannot be empty")
    if len(name) > MAX_CONTAINER_NAME_LENGTH:
        raise InputValidationError(
            f"Container name cannot be longer than {MAX_CONTAINER_NAME_LENGTH} characters"
        )
    if not CONTAINER_NAME_RE.match(name):
        raise InputValidationError(
            "Container name can only contain alphanumeric characters, hyphens, underscores, and dots"
        )


def validate_image_name(name: str) -> None:
    if not name:
        raise InputValidationError("Image name cannot be empty")
    if any(ch.isspace() for ch in name):
        raise InputValidationError("Image name cannot contain spaces")
