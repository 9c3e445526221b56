"""Parse size and duration strings used in component performance budgets."""

from __future__ import annotations

import re

_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(B|KB|MB|GB)?\s*$", re.IGNORECASE)
_DURATION_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(ms|s)?\s*$", re.IGNORECASE)

_SIZE_FACTORS = {"B": 1, "KB": 1024, "MB": 1024**2, "GB": 1024**3}
_DURATION_FACTORS = {"MS": 1.0, "S": 1000.0}


def parse_size(value: str | int | float) -> int:
    """Convert ``"12KB"``, ``"1.5MB"`` or a raw byte count to bytes.

    A bare number is read as bytes.
    """
    if isinstance(value, bool):
        msg = f"Invalid size: {value!r}"
        raise ValueError(msg)
    if isinstance(value, (int, float)):
        return int(value)
    match = _SIZE_RE.match(value)
    if match is None:
        msg = f"Invalid size: {value!r} (expected e.g. '120KB' or '1.5MB')"
        raise ValueError(msg)
    amount, unit = match.groups()
    return int(float(amount) * _SIZE_FACTORS[(unit or "B").upper()])


def parse_duration_ms(value: str | int | float) -> float:
    """Convert ``"800ms"`` or ``"1.2s"`` to milliseconds.

    A bare number is read as milliseconds.
    """
    if isinstance(value, bool):
        msg = f"Invalid duration: {value!r}"
        raise ValueError(msg)
    if isinstance(value, (int, float)):
        return float(value)
    match = _DURATION_RE.match(value)
    if match is None:
        msg = f"Invalid duration: {value!r} (expected e.g. '800ms' or '1.2s')"
        raise ValueError(msg)
    amount, unit = match.groups()
    return float(amount) * _DURATION_FACTORS[(unit or "ms").upper()]


def format_size(num_bytes: float) -> str:
    """Render a byte count with the largest unit that keeps it >= 1."""
    if num_bytes <= 0:
        return "0KB"
    for unit in ("GB", "MB", "KB"):
        factor = _SIZE_FACTORS[unit]
        if num_bytes >= factor:
            return f"{round(num_bytes / factor)}{unit}"
    return f"{round(num_bytes)}B"
