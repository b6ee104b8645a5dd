# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Human-readable durations ("80ms", "15m", "1h30m") used by the settings."""

from __future__ import annotations

import re

_UNIT_SECONDS = {
    "ms": 0.001,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}

_DURATION_PART = re.compile(r"(?P<number>\d+(?:\.\d+)?)(?P<unit>ms|s|m|h|d)")


def parse_duration(value: str | int | float) -> float:
    """Return ``value`` interpreted as seconds.

    Accepts bare numbers (seconds) and one or more ``<number><unit>`` parts,
    e.g. ``"250ms"``, ``"15m"`` or ``"1h30m"``.

    Raises:
        ValueError: If the value is negative or not a recognised duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, int | float):
        if value < 0:
            raise ValueError(f"duration must not be negative: {value!r}")
        return float(value)

    text = str(value).strip().lower()
    if not text:
        raise ValueError("empty duration")

    try:
        seconds = float(text)
    except ValueError:
        pass
    else:
        if seconds < 0:
            raise ValueError(f"duration must not be negative: {value!r}")
        return seconds

    total = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total += float(match.group("number")) * _UNIT_SECONDS[match.group("unit")]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total


def format_duration(seconds: float) -> str:
    """Render seconds compactly, the inverse of :func:`parse_duration` for log output."""
    if seconds < 1:
        return f"{seconds * 1000:g}ms"

    remaining = float(seconds)
    parts: list[str] = []
    for label, factor in (("d", 86400.0), ("h", 3600.0), ("m", 60.0)):
        if remaining >= factor:
            units = int(remaining // factor)
            parts.append(f"{units}{label}")
            remaining -= units * factor
    if remaining or not parts:
        parts.append(f"{remaining:g}s")
    return "".join(parts)
