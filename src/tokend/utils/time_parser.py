"""Parse Go-style duration strings (``"1h30m"``, ``"500ms"``) into seconds."""

from __future__ import annotations

import re
from typing import Final

_NUMBER: Final = re.compile(r"^\d*\.?\d+$")
# A number followed by a one or two letter unit; µ only ever leads.
_DURATION: Final = re.compile(r"(\d*\.?\d+)([a-zµ][a-z]?)", re.IGNORECASE)

_UNITS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
    "d": 86400.0,
}


def parse_duration(value: str | float | int | None) -> float:
    """Convert ``value`` to a number of seconds.

    Bare numbers are already seconds. ``None``, empty strings and negative
    values yield ``0``. Unknown units raise ``ValueError``.
    """

    if value is None:
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if value > 0 else 0.0

    text = value.strip()
    if not text or text.startswith("-"):
        return 0.0
    if _NUMBER.match(text):
        return float(text)

    total = 0.0
    for number, unit in _DURATION.findall(text.replace(",", "")):
        modifier = _UNITS.get(unit.lower())
        if modifier is None:
            raise ValueError(f"Unknown unit {unit}")
        total += float(number) * modifier
    return total


__all__ = ["parse_duration"]
