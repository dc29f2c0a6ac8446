"""Duration literal parsing (``"10s"``, ``"1h30m"``, ``"1.5ms"``)."""

from __future__ import annotations

import re
from datetime import timedelta

_NS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,  # micro sign
    "μs": 1_000,  # greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60_000_000_000,
    "h": 3_600_000_000_000,
}

_COMPONENT_RE = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]+)")

MAX_DURATION_NS = (1 << 63) - 1


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of decimal numbers with unit suffixes.

    Valid units are ``ns``, ``us`` (or ``µs``), ``ms``, ``s``, ``m`` and
    ``h``. Precision below a microsecond is truncated.

    Raises:
        ValueError: If *text* isn't a duration literal or overflows.
    """
    remaining = text
    negative = False
    if remaining and remaining[0] in "+-":
        negative = remaining[0] == "-"
        remaining = remaining[1:]

    if remaining == "0":
        return timedelta(0)
    if not remaining:
        raise ValueError(f"invalid duration {text!r}")

    total_ns = 0
    pos = 0
    while pos < len(remaining):
        m = _COMPONENT_RE.match(remaining, pos)
        if m is None:
            raise ValueError(f"missing unit in duration {text!r}")
        whole, frac, unit = m.groups()
        if not whole and not frac:
            raise ValueError(f"invalid duration {text!r}")
        scale = _NS_PER_UNIT.get(unit)
        if scale is None:
            raise ValueError(f"unknown unit {unit!r} in duration {text!r}")

        total_ns += int(whole or "0") * scale
        if frac:
            total_ns += int(frac) * scale // 10 ** len(frac)
        if total_ns > MAX_DURATION_NS:
            raise ValueError(f"invalid duration {text!r}: out of range")
        pos = m.end()

    result = timedelta(microseconds=total_ns // 1_000)
    return -result if negative else result


def duration_from_nanoseconds(value: int) -> timedelta:
    """Interpret an integer as a nanosecond count, truncated to microseconds."""
    if abs(value) > MAX_DURATION_NS:
        raise ValueError(f"duration {value}ns out of range")
    micros = abs(value) // 1_000
    return timedelta(microseconds=-micros if value < 0 else micros)
