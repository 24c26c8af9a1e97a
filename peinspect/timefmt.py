"""Human-friendly relative time formatting."""

from __future__ import annotations

import time

from peinspect.errors import InvalidArgumentsError

_MINUTE = 60
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR
_WEEK = 7 * _DAY
_MONTH = 30 * _WEEK
_YEAR = 12 * _MONTH

_UNITS = (
    (_YEAR, "years", "y"),
    (_MONTH, "months", "M"),
    (_WEEK, "weeks", "w"),
    (_DAY, "days", "d"),
    (_HOUR, "hours", "h"),
    (_MINUTE, "minute", "m"),
    (1, "second", "s"),
)

MAX_UNITS = len(_UNITS)


def relative_time(
    timestamp: int,
    short: bool = True,
    length: int = 4,
    now: int | None = None,
) -> str:
    """Describe ``timestamp`` relative to ``now`` using at most ``length`` units."""
    if length > MAX_UNITS or length < 0:
        raise InvalidArgumentsError("Not enough units (len <= 7)")

    if now is None:
        now = int(time.time())

    diff = abs(now - timestamp)
    past = timestamp <= now

    parts: list[str] = []
    remaining = diff
    for seconds, long_name, short_name in _UNITS:
        if len(parts) >= length:
            break
        count, rest = divmod(remaining, seconds)
        if count > 0:
            remaining = rest
            if short:
                parts.append(f"{count}{short_name}")
            else:
                plural = "s" if count > 1 else ""
                parts.append(f"{count} {long_name}{plural}")

    if not parts:
        return "0s" if short else "0 seconds"

    joined = (" " if short else ", ").join(parts)
    return f"{joined} ago" if past else f"in {joined}"