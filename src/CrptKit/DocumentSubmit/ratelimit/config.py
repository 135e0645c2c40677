"""Window-unit parsing for the fixed-window rate limiter.

The registry publishes its quota as "N calls per <unit>" (for example,
``100/second``), so the client is configured with a unit rather than an
arbitrary duration.  Each window spans exactly one unit.
"""

from __future__ import annotations

import re
from datetime import timedelta
from enum import Enum
from typing import Tuple, Union

from CrptKit.DocumentSubmit.errors import InvalidArgumentError

__all__ = ["WindowUnit", "parse_quota", "window_seconds"]


class WindowUnit(str, Enum):
    """Granularity of one rate-limit window."""

    MILLISECOND = "millisecond"
    SECOND = "second"
    MINUTE = "minute"
    HOUR = "hour"
    DAY = "day"

    @property
    def seconds(self) -> float:
        return _UNIT_SECONDS[self]

    @classmethod
    def parse(cls, value: Union[str, "WindowUnit"]) -> "WindowUnit":
        """Accept enum members, canonical names, plurals, and short aliases."""
        if isinstance(value, WindowUnit):
            return value
        normalized = str(value).strip().lower()
        unit = _UNIT_ALIASES.get(normalized)
        if unit is None:
            raise InvalidArgumentError(f"Unknown window unit: {value!r}")
        return unit


_UNIT_SECONDS = {
    WindowUnit.MILLISECOND: 0.001,
    WindowUnit.SECOND: 1.0,
    WindowUnit.MINUTE: 60.0,
    WindowUnit.HOUR: 3600.0,
    WindowUnit.DAY: 86400.0,
}

_UNIT_ALIASES = {
    "ms": WindowUnit.MILLISECOND,
    "millisecond": WindowUnit.MILLISECOND,
    "milliseconds": WindowUnit.MILLISECOND,
    "s": WindowUnit.SECOND,
    "sec": WindowUnit.SECOND,
    "second": WindowUnit.SECOND,
    "seconds": WindowUnit.SECOND,
    "m": WindowUnit.MINUTE,
    "min": WindowUnit.MINUTE,
    "minute": WindowUnit.MINUTE,
    "minutes": WindowUnit.MINUTE,
    "h": WindowUnit.HOUR,
    "hour": WindowUnit.HOUR,
    "hours": WindowUnit.HOUR,
    "d": WindowUnit.DAY,
    "day": WindowUnit.DAY,
    "days": WindowUnit.DAY,
}

_QUOTA_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*([A-Za-z]+)\s*$")


def window_seconds(window: Union[float, int, timedelta, WindowUnit, str]) -> float:
    """Normalise a window given as seconds, ``timedelta``, or unit into seconds.

    Raises:
        InvalidArgumentError: If the window is not strictly positive.
    """
    if isinstance(window, timedelta):
        seconds = window.total_seconds()
    elif isinstance(window, (WindowUnit, str)):
        seconds = WindowUnit.parse(window).seconds
    elif isinstance(window, bool):
        raise InvalidArgumentError("window must be a duration, not a bool")
    else:
        seconds = float(window)
    if not seconds > 0:
        raise InvalidArgumentError(f"window must be positive, got {window!r}")
    return seconds


def parse_quota(quota: str) -> Tuple[int, WindowUnit]:
    """Parse a quota string such as ``"100/second"`` or ``"5/min"``.

    Examples:
        >>> parse_quota("100/second")
        (100, <WindowUnit.SECOND: 'second'>)
    """
    match = _QUOTA_PATTERN.match(quota or "")
    if match is None:
        raise InvalidArgumentError(f"Invalid quota {quota!r}; expected '<calls>/<unit>'")
    limit = int(match.group(1))
    if limit <= 0:
        raise InvalidArgumentError(f"Quota limit must be positive, got {limit}")
    return limit, WindowUnit.parse(match.group(2))
