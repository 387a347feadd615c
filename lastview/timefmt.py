"""Time stamp formats used in login listings."""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import IntEnum


class TimeFormat(IntEnum):
    """Ways a time stamp can be shown; HHMM is internal only."""

    NONE = 0
    SHORT = 1
    CTIME = 2
    ISO8601 = 3
    HHMM = 4


@dataclass(frozen=True)
class TimeFormatSpec:
    """Column widths and formats for log-in and log-out times."""

    name: str
    in_len: int = 0
    in_fmt: TimeFormat = TimeFormat.NONE
    out_len: int = 0
    out_fmt: TimeFormat = TimeFormat.NONE


_SPECS = {
    TimeFormat.NONE: TimeFormatSpec(name="notime"),
    TimeFormat.SHORT: TimeFormatSpec(
        name="short",
        in_len=16,
        in_fmt=TimeFormat.CTIME,
        out_len=7,
        out_fmt=TimeFormat.HHMM,
    ),
    TimeFormat.CTIME: TimeFormatSpec(
        name="full",
        in_len=24,
        in_fmt=TimeFormat.CTIME,
        out_len=26,
        out_fmt=TimeFormat.CTIME,
    ),
    TimeFormat.ISO8601: TimeFormatSpec(
        name="iso",
        in_len=25,
        in_fmt=TimeFormat.ISO8601,
        out_len=27,
        out_fmt=TimeFormat.ISO8601,
    ),
}


def which_time_format(name: str) -> TimeFormat:
    """Map a --time-format argument to its format."""
    for fmt, spec in _SPECS.items():
        if spec.name == name:
            return fmt
    raise ValueError(f"unknown time format: {name}")


def spec_for(fmt: TimeFormat) -> TimeFormatSpec:
    """Return the column layout of a public format."""
    try:
        return _SPECS[TimeFormat(fmt)]
    except (KeyError, ValueError):
        raise ValueError(f"no layout for time format {fmt!r}") from None


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _iso(when: int) -> str:
    tm = time.localtime(when)
    stamp = time.strftime("%Y-%m-%dT%H:%M:%S", tm)
    tmin = _trunc_div(tm.tm_gmtoff or 0, 60)
    zhour = _trunc_div(tmin, 60)
    zmin = abs(tmin - zhour * 60)
    return f"{stamp}{zhour:+03d}:{zmin:02d}"


def format_time(fmt: TimeFormat, when: int) -> str:
    """Render a time stamp (seconds since the epoch) in local time."""
    fmt = TimeFormat(fmt)
    if fmt is TimeFormat.NONE:
        return ""
    if fmt is TimeFormat.HHMM:
        tm = time.localtime(when)
        return f"{tm.tm_hour:02d}:{tm.tm_min:02d}"
    if fmt is TimeFormat.CTIME:
        return time.asctime(time.localtime(when)).rstrip()
    return _iso(when)