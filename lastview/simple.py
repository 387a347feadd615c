"""Minimal listing of boot and login records, newest first."""

from __future__ import annotations

import re
import sys
import time
from typing import Optional, Sequence, TextIO

from .utmp import UtmpRecord, UtType, iter_records_reversed

WTMP_FILE = "/var/log/wtmp"


def short_time(when: int) -> str:
    """Return month, day, hour and minute of a time stamp, e.g. 'Jun 30 21:49'."""
    try:
        return time.asctime(time.localtime(when))[4:16]
    except (OverflowError, OSError, ValueError):
        return ""


def show_info(record: UtmpRecord, out: Optional[TextIO] = None) -> bool:
    """Print a boot or login record; return whether it was printed."""
    if record.type not in (UtType.BOOT_TIME, UtType.USER_PROCESS):
        return False
    out = sys.stdout if out is None else out
    line = "system boot" if record.line == "~" else record.line
    out.write(f"{record.user} {line} {record.host} {short_time(record.tv_sec)}\n")
    return True


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def main(argv: Optional[Sequence[str]] = None, wtmp_file: str = WTMP_FILE) -> int:
    """List records from the file; an optional first argument limits the count."""
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        fp = open(wtmp_file, "rb")
    except OSError as exc:
        sys.stderr.write(f"{wtmp_file}: {exc.strerror or exc}\n")
        return 1

    with fp:
        out = sys.stdout
        if not args:
            for record in iter_records_reversed(fp):
                show_info(record, out)
            return 0

        remaining = _atoi(args[0])
        if remaining <= 0:
            sys.stderr.write(f"Invalid number: {args[0]}\n")
            return 1
        for record in iter_records_reversed(fp):
            if remaining <= 0:
                break
            if show_info(record, out):
                remaining -= 1
    return 0