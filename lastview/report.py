"""Listing of past logins, built by reading a login record file backwards."""

from __future__ import annotations

import dataclasses
import logging
import os
import re
import sys
import time
from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional, Sequence, TextIO

from .hosts import lookup_host
from .timefmt import TimeFormat, format_time, spec_for
from .utmp import (
    USER_SIZE,
    UtmpRecord,
    UtType,
    iter_records_reversed,
    read_first_record,
)

try:
    import pwd
except ImportError:  # pragma: no cover - platforms without a user database
    pwd = None  # type: ignore[assignment]

LAST_LOGIN_LEN = 8
LAST_DOMAIN_LEN = 16
_FINAL_SIZE = 512

log = logging.getLogger(__name__)


class EntryKind(IntEnum):
    """How a listed session ended."""

    CRASH = 1
    DOWN = 2
    NORMAL = 3
    NOW = 4
    REBOOT = 5
    PHANTOM = 6
    TIMECHANGE = 7


@dataclass
class LastControl:
    """Options that shape the listing."""

    lastb: bool = False
    extended: bool = False
    showhost: bool = True
    altlist: bool = False
    usedns: bool = False
    useip: bool = False
    name_len: int = LAST_LOGIN_LEN
    domain_len: int = LAST_DOMAIN_LEN
    maxrecs: int = 0
    show: Optional[Sequence[str]] = None
    boot_time: int = 0
    since: int = 0
    until: int = 0
    present: int = 0
    time_fmt: TimeFormat = TimeFormat.SHORT


def _c_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def _c_mod(a: int, b: int) -> int:
    return a - b * _c_div(a, b)


def _clip(text: str, precision: int, width: int) -> str:
    return text[:precision].ljust(width)


def careful_text(text: str) -> str:
    """Replace control and unprintable characters with '*'."""
    return "".join(
        ch if ch.isprintable() or ch in "\a\t\r\n" else "*" for ch in text
    )


def trim_trailing_spaces(text: str) -> str:
    """Strip trailing whitespace and end the text with a single newline."""
    return text.rstrip(" \t\n\v\f\r") + "\n"


def _special_line(line: str) -> str:
    for prefix in ("ftp", "uucp"):
        n = len(prefix)
        if line.startswith(prefix) and len(line) > n and line[n] in "0123456789":
            return prefix
    return line


def _read_loginuid(path: str) -> Optional[int]:
    with open(path, "r", encoding="ascii", errors="replace") as fh:
        match = re.match(r"\s*([+-]?\d+)", fh.read())
    if match is None:
        return None
    return int(match.group(1)) & 0xFFFFFFFF


def is_phantom(ctl: LastControl, record: UtmpRecord) -> bool:
    """Tell whether a session without a logout record is really gone."""
    if record.tv_sec < ctl.boot_time:
        return True
    if pwd is None:
        return True
    user = record.user[: USER_SIZE - 1]
    try:
        pw = pwd.getpwnam(user)
    except (KeyError, ValueError):
        return True
    path = f"/proc/{record.pid & 0xFFFFFFFF}/loginuid"
    if os.access(path, os.R_OK):
        try:
            loginuid = _read_loginuid(path)
        except OSError:
            return True
        if loginuid is None:
            return True
        return pw.pw_uid != loginuid
    try:
        st = os.stat(f"/dev/{record.line}")
    except (OSError, ValueError):
        return True
    return pw.pw_uid != st.st_uid


class LastReport:
    """Writes one listing line per session found in login record files."""

    def __init__(
        self,
        ctl: LastControl,
        out: Optional[TextIO] = None,
        now: Optional[int] = None,
    ) -> None:
        self.ctl = ctl
        self.out = sys.stdout if out is None else out
        self._fixed_now = None if now is None else int(now)
        self.currentdate = self._now()
        self.lastdate = self.currentdate
        self.recsdone = 0

    def _now(self) -> int:
        return int(time.time()) if self._fixed_now is None else self._fixed_now

    def _shows(self, record: UtmpRecord, utline: str) -> bool:
        if self.ctl.show is None:
            return True
        return any(
            record.user == want
            or utline == want
            or (utline.startswith("tty") and utline[3:] == want)
            for want in self.ctl.show
        )

    def _domain(self, record: UtmpRecord) -> str:
        if self.ctl.usedns or self.ctl.useip:
            try:
                return lookup_host(record.addr_v6, self.ctl.useip)
            except (OSError, ValueError):
                pass
        return record.host

    def list_entry(
        self, record: UtmpRecord, logout_time: int, kind: EntryKind
    ) -> bool:
        """Print one session; return True once the record limit is reached."""
        ctl = self.ctl
        kind = EntryKind(kind)
        utline = _special_line(record.line)
        if not self._shows(record, utline):
            return False

        spec = spec_for(ctl.time_fmt)
        utmp_time = record.tv_sec

        if ctl.present:
            if ctl.present < utmp_time:
                return False
            if 0 < logout_time < ctl.present:
                return False

        logintime = format_time(spec.in_fmt, utmp_time)

        secs = logout_time - utmp_time
        mins = _c_mod(_c_div(secs, 60), 60)
        hours = _c_mod(_c_div(secs, 3600), 24)
        days = _c_div(secs, 86400)

        logouttime = "- " + format_time(spec.out_fmt, logout_time)
        wide = ctl.time_fmt > TimeFormat.SHORT

        if logout_time == self.currentdate:
            if wide:
                logouttime, length = "  still running", ""
            else:
                logouttime, length = "  still", "running"
        elif days:
            length = f"({days}+{abs(hours):02d}:{abs(mins):02d})"
        elif hours:
            length = f" ({hours:02d}:{abs(mins):02d})"
        elif secs >= 0:
            length = f" ({hours:02d}:{mins:02d})"
        else:
            length = f" (-00:{abs(mins):02d})"

        if kind is EntryKind.CRASH:
            logouttime = "- crash"
        elif kind is EntryKind.DOWN:
            logouttime = "- down "
        elif kind is EntryKind.NOW:
            if wide:
                logouttime, length = "  still logged in", ""
            else:
                logouttime, length = "  still", "logged in"
        elif kind is EntryKind.PHANTOM:
            if wide:
                logouttime, length = "  gone - no logout", ""
            elif ctl.time_fmt == TimeFormat.SHORT:
                logouttime, length = "   gone", "- no logout"
            else:
                logouttime, length = "", "no logout"
        elif kind is EntryKind.TIMECHANGE:
            logouttime, length = "", ""

        domain = self._domain(record)
        user_col = _clip(record.user, ctl.name_len, LAST_LOGIN_LEN)
        line_col = _clip(utline, 12, 12)
        login_col = _clip(logintime, spec.in_len, spec.in_len)
        logout_col = _clip(logouttime, spec.out_len, spec.out_len)

        if ctl.showhost and not ctl.altlist:
            fields = [
                user_col,
                line_col,
                _clip(domain, ctl.domain_len, LAST_DOMAIN_LEN),
                login_col,
                logout_col,
                length,
            ]
        elif ctl.showhost:
            fields = [
                user_col,
                line_col,
                login_col,
                logout_col,
                _clip(length, 12, 12),
                domain,
            ]
        else:
            fields = [user_col, line_col, login_col, logout_col, length]

        final = " ".join(fields) + "\n"
        truncated = len(final) >= _FINAL_SIZE
        if truncated:
            final = final[: _FINAL_SIZE - 1]
        self.out.write(careful_text(trim_trailing_spaces(final)))
        if truncated:
            self.out.write("\n")

        self.recsdone += 1
        return bool(ctl.maxrecs) and ctl.maxrecs <= self.recsdone

    @staticmethod
    def _fix_type(ut: UtmpRecord) -> None:
        if ut.line.startswith("~"):
            if ut.user.startswith("shutdown"):
                ut.type = UtType.SHUTDOWN_TIME
            elif ut.user.startswith("reboot"):
                ut.type = UtType.BOOT_TIME
            elif ut.user.startswith("runlevel"):
                ut.type = UtType.RUN_LVL
            return
        if (
            ut.type != UtType.DEAD_PROCESS
            and ut.user
            and ut.line
            and not ut.user.startswith("LOGIN")
        ):
            ut.type = UtType.USER_PROCESS
        if not ut.user:
            ut.type = UtType.DEAD_PROCESS
        if ut.user.startswith("date"):
            if ut.line.startswith("|"):
                ut.type = UtType.OLD_TIME
            if ut.line.startswith("{"):
                ut.type = UtType.NEW_TIME

    def process(self, filename: str) -> None:
        """List the sessions recorded in one file, newest first."""
        ctl = self.ctl
        now = self._now()
        self.lastdate = self.currentdate = now
        lastdown = lastrch = now
        lastboot = 0
        whydown = EntryKind.CRASH
        ulist: List[UtmpRecord] = []
        quit_ = False

        with open(filename, "rb") as fp:
            first = read_first_record(fp)
            if first is not None:
                begintime = first.tv_sec
                records = iter_records_reversed(fp)
            else:
                begintime = int(os.fstat(fp.fileno()).st_ctime)
                records = iter(())

            for ut in records:
                if quit_:
                    break
                if ctl.since and ut.tv_sec < ctl.since:
                    continue
                if ctl.until and ctl.until < ut.tv_sec:
                    continue

                self.lastdate = ut.tv_sec

                if ctl.lastb:
                    quit_ = self.list_entry(ut, ut.tv_sec, EntryKind.NORMAL)
                    continue

                self._fix_type(ut)
                down = False
                kind = ut.type

                if kind == UtType.SHUTDOWN_TIME:
                    if ctl.extended:
                        ut.line = "system down"
                        quit_ = self.list_entry(ut, lastboot, EntryKind.NORMAL)
                    lastdown = lastrch = ut.tv_sec
                    down = True
                elif kind in (UtType.OLD_TIME, UtType.NEW_TIME):
                    if ctl.extended:
                        ut.line = (
                            "new time" if kind == UtType.NEW_TIME else "old time"
                        )
                        quit_ = self.list_entry(ut, lastdown, EntryKind.TIMECHANGE)
                elif kind == UtType.BOOT_TIME:
                    ut.line = "system boot"
                    quit_ = self.list_entry(ut, lastdown, EntryKind.REBOOT)
                    lastboot = ut.tv_sec
                    down = True
                elif kind == UtType.RUN_LVL:
                    level = ut.pid & 255
                    if ctl.extended:
                        ut.line = "(to lvl " + (chr(level) + ")" if level else "")
                        quit_ = self.list_entry(ut, lastrch, EntryKind.NORMAL)
                    if level in (ord("0"), ord("6")):
                        lastdown = ut.tv_sec
                        down = True
                        ut.type = UtType.SHUTDOWN_TIME
                    lastrch = ut.tv_sec
                elif kind in (UtType.USER_PROCESS, UtType.DEAD_PROCESS):
                    if kind == UtType.USER_PROCESS:
                        match = next((p for p in ulist if p.line == ut.line), None)
                        if match is not None:
                            quit_ = self.list_entry(ut, match.tv_sec, EntryKind.NORMAL)
                            ulist = [p for p in ulist if p.line != ut.line]
                        else:
                            if not lastboot:
                                how = (
                                    EntryKind.PHANTOM
                                    if is_phantom(ctl, ut)
                                    else EntryKind.NOW
                                )
                            else:
                                how = whydown
                            quit_ = self.list_entry(ut, lastboot, how)
                    if ut.line:
                        ulist.insert(0, dataclasses.replace(ut))
                elif kind in (
                    UtType.EMPTY,
                    UtType.INIT_PROCESS,
                    UtType.LOGIN_PROCESS,
                    UtType.ACCOUNTING,
                ):
                    pass
                else:
                    log.warning("unrecognized ut_type: %d", kind)

                if down:
                    lastboot = ut.tv_sec
                    whydown = (
                        EntryKind.DOWN
                        if ut.type == UtType.SHUTDOWN_TIME
                        else EntryKind.CRASH
                    )
                    ulist = []

        if ctl.time_fmt != TimeFormat.NONE:
            spec = spec_for(ctl.time_fmt)
            timestr = format_time(spec.in_fmt, begintime)
            name = os.path.basename(filename.rstrip("/")) or filename
            self.out.write(f"\n{name} begins {timestr}\n")


def process_wtmp_file(
    ctl: LastControl,
    filename: str,
    out: Optional[TextIO] = None,
    now: Optional[int] = None,
) -> LastReport:
    """List the sessions in one file and return the report used."""
    report = LastReport(ctl, out, now)
    report.process(filename)
    return report