"""Command line front end listing past logins."""

from __future__ import annotations

import contextlib
import getopt
import os
import signal
import sys
import threading
import time
from typing import Iterator, List, Optional, Sequence

from .report import LastControl, LastReport
from .timefmt import which_time_format

WTMP_PATH = "/var/log/wtmp"
BTMP_PATH = "/var/log/btmp"

_SHORT_OPTS = "hVf:n:RxadFit:p:s:0123456789w"
_LONG_OPTS = [
    "limit=",
    "help",
    "file=",
    "nohostname",
    "version",
    "hostlast",
    "since=",
    "until=",
    "present=",
    "system",
    "dns",
    "ip",
    "fulltimes",
    "fullnames",
    "time-format=",
]

# -F and --time-format may not be combined.
_EXCLUSIVE = {"-F": "F", "--fulltimes": "F", "--time-format": "T"}


def usage_text(lastb: bool = False) -> str:
    """Return the help text of the command."""
    prog = "lastb" if lastb else "last"
    path = BTMP_PATH if lastb else WTMP_PATH
    lines = [
        "",
        "Usage:",
        f" {prog} [options] [<username>...] [<tty>...]",
        "",
        "Show a listing of last logged in users.",
        "",
        "Options:",
        " -<number>            how many lines to show",
        " -a, --hostlast       display hostnames in the last column",
        " -d, --dns            translate the IP number back into a hostname",
        f" -f, --file <file>    use a specific file instead of {path}",
        " -F, --fulltimes      print full login and logout times and dates",
        " -i, --ip             display IP numbers in numbers-and-dots notation",
        " -n, --limit <number> how many lines to show",
        " -R, --nohostname     don't display the hostname field",
        " -s, --since <time>   display the lines since the specified time",
        " -t, --until <time>   display the lines until the specified time",
        " -p, --present <time> display who were present at the specified time",
        " -w, --fullnames      display full user and domain names",
        " -x, --system         display system shutdown entries and run level changes",
        "     --time-format <format>  show timestamps in the specified <format>:",
        "                               notime|short|full|iso",
        "",
        f"{' -h, --help':<22}display this help",
        f"{' -V, --version':<22}display version",
        "",
        "For more details see last(1).",
    ]
    return "\n".join(lines) + "\n"


def _program_name() -> str:
    if sys.argv and sys.argv[0]:
        return os.path.basename(sys.argv[0])
    return "last"


def _error(prog: str, message: str) -> None:
    sys.stderr.write(f"{prog}: {message}\n")


def _try_help(prog: str) -> None:
    sys.stderr.write(f"Try '{prog} --help' for more information.\n")


def _boot_time() -> int:
    clock = getattr(time, "CLOCK_BOOTTIME", None)
    if clock is None:
        return 0
    try:
        return int(time.time() - time.clock_gettime(clock))
    except OSError:
        return 0


def _showdate(report: LastReport) -> str:
    return time.ctime(report.lastdate)[:16]


@contextlib.contextmanager
def _quit_warning(prog: str, report: LastReport) -> Iterator[None]:
    """Warn about the current position on SIGQUIT while a file is read."""
    sigquit = getattr(signal, "SIGQUIT", None)
    if sigquit is None or threading.current_thread() is not threading.main_thread():
        yield
        return

    def _handler(_signum, _frame) -> None:
        _error(prog, f"Interrupted {_showdate(report)}")

    previous = signal.signal(sigquit, _handler)
    try:
        yield
    finally:
        signal.signal(sigquit, previous)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command; return its exit status."""
    args: List[str] = list(sys.argv[1:] if argv is None else argv)
    prog = _program_name()
    lastb = prog == "lastb"
    ctl = LastControl(lastb=lastb)

    try:
        opts, rest = getopt.gnu_getopt(args, _SHORT_OPTS, _LONG_OPTS)
    except getopt.GetoptError as exc:
        _error(prog, exc.msg)
        _try_help(prog)
        return 1

    exclusive_seen: Optional[str] = None
    for opt, value in opts:
        member = _EXCLUSIVE.get(opt)
        if member is not None:
            if exclusive_seen is not None and exclusive_seen != member:
                _error(prog, "mutually exclusive arguments: --fulltimes --time-format")
                return 1
            exclusive_seen = member

        if opt in ("-a", "--hostlast"):
            ctl.altlist = True
        elif opt == "--time-format":
            try:
                ctl.time_fmt = which_time_format(value)
            except ValueError as exc:
                _error(prog, str(exc))
                return 1
        else:
            _try_help(prog)
            return 1

    if rest:
        ctl.show = list(rest)

    filename = BTMP_PATH if lastb else WTMP_PATH
    ctl.boot_time = _boot_time()
    report = LastReport(ctl, sys.stdout)
    with _quit_warning(prog, report):
        try:
            report.process(filename)
        except KeyboardInterrupt:
            _error(prog, f"Interrupted {_showdate(report)}")
            return 1
        except OSError as exc:
            reason = exc.strerror or str(exc)
            _error(prog, f"cannot open {filename}: {reason}")
            return 1
    return 0