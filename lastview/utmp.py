"""Binary login records as stored in wtmp/btmp files."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO, Iterator, Optional

# short type, pad, pid, line[32], id[4], user[32], host[256],
# exit {short, short}, session, tv {sec, usec}, addr_v6[16], reserved[20]
_LAYOUT = struct.Struct("<h2xi32s4s32s256shhiii16s20x")

RECORD_SIZE = _LAYOUT.size
LINE_SIZE = 32
ID_SIZE = 4
USER_SIZE = 32
HOST_SIZE = 256
ADDR_SIZE = 16


class UtType(IntEnum):
    """Kinds of login record."""

    EMPTY = 0
    RUN_LVL = 1
    BOOT_TIME = 2
    NEW_TIME = 3
    OLD_TIME = 4
    INIT_PROCESS = 5
    LOGIN_PROCESS = 6
    USER_PROCESS = 7
    DEAD_PROCESS = 8
    ACCOUNTING = 9
    SHUTDOWN_TIME = 254


def _decode(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "surrogateescape")


def _encode(text: str, size: int, name: str) -> bytes:
    data = text.encode("utf-8", "surrogateescape")
    if len(data) > size:
        raise ValueError(f"{name} is longer than {size} bytes: {text!r}")
    return data


@dataclass
class UtmpRecord:
    """One login record; ``type`` is kept as a plain int so unknown kinds survive."""

    type: int = UtType.EMPTY
    pid: int = 0
    line: str = ""
    ident: str = ""
    user: str = ""
    host: str = ""
    exit_termination: int = 0
    exit_status: int = 0
    session: int = 0
    tv_sec: int = 0
    tv_usec: int = 0
    addr_v6: bytes = field(default=bytes(ADDR_SIZE))

    @classmethod
    def from_bytes(cls, data: bytes) -> "UtmpRecord":
        """Decode exactly one record."""
        if len(data) != RECORD_SIZE:
            raise ValueError(
                f"a record is {RECORD_SIZE} bytes, got {len(data)}"
            )
        (
            ut_type,
            pid,
            line,
            ident,
            user,
            host,
            e_term,
            e_exit,
            session,
            tv_sec,
            tv_usec,
            addr,
        ) = _LAYOUT.unpack(data)
        return cls(
            type=ut_type,
            pid=pid,
            line=_decode(line),
            ident=_decode(ident),
            user=_decode(user),
            host=_decode(host),
            exit_termination=e_term,
            exit_status=e_exit,
            session=session,
            tv_sec=tv_sec,
            tv_usec=tv_usec,
            addr_v6=bytes(addr),
        )

    def to_bytes(self) -> bytes:
        """Encode the record in the on-disk layout."""
        if len(self.addr_v6) != ADDR_SIZE:
            raise ValueError(f"addr_v6 must be {ADDR_SIZE} bytes")
        try:
            return _LAYOUT.pack(
                int(self.type),
                self.pid,
                _encode(self.line, LINE_SIZE, "line"),
                _encode(self.ident, ID_SIZE, "ident"),
                _encode(self.user, USER_SIZE, "user"),
                _encode(self.host, HOST_SIZE, "host"),
                self.exit_termination,
                self.exit_status,
                self.session,
                self.tv_sec,
                self.tv_usec,
                bytes(self.addr_v6),
            )
        except struct.error as exc:
            raise ValueError(str(exc)) from exc


def read_first_record(stream: BinaryIO) -> Optional[UtmpRecord]:
    """Return the record at the start of the stream, or None if there is none."""
    stream.seek(0)
    data = stream.read(RECORD_SIZE)
    if len(data) != RECORD_SIZE:
        return None
    return UtmpRecord.from_bytes(data)


def iter_records_reversed(stream: BinaryIO) -> Iterator[UtmpRecord]:
    """Yield records from the end of the stream backwards.

    Records are aligned to the end of the stream; stray bytes at the
    start that do not make up a whole record are ignored.
    """
    pos = stream.seek(0, os.SEEK_END)
    while pos >= RECORD_SIZE:
        pos -= RECORD_SIZE
        stream.seek(pos)
        data = stream.read(RECORD_SIZE)
        if len(data) != RECORD_SIZE:
            return
        yield UtmpRecord.from_bytes(data)