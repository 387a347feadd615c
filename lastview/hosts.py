"""Host name lookup for addresses stored in login records."""

from __future__ import annotations

import ipaddress
import socket
from typing import Tuple

_MAPPED_PREFIX = bytes(8) + b"\xff\xff"


def sockaddr_for(addr: bytes) -> Tuple[int, tuple]:
    """Return (family, sockaddr) for a 16-byte stored address.

    A v4-mapped address or one whose last twelve bytes are zero is
    taken as IPv4; anything else is IPv6.
    """
    addr = bytes(addr)
    if len(addr) != 16:
        raise ValueError(f"address must be 16 bytes, got {len(addr)}")
    if addr[:12] == _MAPPED_PREFIX:
        return socket.AF_INET, (str(ipaddress.IPv4Address(addr[12:])), 0)
    if not any(addr[4:]):
        return socket.AF_INET, (str(ipaddress.IPv4Address(addr[:4])), 0)
    return socket.AF_INET6, (str(ipaddress.IPv6Address(addr)), 0, 0, 0)


def lookup_host(addr: bytes, useip: bool) -> str:
    """Resolve a stored address to a name, or to numeric form if useip.

    Raises OSError when the lookup fails.
    """
    _family, sockaddr = sockaddr_for(addr)
    flags = socket.NI_NUMERICSERV
    if useip:
        flags |= socket.NI_NUMERICHOST
    host, _service = socket.getnameinfo(sockaddr, flags)
    return host