"""Handles on existing persistent Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from spongetcp.file_descriptor import FileDescriptor
from spongetcp.util import UnixError

CLONEDEV = "/dev/net/tun"

_TUNSETIFF = 0x400454CA
_IFF_TUN = 0x0001
_IFF_TAP = 0x0002
_IFF_NO_PI = 0x1000
_IFNAMSIZ = 16


def _ifreq(devname: str, is_tun: bool) -> bytes:
    """Build the interface request naming ``devname`` as a TUN or TAP device without packet info."""
    flags = (_IFF_TUN if is_tun else _IFF_TAP) | _IFF_NO_PI
    name = devname.encode()[: _IFNAMSIZ - 1]
    return struct.pack("16sH22x", name, flags)


class TunTapFD(FileDescriptor):
    """A descriptor on a TUN (IP datagrams) or TAP (Ethernet frames) device."""

    __slots__ = ()

    def __init__(self, devname: str, is_tun: bool) -> None:
        try:
            fd = os.open(CLONEDEV, os.O_RDWR)
        except OSError as exc:
            raise UnixError("open", exc.errno or 0) from exc
        super().__init__(fd)
        try:
            fcntl.ioctl(self.fd_num(), _TUNSETIFF, _ifreq(devname, is_tun))
        except OSError as exc:
            self.close()
            raise UnixError("ioctl", exc.errno or 0) from exc


class TunFD(TunTapFD):
    """A descriptor on an existing TUN device."""

    __slots__ = ()

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor on an existing TAP device."""

    __slots__ = ()

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)