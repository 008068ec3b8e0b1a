"""File descriptors for Linux TUN and TAP devices."""

from __future__ import annotations

import fcntl
import os
import struct

from sponge.file_descriptor import FileDescriptor
from sponge.util import system_call

CLONEDEV = "/dev/net/tun"

IFNAMSIZ = 16
IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
TUNSETIFF = 0x400454CA

# struct ifreq: a 16-byte interface name followed by a 24-byte union,
# whose first member here is the short ifr_flags.
_IFREQ = struct.Struct(f"{IFNAMSIZ}sH22x")


def _ifreq(devname: str, is_tun: bool) -> bytes:
    """Build the ``struct ifreq`` that attaches to ``devname`` without packet info."""
    flags = (IFF_TUN if is_tun else IFF_TAP) | IFF_NO_PI
    name = devname.encode("utf-8")[: IFNAMSIZ - 1]
    return _IFREQ.pack(name, flags)


class TunTapFD(FileDescriptor):
    """A descriptor for an existing persistent TUN (IP datagrams) or TAP (Ethernet frames) device.

    The device must already exist, e.g. created by root with
    ``ip tuntap add mode tun user <username> name <devname>``.
    """

    def __init__(self, devname: str, is_tun: bool) -> None:
        fd = system_call("open", lambda: os.open(CLONEDEV, os.O_RDWR))
        super().__init__(fd)
        request = _ifreq(devname, is_tun)
        try:
            system_call("ioctl", lambda: fcntl.ioctl(self.fd_num(), TUNSETIFF, request))
        except BaseException:
            self.close()
            raise


class TunFD(TunTapFD):
    """A descriptor for an existing persistent TUN device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, True)


class TapFD(TunTapFD):
    """A descriptor for an existing persistent TAP device."""

    def __init__(self, devname: str) -> None:
        super().__init__(devname, False)