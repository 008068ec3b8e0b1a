"""Network sockets built on :class:`FileDescriptor`."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Union

from sponge.address import Address
from sponge.buffer import Buffer, BufferList, BufferViewList, BytesLike
from sponge.file_descriptor import FileDescriptor
from sponge.util import system_call

Payload = Union[BufferViewList, BufferList, Buffer, BytesLike, str]


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass.

    Given an existing descriptor, it checks that the descriptor really is a
    socket of the expected domain and type.
    """

    def __init__(self, domain: int, kind: int, fd: FileDescriptor | None = None) -> None:
        if fd is None:
            sock = system_call("socket", lambda: socket.socket(domain, kind))
            super().__init__(sock.detach())
            return
        super().__init__(fd)
        with self._borrowed("getsockopt") as sock:
            so_domain = getattr(socket, "SO_DOMAIN", None)
            if so_domain is None:
                actual_domain = int(sock.family)
            else:
                actual_domain = system_call(
                    "getsockopt", lambda: sock.getsockopt(socket.SOL_SOCKET, so_domain)
                )
            if actual_domain != domain:
                raise RuntimeError("socket domain mismatch")
            actual_type = system_call(
                "getsockopt", lambda: sock.getsockopt(socket.SOL_SOCKET, socket.SO_TYPE)
            )
            if actual_type != kind:
                raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrowed(self, attempt: str = "socket") -> Iterator[socket.socket]:
        """A socket object for this descriptor that does not own it."""
        sock = system_call(attempt, lambda: socket.socket(fileno=self.fd_num()))
        try:
            yield sock
        finally:
            sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrowed() as sock:
            system_call("bind", lambda: sock.bind(address.sockaddr))

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrowed() as sock:
            system_call("connect", lambda: sock.connect(address.sockaddr))

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (``socket.SHUT_RD`` and so on)."""
        with self._borrowed() as sock:
            system_call("shutdown", lambda: sock.shutdown(how))
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise ValueError("shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The socket's own address."""
        with self._borrowed() as sock:
            return Address.from_sockaddr(system_call("getsockname", sock.getsockname))

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._borrowed() as sock:
            return Address.from_sockaddr(system_call("getpeername", sock.getpeername))

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner (``SO_REUSEADDR``)."""
        with self._borrowed() as sock:
            system_call(
                "setsockopt", lambda: sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            )


@dataclass
class ReceivedDatagram:
    """A received datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: FileDescriptor | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raises if it is larger than ``mtu``."""
        with self._borrowed() as sock:
            payload, _ancillary, flags, source = system_call("recvfrom", lambda: sock.recvmsg(mtu))
        if flags & socket.MSG_TRUNC:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), payload)

    def _sendmsg(self, payload: Payload, destination: Address | None) -> None:
        views = payload if isinstance(payload, BufferViewList) else BufferViewList(payload)
        iovecs = views.as_iovecs()
        expected = len(views)
        with self._borrowed() as sock:
            if destination is None:
                sent = system_call("sendmsg", lambda: sock.sendmsg(iovecs))
            else:
                sent = system_call(
                    "sendmsg", lambda: sock.sendmsg(iovecs, [], 0, destination.sockaddr)
                )
        if sent != expected:
            raise RuntimeError("datagram payload too big for sendmsg()")

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)
        self._register_write()

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer (call connect() first)."""
        self._sendmsg(payload, None)
        self._register_write()


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: FileDescriptor | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting connections."""
        with self._borrowed() as sock:
            system_call("listen", lambda: sock.listen(backlog))

    def accept(self) -> TCPSocket:
        """Wait for and accept a new connection."""
        self._register_read()
        with self._borrowed() as sock:
            connection, _peer = system_call("accept", sock.accept)
        return TCPSocket(FileDescriptor(connection.detach()))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket wrapped around an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)