"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Any

from sponge.util import TaggedError

_NUMERIC_HINTS = socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
_NAME_HINTS = socket.AI_ALL
_NUMERIC_NAMEINFO = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV


def _lookup(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canon, sockaddr = results[0]
    return family, sockaddr


class Address:
    """A socket address: by default an IPv4 address and port.

    ``Address("18.243.0.1", 80)`` takes a dotted quad and a numeric port without
    doing any name lookup; :meth:`resolve` looks up a host and service name.
    """

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _lookup(ip, str(port), _NUMERIC_HINTS)

    @classmethod
    def _make(cls, family: int, sockaddr: Any) -> Address:
        obj = cls.__new__(cls)
        obj._family = family
        obj._sockaddr = sockaddr
        return obj

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Look up a host name and a service name (e.g. "http") or number."""
        family, sockaddr = _lookup(hostname, service, _NAME_HINTS)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, sockaddr: Any) -> Address:
        """Wrap an address as returned by the socket module.

        A 2-tuple is IPv4, a 4-tuple IPv6, and a str or bytes a Unix-domain path.
        """
        if isinstance(sockaddr, tuple):
            if len(sockaddr) == 2:
                return cls._make(socket.AF_INET, (str(sockaddr[0]), int(sockaddr[1])))
            if len(sockaddr) == 4:
                host, port, flowinfo, scope_id = sockaddr
                return cls._make(socket.AF_INET6, (str(host), int(port), int(flowinfo), int(scope_id)))
            raise ValueError("invalid sockaddr size")
        if isinstance(sockaddr, (str, bytes)):
            return cls._make(socket.AF_UNIX, sockaddr)
        raise ValueError("invalid sockaddr")

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """An IPv4 address (port 0) from its 32-bit numeric value."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {ip_address}")
        return cls._make(socket.AF_INET, (socket.inet_ntoa(ip_address.to_bytes(4, "big")), 0))

    @property
    def family(self) -> int:
        """The address family, e.g. ``socket.AF_INET``."""
        return self._family

    @property
    def sockaddr(self) -> Any:
        """The address in the form the socket module takes."""
        return self._sockaddr

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise TaggedError("getnameinfo", socket.EAI_FAMILY, "ai_family not supported")
        try:
            host, service = socket.getnameinfo(self._sockaddr, _NUMERIC_NAMEINFO)
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(service)

    def ip(self) -> str:
        """The numeric IP address string, e.g. "18.243.0.1"."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as a 32-bit integer."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address.from_sockaddr({self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))