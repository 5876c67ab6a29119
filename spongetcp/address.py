"""IPv4 socket addresses and name resolution."""

from __future__ import annotations

import ipaddress
import socket
from typing import Any

from spongetcp.util import TaggedError


def _lookup(node: str, service: str, flags: int, family: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, family, 0, 0, flags)
    except socket.gaierror as exc:
        raise TaggedError(
            f"getaddrinfo({node}, {service})", exc.errno or 0, exc.strerror or str(exc)
        ) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    found_family, _type, _proto, _canonname, sockaddr = results[0]
    return found_family, sockaddr


class Address:
    """A socket address: an address family and the address in the socket module's form."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, family: int, sockaddr: Any) -> None:
        self._family = family
        self._sockaddr = tuple(sockaddr) if isinstance(sockaddr, (tuple, list)) else sockaddr

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a host name and service name (such as ``"http"``) to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, socket.AI_ALL, socket.AF_INET)
        return cls(family, sockaddr)

    @classmethod
    def from_ip_port(cls, ip: str, port: int = 0) -> Address:
        """Build from a dotted-quad string and a numeric port, without any lookup."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        family, sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV, socket.AF_INET
        )
        return cls(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, family: int, sockaddr: Any) -> Address:
        """Wrap an address as returned by the socket module."""
        return cls(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build from a 32-bit IPv4 address in host byte order, with port 0."""
        return cls(socket.AF_INET, (str(ipaddress.IPv4Address(ip_address)), 0))

    @property
    def family(self) -> int:
        return self._family

    def ip_port(self) -> tuple[str, int]:
        """The numeric IP address string and the port."""
        if not isinstance(self._sockaddr, tuple):
            raise ValueError("address has no IP and port")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise TaggedError("getnameinfo", exc.errno or 0, exc.strerror or str(exc)) from exc
        return host, int(port)

    def ip(self) -> str:
        """The numeric IP address string, e.g. ``"18.243.0.1"``."""
        return self.ip_port()[0]

    def port(self) -> int:
        """The port number."""
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as an integer in host byte order."""
        if self._family != socket.AF_INET or not isinstance(self._sockaddr, tuple):
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int(ipaddress.IPv4Address(self._sockaddr[0]))

    def sockaddr(self) -> Any:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def __str__(self) -> str:
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __repr__(self) -> str:
        return f"Address(family={self._family!r}, sockaddr={self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))