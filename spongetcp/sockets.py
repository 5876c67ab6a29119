"""Network sockets built on reference-counted file descriptors."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, TypeVar, Union

from spongetcp.address import Address
from spongetcp.buffer import Buffer, BufferList, BufferViewList, BytesLike
from spongetcp.file_descriptor import FileDescriptor
from spongetcp.util import UnixError

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)

Payload = Union[BufferViewList, BufferList, Buffer, BytesLike, str]

_T = TypeVar("_T")
_S = TypeVar("_S", bound="Socket")


def _views(payload: Payload) -> BufferViewList:
    if isinstance(payload, BufferViewList):
        return payload
    if isinstance(payload, str):
        payload = payload.encode()
    return BufferViewList(payload)


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    __slots__ = ()

    def __init__(self, domain: int, sock_type: int) -> None:
        try:
            raw = socket.socket(domain, sock_type)
        except OSError as exc:
            raise UnixError("socket", exc.errno or 0) from exc
        super().__init__(raw.detach())

    @classmethod
    def _adopting(cls: type[_S], fd: FileDescriptor, domain: int, sock_type: int) -> _S:
        sock = cls.__new__(cls)
        sock._adopt(fd, domain, sock_type)
        return sock

    def _adopt(self, fd: FileDescriptor, domain: int, sock_type: int) -> None:
        """Take over ``fd``, checking that it is a socket of the expected domain and type."""
        self._internal = fd._internal
        actual_domain, actual_type = self._call("getsockopt", lambda s: (s.family, s.type))
        if actual_domain != domain:
            raise ValueError("socket domain mismatch")
        if actual_type != sock_type:
            raise ValueError("socket type mismatch")

    @contextmanager
    def _borrowed(self) -> Iterator[socket.socket]:
        sock = socket.socket(fileno=self.fd_num())
        try:
            yield sock
        finally:
            sock.detach()

    def _call(self, name: str, operation: Callable[[socket.socket], _T]) -> _T:
        try:
            with self._borrowed() as sock:
                return operation(sock)
        except UnixError:
            raise
        except OSError as exc:
            raise UnixError(name, exc.errno or 0) from exc

    def bind(self, address: Address) -> None:
        """Bind the socket to a local address."""
        self._call("bind", lambda s: s.bind(address.sockaddr()))

    def connect(self, address: Address) -> None:
        """Connect the socket to a peer address."""
        self._call("connect", lambda s: s.connect(address.sockaddr()))

    def shutdown(self, how: int) -> None:
        """Shut down reading (SHUT_RD), writing (SHUT_WR) or both (SHUT_RDWR)."""
        self._call("shutdown", lambda s: s.shutdown(how))
        if how == socket.SHUT_RD:
            self.register_read()
        elif how == socket.SHUT_WR:
            self.register_write()
        elif how == socket.SHUT_RDWR:
            self.register_read()
            self.register_write()
        else:
            raise ValueError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The address the socket is bound to."""
        family, addr = self._call("getsockname", lambda s: (s.family, s.getsockname()))
        return Address.from_sockaddr(family, addr)

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        family, addr = self._call("getpeername", lambda s: (s.family, s.getpeername()))
        return Address.from_sockaddr(family, addr)

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner, at some cost in robustness."""
        self._call(
            "setsockopt", lambda s: s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        )


@dataclass
class ReceivedDatagram:
    """A received UDP datagram and the address it came from."""

    source_address: Address
    payload: bytes


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    __slots__ = ()

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM)

    @classmethod
    def _from_fd(cls, fd: FileDescriptor) -> UDPSocket:
        return cls._adopting(fd, socket.AF_INET, socket.SOCK_DGRAM)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raises RuntimeError if it does not fit in ``mtu`` bytes."""
        storage = bytearray(mtu)

        def receive(sock: socket.socket) -> tuple[int, int, Any]:
            length, source = sock.recvfrom_into(storage, mtu, _MSG_TRUNC)
            return length, sock.family, source

        length, family, source = self._call("recvfrom", receive)
        if length > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self.register_read()
        return ReceivedDatagram(Address.from_sockaddr(family, source), bytes(storage[:length]))

    def _sendmsg(self, payload: Payload, destination: Address | None) -> None:
        views = _views(payload)
        size = len(views)
        buffers = views.as_views()

        def send(sock: socket.socket) -> int:
            if destination is None:
                return sock.sendmsg(buffers)
            return sock.sendmsg(buffers, [], 0, destination.sockaddr())

        sent = self._call("sendmsg", send)
        if sent != size:
            raise RuntimeError("datagram payload too big for sendmsg()")
        self.register_write()

    def sendto(self, destination: Address, payload: Payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination)

    def send(self, payload: Payload) -> None:
        """Send a datagram to the connected peer."""
        self._sendmsg(payload, None)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    __slots__ = ()

    def __init__(self) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM)

    @classmethod
    def _from_fd(cls, fd: FileDescriptor) -> TCPSocket:
        return cls._adopting(fd, socket.AF_INET, socket.SOCK_STREAM)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        self._call("listen", lambda s: s.listen(backlog))

    def accept(self) -> TCPSocket:
        """Wait for and return a new connection."""
        self.register_read()

        def accept(sock: socket.socket) -> int:
            connection, _peer = sock.accept()
            return connection.detach()

        return TCPSocket._from_fd(FileDescriptor(self._call("accept", accept)))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket made from an existing descriptor."""

    __slots__ = ()

    def __init__(self, fd: FileDescriptor) -> None:
        self._adopt(fd, socket.AF_UNIX, socket.SOCK_STREAM)