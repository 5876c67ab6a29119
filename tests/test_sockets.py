import errno
import os
import socket

import pytest

from spongetcp.address import Address
from spongetcp.file_descriptor import FileDescriptor
from spongetcp.sockets import LocalStreamSocket, TCPSocket, UDPSocket
from spongetcp.util import UnixError


def _loopback():
    return Address.from_ip_port("127.0.0.1", 0)


def test_udp_sendto_and_recv():
    with UDPSocket() as receiver, UDPSocket() as sender:
        receiver.bind(_loopback())
        sender.bind(_loopback())
        sender.sendto(receiver.local_address(), b"ping")
        datagram = receiver.recv()
        assert datagram.payload == b"ping"
        assert datagram.source_address == sender.local_address()
        assert sender.write_count() == 1
        assert receiver.read_count() == 1


def test_udp_connected_send():
    with UDPSocket() as receiver, UDPSocket() as sender:
        receiver.bind(_loopback())
        sender.connect(receiver.local_address())
        assert sender.peer_address() == receiver.local_address()
        sender.send("hello")
        assert receiver.recv().payload == b"hello"


def test_udp_oversized_datagram():
    with UDPSocket() as receiver, UDPSocket() as sender:
        receiver.bind(_loopback())
        sender.sendto(receiver.local_address(), b"0123456789")
        with pytest.raises(RuntimeError):
            receiver.recv(4)


def test_udp_send_unconnected_fails():
    with UDPSocket() as sender:
        with pytest.raises(UnixError) as info:
            sender.send(b"data")
        assert info.value.attempt == "sendmsg"


def test_tcp_connect_accept_and_transfer():
    with TCPSocket() as listener, TCPSocket() as client:
        listener.bind(_loopback())
        listener.listen()
        client.connect(listener.local_address())
        with listener.accept() as server:
            assert server.peer_address() == client.local_address()
            assert server.local_address() == listener.local_address()
            assert client.write(b"hello") == 5
            assert server.read(5) == b"hello"
        assert listener.read_count() == 1


def test_tcp_shutdown_write_gives_eof():
    with TCPSocket() as listener, TCPSocket() as client:
        listener.bind(_loopback())
        listener.listen()
        client.connect(listener.local_address())
        with listener.accept() as server:
            client.shutdown(socket.SHUT_WR)
            assert client.write_count() == 1
            assert server.read(10) == b""
            assert server.eof()


def test_shutdown_rdwr_counts_both():
    with TCPSocket() as listener, TCPSocket() as client:
        listener.bind(_loopback())
        listener.listen()
        client.connect(listener.local_address())
        with listener.accept():
            client.shutdown(socket.SHUT_RDWR)
            assert (client.read_count(), client.write_count()) == (1, 1)


def test_bind_in_use_raises():
    with TCPSocket() as first, TCPSocket() as second:
        first.bind(_loopback())
        first.listen()
        with pytest.raises(UnixError) as info:
            second.bind(first.local_address())
        assert info.value.attempt == "bind"
        assert info.value.errno == errno.EADDRINUSE


def test_set_reuseaddr():
    with TCPSocket() as sock:
        probe = socket.socket(fileno=os.dup(sock.fd_num()))
        try:
            before = probe.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR)
            sock.set_reuseaddr()
            after = probe.getsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR)
            assert (before, bool(after)) == (0, True)
        finally:
            probe.close()


def test_local_stream_socket_pair():
    left, right = socket.socketpair()
    with LocalStreamSocket(FileDescriptor(left.detach())) as a, LocalStreamSocket(
        FileDescriptor(right.detach())
    ) as b:
        a.write(b"abc")
        assert b.read(3) == b"abc"


def test_local_stream_socket_rejects_udp():
    raw = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    fd = FileDescriptor(raw.detach())
    with fd:
        with pytest.raises(ValueError, match="domain mismatch"):
            LocalStreamSocket(fd)