"""Network sockets built on reference-counted file descriptors."""

from __future__ import annotations

import socket
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from .address import Address
from .buffer import BufferViewList
from .file_descriptor import FileDescriptor

_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0)


class Socket(FileDescriptor):
    """Base class for network sockets; normally used through a subclass."""

    def __init__(self, domain: int, type: int, fd: FileDescriptor | None = None) -> None:
        """Open a new socket, or adopt ``fd`` after checking its domain and type."""
        if fd is None:
            super().__init__(socket.socket(domain, type).detach())
            return
        super().__init__(fd)
        with self._borrow() as sock:
            if sock.family != domain:
                raise RuntimeError("socket domain mismatch")
            if sock.type != type:
                raise RuntimeError("socket type mismatch")

    @contextmanager
    def _borrow(self) -> Iterator[socket.socket]:
        """Expose the descriptor as a socket object without handing over ownership."""
        sock = socket.socket(fileno=self.fd_num)
        try:
            yield sock
        finally:
            sock.detach()

    def bind(self, address: Address) -> None:
        """Bind to a local address, usually before listen/accept."""
        with self._borrow() as sock:
            sock.bind(address.sockaddr)

    def connect(self, address: Address) -> None:
        """Connect to a peer address."""
        with self._borrow() as sock:
            sock.connect(address.sockaddr)

    def shutdown(self, how: int) -> None:
        """Shut down reading, writing or both (``socket.SHUT_*``)."""
        with self._borrow() as sock:
            sock.shutdown(how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket.shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        """The address this socket is bound to."""
        with self._borrow() as sock:
            return Address.from_sockaddr(sock.getsockname())

    def peer_address(self) -> Address:
        """The address of the connected peer."""
        with self._borrow() as sock:
            return Address.from_sockaddr(sock.getpeername())

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner, at some cost in robustness."""
        with self._borrow() as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)


@dataclass
class ReceivedDatagram:
    """A received UDP datagram and the address it came from."""

    source_address: Address
    payload: bytes


def _as_views(payload) -> BufferViewList:
    return payload if isinstance(payload, BufferViewList) else BufferViewList(payload)


class UDPSocket(Socket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: FileDescriptor | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, fd)

    def recv(self, mtu: int = 65536) -> ReceivedDatagram:
        """Receive one datagram; raises RuntimeError if it is larger than ``mtu``."""
        storage = bytearray(mtu)
        with self._borrow() as sock:
            received, source = sock.recvfrom_into(storage, mtu, _MSG_TRUNC)
        if received > mtu:
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return ReceivedDatagram(Address.from_sockaddr(source), bytes(storage[:received]))

    def _sendmsg(self, payload, address=None) -> None:
        views = _as_views(payload)
        buffers = views.as_views() or [b""]
        with self._borrow() as sock:
            if address is None:
                sent = sock.sendmsg(buffers)
            else:
                sent = sock.sendmsg(buffers, [], 0, address)
        if sent != len(views):
            raise RuntimeError("datagram payload too big for sendmsg()")
        self._register_write()

    def sendto(self, destination: Address, payload) -> None:
        """Send a datagram to ``destination``."""
        self._sendmsg(payload, destination.sockaddr)

    def send(self, payload) -> None:
        """Send a datagram to the connected address."""
        self._sendmsg(payload)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: FileDescriptor | None = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, fd)

    def listen(self, backlog: int = 16) -> None:
        """Mark the socket as accepting incoming connections."""
        with self._borrow() as sock:
            sock.listen(backlog)

    def accept(self) -> "TCPSocket":
        """Wait for and return a new connection."""
        self._register_read()
        with self._borrow() as sock:
            connection, _ = sock.accept()
        return TCPSocket(FileDescriptor(connection.detach()))


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket adopted from an existing descriptor."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, fd)