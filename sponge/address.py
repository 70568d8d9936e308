"""Socket addresses and name resolution."""

from __future__ import annotations

import socket
from typing import Union

SockAddr = Union[tuple, str, bytes]


def _lookup(node: str, service: str, flags: int) -> tuple[int, tuple]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise socket.gaierror(exc.errno, f"getaddrinfo({node}, {service}): {exc.strerror}") from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _type, _proto, _canon, sockaddr = results[0]
    return family, sockaddr


class Address:
    """An IPv4 socket address (or any address returned by the socket layer)."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, ip: str, port: int = 0) -> None:
        """Build from a dotted-quad string and a numeric port, without resolving names."""
        if not 0 <= port <= 0xFFFF:
            raise ValueError(f"port out of range: {port}")
        self._family, self._sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )

    @classmethod
    def _make(cls, family: int, sockaddr: SockAddr) -> "Address":
        address = cls.__new__(cls)
        address._family = family
        address._sockaddr = sockaddr
        return address

    @classmethod
    def resolve(cls, hostname: str, service: str) -> "Address":
        """Resolve a host name and a service name (or numeric strings)."""
        family, sockaddr = _lookup(hostname, service, socket.AI_ALL)
        return cls._make(family, sockaddr)

    @classmethod
    def from_sockaddr(cls, sockaddr: SockAddr) -> "Address":
        """Build from an address as returned by the socket module."""
        if isinstance(sockaddr, (str, bytes)):
            return cls._make(socket.AF_UNIX, sockaddr)
        if isinstance(sockaddr, tuple) and len(sockaddr) == 2:
            host, port = sockaddr
            packed = socket.inet_pton(socket.AF_INET, host)
            return cls._make(socket.AF_INET, (socket.inet_ntop(socket.AF_INET, packed), int(port)))
        if isinstance(sockaddr, tuple) and len(sockaddr) == 4:
            host, port, flowinfo, scope = sockaddr
            packed = socket.inet_pton(socket.AF_INET6, host)
            return cls._make(
                socket.AF_INET6,
                (socket.inet_ntop(socket.AF_INET6, packed), int(port), flowinfo, scope),
            )
        raise ValueError("invalid sockaddr size")

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> "Address":
        """Build an address with port 0 from a 32-bit IPv4 number."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {ip_address}")
        return cls._make(socket.AF_INET, (socket.inet_ntoa(ip_address.to_bytes(4, "big")), 0))

    @property
    def family(self) -> int:
        """The address family, such as ``socket.AF_INET``."""
        return self._family

    @property
    def sockaddr(self) -> SockAddr:
        """The address in the form the socket module expects."""
        return self._sockaddr

    def ip_port(self) -> tuple[str, int]:
        """Return the numeric IP string and the port."""
        if self._family not in (socket.AF_INET, socket.AF_INET6):
            raise ValueError("getnameinfo: address has no IP and port")
        return self._sockaddr[0], self._sockaddr[1]

    @property
    def ip(self) -> str:
        return self.ip_port()[0]

    @property
    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """Return the IPv4 address as an integer in host byte order."""
        if self._family != socket.AF_INET:
            raise ValueError("ipv4_numeric called on non-IPV4 address")
        return int.from_bytes(socket.inet_aton(self._sockaddr[0]), "big")

    def to_string(self) -> str:
        """Return the address as ``ip:port``."""
        ip, port = self.ip_port()
        return f"{ip}:{port}"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Address({self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))