"""
Typed network addresses.

Converts the "host:port" text found in lsof and netstat output into
NetAddr values tagged with their transport (tcp or udp).
"""

from __future__ import annotations

import ipaddress
import socket
from dataclasses import dataclass
from typing import Tuple

from lsaddr.errors import AddressParseError, UnsupportedNetworkError

TCP = "tcp"
UDP = "udp"


@dataclass(frozen=True)
class NetAddr:
    """A transport address: network kind, host and port."""
    network: str
    host: str
    port: int

    @property
    def is_ipv6(self) -> bool:
        """True when host is an IPv6 literal."""
        return ":" in self.host

    def __str__(self) -> str:
        if self.is_ipv6:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def network_kind(network: str) -> str:
    """
    Map a protocol token such as "TCP", "UDP6" or "tcp4" to tcp or udp.

    Raises:
        UnsupportedNetworkError: If the token names neither TCP nor UDP
    """
    lowered = network.lower()
    if TCP in lowered:
        return TCP
    if UDP in lowered:
        return UDP
    raise UnsupportedNetworkError(lowered)


def split_host_port(addr: str) -> Tuple[str, str]:
    """
    Split "host:port" or "[host]:port" into its two parts.

    Raises:
        AddressParseError: If the address has no port or an ambiguous host
    """
    if addr.startswith("["):
        end = addr.find("]")
        if end == -1:
            raise AddressParseError(addr, "missing ']' in address")
        host = addr[1:end]
        rest = addr[end + 1:]
        if not rest.startswith(":"):
            raise AddressParseError(addr, "missing port in address")
        return host, rest[1:]

    host, sep, port = addr.rpartition(":")
    if not sep:
        raise AddressParseError(addr, "missing port in address")
    if ":" in host:
        raise AddressParseError(addr, "too many colons in address")
    return host, port


WILDCARD_PORT = "*"


def _parse_port(addr: str, port: str, network: str) -> int:
    if port == WILDCARD_PORT:
        return 0
    if port.isascii() and port.isdecimal():
        value = int(port)
        if value > 65535:
            raise AddressParseError(addr, "invalid port")
        return value
    if not port:
        raise AddressParseError(addr, "missing port in address")
    try:
        return socket.getservbyname(port, network)
    except (OSError, UnicodeError):
        raise AddressParseError(addr, f"unknown port {port}") from None


def parse_net_addr(network: str, addr: str) -> NetAddr:
    """
    Parse an address string for the given network kind.

    Args:
        network: Protocol token, any case (e.g. "TCP", "UDP")
        addr: Address such as "10.0.0.1:443", "[::1]:53" or "host:https"

    Returns:
        Parsed NetAddr

    Raises:
        UnsupportedNetworkError: If network is neither TCP nor UDP
        AddressParseError: If addr cannot be split into host and port
    """
    kind = network_kind(network)
    host, port = split_host_port(addr)

    if not host:
        raise AddressParseError(addr, "missing host in address")
    if addr.startswith("["):
        try:
            ipaddress.IPv6Address(host)
        except ValueError:
            raise AddressParseError(addr, f"invalid IPv6 address {host}") from None

    return NetAddr(network=kind, host=host, port=_parse_port(addr, port, kind))
