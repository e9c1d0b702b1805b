"""
Error types for lsaddr.

Every error raised by the lookup pipeline derives from LsaddrError so the
command-line interface can report it with a single handler.
"""

from __future__ import annotations


class LsaddrError(Exception):
    """Base class for all lsaddr errors."""


class ChunkError(LsaddrError):
    """A line has fewer fields than required."""

    def __init__(self, expected: int, found: int, line: str) -> None:
        self.expected = expected
        self.found = found
        self.line = line
        super().__init__(
            f"unable to chunk line: expected at least {expected} items, "
            f"found {found}: line \"{line}\""
        )


class UnsupportedNetworkError(LsaddrError):
    """The network kind is neither TCP nor UDP."""

    def __init__(self, network: str) -> None:
        self.network = network
        super().__init__(f"unsupported network {network}")


class AddressParseError(LsaddrError):
    """An address string cannot be split into host and port."""

    def __init__(self, addr: str, reason: str) -> None:
        self.addr = addr
        self.reason = reason
        super().__init__(f"unable to parse address \"{addr}\": {reason}")


class BundleError(LsaddrError):
    """Application bundle metadata is missing or malformed."""


class PatternError(LsaddrError):
    """The selector does not compile into a regular expression."""


class CommandError(LsaddrError):
    """An external listing tool could not be run or failed."""
