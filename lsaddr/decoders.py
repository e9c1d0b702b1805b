"""
Decoders for open network file listings.

Turns the raw output of ``lsof -i -n -P`` (macOS, Linux) and
``netstat -nao -b`` (Windows) into OpenFile records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from lsaddr.addr import NetAddr, parse_net_addr
from lsaddr.text import TextInput, chunk_line, scan_lines

ARROW = "->"

# COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME
LSOF_MIN_FIELDS = 9

# PROTO LOCAL FOREIGN PID (UDP rows carry no STATE)
NETSTAT_MIN_FIELDS = 4

NETSTAT_BANNER = "Active Connections"
NETSTAT_NO_OWNER = "Can not obtain ownership information"


@dataclass(frozen=True)
class OpenFile:
    """One socket owned by one process, as reported by a listing tool."""
    command: str = ""
    pid: str = ""
    user: str = ""
    fd: str = ""
    type: str = ""
    device: str = ""
    node: str = ""
    name: str = ""
    state: str = ""

    def unmarshal_name(self) -> Tuple[NetAddr, Optional[NetAddr]]:
        """Resolve name into typed source and destination addresses."""
        return split_name(self.name, self.node)

    def text(self) -> str:
        """Fields joined by spaces, as matched by filter patterns."""
        return " ".join(
            v for v in (
                self.command, self.pid, self.user, self.fd, self.type,
                self.device, self.node, self.name, self.state,
            ) if v
        )


def split_name(name: str, node: str) -> Tuple[NetAddr, Optional[NetAddr]]:
    """
    Split a "src->dst" or "src" name into typed addresses.

    A name without an arrow belongs to a listening or connectionless
    socket; its destination is None.

    Raises:
        UnsupportedNetworkError: If node names neither TCP nor UDP
        AddressParseError: If either side is not a valid address
    """
    src, sep, dst = name.partition(ARROW)
    if not sep:
        return parse_net_addr(node, src), None
    return parse_net_addr(node, src), parse_net_addr(node, dst)


def _is_state(field: str) -> bool:
    return len(field) > 2 and field.startswith("(") and field.endswith(")")


def unmarshal_lsof_line(line: str) -> OpenFile:
    """
    Parse one data line of ``lsof -i`` output.

    The trailing STATE column is only recognised when it is wrapped in
    parentheses, so a line lacking it keeps its full NAME.

    Raises:
        ChunkError: If the line has fewer than the mandatory columns
    """
    chunks = chunk_line(line, min_fields=LSOF_MIN_FIELDS)

    state = ""
    tail = chunks[8:]
    if len(tail) > 1 and _is_state(tail[-1]):
        state = tail.pop()

    return OpenFile(
        command=chunks[0],
        pid=chunks[1],
        user=chunks[2],
        fd=chunks[3],
        type=chunks[4],
        device=chunks[5],
        node=chunks[7],
        name=" ".join(tail),
        state=state,
    )


class LsofDecoder:
    """Decodes ``lsof -i -n -P`` output, header already removed."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("lsaddr")

    def decode(self, data: TextInput) -> List[OpenFile]:
        """
        Decode every line of data.

        Blank lines are ignored; any other malformed line aborts the
        whole decode.
        """
        files: List[OpenFile] = []

        def _decode_line(line: str) -> None:
            if line.strip():
                files.append(unmarshal_lsof_line(line))

        scan_lines(data, _decode_line)
        self._logger.debug("lsof: decoded %d lines", len(files))
        return files


def _is_wildcard(addr: str) -> bool:
    return addr == "*:*" or addr.endswith(":0") or addr.endswith(":*")


def unmarshal_netstat_line(line: str) -> OpenFile:
    """
    Parse one data row of ``netstat -nao`` output.

    Raises:
        ChunkError: If the row has fewer than four columns
    """
    chunks = chunk_line(line, min_fields=NETSTAT_MIN_FIELDS)
    proto, local, foreign = chunks[0], chunks[1], chunks[2]
    if len(chunks) > NETSTAT_MIN_FIELDS:
        state, pid = chunks[3], chunks[4]
    else:
        state, pid = "", chunks[3]

    name = local if _is_wildcard(foreign) else f"{local}{ARROW}{foreign}"
    return OpenFile(pid=pid, node=proto, name=name, state=state)


class NetstatDecoder:
    """
    Decodes ``netstat -nao -b`` output.

    Data rows are interleaved with a banner, the column header, service
    tags, "[exe]" owner annotations and ownership notices. Owner
    annotations name the command of the data row preceding them.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("lsaddr")

    def decode(self, data: TextInput) -> List[OpenFile]:
        files: List[OpenFile] = []

        def _decode_line(line: str) -> None:
            stripped = line.strip()
            if not stripped or stripped == NETSTAT_BANNER:
                return
            if stripped == NETSTAT_NO_OWNER:
                return
            if stripped.startswith("[") and stripped.endswith("]"):
                if files and not files[-1].command:
                    files[-1] = replace(files[-1], command=stripped[1:-1])
                return

            proto = stripped.split(None, 1)[0].lower()
            if not proto.startswith(("tcp", "udp")):
                self._logger.debug("netstat: skipping line \"%s\"", stripped)
                return

            files.append(unmarshal_netstat_line(line))

        scan_lines(data, _decode_line)
        return files
