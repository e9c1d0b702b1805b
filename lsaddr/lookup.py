"""
Open network file lookup.

Finds the network connections owned by the processes matching a selector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from lsaddr.addr import NetAddr
from lsaddr.filters import build_pattern
from lsaddr.runtime import Runtime, detect_runtime


@dataclass(frozen=True)
class NetFile:
    """A connection and the command owning it."""
    command: str
    src: NetAddr
    dst: Optional[NetAddr] = None

    @property
    def network(self) -> str:
        """Transport of the connection ("tcp" or "udp")."""
        return self.src.network


def _filter_lines(data: bytes, pattern) -> str:
    text = data.decode("utf-8", errors="replace")
    return "".join(
        line for line in text.splitlines(keepends=True)
        if pattern.search(line)
    )


def open_net_files(
    selector: str,
    runtime: Optional[Runtime] = None,
    logger: Optional[logging.Logger] = None
) -> List[NetFile]:
    """
    List the network files whose listing line matches selector.

    The selector is compiled into a regular expression, possibly after a
    platform specific rewrite (on macOS an ".app" bundle path becomes the
    PIDs of its running executable). Lines of the listing tool that do
    not match are discarded.

    Args:
        selector: Process name, PID expression or bundle path
        runtime: Platform collaborators (detected when None)
        logger: Destination for diagnostic messages

    Returns:
        Connections in listing order

    Raises:
        LsaddrError: If any stage fails; no partial result is returned
    """
    logger = logger or logging.getLogger("lsaddr")
    runtime = runtime or detect_runtime(logger=logger)

    pattern = build_pattern(selector, runtime.resolver)
    logger.debug("regexp built: \"%s\"", pattern.pattern)

    output = runtime.source.read()
    if runtime.prefilter:
        files = runtime.decoder.decode(_filter_lines(output, pattern))
    else:
        files = [f for f in runtime.decoder.decode(output) if pattern.search(f.text())]
    logger.debug("decoded %d open files", len(files))

    net_files = []
    for f in files:
        src, dst = f.unmarshal_name()
        net_files.append(NetFile(command=f.command, src=src, dst=dst))
    return net_files


def hosts(net_files: List[NetFile]) -> Tuple[List[NetAddr], List[Optional[NetAddr]]]:
    """Return the source and destination addresses of net_files."""
    src = [f.src for f in net_files]
    dst = [f.dst for f in net_files]
    return src, dst
