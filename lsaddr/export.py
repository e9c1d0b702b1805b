"""
Export module for lsaddr.

Serializes connection lists as CSV or as a packet filter (BPF) expression
suitable for tcpdump/wireshark capture filters.
"""

from __future__ import annotations

import csv
import os
from enum import Enum
from typing import Iterable, List, Optional, TextIO, TYPE_CHECKING

if TYPE_CHECKING:
    from lsaddr.addr import NetAddr
    from lsaddr.lookup import NetFile


class ExportFormat(Enum):
    """Supported output formats."""
    CSV = "csv"
    BPF = "bpf"
    TABLE = "table"


def detect_format(filename: str) -> ExportFormat:
    """
    Detect export format from filename extension.

    Args:
        filename: Output filename

    Returns:
        Detected ExportFormat

    Raises:
        ValueError: If format cannot be determined
    """
    ext = os.path.splitext(filename)[1].lower()

    if ext == ".csv":
        return ExportFormat.CSV
    elif ext == ".bpf":
        return ExportFormat.BPF
    else:
        raise ValueError(
            f"Cannot determine output format from extension '{ext}'. "
            "Use --output to specify csv or bpf."
        )


def _addr_str(addr: Optional["NetAddr"]) -> str:
    return str(addr) if addr is not None else ""


class CSVEncoder:
    """Writes one row per connection: command, source, destination."""

    CSV_HEADERS = ["command", "src", "dst"]

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def encode(self, net_files: Iterable["NetFile"]) -> None:
        writer = csv.writer(self._stream, lineterminator="\n")
        writer.writerow(self.CSV_HEADERS)
        for f in net_files:
            writer.writerow([f.command, _addr_str(f.src), _addr_str(f.dst)])


def dedup_addrs(net_files: Iterable["NetFile"]) -> List["NetAddr"]:
    """
    Collect the source and destination addresses of net_files.

    Duplicates (same "host:port") are dropped, first appearance order is
    kept and missing destinations are skipped.
    """
    seen = set()
    addrs: List["NetAddr"] = []
    for f in net_files:
        for addr in (f.src, f.dst):
            if addr is None:
                continue
            key = str(addr)
            if key in seen:
                continue
            seen.add(key)
            addrs.append(addr)
    return addrs


class BPFEncoder:
    """
    Writes a single packet filter expression matching every address.

    Example output:
        host 192.168.0.61 and port 54104 or host ::1 and port 60051
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    def encode(self, net_files: Iterable["NetFile"]) -> None:
        terms = [
            f"host {addr.host} and port {addr.port}"
            for addr in dedup_addrs(net_files)
        ]
        self._stream.write(" or ".join(terms))
        self._stream.write("\n")


def get_encoder(fmt: ExportFormat, stream: TextIO):
    """
    Return the encoder writing fmt to stream.

    Raises:
        ValueError: If fmt has no text encoder (e.g. TABLE)
    """
    if fmt == ExportFormat.CSV:
        return CSVEncoder(stream)
    elif fmt == ExportFormat.BPF:
        return BPFEncoder(stream)
    raise ValueError(f"No encoder for format '{fmt.value}'")
