"""
Text helpers shared by the output decoders.
"""

from __future__ import annotations

import io
from typing import Callable, IO, List, Optional, Union

from lsaddr.errors import ChunkError

TextInput = Union[bytes, str, IO[bytes], IO[str]]


def chunk_line(line: str, sep: Optional[str] = None, min_fields: int = 0) -> List[str]:
    """
    Split a line into its non-empty fields.

    Args:
        line: Raw line of tool output
        sep: Field separator (None splits on any run of whitespace)
        min_fields: Minimum number of fields the line must contain

    Returns:
        List of non-empty fields

    Raises:
        ChunkError: If fewer than min_fields fields survive
    """
    chunks = [v for v in line.split(sep) if v]
    if len(chunks) < min_fields:
        raise ChunkError(min_fields, len(chunks), line)
    return chunks


def _as_text(data: TextInput) -> str:
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        return data
    content = data.read()
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content


def scan_lines(data: TextInput, callback: Callable[[str], None]) -> None:
    """
    Call callback once per line of data with terminators removed.

    Scanning stops at the first exception raised by callback, which
    propagates to the caller.
    """
    for line in io.StringIO(_as_text(data), newline=None):
        callback(line.rstrip("\r\n"))
