"""
Platform runtime for lsaddr.

Bundles together the command producing the connection listing, the
decoder understanding its output and the selector resolver for the
host platform.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Union

from lsaddr.decoders import LsofDecoder, NetstatDecoder
from lsaddr.errors import CommandError
from lsaddr.filters import PatternResolver, default_resolver

LSOF_ARGS = ("lsof", "-i", "-n", "-P")
NETSTAT_ARGS = ("netstat", "-nao", "-b")

Decoder = Union[LsofDecoder, NetstatDecoder]


class LineSource(Protocol):
    """Produces the raw listing text."""

    def read(self) -> bytes:
        ...


class CommandLineSource:
    """
    Runs an external command and returns its standard output.

    The command blocks until it exits; its whole output is buffered.
    """

    def __init__(self, args: Sequence[str], skip_header: bool = False) -> None:
        """
        Initialize the line source.

        Args:
            args: Command and arguments to execute
            skip_header: Drop the first output line (column titles)
        """
        self.args: List[str] = list(args)
        self.skip_header = skip_header

    def read(self) -> bytes:
        """
        Run the command.

        Raises:
            CommandError: If the command is missing or exits non-zero
        """
        try:
            result = subprocess.run(self.args, capture_output=True)
        except OSError as e:
            raise CommandError(f"unable to run {self.args[0]}: {e}") from e

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            # lsof exits 1 without output when nothing is open
            if not result.stdout and not stderr:
                return b""
            raise CommandError(
                f"{' '.join(self.args)} exited with status {result.returncode}: {stderr}"
            )

        output = result.stdout
        if self.skip_header:
            _, _, output = output.partition(b"\n")
        return output


@dataclass
class Runtime:
    """Per-platform lookup collaborators."""
    source: LineSource
    decoder: Decoder
    resolver: PatternResolver
    prefilter: bool = True


def detect_runtime(
    platform: Optional[str] = None,
    logger: Optional[logging.Logger] = None
) -> Runtime:
    """
    Build the runtime for the given platform (defaults to sys.platform).

    netstat annotation lines belong to the data row above them, so the
    Windows runtime filters decoded records instead of raw lines.
    """
    platform = platform or sys.platform

    if platform == "win32":
        return Runtime(
            source=CommandLineSource(NETSTAT_ARGS),
            decoder=NetstatDecoder(logger),
            resolver=PatternResolver(logger),
            prefilter=False,
        )

    return Runtime(
        source=CommandLineSource(LSOF_ARGS, skip_header=True),
        decoder=LsofDecoder(logger),
        resolver=default_resolver(platform, logger),
    )
