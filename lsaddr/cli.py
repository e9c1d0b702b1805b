"""
Command-line interface for lsaddr.

Parses command-line arguments, runs the lookup and writes the
connections in the requested format.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich.logging import RichHandler

from lsaddr import __version__
from lsaddr.display import Display
from lsaddr.errors import LsaddrError
from lsaddr.export import ExportFormat, detect_format, get_encoder
from lsaddr.lookup import open_net_files


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="lsaddr",
        description="List the network addresses a process is talking to. "
                    "SELECTOR is a regular expression matched against lsof "
                    "(netstat on Windows) output lines, e.g. a process name "
                    "or PID; on macOS it may also be the path to an .app bundle.",
        epilog="Example: sudo tcpdump -i en0 \"$(lsaddr Spotify -o bpf)\"",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "selector",
        nargs="?",
        default=".",
        help="Process selector (default: every connection)"
    )

    # Output options
    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument(
        "-o", "--output",
        choices=[f.value for f in ExportFormat],
        metavar="FMT",
        help="Output format: csv, bpf or table (default: table, or "
             "detected from --out-file extension)"
    )
    output_group.add_argument(
        "--out-file",
        metavar="FILE",
        help="Write output to FILE instead of stdout"
    )
    output_group.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    # Other options
    other_group = parser.add_argument_group("Other Options")
    other_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output"
    )
    other_group.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def setup_logging(verbose: bool, display: Display) -> logging.Logger:
    """Route lsaddr diagnostics to stderr through rich."""
    logger = logging.getLogger("lsaddr")
    logger.handlers.clear()
    logger.addHandler(RichHandler(console=display.err_console, show_time=False, show_path=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
    return logger


def resolve_format(output: Optional[str], out_file: Optional[str]) -> ExportFormat:
    """
    Pick the output format from the flags.

    Raises:
        ValueError: If the format cannot be determined from out_file
    """
    if output:
        return ExportFormat(output)
    if out_file:
        return detect_format(out_file)
    return ExportFormat.TABLE


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for lsaddr CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    display = Display(use_color=not args.no_color)
    logger = setup_logging(args.verbose, display)

    try:
        fmt = resolve_format(args.output, args.out_file)
    except ValueError as e:
        display.print_error(str(e))
        return 1

    try:
        net_files = open_net_files(args.selector, logger=logger)
    except LsaddrError as e:
        display.print_error(str(e))
        return 1
    except KeyboardInterrupt:
        return 130

    if fmt == ExportFormat.TABLE and not args.out_file:
        display.print_table(net_files)
        return 0

    try:
        if args.out_file:
            with open(args.out_file, "w", newline="", encoding="utf-8") as f:
                _write(fmt, f, net_files)
            display.print_info(f"Exported to: {args.out_file}")
        else:
            _write(fmt, sys.stdout, net_files)
    except OSError as e:
        display.print_error(f"Unable to write output: {e}")
        return 1

    return 0


def _write(fmt: ExportFormat, stream, net_files) -> None:
    if fmt == ExportFormat.TABLE:
        Display(use_color=False, file=stream).print_table(net_files)
    else:
        get_encoder(fmt, stream).encode(net_files)


if __name__ == "__main__":
    sys.exit(main())
