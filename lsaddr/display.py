"""
Display module for lsaddr.

Renders connection lists and status messages on the terminal with rich.
"""

from __future__ import annotations

from typing import Iterable, Optional, TextIO, TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from lsaddr.addr import NetAddr
    from lsaddr.lookup import NetFile


# Color scheme for networks
NETWORK_COLORS = {
    "tcp": "cyan",
    "udp": "green",
}


class Display:
    """
    Rich terminal display for lsaddr.

    Prints the connection table on stdout and messages on stderr.
    """

    def __init__(
        self,
        use_color: bool = True,
        file: Optional[TextIO] = None,
        err_file: Optional[TextIO] = None
    ) -> None:
        """
        Initialize the display.

        Args:
            use_color: Whether to use colored output
            file: Stream for the connection table (stdout by default)
            err_file: Stream for messages (stderr by default)
        """
        color_system = "auto" if use_color else None
        self._console = Console(file=file, color_system=color_system)
        self._err_console = Console(file=err_file, stderr=err_file is None, color_system=color_system)

    @property
    def console(self) -> Console:
        """Get the Rich console instance."""
        return self._console

    @property
    def err_console(self) -> Console:
        """Get the Rich console used for messages."""
        return self._err_console

    def format_network(self, network: str) -> Text:
        """Format network with color."""
        color = NETWORK_COLORS.get(network, "white")
        return Text(network.upper(), style=color)

    def format_addr(self, addr: Optional["NetAddr"]) -> Text:
        """Format an address, dimming missing destinations."""
        if addr is None:
            return Text("-", style="dim")
        return Text(str(addr))

    def print_table(self, net_files: Iterable["NetFile"]) -> None:
        """
        Print connections as a table.

        Args:
            net_files: Connections to print
        """
        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 1))
        table.add_column("Command", style="bright_white")
        table.add_column("Net", width=4)
        table.add_column("Source")
        table.add_column("Destination")

        for f in net_files:
            table.add_row(
                Text(f.command or "unknown", style="" if f.command else "dim italic"),
                self.format_network(f.network),
                self.format_addr(f.src),
                self.format_addr(f.dst),
            )

        self._console.print(table)

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self._err_console.print(f"[bold red]Error:[/] {escape(message)}", highlight=False)

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self._err_console.print(f"[bold blue]Info:[/] {escape(message)}", highlight=False)
