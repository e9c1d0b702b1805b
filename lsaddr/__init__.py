"""
lsaddr - List the network addresses owned by a process.

Decodes lsof (or netstat on Windows) output into typed connections and
emits them as a table, CSV or a packet filter expression ready for
tcpdump and wireshark.
"""

__version__ = "1.0.0"
__author__ = "lsaddr Contributors"
__license__ = "MIT"

from lsaddr.addr import NetAddr, parse_net_addr
from lsaddr.decoders import LsofDecoder, NetstatDecoder, OpenFile
from lsaddr.errors import LsaddrError
from lsaddr.export import BPFEncoder, CSVEncoder, ExportFormat
from lsaddr.lookup import NetFile, hosts, open_net_files

__all__ = [
    "NetAddr",
    "parse_net_addr",
    "OpenFile",
    "LsofDecoder",
    "NetstatDecoder",
    "LsaddrError",
    "BPFEncoder",
    "CSVEncoder",
    "ExportFormat",
    "NetFile",
    "hosts",
    "open_net_files",
    "__version__",
]
