"""
Unit tests for lsaddr export module.
"""

import csv
import io

import pytest

from lsaddr.addr import NetAddr
from lsaddr.export import (
    BPFEncoder,
    CSVEncoder,
    ExportFormat,
    dedup_addrs,
    detect_format,
    get_encoder,
)
from lsaddr.lookup import NetFile

LOCAL = NetAddr("tcp", "192.168.0.61", 54104)
LOOPBACK6 = NetAddr("udp", "::1", 60051)


@pytest.fixture
def net_files():
    """Two connections sharing one address."""
    return [
        NetFile(command="Spotify", src=LOCAL, dst=LOOPBACK6),
        NetFile(command="postgres", src=LOOPBACK6, dst=LOOPBACK6),
    ]


class TestBPFEncoder:
    """Tests for BPFEncoder."""

    def test_encode(self, net_files):
        """Test that each address appears once in first-seen order."""
        out = io.StringIO()
        BPFEncoder(out).encode(net_files)

        assert out.getvalue() == "host 192.168.0.61 and port 54104 or host ::1 and port 60051\n"

    def test_skips_missing_destination(self):
        """Test that listening sockets contribute only their source."""
        out = io.StringIO()
        BPFEncoder(out).encode([NetFile(command="postgres", src=LOCAL)])

        assert out.getvalue() == "host 192.168.0.61 and port 54104\n"

    def test_empty(self):
        out = io.StringIO()
        BPFEncoder(out).encode([])
        assert out.getvalue() == "\n"


class TestDedupAddrs:
    """Tests for dedup_addrs."""

    def test_order_preserved(self, net_files):
        assert dedup_addrs(net_files) == [LOCAL, LOOPBACK6]

    def test_dedup_by_string_form(self):
        """Test that addresses equal as host:port are merged across networks."""
        tcp = NetAddr("tcp", "10.0.0.1", 53)
        udp = NetAddr("udp", "10.0.0.1", 53)
        assert dedup_addrs([NetFile("a", tcp), NetFile("b", udp)]) == [tcp]


class TestCSVEncoder:
    """Tests for CSVEncoder."""

    def test_encode(self, net_files):
        """Test header and one row per connection."""
        out = io.StringIO()
        CSVEncoder(out).encode(net_files)

        assert out.getvalue().splitlines() == [
            "command,src,dst",
            "Spotify,192.168.0.61:54104,[::1]:60051",
            "postgres,[::1]:60051,[::1]:60051",
        ]

    def test_missing_destination_is_empty(self):
        out = io.StringIO()
        CSVEncoder(out).encode([NetFile(command="postgres", src=LOCAL)])

        rows = list(csv.reader(io.StringIO(out.getvalue())))
        assert rows[1] == ["postgres", "192.168.0.61:54104", ""]

    def test_quotes_commas(self):
        """Test that command names with commas survive a CSV round trip."""
        out = io.StringIO()
        CSVEncoder(out).encode([NetFile(command="a,b", src=LOCAL)])

        rows = list(csv.DictReader(io.StringIO(out.getvalue())))
        assert rows[0]["command"] == "a,b"


class TestFormats:
    """Tests for format helpers."""

    @pytest.mark.parametrize("filename,expected", [
        ("out.csv", ExportFormat.CSV),
        ("OUT.CSV", ExportFormat.CSV),
        ("filter.bpf", ExportFormat.BPF),
    ])
    def test_detect_format(self, filename, expected):
        assert detect_format(filename) == expected

    def test_detect_format_unknown(self):
        with pytest.raises(ValueError):
            detect_format("out.txt")

    def test_get_encoder(self):
        out = io.StringIO()
        assert isinstance(get_encoder(ExportFormat.CSV, out), CSVEncoder)
        assert isinstance(get_encoder(ExportFormat.BPF, out), BPFEncoder)
        with pytest.raises(ValueError):
            get_encoder(ExportFormat.TABLE, out)
