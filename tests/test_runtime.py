"""
Unit tests for lsaddr platform runtime.
"""

import subprocess

import pytest

from lsaddr import runtime as runtime_module
from lsaddr.decoders import LsofDecoder, NetstatDecoder
from lsaddr.errors import CommandError
from lsaddr.filters import BundlePatternResolver
from lsaddr.runtime import LSOF_ARGS, NETSTAT_ARGS, CommandLineSource, detect_runtime


def fake_run(stdout=b"", stderr=b"", returncode=0, calls=None):
    """Build a subprocess.run replacement returning a fixed result."""
    def _run(args, **kwargs):
        if calls is not None:
            calls.append((args, kwargs))
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)
    return _run


class TestCommandLineSource:
    """Tests for CommandLineSource."""

    def test_returns_stdout(self, monkeypatch):
        """Test that the command output is returned as bytes."""
        calls = []
        monkeypatch.setattr(runtime_module.subprocess, "run", fake_run(b"a\nb\n", calls=calls))

        assert CommandLineSource(["lsof", "-i"]).read() == b"a\nb\n"
        assert calls[0][0] == ["lsof", "-i"]
        assert calls[0][1]["capture_output"] is True

    def test_skip_header(self, monkeypatch):
        """Test that the column header line is dropped."""
        out = b"COMMAND PID USER FD TYPE DEVICE SIZE/OFF NODE NAME\nrow1\nrow2\n"
        monkeypatch.setattr(runtime_module.subprocess, "run", fake_run(out))

        assert CommandLineSource(LSOF_ARGS, skip_header=True).read() == b"row1\nrow2\n"

    def test_non_zero_exit(self, monkeypatch):
        """Test that a failing command raises CommandError."""
        monkeypatch.setattr(
            runtime_module.subprocess, "run",
            fake_run(stderr=b"The requested operation requires elevation.", returncode=1)
        )

        with pytest.raises(CommandError) as exc_info:
            CommandLineSource(NETSTAT_ARGS).read()
        assert "requires elevation" in str(exc_info.value)

    def test_silent_failure_is_empty(self, monkeypatch):
        """Test that lsof exiting 1 with no output means no files."""
        monkeypatch.setattr(runtime_module.subprocess, "run", fake_run(returncode=1))

        assert CommandLineSource(LSOF_ARGS, skip_header=True).read() == b""

    def test_missing_binary(self):
        """Test that a missing executable raises CommandError."""
        with pytest.raises(CommandError):
            CommandLineSource(["lsaddr-no-such-binary-xyz"]).read()


class TestDetectRuntime:
    """Tests for detect_runtime."""

    def test_darwin(self):
        rt = detect_runtime("darwin")

        assert rt.source.args == list(LSOF_ARGS)
        assert rt.source.skip_header
        assert isinstance(rt.decoder, LsofDecoder)
        assert isinstance(rt.resolver, BundlePatternResolver)
        assert rt.prefilter

    def test_linux(self):
        rt = detect_runtime("linux")

        assert isinstance(rt.decoder, LsofDecoder)
        assert not isinstance(rt.resolver, BundlePatternResolver)

    def test_windows(self):
        rt = detect_runtime("win32")

        assert rt.source.args == list(NETSTAT_ARGS)
        assert isinstance(rt.decoder, NetstatDecoder)
        assert not rt.prefilter
