"""
Process selector resolution for lsaddr.

A selector is turned into the regular expression used to pick lines out of
the listing tool output. On macOS a path to an ``.app`` bundle is resolved
to the identifiers of the processes running its executable.
"""

from __future__ import annotations

import logging
import os
import plistlib
import re
import sys
from typing import Callable, List, Optional
from xml.parsers.expat import ExpatError

import psutil

from lsaddr.errors import BundleError, PatternError

BUNDLE_SUFFIX = ".app"
BUNDLE_INFO = os.path.join("Contents", "Info.plist")
BUNDLE_EXECUTABLE_KEY = "CFBundleExecutable"


def read_bundle_executable(bundle_path: str) -> str:
    """
    Read the executable name of an application bundle.

    Args:
        bundle_path: Root directory of the bundle (".../Foo.app")

    Returns:
        Value of CFBundleExecutable in Contents/Info.plist

    Raises:
        BundleError: If Info.plist is missing, malformed or lacks the key
    """
    info = os.path.join(bundle_path, BUNDLE_INFO)
    try:
        with open(info, "rb") as f:
            plist = plistlib.load(f)
    except OSError as e:
        raise BundleError(f"unable to read {info}: {e}") from e
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        raise BundleError(f"malformed property list {info}: {e}") from e

    name = plist.get(BUNDLE_EXECUTABLE_KEY) if isinstance(plist, dict) else None
    if not isinstance(name, str) or not name:
        raise BundleError(f"{BUNDLE_EXECUTABLE_KEY} not found in {info}")
    return name


def find_pids(name: str) -> List[str]:
    """
    Find the identifiers of running processes whose name matches name.

    name is searched as a regular expression, as pgrep does, so helper
    processes such as "Spotify Helper" match "Spotify".

    Args:
        name: Process name pattern to look for

    Returns:
        PIDs as strings, in process table order (empty when name is not
        a valid regular expression)
    """
    try:
        rgx = re.compile(name)
    except re.error:
        return []

    pids: List[str] = []
    for proc in psutil.process_iter(attrs=["pid", "name"]):
        try:
            if rgx.search(proc.info.get("name") or ""):
                pids.append(str(proc.info["pid"]))
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return pids


class PatternResolver:
    """
    Resolves a selector into a regular expression source string.

    The base resolver uses the selector unchanged.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("lsaddr")

    def resolve(self, selector: str) -> str:
        return selector


class BundlePatternResolver(PatternResolver):
    """
    macOS resolver: maps an application bundle path to its process ids.

    Any failure while resolving the bundle is logged and the selector is
    returned unchanged.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        exists: Callable[[str], bool] = os.path.exists,
        read_executable: Callable[[str], str] = read_bundle_executable,
        pid_finder: Callable[[str], List[str]] = find_pids,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            logger: Destination for diagnostic messages
            exists: Filesystem existence check
            read_executable: Reads the executable name out of a bundle
            pid_finder: Maps a process name to running PIDs
        """
        super().__init__(logger)
        self._exists = exists
        self._read_executable = read_executable
        self._pid_finder = pid_finder

    def resolve(self, selector: str) -> str:
        if not self._exists(selector):
            return selector
        path = selector.rstrip("/")
        if not path.endswith(BUNDLE_SUFFIX):
            return selector

        try:
            name = self._read_executable(path)
        except BundleError as e:
            self._logger.info("unable to find app name: %s", e)
            return selector
        self._logger.info("app name: %s, path: %s", name, path)

        pids = self._pid_finder(name)
        if not pids:
            self._logger.info("no matching PIDs for %s", name)
            return selector

        return "|".join(pids)


def default_resolver(
    platform: Optional[str] = None,
    logger: Optional[logging.Logger] = None
) -> PatternResolver:
    """Pick the resolver for the host platform."""
    platform = platform or sys.platform
    if platform == "darwin":
        return BundlePatternResolver(logger)
    return PatternResolver(logger)


def build_pattern(selector: str, resolver: Optional[PatternResolver] = None) -> re.Pattern:
    """
    Compile the pattern used to select listing lines.

    Raises:
        PatternError: If the resolved expression is not a valid regex
    """
    resolver = resolver or default_resolver()
    expr = resolver.resolve(selector)
    try:
        return re.compile(expr)
    except re.error as e:
        raise PatternError(f"invalid selector \"{expr}\": {e}") from e
