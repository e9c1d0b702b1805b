#!/usr/bin/env python
"""
lsaddr - List the network addresses owned by a process

Usage:
    python run_lsaddr.py [SELECTOR] [OPTIONS]

Examples:
    python run_lsaddr.py Spotify
    python run_lsaddr.py /Applications/Spotify.app -o bpf
    python run_lsaddr.py "postgres|redis" -o csv --out-file conns.csv

Requirements:
    - Python 3.9+
    - lsof (macOS, Linux) or netstat (Windows)
    - pip install -e .
"""

import sys

from lsaddr.cli import main

if __name__ == "__main__":
    sys.exit(main())
