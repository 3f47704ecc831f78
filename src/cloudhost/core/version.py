"""
Version utilities for the CLI.
 - Reads the packaged VERSION file
"""

from pathlib import Path

VERSION_FILE = Path(__file__).parent.parent / "VERSION"


def read_local_version() -> str:
    try:
        with open(VERSION_FILE, encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.0.0"
