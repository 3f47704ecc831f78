"""
File Cache
----------
Small JSON document cache used for project and environment listings.
Entries older than the TTL are treated as absent.
"""

import json
import re
import time
from pathlib import Path
from typing import Any, Optional

import cloudhost.core.logger as logger


class FileCache:
    def __init__(self, directory: Path, ttl: float = 600.0):
        self.directory = Path(directory)
        self.ttl = ttl

    def _path(self, key: str) -> Path:
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self.directory / f"{safe}.json"

    def get(self, key: str) -> Optional[Any]:
        path = self._path(key)
        try:
            with open(path, encoding="utf-8") as f:
                entry = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.log(f"Ignoring unreadable cache entry {path}: {exc}", style="yellow", verbose_only=True)
            return None
        if not isinstance(entry, dict):
            logger.log(f"Ignoring malformed cache entry {path}", style="yellow", verbose_only=True)
            return None
        if self.ttl is not None and time.time() - entry.get("stored_at", 0) > self.ttl:
            return None
        return entry.get("value")

    def set(self, key: str, value: Any):
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"stored_at": time.time(), "value": value}, f)
        except OSError as exc:
            # Cache writes are best-effort.
            logger.log(f"Could not write cache entry {path}: {exc}", style="yellow", verbose_only=True)

    def delete(self, key: str):
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            pass
