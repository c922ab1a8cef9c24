"""Cached asynchronous filesystem used by the resolver.

Blocking calls run in a worker thread via ``asyncio.to_thread``; results
(including misses) are cached per path for ``ttl`` seconds. One instance is
meant to live for a single trace.
"""

import asyncio
import json
import logging
import os
import stat
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

_MISSING = object()


class CachedFileSystem:
    """Stat/read cache keyed by path with a time-to-live."""

    def __init__(self, ttl: float = 4.0):
        self.ttl = ttl
        self._stats: dict[str, tuple[float, os.stat_result | None]] = {}
        self._json: dict[str, tuple[float, Any]] = {}
        self._realpaths: dict[str, tuple[float, str]] = {}

    def _get(self, cache: dict, key: str) -> Any:
        entry = cache.get(key)
        if entry is None:
            return _MISSING
        stored_at, value = entry
        if time.monotonic() - stored_at > self.ttl:
            del cache[key]
            return _MISSING
        return value

    def _put(self, cache: dict, key: str, value: Any) -> None:
        if self.ttl > 0:
            cache[key] = (time.monotonic(), value)

    async def stat(self, path: Path | str) -> os.stat_result | None:
        """Return stat result for path, or None if it does not exist."""
        key = str(path)
        cached = self._get(self._stats, key)
        if cached is not _MISSING:
            return cached

        try:
            result = await asyncio.to_thread(os.stat, key)
        except OSError:
            result = None
        self._put(self._stats, key, result)
        return result

    async def is_file(self, path: Path | str) -> bool:
        result = await self.stat(path)
        return result is not None and stat.S_ISREG(result.st_mode)

    async def is_dir(self, path: Path | str) -> bool:
        result = await self.stat(path)
        return result is not None and stat.S_ISDIR(result.st_mode)

    async def realpath(self, path: Path | str) -> Path:
        """Resolve symlinks, cached like stat results."""
        key = str(path)
        cached = self._get(self._realpaths, key)
        if cached is not _MISSING:
            return Path(cached)

        result = await asyncio.to_thread(os.path.realpath, key)
        self._put(self._realpaths, key, result)
        return Path(result)

    async def read_json(self, path: Path | str) -> Any:
        """Read and parse a JSON file.

        Raises:
            OSError: File could not be read
            ValueError: File is not valid JSON
        """
        key = str(path)
        cached = self._get(self._json, key)
        if cached is not _MISSING:
            return cached

        text = await asyncio.to_thread(Path(key).read_text, encoding="utf-8")
        data = json.loads(text)
        self._put(self._json, key, data)
        return data

    def purge(self) -> None:
        """Drop every cached entry."""
        self._stats.clear()
        self._json.clear()
        self._realpaths.clear()
        logger.debug("[fs] cache purged")
