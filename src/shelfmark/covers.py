"""Two-tier cover image cache.

Memory tier: insertion-ordered, bounded, evicts the oldest inserted entry.
Disk tier: one ``<identifier>.jpg`` file per book, never evicted.

Lookups check memory first, then disk (promoting hits into memory). Writes go
to both tiers. The memory tier is guarded by a lock so one cache can back
concurrent resolver calls.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from pathlib import Path

import httpx

from shelfmark.identifiers import normalize_identifier
from shelfmark.paths import covers_dir

logger = logging.getLogger(__name__)

DEFAULT_MEMORY_CAPACITY = 50
COVER_SUFFIX = ".jpg"


class CoverCache:
    """Cover bytes keyed by normalized identifier.

    Args:
        directory: Disk tier location (default: platformdirs cache / covers)
        memory_capacity: Max entries kept in memory
    """

    def __init__(
        self,
        directory: Path | str | None = None,
        memory_capacity: int = DEFAULT_MEMORY_CAPACITY,
    ) -> None:
        if memory_capacity < 1:
            raise ValueError("memory_capacity must be >= 1")
        self.directory = Path(directory) if directory is not None else covers_dir()
        self.memory_capacity = memory_capacity
        self._memory: OrderedDict[str, bytes] = OrderedDict()
        self._lock = threading.Lock()

    def _path(self, identifier: str) -> Path:
        return self.directory / f"{identifier}{COVER_SUFFIX}"

    def _remember(self, key: str, data: bytes) -> None:
        with self._lock:
            if key not in self._memory and len(self._memory) >= self.memory_capacity:
                evicted, _ = self._memory.popitem(last=False)
                logger.debug("Evicted cover %s from memory", evicted)
            self._memory[key] = data

    def get(self, identifier: str) -> bytes | None:
        """Cached bytes for ``identifier``, or None."""
        key = normalize_identifier(identifier)
        if not key:
            return None

        with self._lock:
            data = self._memory.get(key)
        if data is not None:
            return data

        path = self._path(key)
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Cannot read cached cover %s: %s", path, e)
            return None

        self._remember(key, data)
        return data

    def put(self, identifier: str, data: bytes) -> None:
        """Store cover bytes in both tiers. Disk write failures are logged."""
        key = normalize_identifier(identifier)
        if not key:
            return
        self._remember(key, data)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self._path(key).write_bytes(data)
        except OSError as e:
            logger.warning("Cannot write cover for %s: %s", key, e)

    def clear(self) -> int:
        """Drop both tiers. Returns the number of files removed from disk."""
        with self._lock:
            self._memory.clear()

        removed = 0
        if not self.directory.is_dir():
            return removed
        for path in self.directory.glob(f"*{COVER_SUFFIX}"):
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning("Cannot remove %s: %s", path, e)
        logger.info("Cleared %d cached covers", removed)
        return removed

    def size_bytes(self) -> int:
        """Total size of the disk tier."""
        if not self.directory.is_dir():
            return 0
        return sum(p.stat().st_size for p in self.directory.glob(f"*{COVER_SUFFIX}") if p.is_file())

    def __len__(self) -> int:
        with self._lock:
            return len(self._memory)

    def __contains__(self, identifier: object) -> bool:
        if not isinstance(identifier, str):
            return False
        key = normalize_identifier(identifier)
        with self._lock:
            return key in self._memory


def fetch_cover(
    url: str,
    *,
    timeout: float = 15.0,
    transport: httpx.BaseTransport | None = None,
) -> bytes | None:
    """Download cover bytes. Anything but a 200 with a body gives None."""
    try:
        if transport is not None:
            client = httpx.Client(timeout=timeout, transport=transport, follow_redirects=True)
        else:
            client = httpx.Client(timeout=timeout, follow_redirects=True)
        with client:
            response = client.get(url)
    except httpx.HTTPError as e:
        logger.warning("Cover download failed for %s: %s", url, e)
        return None

    if response.status_code != 200 or not response.content:
        logger.debug("Cover download for %s returned %s", url, response.status_code)
        return None
    return response.content
