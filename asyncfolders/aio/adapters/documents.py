"""Async document loader.

Creates finalized Document entries from file paths. File content is read
in a worker thread and, optionally, kept in a TTL cache keyed by the
file's modification stamp so that rebuilding an unchanged tree does not
read every file again.
"""

import asyncio
import logging
import os
import stat
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Union

from cachetools import TTLCache

from ...core.entry import Document
from ...errors import LeafConstructionFailure

logger = logging.getLogger(__name__)

# (path, st_mtime_ns, st_size)
CacheKey = Tuple[str, int, int]


class DocumentLoader:
    """Leaf constructor producing Document entries.

    Example:
        loader = DocumentLoader(cache_size=5000, cache_ttl=60.0)
        document = await loader.from_path(Path('notes.txt'))
        print(len(document.content))
    """

    def __init__(
        self,
        max_concurrent: int = 100,
        cache_size: int = 1024,
        cache_ttl: float = 300.0
    ):
        """Initialize document loader.

        Args:
            max_concurrent: Maximum concurrent file reads
            cache_size: Maximum number of cached contents (0 disables caching)
            cache_ttl: Time-to-live for cached contents in seconds
        """
        self.max_concurrent = max_concurrent
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self._cache: Optional[TTLCache] = (
            TTLCache(maxsize=cache_size, ttl=cache_ttl) if cache_size > 0 else None
        )

        # Statistics
        self.cache_hits = 0
        self.cache_misses = 0
        self.documents_loaded = 0

    async def from_path(
        self,
        path: Union[str, Path],
        on_ready: Optional[Callable[[Document], Any]] = None
    ) -> Document:
        """Create a document from a file path.

        Args:
            path: Path of the file
            on_ready: Callback invoked once with the finished document

        Returns:
            Finalized Document

        Raises:
            LeafConstructionFailure: If the file cannot be read or is not a
                regular file
        """
        path = Path(path)

        async with self.semaphore:
            try:
                content = await self._load_content(path)
            except OSError as e:
                logger.warning("Failed to load document '%s': %s", path, e)
                raise LeafConstructionFailure(
                    f"Failed to load document '{path}': {e}", path
                ) from e

        document = Document(path, content)
        self.documents_loaded += 1

        if on_ready is not None:
            on_ready(document)

        return document

    async def _load_content(self, path: Path) -> bytes:
        """Read file content, consulting the cache first."""
        info = await asyncio.to_thread(os.stat, path)
        if not stat.S_ISREG(info.st_mode):
            # Reading a FIFO or device could block forever
            logger.warning("Refusing to load special file '%s'", path)
            raise LeafConstructionFailure(f"Not a regular file: '{path}'", path)

        if self._cache is None:
            self.cache_misses += 1
            return await asyncio.to_thread(path.read_bytes)

        key: CacheKey = (str(path), info.st_mtime_ns, info.st_size)

        content = self._cache.get(key)
        if content is not None:
            self.cache_hits += 1
            return content

        self.cache_misses += 1
        content = await asyncio.to_thread(path.read_bytes)
        self._cache[key] = content
        return content

    def clear_cache(self):
        """Drop all cached contents."""
        if self._cache is not None:
            self._cache.clear()

    async def get_stats(self) -> dict:
        """Get loader statistics.

        Returns:
            Statistics dictionary
        """
        return {
            'max_concurrent': self.max_concurrent,
            'documents_loaded': self.documents_loaded,
            'cache_enabled': self._cache is not None,
            'cache_size': len(self._cache) if self._cache is not None else 0,
            'cache_hits': self.cache_hits,
            'cache_misses': self.cache_misses,
        }
