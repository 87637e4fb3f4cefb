"""Async directory lister.

Enumerates directory contents with os.scandir in a worker thread so the
event loop never blocks on filesystem I/O. Concurrency is bounded by a
semaphore that is held only for the duration of the scan itself.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Set, Tuple, Union

from ...errors import EnumerationFailure

logger = logging.getLogger(__name__)


class DirectoryLister:
    """Lists the children of a directory, excluding the directory itself.

    Children are returned sorted by name so that enumeration order, and
    therefore the slot order of a built folder, is reproducible.
    """

    def __init__(self, max_concurrent: int = 100, follow_symlinks: bool = False):
        """Initialize lister with concurrency control.

        Args:
            max_concurrent: Maximum concurrent directory scans
            follow_symlinks: Whether symlinked entries are listed
        """
        self.max_concurrent = max_concurrent
        self.follow_symlinks = follow_symlinks
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self.scan_count = 0

    async def list(self, path: Union[str, Path], depth: int = 1) -> List[Path]:
        """List entries below a directory.

        Args:
            path: Directory to list
            depth: How many levels to descend (1 = immediate children)

        Returns:
            Paths of the entries found, never including path itself

        Raises:
            EnumerationFailure: If the directory cannot be read
        """
        return [child for child, _ in await self.list_entries(path, depth)]

    async def list_entries(
        self,
        path: Union[str, Path],
        depth: int = 1
    ) -> List[Tuple[Path, bool]]:
        """List entries below a directory along with their directory flag.

        Uses the cached type information from os.scandir, so callers do
        not need an extra stat call to tell folders from documents.

        Args:
            path: Directory to list
            depth: How many levels to descend (1 = immediate children)

        Returns:
            List of (path, is_directory) tuples

        Raises:
            EnumerationFailure: If any directory on the way cannot be read
        """
        if depth < 1:
            raise ValueError(f"depth must be at least 1, got {depth}")

        root = Path(path)
        async with self.semaphore:
            try:
                entries = await asyncio.to_thread(self._scan_sync, root, depth)
            except OSError as e:
                logger.warning("Failed to list directory '%s': %s", root, e)
                raise EnumerationFailure(
                    f"Failed to list directory '{root}': {e}", root
                ) from e
            self.scan_count += 1

        # Eliminate the root itself to avoid infinite recursion.
        return [(child, is_dir) for child, is_dir in entries if child != root]

    def _scan_sync(self, path: Path, depth: int) -> List[Tuple[Path, bool]]:
        """Synchronous scan to be run in a worker thread."""
        results = []
        with os.scandir(path) as iterator:
            entries = sorted(iterator, key=lambda entry: entry.name)

        for entry in entries:
            # Check symlink policy
            if not self.follow_symlinks and entry.is_symlink():
                continue

            is_dir = entry.is_dir(follow_symlinks=self.follow_symlinks)
            if not is_dir and not entry.is_file(follow_symlinks=self.follow_symlinks):
                # FIFOs, sockets and devices are neither folders nor documents
                logger.debug("Skipping special file '%s'", entry.path)
                continue

            if is_dir and entry.is_symlink() and self._links_to_ancestor(entry.path, path):
                logger.warning("Skipping symlink loop '%s'", entry.path)
                continue

            child = Path(entry.path)
            results.append((child, is_dir))

            if is_dir and depth > 1:
                results.extend(self._scan_sync(child, depth - 1))

        return results

    @staticmethod
    def _links_to_ancestor(link: str, parent: Path) -> bool:
        """Check whether a directory symlink resolves to parent or one of its ancestors."""
        target = os.stat(link)
        parent = parent.absolute()
        for ancestor in (parent, *parent.parents):
            info = os.stat(ancestor)
            if (info.st_dev, info.st_ino) == (target.st_dev, target.st_ino):
                return True
        return False

    def _define_capabilities(self) -> Set[str]:
        """Define lister capabilities.

        Returns:
            Set of capability names
        """
        return {
            'list',
            'list_entries',
            'depth',
            'symlinks',
        }

    def supports_capability(self, capability: str) -> bool:
        return capability in self._define_capabilities()

    async def get_stats(self) -> dict:
        """Get lister statistics.

        Returns:
            Statistics dictionary
        """
        return {
            'max_concurrent': self.max_concurrent,
            'follow_symlinks': self.follow_symlinks,
            'scan_count': self.scan_count,
        }
