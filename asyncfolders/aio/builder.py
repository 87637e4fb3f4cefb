"""Async folder builder.

Builds an immutable Folder tree from a directory path. Each directory
level is listed once; every child becomes a pending entry (a recursive
folder build or a document load) staged in a PendingFolder, and the
folder is finalized only after a join on that level's own children.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple, Union

from ..config import FolderConfig
from ..core.entry import Document, Entry, Folder
from ..core.visitor import as_callback
from ..errors import FolderError, JoinFailure
from .adapters import DirectoryLister, DocumentLoader

logger = logging.getLogger(__name__)


class PendingFolder:
    """Builder-only staging area for a folder under construction.

    Holds one pending entry per enumerated child, in enumeration order,
    split into subfolders and documents. When the folder is built in
    parallel each pending entry is a running task; otherwise it is an
    un-started coroutine awaited in order at the join. Once joined, the
    staging area is spent and cannot be added to or merged again.
    """

    def __init__(self, parallel: bool = True):
        self.parallel = parallel
        self._subfolders: List[Awaitable[Entry]] = []
        self._documents: List[Awaitable[Entry]] = []
        self._joined = False

    def add_subfolder(self, pending: Awaitable[Entry]):
        """Stage a pending subfolder build."""
        self._check_open()
        self._subfolders.append(self._schedule(pending))

    def add_document(self, pending: Awaitable[Entry]):
        """Stage a pending document load."""
        self._check_open()
        self._documents.append(self._schedule(pending))

    def merge(self, other: 'PendingFolder') -> 'PendingFolder':
        """Append the pending entries of another staging area to this one.

        Args:
            other: Staging area gathered from another enumeration batch.
                It is spent afterwards.

        Returns:
            This staging area
        """
        self._check_open()
        other._check_open()
        self._subfolders.extend(other._subfolders)
        self._documents.extend(other._documents)
        other._subfolders = []
        other._documents = []
        other._joined = True
        return self

    async def join(self, path: Union[str, Path]) -> Folder:
        """Wait for every staged entry and build the finalized folder.

        Only this level's entries are awaited; each pending subfolder has
        already joined its own children by the time it resolves.

        Args:
            path: Path of the folder being finalized

        Returns:
            Finalized Folder with children in enumeration order

        Raises:
            JoinFailure: If any child failed to build
        """
        self._check_open()
        self._joined = True

        pending = self._subfolders + self._documents
        subfolder_count = len(self._subfolders)
        self._subfolders = []
        self._documents = []

        try:
            if self.parallel:
                results = await asyncio.gather(*pending)
            else:
                results = await self._join_in_order(pending)
        except JoinFailure:
            raise
        except FolderError as e:
            raise JoinFailure(path, e) from e

        return Folder(path, results[:subfolder_count], results[subfolder_count:])

    @staticmethod
    async def _join_in_order(pending: List[Awaitable[Entry]]) -> List[Entry]:
        results = []
        for index, awaitable in enumerate(pending):
            try:
                # A task per child keeps the stack flat on deep trees.
                results.append(await asyncio.ensure_future(awaitable))
            except BaseException:
                # Never-started coroutines would otherwise warn at GC.
                for remaining in pending[index + 1:]:
                    if asyncio.iscoroutine(remaining):
                        remaining.close()
                raise
        return results

    def _schedule(self, pending: Awaitable[Entry]) -> Awaitable[Entry]:
        if self.parallel:
            return asyncio.ensure_future(pending)
        return pending

    def _check_open(self):
        if self._joined:
            raise RuntimeError("PendingFolder has already been joined")

    def __len__(self) -> int:
        return len(self._subfolders) + len(self._documents)


class FolderBuilder:
    """Recursively builds Folder trees with asyncio fan-out/fan-in.

    Example:
        builder = FolderBuilder(FolderConfig(max_concurrent=50))
        folder = await builder.build_from_path(Path('/data'))
        print(folder.size)
    """

    def __init__(
        self,
        config: Optional[FolderConfig] = None,
        lister: Optional[DirectoryLister] = None,
        loader: Optional[DocumentLoader] = None
    ):
        """Initialize builder.

        Args:
            config: Construction settings (defaults to FolderConfig())
            lister: Directory lister (created from config if None)
            loader: Document loader (created from config if None)
        """
        self.config = config or FolderConfig()
        self.lister = lister or DirectoryLister(
            max_concurrent=self.config.max_concurrent,
            follow_symlinks=self.config.follow_symlinks
        )
        self.loader = loader or DocumentLoader(
            max_concurrent=self.config.max_concurrent,
            cache_size=self.config.document_cache_size,
            cache_ttl=self.config.document_cache_ttl
        )

    async def build_from_path(
        self,
        root_path: Union[str, Path],
        visitor: Any = None,
        parallel: Optional[bool] = None
    ) -> Entry:
        """Build a finalized folder for a directory.

        Args:
            root_path: Directory to build from
            visitor: EntryVisitor or callable invoked once per finished entry
            parallel: Build children concurrently (defaults to config.parallel)

        Returns:
            Finalized Folder

        Raises:
            EnumerationFailure: If root_path itself cannot be listed
            JoinFailure: If anything below root_path fails
        """
        root = Path(root_path)
        if parallel is None:
            parallel = self.config.parallel
        callback = as_callback(visitor)

        started = time.perf_counter()
        logger.debug("Building folder '%s' (parallel=%s)", root, parallel)

        folder = await self._build_folder(root, callback, parallel)

        logger.debug(
            "Built folder '%s' with %d entries in %.3fs",
            root, folder.size, time.perf_counter() - started
        )
        return folder

    async def _build_folder(
        self,
        path: Path,
        callback: Optional[Callable[[Entry], Any]],
        parallel: bool
    ) -> Folder:
        children = await self.lister.list_entries(path)
        pending = self._stage(children, callback, parallel)
        folder = await pending.join(path)

        if self.config.verbose:
            logger.debug(
                "Folder '%s' ready: %d subfolders, %d documents, size %d",
                path, len(folder.subfolders), len(folder.documents), folder.size
            )

        if callback is not None:
            callback(folder)

        return folder

    async def _load_document(
        self,
        path: Path,
        callback: Optional[Callable[[Entry], Any]]
    ) -> Document:
        document = await self.loader.from_path(path, on_ready=callback)
        if self.config.verbose:
            logger.debug("Document '%s' ready", path)
        return document

    def _stage(
        self,
        children: Sequence[Tuple[Path, bool]],
        callback: Optional[Callable[[Entry], Any]],
        parallel: bool
    ) -> PendingFolder:
        """Stage all children of one directory level.

        In parallel mode the enumeration is staged in batches which are
        merged back, in order, before the join.
        """
        if not parallel:
            return self._stage_batch(children, callback, parallel)

        step = self.config.enumeration_batch_size
        pending = PendingFolder(parallel)
        for start in range(0, len(children), step):
            pending.merge(self._stage_batch(children[start:start + step], callback, parallel))
        return pending

    def _stage_batch(
        self,
        children: Sequence[Tuple[Path, bool]],
        callback: Optional[Callable[[Entry], Any]],
        parallel: bool
    ) -> PendingFolder:
        pending = PendingFolder(parallel)
        for child, is_dir in children:
            if is_dir:
                pending.add_subfolder(self._build_folder(child, callback, parallel))
            else:
                pending.add_document(self._load_document(child, callback))
        return pending


async def build_from_path(
    path: Union[str, Path],
    visitor: Any = None,
    parallel: Optional[bool] = None,
    config: Optional[FolderConfig] = None
) -> Entry:
    """Build a finalized folder tree for a directory.

    Args:
        path: Directory to build from
        visitor: EntryVisitor or callable invoked once per finished entry
        parallel: Build children concurrently (defaults to config.parallel)
        config: Optional FolderConfig

    Returns:
        Finalized Folder
    """
    builder = FolderBuilder(config)
    return await builder.build_from_path(path, visitor=visitor, parallel=parallel)
