"""High-level API for AsyncFolders.

Simple functions for the common cases: build a tree, count it, list its
paths, or build several trees at once.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import FolderConfig
from ..core.entry import Entry
from .builder import FolderBuilder


async def build_folder_async(
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

    Example:
        >>> folder = await build_folder_async('/path')
        >>> print(f"{folder.size} entries")
    """
    builder = FolderBuilder(config)
    return await builder.build_from_path(path, visitor=visitor, parallel=parallel)


def build_folder(
    path: Union[str, Path],
    visitor: Any = None,
    parallel: Optional[bool] = None,
    config: Optional[FolderConfig] = None
) -> Entry:
    """Synchronous wrapper around build_folder_async.

    Must not be called from a running event loop.
    """
    return asyncio.run(build_folder_async(path, visitor, parallel, config))


async def count_entries_async(
    path: Union[str, Path],
    config: Optional[FolderConfig] = None
) -> int:
    """Count folders and documents below a directory, the directory included.

    Args:
        path: Directory to count
        config: Optional FolderConfig

    Returns:
        Size of the built folder
    """
    folder = await build_folder_async(path, config=config)
    return folder.size


async def collect_paths_async(
    path: Union[str, Path],
    config: Optional[FolderConfig] = None
) -> List[Path]:
    """Get the paths of every entry below a directory, in cursor order.

    Args:
        path: Directory to walk
        config: Optional FolderConfig

    Returns:
        List of paths, root first
    """
    folder = await build_folder_async(path, config=config)
    return [entry.path for entry in folder.produce_sequence()]


async def parallel_build(
    roots: List[Union[str, Path]],
    config: Optional[FolderConfig] = None
) -> Dict[Path, Entry]:
    """Build several trees concurrently.

    Fails as a whole if any tree fails.

    Args:
        roots: List of root directories
        config: Optional FolderConfig shared by all builds

    Returns:
        Dictionary mapping each root to its finalized folder
    """
    builder = FolderBuilder(config)
    tasks = [builder.build_from_path(root) for root in roots]
    results = await asyncio.gather(*tasks)

    return dict(zip((Path(root) for root in roots), results))
