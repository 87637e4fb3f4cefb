"""Asynchronous construction of folder trees.

Trees are built with native async/await: every directory level fans out
one task per child and joins them before the folder is finalized.
"""

# Collaborators
from .adapters import (
    DirectoryLister,
    DocumentLoader,
)

# Builder
from .builder import (
    PendingFolder,
    FolderBuilder,
    build_from_path,
)

# High-level API
from .api import (
    build_folder_async,
    build_folder,
    count_entries_async,
    collect_paths_async,
    parallel_build,
)

__all__ = [
    # Collaborators
    'DirectoryLister',
    'DocumentLoader',
    # Builder
    'PendingFolder',
    'FolderBuilder',
    'build_from_path',
    # High-level API
    'build_folder_async',
    'build_folder',
    'count_entries_async',
    'collect_paths_async',
    'parallel_build',
]
