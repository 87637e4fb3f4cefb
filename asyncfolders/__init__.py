"""AsyncFolders - Concurrent folder trees with splittable traversal.

AsyncFolders builds an immutable in-memory tree from a directory while
discovering its contents concurrently, then exposes that tree as a
sequence that can be consumed sequentially or split for parallel work.

Build:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    from asyncfolders import build_from_path
    folder = await build_from_path('/data')
━━━━━━━━━━━━━━━━━━━━━━━━━━

Traverse:
━━━━━━━━━━━━━━━━━━━━━━━━━━
    for entry in folder.produce_sequence(): ...
    folder.produce_parallel_sequence().map(process)
━━━━━━━━━━━━━━━━━━━━━━━━━━
"""

__version__ = "0.1.0"

from .config import FolderConfig
from .errors import (
    FolderError,
    EnumerationFailure,
    LeafConstructionFailure,
    JoinFailure,
)
from .core import (
    Entry,
    EntryKind,
    Folder,
    Document,
    EntryVisitor,
    CountingVisitor,
)
from .aio import (
    DirectoryLister,
    DocumentLoader,
    FolderBuilder,
    build_from_path,
    build_folder,
    build_folder_async,
)
from .sequencing import (
    FolderCursor,
    BatchFolderSpliterator,
    ArraySpliterator,
    ParallelSequence,
)

__all__ = [
    "__version__",
    # Configuration
    "FolderConfig",
    # Errors
    "FolderError",
    "EnumerationFailure",
    "LeafConstructionFailure",
    "JoinFailure",
    # Entries
    "Entry",
    "EntryKind",
    "Folder",
    "Document",
    "EntryVisitor",
    "CountingVisitor",
    # Construction
    "DirectoryLister",
    "DocumentLoader",
    "FolderBuilder",
    "build_from_path",
    "build_folder",
    "build_folder_async",
    # Traversal
    "FolderCursor",
    "BatchFolderSpliterator",
    "ArraySpliterator",
    "ParallelSequence",
]
