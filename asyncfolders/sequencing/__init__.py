"""Traversal of finished folder trees.

FolderCursor walks a tree sequentially; BatchFolderSpliterator splits it
into doubling batches that ParallelSequence hands to worker threads.
"""

from .cursor import FolderCursor
from .spliterator import (
    Characteristic,
    Spliterator,
    ArraySpliterator,
    BatchFolderSpliterator,
)
from .parallel import ParallelSequence

__all__ = [
    'FolderCursor',
    'Characteristic',
    'Spliterator',
    'ArraySpliterator',
    'BatchFolderSpliterator',
    'ParallelSequence',
]
