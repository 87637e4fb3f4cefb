"""Core data model for AsyncFolders.

This module defines the entry types that make up a finished tree and the
visitor interface invoked on them.
"""

from .entry import Entry, EntryKind, Folder, Document
from .visitor import EntryVisitor, CountingVisitor, dispatch, as_callback

__all__ = [
    # Entries
    'Entry',
    'EntryKind',
    'Folder',
    'Document',
    # Visitors
    'EntryVisitor',
    'CountingVisitor',
    'dispatch',
    'as_callback',
]
