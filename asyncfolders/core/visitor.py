"""Visitor dispatch over the closed set of entry kinds.

Callers may supply either an EntryVisitor with one method per kind or a
plain callable taking any entry. Dispatch is a match on the entry's kind
tag rather than double dispatch through subclasses.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from .entry import Entry, EntryKind


class EntryVisitor(ABC):
    """Abstract base class for visitors of finished entries."""

    @abstractmethod
    def visit_folder(self, folder) -> Any:
        """Called with a finalized Folder."""
        pass

    @abstractmethod
    def visit_document(self, document) -> Any:
        """Called with a finalized Document."""
        pass


def dispatch(entry: Entry, visitor) -> Any:
    """Route an entry to the visitor method matching its kind.

    Args:
        entry: Finalized entry
        visitor: EntryVisitor or callable

    Returns:
        The visitor's return value

    Raises:
        TypeError: If visitor is neither an EntryVisitor nor callable
    """
    if isinstance(visitor, EntryVisitor):
        if entry.kind is EntryKind.FOLDER:
            return visitor.visit_folder(entry)
        if entry.kind is EntryKind.DOCUMENT:
            return visitor.visit_document(entry)
        raise ValueError(f"Unknown entry kind: {entry.kind}")

    if callable(visitor):
        return visitor(entry)

    raise TypeError(f"Visitor must be an EntryVisitor or callable, got {type(visitor).__name__}")


def as_callback(visitor) -> Optional[Callable[[Entry], Any]]:
    """Normalize a visitor into a single-argument callback.

    Args:
        visitor: EntryVisitor, callable or None

    Returns:
        Callable invoking dispatch(), or None if no visitor was given
    """
    if visitor is None:
        return None
    if not isinstance(visitor, EntryVisitor) and not callable(visitor):
        raise TypeError(f"Visitor must be an EntryVisitor or callable, got {type(visitor).__name__}")

    def callback(entry: Entry) -> Any:
        return dispatch(entry, visitor)

    return callback


class CountingVisitor(EntryVisitor):
    """Visitor that tallies folders and documents it has seen.

    Thread-unsafe by itself, but the builder invokes visitors from the
    event loop thread only.
    """

    def __init__(self):
        self.folders = 0
        self.documents = 0
        self.paths = []

    def visit_folder(self, folder):
        self.folders += 1
        self.paths.append(folder.path)

    def visit_document(self, document):
        self.documents += 1
        self.paths.append(document.path)

    @property
    def total(self) -> int:
        return self.folders + self.documents
