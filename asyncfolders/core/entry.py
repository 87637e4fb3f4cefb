"""Directory entry data model.

An entry is one of a closed set of kinds: a Folder (composite) or a
Document (leaf). Entries are finalized when they are created and are
immutable afterwards, so a finished tree can be shared freely between
threads.
"""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union


class EntryKind(Enum):
    """Tag identifying which variant an entry is."""
    FOLDER = "folder"
    DOCUMENT = "document"


class Entry(ABC):
    """Abstract base class for directory entries.

    Defines what every node in a finished tree provides: its path, its
    kind tag, how many entries it accounts for, visitor dispatch and
    sequence production.
    """

    __slots__ = ('_path',)

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Filesystem path of this entry."""
        return self._path

    @property
    def name(self) -> str:
        """Final path component, or the whole path for roots like '/'."""
        return self._path.name or str(self._path)

    @property
    @abstractmethod
    def kind(self) -> EntryKind:
        """Variant tag of this entry."""
        pass

    @property
    @abstractmethod
    def size(self) -> int:
        """Total number of entries rooted at this entry, itself included."""
        pass

    def is_folder(self) -> bool:
        return self.kind is EntryKind.FOLDER

    def is_document(self) -> bool:
        return self.kind is EntryKind.DOCUMENT

    def accept(self, visitor):
        """Dispatch this entry to a visitor.

        Args:
            visitor: EntryVisitor instance or plain callable

        Returns:
            Whatever the visitor returns
        """
        from .visitor import dispatch
        return dispatch(self, visitor)

    def produce_sequence(self) -> Iterator['Entry']:
        """Get a sequential, single-pass iterator over this entry's tree.

        Returns:
            FolderCursor yielding this entry first, then its descendants
        """
        from ..sequencing.cursor import FolderCursor
        return FolderCursor(self)

    def produce_parallel_sequence(self, config=None):
        """Get a sequence that is split into batches for parallel consumption.

        Args:
            config: Optional FolderConfig supplying the parallelism hint
                and the worker count

        Returns:
            ParallelSequence backed by a BatchFolderSpliterator
        """
        from ..config import FolderConfig
        from ..sequencing.parallel import ParallelSequence
        from ..sequencing.spliterator import BatchFolderSpliterator

        config = config or FolderConfig()
        spliterator = BatchFolderSpliterator(
            self,
            available_parallelism=config.resolved_parallelism()
        )
        return ParallelSequence(spliterator, max_workers=config.resolved_workers())

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._path})"


class Folder(Entry):
    """A finalized folder containing subfolders and documents.

    Folders are only created once all of their children are finished,
    so the size is computed exactly once, here, and never changes.
    """

    __slots__ = ('_subfolders', '_documents', '_size')

    def __init__(
        self,
        path: Union[str, Path],
        subfolders: Iterable[Entry] = (),
        documents: Iterable[Entry] = ()
    ):
        """Initialize a finalized folder.

        Args:
            path: Path of the folder in the filesystem
            subfolders: Finished subfolders, in enumeration order
            documents: Finished documents, in enumeration order
        """
        super().__init__(path)
        self._subfolders: Tuple[Entry, ...] = tuple(subfolders)
        self._documents: Tuple[Entry, ...] = tuple(documents)
        self._size = (
            sum(subfolder.size for subfolder in self._subfolders)
            + len(self._documents)
            # Count this folder too.
            + 1
        )

    @property
    def kind(self) -> EntryKind:
        return EntryKind.FOLDER

    @property
    def subfolders(self) -> Tuple[Entry, ...]:
        return self._subfolders

    @property
    def documents(self) -> Tuple[Entry, ...]:
        return self._documents

    @property
    def size(self) -> int:
        return self._size

    def find(self, path: Union[str, Path]) -> Optional[Entry]:
        """Find the entry with the given path in this folder's tree.

        Args:
            path: Path to look for

        Returns:
            Matching entry or None
        """
        target = Path(path)
        for entry in self.produce_sequence():
            if entry.path == target:
                return entry
        return None


class Document(Entry):
    """A finalized document (leaf entry) with its loaded content."""

    __slots__ = ('_content',)

    def __init__(self, path: Union[str, Path], content: Optional[bytes] = None):
        super().__init__(path)
        self._content = content

    @property
    def kind(self) -> EntryKind:
        return EntryKind.DOCUMENT

    @property
    def content(self) -> Optional[bytes]:
        """Opaque content handle produced by the document loader."""
        return self._content

    @property
    def size(self) -> int:
        return 1
