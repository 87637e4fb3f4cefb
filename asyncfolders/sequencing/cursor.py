"""Sequential cursor over a finished folder tree."""

from typing import List, Optional

from ..core.entry import Entry, EntryKind


class FolderCursor:
    """Single-pass iterator over every entry rooted at a finished entry.

    The root is produced first. After that the most recently added
    pending folder is expanded next (its subfolders and documents are
    appended to the pending lists), so the order is depth-biased rather
    than level by level. Documents are produced, also last-in first-out,
    once no folders remain. The order depends only on the tree, never on
    how concurrently it was built.

    Not thread-safe; each cursor must be driven by one caller.
    """

    def __init__(self, root: Entry):
        self._current: Optional[Entry] = root
        self._folders: List[Entry] = []
        self._documents: List[Entry] = []

        if root.kind is EntryKind.FOLDER:
            self._folders.extend(root.subfolders)
            self._documents.extend(root.documents)

    def has_next(self) -> bool:
        """Refresh the current entry if needed.

        Returns:
            True if an entry is available, False at the end
        """
        if self._current is None:
            if self._folders:
                folder = self._folders.pop()
                self._folders.extend(folder.subfolders)
                self._documents.extend(folder.documents)
                self._current = folder
            elif self._documents:
                self._current = self._documents.pop()

        return self._current is not None

    def next(self) -> Entry:
        """Get the next unseen entry.

        Raises:
            StopIteration: If the cursor is exhausted
        """
        if not self.has_next():
            raise StopIteration
        entry, self._current = self._current, None
        return entry

    def remaining(self) -> int:
        """Exact number of entries still to be produced.

        Pending folders have not been expanded yet, so each contributes
        its whole size.
        """
        pending = sum(folder.size for folder in self._folders) + len(self._documents)
        return pending + (1 if self._current is not None else 0)

    def __iter__(self) -> 'FolderCursor':
        return self

    def __next__(self) -> Entry:
        return self.next()
