"""Splittable sequences over finished folder trees.

A spliterator produces entries one at a time (try_advance) and can hand
off part of its remaining entries to a new, independent spliterator
(try_split) so that several workers can consume one tree in parallel.
"""

from abc import ABC, abstractmethod
from enum import IntFlag
from typing import Any, Callable, List, Optional, Sequence

from ..core.entry import Entry
from .cursor import FolderCursor


class Characteristic(IntFlag):
    """Properties a spliterator guarantees about its entries."""
    NONE = 0
    ORDERED = 0x10
    SIZED = 0x40
    NONNULL = 0x100
    IMMUTABLE = 0x400
    SUBSIZED = 0x4000


class Spliterator(ABC):
    """Abstract base class for splittable entry sequences.

    Instances are stateful and single-threaded. Spliterators returned by
    try_split share no mutable state with their source and may be driven
    from another thread.
    """

    @abstractmethod
    def try_advance(self, action: Callable[[Entry], Any]) -> bool:
        """Feed the next entry to action.

        Args:
            action: Consumer for the entry

        Returns:
            True if an entry was consumed, False if exhausted
        """
        pass

    @abstractmethod
    def try_split(self) -> Optional['Spliterator']:
        """Split off a prefix of the remaining entries.

        Returns:
            Spliterator covering entries this one no longer covers,
            or None if no split is possible
        """
        pass

    @abstractmethod
    def estimate_size(self) -> int:
        """Number of entries still to be produced."""
        pass

    @abstractmethod
    def characteristics(self) -> Characteristic:
        pass

    def has_characteristics(self, flags: Characteristic) -> bool:
        return (self.characteristics() & flags) == flags

    def for_each_remaining(self, action: Callable[[Entry], Any]):
        """Feed every remaining entry to action, in order."""
        while self.try_advance(action):
            pass


class ArraySpliterator(Spliterator):
    """Spliterator over a fixed, already materialized batch of entries."""

    def __init__(self, entries: Sequence[Entry]):
        self._entries: List[Entry] = list(entries)
        self._index = 0

    def try_advance(self, action: Callable[[Entry], Any]) -> bool:
        if self._index >= len(self._entries):
            return False
        entry = self._entries[self._index]
        self._index += 1
        action(entry)
        return True

    def try_split(self) -> Optional['ArraySpliterator']:
        """Hand off the first half of the remaining entries."""
        remaining = len(self._entries) - self._index
        if remaining < 2:
            return None
        middle = self._index + remaining // 2
        prefix = ArraySpliterator(self._entries[self._index:middle])
        self._index = middle
        return prefix

    def estimate_size(self) -> int:
        return len(self._entries) - self._index

    def characteristics(self) -> Characteristic:
        return (Characteristic.ORDERED | Characteristic.SIZED | Characteristic.SUBSIZED
                | Characteristic.NONNULL | Characteristic.IMMUTABLE)

    def entries(self) -> List[Entry]:
        """Get the entries not yet produced, without consuming them."""
        return self._entries[self._index:]

    def __len__(self) -> int:
        return self.estimate_size()


class BatchFolderSpliterator(Spliterator):
    """Spliterator that splits a folder tree into doubling batches.

    The first split hands off size // parallelism entries; every split
    doubles the batch size for the next one. Early batches are small so
    idle workers get work quickly, later ones are large so the number of
    hand-offs stays logarithmic in the tree size.

    Example:
        spliterator = BatchFolderSpliterator(folder, available_parallelism=4)
        while (batch := spliterator.try_split()) is not None:
            executor.submit(batch.for_each_remaining, process)
    """

    def __init__(self, root: Entry, available_parallelism: int = 1):
        """Initialize spliterator.

        Args:
            root: Finished root entry
            available_parallelism: Number of workers expected to consume
                the batches (at least 1)
        """
        if available_parallelism < 1:
            raise ValueError("available_parallelism must be at least 1")

        self.available_parallelism = available_parallelism
        self.batch_size = max(1, root.size // available_parallelism)
        self.split_sizes: List[int] = []
        self._cursor = FolderCursor(root)

    def try_advance(self, action: Callable[[Entry], Any]) -> bool:
        if self._cursor.has_next():
            action(self._cursor.next())
            return True
        return False

    def try_split(self) -> Optional[ArraySpliterator]:
        """Split off the next batch of entries.

        Returns:
            ArraySpliterator holding up to batch_size entries, or None if
            the cursor is exhausted
        """
        if not self._cursor.has_next():
            return None

        batch = []
        while len(batch) < self.batch_size and self._cursor.has_next():
            batch.append(self._cursor.next())

        self.split_sizes.append(len(batch))

        # Double the batch size each time it's used.
        self.batch_size += self.batch_size

        return ArraySpliterator(batch)

    def estimate_size(self) -> int:
        return self._cursor.remaining()

    def characteristics(self) -> Characteristic:
        return Characteristic.NONNULL | Characteristic.IMMUTABLE
