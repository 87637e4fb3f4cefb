"""Parallel consumption of splittable entry sequences.

ParallelSequence drives a spliterator's split protocol: it keeps asking
the source for batches, hands every batch to a worker thread, and
combines the per-batch results in split order, which is also the
sequential order of the source.
"""

import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, List, Optional, TypeVar

from ..core.entry import Entry
from .spliterator import Spliterator

logger = logging.getLogger(__name__)

T = TypeVar('T')


class ParallelSequence:
    """One-shot parallel sequence over a spliterator.

    Terminal operations block until every batch is processed. Exceptions
    raised in a worker are re-raised in the caller.

    Example:
        sequence = folder.produce_parallel_sequence()
        sizes = sequence.map(lambda entry: entry.size)
    """

    def __init__(self, spliterator: Spliterator, max_workers: Optional[int] = None):
        """Initialize parallel sequence.

        Args:
            spliterator: Source of entries
            max_workers: Worker threads (ThreadPoolExecutor default if None)
        """
        self._spliterator = spliterator
        self.max_workers = max_workers
        self.batch_sizes: List[int] = []
        self._consumed = False

    # Terminal operations

    def for_each(self, action: Callable[[Entry], Any]):
        """Apply action to every entry, in no particular order."""
        self._evaluate(lambda batch: batch.for_each_remaining(action))

    def map(self, fn: Callable[[Entry], T]) -> List[T]:
        """Apply fn to every entry.

        Returns:
            Results in the sequential order of the source
        """
        def map_batch(batch: Spliterator) -> List[T]:
            results = []
            batch.for_each_remaining(lambda entry: results.append(fn(entry)))
            return results

        return [item for part in self._evaluate(map_batch) for item in part]

    def filter(self, predicate: Callable[[Entry], bool]) -> List[Entry]:
        """Get entries matching predicate, in sequential order."""
        def filter_batch(batch: Spliterator) -> List[Entry]:
            matches = []

            def keep(entry: Entry):
                if predicate(entry):
                    matches.append(entry)

            batch.for_each_remaining(keep)
            return matches

        return [entry for part in self._evaluate(filter_batch) for entry in part]

    def reduce(
        self,
        identity: T,
        accumulator: Callable[[T, Entry], T],
        combiner: Callable[[T, T], T]
    ) -> T:
        """Reduce entries to a single value.

        Every batch is folded with accumulator starting from identity, and
        the partial results are folded with combiner in split order. So
        identity must be neutral and combiner must be associative.

        Args:
            identity: Neutral starting value
            accumulator: Folds one entry into a partial result
            combiner: Merges two partial results

        Returns:
            Reduced value
        """
        def reduce_batch(batch: Spliterator) -> T:
            accumulated = identity

            def accumulate(entry: Entry):
                nonlocal accumulated
                accumulated = accumulator(accumulated, entry)

            batch.for_each_remaining(accumulate)
            return accumulated

        return functools.reduce(combiner, self._evaluate(reduce_batch), identity)

    def count(self) -> int:
        """Count the entries."""
        def count_batch(batch: Spliterator) -> int:
            count = 0

            def increment(entry: Entry):
                nonlocal count
                count += 1

            batch.for_each_remaining(increment)
            return count

        return sum(self._evaluate(count_batch))

    def to_list(self) -> List[Entry]:
        """Collect the entries in sequential order."""
        return self.map(lambda entry: entry)

    def _evaluate(self, process_batch: Callable[[Spliterator], T]) -> List[T]:
        """Split the source, process batches in workers, gather results.

        Returns:
            Per-batch results in split order, with the unsplit remainder
            of the source processed last on the calling thread
        """
        if self._consumed:
            raise RuntimeError("ParallelSequence has already been consumed")
        self._consumed = True

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = []
            while True:
                batch = self._spliterator.try_split()
                if batch is None:
                    break
                self.batch_sizes.append(batch.estimate_size())
                futures.append(pool.submit(process_batch, batch))

            logger.debug(
                "Dispatched %d batches to %s workers: %s",
                len(futures), self.max_workers or 'default', self.batch_sizes
            )

            remainder = process_batch(self._spliterator)
            results = [future.result() for future in futures]

        results.append(remainder)
        return results
