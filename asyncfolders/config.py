"""Configuration system for AsyncFolders.

This module defines how users tune folder construction and traversal:
how much concurrency to use while building, how the resulting sequence
is partitioned for parallel consumption, and how verbose the library is.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class FolderConfig:
    """Complete configuration for building and traversing folders.

    A single FolderConfig is passed explicitly into the builder and the
    sequence producers. Nothing in the library reads global state.
    """

    # Construction
    parallel: bool = True                  # Fan out child tasks concurrently
    max_concurrent: int = 100              # Concurrent I/O operations
    enumeration_batch_size: int = 256      # Children staged per pending batch
    follow_symlinks: bool = False          # Descend into symlinks; links to an ancestor are skipped

    # Traversal
    available_parallelism: Optional[int] = None  # Seeds the initial split size
    max_workers: Optional[int] = None            # ParallelSequence thread pool

    # Document loading
    document_cache_size: int = 1024        # 0 disables the content cache
    document_cache_ttl: float = 300.0      # Seconds

    # Diagnostics
    verbose: bool = False                  # Per-entry debug records

    def __post_init__(self):
        errors = self.validate()
        if errors:
            raise ValueError(f"Invalid configuration: {'; '.join(errors)}")

    def validate(self) -> list:
        """Validate configuration values.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if self.max_concurrent < 1:
            errors.append("max_concurrent must be at least 1")

        if self.enumeration_batch_size < 1:
            errors.append("enumeration_batch_size must be at least 1")

        if self.available_parallelism is not None and self.available_parallelism < 1:
            errors.append("available_parallelism must be at least 1")

        if self.max_workers is not None and self.max_workers < 1:
            errors.append("max_workers must be at least 1")

        if self.document_cache_size < 0:
            errors.append("document_cache_size cannot be negative")

        if self.document_cache_ttl <= 0:
            errors.append("document_cache_ttl must be positive")

        return errors

    def resolved_parallelism(self) -> int:
        """Get the parallelism hint used to seed batch sizes.

        Returns:
            available_parallelism if set, else the CPU count (at least 1)
        """
        if self.available_parallelism is not None:
            return self.available_parallelism
        return os.cpu_count() or 1

    def resolved_workers(self) -> int:
        """Get the number of worker threads for parallel sequences."""
        if self.max_workers is not None:
            return self.max_workers
        return self.resolved_parallelism()

    # Convenience constructors for common configurations

    @classmethod
    def sequential(cls, **kwargs) -> 'FolderConfig':
        """Create config that builds one child at a time.

        Children are still staged as pending entries, but each is awaited
        in enumeration order instead of being scheduled concurrently.

        Returns:
            FolderConfig with parallel construction disabled
        """
        kwargs.setdefault('parallel', False)
        return cls(**kwargs)

    @classmethod
    def no_cache(cls, **kwargs) -> 'FolderConfig':
        """Create config that always re-reads document content."""
        kwargs.setdefault('document_cache_size', 0)
        return cls(**kwargs)
