#!/usr/bin/env python3
"""
Basic example: build a folder tree concurrently, then process it in parallel.

This example demonstrates:
- Async folder construction with a visitor callback
- Sequential traversal of the finished tree
- Parallel consumption with doubling batch sizes
"""

import asyncio
import logging
import sys
import time
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from asyncfolders import CountingVisitor, FolderConfig, build_from_path


async def main():
    """Demonstrate building and traversing a folder."""
    # Get the root path from command line or use current directory
    root_path = Path(sys.argv[1]) if len(sys.argv) > 1 else Path.cwd()
    verbose = '--verbose' in sys.argv
    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    config = FolderConfig(verbose=verbose)
    visitor = CountingVisitor()

    print(f"Building: {root_path}")
    print("-" * 50)

    started = time.perf_counter()
    folder = await build_from_path(root_path, visitor=visitor, config=config)
    elapsed = time.perf_counter() - started

    print(f"  Folders:   {visitor.folders:,}")
    print(f"  Documents: {visitor.documents:,}")
    print(f"  Size:      {folder.size:,} entries")
    print(f"  Built in:  {elapsed:.2f}s")

    # Sequential traversal: first few entries in cursor order
    print(f"\nFirst entries:")
    for index, entry in enumerate(folder.produce_sequence()):
        if index >= 5:
            break
        print(f"  {entry.kind.value:8} {entry.path}")

    # Parallel traversal: total content size across worker threads
    sequence = folder.produce_parallel_sequence(config)
    total_bytes = sequence.reduce(
        0,
        lambda acc, entry: acc + (len(entry.content) if entry.is_document() else 0),
        lambda left, right: left + right
    )
    print(f"\nTotal content: {total_bytes / 1024 / 1024:.1f} MB")
    print(f"Batch sizes:   {sequence.batch_sizes}")


if __name__ == "__main__":
    asyncio.run(main())
