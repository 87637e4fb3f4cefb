"""Tests for the async folder builder."""

import asyncio
import logging
import os
from pathlib import Path

import pytest

from asyncfolders import (
    CountingVisitor,
    DirectoryLister,
    Document,
    DocumentLoader,
    EnumerationFailure,
    Folder,
    FolderBuilder,
    FolderConfig,
    JoinFailure,
    LeafConstructionFailure,
    build_from_path,
)
from asyncfolders.aio import PendingFolder


class FailingLister(DirectoryLister):
    """Lister that fails for directories with a given name."""

    def __init__(self, fail_name: str, **kwargs):
        super().__init__(**kwargs)
        self.fail_name = fail_name

    async def list_entries(self, path, depth=1):
        if Path(path).name == self.fail_name:
            raise EnumerationFailure(f"Cannot list {path}", path)
        return await super().list_entries(path, depth)


class FailingLoader(DocumentLoader):
    """Loader that fails for documents with a given name."""

    def __init__(self, fail_name: str, **kwargs):
        super().__init__(**kwargs)
        self.fail_name = fail_name

    async def from_path(self, path, on_ready=None):
        if Path(path).name == self.fail_name:
            raise LeafConstructionFailure(f"Cannot load {path}", path)
        return await super().from_path(path, on_ready)


def shape(entry):
    """Reduce a tree to names only, for structural comparison."""
    if entry.is_document():
        return (entry.name, entry.content)
    return (
        entry.name,
        [shape(sub) for sub in entry.subfolders],
        [shape(doc) for doc in entry.documents],
    )


# Scenarios

@pytest.mark.asyncio
@pytest.mark.parametrize('parallel', [True, False])
async def test_two_subfolders_and_top_document(scenario_a, parallel):
    folder = await build_from_path(scenario_a, parallel=parallel)

    assert isinstance(folder, Folder)
    assert folder.path == scenario_a
    assert folder.size == 6
    assert [sub.name for sub in folder.subfolders] == ['folderA', 'folderB']
    assert [doc.name for doc in folder.documents] == ['top.txt']
    assert [sub.size for sub in folder.subfolders] == [2, 2]
    assert folder.subfolders[0].documents[0].content == b'a1'


@pytest.mark.asyncio
async def test_empty_directory(empty_dir):
    folder = await build_from_path(empty_dir)

    assert folder.size == 1
    assert list(folder.produce_sequence()) == [folder]


@pytest.mark.asyncio
async def test_sequence_over_built_tree(scenario_a):
    folder = await build_from_path(scenario_a)

    names = [entry.name for entry in folder.produce_sequence()]

    assert names == ['root', 'folderB', 'folderA', 'docA1.txt', 'docB1.txt', 'top.txt']


@pytest.mark.asyncio
async def test_parallel_and_sequential_builds_agree(nested_tree):
    parallel = await build_from_path(nested_tree, parallel=True)
    sequential = await build_from_path(nested_tree, parallel=False)

    assert parallel.size == sequential.size == 12
    assert shape(parallel) == shape(sequential)
    assert ([e.path for e in parallel.produce_sequence()]
            == [e.path for e in sequential.produce_sequence()])


@pytest.mark.asyncio
async def test_small_enumeration_batches_keep_order(nested_tree):
    reference = await build_from_path(nested_tree)
    config = FolderConfig(enumeration_batch_size=1)

    folder = await build_from_path(nested_tree, config=config)

    assert shape(folder) == shape(reference)


@pytest.mark.asyncio
async def test_config_parallel_default(scenario_a):
    builder = FolderBuilder(FolderConfig.sequential())
    folder = await builder.build_from_path(scenario_a)
    assert folder.size == 6


# Visitor

@pytest.mark.asyncio
@pytest.mark.parametrize('parallel', [True, False])
async def test_visitor_called_once_per_entry(scenario_a, parallel):
    visitor = CountingVisitor()

    folder = await build_from_path(scenario_a, visitor=visitor, parallel=parallel)

    assert visitor.folders == 3
    assert visitor.documents == 3
    assert visitor.total == folder.size
    assert len(set(visitor.paths)) == folder.size
    # The root finishes last.
    assert visitor.paths[-1] == scenario_a


@pytest.mark.asyncio
async def test_visitor_sees_finalized_folders(nested_tree):
    sizes = {}

    def record(entry):
        if entry.is_folder():
            sizes[entry.path] = entry.size

    folder = await build_from_path(nested_tree, visitor=record)

    assert sizes[nested_tree] == folder.size
    assert sizes[nested_tree / 'beta'] == 1
    assert sizes[nested_tree / 'alpha'] == 7


@pytest.mark.asyncio
async def test_visitor_exception_propagates(scenario_a):
    def explode(entry):
        raise RuntimeError("visitor failed")

    with pytest.raises(RuntimeError, match="visitor failed"):
        await build_from_path(scenario_a, visitor=explode, parallel=False)


# Failures

@pytest.mark.asyncio
async def test_missing_root_fails_enumeration(tmp_path):
    with pytest.raises(EnumerationFailure) as excinfo:
        await build_from_path(tmp_path / 'does-not-exist')

    assert excinfo.value.path == tmp_path / 'does-not-exist'
    assert isinstance(excinfo.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_file_root_fails_enumeration(scenario_a):
    with pytest.raises(EnumerationFailure):
        await build_from_path(scenario_a / 'top.txt')


@pytest.mark.asyncio
@pytest.mark.parametrize('parallel', [True, False])
async def test_nested_enumeration_failure_fails_root(scenario_a, parallel):
    visitor = CountingVisitor()
    builder = FolderBuilder(lister=FailingLister('folderB'))

    with pytest.raises(JoinFailure) as excinfo:
        await builder.build_from_path(scenario_a, visitor=visitor, parallel=parallel)

    assert excinfo.value.path == scenario_a
    assert isinstance(excinfo.value.origin, EnumerationFailure)
    assert excinfo.value.__cause__ is excinfo.value.origin
    # No finalized folder is ever observable for the root.
    assert scenario_a not in visitor.paths


@pytest.mark.asyncio
async def test_deep_failure_is_wrapped_once(nested_tree):
    builder = FolderBuilder(lister=FailingLister('deeper'))

    with pytest.raises(JoinFailure) as excinfo:
        await builder.build_from_path(nested_tree)

    # The innermost parent wraps; outer parents re-raise unchanged.
    assert excinfo.value.path == nested_tree / 'alpha' / 'deep'
    assert isinstance(excinfo.value.origin, EnumerationFailure)
    assert excinfo.value.origin.path == nested_tree / 'alpha' / 'deep' / 'deeper'


@pytest.mark.asyncio
@pytest.mark.parametrize('parallel', [True, False])
async def test_document_failure_fails_root(scenario_a, parallel):
    builder = FolderBuilder(loader=FailingLoader('docA1.txt'))

    with pytest.raises(JoinFailure) as excinfo:
        await builder.build_from_path(scenario_a, parallel=parallel)

    assert excinfo.value.path == scenario_a / 'folderA'
    assert isinstance(excinfo.value.origin, LeafConstructionFailure)


# Logging

@pytest.mark.asyncio
async def test_verbose_logs_each_entry(scenario_a, caplog):
    config = FolderConfig(verbose=True)

    with caplog.at_level(logging.DEBUG, logger='asyncfolders.aio.builder'):
        await build_from_path(scenario_a, config=config)

    ready = [r for r in caplog.records if 'ready' in r.getMessage()]
    assert len(ready) == 6


@pytest.mark.asyncio
async def test_quiet_by_default(scenario_a, caplog):
    with caplog.at_level(logging.DEBUG, logger='asyncfolders.aio.builder'):
        await build_from_path(scenario_a)

    assert not [r for r in caplog.records if 'ready' in r.getMessage()]
    assert any('Built folder' in r.getMessage() for r in caplog.records)


# PendingFolder staging

async def delayed(entry, delay):
    await asyncio.sleep(delay)
    return entry


@pytest.mark.asyncio
async def test_join_uses_slot_order_not_completion_order():
    slow = Document('p/slow', b'')
    fast = Document('p/fast', b'')
    pending = PendingFolder(parallel=True)
    pending.add_document(delayed(slow, 0.05))
    pending.add_document(delayed(fast, 0))

    folder = await pending.join('p')

    assert folder.documents == (slow, fast)


@pytest.mark.asyncio
async def test_merge_before_join():
    first = PendingFolder(parallel=False)
    first.add_subfolder(delayed(Folder('p/a'), 0))
    first.add_document(delayed(Document('p/x', b''), 0))
    second = PendingFolder(parallel=False)
    second.add_subfolder(delayed(Folder('p/b'), 0))
    second.add_document(delayed(Document('p/y', b''), 0))

    merged = first.merge(second)

    assert merged is first
    assert len(merged) == 4
    folder = await merged.join('p')
    assert [sub.name for sub in folder.subfolders] == ['a', 'b']
    assert [doc.name for doc in folder.documents] == ['x', 'y']
    assert folder.size == 5


@pytest.mark.asyncio
async def test_merged_source_is_spent():
    first = PendingFolder(parallel=False)
    second = PendingFolder(parallel=False)
    first.merge(second)

    coroutine = delayed(Document('p/x', b''), 0)
    with pytest.raises(RuntimeError):
        second.add_document(coroutine)
    coroutine.close()
    await first.join('p')


@pytest.mark.asyncio
async def test_no_changes_after_join():
    pending = PendingFolder(parallel=True)
    await pending.join('p')

    coroutine = delayed(Document('p/x', b''), 0)
    with pytest.raises(RuntimeError):
        pending.add_document(coroutine)
    coroutine.close()
    with pytest.raises(RuntimeError):
        pending.merge(PendingFolder())
    with pytest.raises(RuntimeError):
        await pending.join('p')


@pytest.mark.asyncio
async def test_sequential_join_stops_at_first_failure():
    started = []

    async def failing():
        started.append('failing')
        raise EnumerationFailure("nope", 'p/bad')

    async def never():
        started.append('never')
        return Document('p/never', b'')

    pending = PendingFolder(parallel=False)
    pending.add_subfolder(failing())
    pending.add_document(never())

    with pytest.raises(JoinFailure):
        await pending.join('p')

    assert started == ['failing']


@pytest.mark.asyncio
async def test_join_passes_non_folder_errors_through():
    async def broken():
        raise KeyError('unexpected')

    pending = PendingFolder(parallel=True)
    pending.add_document(broken())

    with pytest.raises(KeyError):
        await pending.join('p')


@pytest.mark.asyncio
@pytest.mark.parametrize('parallel', [True, False])
async def test_deep_chain_builds(tmp_path, parallel):
    deepest = tmp_path / 'chain'
    for _ in range(400):
        deepest = deepest / 'a'
    deepest.mkdir(parents=True)
    (deepest / 'leaf.txt').write_text('leaf')

    folder = await build_from_path(tmp_path / 'chain', parallel=parallel)

    # 401 folders plus the leaf document
    assert folder.size == 402


@pytest.mark.asyncio
@pytest.mark.skipif(not hasattr(os, 'mkfifo'), reason="FIFOs not supported")
@pytest.mark.parametrize('parallel', [True, False])
async def test_fifo_is_skipped(tmp_path, parallel):
    (tmp_path / 'doc.txt').write_text('doc')
    os.mkfifo(tmp_path / 'pipe')

    folder = await asyncio.wait_for(build_from_path(tmp_path, parallel=parallel), timeout=5)

    assert folder.size == 2
    assert [document.path for document in folder.documents] == [tmp_path / 'doc.txt']


@pytest.mark.asyncio
async def test_symlink_loops_are_skipped(scenario_a):
    try:
        os.symlink(scenario_a, scenario_a / 'folderA' / 'back')
        os.symlink(scenario_a / 'folderB', scenario_a / 'folderA' / 'toB')
        os.symlink(scenario_a / 'folderA', scenario_a / 'folderB' / 'toA')
    except (OSError, NotImplementedError):
        pytest.skip("Symlinks not supported")

    config = FolderConfig(follow_symlinks=True)
    folder = await asyncio.wait_for(build_from_path(scenario_a, config=config), timeout=5)

    # folderA/toB and folderB/toA are listed once each, with their link
    # back to the other side skipped.
    assert folder.size == 10
    assert folder.find(scenario_a / 'folderA' / 'back') is None
    assert folder.find(scenario_a / 'folderA' / 'toB' / 'docB1.txt') is not None
    assert folder.find(scenario_a / 'folderA' / 'toB' / 'toA') is None
