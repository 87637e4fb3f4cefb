"""Shared fixtures for AsyncFolders tests."""

import sys
from pathlib import Path
from typing import Dict, Union

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from asyncfolders import Document, Folder


TreeLayout = Dict[str, Union[str, bytes, dict]]


def make_tree(root: Path, layout: TreeLayout) -> Path:
    """Create files and directories on disk from a nested dict.

    Dict values become directories; str/bytes values become files.
    """
    root.mkdir(parents=True, exist_ok=True)
    for name, value in layout.items():
        path = root / name
        if isinstance(value, dict):
            make_tree(path, value)
        elif isinstance(value, bytes):
            path.write_bytes(value)
        else:
            path.write_text(value)
    return root


def sample_folder() -> Folder:
    """Create an in-memory tree without touching the filesystem.

    Structure:
        root
        ├── A
        │   └── a1
        ├── B
        │   ├── C
        │   │   └── c1
        │   └── b1
        └── d0
    """
    root = Path('root')
    a = Folder(root / 'A', documents=[Document(root / 'A' / 'a1', b'a1')])
    c = Folder(root / 'B' / 'C', documents=[Document(root / 'B' / 'C' / 'c1', b'c1')])
    b = Folder(root / 'B', subfolders=[c], documents=[Document(root / 'B' / 'b1', b'b1')])
    return Folder(root, subfolders=[a, b], documents=[Document(root / 'd0', b'd0')])


# Cursor order of sample_folder(), as names relative to 'root'.
SAMPLE_ORDER = ['root', 'root/B', 'root/B/C', 'root/A',
                'root/A/a1', 'root/B/C/c1', 'root/B/b1', 'root/d0']


@pytest.fixture
def sample_tree():
    """In-memory tree of 8 entries."""
    return sample_folder()


@pytest.fixture
def sample_order():
    """Cursor order of sample_tree as POSIX paths."""
    return list(SAMPLE_ORDER)


@pytest.fixture
def scenario_a(tmp_path):
    """Directory with 2 subfolders (1 document each) and 1 top-level document."""
    return make_tree(tmp_path / 'root', {
        'folderA': {'docA1.txt': 'a1'},
        'folderB': {'docB1.txt': 'b1'},
        'top.txt': 'top',
    })


@pytest.fixture
def empty_dir(tmp_path):
    """Empty directory."""
    path = tmp_path / 'empty'
    path.mkdir()
    return path


@pytest.fixture
def nested_tree(tmp_path):
    """Deeper directory with mixed content at several levels."""
    return make_tree(tmp_path / 'nested', {
        'alpha': {
            'one.txt': '1',
            'two.txt': '22',
            'deep': {
                'deeper': {'leaf.bin': b'\x00\x01'},
                'three.txt': '333',
            },
        },
        'beta': {},
        'gamma': {'four.txt': '4444'},
        'readme.md': '# nested',
    })
