"""Filesystem collaborators used by the async folder builder."""

from .filesystem import DirectoryLister
from .documents import DocumentLoader

__all__ = [
    'DirectoryLister',
    'DocumentLoader',
]
