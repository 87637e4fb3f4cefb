"""Error kinds raised while building folders.

Construction is all-or-nothing: any failure below a folder fails that
folder's join, and the failure travels up to the root unchanged.
"""

from pathlib import Path
from typing import Optional, Union


class FolderError(Exception):
    """Base class for all folder construction failures."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class EnumerationFailure(FolderError):
    """Raised when listing the contents of a directory fails."""
    pass


class LeafConstructionFailure(FolderError):
    """Raised when a document cannot be created from its path."""
    pass


class JoinFailure(FolderError):
    """Raised when a child fails while its parent folder is joining.

    Attributes:
        path: The folder whose join failed
        origin: The originating EnumerationFailure or LeafConstructionFailure
    """

    def __init__(self, path: Union[str, Path], origin: BaseException):
        super().__init__(f"Failed to join folder '{path}': {origin}", path)
        self.origin = origin
