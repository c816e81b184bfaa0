"""Exception types raised by the digest index and the artifact reader."""

from typing import Optional


class CmIndexError(Exception):
    """Base class for all index errors."""


class NotFoundError(CmIndexError, KeyError):
    """A digest or path is not present in the index."""
    
    def __init__(self, key: str):
        super().__init__(key)
        self.key = key
    
    def __str__(self) -> str:
        return f"not found: {self.key}"


class MalformedArtifact(CmIndexError, ValueError):
    """An artifact manifest could not be interpreted."""
    
    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ArtifactIOError(CmIndexError, OSError):
    """An artifact file could not be stat'ed, opened or read."""
    
    def __init__(self, path: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"cannot read {path}{detail}")
        self.path = path


class IndexCorruptionError(CmIndexError, RuntimeError):
    """
    The path view and the digest view of the index disagree.
    
    Raised when removing a record whose path entry does not resolve to the
    same record as its digest entry. Nothing in this project catches it:
    continuing with a corrupt index would lose records silently.
    """
