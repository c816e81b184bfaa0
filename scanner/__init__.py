"""Scanner module for artifact discovery, reading and index refresh."""

from .discovery import DEFAULT_EXTENSION, expand_directories
from .reader import file_mtime, read_artifact
from .staleness import outdated, update, update_paths, updated

__all__ = [
    "DEFAULT_EXTENSION",
    "expand_directories",
    "file_mtime",
    "read_artifact",
    "outdated",
    "update",
    "update_paths",
    "updated",
]
