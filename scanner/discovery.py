"""Directory expansion: list the artifact files found in directories."""

import os
from typing import Iterable, List

import structlog

DEFAULT_EXTENSION = ".cmi"

logger = structlog.get_logger(__name__)


def expand_directories(
    directories: Iterable[str],
    extension: str = DEFAULT_EXTENSION,
) -> List[str]:
    """
    List artifact files found directly in each directory.

    Subdirectories are not descended into. An unlistable directory is
    logged and skipped.

    Args:
        directories: Directories to list, in order.
        extension: Artifact file extension (e.g. ".cmi").

    Returns:
        Paths of matching files, sorted by name within each directory.
    """
    paths: List[str] = []
    for directory in directories:
        paths.extend(list_artifacts(directory, extension))
    return paths


def list_artifacts(directory: str, extension: str = DEFAULT_EXTENSION) -> List[str]:
    """List the artifact files of one directory, or [] if it cannot be listed."""
    try:
        with os.scandir(directory) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.name.endswith(extension) and entry.is_file()
            )
    except OSError as e:
        logger.error("expand_path_failed", path=directory, error=str(e))
        return []
    return [os.path.join(directory, name) for name in names]
