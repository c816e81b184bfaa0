"""Staleness detection and batched refresh of a digest index."""

from typing import Iterable, List

import structlog

from depindex.errors import ArtifactIOError, MalformedArtifact
from depindex.records import ArtifactRecord
from depindex.store import DigestIndex
from .discovery import DEFAULT_EXTENSION, expand_directories
from .reader import file_mtime, read_artifact

logger = structlog.get_logger(__name__)


def outdated(index: DigestIndex) -> List[str]:
    """
    Return the digests of records whose file changed on disk.

    A record is outdated when the fresh mtime of its path differs from the
    recorded one, including when the path can no longer be stat'ed.
    """
    olds: List[str] = []
    for record in index.snapshot():
        fresh = file_mtime(record.path)
        if fresh is None or fresh != record.mtime:
            olds.append(record.digest)
    return olds


def updated(index: DigestIndex, paths: Iterable[str]) -> List[ArtifactRecord]:
    """
    Read the candidate paths that are new or changed since last recorded.

    A path is re-read when it is unrecorded or its fresh mtime differs from
    the recorded one. Read failures are logged and skipped.

    Returns:
        The records that were read successfully.
    """
    records: List[ArtifactRecord] = []
    for path in paths:
        recorded = index.mtime_at(path)
        if recorded is not None and file_mtime(path) == recorded:
            continue
        try:
            records.append(read_artifact(path))
        except (ArtifactIOError, MalformedArtifact) as e:
            logger.error("artifact_read_failed", path=path, error=str(e))
    return records


def update_paths(index: DigestIndex, paths: Iterable[str]) -> None:
    """
    Refresh the index from a list of artifact paths.

    Outdated records are removed across the whole index before the given
    paths are refreshed, so a record whose file moved or vanished is
    retracted even when its old path is no longer listed.
    """
    for digest in outdated(index):
        index.remove(digest)
    for record in updated(index, paths):
        index.add(record)
    index.compact()


def update(
    index: DigestIndex,
    directories: Iterable[str],
    extension: str = DEFAULT_EXTENSION,
) -> None:
    """Refresh the index from the artifact files found in directories."""
    update_paths(index, expand_directories(directories, extension))
