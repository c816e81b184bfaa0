"""Digest-addressed dependency index for compiled interface artifacts."""

from .errors import (
    ArtifactIOError,
    CmIndexError,
    IndexCorruptionError,
    MalformedArtifact,
    NotFoundError,
)
from .records import ArtifactRecord, Found, LookupResult, NotFound
from .store import DigestIndex, PendingDelta

__all__ = [
    "ArtifactIOError",
    "ArtifactRecord",
    "CmIndexError",
    "DigestIndex",
    "Found",
    "IndexCorruptionError",
    "LookupResult",
    "MalformedArtifact",
    "NotFound",
    "NotFoundError",
    "PendingDelta",
]
