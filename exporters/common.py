"""Helpers shared by the exporters."""

from pathlib import Path
from typing import Dict, Optional, Set

from depindex.records import ArtifactRecord
from depindex.store import DigestIndex

SHORT_DIGEST = 12


def short_digest(digest: str) -> str:
    """Abbreviate a digest for display."""
    return digest[:SHORT_DIGEST]


def display_path(path: str, base: Optional[Path] = None) -> str:
    """Get the path relative to base with forward slashes, when possible."""
    if base is not None:
        try:
            return Path(path).resolve().relative_to(base.resolve()).as_posix()
        except ValueError:
            pass
    return path.replace("\\", "/")


def record_map(index: DigestIndex) -> Dict[str, ArtifactRecord]:
    """Compact the index and map each live digest to its record."""
    return {record.digest: record for record in index.records()}


def connected_digests(index: DigestIndex) -> Set[str]:
    """Digests taking part in at least one back-dependency edge."""
    connected: Set[str] = set()
    for dependency, dependent in index.graph.iter_edges():
        connected.add(dependency)
        connected.add(dependent)
    return connected
