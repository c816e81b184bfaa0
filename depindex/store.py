"""
Digest-addressed index of compiled interface artifacts.

Records live in a single arena keyed by a stable record id. Two secondary
indices map a path and a digest to that id, so both views of a live record
always resolve to the same object.

Structural changes are applied to the arena eagerly and queued in a pending
delta. The back-dependency graph is only brought up to date by compact(),
which every read operation calls first; its cost is proportional to the
number of queued changes, not to the size of the index.
"""

import itertools
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from graph.model import BackDepGraph

from .errors import IndexCorruptionError
from .log import get_logger
from .records import ArtifactRecord, Found, LookupResult, NotFound

logger = get_logger(__name__)


@dataclass
class PendingDelta:
    """Records added and removed since the last compaction."""

    additions: List[ArtifactRecord] = field(default_factory=list)
    removals: List[ArtifactRecord] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.additions or self.removals)

    def clear(self) -> None:
        self.additions = []
        self.removals = []


class DigestIndex:
    """
    Artifact records keyed by path and by digest, plus their back-dependencies.

    Each instance is independent; callers hold and pass it explicitly.
    Operations must be serialized by the caller.
    """

    def __init__(self):
        self._ids = itertools.count(1)
        self._records: Dict[int, ArtifactRecord] = {}
        self._by_path: Dict[str, int] = {}
        self._by_digest: Dict[str, int] = {}
        self._delta = PendingDelta()
        self._graph = BackDepGraph()

    @property
    def graph(self) -> BackDepGraph:
        """The back-dependency graph, as of the last compaction."""
        return self._graph

    @property
    def pending(self) -> PendingDelta:
        """The queued changes not yet folded into the graph."""
        return self._delta

    # Mutators

    def remove(self, digest: str) -> None:
        """
        Remove the record with the given digest. No-op if it is unknown.

        Raises:
            IndexCorruptionError: If the path index does not resolve to the
                same record as the digest index.
        """
        logger.info("digest_removed", digest=digest)
        record_id = self._by_digest.get(digest)
        if record_id is None:
            return
        record = self._records[record_id]
        if self._by_path.get(record.path) != record_id:
            raise IndexCorruptionError(
                f"path index for {record.path!r} does not match digest {digest}"
            )
        del self._by_digest[digest]
        del self._by_path[record.path]
        del self._records[record_id]
        self._delta.removals.append(record)

    def add(self, record: ArtifactRecord) -> None:
        """
        Insert a record, replacing whatever was recorded at its path.

        Adding a record whose path and digest are both already recorded is
        a silent no-op: nothing is logged or queued. A different digest at
        the same path is a remove followed by an add within the same pending
        delta. A digest already held by a record at another path keeps that
        record; the incoming one is dropped with an ``add_skipped`` event.
        """
        current_id = self._by_path.get(record.path)
        if current_id is not None:
            current = self._records[current_id]
            if current.digest == record.digest:
                return
            self.remove(current.digest)

        holder_id = self._by_digest.get(record.digest)
        if holder_id is not None:
            logger.info(
                "add_skipped",
                reason="duplicate_digest",
                path=record.path,
                digest=record.digest,
                held_by=self._records[holder_id].path,
            )
            return

        logger.info(
            "record_added",
            name=record.name,
            path=record.path,
            mtime=record.mtime,
            digest=record.digest,
            deps=list(record.deps),
        )
        record_id = next(self._ids)
        self._records[record_id] = record
        self._by_path[record.path] = record_id
        self._by_digest[record.digest] = record_id
        self._delta.additions.append(record)

    def compact(self) -> None:
        """Fold the pending delta into the back-dependency graph."""
        if not self._delta:
            logger.debug("compact_skipped", reason="nothing to do")
            return
        logger.info(
            "compact_started",
            additions=len(self._delta.additions),
            removals=len(self._delta.removals),
        )
        removals, additions = self._delta.removals, self._delta.additions
        self._delta.clear()
        self._graph.fold(removals, additions, is_live=self.__contains__)
        logger.info("compact_done", backdeps=len(self._graph))

    # Queries

    def reverse_dependencies(self, digest: str) -> List[str]:
        """Return the digests of indexed artifacts depending on digest."""
        self.compact()
        return self._graph.dependents(digest)

    def find_by_digest(self, digest: str) -> LookupResult:
        """Look up a record by its content digest."""
        self.compact()
        record_id = self._by_digest.get(digest)
        if record_id is None:
            return NotFound(digest)
        return Found(self._records[record_id])

    def find_by_path(self, path: str) -> LookupResult:
        """Look up a record by the path it was read from."""
        self.compact()
        record_id = self._by_path.get(path)
        if record_id is None:
            return NotFound(path)
        return Found(self._records[record_id])

    def records(self) -> List[ArtifactRecord]:
        """Return all live records, sorted by path."""
        self.compact()
        return sorted(self._records.values(), key=lambda r: r.path)

    def mtime_at(self, path: str) -> Optional[int]:
        """Return the recorded mtime for a path, or None if unrecorded."""
        record_id = self._by_path.get(path)
        if record_id is None:
            return None
        return self._records[record_id].mtime

    def snapshot(self) -> List[ArtifactRecord]:
        """Return live records without compacting, in arena order."""
        return list(self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, digest: str) -> bool:
        return digest in self._by_digest

    def __repr__(self) -> str:
        return (
            f"DigestIndex(records={len(self._records)}, "
            f"pending_additions={len(self._delta.additions)}, "
            f"pending_removals={len(self._delta.removals)}, "
            f"backdeps={len(self._graph)})"
        )
