"""Back-dependency graph: which indexed artifacts depend on a given digest."""

from typing import TYPE_CHECKING, Callable, Dict, Iterable, Iterator, List, Set, Tuple

import structlog

if TYPE_CHECKING:
    from depindex.records import ArtifactRecord

logger = structlog.get_logger(__name__)


class BackDepGraph:
    """
    A reverse dependency map from a digest to the digests depending on it.

    The graph is derived from the digest index and only changes through
    fold(), which applies a batch of additions and removals at once. An
    entry is never left with an empty dependent set.
    """

    def __init__(self):
        self._dependents: Dict[str, Set[str]] = {}

    def dependents(self, digest: str) -> List[str]:
        """Return the digests depending on digest, sorted. Empty if unknown."""
        return sorted(self._dependents.get(digest, ()))

    def iter_edges(self) -> Iterator[Tuple[str, str]]:
        """Iterate over (dependency, dependent) pairs in sorted order."""
        for digest in sorted(self._dependents):
            for dependent in sorted(self._dependents[digest]):
                yield digest, dependent

    def fold(
        self,
        removals: Iterable["ArtifactRecord"],
        additions: Iterable["ArtifactRecord"],
        is_live: Callable[[str], bool],
    ) -> None:
        """
        Apply one batch of index changes to the graph.

        Removals are processed before additions so that an addition sees the
        final deletion set of digests that churned within the batch.

        Args:
            removals: Records removed from the index since the last fold.
            additions: Records added to the index since the last fold.
            is_live: Whether a digest is currently present in the index.
        """
        to_remove: Set[str] = set()
        to_update: Dict[str, Set[str]] = {}

        for record in removals:
            # Removed then re-added within the batch: still present.
            if is_live(record.digest):
                continue
            to_remove.add(record.digest)
            for dep in record.deps:
                to_update.setdefault(dep, set())

        for record in additions:
            if record.digest in to_remove:
                continue
            for dep in record.deps:
                to_update.setdefault(dep, set()).add(record.digest)

        for digest, fresh in to_update.items():
            digests = {d for d in self._dependents.get(digest, ()) if d not in to_remove}
            digests |= fresh
            if not digests:
                self._dependents.pop(digest, None)
                logger.info("backdeps_removed", digest=digest)
            else:
                self._dependents[digest] = digests
                logger.info("backdeps_updated", digest=digest, rdeps=sorted(digests))

    def __len__(self) -> int:
        """Return the number of digests with at least one dependent."""
        return len(self._dependents)

    def __contains__(self, digest: str) -> bool:
        return digest in self._dependents

    def __repr__(self) -> str:
        edges = sum(len(d) for d in self._dependents.values())
        return f"BackDepGraph(digests={len(self._dependents)}, edges={edges})"
