"""Record and lookup result types for the digest index."""

from dataclasses import dataclass
from typing import Tuple, Union

from .errors import NotFoundError


@dataclass(frozen=True)
class ArtifactRecord:
    """
    One compiled interface artifact as last read from disk.
    
    Attributes:
        name: Module name declared by the artifact.
        path: Filesystem path the artifact was read from.
        mtime: Modification time in nanoseconds, captured at read time.
        digest: The artifact's own content digest (lowercase hex).
        deps: Digests of the units this artifact depends on, in manifest order.
    """
    
    name: str
    path: str
    mtime: int
    digest: str
    deps: Tuple[str, ...] = ()
    
    def to_dict(self) -> dict:
        """Return a JSON-friendly representation."""
        return {
            "name": self.name,
            "path": self.path,
            "mtime": self.mtime,
            "digest": self.digest,
            "deps": list(self.deps),
        }


@dataclass(frozen=True)
class Found:
    """Successful lookup."""
    
    record: ArtifactRecord
    
    @property
    def found(self) -> bool:
        return True
    
    def unwrap(self) -> ArtifactRecord:
        return self.record


@dataclass(frozen=True)
class NotFound:
    """Lookup for a key that is not indexed."""
    
    key: str
    
    @property
    def found(self) -> bool:
        return False
    
    def unwrap(self) -> ArtifactRecord:
        """Raise NotFoundError; there is no record to return."""
        raise NotFoundError(self.key)


LookupResult = Union[Found, NotFound]
