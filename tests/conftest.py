"""Shared fixtures for index tests."""

import os
from pathlib import Path
from typing import Optional, Sequence, Tuple

import pytest
import structlog
import yaml

from depindex.records import ArtifactRecord

BASE_MTIME_NS = 1_700_000_000 * 10**9


@pytest.fixture(autouse=True)
def reset_structlog():
    """Keep logging configuration from leaking between tests."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_record():
    """Build an ArtifactRecord without touching the filesystem."""
    def _make(
        name: str,
        digest: str,
        deps: Sequence[str] = (),
        path: Optional[str] = None,
        mtime: int = BASE_MTIME_NS,
    ) -> ArtifactRecord:
        return ArtifactRecord(
            name=name,
            path=path if path is not None else f"/lib/{name.lower()}.cmi",
            mtime=mtime,
            digest=digest,
            deps=tuple(deps),
        )
    return _make


@pytest.fixture
def write_artifact():
    """
    Write an artifact manifest and pin its modification time.

    The manifest lists the artifact's own (name, digest) pair first,
    followed by the given dependency pairs.
    """
    def _write(
        path: Path,
        name: str,
        digest: str,
        deps: Sequence[Tuple[str, Optional[str]]] = (),
        mtime_ns: int = BASE_MTIME_NS,
    ) -> Path:
        crcs = [[name, digest]] + [[dep_name, dep_digest] for dep_name, dep_digest in deps]
        path.write_text(yaml.safe_dump({"name": name, "crcs": crcs}), encoding="utf-8")
        os.utime(path, ns=(mtime_ns, mtime_ns))
        return path
    return _write
