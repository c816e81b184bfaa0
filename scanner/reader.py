"""Reader for compiled interface artifact manifests."""

import os
from typing import Any, List, Optional, Tuple

import yaml

from depindex.errors import ArtifactIOError, MalformedArtifact
from depindex.records import ArtifactRecord


def file_mtime(path: str) -> Optional[int]:
    """
    Return the modification time of path in nanoseconds.

    Returns:
        The mtime, or None if the path cannot be stat'ed. None never equals
        a recorded mtime, so a vanished file always looks changed.
    """
    try:
        return os.stat(path).st_mtime_ns
    except OSError:
        return None


def read_artifact(path: str) -> ArtifactRecord:
    """
    Read one artifact file and extract its name, digest and dependencies.

    The file is a YAML (or JSON) mapping with a module ``name`` and a
    ``crcs`` list of ``[name, digest-or-null]`` pairs. The pair naming the
    module itself carries its own digest; every other pair with a digest is
    a dependency.

    Args:
        path: Path to the artifact file.

    Returns:
        ArtifactRecord with mtime captured at read time.

    Raises:
        ArtifactIOError: If the file cannot be stat'ed, opened or decoded.
        MalformedArtifact: If the manifest is not well formed or lacks the
            artifact's own digest.
    """
    try:
        mtime = os.stat(path).st_mtime_ns
        with open(path, "r", encoding="utf-8") as handle:
            content = handle.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ArtifactIOError(path, e) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise MalformedArtifact(path, f"invalid manifest: {e}") from e

    name, crcs = _manifest(path, data)
    digest, deps = split_crcs(name, crcs)
    if digest is None:
        raise MalformedArtifact(path, f"no digest for {name!r} in its own manifest")

    return ArtifactRecord(
        name=name,
        path=path,
        mtime=mtime,
        digest=digest,
        deps=tuple(deps),
    )


def split_crcs(
    name: str,
    crcs: List[Tuple[str, Optional[str]]],
) -> Tuple[Optional[str], List[str]]:
    """
    Separate an artifact's own digest from the digests it depends on.

    Entries without a digest are skipped. Dependencies keep manifest order.

    Returns:
        (own digest or None, dependency digests)
    """
    own: Optional[str] = None
    deps: List[str] = []
    for entry_name, digest in crcs:
        if digest is None:
            continue
        if entry_name == name:
            own = digest
        else:
            deps.append(digest)
    return own, deps


def _manifest(path: str, data: Any) -> Tuple[str, List[Tuple[str, Optional[str]]]]:
    """Validate the parsed document and normalize its crcs entries."""
    if not isinstance(data, dict):
        raise MalformedArtifact(path, "manifest is not a mapping")

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedArtifact(path, "missing module name")

    raw = data.get("crcs", [])
    if not isinstance(raw, list):
        raise MalformedArtifact(path, "crcs is not a list")

    crcs: List[Tuple[str, Optional[str]]] = []
    for entry in raw:
        if not isinstance(entry, (list, tuple)) or len(entry) != 2:
            raise MalformedArtifact(path, f"bad crcs entry: {entry!r}")
        entry_name, digest = entry
        if not isinstance(entry_name, str):
            raise MalformedArtifact(path, f"bad crcs entry: {entry!r}")
        if digest is not None:
            digest = _normalize_digest(path, digest)
        crcs.append((entry_name, digest))

    return name, crcs


def _normalize_digest(path: str, value: Any) -> str:
    """Digests are opaque strings; lowercase them for stable comparison."""
    # An unquoted all-digit digest loads as an int and may have lost digits.
    if not isinstance(value, str):
        raise MalformedArtifact(path, f"digest is not a string: {value!r}")
    digest = value.strip().lower()
    if not digest:
        raise MalformedArtifact(path, "empty digest")
    return digest
