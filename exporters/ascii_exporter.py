"""ASCII tree-style exporter showing each artifact and what depends on it."""

from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from depindex.records import ArtifactRecord
from depindex.store import DigestIndex
from .common import connected_digests, display_path, record_map, short_digest


# Unicode tree characters
UNICODE_BRANCH = "├── "
UNICODE_LAST = "└── "
UNICODE_VERTICAL = "│   "
UNICODE_SPACE = "    "

# ASCII fallback characters
ASCII_BRANCH = "|-- "
ASCII_LAST = "\\-- "
ASCII_VERTICAL = "|   "
ASCII_SPACE = "    "


def to_ascii(
    index: DigestIndex,
    base: Optional[Path] = None,
    style: str = "tree",
    include_external: bool = True,
    show_all: bool = False,
) -> str:
    """
    Render the back-dependency graph as trees.

    Each tree starts at an artifact that depends on nothing else in the
    view and lists, below every node, the artifacts depending on it.

    Args:
        index: The index to export. It is compacted first.
        base: Optional base path for relative path display.
        style: "tree" (Unicode) or "ascii" (pure ASCII).
        include_external: If True, show dependency digests that are not indexed.
        show_all: If True, include artifacts with no back-dependency edges.

    Returns:
        ASCII tree string.
    """
    records = record_map(index)

    if style == "ascii":
        chars = (ASCII_BRANCH, ASCII_LAST, ASCII_VERTICAL, ASCII_SPACE)
    else:
        chars = (UNICODE_BRANCH, UNICODE_LAST, UNICODE_VERTICAL, UNICODE_SPACE)

    nodes = connected_digests(index)
    if not include_external:
        nodes = {d for d in nodes if d in records}
    if show_all:
        nodes |= set(records)

    dependents: Set[str] = set()
    for node in nodes:
        dependents.update(index.graph.dependents(node))
    roots = sorted(nodes - dependents, key=lambda d: _sort_key(d, records))

    # Every node is a dependent (cycles only): start anywhere.
    if not roots:
        roots = sorted(nodes, key=lambda d: _sort_key(d, records))

    lines: List[str] = []
    for i, root in enumerate(roots):
        _render_node(
            index=index,
            digest=root,
            records=records,
            base=base,
            prefix="",
            is_last=True,
            chars=chars,
            visited=set(),
            lines=lines,
            is_root=True,
        )
        if i < len(roots) - 1:
            lines.append("")

    return "\n".join(lines)


def _render_node(
    index: DigestIndex,
    digest: str,
    records: Dict[str, ArtifactRecord],
    base: Optional[Path],
    prefix: str,
    is_last: bool,
    chars: Tuple[str, str, str, str],
    visited: Set[str],
    lines: List[str],
    is_root: bool = False,
) -> None:
    """Recursively render a digest and the artifacts depending on it."""
    branch, last, vertical, space = chars

    label = _label(digest, records, base)
    is_cycle = digest in visited
    cycle_marker = " [*]" if is_cycle else ""

    if is_root:
        lines.append(f"{label}{cycle_marker}")
    else:
        connector = last if is_last else branch
        lines.append(f"{prefix}{connector}{label}{cycle_marker}")

    if is_cycle:
        return

    visited.add(digest)

    children = sorted(index.graph.dependents(digest), key=lambda d: _sort_key(d, records))
    if is_root:
        new_prefix = ""
    else:
        new_prefix = prefix + (space if is_last else vertical)

    for position, child in enumerate(children, start=1):
        _render_node(
            index=index,
            digest=child,
            records=records,
            base=base,
            prefix=new_prefix,
            is_last=position == len(children),
            chars=chars,
            visited=visited,
            lines=lines,
        )

    # Allow the same artifact under several branches; only a path back to
    # itself is a cycle.
    visited.discard(digest)


def _label(digest: str, records: Dict[str, ArtifactRecord], base: Optional[Path]) -> str:
    record = records.get(digest)
    if record is None:
        return f"{short_digest(digest)} [EXTERNAL]"
    return f"{record.name} ({display_path(record.path, base)}) {short_digest(digest)}"


def _sort_key(digest: str, records: Dict[str, ArtifactRecord]) -> Tuple[int, str]:
    """Indexed artifacts by path first, then external digests."""
    record = records.get(digest)
    if record is None:
        return (1, digest)
    return (0, record.path)
