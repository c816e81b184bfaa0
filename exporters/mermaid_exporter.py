"""Mermaid flowchart exporter for the digest index."""

import os
import re
from pathlib import Path
from typing import Dict, List, Optional

from depindex.records import ArtifactRecord
from depindex.store import DigestIndex
from .common import connected_digests, display_path, record_map, short_digest

_LABEL_ENTITIES = {'"': "#quot;", "[": "#91;", "]": "#93;"}


def to_mermaid(
    index: DigestIndex,
    orientation: str = "LR",
    base: Optional[Path] = None,
    group_by_directory: bool = False,
    include_external: bool = True,
    show_all: bool = False,
) -> str:
    """
    Convert an index to Mermaid flowchart syntax.

    Edges point from a dependent artifact to the artifact it depends on.

    Args:
        index: The index to export. It is compacted first.
        orientation: Flowchart orientation (LR, TD, TB, RL, BT).
        base: Optional base path for relative path display.
        group_by_directory: If True, group artifacts by their directory.
        include_external: If True, show dependency digests that are not indexed.
        show_all: If True, include artifacts with no back-dependency edges.

    Returns:
        Mermaid flowchart string.
    """
    records = record_map(index)
    lines = [f"flowchart {orientation}"]

    connected = connected_digests(index)
    shown = sorted(
        (r for r in records.values() if show_all or r.digest in connected),
        key=lambda r: r.path,
    )
    external = sorted(d for d in connected if d not in records) if include_external else []

    if group_by_directory:
        groups: Dict[str, List[ArtifactRecord]] = {}
        for record in shown:
            directory = display_path(os.path.dirname(record.path) or ".", base)
            groups.setdefault(directory, []).append(record)
        for directory in sorted(groups):
            group_id = _sanitize_id("dir_" + directory)
            lines.append(f"    subgraph {group_id}[{_escape_label(directory)}]")
            for record in groups[directory]:
                lines.append(f'        {_node_id(record.digest)}["{_label(record)}"]')
            lines.append("    end")
            lines.append("")
    else:
        for record in shown:
            lines.append(f'    {_node_id(record.digest)}["{_label(record)}"]')

    if external:
        lines.append("")
        lines.append("    %% Dependencies that are not indexed")
        for digest in external:
            node_id = _node_id(digest)
            lines.append(f'    {node_id}["{short_digest(digest)} [EXTERNAL]"]')
            lines.append(f"    style {node_id} stroke:#ff0000,stroke-dasharray: 5 5")

    lines.append("")
    for dependency, dependent in index.graph.iter_edges():
        if dependency not in records and not include_external:
            continue
        lines.append(f"    {_node_id(dependent)} --> {_node_id(dependency)}")

    return "\n".join(lines)


def _label(record: ArtifactRecord) -> str:
    return _escape_label(f"{record.name} {short_digest(record.digest)}")


def _escape_label(text: str) -> str:
    """Replace characters that would end a Mermaid label with entity codes."""
    return "".join(_LABEL_ENTITIES.get(char, char) for char in text)


def _node_id(digest: str) -> str:
    return _sanitize_id("d_" + digest)


def _sanitize_id(value: str) -> str:
    """Sanitize a string to be a valid Mermaid ID."""
    sanitized = re.sub(r"[/\\.\-]", "_", value)
    sanitized = re.sub(r"[^a-zA-Z0-9_]", "", sanitized)
    if sanitized and not sanitized[0].isalpha():
        sanitized = "n_" + sanitized
    return sanitized or "unknown"
