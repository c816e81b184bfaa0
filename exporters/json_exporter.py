"""JSON exporter for the digest index (machine-friendly format)."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from depindex.store import DigestIndex
from .common import display_path, record_map


def to_json(
    index: DigestIndex,
    base: Optional[Path] = None,
    indent: int = 2,
    include_external: bool = True,
) -> str:
    """
    Convert an index to JSON.

    Args:
        index: The index to export. It is compacted first.
        base: Optional base path for relative path display.
        indent: JSON indentation level.
        include_external: If True, include edges whose dependency digest is
                          not indexed.

    Returns:
        JSON string with "artifacts" and "edges" lists.
    """
    records = record_map(index)

    artifacts: List[Dict[str, Any]] = []
    for record in sorted(records.values(), key=lambda r: r.path):
        entry = record.to_dict()
        entry["path"] = display_path(record.path, base)
        entry["dependents"] = index.reverse_dependencies(record.digest)
        artifacts.append(entry)

    edges: List[Dict[str, Any]] = []
    for dependency, dependent in index.graph.iter_edges():
        external = dependency not in records
        if external and not include_external:
            continue
        edge: Dict[str, Any] = {"dependency": dependency, "dependent": dependent}
        if external:
            edge["external"] = True
        edges.append(edge)

    data: Dict[str, Any] = {
        "artifacts": artifacts,
        "edges": edges,
    }

    return json.dumps(data, indent=indent)
