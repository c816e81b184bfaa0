#!/usr/bin/env python3
"""
cmindex CLI

Scan directories of compiled interface artifacts into a digest index and
report which artifacts depend on which.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from config import ConfigError, IndexSettings, apply_settings, load_settings
from depindex import DigestIndex, NotFound
from depindex.log import configure_logging
from exporters import to_ascii, to_json, to_mermaid
from scanner import update


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="cmindex",
        description="Index compiled interface artifacts by digest and report back-dependencies.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cmindex _build/lib                     # ASCII report of back-dependencies
  cmindex _build/lib -f json -o idx.json # JSON report to file
  cmindex _build/lib --rdeps 9f86d08188  # Dependents of one digest
  cmindex _build/lib --find-path _build/lib/foo.cmi
        """,
    )

    parser.add_argument(
        "directories",
        nargs="*",
        help="Directories holding artifacts (default: directories from the config file)",
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="TOML config file (default: cmindex.toml if present)",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["ascii", "mermaid", "json"],
        default="ascii",
        help="Report format (default: ascii)",
    )

    parser.add_argument(
        "--ext",
        type=str,
        default=None,
        help="Artifact file extension (default: .cmi)",
    )

    query = parser.add_mutually_exclusive_group()
    query.add_argument(
        "--rdeps",
        metavar="DIGEST",
        default=None,
        help="Print the digests of artifacts depending on DIGEST",
    )
    query.add_argument(
        "--find-digest",
        metavar="DIGEST",
        default=None,
        help="Print the artifact with the given digest",
    )
    query.add_argument(
        "--find-path",
        metavar="PATH",
        default=None,
        help="Print the artifact read from PATH",
    )

    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--group-by-dir",
        action="store_true",
        help="Group nodes by directory in Mermaid output",
    )

    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="ASCII output style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )

    parser.add_argument(
        "--ignore-external",
        action="store_true",
        help="Hide dependency digests that are not indexed",
    )

    parser.add_argument(
        "--show-all",
        action="store_true",
        help="Include artifacts with no back-dependency edges",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Log level (default: $CMINDEX_LOG_LEVEL or WARNING)",
    )

    parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default=None,
        help="Log output format (default: console)",
    )

    return parser.parse_args(args)


def resolve_settings(parsed) -> IndexSettings:
    """Merge config file values with command line overrides."""
    settings = load_settings(Path(parsed.config) if parsed.config else None)
    overrides = {}
    if parsed.directories:
        overrides["directories"] = parsed.directories
    if parsed.ext:
        overrides["extension"] = parsed.ext
    if parsed.log_level:
        overrides["log_level"] = parsed.log_level
    if parsed.log_format:
        overrides["log_format"] = parsed.log_format
    return apply_settings(settings, overrides)


def render(index: DigestIndex, parsed) -> Optional[str]:
    """Produce the requested output, or None when a lookup finds nothing."""
    if parsed.rdeps:
        return "\n".join(index.reverse_dependencies(parsed.rdeps.lower()))

    if parsed.find_digest or parsed.find_path:
        if parsed.find_digest:
            result = index.find_by_digest(parsed.find_digest.lower())
        else:
            result = index.find_by_path(parsed.find_path)
        if isinstance(result, NotFound):
            return None
        return json.dumps(result.record.to_dict(), indent=2)

    include_external = not parsed.ignore_external
    if parsed.format == "mermaid":
        return to_mermaid(
            index,
            orientation=parsed.orientation,
            group_by_directory=parsed.group_by_dir,
            include_external=include_external,
            show_all=parsed.show_all,
        )
    elif parsed.format == "json":
        return to_json(index, include_external=include_external)
    else:  # ascii (default)
        return to_ascii(
            index,
            style=parsed.ascii_style,
            include_external=include_external,
            show_all=parsed.show_all,
        )


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    try:
        settings = resolve_settings(parsed)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    configure_logging(settings.log_level, settings.log_format)

    if not settings.directories:
        print("Error: no artifact directories given", file=sys.stderr)
        return 1

    index = DigestIndex()
    update(index, settings.directories, settings.extension)

    output = render(index, parsed)
    if output is None:
        key = parsed.find_digest or parsed.find_path
        print(f"Error: not found: {key}", file=sys.stderr)
        return 1

    if parsed.output:
        try:
            output_path = Path(parsed.output)
            output_path.write_text(output, encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
