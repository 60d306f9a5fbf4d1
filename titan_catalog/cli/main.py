"""
Titan Catalog CLI.

Commands:
  titans      Load titan chassis templates (with override data)
  formations  Load maniple templates
  legions     Load legion templates
  upgrades    Load wargear upgrade templates
  traits      Load princeps trait templates
  parse       Summarize the node tree of a local catalog file
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from collections import Counter
from pathlib import Path

import httpx
import yaml

from titan_catalog.config import load_config
from titan_catalog.extract.pipeline import (
    load_formation_templates,
    load_legion_templates,
    load_titan_templates,
    load_trait_templates,
    load_upgrade_templates,
)
from titan_catalog.extract.utils import to_plain
from titan_catalog.markup import iter_nodes, parse

logger = logging.getLogger(__name__)

LOADERS = {
    "titans": load_titan_templates,
    "formations": load_formation_templates,
    "legions": load_legion_templates,
    "upgrades": load_upgrade_templates,
    "traits": load_trait_templates,
}


def _make_config(args):
    """Layer CLI flags over the YAML configuration."""
    changes = {}
    if args.base_url:
        changes["base_url"] = args.base_url
    if args.files:
        changes["files"] = list(args.files)
    if args.overrides_url:
        changes["overrides_url"] = args.overrides_url
    if args.timeout is not None:
        changes["timeout"] = args.timeout
    return dataclasses.replace(load_config(args.config), **changes)


def _render(data, fmt: str) -> str:
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False)


def _emit(data, args) -> None:
    text = _render(data, args.format)
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(text)


def load_cmd(args) -> int:
    """Run one concept loader and print its result."""
    config = _make_config(args)
    loader = LOADERS[args.command]
    try:
        result = asyncio.run(loader(config))
    except httpx.HTTPError as e:
        logger.error("Failed to load %s: %s", args.command, e)
        return 1
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)
    _emit(to_plain(result), args)
    return 0


def parse_cmd(args) -> int:
    """Print tag counts for a local catalog file."""
    path = Path(args.file)
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 1
    root = parse(path.read_text(encoding="utf-8", errors="replace"))
    counts = Counter(node.name for node in iter_nodes(root) if node is not root)
    summary = {
        "file": str(path),
        "nodes": sum(counts.values()),
        "tags": dict(counts.most_common()),
    }
    _emit(summary, args)
    return 0


def _add_output_args(p):
    p.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Output format (default: json)",
    )
    p.add_argument("--output", "-o", help="Write output to this file instead of stdout")


def build_parser():
    parser = argparse.ArgumentParser(
        description="Titan Catalog CLI - extract game templates from catalog data"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    sub = parser.add_subparsers(dest="command")

    for name in LOADERS:
        load_parser = sub.add_parser(name, help=f"Load {name} from the catalog")
        load_parser.add_argument("--config", type=Path, help="YAML config file")
        load_parser.add_argument("--base-url", help="Catalog base URL")
        load_parser.add_argument(
            "--file",
            dest="files",
            action="append",
            help="Catalog file name (repeatable, in scan order)",
        )
        load_parser.add_argument("--overrides-url", help="Override data base URL")
        load_parser.add_argument("--timeout", type=float, help="HTTP timeout in seconds")
        _add_output_args(load_parser)
        load_parser.set_defaults(func=load_cmd)

    parse_parser = sub.add_parser("parse", help="Summarize a local catalog file")
    parse_parser.add_argument("file", help="Path to a .cat/.gst file")
    _add_output_args(parse_parser)
    parse_parser.set_defaults(func=parse_cmd)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 1
    try:
        return args.func(args)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
