"""CLI handler for ``interest-signal taxonomy-check``."""

from __future__ import annotations

import sys
from argparse import Namespace
from pathlib import Path

import yaml

from interest_signal.cli.report import format_taxonomy_json, format_taxonomy_table
from interest_signal.taxonomy.loader import load_taxonomy_file


def run_taxonomy_check(args: Namespace) -> None:
    path = Path(args.taxonomy)
    if not path.is_file():
        print(f"Error: taxonomy file does not exist: {path}", file=sys.stderr)
        sys.exit(1)

    try:
        store = load_taxonomy_file(path)
    except (OSError, yaml.YAMLError, ValueError, TypeError) as exc:
        print(f"Error: could not load taxonomy {path.name}: {exc}", file=sys.stderr)
        sys.exit(1)

    if store.is_empty:
        print("Taxonomy has no valid leaves.", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(format_taxonomy_json(store))
    else:
        print(format_taxonomy_table(store))
