"""CLI entry point: python -m interest_signal <command>."""

from __future__ import annotations

import argparse
import logging
import sys


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="interest-signal",
        description="Interest signal engine operational tools",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    rp = sub.add_parser("replay", help="Replay a JSON-lines observation file through a fresh engine")
    rp.add_argument("--taxonomy", required=True, help="Path to taxonomy YAML/JSON file")
    rp.add_argument("--observations", required=True, help="Path to JSON-lines observations")
    rp.add_argument("--config", default="", help="Optional engine config YAML")
    rp.add_argument("--geo-bucket", default="", help="Coarse geo bucket to report")
    rp.add_argument("--json", action="store_true", default=False, help="Output as JSON")
    rp.add_argument(
        "--debug", action="store_true", default=False,
        help="Print the debug profile with raw window counts instead of the matching export",
    )

    tc = sub.add_parser("taxonomy-check", help="Validate a taxonomy file and summarize it")
    tc.add_argument("--taxonomy", required=True, help="Path to taxonomy YAML/JSON file")
    tc.add_argument("--json", action="store_true", default=False, help="Output as JSON")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "replay":
        from interest_signal.cli.replay import run_replay
        run_replay(args)
    elif args.command == "taxonomy-check":
        from interest_signal.cli.taxonomy_check import run_taxonomy_check
        run_taxonomy_check(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
