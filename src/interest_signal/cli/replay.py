"""CLI handler for ``interest-signal replay``."""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from pathlib import Path

import yaml

from interest_signal.cli.report import (
    format_debug_json,
    format_matching_json,
    format_matching_table,
)
from interest_signal.config import EngineConfig, load_engine_config
from interest_signal.engine import InterestSignalEngine
from interest_signal.telemetry import LoggerTelemetrySink


def run_replay(args: Namespace) -> None:
    obs_path = Path(args.observations)
    if not obs_path.is_file():
        print(f"Error: observations file does not exist: {obs_path}", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_engine_config(args.config) if args.config else EngineConfig()
    except (OSError, yaml.YAMLError, ValueError, TypeError) as exc:
        print(f"Error: could not load engine config {args.config}: {exc}", file=sys.stderr)
        sys.exit(1)

    engine = InterestSignalEngine.from_taxonomy_file(
        args.taxonomy, config, telemetry_sink=LoggerTelemetrySink(),
    )
    if args.geo_bucket:
        engine.set_geo_bucket(args.geo_bucket)

    processed = 0
    with open(obs_path, encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                raw = json.loads(line)
            except json.JSONDecodeError as exc:
                print(f"Warning: skipping line {lineno}: {exc}", file=sys.stderr)
                continue
            engine.process_observation(raw)
            processed += 1

    if args.debug:
        print(format_debug_json(engine.get_current_profile()))
        return

    export = engine.export_for_matching()
    if args.json:
        print(format_matching_json(export, processed))
    else:
        print(format_matching_table(export, processed))
