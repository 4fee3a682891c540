"""Output formatters for the CLI: aligned tables and JSON."""

from __future__ import annotations

import json
from typing import Any

from interest_signal.profile import MatchingExport
from interest_signal.taxonomy.store import TaxonomyStore


def _row(cols: list[str], widths: list[int]) -> str:
    return "  ".join(c.ljust(w) for c, w in zip(cols, widths))


def format_matching_table(export: MatchingExport, processed: int) -> str:
    lines: list[str] = []
    lines.append("Interest Profile")
    lines.append("=" * 60)
    widths = [36, 8, 10]
    lines.append(_row(["Sector/Subsector", "Score", "Intent"], widths))
    lines.append("-" * 60)
    for interest in export.interests:
        lines.append(
            _row(
                [interest.sector[:36], f"{interest.score:.1f}", f"{interest.has_intent:.1f}"],
                widths,
            )
        )
    if not export.interests:
        lines.append("  (no interests above threshold)")
    lines.append("-" * 60)
    lines.append(
        f"Observations: {processed}"
        f" | PtA: {export.pta_score:.2f}"
        f" | geo: {export.geo_bucket}"
    )
    lines.append(f"Commitment: {export.commitment}")
    return "\n".join(lines)


def format_matching_json(export: MatchingExport, processed: int) -> str:
    payload = export.to_dict()
    payload["observations"] = processed
    return json.dumps(payload, indent=2)


def format_debug_json(profile: dict[str, Any]) -> str:
    return json.dumps(profile, indent=2, sort_keys=True)


def taxonomy_summary(store: TaxonomyStore) -> dict[str, Any]:
    sectors = {
        sector: len(store.leaves_for_sector(sector)) for sector in store.sectors()
    }
    return {
        "sectors": sectors,
        "leaf_count": len(store),
        "intent_labels": [
            {"label": spec.label, "boost": spec.boost} for spec in store.intent_signals()
        ],
    }


def format_taxonomy_table(store: TaxonomyStore) -> str:
    summary = taxonomy_summary(store)
    lines: list[str] = []
    lines.append("Taxonomy Summary")
    lines.append("=" * 48)
    widths = [36, 8]
    lines.append(_row(["Sector", "Leaves"], widths))
    lines.append("-" * 48)
    for sector, count in summary["sectors"].items():
        lines.append(_row([sector[:36], str(count)], widths))
    lines.append("-" * 48)
    lines.append("")
    if summary["intent_labels"]:
        lines.append("Intent Labels")
        for item in sorted(summary["intent_labels"], key=lambda i: i["boost"], reverse=True):
            lines.append(f"  {item['label']}  boost={item['boost']:.2f}")
        lines.append("")
    n = summary["leaf_count"]
    lines.append(
        f"Taxonomy: {len(summary['sectors'])} sector{'s' if len(summary['sectors']) != 1 else ''}"
        f" | {n} lea{'ves' if n != 1 else 'f'}"
        f" | {len(summary['intent_labels'])} intent labels"
    )
    return "\n".join(lines)


def format_taxonomy_json(store: TaxonomyStore) -> str:
    return json.dumps(taxonomy_summary(store), indent=2)
