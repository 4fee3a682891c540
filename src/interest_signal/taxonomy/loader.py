"""Taxonomy loading from YAML or JSON documents.

Expected document shape::

    taxonomy:
      shopping:                   # sector
        apparel:                  # subsector
          purchase_intent:        # intent state
            patterns: [size guide]
            keywords: [cart, sneakers]
            domains: [shop.example.com]
            weight: 1.2
    intentSignals:
      cart_activity:
        urlPatterns: [/cart]
        domElements: [.add-to-cart]
        patterns: [add to cart]
        boost: 2.0

Both camelCase and snake_case keys are accepted.  A malformed leaf or
intent definition is logged and skipped; the rest of the document loads.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from interest_signal.taxonomy.models import IntentSignalSpec, TaxonomyLeaf
from interest_signal.taxonomy.store import TaxonomyStore

logger = logging.getLogger(__name__)


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _parse_leaves(tree: Any) -> list[TaxonomyLeaf]:
    if not isinstance(tree, dict):
        logger.warning("Taxonomy root must be a mapping, got %s", type(tree).__name__)
        return []

    leaves: list[TaxonomyLeaf] = []
    for sector, subsectors in tree.items():
        if not isinstance(subsectors, dict):
            logger.warning("Skipping sector %r: expected a mapping of subsectors", sector)
            continue
        for subsector, states in subsectors.items():
            if not isinstance(states, dict):
                logger.warning("Skipping %s/%s: expected a mapping of intent states", sector, subsector)
                continue
            for state, entry in states.items():
                path = f"{sector}/{subsector}/{state}"
                if not isinstance(entry, dict):
                    logger.warning("Skipping taxonomy leaf %s: expected a mapping", path)
                    continue
                try:
                    leaves.append(
                        TaxonomyLeaf(
                            sector=str(sector),
                            subsector=str(subsector),
                            intent_state=str(state),
                            patterns=entry.get("patterns", []),
                            keywords=entry.get("keywords", []),
                            domains=entry.get("domains", []),
                            weight=entry.get("weight"),
                        )
                    )
                except ValidationError as exc:
                    logger.warning("Skipping malformed taxonomy leaf %s: %s", path, exc)
    return leaves


def _parse_intents(signals: Any) -> list[IntentSignalSpec]:
    if signals is None:
        return []
    if not isinstance(signals, dict):
        logger.warning("intentSignals must be a mapping, got %s", type(signals).__name__)
        return []

    specs: list[IntentSignalSpec] = []
    for label, entry in signals.items():
        if not isinstance(entry, dict):
            logger.warning("Skipping intent signal %r: expected a mapping", label)
            continue
        try:
            specs.append(
                IntentSignalSpec(
                    label=str(label),
                    url_patterns=_first(entry, "url_patterns", "urlPatterns", default=[]),
                    dom_selectors=_first(
                        entry, "dom_selectors", "domElements", "dom_elements", default=[],
                    ),
                    content_patterns=_first(
                        entry, "content_patterns", "patterns", default=[],
                    ),
                    boost=entry.get("boost"),
                    price_evidence=_first(
                        entry, "price_evidence", "priceEvidence", default=True,
                    ),
                )
            )
        except ValidationError as exc:
            logger.warning("Skipping malformed intent signal %r: %s", label, exc)
    return specs


def taxonomy_from_mapping(data: dict[str, Any]) -> TaxonomyStore:
    """Validate a parsed taxonomy document and build the store."""
    if not isinstance(data, dict):
        raise ValueError("Taxonomy document root must be a mapping")
    leaves = _parse_leaves(data.get("taxonomy", {}))
    intents = _parse_intents(_first(data, "intent_signals", "intentSignals"))
    store = TaxonomyStore(leaves, intents)
    logger.info(
        "Loaded taxonomy with %d sectors, %d leaves, %d intent labels",
        len(store.sectors()), len(store), len(store.intent_signals()),
    )
    return store


def load_taxonomy_file(path: str | Path) -> TaxonomyStore:
    """Load a taxonomy document.  JSON files parse as YAML."""
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ValueError(f"Empty taxonomy file: {path}")
    if not isinstance(raw, dict):
        raise ValueError(f"Taxonomy file root must be a mapping: {path}")
    return taxonomy_from_mapping(raw)


def load_taxonomy_or_empty(path: str | Path | None) -> TaxonomyStore:
    """Like :func:`load_taxonomy_file` but degrades to an empty store on any load failure."""
    if path is None:
        logger.warning("No taxonomy path supplied, using empty taxonomy")
        return TaxonomyStore.empty()
    try:
        return load_taxonomy_file(path)
    except (OSError, yaml.YAMLError, ValueError, TypeError) as exc:
        logger.warning("Failed to load taxonomy from %s, using empty taxonomy: %s", path, exc)
        return TaxonomyStore.empty()
