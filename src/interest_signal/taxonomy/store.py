"""Taxonomy store: immutable index of leaves and intent-signal definitions.

The store is built once at startup and only read afterwards.  It keeps:
  - _leaves: primary index by ``(sector, subsector, intent_state)``
  - _by_sector: secondary index mapping sectors to their leaf keys
  - _intents: intent-signal definitions in declaration order

Duplicate leaf keys or intent labels are rejected at construction.
"""

from __future__ import annotations

from collections.abc import Iterable
from types import MappingProxyType

from interest_signal.taxonomy.models import IntentSignalSpec, TagKey, TaxonomyLeaf


class TaxonomyStore:
    """Read-only taxonomy used by the tag extractor and intent detector."""

    def __init__(
        self,
        leaves: Iterable[TaxonomyLeaf] = (),
        intent_signals: Iterable[IntentSignalSpec] = (),
    ) -> None:
        index: dict[TagKey, TaxonomyLeaf] = {}
        by_sector: dict[str, list[TagKey]] = {}
        for leaf in leaves:
            if leaf.key in index:
                raise ValueError(f"Duplicate taxonomy leaf: {leaf.key.path!r}")
            index[leaf.key] = leaf
            by_sector.setdefault(leaf.sector, []).append(leaf.key)

        intents: dict[str, IntentSignalSpec] = {}
        for spec in intent_signals:
            if spec.label in intents:
                raise ValueError(f"Duplicate intent label: {spec.label!r}")
            intents[spec.label] = spec

        self._leaves = MappingProxyType(index)
        self._by_sector = MappingProxyType(
            {sector: tuple(keys) for sector, keys in by_sector.items()},
        )
        self._intents = tuple(intents.values())

    @classmethod
    def empty(cls) -> TaxonomyStore:
        return cls()

    @property
    def is_empty(self) -> bool:
        """True when there are no leaves to match against."""
        return not self._leaves

    def __len__(self) -> int:
        return len(self._leaves)

    def get(self, key: TagKey | tuple[str, str, str]) -> TaxonomyLeaf | None:
        return self._leaves.get(TagKey(*key))

    def leaves(self) -> tuple[TaxonomyLeaf, ...]:
        return tuple(self._leaves.values())

    def sectors(self) -> tuple[str, ...]:
        return tuple(self._by_sector)

    def leaves_for_sector(self, sector: str) -> tuple[TaxonomyLeaf, ...]:
        return tuple(self._leaves[k] for k in self._by_sector.get(sector, ()))

    def intent_signals(self) -> tuple[IntentSignalSpec, ...]:
        return self._intents

    def intent_labels(self) -> tuple[str, ...]:
        return tuple(spec.label for spec in self._intents)
