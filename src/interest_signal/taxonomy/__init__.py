"""Taxonomy models, the immutable store, and YAML/JSON loading."""

from interest_signal.taxonomy.loader import (
    load_taxonomy_file,
    load_taxonomy_or_empty,
    taxonomy_from_mapping,
)
from interest_signal.taxonomy.models import (
    IntentSignalSpec,
    TagKey,
    TaxonomyLeaf,
    area_of,
    split_tag_path,
)
from interest_signal.taxonomy.store import TaxonomyStore

__all__ = [
    "IntentSignalSpec",
    "TagKey",
    "TaxonomyLeaf",
    "TaxonomyStore",
    "area_of",
    "load_taxonomy_file",
    "load_taxonomy_or_empty",
    "split_tag_path",
    "taxonomy_from_mapping",
]
