"""Pydantic models for taxonomy leaves and intent-signal definitions."""

from __future__ import annotations

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _StrictModel(BaseModel):
    """Shared strict, immutable model settings for taxonomy contracts."""

    model_config = ConfigDict(extra="forbid", frozen=True)


def _normalize_terms(values: list[str]) -> tuple[str, ...]:
    """Trim, lower-case and de-duplicate while preserving order."""
    seen: dict[str, None] = {}
    for value in values:
        if not isinstance(value, str):
            raise ValueError(f"expected string entries, got {type(value).__name__}")
        cleaned = value.strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


class TagKey(NamedTuple):
    """Three-level taxonomy address of a tag."""

    sector: str
    subsector: str
    intent_state: str

    @property
    def path(self) -> str:
        return f"{self.sector}/{self.subsector}/{self.intent_state}"

    @property
    def area(self) -> str:
        """``sector/subsector``, the granularity of intent boosts and matching."""
        return f"{self.sector}/{self.subsector}"


def split_tag_path(path: str) -> tuple[str, str]:
    """Return ``(sector, subsector)`` of a ``sector/subsector/state`` path."""
    parts = path.split("/")
    if len(parts) < 2:
        return parts[0], ""
    return parts[0], parts[1]


def area_of(path: str) -> str:
    sector, subsector = split_tag_path(path)
    return f"{sector}/{subsector}"


class TaxonomyLeaf(_StrictModel):
    """Evidence definition for one ``sector/subsector/intent_state`` leaf."""

    sector: str
    subsector: str
    intent_state: str
    patterns: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    domains: tuple[str, ...] = ()
    weight: float = Field(gt=0, allow_inf_nan=False)

    @field_validator("sector", "subsector", "intent_state")
    @classmethod
    def normalize_segment(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned or "/" in cleaned:
            raise ValueError(f"invalid taxonomy path segment: {value!r}")
        return cleaned

    @field_validator("patterns", "keywords", "domains", mode="before")
    @classmethod
    def normalize_lists(cls, values: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
        if values is None:
            return ()
        if isinstance(values, str):
            values = [values]
        return _normalize_terms(list(values))

    @property
    def key(self) -> TagKey:
        return TagKey(self.sector, self.subsector, self.intent_state)


class IntentSignalSpec(_StrictModel):
    """Signals that identify one purchase-funnel stage and the boost it earns."""

    label: str
    url_patterns: tuple[str, ...] = ()
    dom_selectors: tuple[str, ...] = ()
    content_patterns: tuple[str, ...] = ()
    boost: float = Field(ge=1.0, allow_inf_nan=False)
    price_evidence: bool = True

    @field_validator("label")
    @classmethod
    def normalize_label(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("intent label must not be empty")
        return cleaned

    @field_validator("url_patterns", "content_patterns", mode="before")
    @classmethod
    def normalize_patterns(cls, values: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
        if values is None:
            return ()
        if isinstance(values, str):
            values = [values]
        return _normalize_terms(list(values))

    @field_validator("dom_selectors", mode="before")
    @classmethod
    def normalize_selectors(cls, values: list[str] | tuple[str, ...] | None) -> tuple[str, ...]:
        # Selectors are compared verbatim; only whitespace is trimmed.
        if values is None:
            return ()
        if isinstance(values, str):
            values = [values]
        seen: dict[str, None] = {}
        for value in values:
            if not isinstance(value, str):
                raise ValueError(f"expected string selectors, got {type(value).__name__}")
            if value.strip():
                seen.setdefault(value.strip(), None)
        return tuple(seen)
