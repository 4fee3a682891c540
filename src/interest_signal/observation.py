"""Observation boundary: the per-visit record supplied by the host.

Every field is coerced to a safe default on the way in, so downstream
components never see ``None``, NaN or a wrongly-typed value.  Hosts may send
camelCase (``timeOnPage``) or snake_case (``time_on_page``) keys.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from interest_signal.parsing import non_negative, parse_timestamp

logger = logging.getLogger(__name__)

_MAX_SCROLL_PERCENT = 100.0


class _BoundaryModel(BaseModel):
    """Lenient settings for host-supplied records: extra keys are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


class PageMeta(_BoundaryModel):
    description: str = ""
    keywords: str = ""
    author: str = ""
    type: str = ""

    @field_validator("description", "keywords", "author", "type", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ", ".join(v for v in value if isinstance(v, str))
        return _text(value)


class DomSignals(_BoundaryModel):
    matched_selectors: tuple[str, ...] = Field(default=(), alias="matchedSelectors")

    @field_validator("matched_selectors", mode="before")
    @classmethod
    def coerce_selectors(cls, value: Any) -> tuple[str, ...]:
        if not isinstance(value, (list, tuple, set, frozenset)):
            return ()
        return tuple(v.strip() for v in value if isinstance(v, str) and v.strip())


class Observation(_BoundaryModel):
    """One page visit: text, metadata and interaction metrics."""

    url: str = ""
    title: str = ""
    content: str = ""
    meta: PageMeta = Field(default_factory=PageMeta)
    time_on_page: float = Field(default=0.0, alias="timeOnPage")
    scroll_depth: float = Field(default=0.0, alias="scrollDepth")
    interaction_count: float = Field(default=0.0, alias="interactionCount")
    dom_signals: DomSignals = Field(default_factory=DomSignals, alias="domSignals")
    session_id: str = Field(default="", alias="sessionId")
    timestamp: datetime | None = None

    @field_validator("url", "title", "content", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _text(value)

    @field_validator("session_id", mode="before")
    @classmethod
    def coerce_session_id(cls, value: Any) -> str:
        if isinstance(value, bool) or value is None:
            return ""
        if isinstance(value, (int, float)):
            return str(value)
        return _text(value)

    @field_validator("meta", mode="before")
    @classmethod
    def coerce_meta(cls, value: Any) -> Any:
        if isinstance(value, PageMeta):
            return value
        return dict(value) if isinstance(value, Mapping) else {}

    @field_validator("dom_signals", mode="before")
    @classmethod
    def coerce_dom_signals(cls, value: Any) -> Any:
        if isinstance(value, DomSignals):
            return value
        return dict(value) if isinstance(value, Mapping) else {}

    @field_validator("time_on_page", "interaction_count", mode="before")
    @classmethod
    def coerce_metric(cls, value: Any) -> float:
        return non_negative(value)

    @field_validator("scroll_depth", mode="before")
    @classmethod
    def coerce_scroll(cls, value: Any) -> float:
        return min(non_negative(value), _MAX_SCROLL_PERCENT)

    @field_validator("timestamp", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @classmethod
    def from_raw(cls, raw: Any) -> Observation:
        """Build an observation from an untrusted mapping.  Never raises."""
        if isinstance(raw, Observation):
            return raw
        if not isinstance(raw, Mapping):
            logger.warning("Observation must be a mapping, got %s", type(raw).__name__)
            return cls()
        data = dict(raw)
        # The collector historically sent the interaction count as "interactions".
        if "interactions" in data and "interactionCount" not in data and "interaction_count" not in data:
            data["interactionCount"] = data.pop("interactions")
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            logger.warning("Malformed observation, using safe defaults: %s", exc)
            return cls()

    @property
    def hostname(self) -> str:
        return hostname_of(self.url)

    def text_blob(self) -> str:
        """Lower-cased title, content and meta description used for matching."""
        return f"{self.title} {self.content} {self.meta.description}".lower()


def hostname_of(url: str) -> str:
    """Lower-cased hostname of *url*, or ``""`` if it cannot be parsed."""
    if not url:
        return ""
    try:
        host = urlsplit(url).hostname
    except ValueError:
        logger.warning("Invalid observation URL: %r", url)
        return ""
    if not host:
        logger.debug("Observation URL has no hostname: %r", url)
        return ""
    return host
