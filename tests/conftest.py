"""Test fixtures for interest signal engine tests."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from interest_signal.taxonomy.loader import taxonomy_from_mapping
from interest_signal.taxonomy.store import TaxonomyStore

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


def make_taxonomy_document() -> dict[str, Any]:
    """A small taxonomy in the camelCase shape hosts ship."""
    return {
        "taxonomy": {
            "shopping": {
                "apparel": {
                    "purchase_intent": {
                        "patterns": ["size guide"],
                        "keywords": ["cart"],
                        "domains": ["shop.example.com"],
                        "weight": 1.0,
                    },
                    "browse": {
                        "patterns": ["new arrivals"],
                        "keywords": ["sneakers", "jacket"],
                        "domains": [],
                        "weight": 0.8,
                    },
                },
            },
            "technology": {
                "software": {
                    "research": {
                        "patterns": ["python tutorial", "api reference"],
                        "keywords": ["python", "github"],
                        "domains": ["docs.python.org"],
                        "weight": 1.5,
                    },
                },
            },
        },
        "intentSignals": {
            "research_phase": {
                "urlPatterns": ["/blog", "/review"],
                "patterns": ["compare", "review"],
                "boost": 1.0,
            },
            "browse_products": {
                "urlPatterns": ["/products", "/category"],
                "patterns": ["new arrivals"],
                "boost": 1.2,
            },
            "cart_activity": {
                "urlPatterns": ["/cart"],
                "domElements": [".add-to-cart"],
                "patterns": ["add to cart"],
                "boost": 2.0,
            },
            "checkout": {
                "urlPatterns": ["/checkout"],
                "domElements": ["#payment-form"],
                "patterns": ["place order", "payment method"],
                "boost": 3.0,
                "priceEvidence": False,
            },
        },
    }


def make_test_taxonomy() -> TaxonomyStore:
    return taxonomy_from_mapping(make_taxonomy_document())


def make_cart_observation(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "url": "https://shop.example.com/cart",
        "title": "Your cart",
        "content": "Add to cart $49.99",
        "meta": {"description": ""},
        "timeOnPage": 120,
        "scrollDepth": 80,
        "interactionCount": 5,
        "domSignals": {"matchedSelectors": [".add-to-cart"]},
        "sessionId": "session-1",
    }
    base.update(overrides)
    return base


def make_neutral_observation(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "url": "https://news.example.org/weather",
        "title": "Weather today",
        "content": "Mild temperatures expected across the region",
        "meta": {"description": ""},
        "timeOnPage": 120,
        "scrollDepth": 80,
        "interactionCount": 5,
        "domSignals": {"matchedSelectors": []},
        "sessionId": "session-1",
    }
    base.update(overrides)
    return base


@pytest.fixture()
def taxonomy() -> TaxonomyStore:
    return make_test_taxonomy()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
