"""Coarse page-type flags derived from page text."""

from __future__ import annotations

import re

PAGE_CONTEXT_PATTERNS: dict[str, tuple[re.Pattern[str], ...]] = {
    "product_page": (
        re.compile(r"add to cart|buy now|purchase|price|in stock"),
        re.compile(r"product details|specifications|reviews"),
        re.compile(r"\$\d+(\.\d{2})?"),
    ),
    "video_page": (
        re.compile(r"watch|play|video|stream|duration"),
        re.compile(r"\d+:\d+|views|subscribe"),
        re.compile(r"player|playlist|episode"),
    ),
    "article_page": (
        re.compile(r"article|blog|post|author|published"),
        re.compile(r"read more|continue reading|comments"),
        re.compile(r"min read|words|share"),
    ),
    "forum_page": (
        re.compile(r"forum|discussion|thread|reply|topic"),
        re.compile(r"posted by|members|online"),
        re.compile(r"upvote|downvote|karma"),
    ),
}


def detect_page_context(text: str) -> frozenset[str]:
    """Flags whose indicator patterns match the lower-cased *text*."""
    if not text:
        return frozenset()
    lowered = text.lower()
    return frozenset(
        flag
        for flag, patterns in PAGE_CONTEXT_PATTERNS.items()
        if any(p.search(lowered) for p in patterns)
    )
