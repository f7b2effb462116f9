# FILE: uigen/generation/classifier.py
"""
Request complexity classification.

Maps request text to SIMPLE or COMPLEX. The category steers both the prompt
(single component vs. full application) and the capability scope
(restricted vs. expanded).

RULES (in order):
1. Any complex keyword → COMPLEX (wins over simple keywords)
2. Any simple keyword → SIMPLE
3. Fewer than 8 words → SIMPLE, otherwise COMPLEX

Matching is a case-insensitive substring test, so "apps" and "application"
both hit "app". Pure and deterministic.
"""

import logging
from typing import Optional, Tuple

from .errors import InputError
from .schemas import Category, Request

logger = logging.getLogger(__name__)

COMPLEX_KEYWORDS: Tuple[str, ...] = (
    "app", "application", "dashboard", "platform", "system",
    "full", "complete", "entire", "comprehensive",
)

SIMPLE_KEYWORDS: Tuple[str, ...] = (
    "button", "input", "card", "modal", "form", "list item",
    "header", "footer", "todo", "counter", "slider", "toggle", "checkbox",
)

SHORT_REQUEST_WORDS = 8


def _first_match(lowered: str, keywords: Tuple[str, ...]) -> Optional[str]:
    for keyword in keywords:
        if keyword in lowered:
            return keyword
    return None


def classify(text: str) -> Category:
    """Classify request text. Never raises."""
    lowered = text.lower()

    hit = _first_match(lowered, COMPLEX_KEYWORDS)
    if hit:
        logger.debug("[classifier] complex keyword %r", hit)
        return Category.COMPLEX

    hit = _first_match(lowered, SIMPLE_KEYWORDS)
    if hit:
        logger.debug("[classifier] simple keyword %r", hit)
        return Category.SIMPLE

    if len(text.split()) < SHORT_REQUEST_WORDS:
        return Category.SIMPLE
    return Category.COMPLEX


def build_request(text, sequence: int = 0) -> Request:
    """Validate raw input and classify it.

    Raises InputError for non-text or blank input.
    """
    if not isinstance(text, str):
        raise InputError("Prompt must be text")
    if not text.strip():
        raise InputError("Prompt is required")
    return Request(text=text, category=classify(text), sequence=sequence)


__all__ = [
    "COMPLEX_KEYWORDS",
    "SIMPLE_KEYWORDS",
    "classify",
    "build_request",
]
