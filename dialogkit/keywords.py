"""
Inline keyword substitution.

Replaces ``<<key>>`` spans in dialog text. Replacement values may contain
further spans, which are expanded in turn.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

OPEN = "<<"
CLOSE = ">>"

KeywordResolver = Callable[[str], Optional[str]]


def find_span(text: str) -> Optional[tuple[int, int]]:
    """
    Locate the next keyword span.

    Returns:
        ``(start, end)`` covering ``<<key>>`` with ``end`` exclusive, or None
    """
    left = text.find(OPEN)
    if left < 0:
        return None
    right = text.find(CLOSE, left + len(OPEN))
    if right < 0:
        return None
    return left, right + len(CLOSE)


class KeywordSubstitution:
    """
    Expands ``<<key>>`` spans using a resolver.

    Each key is resolved at most once per ``replace`` call. Keys the resolver
    does not know expand to nothing.

    Args:
        resolver: Returns the replacement for a key, or None if unknown
        limit: Maximum number of spans expanded in one call
    """

    def __init__(self, resolver: KeywordResolver, limit: int = 256):
        self.resolver = resolver
        self.limit = limit

    def replace(self, text: str) -> str:
        if not text:
            return text

        resolved: dict[str, str] = {}
        expansions = 0

        while True:
            span = find_span(text)
            if span is None:
                return text

            if expansions >= self.limit:
                logger.warning(
                    f"Keyword expansion limit ({self.limit}) reached; "
                    f"leaving remaining keywords in place"
                )
                return text

            start, end = span
            key = text[start + len(OPEN):end - len(CLOSE)]
            if key not in resolved:
                value = self.resolver(key)
                resolved[key] = value if value is not None else ""

            text = text[:start] + resolved[key] + text[end:]
            expansions += 1
