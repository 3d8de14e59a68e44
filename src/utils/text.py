"""
Text normalization helpers.

Shared by header mapping and catalog title/author matching.
"""

import re

_TAG_PATTERN = re.compile(r"<[^>]*>")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def strip_html(text: str) -> str:
    """Remove markup tags (search results wrap hits in <b> tags)."""
    return _TAG_PATTERN.sub("", text or "")


def normalize(text: str) -> str:
    """Strip tags, remove all whitespace and lowercase."""
    return _WHITESPACE_PATTERN.sub("", strip_html(text)).lower()


def is_match(query: str, candidate: str) -> bool:
    """
    Fuzzy match on normalized strings.

    True on exact equality or when either string contains the other.
    Symmetric by construction.
    """
    normalized_query = normalize(query)
    normalized_candidate = normalize(candidate)

    if normalized_query == normalized_candidate:
        return True

    # Partial containment covers subtitles and multi-author listings
    return (
        normalized_query in normalized_candidate
        or normalized_candidate in normalized_query
    )
