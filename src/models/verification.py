"""
Book verification data model.

Outcome of checking one report's title/author against the book catalog.
"""

from dataclasses import dataclass
from typing import Optional

_MATCH_FIELDS = ("matched_title", "matched_author", "description", "isbn", "thumbnail")


@dataclass(frozen=True)
class BookVerification:
    """
    Result of a single catalog lookup.
    When found is False every optional field must be absent.
    """
    found: bool
    matched_title: Optional[str] = None
    matched_author: Optional[str] = None
    description: Optional[str] = None  # Book introduction from the catalog
    isbn: Optional[str] = None
    thumbnail: Optional[str] = None  # Cover image URL

    def __post_init__(self):
        if not self.found:
            present = [name for name in _MATCH_FIELDS if getattr(self, name) is not None]
            if present:
                raise ValueError(f"Unfound verification cannot carry {', '.join(present)}")

    @classmethod
    def from_dict(cls, data: dict) -> "BookVerification":
        return cls(
            found=bool(data.get("found", False)),
            matched_title=data.get("matchedTitle"),
            matched_author=data.get("matchedAuthor"),
            description=data.get("description"),
            isbn=data.get("isbn"),
            thumbnail=data.get("thumbnail")
        )

    def to_dict(self) -> dict:
        """Convert to wire-format dict, omitting absent fields."""
        data = {"found": self.found}
        wire_names = {
            "matched_title": "matchedTitle",
            "matched_author": "matchedAuthor",
            "description": "description",
            "isbn": "isbn",
            "thumbnail": "thumbnail"
        }
        for name, wire_name in wire_names.items():
            value = getattr(self, name)
            if value is not None:
                data[wire_name] = value
        return data
