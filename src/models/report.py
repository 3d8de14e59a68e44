"""
Book report data model.

Represents one student's submission read from an uploaded spreadsheet,
and the outcome of parsing a whole upload.
"""

from dataclasses import dataclass, field
from typing import Dict, List

# Logical fields every upload must provide, in canonical order
REQUIRED_FIELDS = ("student_id", "book_title", "author", "review")

# Logical field -> literal header in the uploaded file
ColumnMapping = Dict[str, str]


@dataclass(frozen=True)
class BookReport:
    """
    One student's book report.
    Created by the report extractor from a single spreadsheet row.
    """
    student_id: str  # 학번, primary identifier
    book_title: str
    author: str
    review: str  # Raw review text (감상문)

    def __post_init__(self):
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"Invalid {name}: must be a non-empty string")

    @classmethod
    def from_dict(cls, data: dict) -> "BookReport":
        """Create BookReport from wire-format dict (camelCase keys)."""
        return cls(
            student_id=str(data["studentId"]).strip(),
            book_title=str(data["bookTitle"]).strip(),
            author=str(data["author"]).strip(),
            review=str(data["review"]).strip()
        )

    def to_dict(self) -> dict:
        """Convert to wire-format dict."""
        return {
            "studentId": self.student_id,
            "bookTitle": self.book_title,
            "author": self.author,
            "review": self.review
        }


@dataclass
class ParseResult:
    """
    Outcome of parsing an upload.

    When automatic header mapping fails, needs_mapping is set and the
    detected headers, missing fields and partial mapping are surfaced so the
    user can complete the mapping by hand.
    """
    success: bool
    reports: List[BookReport] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    needs_mapping: bool = False
    detected_headers: List[str] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    partial_mapping: ColumnMapping = field(default_factory=dict)

    def to_dict(self) -> dict:
        data = {
            "success": self.success,
            "reports": [r.to_dict() for r in self.reports],
            "errors": list(self.errors)
        }
        if self.needs_mapping:
            data.update({
                "needsMapping": True,
                "detectedHeaders": list(self.detected_headers),
                "missingFields": list(self.missing_fields),
                "partialMapping": dict(self.partial_mapping)
            })
        return data
