"""
Header Mapper.

Infers which spreadsheet columns hold the four logical book report fields
using per-field alias lists. When a field cannot be inferred the caller is
asked to complete the mapping by hand instead of failing.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from src.errors import ValidationError
from src.models.report import REQUIRED_FIELDS, ColumnMapping
from src.utils.text import normalize

logger = logging.getLogger(__name__)


# Logical field -> accepted header aliases
COLUMN_ALIASES: Dict[str, List[str]] = {
    "student_id": ["학번", "번호", "학생번호", "출석번호", "id", "student_id", "studentid"],
    "book_title": ["책제목", "제목", "도서명", "책이름", "도서제목", "title", "book_title", "booktitle"],
    "author": ["작가", "저자", "글쓴이", "작성자", "지은이", "author", "writer"],
    "review": ["감상문", "독후감", "감상평", "내용", "본문", "서평", "review", "content", "report"],
}

# Display labels used in prompts and in the manual mapping dialog
FIELD_LABELS: Dict[str, str] = {
    "student_id": "학번",
    "book_title": "책 제목",
    "author": "작가",
    "review": "감상문",
}

_NORMALIZED_ALIASES: Dict[str, set] = {
    name: {normalize(alias) for alias in aliases}
    for name, aliases in COLUMN_ALIASES.items()
}


@dataclass
class HeaderMapping:
    """Result of automatic header inference."""
    detected_headers: List[str]
    partial_mapping: ColumnMapping = field(default_factory=dict)
    missing_fields: List[str] = field(default_factory=list)

    @property
    def needs_mapping(self) -> bool:
        return bool(self.missing_fields)


def map_header(header: str) -> Optional[str]:
    """
    Map one literal header to a logical field.

    Returns:
        Field name of the first alias list containing the header, or None
    """
    normalized = normalize(header)
    for field_name in REQUIRED_FIELDS:
        if normalized in _NORMALIZED_ALIASES[field_name]:
            return field_name
    return None


def map_headers(headers: Iterable[str]) -> HeaderMapping:
    """
    Infer a column mapping from detected headers.

    The first header matching a field claims it; later headers for the same
    field are ignored.
    """
    detected = [str(h) for h in headers]
    partial: ColumnMapping = {}

    for header in detected:
        field_name = map_header(header)
        if field_name and field_name not in partial:
            partial[field_name] = header

    missing = [name for name in REQUIRED_FIELDS if name not in partial]

    if missing:
        logger.info(
            f"Header auto-mapping incomplete: missing {missing} "
            f"(detected headers: {detected})"
        )
    else:
        logger.debug(f"Header auto-mapping complete: {partial}")

    return HeaderMapping(
        detected_headers=detected,
        partial_mapping=partial,
        missing_fields=missing
    )


def apply_overrides(
    partial_mapping: ColumnMapping,
    overrides: ColumnMapping,
    detected_headers: List[str]
) -> ColumnMapping:
    """
    Merge a user-confirmed manual mapping over the inferred one.

    Raises:
        ValidationError: On unknown fields, headers absent from the file,
            or if the merged mapping is still incomplete
    """
    mapping = dict(partial_mapping)

    for field_name, header in overrides.items():
        if field_name not in REQUIRED_FIELDS:
            raise ValidationError(f"알 수 없는 필드입니다: {field_name}")
        if header not in detected_headers:
            raise ValidationError(f"파일에 없는 헤더입니다: {header}")
        mapping[field_name] = header

    missing = [name for name in REQUIRED_FIELDS if name not in mapping]
    if missing:
        labels = ", ".join(FIELD_LABELS[name] for name in missing)
        raise ValidationError(f"매핑되지 않은 필드가 있습니다: {labels}")

    return mapping
