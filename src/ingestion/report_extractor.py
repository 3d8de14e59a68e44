"""
Report Extractor.

Applies a complete column mapping to parsed rows, producing validated
BookReport records and one error message per rejected row.
"""

import logging
from typing import Dict, List, Optional

import config.settings as settings
from src.errors import ParseError
from src.ingestion.header_mapper import map_headers
from src.ingestion.spreadsheet_reader import read_rows
from src.models.report import REQUIRED_FIELDS, BookReport, ColumnMapping, ParseResult

logger = logging.getLogger(__name__)

# Field labels with subject particle, as used in row error messages
ROW_ERROR_SUBJECTS: Dict[str, str] = {
    "student_id": "학번이",
    "book_title": "책제목이",
    "author": "작가가",
    "review": "감상문이",
}


def _row_error(index: int, field_name: str) -> str:
    row_number = index + settings.HEADER_ROW_OFFSET
    return f"{row_number}행: {ROW_ERROR_SUBJECTS[field_name]} 비어있습니다."


def extract_reports(rows: List[Dict[str, str]], mapping: ColumnMapping) -> ParseResult:
    """
    Build BookReport records from rows.

    Args:
        rows: Rows keyed by literal header
        mapping: Logical field -> header mapping; unmapped fields read as empty

    Returns:
        ParseResult with accepted reports and every row error; success is
        True when at least one row was accepted
    """
    reports: List[BookReport] = []
    errors: List[str] = []

    for index, row in enumerate(rows):
        values = {}
        for field_name in REQUIRED_FIELDS:
            raw = row.get(mapping.get(field_name))
            values[field_name] = "" if raw is None else str(raw).strip()

        empty_field = next((name for name in REQUIRED_FIELDS if not values[name]), None)
        if empty_field:
            errors.append(_row_error(index, empty_field))
            continue

        reports.append(BookReport(**values))

    if errors:
        logger.warning(f"Rejected {len(errors)} of {len(rows)} rows")
    logger.info(f"Extracted {len(reports)} book reports")

    return ParseResult(success=len(reports) > 0, reports=reports, errors=errors)


def parse_upload(
    content: bytes,
    file_name: str,
    mapping: Optional[ColumnMapping] = None
) -> ParseResult:
    """
    Read an upload and extract reports in one step.

    Without a mapping, headers are inferred; if inference is incomplete the
    result carries needs_mapping and the detected headers instead of reports.
    Parse failures are returned as a single error message, never raised.
    """
    try:
        rows = read_rows(content, file_name)
    except ParseError as e:
        return ParseResult(success=False, errors=[str(e)])

    if mapping is None:
        inferred = map_headers(rows[0].keys())
        if inferred.needs_mapping:
            return ParseResult(
                success=False,
                needs_mapping=True,
                detected_headers=inferred.detected_headers,
                missing_fields=inferred.missing_fields,
                partial_mapping=inferred.partial_mapping
            )
        mapping = inferred.partial_mapping

    return extract_reports(rows, mapping)
