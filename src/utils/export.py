"""
Result export.

Writes verification results (and the upload template) as Excel workbooks.
"""

import io
import logging
import os
from datetime import date
from typing import List, Optional, Union

import pandas as pd
from openpyxl.utils import get_column_letter

import config.settings as settings
from src.models.analysis import AnalysisResult

logger = logging.getLogger(__name__)

RESULT_SHEET_NAME = "검증결과"
TEMPLATE_SHEET_NAME = "독후감"

BASE_COLUMNS = [
    ("학번", 10),
    ("입력한 책 제목", 25),
    ("입력한 작가", 15),
    ("매칭된 책 제목", 30),
    ("매칭된 작가", 15),
    ("도서 존재 여부", 12),
]
ANALYSIS_COLUMNS = [
    ("AI 판정", 18),
    ("AI 판단 근거", 50),
]

TEMPLATE_ROWS = [
    {"학번": "20241001", "책제목": "어린왕자", "작가": "생텍쥐페리", "감상문": "어린왕자를 읽고 느낀 점..."},
    {"학번": "20241002", "책제목": "해리포터와 마법사의 돌", "작가": "J.K. 롤링", "감상문": "해리포터를 읽고..."},
]
TEMPLATE_WIDTHS = [12, 25, 15, 50]


def build_export_frame(results: List[AnalysisResult]) -> pd.DataFrame:
    """
    One row per result; AI columns only when any result was analyzed.
    """
    has_analysis = any(r.review_analysis is not None for r in results)

    rows = []
    for r in results:
        row = {
            "학번": r.report.student_id,
            "입력한 책 제목": r.report.book_title,
            "입력한 작가": r.report.author,
            "매칭된 책 제목": r.verification.matched_title or "-",
            "매칭된 작가": r.verification.matched_author or "-",
            "도서 존재 여부": "존재" if r.verification.found else "미확인",
        }
        if has_analysis:
            row["AI 판정"] = r.review_analysis.label if r.review_analysis else ""
            row["AI 판단 근거"] = r.review_analysis.reasoning if r.review_analysis else ""
        rows.append(row)

    columns = [name for name, _ in BASE_COLUMNS]
    if has_analysis:
        columns += [name for name, _ in ANALYSIS_COLUMNS]

    return pd.DataFrame(rows, columns=columns)


def _write_workbook(frame: pd.DataFrame, target, sheet_name: str, widths: List[int]) -> None:
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        for position, width in enumerate(widths, start=1):
            worksheet.column_dimensions[get_column_letter(position)].width = width


def default_export_name(today: Optional[date] = None) -> str:
    today = today or date.today()
    return f"{settings.EXPORT_FILE_PREFIX}_{today.isoformat()}.xlsx"


def export_results(
    results: List[AnalysisResult],
    output_path: Optional[str] = None
) -> Union[bytes, str]:
    """
    Export results as an xlsx workbook.

    Args:
        results: Results in table order
        output_path: File to write; when omitted the workbook bytes are returned

    Returns:
        output_path if given, else the workbook content
    """
    frame = build_export_frame(results)
    widths = [width for _, width in BASE_COLUMNS]
    if len(frame.columns) > len(BASE_COLUMNS):
        widths += [width for _, width in ANALYSIS_COLUMNS]

    if output_path is None:
        buffer = io.BytesIO()
        _write_workbook(frame, buffer, RESULT_SHEET_NAME, widths)
        return buffer.getvalue()

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    _write_workbook(frame, output_path, RESULT_SHEET_NAME, widths)
    logger.info(f"Exported {len(frame)} results to {output_path}")
    return output_path


def write_template(output_path: str = settings.TEMPLATE_FILE_NAME) -> str:
    """Write the example upload workbook."""
    frame = pd.DataFrame(TEMPLATE_ROWS, columns=["학번", "책제목", "작가", "감상문"])

    directory = os.path.dirname(output_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    _write_workbook(frame, output_path, TEMPLATE_SHEET_NAME, TEMPLATE_WIDTHS)
    logger.info(f"Template saved to {output_path}")
    return output_path
