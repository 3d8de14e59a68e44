"""
Spreadsheet Reader.

Decodes an uploaded CSV or Excel file into rows keyed by literal header.
Only the first sheet of a workbook is read.
"""

import io
import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd

from src.errors import ParseError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ("xlsx", "xls", "csv")

UNSUPPORTED_FILE_MESSAGE = "지원하지 않는 파일 형식입니다. (.xlsx, .xls, .csv)"
NO_DATA_MESSAGE = "데이터가 없습니다. 파일에 내용이 있는지 확인해주세요."

_BOM = "\ufeff"


def _extension(file_name: str) -> str:
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def is_supported_file(file_name: str) -> bool:
    """Check upload extension against csv/xls/xlsx (case-insensitive)."""
    return _extension(file_name) in SUPPORTED_EXTENSIONS


def is_csv_file(file_name: str) -> bool:
    return _extension(file_name) == "csv"


def _read_frame(content: bytes, file_name: str) -> pd.DataFrame:
    """Dispatch on extension and load the first sheet as text cells."""
    if is_csv_file(file_name):
        text = content.decode("utf-8")
        if text.startswith(_BOM):
            text = text[1:]
        return pd.read_csv(io.StringIO(text), dtype=str, keep_default_na=False)

    return pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=str, keep_default_na=False)


def _cell_to_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value)


def read_rows(content: bytes, file_name: str) -> List[Dict[str, str]]:
    """
    Parse uploaded file content into row dicts.

    Args:
        content: Raw file bytes
        file_name: Uploaded file name, used for format dispatch

    Returns:
        One dict per data row, keyed by literal header; missing cells are ""

    Raises:
        ParseError: If the extension is unsupported, the bytes cannot be
            decoded, or the first sheet has no data rows
    """
    if not is_supported_file(file_name):
        raise ParseError(UNSUPPORTED_FILE_MESSAGE)

    try:
        frame = _read_frame(content, file_name)
    except pd.errors.EmptyDataError:
        raise ParseError(NO_DATA_MESSAGE)
    except Exception as e:
        logger.error(f"Failed to parse {file_name}: {e}")
        raise ParseError(f"파일 파싱 오류: {e}") from e

    if frame.empty:
        logger.warning(f"No data rows in {file_name}")
        raise ParseError(NO_DATA_MESSAGE)

    headers = [str(column) for column in frame.columns]
    rows = []
    for values in frame.itertuples(index=False, name=None):
        rows.append({
            header: _cell_to_text(value)
            for header, value in zip(headers, values)
        })

    logger.info(f"Read {len(rows)} rows with {len(headers)} columns from {file_name}")
    return rows


def read_file(path) -> List[Dict[str, str]]:
    """Read rows from a file on disk."""
    file_path = Path(path)
    return read_rows(file_path.read_bytes(), file_path.name)
