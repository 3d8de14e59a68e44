"""
Upload ingestion for ReadOrNot.

Turns an uploaded spreadsheet into validated book reports:
- Spreadsheet Reader: bytes -> rows keyed by literal header
- Header Mapper: literal headers -> logical fields
- Report Extractor: rows + mapping -> BookReport list with row errors
"""
