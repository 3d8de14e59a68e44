"""
Configuration settings for ReadOrNot.

Centralized configuration for the verification pipeline, the AI analyzers
and the HTTP API.
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
OUTPUT_ROOT = PROJECT_ROOT / "output"
SETTINGS_PATH = Path(
    os.getenv("READORNOT_SETTINGS_PATH", str(Path.home() / ".readornot" / "settings.json"))
)
SETTINGS_STORAGE_KEY = "readornot_settings"

# API Configuration (server mode reads credentials from the environment)
NAVER_CLIENT_ID = os.getenv("NAVER_CLIENT_ID", "")
NAVER_CLIENT_SECRET = os.getenv("NAVER_CLIENT_SECRET", "")
AI_PROVIDER = os.getenv("AI_PROVIDER", "")  # "gemini" or "openai"; empty keeps the stored choice
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY", "")
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Naver book search
NAVER_BOOK_SEARCH_URL = "https://openapi.naver.com/v1/search/book.json"
SEARCH_DISPLAY = 10  # Candidate items requested per query
SEARCH_TIMEOUT_SECONDS = 10.0
VERIFY_DELAY_SECONDS = 0.1  # Naver allows 10 calls per second

# LLM Models
GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "")
ANALYSIS_TEMPERATURE = 0.2

# Review analysis retry (rate limits only)
ANALYSIS_MAX_RETRIES = 3
ANALYSIS_BASE_DELAY_SECONDS = 2.0

# Maximum AI analyses per result set
MAX_AI_ANALYSES = 5

# Spreadsheet rows are reported 1-based, below the header row
HEADER_ROW_OFFSET = 2

# Export
EXPORT_FILE_PREFIX = "독후감_검증결과"
TEMPLATE_FILE_NAME = "독후감_업로드_템플릿.xlsx"

# Logging
LOG_LEVEL = "INFO"  # DEBUG, INFO, WARNING, ERROR
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE = "readornot.log"
