"""
ReadOrNot HTTP API.

Endpoints:
- POST /api/verify-books: verify a batch of book reports
- POST /api/analyze-similarity: AI verdict for a single review
- GET /health
"""

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.agents.book_verifier import BookVerifier
from src.agents.review_analyzer import ReviewAnalyzer
from src.errors import ConfigurationError, RateLimitError
from src.models.report import BookReport
from src.orchestrator import VerificationOrchestrator
from src.utils.settings_store import AppSettings, has_naver_keys, settings_from_env

logger = logging.getLogger(__name__)

INVALID_REPORTS_MESSAGE = "유효한 독후감 데이터가 필요합니다."
MISSING_FIELDS_MESSAGE = "필수 데이터가 누락되었습니다."

# Request body errors per route, reported as 400
BAD_REQUEST_MESSAGES = {
    "/api/verify-books": INVALID_REPORTS_MESSAGE,
    "/api/analyze-similarity": MISSING_FIELDS_MESSAGE,
}


class BookReportIn(BaseModel):
    studentId: str = ""
    bookTitle: str = ""
    author: str = ""
    review: str = ""


class VerifyBooksRequest(BaseModel):
    reports: Optional[List[BookReportIn]] = None


class AnalyzeReviewRequest(BaseModel):
    bookTitle: str = ""
    author: str = ""
    review: str = ""
    description: str = ""


def get_settings() -> AppSettings:
    """Credentials from environment configuration."""
    try:
        return settings_from_env()
    except ValueError as e:
        raise ConfigurationError(f"잘못된 설정입니다: {e}") from e


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


app = FastAPI(
    title="ReadOrNot API",
    description="독후감 진위 검증 서비스",
    version="1.0.0"
)


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error on {request.url.path}: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Rejected request body on {request.url.path}: {exc.errors()}")
    message = BAD_REQUEST_MESSAGES.get(request.url.path, MISSING_FIELDS_MESSAGE)
    return _error(status.HTTP_400_BAD_REQUEST, message)


@app.get("/health")
def health_check():
    """서비스 상태 확인"""
    return {"status": "healthy", "service": "readornot"}


@app.post("/api/verify-books")
def verify_books(request: VerifyBooksRequest, app_settings: AppSettings = Depends(get_settings)):
    """
    도서 존재 여부 일괄 검증

    네이버 API 호출 제한(초당 10회)을 고려해 순차 처리합니다.
    """
    if not request.reports:
        return _error(status.HTTP_400_BAD_REQUEST, INVALID_REPORTS_MESSAGE)

    try:
        reports = [BookReport.from_dict(r.model_dump()) for r in request.reports]
    except ValueError as e:
        logger.warning(f"Rejected verify request: {e}")
        return _error(status.HTTP_400_BAD_REQUEST, INVALID_REPORTS_MESSAGE)

    if not has_naver_keys(app_settings):
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "네이버 API 키가 설정되지 않았습니다.")

    verifier = BookVerifier(app_settings.naver_client_id, app_settings.naver_client_secret)
    try:
        results = VerificationOrchestrator(verifier).run(reports)
    except Exception as e:
        logger.error(f"Verify request failed: {e}", exc_info=True)
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "요청 처리 중 오류가 발생했습니다.")
    finally:
        verifier.close()

    return {"results": [r.to_dict() for r in results]}


@app.post("/api/analyze-similarity")
def analyze_similarity(request: AnalyzeReviewRequest, app_settings: AppSettings = Depends(get_settings)):
    """감상문 AI 분석 (개별 요청)"""
    if not request.bookTitle or not request.review or not request.description:
        return _error(status.HTTP_400_BAD_REQUEST, MISSING_FIELDS_MESSAGE)

    try:
        analyzer = ReviewAnalyzer(app_settings)
        analysis = analyzer.analyze(
            book_title=request.bookTitle,
            author=request.author,
            review=request.review,
            description=request.description
        )
    except ConfigurationError as e:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e))
    except RateLimitError as e:
        return _error(status.HTTP_429_TOO_MANY_REQUESTS, str(e))
    except Exception as e:
        logger.error(f"Review analysis failed: {e}")
        return _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            str(e) or "감상문 분석 중 오류가 발생했습니다."
        )

    return analysis.to_dict()
