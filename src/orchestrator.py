"""
Verification Orchestrator.

Drives sequential book verification across an uploaded batch and gates
on-demand review analysis for individual results.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

import config.settings as settings
from src.agents.book_verifier import BookVerifier
from src.agents.review_analyzer import ReviewAnalyzer
from src.errors import AnalysisRefusedError, ConfigurationError
from src.models.analysis import (
    STATUS_ERROR,
    STATUS_NOT_FOUND,
    STATUS_VERIFIED,
    AnalysisResult,
    Progress,
)
from src.models.report import BookReport

logger = logging.getLogger(__name__)

GENERIC_VERIFY_ERROR = "검증 중 오류 발생"


class VerificationOrchestrator:
    """
    Owns the transient result set for one upload.

    Verification:
    - Strictly sequential, fixed delay after every item
    - Each result is appended (and reported) as soon as it is known
    - A failed lookup becomes an error result; the batch continues

    Review analysis:
    - One result at a time, only for verified results with a description
    - At most max_analyses analyses per result set
    """

    def __init__(
        self,
        verifier: BookVerifier,
        analyzer: Optional[ReviewAnalyzer] = None,
        delay_seconds: float = settings.VERIFY_DELAY_SECONDS,
        max_analyses: int = settings.MAX_AI_ANALYSES,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize orchestrator.

        Args:
            verifier: Book verifier used for every report
            analyzer: Optional review analyzer (None disables analysis)
            delay_seconds: Pause after each verification request
            max_analyses: Analysis cap for the current result set
            sleep: Sleep function used between requests
        """
        self.verifier = verifier
        self.analyzer = analyzer
        self.delay_seconds = delay_seconds
        self.max_analyses = max_analyses
        self.sleep = sleep

        self.results: List[AnalysisResult] = []
        self.progress = Progress()
        self.analyzing_index: Optional[int] = None

    def reset(self) -> None:
        """Discard the current result set (and its analysis budget)."""
        self.results = []
        self.progress = Progress()
        self.analyzing_index = None

    def run(
        self,
        reports: List[BookReport],
        on_result: Optional[Callable[[int, AnalysisResult], None]] = None,
        on_progress: Optional[Callable[[Progress], None]] = None
    ) -> List[AnalysisResult]:
        """
        Verify every report in order.

        Args:
            reports: Book reports to verify
            on_result: Called with (index, result) as each result is appended
            on_progress: Called with the progress counter after every item

        Returns:
            The result list, one entry per report in input order
        """
        self.reset()
        self.progress = Progress(completed=0, total=len(reports))
        logger.info(f"Verifying {len(reports)} book reports")

        for report in reports:
            result = self._verify_one(report)

            self.results.append(result)
            if on_result:
                on_result(len(self.results) - 1, result)

            self.progress.completed += 1
            if on_progress:
                on_progress(self.progress)

            self.sleep(self.delay_seconds)

        summary = self.summary()
        logger.info(
            f"Verification complete: {summary['verified']} verified, "
            f"{summary['not_found']} not found, {summary['error']} errors"
        )
        return self.results

    def _verify_one(self, report: BookReport) -> AnalysisResult:
        try:
            verification = self.verifier.verify(report.book_title, report.author)
        except Exception as e:
            logger.error(f"Verification failed for student {report.student_id}: {e}")
            return AnalysisResult.from_error(report, str(e) or GENERIC_VERIFY_ERROR)

        return AnalysisResult.from_verification(report, verification)

    @property
    def analysis_count(self) -> int:
        return sum(1 for r in self.results if r.review_analysis is not None)

    @property
    def can_analyze_more(self) -> bool:
        return self.analysis_count < self.max_analyses

    def check_analyzable(self, index: int) -> AnalysisResult:
        """
        Validate an analysis request without calling the provider.

        Raises:
            AnalysisRefusedError: If the request must be refused
            ConfigurationError: If no analyzer is configured
        """
        if not 0 <= index < len(self.results):
            raise AnalysisRefusedError(f"결과를 찾을 수 없습니다: {index}")

        result = self.results[index]
        if result.status != STATUS_VERIFIED:
            raise AnalysisRefusedError("검증된 도서만 AI 분석할 수 있습니다.")
        if not result.verification.description:
            raise AnalysisRefusedError("책 소개가 없어 AI 분석을 할 수 없습니다.")
        if result.review_analysis is not None:
            raise AnalysisRefusedError("이미 AI 분석이 완료된 감상문입니다.")
        if self.analyzing_index is not None:
            raise AnalysisRefusedError("다른 감상문을 분석하는 중입니다.")
        if not self.can_analyze_more:
            raise AnalysisRefusedError(f"AI 분석은 최대 {self.max_analyses}건까지 가능합니다.")
        if self.analyzer is None:
            raise ConfigurationError("AI API 키가 설정되지 않았습니다. 설정 페이지에서 등록해주세요.")

        return result

    def analyze(self, index: int) -> AnalysisResult:
        """
        Run review analysis for one result and update it in place.

        Uses the matched title/author when available, else the reported ones.
        """
        result = self.check_analyzable(index)

        self.analyzing_index = index
        try:
            analysis = self.analyzer.analyze(
                book_title=result.verification.matched_title or result.report.book_title,
                author=result.verification.matched_author or result.report.author,
                review=result.report.review,
                description=result.verification.description
            )
        finally:
            self.analyzing_index = None

        updated = result.with_analysis(analysis)
        self.results[index] = updated
        logger.info(
            f"Analysis {self.analysis_count}/{self.max_analyses} done for "
            f"student {result.report.student_id}"
        )
        return updated

    def summary(self) -> Dict[str, int]:
        """Counts shown above the result table."""
        return {
            "total": len(self.results),
            "verified": sum(1 for r in self.results if r.status == STATUS_VERIFIED),
            "not_found": sum(1 for r in self.results if r.status == STATUS_NOT_FOUND),
            "error": sum(1 for r in self.results if r.status == STATUS_ERROR),
            "analyzed": self.analysis_count,
        }
