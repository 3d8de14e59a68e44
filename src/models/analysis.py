"""
Analysis result data models.

ReviewAnalysis is the AI verdict for one review; AnalysisResult is one row
of the result table shown to the user and exported to Excel.
"""

from dataclasses import dataclass, replace
from typing import Optional

from src.models.report import BookReport
from src.models.verification import BookVerification

VERDICTS = ("high", "medium", "low")

STATUS_PENDING = "pending"
STATUS_VERIFIED = "verified"
STATUS_NOT_FOUND = "not_found"
STATUS_ERROR = "error"
STATUSES = (STATUS_PENDING, STATUS_VERIFIED, STATUS_NOT_FOUND, STATUS_ERROR)

VERDICT_LABELS = {
    "high": "읽었을 가능성 높음",
    "medium": "판단 어려움",
    "low": "읽었을 가능성 낮음"
}


@dataclass(frozen=True)
class ReviewAnalysis:
    """Likelihood that the student actually read the book."""
    verdict: str  # "high", "medium", or "low"
    reasoning: str

    def __post_init__(self):
        if self.verdict not in VERDICTS:
            raise ValueError(
                f"Invalid verdict: {self.verdict}. Must be 'high', 'medium', or 'low'"
            )

    @property
    def label(self) -> str:
        return VERDICT_LABELS[self.verdict]

    def to_dict(self) -> dict:
        return {"verdict": self.verdict, "reasoning": self.reasoning}


@dataclass(frozen=True)
class AnalysisResult:
    """
    Final result for one book report.

    Status is derived by the orchestrator from the verification outcome.
    A review analysis may only be attached to a verified result whose
    verification carries a description.
    """
    report: BookReport
    verification: BookVerification
    status: str = STATUS_PENDING
    review_analysis: Optional[ReviewAnalysis] = None
    error_message: Optional[str] = None

    def __post_init__(self):
        if self.status not in STATUSES:
            raise ValueError(f"Invalid status: {self.status}")
        if self.review_analysis is not None:
            if self.status != STATUS_VERIFIED or not self.verification.description:
                raise ValueError("Review analysis requires a verified result with a description")

    @classmethod
    def from_verification(cls, report: BookReport, verification: BookVerification) -> "AnalysisResult":
        """Build a result for a verification call that completed."""
        status = STATUS_VERIFIED if verification.found else STATUS_NOT_FOUND
        return cls(report=report, verification=verification, status=status)

    @classmethod
    def from_error(cls, report: BookReport, message: str) -> "AnalysisResult":
        """Build a result for a verification call that failed."""
        return cls(
            report=report,
            verification=BookVerification(found=False),
            status=STATUS_ERROR,
            error_message=message
        )

    def with_analysis(self, analysis: ReviewAnalysis) -> "AnalysisResult":
        return replace(self, review_analysis=analysis)

    def to_dict(self) -> dict:
        data = {
            "report": self.report.to_dict(),
            "verification": self.verification.to_dict(),
            "status": self.status
        }
        if self.review_analysis is not None:
            data["reviewAnalysis"] = self.review_analysis.to_dict()
        if self.error_message:
            data["errorMessage"] = self.error_message
        return data


@dataclass
class Progress:
    """Verification progress counter."""
    completed: int = 0
    total: int = 0

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 0.0
        return 100.0 * self.completed / self.total
