"""
Unit tests for data models.
"""

import pytest

from src.models.analysis import AnalysisResult, Progress, ReviewAnalysis
from src.models.report import BookReport, ParseResult
from src.models.verification import BookVerification

REPORT = BookReport("20241001", "어린왕자", "생텍쥐페리", "좋았다")


def test_book_report_requires_all_fields():
    with pytest.raises(ValueError):
        BookReport("20241001", "", "생텍쥐페리", "좋았다")

    with pytest.raises(ValueError):
        BookReport("20241001", "어린왕자", "생텍쥐페리", "   ")


def test_book_report_wire_format():
    data = {"studentId": " 20241001 ", "bookTitle": "어린왕자", "author": "생텍쥐페리", "review": "좋았다"}

    report = BookReport.from_dict(data)

    assert report == REPORT
    assert report.to_dict()["studentId"] == "20241001"


def test_unfound_verification_carries_nothing():
    with pytest.raises(ValueError):
        BookVerification(found=False, matched_title="어린 왕자")

    assert BookVerification(found=False).to_dict() == {"found": False}


def test_verification_wire_format_omits_absent_fields():
    verification = BookVerification(found=True, matched_title="어린 왕자", isbn="123")

    data = verification.to_dict()

    assert data == {"found": True, "matchedTitle": "어린 왕자", "isbn": "123"}
    assert BookVerification.from_dict(data) == verification


def test_result_status_from_verification():
    assert AnalysisResult.from_verification(REPORT, BookVerification(found=True)).status == "verified"
    assert AnalysisResult.from_verification(REPORT, BookVerification(found=False)).status == "not_found"


def test_error_result():
    result = AnalysisResult.from_error(REPORT, "연결 오류")

    assert result.status == "error"
    assert result.verification.found is False
    assert result.to_dict()["errorMessage"] == "연결 오류"


def test_analysis_requires_verified_description():
    analysis = ReviewAnalysis(verdict="medium", reasoning="일부 구체적")
    not_found = AnalysisResult.from_verification(REPORT, BookVerification(found=False))
    no_description = AnalysisResult.from_verification(REPORT, BookVerification(found=True))

    with pytest.raises(ValueError):
        not_found.with_analysis(analysis)
    with pytest.raises(ValueError):
        no_description.with_analysis(analysis)


def test_analysis_attached_to_dict():
    verified = AnalysisResult.from_verification(REPORT, BookVerification(found=True, description="소개"))

    data = verified.with_analysis(ReviewAnalysis(verdict="high", reasoning="구체적")).to_dict()

    assert data["reviewAnalysis"] == {"verdict": "high", "reasoning": "구체적"}
    assert data["verification"] == {"found": True, "description": "소개"}


def test_invalid_verdict():
    with pytest.raises(ValueError):
        ReviewAnalysis(verdict="certain", reasoning="")


def test_verdict_labels():
    assert ReviewAnalysis("high", "").label == "읽었을 가능성 높음"
    assert ReviewAnalysis("medium", "").label == "판단 어려움"
    assert ReviewAnalysis("low", "").label == "읽었을 가능성 낮음"


def test_progress_percent():
    assert Progress().percent == 0.0
    assert Progress(completed=1, total=4).percent == 25.0


def test_parse_result_mapping_fields_only_when_needed():
    assert "needsMapping" not in ParseResult(success=True, reports=[REPORT]).to_dict()

    data = ParseResult(
        success=False,
        needs_mapping=True,
        detected_headers=["제목"],
        missing_fields=["student_id"],
        partial_mapping={"book_title": "제목"}
    ).to_dict()

    assert data["needsMapping"] is True
    assert data["partialMapping"] == {"book_title": "제목"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
