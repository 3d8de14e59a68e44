"""
Unit tests for the Header Mapper.
"""

import pytest

from src.errors import ValidationError
from src.ingestion.header_mapper import apply_overrides, map_header, map_headers


def test_standard_headers_map_without_prompting():
    """Template headers map every field automatically."""
    result = map_headers(["학번", "책제목", "작가", "감상문"])

    assert result.needs_mapping is False
    assert result.missing_fields == []
    assert result.partial_mapping == {
        "student_id": "학번",
        "book_title": "책제목",
        "author": "작가",
        "review": "감상문",
    }


def test_case_and_whitespace_insensitive():
    """Aliases match regardless of case and internal/outer whitespace."""
    headers = ["  ID ", "Book Title", "AUTHOR", "책 제목", "Re view"]
    result = map_headers(headers)

    assert result.needs_mapping is False
    assert result.partial_mapping["student_id"] == "  ID "
    assert result.partial_mapping["book_title"] == "Book Title"
    assert result.partial_mapping["author"] == "AUTHOR"
    assert result.partial_mapping["review"] == "Re view"


def test_markup_is_stripped_before_matching():
    assert map_header("<b>학번</b>") == "student_id"


def test_unknown_header_maps_to_nothing():
    assert map_header("느낀점") is None


def test_missing_fields_surface_partial_mapping():
    """Unrecognized columns are reported, not treated as an error."""
    headers = ["출석", "제목", "저자", "느낀점"]
    result = map_headers(headers)

    assert result.needs_mapping is True
    assert result.missing_fields == ["student_id", "review"]
    assert result.partial_mapping == {"book_title": "제목", "author": "저자"}
    assert result.detected_headers == headers


def test_first_matching_header_claims_field():
    result = map_headers(["학번", "도서명", "제목", "작가", "감상문"])

    assert result.partial_mapping["book_title"] == "도서명"


def test_apply_overrides_completes_mapping():
    detected = ["출석", "제목", "저자", "느낀점"]
    partial = map_headers(detected).partial_mapping

    mapping = apply_overrides(partial, {"student_id": "출석", "review": "느낀점"}, detected)

    assert mapping == {
        "book_title": "제목",
        "author": "저자",
        "student_id": "출석",
        "review": "느낀점",
    }


def test_apply_overrides_replaces_inferred_header():
    detected = ["학번", "제목", "부제목", "작가", "감상문"]
    partial = map_headers(detected).partial_mapping

    mapping = apply_overrides(partial, {"book_title": "부제목"}, detected)

    assert mapping["book_title"] == "부제목"


def test_apply_overrides_rejects_unknown_field():
    with pytest.raises(ValidationError, match="알 수 없는 필드"):
        apply_overrides({}, {"grade": "학년"}, ["학년"])


def test_apply_overrides_rejects_header_not_in_file():
    with pytest.raises(ValidationError, match="파일에 없는 헤더"):
        apply_overrides({}, {"student_id": "번호열"}, ["학번"])


def test_apply_overrides_rejects_incomplete_mapping():
    with pytest.raises(ValidationError, match="감상문"):
        apply_overrides(
            {"student_id": "학번", "book_title": "제목"},
            {"author": "저자"},
            ["학번", "제목", "저자"]
        )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
