"""
Unit tests for Book Verifier Agent.

Note: These tests serve canned catalog responses through an
httpx.MockTransport; no network calls are made.
"""

import httpx
import pytest

from src.agents.book_verifier import BookVerifier
from src.errors import ConfigurationError, VerificationError


def _item(title, author, description="책 소개", isbn="9788932917245", image="https://img/1.jpg"):
    return {
        "title": title,
        "author": author,
        "description": description,
        "isbn": isbn,
        "image": image,
        "link": "https://search.shopping.naver.com/book/1",
    }


def _verifier(handler, **kwargs) -> BookVerifier:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return BookVerifier(client_id="test-id", client_secret="test-secret", http_client=client, **kwargs)


def _respond_with(items, requests=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return httpx.Response(200, json={"total": len(items), "items": items})
    return handler


def test_missing_credentials():
    with pytest.raises(ConfigurationError, match="네이버 API 키"):
        BookVerifier(client_id="", client_secret="secret")

    with pytest.raises(ConfigurationError):
        BookVerifier(client_id="id", client_secret="")


def test_search_request_shape():
    """Query is title + author; credentials travel in headers."""
    requests = []
    verifier = _verifier(_respond_with([], requests))

    verifier.verify("어린 왕자", "생텍쥐페리")

    request = requests[0]
    assert request.url.params["query"] == "어린 왕자 생텍쥐페리"
    assert request.url.params["display"] == "10"
    assert request.headers["X-Naver-Client-Id"] == "test-id"
    assert request.headers["X-Naver-Client-Secret"] == "test-secret"


def test_full_match_with_markup_stripped():
    items = [
        _item(
            "<b>어린 왕자</b>",
            "<b>앙투안 드 생텍쥐페리</b>",
            description="사막에 불시착한 <b>비행사</b>와 어린 왕자의 이야기"
        )
    ]
    verifier = _verifier(_respond_with(items))

    verification = verifier.verify("어린왕자", "생텍쥐페리")

    assert verification.found is True
    assert verification.matched_title == "어린 왕자"
    assert verification.matched_author == "앙투안 드 생텍쥐페리"
    assert verification.description == "사막에 불시착한 비행사와 어린 왕자의 이야기"
    assert verification.isbn == "9788932917245"
    assert verification.thumbnail == "https://img/1.jpg"


def test_space_variant_title_full_match():
    verifier = _verifier(_respond_with([_item("어린 왕자", "생텍쥐페리")]))

    verification = verifier.verify("어린왕자", "생텍쥐페리")

    assert verification.found is True
    assert verification.matched_title == "어린 왕자"


def test_full_match_preferred_over_earlier_title_match():
    items = [
        _item("데미안", "김영사 편집부", isbn="1"),
        _item("데미안", "헤르만 헤세", isbn="2"),
    ]
    verifier = _verifier(_respond_with(items))

    verification = verifier.verify("데미안", "헤르만 헤세")

    assert verification.isbn == "2"
    assert verification.matched_author == "헤르만 헤세"


def test_title_only_fallback():
    """Translated editions often list the translator as author."""
    items = [
        _item("해리 포터와 마법사의 돌", "강동혁 옮김", isbn="1"),
        _item("해리 포터와 비밀의 방", "강동혁 옮김", isbn="2"),
    ]
    verifier = _verifier(_respond_with(items))

    verification = verifier.verify("해리포터와 마법사의 돌", "J.K. 롤링")

    assert verification.found is True
    assert verification.isbn == "1"


def test_no_results_not_found():
    verifier = _verifier(_respond_with([]))

    verification = verifier.verify("존재하지 않는 책", "아무개")

    assert verification.found is False
    assert verification.matched_title is None
    assert verification.description is None


def test_no_matching_item_not_found():
    verifier = _verifier(_respond_with([_item("코스모스", "칼 세이건")]))

    verification = verifier.verify("총균쇠", "재레드 다이아몬드")

    assert verification.found is False


def test_missing_items_field_not_found():
    verifier = _verifier(lambda request: httpx.Response(200, json={"total": 0}))

    assert verifier.verify("데미안", "헤세").found is False


def test_http_error_raises():
    verifier = _verifier(lambda request: httpx.Response(401, json={"errorMessage": "Authentication failed"}))

    with pytest.raises(VerificationError) as exc_info:
        verifier.verify("데미안", "헤세")

    assert exc_info.value.status_code == 401
    assert str(exc_info.value).startswith("네이버 API 오류: 401")


def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    verifier = _verifier(handler)

    with pytest.raises(VerificationError) as exc_info:
        verifier.verify("데미안", "헤세")

    assert exc_info.value.status_code is None


def test_test_connection_success():
    requests = []
    verifier = _verifier(_respond_with([_item("해리 포터", "J.K. 롤링")], requests))

    ok, message = verifier.test_connection()

    assert ok is True
    assert message == "네이버 API 키가 정상 작동합니다."
    assert requests[0].url.params["query"] == "해리포터"
    assert requests[0].url.params["display"] == "1"


def test_test_connection_rejected_key():
    verifier = _verifier(lambda request: httpx.Response(401))

    ok, message = verifier.test_connection()

    assert ok is False
    assert message.startswith("오류:")
    assert "401" in message


def test_test_connection_network_failure():
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    ok, message = _verifier(handler).test_connection()

    assert ok is False
    assert message == "연결에 실패했습니다."


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
