"""
Book Verifier Agent.

Checks whether a reported book exists by querying the Naver book search
API and fuzzy-matching the returned titles and authors.
"""

import logging
from typing import List, Optional, Tuple

import httpx

import config.settings as settings
from src.errors import ConfigurationError, VerificationError
from src.models.verification import BookVerification
from src.utils.text import is_match, strip_html

logger = logging.getLogger(__name__)


class BookVerifier:
    """
    Verifies book existence against the Naver book catalog.

    Two-pass matching over the search results (relevance order):
    1. First item whose title AND author match the query
    2. First item whose title alone matches (translators/editors often
       appear in the author field)
    No match, or no results at all, yields found=False.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        display: int = settings.SEARCH_DISPLAY,
        endpoint: str = settings.NAVER_BOOK_SEARCH_URL,
        timeout_seconds: float = settings.SEARCH_TIMEOUT_SECONDS,
        http_client: Optional[httpx.Client] = None
    ):
        """
        Initialize book verifier.

        Args:
            client_id: Naver application client ID
            client_secret: Naver application client secret
            display: Number of candidate items requested per query
            endpoint: Book search endpoint URL
            timeout_seconds: HTTP timeout for the search call
            http_client: Optional preconfigured httpx client (tests)
        """
        if not client_id or not client_secret:
            raise ConfigurationError("네이버 API 키가 설정되지 않았습니다.")

        self.display = display
        self.endpoint = endpoint
        self.client = http_client or httpx.Client(timeout=timeout_seconds)
        self._headers = {
            "X-Naver-Client-Id": client_id,
            "X-Naver-Client-Secret": client_secret,
        }

        logger.info(f"Initialized BookVerifier with display={display}")

    def close(self) -> None:
        self.client.close()

    def search(self, query: str, display: int = None) -> List[dict]:
        """
        Run a raw catalog search.

        Returns:
            List of result items (title, author, description, isbn, image, ...)

        Raises:
            VerificationError: On transport failure or a non-2xx response
        """
        params = {"query": query, "display": display or self.display}

        try:
            response = self.client.get(self.endpoint, params=params, headers=self._headers)
        except httpx.HTTPError as e:
            logger.error(f"Book search transport error for '{query}': {e}")
            raise VerificationError(f"네이버 API 연결 오류: {e}") from e

        if not response.is_success:
            logger.error(f"Book search failed for '{query}': HTTP {response.status_code}")
            raise VerificationError(
                f"네이버 API 오류: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise VerificationError(f"네이버 API 응답을 해석할 수 없습니다: {e}") from e

        return data.get("items") or []

    def verify(self, book_title: str, author: str) -> BookVerification:
        """
        Verify that a book with this title/author exists.

        Args:
            book_title: Title as written by the student
            author: Author as written by the student

        Returns:
            BookVerification (found=False when nothing matches)

        Raises:
            VerificationError: If the search call itself fails
        """
        items = self.search(f"{book_title} {author}")

        if not items:
            logger.debug(f"No search results for '{book_title}' / '{author}'")
            return BookVerification(found=False)

        for item in items:
            if is_match(book_title, item.get("title", "")) and is_match(author, item.get("author", "")):
                logger.debug(f"Full match for '{book_title}': {strip_html(item.get('title', ''))}")
                return self._to_verification(item)

        for item in items:
            if is_match(book_title, item.get("title", "")):
                logger.debug(f"Title-only match for '{book_title}': {strip_html(item.get('title', ''))}")
                return self._to_verification(item)

        logger.debug(f"No matching item among {len(items)} results for '{book_title}'")
        return BookVerification(found=False)

    def test_connection(self) -> Tuple[bool, str]:
        """Probe the credentials with a single-result query."""
        try:
            self.search("해리포터", display=1)
        except VerificationError as e:
            if e.status_code is None:
                return False, "연결에 실패했습니다."
            return False, f"오류: {e}"
        return True, "네이버 API 키가 정상 작동합니다."

    @staticmethod
    def _to_verification(item: dict) -> BookVerification:
        return BookVerification(
            found=True,
            matched_title=strip_html(item.get("title", "")),
            matched_author=strip_html(item.get("author", "")),
            description=strip_html(item.get("description", "")),
            isbn=item.get("isbn"),
            thumbnail=item.get("image")
        )
