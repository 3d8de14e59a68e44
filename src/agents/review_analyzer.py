"""
Review Analyzer Agent.

Asks an LLM whether a student's review reads like the student actually
read the book, given the catalog description of that book.
"""

import json
import logging
import time
from typing import Callable, Optional

import google.generativeai as genai
from openai import OpenAI

import config.settings as settings
from src.errors import ConfigurationError, ParseError, RateLimitError
from src.models.analysis import VERDICTS, ReviewAnalysis
from src.utils.settings_store import AppSettings

logger = logging.getLogger(__name__)


ANALYSIS_PROMPT = """당신은 독후감 진위를 평가하는 교육 전문가입니다.
학생의 감상문과 책 정보를 바탕으로, 이 학생이 실제로 책을 읽었을 가능성을 판단하세요.

평가 기준:
1. 책 내용과의 일관성: 감상문에 언급된 인물, 사건, 주제가 실제 책과 맞는가?
2. 구체성: 책을 읽지 않으면 쓸 수 없는 구체적인 디테일(장면, 대사, 감정 등)이 있는가?
3. 개인적 감상: 자신만의 경험이나 느낌과 연결 지었는가?
4. 범용성: 아무 책에나 붙일 수 있는 뻔한 문장 위주인가?

반드시 아래 JSON 형식으로만 응답하세요. 다른 텍스트는 포함하지 마세요.
{
  "verdict": "high" | "medium" | "low",
  "reasoning": "판단 근거를 2~3문장으로 요약"
}

verdict 기준:
- "high": 읽었을 가능성이 높음 (구체적 디테일, 개인적 감상, 책 내용과 일치)
- "medium": 판단하기 어려움 (일부 구체적이나 불확실)
- "low": 읽었을 가능성이 낮음 (뻔한 문장, 구체성 부족, 내용 불일치)"""

# Substrings of provider errors that signal a rate limit
RATE_LIMIT_MARKERS = ("429", "RESOURCE_EXHAUSTED", "Resource exhausted", "rate limit", "Rate limit")

RATE_LIMIT_MESSAGE = "API 요청 한도를 초과했습니다. 잠시 후 다시 시도해주세요."
EMPTY_RESPONSE_MESSAGE = "AI 응답이 비어있습니다."
UNPARSEABLE_RESPONSE_MESSAGE = "AI 응답을 파싱할 수 없습니다."
MISSING_REASONING = "근거 없음"

MISSING_KEY_MESSAGES = {
    "gemini": "Gemini API 키가 설정되지 않았습니다.",
    "openai": "OpenAI API 키가 설정되지 않았습니다.",
}


def _construct_user_prompt(book_title: str, author: str, description: str, review: str) -> str:
    """Construct user prompt from book metadata and review."""
    return f"""## 책 정보
- 제목: {book_title}
- 저자: {author}
- 책 소개: {description}

## 학생의 감상문
{review}"""


def is_rate_limit_error(error: Exception) -> bool:
    message = str(error)
    return any(marker in message for marker in RATE_LIMIT_MARKERS)


def parse_analysis_response(text: Optional[str]) -> ReviewAnalysis:
    """
    Parse the constrained JSON verdict.

    Raises:
        ParseError: On an empty body, invalid JSON, or a verdict outside
            high/medium/low
    """
    if not text or not text.strip():
        raise ParseError(EMPTY_RESPONSE_MESSAGE)

    try:
        data = json.loads(text)
    except ValueError as e:
        raise ParseError(UNPARSEABLE_RESPONSE_MESSAGE) from e

    if not isinstance(data, dict) or data.get("verdict") not in VERDICTS:
        logger.warning(f"Invalid verdict in AI response: {text[:200]}")
        raise ParseError(UNPARSEABLE_RESPONSE_MESSAGE)

    reasoning = data.get("reasoning") or MISSING_REASONING
    return ReviewAnalysis(verdict=data["verdict"], reasoning=str(reasoning))


class GeminiBackend:
    """Gemini JSON-mode completion."""

    def __init__(self, api_key: str, model_name: str, temperature: float):
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(
            model_name=model_name,
            generation_config={
                "temperature": temperature,
                "response_mime_type": "application/json"
            },
            system_instruction=ANALYSIS_PROMPT
        )

    def generate(self, user_prompt: str) -> str:
        response = self.model.generate_content(user_prompt)
        try:
            return response.text
        except ValueError:
            # Blocked or candidate-less responses have no text
            return ""


class OpenAIBackend:
    """OpenAI chat completion in JSON object mode."""

    def __init__(self, api_key: str, model_name: str, temperature: float):
        self.client = OpenAI(api_key=api_key)
        self.model_name = model_name
        self.temperature = temperature

    def generate(self, user_prompt: str) -> str:
        response = self.client.chat.completions.create(
            model=self.model_name,
            temperature=self.temperature,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": ANALYSIS_PROMPT},
                {"role": "user", "content": user_prompt},
            ]
        )
        return response.choices[0].message.content or ""


class ReviewAnalyzer:
    """
    Judges review authenticity with the configured AI provider.

    Rate-limit errors are retried with exponential backoff
    (base_delay * 2^attempt); any other error propagates at once.
    """

    def __init__(
        self,
        app_settings: AppSettings,
        temperature: float = settings.ANALYSIS_TEMPERATURE,
        max_retries: int = settings.ANALYSIS_MAX_RETRIES,
        base_delay_seconds: float = settings.ANALYSIS_BASE_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep
    ):
        """
        Initialize review analyzer.

        Args:
            app_settings: Provider choice and API keys
            temperature: LLM temperature (low for consistent verdicts)
            max_retries: Retries after the first rate-limited attempt
            base_delay_seconds: First backoff delay
            sleep: Sleep function used between retries

        Raises:
            ConfigurationError: If the selected provider has no API key
        """
        self.provider = app_settings.ai_provider
        self.max_retries = max_retries
        self.base_delay_seconds = base_delay_seconds
        self.sleep = sleep

        if not app_settings.ai_api_key:
            raise ConfigurationError(MISSING_KEY_MESSAGES[self.provider])

        if self.provider == "gemini":
            self.model_name = settings.GEMINI_MODEL
            self.backend = GeminiBackend(app_settings.gemini_api_key, self.model_name, temperature)
        else:
            self.model_name = app_settings.openai_model or settings.DEFAULT_OPENAI_MODEL
            self.backend = OpenAIBackend(app_settings.openai_api_key, self.model_name, temperature)

        logger.info(
            f"Initialized ReviewAnalyzer with provider={self.provider}, "
            f"model={self.model_name}, temp={temperature}"
        )

    def analyze(self, book_title: str, author: str, review: str, description: str) -> ReviewAnalysis:
        """
        Judge whether the review was written by someone who read the book.

        Args:
            book_title: Matched (or reported) book title
            author: Matched (or reported) author
            review: Student's review text
            description: Catalog description of the book

        Returns:
            ReviewAnalysis with verdict and reasoning

        Raises:
            RateLimitError: If the provider stays rate-limited after all retries
            ParseError: If the response is empty or malformed
        """
        user_prompt = _construct_user_prompt(book_title, author, description, review)
        text = self._generate_with_retry(user_prompt)
        analysis = parse_analysis_response(text)
        logger.info(f"Analyzed review for '{book_title}': verdict={analysis.verdict}")
        return analysis

    def _generate_with_retry(self, user_prompt: str) -> str:
        for attempt in range(self.max_retries + 1):
            try:
                return self.backend.generate(user_prompt)
            except Exception as e:
                if not is_rate_limit_error(e):
                    logger.error(f"AI provider error: {e}")
                    raise

                if attempt >= self.max_retries:
                    logger.error(f"Rate limit persisted after {self.max_retries} retries: {e}")
                    raise RateLimitError(RATE_LIMIT_MESSAGE) from e

                delay = self.base_delay_seconds * (2 ** attempt)
                logger.warning(
                    f"Rate limited (attempt {attempt + 1}/{self.max_retries + 1}), "
                    f"retrying in {delay:.1f}s"
                )
                self.sleep(delay)

        raise RateLimitError(RATE_LIMIT_MESSAGE)
