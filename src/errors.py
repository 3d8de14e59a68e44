"""
Error taxonomy for ReadOrNot.

Every error carries a user-facing message; none of them is persisted.
"""


class ReadOrNotError(Exception):
    """Base class for all application errors."""


class ConfigurationError(ReadOrNotError):
    """Required credentials are missing. Blocks the action."""


class ParseError(ReadOrNotError):
    """Malformed upload file or malformed AI response."""


class ValidationError(ReadOrNotError):
    """Invalid user-supplied data (e.g. a manual column mapping)."""


class VerificationError(ReadOrNotError):
    """Transport or HTTP failure against the book search service."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(ReadOrNotError):
    """AI provider rate limit persisted after all retries."""


class AnalysisRefusedError(ReadOrNotError):
    """Review analysis request refused before any network call."""
