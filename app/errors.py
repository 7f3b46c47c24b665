"""
Error taxonomy shared by the descriptor builder, gateway and HTTP layer.
"""
from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Classified failure kinds, one per caller-facing message."""
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"


class TokViewError(Exception):
    """Base class for all classified errors."""
    kind: ErrorKind = ErrorKind.UPSTREAM

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(TokViewError):
    """Bad caller input, raised before any upstream interaction."""
    kind = ErrorKind.VALIDATION


class ConfigurationError(TokViewError):
    """Apify credential missing or unusable."""
    kind = ErrorKind.CONFIGURATION


class AuthError(TokViewError):
    kind = ErrorKind.AUTH


class RateLimitError(TokViewError):
    kind = ErrorKind.RATE_LIMIT


class NotFoundError(TokViewError):
    """No content; covers private accounts and profiles without public videos."""
    kind = ErrorKind.NOT_FOUND


class UpstreamError(TokViewError):
    """Catch-all for unclassified scraper failures."""
    kind = ErrorKind.UPSTREAM


ERROR_CLASSES = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.CONFIGURATION: ConfigurationError,
    ErrorKind.AUTH: AuthError,
    ErrorKind.RATE_LIMIT: RateLimitError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.UPSTREAM: UpstreamError,
}
