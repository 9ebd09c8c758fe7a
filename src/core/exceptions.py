"""
Sarthi Guidance Service - Custom Exceptions

Anti-Patterns Avoided:
- Exception Shadowing: namespaced exceptions instead of builtins like
  ConnectionError or LookupError
"""


class SarthiServiceError(Exception):
    """Base exception for the guidance service.

    All custom exceptions inherit from this base class.
    """
    pass


class InvalidQueryError(SarthiServiceError):
    """Raised when a query is empty or whitespace-only.

    Callers reject the request before retrieval (HTTP 400).
    """
    pass


class StoreUnavailableError(SarthiServiceError):
    """Raised when the verse store cannot be read or holds no verses.

    Infrastructure failure, not a user input problem (HTTP 503).
    """
    pass


class VerseDataError(SarthiServiceError):
    """Raised when a verse record in the data file is malformed."""

    def __init__(self, message: str, record_index: int | None = None) -> None:
        super().__init__(message)
        self.record_index = record_index


class NoMatchingVersesError(SarthiServiceError):
    """Raised when guidance cannot be grounded in any verse (HTTP 404).

    Attributes:
        keywords: Keywords extracted from the query (may be empty)
    """

    def __init__(self, message: str, keywords: list[str] | None = None) -> None:
        super().__init__(message)
        self.keywords = keywords or []


class ConfigurationError(SarthiServiceError):
    """Raised when configuration is invalid or missing."""
    pass
