"""
Exception classes for the page auditor.

All exceptions inherit from PageAuditorError and provide structured
error information with codes, messages, and optional details.
"""

from typing import Optional


class PageAuditorError(Exception):
    """Base exception for all page auditor errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[dict] = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict:
        """Convert exception to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(PageAuditorError):
    """Raised when a URL or a persisted document fails validation."""

    pass


class NetworkError(PageAuditorError):
    """Raised when a direct network probe fails (header checks)."""

    pass


class AnalysisError(PageAuditorError):
    """Raised when a checker fails while analyzing a document."""

    pass


class PersistenceError(PageAuditorError):
    """Raised when a versioned store is misconfigured."""

    pass


class ConfigurationError(PageAuditorError):
    """Raised when a configuration file cannot be used."""

    pass
