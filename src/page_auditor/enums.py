"""
Enumeration types for the page auditor.

These enums provide type-safe constants for statuses, error kinds,
and configuration options throughout the system.
"""

from enum import Enum


class SeoStatus(Enum):
    """Qualitative outcome of one checker."""

    GOOD = "good"
    WARNING = "warning"
    ERROR = "error"
    INFO = "info"


class FetchErrorType(Enum):
    """Kinds of retrieval failure."""

    INVALID_URL = "invalid-url"
    CORS = "cors"
    NETWORK = "network"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class AnalysisState(Enum):
    """Orchestrator lifecycle states."""

    IDLE = "idle"
    FETCHING = "fetching"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"


class IssueSeverity(Enum):
    """Severity of a single reported issue."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class LogLevel(Enum):
    """Logging severity levels."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class VitalsRating(Enum):
    """Estimated rating of a Core Web Vitals metric."""

    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs-improvement"
    POOR = "poor"


class RenderingType(Enum):
    """Detected rendering strategy of a page."""

    SSR = "ssr"
    CSR = "csr"
    HYBRID = "hybrid"
    STATIC = "static"
    UNKNOWN = "unknown"
