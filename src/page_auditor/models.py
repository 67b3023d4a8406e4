"""
Data models for the page auditor.

This module defines the retrieval results, checker results, analysis
reports and history entries passed between the pipeline stages.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from .enums import FetchErrorType, IssueSeverity, SeoStatus


@dataclass(frozen=True)
class FetchError:
    """Typed failure surfaced to callers of the fetch pipeline."""

    type: FetchErrorType
    message: str

    def to_dict(self) -> dict:
        """Convert error to dictionary for serialization."""
        return {"type": self.type.value, "message": self.message}


@dataclass(frozen=True)
class ProviderAttempt:
    """Outcome of one failed provider attempt."""

    provider: str
    error_type: FetchErrorType  # TIMEOUT or NETWORK
    message: str  # e.g. "allorigins: HTTP 503"


@dataclass(frozen=True)
class FetchSuccess:
    """HTML retrieved through one of the providers."""

    html: str
    duration_ms: float  # measured from the first attempt
    provider: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class FetchFailure:
    """Every provider failed, or the URL was rejected up front."""

    error: FetchError
    attempts: tuple[ProviderAttempt, ...] = ()

    @property
    def ok(self) -> bool:
        return False


RetrievalResult = Union[FetchSuccess, FetchFailure]


@dataclass(frozen=True)
class ResourceResult:
    """Result of fetching an auxiliary text resource (robots.txt, sitemap)."""

    ok: bool
    content: Optional[str] = None


@dataclass(frozen=True)
class Issue:
    """A single problem detected by a checker."""

    severity: IssueSeverity
    rule: str  # machine-readable rule id, e.g. "img-alt"
    message: str
    count: int = 1
    wcag_level: Optional[str] = None  # accessibility issues only
    wcag_criteria: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "type": self.severity.value,
            "rule": self.rule,
            "message": self.message,
            "count": self.count,
        }
        if self.wcag_criteria:
            data["wcagLevel"] = self.wcag_level
            data["wcagCriteria"] = self.wcag_criteria
        return data


@dataclass(frozen=True)
class PassedCheck:
    """A rule that a checker verified as satisfied."""

    rule: str
    description: str

    def to_dict(self) -> dict:
        return {"rule": self.rule, "description": self.description}


@dataclass(frozen=True)
class CheckResult:
    """
    Partial result contributed by one checker.

    Results from different checkers are independent: they never reference
    each other and can be merged in any order.
    """

    status: SeoStatus
    issues: tuple[Issue, ...] = ()
    passed: tuple[PassedCheck, ...] = ()
    score_delta: int = 0
    score: Optional[int] = None  # 0-100 for categories that grade themselves
    details: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == IssueSeverity.ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == IssueSeverity.WARNING)

    def to_dict(self) -> dict:
        """
        Flatten the result into the report sub-object for its category.

        Category-specific details sit next to ``status``; issues and passed
        checks are only included when the checker produced any.
        """
        data: dict = {"status": self.status.value}
        data.update(self.details)
        if self.score is not None:
            data["score"] = self.score
        if self.score_delta:
            data["scoreDelta"] = self.score_delta
        if self.issues:
            data["issues"] = [issue.to_dict() for issue in self.issues]
        if self.passed:
            data["passed"] = [check.to_dict() for check in self.passed]
        return data


@dataclass(frozen=True)
class HistoryEntry:
    """One remembered analysis."""

    url: str
    analyzed_at: str  # ISO-8601
    overall_score: int

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "analyzedAt": self.analyzed_at,
            "overallScore": self.overall_score,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HistoryEntry":
        return cls(
            url=data["url"],
            analyzed_at=data["analyzedAt"],
            overall_score=int(data["overallScore"]),
        )


@dataclass(frozen=True)
class AnalysisReport:
    """Aggregate of all checker results for one page."""

    url: str
    analyzed_at: str  # ISO-8601
    fetch_duration_ms: float
    overall_score: int
    categories: Mapping[str, CheckResult] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "categories", MappingProxyType(dict(self.categories)))

    def category(self, name: str) -> Optional[CheckResult]:
        """Return the result for a category, or None when it was not run."""
        return self.categories.get(name)

    def to_dict(self) -> dict:
        """Convert report to the nested report shape (one key per category)."""
        data: dict = {
            "url": self.url,
            "analyzedAt": self.analyzed_at,
            "fetchDuration": self.fetch_duration_ms,
            "overallScore": self.overall_score,
        }
        for name, result in self.categories.items():
            data[name] = result.to_dict()
        return data
