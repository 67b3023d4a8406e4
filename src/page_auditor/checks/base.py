"""
Shared building blocks for checkers.

A checker is a plain function ``check(facts) -> CheckResult``. It reads
the shared DocumentFacts, never mutates them, and never depends on the
output of another checker.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from bs4.element import Tag

from ..enums import IssueSeverity, SeoStatus, VitalsRating
from ..extractor import DocumentFacts, attr_text
from ..models import CheckResult, Issue, PassedCheck


Checker = Callable[[DocumentFacts], CheckResult]

_STATUS_RANK = {
    SeoStatus.GOOD: 0,
    SeoStatus.INFO: 0,
    SeoStatus.WARNING: 1,
    SeoStatus.ERROR: 2,
}


@dataclass(frozen=True)
class RegisteredChecker:
    """A checker bound to the report category it owns."""

    category: str  # report key, e.g. "coreWebVitals"
    check: Checker
    weighted: bool = False  # contributes to overallScore


def worst_status(*statuses: SeoStatus) -> SeoStatus:
    """Return the most severe status; info ranks with good."""
    return max(statuses, key=lambda s: _STATUS_RANK[s])


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def rate_score(score: float, good: float = 80, needs_improvement: float = 50) -> VitalsRating:
    """Map a 0-100 heuristic score to a vitals rating."""
    if score >= good:
        return VitalsRating.GOOD
    if score >= needs_improvement:
        return VitalsRating.NEEDS_IMPROVEMENT
    return VitalsRating.POOR


def issue(
    severity: IssueSeverity,
    rule: str,
    message: str,
    count: int = 1,
    wcag_level: Optional[str] = None,
    wcag_criteria: Optional[str] = None,
) -> Issue:
    return Issue(
        severity=severity,
        rule=rule,
        message=message,
        count=count,
        wcag_level=wcag_level,
        wcag_criteria=wcag_criteria,
    )


def passed(rule: str, description: str) -> PassedCheck:
    return PassedCheck(rule=rule, description=description)


def text_of(tag: Tag) -> str:
    return tag.get_text().strip()


def attr_or_empty(tag: Tag, name: str) -> str:
    return attr_text(tag, name) or ""


def style_texts(facts: DocumentFacts) -> list[str]:
    return [style.get_text() for style in facts.document.find_all("style")]
