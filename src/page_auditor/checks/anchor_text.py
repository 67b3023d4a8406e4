"""Anchor text checker: generic, descriptive and over-long link texts."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue


ANCHOR_TEXT_MAX_LENGTH = 60
ANCHOR_TEXT_MIN_LENGTH = 2
GENERIC_ANCHOR_WARNING_THRESHOLD = 0.3
OVER_OPTIMIZED_ANCHOR_WARNING_THRESHOLD = 0.2
GENERIC_ANCHOR_ERROR_THRESHOLD = 0.5
GENERIC_TEXTS_DISPLAY_LIMIT = 10

GENERIC_ANCHOR_PHRASES = (
    "click here",
    "read more",
    "learn more",
    "here",
    "more",
    "link",
    "this",
    "click",
    "go",
    "see more",
    "view more",
    "continue reading",
)


def is_generic(text: str) -> bool:
    return any(text == phrase or text.startswith(phrase + " ") for phrase in GENERIC_ANCHOR_PHRASES)


def check_anchor_text(facts: DocumentFacts) -> CheckResult:
    generic = 0
    descriptive = 0
    over_optimized = 0
    generic_texts: list[str] = []

    for link in facts.links:
        text = link.text.lower().strip()
        if len(text) < ANCHOR_TEXT_MIN_LENGTH:
            continue
        if is_generic(text):
            generic += 1
            if link.text not in generic_texts:
                generic_texts.append(link.text)
        elif len(text) > ANCHOR_TEXT_MAX_LENGTH:
            over_optimized += 1
        else:
            descriptive += 1

    total = generic + descriptive + over_optimized
    issues = []
    if generic > total * GENERIC_ANCHOR_WARNING_THRESHOLD:
        issues.append(issue(
            IssueSeverity.WARNING, "anchor-generic", "Too many generic anchor texts", count=generic
        ))
    if over_optimized > total * OVER_OPTIMIZED_ANCHOR_WARNING_THRESHOLD:
        issues.append(issue(
            IssueSeverity.WARNING, "anchor-length", "Too many overly long anchor texts", count=over_optimized
        ))

    if generic > total * GENERIC_ANCHOR_ERROR_THRESHOLD:
        status = SeoStatus.ERROR
    elif issues:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    return CheckResult(
        status=status,
        issues=tuple(issues),
        details={
            "total": total,
            "generic": generic,
            "descriptive": descriptive,
            "overOptimized": over_optimized,
            "genericTexts": generic_texts[:GENERIC_TEXTS_DISPLAY_LIMIT],
        },
    )
