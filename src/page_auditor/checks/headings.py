"""Heading structure checker."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue, passed


def check_headings(facts: DocumentFacts) -> CheckResult:
    """
    Check for a single h1 and a heading outline without skipped levels.

    A level jump of more than one (h2 followed by h4) is a gap; the first
    heading may start at any level.
    """
    items = []
    issues = []
    h1_count = sum(1 for h in facts.headings if h.level == 1)
    proper_hierarchy = True
    previous_level = 0

    for heading in facts.headings:
        heading_issues = []
        if previous_level > 0 and heading.level > previous_level + 1:
            proper_hierarchy = False
            heading_issues.append(f"Skipped level: h{previous_level} to h{heading.level}")
        if not heading.text:
            heading_issues.append("Empty heading")
        items.append({
            "tag": heading.tag,
            "level": heading.level,
            "text": heading.text,
            "issues": heading_issues,
        })
        previous_level = heading.level

    empty = sum(1 for h in facts.headings if not h.text)
    if empty:
        issues.append(issue(IssueSeverity.WARNING, "heading-empty", "Empty headings found", count=empty))

    if h1_count == 0:
        issues.append(issue(IssueSeverity.ERROR, "heading-h1-missing", "Page has no h1 heading"))
    elif h1_count > 1:
        issues.append(issue(
            IssueSeverity.WARNING,
            "heading-h1-multiple",
            f"Page has {h1_count} h1 headings",
            count=h1_count,
        ))

    if not proper_hierarchy:
        issues.append(issue(IssueSeverity.WARNING, "heading-hierarchy", "Heading levels are skipped"))

    if h1_count == 1 and proper_hierarchy:
        status = SeoStatus.GOOD
    elif h1_count == 0:
        status = SeoStatus.ERROR
    else:
        status = SeoStatus.WARNING

    checks = []
    if h1_count == 1:
        checks.append(passed("heading-h1", "Page has exactly one h1"))
    if proper_hierarchy and facts.headings:
        checks.append(passed("heading-hierarchy", "Heading levels are not skipped"))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "items": items,
            "h1Count": h1_count,
            "hasProperHierarchy": proper_hierarchy,
        },
    )
