"""Meta tag checker: title, description, robots, viewport, canonical, social cards."""

from typing import Optional

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue, passed, worst_status


TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60
DESCRIPTION_MIN_LENGTH = 120
DESCRIPTION_MAX_LENGTH = 160

OPEN_GRAPH_MIN_PRESENT = 3


def length_status(value: Optional[str], minimum: int, maximum: int) -> SeoStatus:
    """Grade a text by length: inside the range is good, present is a warning."""
    length = len(value) if value else 0
    if minimum <= length <= maximum:
        return SeoStatus.GOOD
    if length > 0:
        return SeoStatus.WARNING
    return SeoStatus.ERROR


def _item(label: str, value: Optional[str], missing: SeoStatus) -> dict:
    status = SeoStatus.GOOD if value else missing
    return {"label": label, "value": value, "status": status.value}


def check_meta(facts: DocumentFacts) -> CheckResult:
    meta = facts.meta
    issues = []
    checks = []

    title_status = length_status(meta.title, TITLE_MIN_LENGTH, TITLE_MAX_LENGTH)
    title_length = len(meta.title) if meta.title else 0
    if title_status == SeoStatus.ERROR:
        issues.append(issue(IssueSeverity.ERROR, "meta-title", "Page has no title"))
    elif title_status == SeoStatus.WARNING:
        issues.append(issue(
            IssueSeverity.WARNING,
            "meta-title-length",
            f"Title is {title_length} characters; aim for {TITLE_MIN_LENGTH}-{TITLE_MAX_LENGTH}",
        ))
    else:
        checks.append(passed("meta-title", f"Title length is good ({title_length} characters)"))

    description_status = length_status(meta.description, DESCRIPTION_MIN_LENGTH, DESCRIPTION_MAX_LENGTH)
    description_length = len(meta.description) if meta.description else 0
    if description_status == SeoStatus.ERROR:
        issues.append(issue(IssueSeverity.ERROR, "meta-description", "Page has no meta description"))
    elif description_status == SeoStatus.WARNING:
        issues.append(issue(
            IssueSeverity.WARNING,
            "meta-description-length",
            f"Meta description is {description_length} characters; "
            f"aim for {DESCRIPTION_MIN_LENGTH}-{DESCRIPTION_MAX_LENGTH}",
        ))
    else:
        checks.append(passed(
            "meta-description",
            f"Meta description length is good ({description_length} characters)",
        ))

    robots_noindex = bool(meta.robots) and "noindex" in meta.robots.lower()
    robots_status = SeoStatus.WARNING if robots_noindex else SeoStatus.GOOD
    if robots_noindex:
        issues.append(issue(IssueSeverity.WARNING, "meta-robots-noindex", "Robots meta tag blocks indexing"))

    viewport_status = SeoStatus.GOOD if meta.viewport else SeoStatus.ERROR
    if not meta.viewport:
        issues.append(issue(IssueSeverity.ERROR, "meta-viewport", "Viewport meta tag is missing"))

    canonical_status = SeoStatus.GOOD if meta.canonical else SeoStatus.WARNING
    if meta.canonical:
        checks.append(passed("meta-canonical", "Canonical URL is set"))
    else:
        issues.append(issue(IssueSeverity.WARNING, "meta-canonical", "Canonical URL is missing"))

    og_items = [
        _item("og:title", meta.og_title, SeoStatus.WARNING),
        _item("og:description", meta.og_description, SeoStatus.WARNING),
        _item("og:image", meta.og_image, SeoStatus.WARNING),
        _item("og:type", meta.og_type, SeoStatus.INFO),
        _item("og:url", meta.og_url, SeoStatus.INFO),
    ]
    og_present = sum(1 for item in og_items if item["status"] == SeoStatus.GOOD.value)
    og_status = SeoStatus.GOOD if og_present >= OPEN_GRAPH_MIN_PRESENT else SeoStatus.WARNING
    if og_status == SeoStatus.WARNING:
        issues.append(issue(
            IssueSeverity.WARNING,
            "meta-open-graph",
            f"Only {og_present} of 5 Open Graph tags are set",
        ))

    twitter_items = [
        _item("twitter:card", meta.twitter_card, SeoStatus.WARNING),
        _item("twitter:title", meta.twitter_title, SeoStatus.INFO),
        _item("twitter:description", meta.twitter_description, SeoStatus.INFO),
        _item("twitter:image", meta.twitter_image, SeoStatus.INFO),
    ]
    twitter_status = SeoStatus.GOOD if meta.twitter_card else SeoStatus.WARNING
    if not meta.twitter_card:
        issues.append(issue(IssueSeverity.INFO, "meta-twitter-card", "Twitter card type is not set"))

    details = {
        "title": {"status": title_status.value, "value": meta.title, "length": title_length},
        "description": {
            "status": description_status.value,
            "value": meta.description,
            "length": description_length,
        },
        "keywords": {"status": SeoStatus.INFO.value, "value": meta.keywords},
        "robots": {"status": robots_status.value, "value": meta.robots},
        "viewport": {"status": viewport_status.value, "value": meta.viewport},
        "canonical": {
            "status": canonical_status.value,
            "value": meta.canonical,
            "matchesUrl": meta.canonical == facts.url if meta.canonical else False,
        },
        "openGraph": {"status": og_status.value, "items": og_items},
        "twitterCard": {"status": twitter_status.value, "items": twitter_items},
    }

    return CheckResult(
        status=worst_status(title_status, description_status, viewport_status),
        issues=tuple(issues),
        passed=tuple(checks),
        details=details,
    )
