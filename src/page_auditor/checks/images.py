"""Image checker: alt text coverage, lazy loading, formats and file names."""

import re

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue, passed


IMAGE_ALT_WARNING_THRESHOLD = 0.2

GENERIC_FILENAME_RE = re.compile(r"^img_?\d+|dsc_?\d+|image\d+|photo\d+|screenshot", re.IGNORECASE)


def image_format(src: str) -> str:
    """Guess the format from the last dot-separated part of the source, minus any query."""
    return src.rsplit(".", 1)[-1].lower().split("?")[0] if src else ""


def alt_status(total: int, without_alt: int) -> SeoStatus:
    """
    Grade alt coverage.

    A missing-alt ratio of exactly the threshold is an error.
    """
    if total == 0 or without_alt == 0:
        return SeoStatus.GOOD
    if without_alt / total < IMAGE_ALT_WARNING_THRESHOLD:
        return SeoStatus.WARNING
    return SeoStatus.ERROR


def check_images(facts: DocumentFacts) -> CheckResult:
    items = []
    formats: dict[str, int] = {}
    without_alt = 0
    lazy = 0
    generic = 0

    for img in facts.images:
        img_issues = []
        has_alt = img.alt is not None and img.alt.strip() != ""
        has_lazy = img.loading == "lazy"

        if not has_alt:
            without_alt += 1
            img_issues.append("Missing alt text")
        if has_lazy:
            lazy += 1

        fmt = image_format(img.src)
        formats[fmt] = formats.get(fmt, 0) + 1

        if GENERIC_FILENAME_RE.search(img.src):
            generic += 1
            img_issues.append("Generic file name")

        items.append({
            "src": img.src,
            "alt": img.alt,
            "hasLazyLoading": has_lazy,
            "format": fmt,
            "issues": img_issues,
        })

    total = len(facts.images)
    status = alt_status(total, without_alt)

    issues = []
    if without_alt:
        severity = IssueSeverity.ERROR if status == SeoStatus.ERROR else IssueSeverity.WARNING
        issues.append(issue(severity, "img-alt", "Images without alt text", count=without_alt))
    if generic:
        issues.append(issue(IssueSeverity.INFO, "img-filename", "Images with generic file names", count=generic))

    checks = []
    if total and not without_alt:
        checks.append(passed("img-alt", "All images have alt text"))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "total": total,
            "withoutAlt": without_alt,
            "withLazyLoading": lazy,
            "formats": formats,
            "items": items,
        },
    )
