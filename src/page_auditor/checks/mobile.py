"""Mobile checker: viewport, responsive images, font sizes, touch targets, media queries."""

import re

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import attr_or_empty, issue, passed, style_texts


MOBILE_MIN_FONT_SIZE = 14
TOUCH_TARGET_MIN_SIZE = 44
MOBILE_ISSUES_ERROR_THRESHOLD = 2

_FONT_SIZE_RE = re.compile(r"font-size:\s*(\d+)")
_WIDTH_RE = re.compile(r"width:\s*(\d+)px")
_HEIGHT_RE = re.compile(r"height:\s*(\d+)px")


def _too_small(pattern: re.Pattern, style: str) -> bool:
    match = pattern.search(style)
    return match is not None and int(match.group(1)) < TOUCH_TARGET_MIN_SIZE


def check_mobile(facts: DocumentFacts) -> CheckResult:
    doc = facts.document
    viewport = doc.select_one('meta[name="viewport"]')
    has_viewport = viewport is not None
    viewport_content = attr_or_empty(viewport, "content") or None if viewport is not None else None

    images = doc.find_all("img")
    with_srcset = sum(1 for img in images if img.has_attr("srcset"))
    pictures = len(doc.find_all("picture"))
    responsive_images = with_srcset > 0 or pictures > 0

    small_fonts = 0
    for el in doc.select('[style*="font-size"]'):
        match = _FONT_SIZE_RE.search(attr_or_empty(el, "style"))
        if match and int(match.group(1)) < MOBILE_MIN_FONT_SIZE:
            small_fonts += 1

    media_queries = "@media" in "".join(style_texts(facts)) or "@media" in facts.raw_html

    touch_target_issues = 0
    for el in doc.select("a, button, input, select, textarea"):
        style = attr_or_empty(el, "style")
        if "width" in style or "height" in style:
            if _too_small(_WIDTH_RE, style) or _too_small(_HEIGHT_RE, style):
                touch_target_issues += 1

    issues = []
    if not has_viewport:
        issues.append(issue(IssueSeverity.ERROR, "mobile-viewport", "Viewport meta tag is missing"))
    if not responsive_images and images:
        issues.append(issue(IssueSeverity.WARNING, "mobile-images", "No responsive images (srcset or picture)"))
    if small_fonts:
        issues.append(issue(
            IssueSeverity.WARNING,
            "mobile-font-size",
            f"{small_fonts} elements use fonts smaller than {MOBILE_MIN_FONT_SIZE}px",
            count=small_fonts,
        ))
    if touch_target_issues:
        issues.append(issue(
            IssueSeverity.WARNING,
            "mobile-touch-targets",
            f"{touch_target_issues} touch targets smaller than {TOUCH_TARGET_MIN_SIZE}px",
            count=touch_target_issues,
        ))
    if not media_queries:
        issues.append(issue(IssueSeverity.WARNING, "mobile-media-queries", "No CSS media queries found"))

    if not has_viewport or len(issues) > MOBILE_ISSUES_ERROR_THRESHOLD:
        status = SeoStatus.ERROR
    elif issues:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    checks = []
    if has_viewport:
        checks.append(passed("mobile-viewport", "Viewport meta tag is present"))
    if media_queries:
        checks.append(passed("mobile-media-queries", "CSS media queries found"))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "hasViewport": has_viewport,
            "viewportContent": viewport_content,
            "hasResponsiveImages": responsive_images,
            "imagesWithSrcset": with_srcset,
            "pictureElements": pictures,
            "hasMobileFont": small_fonts == 0,
            "smallFontCount": small_fonts,
            "touchTargetIssues": touch_target_issues,
            "mediaQueries": media_queries,
        },
    )
