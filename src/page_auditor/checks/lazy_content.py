"""Lazy loading and infinite scroll detection."""

import re

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import attr_or_empty, issue


PAGINATION_LINKS_LIMIT = 10
LAZY_IMAGE_SUGGESTION_THRESHOLD = 5

INFINITE_SCROLL_PATTERNS = [
    (re.compile(r"infinite[\s_-]?scroll", re.I), "Infinite scroll class/ID"),
    (re.compile(r"load[\s_-]?more", re.I), "Load more pattern"),
    (re.compile(r"IntersectionObserver", re.I), "IntersectionObserver API"),
    (re.compile(r"scroll[\s_-]?trigger", re.I), "Scroll trigger"),
    (re.compile(r"lazy[\s_-]?load", re.I), "Lazy load pattern"),
    (re.compile(r"waypoint", re.I), "Waypoint library"),
    (re.compile(r"infinite\.js", re.I), "Infinite.js library"),
    (re.compile(r"endless[\s_-]?scroll", re.I), "Endless scroll"),
]

LAZY_LOADING_LIBS = [
    (re.compile(r"lazysizes", re.I), "lazysizes"),
    (re.compile(r"lozad", re.I), "lozad.js"),
    (re.compile(r"vanilla-lazyload", re.I), "vanilla-lazyload"),
    (re.compile(r"blazy", re.I), "bLazy"),
]

INFINITE_ELEMENT_SELECTOR = (
    "[data-infinite], [data-infinite-scroll], .infinite-scroll, .load-more, [data-load-more]"
)
LAZY_IMAGE_SELECTOR = 'img[loading="lazy"], img[data-src], img[data-lazy], img.lazyload, img.lazy'
LAZY_IFRAME_SELECTOR = 'iframe[loading="lazy"], iframe[data-src], iframe.lazyload'
PAGINATION_SELECTORS = [
    ".pagination a",
    ".pager a",
    'nav[aria-label*="pagination"] a',
    '[class*="pagination"] a',
    'a[rel="next"]',
    'a[rel="prev"]',
]


def check_lazy_content(facts: DocumentFacts) -> CheckResult:
    html = facts.raw_html
    doc = facts.document

    patterns = [name for pattern, name in INFINITE_SCROLL_PATTERNS if pattern.search(html)]
    patterns.extend(f"{name} library" for pattern, name in LAZY_LOADING_LIBS if pattern.search(html))
    if doc.select(INFINITE_ELEMENT_SELECTOR):
        patterns.append("Infinite scroll data attributes/classes")
    has_infinite_scroll = bool(patterns)

    lazy_images = len(doc.select(LAZY_IMAGE_SELECTOR))
    native_lazy_images = len(doc.select('img[loading="lazy"]'))
    lazy_iframes = len(doc.select(LAZY_IFRAME_SELECTOR))

    pagination_links: list[str] = []
    for selector in PAGINATION_SELECTORS:
        for link in doc.select(selector):
            href = attr_or_empty(link, "href")
            if href and href not in pagination_links:
                pagination_links.append(href)
    has_pagination = bool(pagination_links)

    issues = []
    recommendations = []
    if has_infinite_scroll and not has_pagination:
        issues.append(issue(
            IssueSeverity.WARNING,
            "lazy-infinite-scroll",
            "Infinite scroll detected without pagination fallback",
        ))
        recommendations.append(
            "Add paginated URLs for infinite scroll content so search engines can crawl all content"
        )
    if has_infinite_scroll:
        recommendations.append("Ensure infinite scroll content is reachable via direct URLs")
    if not lazy_images and len(doc.find_all("img")) > LAZY_IMAGE_SUGGESTION_THRESHOLD:
        recommendations.append("Consider lazy loading images below the fold")
    if 0 < lazy_images and native_lazy_images < lazy_images:
        recommendations.append('Consider the native loading="lazy" attribute')

    status = SeoStatus.GOOD
    if has_infinite_scroll and not has_pagination:
        status = SeoStatus.WARNING
    if len(issues) > 1:
        status = SeoStatus.ERROR

    return CheckResult(
        status=status,
        issues=tuple(issues),
        details={
            "hasInfiniteScroll": has_infinite_scroll,
            "infiniteScrollPatterns": patterns,
            "hasLazyImages": lazy_images > 0,
            "lazyImageCount": lazy_images,
            "hasLazyIframes": lazy_iframes > 0,
            "lazyIframeCount": lazy_iframes,
            "hasIntersectionObserver": bool(re.search(r"IntersectionObserver", html, re.I)),
            "hasPagination": has_pagination,
            "paginationLinks": pagination_links[:PAGINATION_LINKS_LIMIT],
            "recommendations": recommendations,
        },
    )
