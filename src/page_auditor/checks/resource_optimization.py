"""Resource optimization checker: minification hints and print styles."""

import re

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import attr_or_empty, issue, style_texts


MINIFICATION_RATE_WARNING = 0.8
MINIFICATION_RATE_ERROR = 0.5
INLINE_SCRIPT_MIN_SIZE = 200
INLINE_STYLE_MIN_SIZE = 500

MINIFIED_URL_MARKERS = (".min.", "-min.", "_min.", ".bundle.", ".prod.")

_WHITESPACE_RE = re.compile(r"\s")
_MINIFIED_PATTERN_RE = re.compile(r"\}\w|;\w|,\w")
_PRINT_MEDIA_RE = re.compile(r"@media\s+print", re.I)


def is_minified(content: str) -> bool:
    """
    Guess whether source text is minified.

    Minified code has long lines or very little whitespace. Content under
    100 characters is never considered minified.
    """
    if not content or len(content) < 100:
        return False

    if len(content) / len(content.split("\n")) > 500:
        return True

    whitespace_ratio = len(_WHITESPACE_RE.findall(content)) / len(content)
    if whitespace_ratio < 0.1 and len(content) > 500:
        return True

    return bool(_MINIFIED_PATTERN_RE.search(content)) and whitespace_ratio < 0.15


def url_suggests_minified(url: str) -> bool:
    lowered = url.lower()
    return any(marker in lowered for marker in MINIFIED_URL_MARKERS)


def _resource(url: str, kind: str) -> dict:
    minified = url_suggests_minified(url)
    return {
        "url": url,
        "type": kind,
        "isMinified": minified,
        "issues": [] if minified else ["Not minified (based on filename)"],
    }


def count_print_media_queries(facts: DocumentFacts) -> int:
    in_styles = sum(len(_PRINT_MEDIA_RE.findall(text)) for text in style_texts(facts))
    return max(in_styles, len(_PRINT_MEDIA_RE.findall(facts.raw_html)))


def check_resource_optimization(facts: DocumentFacts) -> CheckResult:
    doc = facts.document
    messages = []

    scripts = [
        _resource(src, "script")
        for src in (attr_or_empty(el, "src") for el in doc.select("script[src]"))
        if src and not src.startswith("data:")
    ]
    for script in doc.select("script:not([src])"):
        content = script.get_text()
        if len(content) > INLINE_SCRIPT_MIN_SIZE and not is_minified(content):
            messages.append("Large inline script is not minified")

    stylesheets = []
    print_stylesheets = []
    for link in doc.select('link[rel="stylesheet"]'):
        href = attr_or_empty(link, "href")
        media = link.get("media")
        if media and "print" in media and href:
            print_stylesheets.append(href)
        if href and not href.startswith("data:") and media != "print":
            stylesheets.append(_resource(href, "stylesheet"))

    for content in style_texts(facts):
        if len(content) > INLINE_STYLE_MIN_SIZE and not is_minified(content):
            messages.append("Large inline style block is not minified")

    print_media_queries = count_print_media_queries(facts)
    minified_scripts = sum(1 for s in scripts if s["isMinified"])
    minified_stylesheets = sum(1 for s in stylesheets if s["isMinified"])

    if len(scripts) > minified_scripts:
        messages.append(f"{len(scripts) - minified_scripts} script(s) may not be minified")
    if len(stylesheets) > minified_stylesheets:
        messages.append(f"{len(stylesheets) - minified_stylesheets} stylesheet(s) may not be minified")

    status = SeoStatus.GOOD
    total = len(scripts) + len(stylesheets)
    if total:
        rate = (minified_scripts + minified_stylesheets) / total
        if rate < MINIFICATION_RATE_ERROR:
            status = SeoStatus.ERROR
        elif rate < MINIFICATION_RATE_WARNING:
            status = SeoStatus.WARNING

    return CheckResult(
        status=status,
        issues=tuple(issue(IssueSeverity.WARNING, "resource-minification", m) for m in messages),
        details={
            "scripts": scripts,
            "stylesheets": stylesheets,
            "minifiedScripts": minified_scripts,
            "minifiedStylesheets": minified_stylesheets,
            "totalScripts": len(scripts),
            "totalStylesheets": len(stylesheets),
            "hasPrintStyles": bool(print_stylesheets) or print_media_queries > 0,
            "printStylesheets": print_stylesheets,
            "printMediaQueries": print_media_queries,
        },
    )
