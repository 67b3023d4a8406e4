"""Technical SEO checker: doctype, charset, viewport, canonical, HTTPS and language."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from ..url_utils import normalize_url
from .base import issue, passed


TECHNICAL_CHECKS_GOOD = 5
TECHNICAL_CHECKS_WARNING = 3


def check_technical(facts: DocumentFacts) -> CheckResult:
    flags = facts.technical
    url = normalize_url(facts.url)
    is_https = url.startswith("https://")
    has_canonical = facts.meta.canonical is not None
    has_language = facts.meta.language is not None

    checks = [
        ("tech-doctype", flags.has_doctype, "Document has a doctype"),
        ("tech-charset", flags.has_charset, "Character encoding is declared"),
        ("tech-viewport", flags.has_viewport, "Viewport is declared"),
        ("tech-canonical", has_canonical, "Canonical URL is set"),
        ("tech-https", is_https, "Page is served over HTTPS"),
        ("tech-language", has_language, "Document language is declared"),
    ]
    passed_count = sum(1 for _, ok, _ in checks if ok)

    if passed_count >= TECHNICAL_CHECKS_GOOD:
        status = SeoStatus.GOOD
    elif passed_count >= TECHNICAL_CHECKS_WARNING:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.ERROR

    issues = [
        issue(IssueSeverity.WARNING, rule, f"Missing: {description.lower()}")
        for rule, ok, description in checks
        if not ok
    ]
    if not flags.has_favicon:
        issues.append(issue(IssueSeverity.INFO, "tech-favicon", "No favicon link found"))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(passed(rule, description) for rule, ok, description in checks if ok),
        details={
            "hasDoctype": flags.has_doctype,
            "hasCharset": flags.has_charset,
            "hasViewport": flags.has_viewport,
            "hasCanonical": has_canonical,
            "hasHreflang": flags.has_hreflang,
            "hasFavicon": flags.has_favicon,
            "isHttps": is_https,
            "hasLanguage": has_language,
            "urlLength": len(url),
            "passedChecks": passed_count,
        },
    )
