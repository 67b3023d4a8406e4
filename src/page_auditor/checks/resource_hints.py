"""Resource hint checker: preload, prefetch, preconnect and dns-prefetch links."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import attr_or_empty, issue, passed


def _hrefs(facts: DocumentFacts, rel: str) -> list[str]:
    return [attr_or_empty(link, "href") for link in facts.document.select(f'link[rel="{rel}"]')]


def check_resource_hints(facts: DocumentFacts) -> CheckResult:
    preload = _hrefs(facts, "preload")
    prefetch = _hrefs(facts, "prefetch")
    preconnect = _hrefs(facts, "preconnect")
    dns_prefetch = _hrefs(facts, "dns-prefetch")
    has_hints = bool(preload or prefetch or preconnect)

    if has_hints:
        issues = ()
        checks = (passed("resource-hints", "Page declares resource hints"),)
    else:
        issues = (issue(
            IssueSeverity.INFO,
            "resource-hints",
            "No preload, prefetch or preconnect hints found",
        ),)
        checks = ()

    return CheckResult(
        status=SeoStatus.GOOD if has_hints else SeoStatus.INFO,
        issues=issues,
        passed=checks,
        details={
            "preload": preload,
            "prefetch": prefetch,
            "preconnect": preconnect,
            "dnsPrefetch": dns_prefetch,
            "hasResourceHints": has_hints,
        },
    )
