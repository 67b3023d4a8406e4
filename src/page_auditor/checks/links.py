"""Link checker: internal/external split, nofollow and anchor quality."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from ..url_utils import is_internal_link
from .base import issue, passed


NON_DESCRIPTIVE_ANCHORS = frozenset({"click here", "read more", "here", "link", "more"})


def check_links(facts: DocumentFacts) -> CheckResult:
    items = []
    internal = 0
    external = 0
    nofollow = 0
    non_descriptive = 0
    empty = 0

    for link in facts.links:
        link_issues = []
        internal_link = is_internal_link(link.href, facts.url)
        is_nofollow = bool(link.rel) and "nofollow" in link.rel
        opens_new_tab = link.target == "_blank"

        if internal_link:
            internal += 1
        elif link.href.startswith("http"):
            external += 1

        if is_nofollow:
            nofollow += 1

        if link.text.lower() in NON_DESCRIPTIVE_ANCHORS:
            non_descriptive += 1
            link_issues.append("Non-descriptive anchor text")
        if not link.text.strip():
            empty += 1
            link_issues.append("Empty anchor text")

        items.append({
            "href": link.href,
            "text": link.text,
            "isInternal": internal_link,
            "isNofollow": is_nofollow,
            "opensNewTab": opens_new_tab,
            "issues": link_issues,
        })

    issues = []
    checks = []
    if internal == 0:
        issues.append(issue(IssueSeverity.WARNING, "link-internal", "Page has no internal links"))
    else:
        checks.append(passed("link-internal", f"Page has {internal} internal links"))
    if non_descriptive:
        issues.append(issue(
            IssueSeverity.INFO, "link-text", "Links with non-descriptive text", count=non_descriptive
        ))
    if empty:
        issues.append(issue(IssueSeverity.WARNING, "link-empty", "Links with empty anchor text", count=empty))

    return CheckResult(
        status=SeoStatus.GOOD if internal > 0 else SeoStatus.WARNING,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "total": len(facts.links),
            "internal": internal,
            "external": external,
            "nofollow": nofollow,
            "items": items,
        },
    )
