"""Performance checker: DOM size, HTML weight and render-blocking resources."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue, passed


DOM_ELEMENTS_GOOD = 1500
DOM_ELEMENTS_WARNING = 3000
HTML_SIZE_GOOD = 500_000
HTML_SIZE_WARNING = 1_000_000
BLOCKING_RESOURCES_MAX = 3


def blocking_resources(facts: DocumentFacts) -> int:
    """Count synchronous external scripts plus external stylesheets."""
    scripts = facts.scripts
    return scripts.external - scripts.async_count - scripts.defer_count + facts.styles.external


def check_performance(facts: DocumentFacts) -> CheckResult:
    elements = facts.dom.elements
    blocking = blocking_resources(facts)

    if elements <= DOM_ELEMENTS_GOOD and facts.html_size <= HTML_SIZE_GOOD and blocking <= BLOCKING_RESOURCES_MAX:
        status = SeoStatus.GOOD
    elif elements <= DOM_ELEMENTS_WARNING or facts.html_size <= HTML_SIZE_WARNING:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.ERROR

    issues = []
    checks = []
    if elements > DOM_ELEMENTS_GOOD:
        severity = IssueSeverity.WARNING if elements <= DOM_ELEMENTS_WARNING else IssueSeverity.ERROR
        issues.append(issue(severity, "perf-dom-size", f"DOM has {elements} elements"))
    else:
        checks.append(passed("perf-dom-size", f"DOM size is reasonable ({elements} elements)"))
    if facts.html_size > HTML_SIZE_GOOD:
        severity = IssueSeverity.WARNING if facts.html_size <= HTML_SIZE_WARNING else IssueSeverity.ERROR
        issues.append(issue(severity, "perf-html-size", f"HTML is {facts.html_size} bytes"))
    if blocking > BLOCKING_RESOURCES_MAX:
        issues.append(issue(
            IssueSeverity.WARNING,
            "perf-blocking",
            f"{blocking} render-blocking resources",
            count=blocking,
        ))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "htmlSize": facts.html_size,
            "domElements": elements,
            "domDepth": facts.dom.max_depth,
            "scriptsCount": facts.scripts.external + facts.scripts.inline,
            "stylesheetsCount": facts.styles.external,
            "inlineScripts": facts.scripts.inline,
            "inlineStyles": facts.styles.inline,
            "blockingResources": max(0, blocking),
        },
    )
