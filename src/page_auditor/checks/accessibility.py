"""
Accessibility checker.

Runs a set of WCAG-oriented sub-checks over the parsed document. Each
sub-check returns its issues, passed rules and a score deduction; the
category score starts at 100 and is clamped to 0-100.
"""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts, HEADING_TAGS
from ..models import CheckResult, Issue, PassedCheck
from .base import attr_or_empty, clamp, issue, passed, text_of


ACCESSIBILITY_SCORE_GOOD = 80
ACCESSIBILITY_SCORE_WARNING = 50
ACCESSIBILITY_ERRORS_MAX = 3
ACCESSIBILITY_WARNINGS_MAX = 3

LANDMARK_SELECTOR = (
    'main, nav, header, footer, aside, [role="main"], [role="navigation"], '
    '[role="banner"], [role="contentinfo"], [role="complementary"], [role="search"]'
)
FORM_INPUT_SELECTOR = (
    'input:not([type="hidden"]):not([type="submit"]):not([type="button"]), textarea, select'
)
BUTTON_SELECTOR = 'button, [role="button"], input[type="button"], input[type="submit"]'


@dataclass
class SubCheck:
    """Outcome of one accessibility sub-check."""

    issues: list[Issue] = field(default_factory=list)
    passed: list[PassedCheck] = field(default_factory=list)
    score_delta: int = 0
    details: dict = field(default_factory=dict)


def _wcag(severity: IssueSeverity, rule: str, message: str, criteria: str, count: int = 1) -> Issue:
    return issue(severity, rule, message, count=count, wcag_level="A", wcag_criteria=criteria)


def check_landmarks(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    landmarks = {
        "hasMain": doc.select_one('main, [role="main"]') is not None,
        "hasNav": doc.select_one('nav, [role="navigation"]') is not None,
        "hasHeader": doc.select_one('header, [role="banner"]') is not None,
        "hasFooter": doc.select_one('footer, [role="contentinfo"]') is not None,
        "hasAside": doc.select_one('aside, [role="complementary"]') is not None,
        "landmarks": list(dict.fromkeys(el.name for el in doc.select(LANDMARK_SELECTOR))),
    }
    result.details = landmarks

    if not landmarks["hasMain"]:
        result.issues.append(_wcag(IssueSeverity.WARNING, "landmark-main", "Page lacks a main landmark", "1.3.1"))
        result.score_delta -= 5
    else:
        result.passed.append(passed("landmark-main", "Has main landmark"))

    if not landmarks["hasNav"] and len(doc.find_all("a")) > 5:
        result.issues.append(_wcag(
            IssueSeverity.INFO,
            "landmark-nav",
            "Consider adding a navigation landmark",
            "1.3.1",
        ))
        result.score_delta -= 2
    return result


def check_image_alts(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    images = doc.find_all("img")
    missing = sum(1 for img in images if not img.has_attr("alt"))

    if missing:
        result.issues.append(_wcag(
            IssueSeverity.ERROR, "img-alt", "Images missing alt attribute", "1.1.1", count=missing
        ))
        result.score_delta -= min(20, missing * 3)
    elif images:
        result.passed.append(passed("img-alt", "All images have alt attributes"))
    return result


def _has_label(doc: BeautifulSoup, control) -> bool:
    control_id = control.get("id")
    if control_id and doc.find("label", attrs={"for": control_id}) is not None:
        return True
    return control.find_parent("label") is not None


def check_forms(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    inputs = doc.select(FORM_INPUT_SELECTOR)
    labelled = 0
    placeholder_only = 0

    for control in inputs:
        has_label = _has_label(doc, control)
        aria_label = control.get("aria-label")
        if has_label or aria_label or control.get("aria-labelledby"):
            labelled += 1
        if control.get("placeholder") and not has_label and not aria_label:
            placeholder_only += 1

    result.details = {
        "totalInputs": len(inputs),
        "inputsWithLabels": labelled,
        "inputsWithPlaceholderOnly": placeholder_only,
        "requiredFields": len(doc.select("[required]")),
        "requiredWithAriaRequired": len(doc.select('[required][aria-required="true"]')),
    }

    if inputs and labelled < len(inputs):
        missing = len(inputs) - labelled
        result.issues.append(_wcag(
            IssueSeverity.ERROR, "form-labels", "Form inputs missing associated labels", "1.3.1", count=missing
        ))
        result.score_delta -= min(15, missing * 3)
    elif inputs:
        result.passed.append(passed("form-labels", "All form inputs have labels"))

    if placeholder_only:
        result.issues.append(_wcag(
            IssueSeverity.WARNING,
            "placeholder-label",
            "Inputs using placeholder as only label",
            "3.3.2",
            count=placeholder_only,
        ))
        result.score_delta -= min(10, placeholder_only * 2)
    return result


def check_link_text(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    empty = [
        link for link in doc.select("a[href]")
        if not text_of(link)
        and not attr_or_empty(link, "aria-label")
        and not attr_or_empty(link, "title")
        and link.select_one("img[alt]") is None
    ]
    if empty:
        result.issues.append(_wcag(
            IssueSeverity.ERROR, "link-text", "Links without accessible text", "2.4.4", count=len(empty)
        ))
        result.score_delta -= min(15, len(empty) * 3)
    return result


def check_button_text(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    empty = [
        button for button in doc.select(BUTTON_SELECTOR)
        if not text_of(button)
        and not attr_or_empty(button, "aria-label")
        and not attr_or_empty(button, "value")
        and not attr_or_empty(button, "title")
    ]
    if empty:
        result.issues.append(_wcag(
            IssueSeverity.ERROR, "button-text", "Buttons without accessible text", "4.1.2", count=len(empty)
        ))
        result.score_delta -= min(10, len(empty) * 2)
    return result


def check_heading_structure(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    levels = [int(h.name[1]) for h in doc.find_all(HEADING_TAGS)]
    h1_count = levels.count(1)

    if h1_count == 0:
        result.issues.append(_wcag(IssueSeverity.ERROR, "heading-h1", "Page lacks an H1 heading", "1.3.1"))
        result.score_delta -= 10
    elif h1_count > 1:
        result.issues.append(_wcag(
            IssueSeverity.WARNING, "heading-h1-multiple", "Multiple H1 headings found", "1.3.1", count=h1_count
        ))
        result.score_delta -= 5
    else:
        result.passed.append(passed("heading-h1", "Has single H1 heading"))

    if any(current - previous > 1 for previous, current in zip(levels, levels[1:])):
        result.issues.append(_wcag(IssueSeverity.WARNING, "heading-order", "Heading levels are skipped", "1.3.1"))
        result.score_delta -= 5
    return result


def check_language(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    html = doc.find("html")
    if html is None or not attr_or_empty(html, "lang"):
        result.issues.append(_wcag(
            IssueSeverity.ERROR, "html-lang", "Missing lang attribute on html element", "3.1.1"
        ))
        result.score_delta -= 10
    else:
        result.passed.append(passed("html-lang", "HTML has lang attribute"))
    return result


def _positive_tabindex(value: str) -> bool:
    try:
        return int(value.strip()) > 0
    except ValueError:
        return False


def check_tabindex(doc: BeautifulSoup) -> SubCheck:
    result = SubCheck()
    positive = [el for el in doc.select("[tabindex]") if _positive_tabindex(attr_or_empty(el, "tabindex"))]
    if positive:
        result.issues.append(_wcag(
            IssueSeverity.WARNING,
            "tabindex-positive",
            "Elements with positive tabindex may disrupt navigation",
            "2.4.3",
            count=len(positive),
        ))
        result.score_delta -= 5
    return result


def aria_usage(doc: BeautifulSoup) -> dict:
    roles = [attr_or_empty(el, "role") for el in doc.select("[role]")]
    return {
        "ariaLabels": len(doc.select("[aria-label]")),
        "ariaDescribedby": len(doc.select("[aria-describedby]")),
        "ariaHidden": len(doc.select('[aria-hidden="true"]')),
        "roles": list(dict.fromkeys(r for r in roles if r)),
        "liveRegions": len(doc.select("[aria-live]")),
    }


def accessibility_status(score: float, error_count: int, warning_count: int) -> SeoStatus:
    if error_count > ACCESSIBILITY_ERRORS_MAX or score < ACCESSIBILITY_SCORE_WARNING:
        return SeoStatus.ERROR
    if error_count > 0 or warning_count > ACCESSIBILITY_WARNINGS_MAX or score < ACCESSIBILITY_SCORE_GOOD:
        return SeoStatus.WARNING
    return SeoStatus.GOOD


def check_accessibility(facts: DocumentFacts) -> CheckResult:
    doc = facts.document
    landmarks = check_landmarks(doc)
    forms = check_forms(doc)
    sub_checks = [
        landmarks,
        check_image_alts(doc),
        forms,
        check_link_text(doc),
        check_button_text(doc),
        check_heading_structure(doc),
        check_language(doc),
        check_tabindex(doc),
    ]

    issues = [i for sub in sub_checks for i in sub.issues]
    checks = [p for sub in sub_checks for p in sub.passed]
    score = int(clamp(100 + sum(sub.score_delta for sub in sub_checks)))

    errors = sum(1 for i in issues if i.severity == IssueSeverity.ERROR)
    warnings = sum(1 for i in issues if i.severity == IssueSeverity.WARNING)

    return CheckResult(
        status=accessibility_status(score, errors, warnings),
        issues=tuple(issues),
        passed=tuple(checks),
        score_delta=score - 100,
        score=score,
        details={
            "landmarks": landmarks.details,
            "aria": aria_usage(doc),
            "forms": forms.details,
            "contrast": {"lightTextOnLight": 0, "potentialIssues": 0},
        },
    )
