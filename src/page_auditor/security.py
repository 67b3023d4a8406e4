"""
Security analysis: HTTPS and mixed content, response headers, form safety.

HTTPS and forms are read from the already parsed document. Headers come
from a direct HEAD probe, which many sites block; a failed probe is
reported as ``cors_blocked`` and scored as unknown rather than bad.
"""

from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from .enums import SeoStatus
from .exceptions import NetworkError
from .extractor import attr_text
from .fetcher import ResilientFetcher
from .scoring import round_half_up


MIXED_CONTENT_LIMIT = 10

# (header, severity, weight); weights add up to 100
SECURITY_HEADERS = (
    ("Content-Security-Policy", "high", 30),
    ("Strict-Transport-Security", "high", 25),
    ("X-Frame-Options", "medium", 15),
    ("X-Content-Type-Options", "medium", 15),
    ("Referrer-Policy", "low", 10),
    ("Permissions-Policy", "low", 5),
)

HEADER_RECOMMENDATIONS = {
    "Content-Security-Policy": "Add a Content-Security-Policy to restrict where scripts and styles load from",
    "Strict-Transport-Security": "Add Strict-Transport-Security to force HTTPS on repeat visits",
    "X-Frame-Options": "Add X-Frame-Options to prevent clickjacking",
    "X-Content-Type-Options": "Add X-Content-Type-Options: nosniff",
    "Referrer-Policy": "Add a Referrer-Policy to limit referrer leakage",
    "Permissions-Policy": "Add a Permissions-Policy to restrict browser features",
}

CSRF_TOKEN_NAMES = (
    "_token",
    "csrf_token",
    "csrf-token",
    "authenticity_token",
    "__RequestVerificationToken",
    "_csrf",
    "csrfmiddlewaretoken",
)

_MIXED_CONTENT_SELECTORS = (
    ("script", "script[src]", "src"),
    ("stylesheet", 'link[rel="stylesheet"][href]', "href"),
    ("image", "img[src]", "src"),
    ("iframe", "iframe[src]", "src"),
    ("video", "video source[src], video[src]", "src"),
    ("audio", "audio source[src], audio[src]", "src"),
    ("object", "object[data]", "data"),
)

_SENSITIVE_FIELD_SELECTOR = (
    'input[name*="card"], input[name*="cvv"], input[name*="ccv"], input[autocomplete*="cc-"]'
)
_CAPTCHA_SELECTOR = (
    '[class*="recaptcha"], [class*="g-recaptcha"], [class*="h-captcha"], [class*="cf-turnstile"]'
)
_CSRF_SELECTOR = ", ".join(f'input[name="{name}"]' for name in CSRF_TOKEN_NAMES)

HTTPS_WEIGHT = 0.4
HEADERS_WEIGHT = 0.3
FORMS_WEIGHT = 0.3
UNKNOWN_HEADERS_SCORE = 50


@dataclass(frozen=True)
class MixedContentResource:
    type: str
    src: str

    def to_dict(self) -> dict:
        return {"type": self.type, "src": self.src}


@dataclass(frozen=True)
class HttpsAnalysis:
    uses_https: bool
    protocol: str
    mixed_content_count: int
    mixed_content: tuple[MixedContentResource, ...]
    has_upgrade_insecure_requests: bool
    issues: tuple[str, ...]
    status: SeoStatus

    def to_dict(self) -> dict:
        return {
            "usesHttps": self.uses_https,
            "protocol": self.protocol,
            "mixedContentCount": self.mixed_content_count,
            "mixedContent": [m.to_dict() for m in self.mixed_content],
            "hasUpgradeInsecureRequests": self.has_upgrade_insecure_requests,
            "issues": list(self.issues),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class SecurityHeaderItem:
    header: str
    present: bool
    value: Optional[str]
    severity: str
    recommendation: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "header": self.header,
            "present": self.present,
            "value": self.value,
            "severity": self.severity,
        }
        if self.recommendation:
            data["recommendation"] = self.recommendation
        return data


@dataclass(frozen=True)
class CspAnalysis:
    directives_count: int
    has_unsafe_inline: bool
    has_unsafe_eval: bool
    warnings: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "directivesCount": self.directives_count,
            "hasUnsafeInline": self.has_unsafe_inline,
            "hasUnsafeEval": self.has_unsafe_eval,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class SecurityHeadersAnalysis:
    accessible: bool
    cors_blocked: bool
    headers: tuple[SecurityHeaderItem, ...]
    csp_analysis: Optional[CspAnalysis]
    issues: tuple[str, ...]
    status: SeoStatus

    def to_dict(self) -> dict:
        return {
            "accessible": self.accessible,
            "corsBlocked": self.cors_blocked,
            "headers": [h.to_dict() for h in self.headers],
            "cspAnalysis": self.csp_analysis.to_dict() if self.csp_analysis else None,
            "issues": list(self.issues),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class FormAnalysisItem:
    id: int
    action: str
    method: str
    uses_https: bool
    has_sensitive_data: bool
    password_fields_count: int
    has_csrf_protection: bool
    has_captcha: bool
    issues: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "action": self.action,
            "method": self.method,
            "usesHttps": self.uses_https,
            "hasSensitiveData": self.has_sensitive_data,
            "passwordFieldsCount": self.password_fields_count,
            "hasCSRFProtection": self.has_csrf_protection,
            "hasCaptcha": self.has_captcha,
            "issues": list(self.issues),
        }


@dataclass(frozen=True)
class FormsSecurityAnalysis:
    total_forms: int
    forms_with_https: int
    forms_with_csrf: int
    forms_with_sensitive_data: int
    critical_issues: int
    forms: tuple[FormAnalysisItem, ...]
    issues: tuple[str, ...]
    status: SeoStatus

    def to_dict(self) -> dict:
        return {
            "totalForms": self.total_forms,
            "formsWithHttps": self.forms_with_https,
            "formsWithCSRF": self.forms_with_csrf,
            "formsWithSensitiveData": self.forms_with_sensitive_data,
            "criticalIssues": self.critical_issues,
            "forms": [f.to_dict() for f in self.forms],
            "issues": list(self.issues),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class SecurityAnalysis:
    https: HttpsAnalysis
    headers: SecurityHeadersAnalysis
    forms: FormsSecurityAnalysis
    overall_score: int
    status: SeoStatus = field(default=SeoStatus.GOOD)

    def to_dict(self) -> dict:
        return {
            "https": self.https.to_dict(),
            "headers": self.headers.to_dict(),
            "forms": self.forms.to_dict(),
            "overallScore": self.overall_score,
            "status": self.status.value,
        }


def _protocol(url: str) -> Optional[str]:
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return None
    return f"{parts.scheme.lower()}:"


def analyze_https(url: str, doc: BeautifulSoup) -> HttpsAnalysis:
    """
    Check the page protocol and find plain-HTTP subresources.

    Only the first ten mixed-content resources are listed; the count
    covers all of them.
    """
    protocol = _protocol(url)
    if protocol is None:
        return HttpsAnalysis(False, "unknown", 0, (), False, ("Invalid URL",), SeoStatus.ERROR)

    uses_https = protocol == "https:"
    mixed: list[MixedContentResource] = []
    if uses_https:
        for kind, selector, attr in _MIXED_CONTENT_SELECTORS:
            for el in doc.select(selector):
                src = attr_text(el, attr) or ""
                if src.startswith("http://"):
                    mixed.append(MixedContentResource(kind, src))

    has_upgrade = doc.select_one(
        'meta[http-equiv="Content-Security-Policy"][content*="upgrade-insecure-requests"]'
    ) is not None

    issues = []
    if not uses_https:
        issues.append("Page is not served over HTTPS")
    if mixed:
        issues.append(f"{len(mixed)} resources are loaded over insecure HTTP")
    if uses_https and mixed and not has_upgrade:
        issues.append("No upgrade-insecure-requests directive to fix mixed content")

    if not uses_https:
        status = SeoStatus.ERROR
    elif mixed:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    return HttpsAnalysis(
        uses_https=uses_https,
        protocol=protocol,
        mixed_content_count=len(mixed),
        mixed_content=tuple(mixed[:MIXED_CONTENT_LIMIT]),
        has_upgrade_insecure_requests=has_upgrade,
        issues=tuple(issues),
        status=status,
    )


def analyze_csp(csp: str) -> CspAnalysis:
    directives = [d.strip() for d in csp.split(";") if d.strip()]
    has_unsafe_inline = "'unsafe-inline'" in csp
    has_unsafe_eval = "'unsafe-eval'" in csp

    warnings = []
    if has_unsafe_inline:
        warnings.append("CSP allows 'unsafe-inline'")
    if has_unsafe_eval:
        warnings.append("CSP allows 'unsafe-eval'")

    return CspAnalysis(len(directives), has_unsafe_inline, has_unsafe_eval, tuple(warnings))


def evaluate_security_headers(
    response_headers: Optional[dict[str, str]],
) -> SecurityHeadersAnalysis:
    """
    Grade a set of response headers.

    Args:
        response_headers: Headers keyed by lowercase name, or None when
            the probe was blocked

    Returns:
        SecurityHeadersAnalysis; status is info when the probe was blocked
    """
    cors_blocked = response_headers is None
    found = response_headers or {}

    items = []
    for name, severity, _ in SECURITY_HEADERS:
        value = found.get(name.lower()) or None
        items.append(SecurityHeaderItem(
            header=name,
            present=value is not None,
            value=value,
            severity=severity,
            recommendation=None if value else HEADER_RECOMMENDATIONS[name],
        ))

    csp_value = found.get("content-security-policy")
    csp = analyze_csp(csp_value) if csp_value else None

    issues = []
    if cors_blocked:
        issues.append("Security headers could not be read (request blocked)")
    else:
        missing_high = sum(1 for h in items if not h.present and h.severity == "high")
        missing_medium = sum(1 for h in items if not h.present and h.severity == "medium")
        if missing_high:
            issues.append(f"{missing_high} critical security headers missing")
        if missing_medium:
            issues.append(f"{missing_medium} recommended security headers missing")
    if csp is not None:
        issues.extend(csp.warnings)

    if cors_blocked:
        status = SeoStatus.INFO
    else:
        present = sum(1 for h in items if h.present)
        high_present = sum(1 for h in items if h.present and h.severity == "high")
        high_total = sum(1 for h in items if h.severity == "high")
        if high_present == high_total and present >= 4:
            status = SeoStatus.GOOD
        elif high_present > 0 or present >= 2:
            status = SeoStatus.WARNING
        else:
            status = SeoStatus.ERROR

    return SecurityHeadersAnalysis(
        accessible=any(h.present for h in items),
        cors_blocked=cors_blocked,
        headers=tuple(items),
        csp_analysis=csp,
        issues=tuple(issues),
        status=status,
    )


async def analyze_security_headers(url: str, fetcher: ResilientFetcher) -> SecurityHeadersAnalysis:
    """Probe url with a direct HEAD request and grade its security headers."""
    try:
        headers = await fetcher.probe_headers(url)
    except NetworkError:
        headers = None
    return evaluate_security_headers(headers)


def _analyze_form(index: int, form, url: str, page_uses_https: bool) -> FormAnalysisItem:
    action = attr_text(form, "action") or url
    method = (attr_text(form, "method") or "GET").upper()
    action_url = action if action.startswith("http") else urljoin(url, action)
    uses_https = action_url.startswith("https://") or action_url.startswith("/")

    password_fields = form.select('input[type="password"]')
    card_fields = form.select(_SENSITIVE_FIELD_SELECTOR)
    has_sensitive = bool(password_fields) or bool(card_fields)
    has_csrf = form.select_one(_CSRF_SELECTOR) is not None
    has_captcha = form.select_one(_CAPTCHA_SELECTOR) is not None

    issues = []
    if not uses_https and has_sensitive:
        issues.append("Sensitive data is submitted without HTTPS")
    elif not uses_https and not page_uses_https:
        issues.append("Form action does not use HTTPS")
    if method == "POST" and not has_csrf:
        issues.append("POST form has no CSRF token")
    if has_sensitive and not has_captcha:
        issues.append("Sensitive form has no CAPTCHA")
    for password in password_fields:
        autocomplete = attr_text(password, "autocomplete")
        if not autocomplete or autocomplete == "on":
            issues.append("Password field has no autocomplete attribute")

    return FormAnalysisItem(
        id=index + 1,
        action=action_url,
        method=method,
        uses_https=uses_https,
        has_sensitive_data=has_sensitive,
        password_fields_count=len(password_fields),
        has_csrf_protection=has_csrf,
        has_captcha=has_captcha,
        issues=tuple(issues),
    )


def analyze_form_security(url: str, doc: BeautifulSoup) -> FormsSecurityAnalysis:
    protocol = _protocol(url)
    if protocol is None:
        return FormsSecurityAnalysis(0, 0, 0, 0, 0, (), ("Invalid URL",), SeoStatus.ERROR)

    page_uses_https = protocol == "https:"
    forms = [
        _analyze_form(index, form, url, page_uses_https)
        for index, form in enumerate(doc.find_all("form"))
    ]

    critical = sum(1 for f in forms if not f.uses_https and f.has_sensitive_data)
    without_csrf = sum(1 for f in forms if f.method == "POST" and not f.has_csrf_protection)

    issues = []
    if critical:
        issues.append(f"{critical} forms submit sensitive data without HTTPS")
    if without_csrf:
        issues.append(f"{without_csrf} POST forms have no CSRF token")

    if critical:
        status = SeoStatus.ERROR
    elif any(f.issues for f in forms):
        status = SeoStatus.WARNING
    elif not forms:
        status = SeoStatus.INFO
    else:
        status = SeoStatus.GOOD

    return FormsSecurityAnalysis(
        total_forms=len(forms),
        forms_with_https=sum(1 for f in forms if f.uses_https),
        forms_with_csrf=sum(1 for f in forms if f.has_csrf_protection),
        forms_with_sensitive_data=sum(1 for f in forms if f.has_sensitive_data),
        critical_issues=critical,
        forms=tuple(forms),
        issues=tuple(issues),
        status=status,
    )


def security_score(
    https: HttpsAnalysis,
    headers: SecurityHeadersAnalysis,
    forms: FormsSecurityAnalysis,
) -> int:
    """
    Combine the three sections into a 0-100 score.

    HTTPS counts 40%, headers 30% and forms 30%. A blocked header probe
    scores 50; a page without forms scores 100 for forms.
    """
    if not https.uses_https:
        https_score = 0
    else:
        https_score = 100 if https.mixed_content_count == 0 else 70

    if headers.cors_blocked:
        headers_score = UNKNOWN_HEADERS_SCORE
    else:
        weights = {name: weight for name, _, weight in SECURITY_HEADERS}
        headers_score = sum(weights[h.header] for h in headers.headers if h.present)

    if forms.total_forms == 0:
        forms_score = 100
    else:
        post_forms = max(1, sum(1 for f in forms.forms if f.method == "POST"))
        forms_score = round_half_up(
            forms.forms_with_https / forms.total_forms * 50
            + forms.forms_with_csrf / post_forms * 30
            + (20 if forms.critical_issues == 0 else 0)
        )

    return round_half_up(
        https_score * HTTPS_WEIGHT + headers_score * HEADERS_WEIGHT + forms_score * FORMS_WEIGHT
    )


def combine_security(
    https: HttpsAnalysis,
    headers: SecurityHeadersAnalysis,
    forms: FormsSecurityAnalysis,
) -> SecurityAnalysis:
    score = security_score(https, headers, forms)

    sections = (https.status, forms.status)
    if score < 50 or SeoStatus.ERROR in sections:
        status = SeoStatus.ERROR
    elif score < 80 or SeoStatus.WARNING in sections:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    return SecurityAnalysis(https, headers, forms, score, status)


async def analyze_security(url: str, doc: BeautifulSoup, fetcher: ResilientFetcher) -> SecurityAnalysis:
    """
    Run the full security analysis for a fetched page.

    Args:
        url: Page URL
        doc: Parsed page document
        fetcher: Fetcher used for the header probe

    Returns:
        SecurityAnalysis with the combined score and status
    """
    https = analyze_https(url, doc)
    headers = await analyze_security_headers(url, fetcher)
    forms = analyze_form_security(url, doc)
    return combine_security(https, headers, forms)
