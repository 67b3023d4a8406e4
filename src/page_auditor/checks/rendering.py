"""
Rendering checker.

Guesses whether the page is server-rendered, client-rendered, hybrid or
static from markers in the raw HTML. Indicators carry weights; the side
with more than twice the other's weight wins.
"""

import re

from ..enums import IssueSeverity, RenderingType, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from ..scoring import round_half_up
from .base import issue


SUBSTANTIAL_CONTENT_LENGTH = 200
NOSCRIPT_MIN_LENGTH = 50
NOSCRIPT_PREVIEW_LENGTH = 200

HYDRATION_PATTERNS = [
    (re.compile(r"__NEXT_DATA__", re.I), "Next.js (hydration)"),
    (re.compile(r"__NUXT__", re.I), "Nuxt.js (hydration)"),
    (re.compile(r"window\.__INITIAL_STATE__", re.I), "Vuex initial state"),
    (re.compile(r"window\.__PRELOADED_STATE__", re.I), "Redux preloaded state"),
    (re.compile(r"data-reactroot", re.I), "React root"),
    (re.compile(r"data-v-[a-f0-9]+", re.I), "Vue scoped styles"),
    (re.compile(r"ng-version", re.I), "Angular"),
    (re.compile(r"_sveltekit", re.I), "SvelteKit"),
]

CSR_ONLY_PATTERNS = [
    (re.compile(r'<div id="root"></div>', re.I), "Empty React root"),
    (re.compile(r'<div id="app"></div>', re.I), "Empty Vue app container"),
    (re.compile(r"<app-root></app-root>", re.I), "Empty Angular root"),
    (re.compile(r"ReactDOM\.render", re.I), "ReactDOM.render call"),
    (re.compile(r"createApp\s*\(\s*App\s*\)", re.I), "Vue createApp"),
]

SSR_PATTERNS = [
    (re.compile(r"data-server-rendered", re.I), "Vue SSR marker"),
    (re.compile(r"data-reactid", re.I), "React SSR marker (legacy)"),
    (re.compile(r"<!--\s*/?(?:nuxt|next)", re.I), "SSR framework comment"),
]


def _indicator(kind: str, text: str, weight: int) -> dict:
    return {"type": kind, "indicator": text, "weight": weight}


def check_rendering(facts: DocumentFacts) -> CheckResult:
    html = facts.raw_html
    doc = facts.document
    indicators = []
    hydration_markers = []
    issues = []
    ssr_score = 0
    csr_score = 0

    substantial = len(facts.body_text.strip()) > SUBSTANTIAL_CONTENT_LENGTH
    if substantial:
        ssr_score += 3
        indicators.append(_indicator("ssr", "Substantial text content in HTML", 3))

    empty_containers = any(pattern.search(html) for pattern, _ in CSR_ONLY_PATTERNS)
    app_container_empty = empty_containers and not substantial
    if app_container_empty:
        csr_score += 5
        indicators.append(_indicator("csr", "Empty application container detected", 5))
        issues.append(issue(
            IssueSeverity.WARNING,
            "rendering-csr",
            "Page appears to be client-side rendered; content may not be indexed by search engines",
        ))

    for pattern, name in SSR_PATTERNS:
        if pattern.search(html):
            ssr_score += 2
            hydration_markers.append(name)
            indicators.append(_indicator("ssr", name, 2))

    for pattern, name in HYDRATION_PATTERNS:
        if pattern.search(html):
            ssr_score += 1
            hydration_markers.append(name)
            indicators.append(_indicator("ssr", f"{name} detected (likely SSR with hydration)", 1))

    for pattern, name in CSR_ONLY_PATTERNS:
        if pattern.search(html):
            csr_score += 2
            indicators.append(_indicator("csr", name, 2))

    noscripts = doc.find_all("noscript")
    has_noscript = bool(noscripts)
    noscript_content = None
    for element in noscripts:
        text = element.get_text()
        if len(text) > NOSCRIPT_MIN_LENGTH:
            noscript_content = text.strip()[:NOSCRIPT_PREVIEW_LENGTH] or None
            break
    if noscript_content and len(noscript_content) > NOSCRIPT_MIN_LENGTH:
        ssr_score += 1
        indicators.append(_indicator("ssr", "Has meaningful noscript fallback", 1))

    if substantial and doc.find(["h1", "h2", "h3"]) is not None:
        ssr_score += 1
        indicators.append(_indicator("ssr", "Proper heading structure in initial HTML", 1))

    rendering_type = RenderingType.UNKNOWN
    confidence = 0.0
    total = ssr_score + csr_score
    if total > 0:
        if ssr_score > csr_score * 2:
            rendering_type = RenderingType.HYBRID if hydration_markers else RenderingType.SSR
            confidence = min(100.0, ssr_score / total * 100)
        elif csr_score > ssr_score * 2:
            rendering_type = RenderingType.CSR
            confidence = min(100.0, csr_score / total * 100)
        elif hydration_markers:
            rendering_type = RenderingType.HYBRID
            confidence = 60
        elif substantial and not empty_containers:
            rendering_type = RenderingType.STATIC
            confidence = 50

    status = SeoStatus.GOOD
    if rendering_type == RenderingType.CSR:
        status = SeoStatus.WARNING
        if not has_noscript:
            issues.append(issue(
                IssueSeverity.ERROR,
                "rendering-noscript",
                "No noscript fallback for JavaScript-disabled users and crawlers",
            ))
            status = SeoStatus.ERROR
    elif rendering_type == RenderingType.UNKNOWN:
        status = SeoStatus.INFO

    return CheckResult(
        status=status,
        issues=tuple(issues),
        details={
            "renderingType": rendering_type.value,
            "confidence": round_half_up(confidence),
            "indicators": indicators,
            "hasNoscriptFallback": has_noscript,
            "noscriptContent": noscript_content,
            "appContainerEmpty": app_container_empty,
            "hydrationMarkers": hydration_markers,
        },
    )
