"""
Core Web Vitals estimates from static HTML.

Nothing here is measured. Each metric starts from a heuristic score of
100, gains or loses points for patterns known to help or hurt it, and is
then rated good (>= 80), needs-improvement (>= 50) or poor.
"""

import re
from typing import Optional

from ..enums import IssueSeverity, SeoStatus, VitalsRating
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import attr_or_empty, issue, rate_score, style_texts


BLOCKING_STYLESHEETS_MAX = 3
BLOCKING_SCRIPTS_MAX = 2
EXTERNAL_SCRIPTS_MAX = 10
INLINE_SCRIPT_SIZE_MAX = 50_000
HTML_SIZE_LARGE = 100_000

HERO_IMAGE_SELECTOR = 'img[class*="hero"], img[class*="banner"], .hero img, .banner img, header img'
UNSIZED_IMAGE_SELECTOR = 'img:not([width]):not([height]):not([style*="width"]):not([style*="height"])'
AD_CONTAINER_SELECTOR = '[class*="ad-"], [class*="ads-"], [id*="ad-"], .advertisement, .ad-slot'
DYNAMIC_CONTENT_SELECTOR = "[data-dynamic], [data-async-content], .skeleton, .placeholder"

_FONT_DISPLAY_SWAP_RE = re.compile(r"@font-face[^}]*font-display:\s*swap", re.I)
_SCROLL_LISTENER_RE = re.compile(r"addEventListener\s*\([^)]*scroll", re.I)
_WEB_WORKER_RE = re.compile(r"new Worker\(", re.I)

HEAVY_LIBRARIES = [
    (re.compile(r"moment\.js", re.I), "Moment.js (consider lighter alternative)"),
    (re.compile(r"lodash\.js", re.I), "Full Lodash (consider modular imports)"),
    (re.compile(r"jquery.*\.js", re.I), "jQuery"),
]


def _factor(name: str, impact: str, description: str) -> dict:
    return {"factor": name, "impact": impact, "description": description}


def estimate_lcp(facts: DocumentFacts) -> dict:
    """Estimate Largest Contentful Paint from preloads, priorities and blocking resources."""
    doc = facts.document
    factors = []
    issues = []
    score = 100

    if doc.select('link[rel="preload"][as="image"]'):
        factors.append(_factor("Image preload", "positive", "LCP candidate may be preloaded"))
        score += 10

    first_images = doc.find_all("img", limit=3)
    if any(attr_or_empty(img, "loading") == "lazy" for img in first_images):
        factors.append(_factor(
            "Lazy loading above fold", "negative", "First images use lazy loading, which may delay LCP"
        ))
        issues.append("Consider removing lazy loading from above-the-fold images")
        score -= 15

    if doc.select('img[fetchpriority="high"]'):
        factors.append(_factor("Fetch priority", "positive", "High priority set on important images"))
        score += 10

    blocking_styles = doc.select('link[rel="stylesheet"]:not([media="print"])')
    blocking_scripts = doc.select('script:not([async]):not([defer]):not([type="module"])')
    if len(blocking_styles) > BLOCKING_STYLESHEETS_MAX:
        factors.append(_factor(
            "Blocking stylesheets", "negative", f"{len(blocking_styles)} render-blocking stylesheets"
        ))
        issues.append("Consider reducing or deferring non-critical CSS")
        score -= len(blocking_styles) * 3
    if len(blocking_scripts) > BLOCKING_SCRIPTS_MAX:
        factors.append(_factor(
            "Blocking scripts", "negative", f"{len(blocking_scripts)} render-blocking scripts"
        ))
        issues.append("Add async or defer to non-critical scripts")
        score -= len(blocking_scripts) * 5

    styles = style_texts(facts)
    if styles and 500 < len(styles[0]) < 15000:
        factors.append(_factor("Inline critical CSS", "positive", "Critical CSS appears to be inlined"))
        score += 5

    if len(facts.raw_html) > HTML_SIZE_LARGE:
        factors.append(_factor("Large HTML", "negative", "HTML size may delay rendering"))
        issues.append("Consider reducing HTML size")
        score -= 10

    largest_element: Optional[str] = None
    hero = doc.select_one(HERO_IMAGE_SELECTOR)
    if hero is not None:
        largest_element = f'img[src="{attr_or_empty(hero, "src")[:50]}..."]'
    elif doc.find("h1") is not None:
        largest_element = "h1 (text)"

    return {
        "estimate": rate_score(score).value,
        "score": score,
        "factors": factors,
        "largestElement": largest_element,
        "issues": issues,
    }


def estimate_cls(facts: DocumentFacts) -> dict:
    """Estimate Cumulative Layout Shift risk from unsized media and unreserved slots."""
    doc = facts.document
    factors = []
    issues = []
    score = 100

    unsized_images = doc.select(UNSIZED_IMAGE_SELECTOR)
    if unsized_images:
        factors.append({"factor": "Images without dimensions", "impact": "negative", "count": len(unsized_images)})
        issues.append("Add width and height attributes to images to prevent layout shifts")
        score -= len(unsized_images) * 5
    else:
        factors.append({
            "factor": "Images with dimensions",
            "impact": "positive",
            "count": len(doc.select("img[width][height]")),
        })

    unsized_iframes = doc.select("iframe:not([width]):not([height])")
    if unsized_iframes:
        factors.append({"factor": "Iframes without dimensions", "impact": "negative", "count": len(unsized_iframes)})
        issues.append("Add dimensions to iframes to prevent layout shifts")
        score -= len(unsized_iframes) * 8

    ads = doc.select(AD_CONTAINER_SELECTOR)
    reserved = [el for el in ads if "height" in attr_or_empty(el, "style")]
    if len(reserved) < len(ads):
        factors.append({
            "factor": "Ad containers without reserved space",
            "impact": "negative",
            "count": len(ads) - len(reserved),
        })
        issues.append("Reserve space for ad containers to prevent layout shifts")
        score -= 10

    dynamic = doc.select(DYNAMIC_CONTENT_SELECTOR)
    if dynamic:
        factors.append({"factor": "Dynamic content placeholders", "impact": "positive", "count": len(dynamic)})
        score += 5

    if _FONT_DISPLAY_SWAP_RE.search("".join(style_texts(facts))):
        factors.append({"factor": "Font display swap", "impact": "positive", "count": 1})

    return {"estimate": rate_score(score).value, "score": score, "factors": factors, "issues": issues}


def estimate_interactivity(facts: DocumentFacts) -> tuple[dict, dict]:
    """Estimate First Input Delay and Interaction to Next Paint; returns (fid, inp)."""
    doc = facts.document
    html = facts.raw_html
    fid_factors, fid_issues = [], []
    inp_factors, inp_issues = [], []
    fid_score = 100
    inp_score = 100

    external = doc.select("script[src]")
    inline_size = sum(len(script.get_text()) for script in doc.select("script:not([src])"))

    if len(external) > EXTERNAL_SCRIPTS_MAX:
        fid_factors.append(f"{len(external)} external scripts")
        fid_issues.append("Consider reducing number of external scripts")
        fid_score -= 15
    if inline_size > INLINE_SCRIPT_SIZE_MAX:
        fid_factors.append("Large inline JavaScript")
        fid_issues.append("Consider moving inline scripts to external files")
        fid_score -= 10
    if doc.select("script[async], script[defer]"):
        fid_factors.append("Using async/defer scripts")
        fid_score += 10

    if _SCROLL_LISTENER_RE.search(html):
        inp_factors.append("Scroll event listeners detected")
        inp_issues.append("Ensure scroll handlers are debounced or throttled")
        inp_score -= 5

    for pattern, name in HEAVY_LIBRARIES:
        if pattern.search(html):
            inp_factors.append(name)
            inp_score -= 5

    if _WEB_WORKER_RE.search(html):
        fid_factors.append("Web Workers detected (good for offloading work)")
        fid_score += 10

    fid = {"estimate": rate_score(fid_score).value, "score": fid_score, "factors": fid_factors, "issues": fid_issues}
    inp = {"estimate": rate_score(inp_score).value, "score": inp_score, "factors": inp_factors, "issues": inp_issues}
    return fid, inp


def vitals_status(ratings: list[str]) -> SeoStatus:
    poor = ratings.count(VitalsRating.POOR.value)
    needs_improvement = ratings.count(VitalsRating.NEEDS_IMPROVEMENT.value)
    if poor >= 2:
        return SeoStatus.ERROR
    if poor >= 1 or needs_improvement >= 2:
        return SeoStatus.WARNING
    return SeoStatus.GOOD


def check_core_web_vitals(facts: DocumentFacts) -> CheckResult:
    lcp = estimate_lcp(facts)
    cls = estimate_cls(facts)
    fid, inp = estimate_interactivity(facts)
    metrics = {"lcp": lcp, "cls": cls, "fid": fid, "inp": inp}

    issues = []
    for name, metric in metrics.items():
        severity = (
            IssueSeverity.WARNING
            if metric["estimate"] == VitalsRating.POOR.value
            else IssueSeverity.INFO
        )
        for message in metric["issues"]:
            issues.append(issue(severity, f"cwv-{name}", message))

    recommendations = list(dict.fromkeys(
        message for metric in metrics.values() for message in metric["issues"]
    ))

    return CheckResult(
        status=vitals_status([m["estimate"] for m in metrics.values()]),
        issues=tuple(issues),
        details={**metrics, "recommendations": recommendations},
    )
