"""Analytics, framework and social profile link detection."""

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import attr_or_empty, issue, passed


SOCIAL_DOMAINS = (
    "facebook.com",
    "twitter.com",
    "x.com",
    "linkedin.com",
    "instagram.com",
    "youtube.com",
    "tiktok.com",
)

OTHER_ANALYTICS = [
    (("mixpanel.com",), "Mixpanel"),
    (("segment.com", "segment.io"), "Segment"),
    (("clarity.ms",), "Microsoft Clarity"),
]

OTHER_FRAMEWORKS = [
    ("backbone", "Backbone.js"),
    ("ember", "Ember.js"),
]


def _contains(text: str, *needles: str) -> bool:
    return any(needle in text for needle in needles)


def detect_analytics(html: str) -> dict:
    content = html.lower()
    return {
        "googleAnalytics": _contains(content, "google-analytics.com", "gtag", "ga.js", "analytics.js"),
        "googleTagManager": _contains(content, "googletagmanager.com", "gtm.js"),
        "facebookPixel": _contains(content, "connect.facebook.net", "fbevents.js"),
        "hotjar": _contains(content, "hotjar.com"),
        "other": [name for needles, name in OTHER_ANALYTICS if _contains(content, *needles)],
    }


def detect_frameworks(facts: DocumentFacts) -> dict:
    doc = facts.document
    content = facts.raw_html.lower()
    has_next = doc.find(id="__next") is not None
    has_nuxt = doc.find(id="__nuxt") is not None
    return {
        "react": "react" in content or doc.select_one("[data-reactroot]") is not None or has_next,
        "vue": _contains(content, "vue.js", "vue.min.js") or doc.select_one("[data-v-]") is not None or has_nuxt,
        "angular": "angular" in content or doc.select_one("[ng-app], [ng-controller]") is not None,
        "svelte": "svelte" in content,
        "jquery": "jquery" in content,
        "nextjs": has_next or "_next/static" in content,
        "nuxt": has_nuxt or "_nuxt" in content,
        "other": [name for needle, name in OTHER_FRAMEWORKS if needle in content],
    }


def check_social_analytics(facts: DocumentFacts) -> CheckResult:
    analytics = detect_analytics(facts.raw_html)
    hrefs = (attr_or_empty(a, "href") for a in facts.document.select("a[href]"))
    social_links = list(dict.fromkeys(h for h in hrefs if _contains(h, *SOCIAL_DOMAINS)))

    has_analytics = analytics["googleAnalytics"] or analytics["googleTagManager"]
    if has_analytics:
        issues = ()
        checks = (passed("analytics", "Google Analytics or Tag Manager detected"),)
    else:
        issues = (issue(IssueSeverity.INFO, "analytics", "No Google Analytics or Tag Manager detected"),)
        checks = ()

    return CheckResult(
        status=SeoStatus.GOOD if has_analytics else SeoStatus.INFO,
        issues=issues,
        passed=checks,
        details={
            "analytics": analytics,
            "frameworks": detect_frameworks(facts),
            "socialLinks": social_links,
        },
    )
