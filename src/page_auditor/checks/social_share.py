"""Social share button and widget detection."""

import re

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from .base import issue


FEW_SHARE_OPTIONS = 3

SOCIAL_SHARE_PATTERNS = [
    ("Facebook", [
        r"facebook\.com/sharer", r"fb-share", r"share.*facebook", r"facebook-share", r"data-share.*facebook",
    ]),
    ("Twitter/X", [
        r"twitter\.com/intent/tweet", r"twitter\.com/share", r"x\.com/intent/tweet",
        r"tweet-button", r"twitter-share", r"data-share.*twitter",
    ]),
    ("LinkedIn", [
        r"linkedin\.com/sharing", r"linkedin\.com/shareArticle", r"linkedin-share", r"share.*linkedin",
    ]),
    ("Pinterest", [r"pinterest\.com/pin/create", r"pin-it", r"pinterest-share", r"pinit\.js"]),
    ("WhatsApp", [r"whatsapp://", r"api\.whatsapp\.com/send", r"wa\.me/", r"whatsapp-share"]),
    ("Telegram", [r"t\.me/share", r"telegram\.me/share", r"telegram-share"]),
    ("Reddit", [r"reddit\.com/submit", r"reddit-share"]),
    ("Email", [r"mailto:.*subject=", r"email-share", r"share.*email"]),
]

SHARE_WIDGET_PATTERNS = [
    (re.compile(r"addthis", re.I), "AddThis"),
    (re.compile(r"sharethis", re.I), "ShareThis"),
    (re.compile(r"addtoany", re.I), "AddToAny"),
    (re.compile(r"social-share", re.I), "Social Share Widget"),
    (re.compile(r"share-buttons", re.I), "Share Buttons"),
    (re.compile(r"ssba", re.I), "Simple Share Buttons"),
    (re.compile(r"sumo\.com", re.I), "Sumo Share"),
]

SHARE_ELEMENT_SELECTOR = '[class*="share"], [id*="share"], [data-share], .social-buttons, .share-buttons'

_COMPILED_PLATFORMS = [
    (platform, [re.compile(p, re.I) for p in patterns])
    for platform, patterns in SOCIAL_SHARE_PATTERNS
]


def check_social_share(facts: DocumentFacts) -> CheckResult:
    html = facts.raw_html
    platforms = [
        {"platform": name, "detected": any(p.search(html) for p in patterns), "type": "button"}
        for name, patterns in _COMPILED_PLATFORMS
    ]
    widgets = [name for pattern, name in SHARE_WIDGET_PATTERNS if pattern.search(html)]
    native_share = re.search(r"navigator\.share", html, re.I) is not None
    detected = [p["platform"] for p in platforms if p["detected"]]

    has_buttons = (
        bool(detected)
        or bool(widgets)
        or native_share
        or facts.document.select_one(SHARE_ELEMENT_SELECTOR) is not None
    )

    issues = []
    if not has_buttons:
        issues.append(issue(IssueSeverity.INFO, "share-buttons", "No social share buttons found"))
    if 0 < len(detected) < FEW_SHARE_OPTIONS:
        issues.append(issue(IssueSeverity.INFO, "share-options", "Only a few share options are offered"))
    if has_buttons and "Facebook" not in detected and "Twitter/X" not in detected:
        issues.append(issue(
            IssueSeverity.WARNING, "share-main-platforms", "Share buttons lack Facebook and Twitter/X"
        ))

    if not has_buttons:
        status = SeoStatus.INFO
    elif len(detected) < 2:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    return CheckResult(
        status=status,
        issues=tuple(issues),
        details={
            "hasShareButtons": has_buttons,
            "platforms": platforms,
            "shareWidgets": widgets,
            "nativeShareApi": native_share,
        },
    )
