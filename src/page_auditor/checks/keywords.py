"""Keyword checker: frequency, density and placement in title, description and h1."""

import re
from typing import Optional

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from ..scoring import round_half_up
from .base import issue, passed


KEYWORD_MIN_WORD_LENGTH = 3
TOP_KEYWORDS_COUNT = 20
KEYWORD_CONSISTENCY_CHECK_COUNT = 10
KEYWORD_CONSISTENCY_GOOD = 5
KEYWORD_CONSISTENCY_WARNING = 2

_PUNCTUATION_RE = re.compile(r"[^\w\s]")

# Only words longer than KEYWORD_MIN_WORD_LENGTH reach the filter
STOP_WORDS = frozenset("""
about above after again against also been before being below between both
could does doing down during each even every from further have having here
hers herself himself into itself just like made make many more most much
must myself only other ours ourselves over same should some such than that
their theirs them themselves then there these they this those through under
until upon very were what when where which while whom will with within
would your yours yourself yourselves among another anyone anything because
cannot come first found going good great however know last less little
long look need never next often once page people really said says since
still take thing things think three time today well went your
""".split())


def filter_stop_words(words: list[str]) -> list[str]:
    return [w for w in words if w not in STOP_WORDS]


def keyword_frequency(text: str) -> dict[str, int]:
    """Count candidate keywords in insertion order."""
    words = _PUNCTUATION_RE.sub("", text.lower()).split()
    frequency: dict[str, int] = {}
    for word in filter_stop_words([w for w in words if len(w) > KEYWORD_MIN_WORD_LENGTH]):
        frequency[word] = frequency.get(word, 0) + 1
    return frequency


def check_keywords(facts: DocumentFacts) -> CheckResult:
    frequency = keyword_frequency(facts.body_text)
    total = sum(frequency.values())

    ranked = sorted(frequency.items(), key=lambda item: -item[1])[:TOP_KEYWORDS_COUNT]
    top_keywords = [
        {"word": word, "count": count, "density": round_half_up(count / total * 10000) / 100}
        for word, count in ranked
    ]

    top_words = [k["word"] for k in top_keywords[:KEYWORD_CONSISTENCY_CHECK_COUNT]]
    h1_texts = facts.h1_texts
    h1_text: Optional[str] = h1_texts[0] if h1_texts else None

    def found_in(value: Optional[str]) -> list[str]:
        lowered = (value or "").lower()
        return [w for w in top_words if w in lowered]

    consistency = {
        "inTitle": found_in(facts.meta.title),
        "inDescription": found_in(facts.meta.description),
        "inH1": found_in(h1_text),
        "inContent": top_words,
    }
    score = len(consistency["inTitle"]) + len(consistency["inDescription"]) + len(consistency["inH1"])

    if score >= KEYWORD_CONSISTENCY_GOOD:
        status = SeoStatus.GOOD
    elif score >= KEYWORD_CONSISTENCY_WARNING:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.ERROR

    issues = []
    checks = []
    if status == SeoStatus.GOOD:
        checks.append(passed("keyword-consistency", "Top keywords appear in title, description and h1"))
    else:
        severity = IssueSeverity.WARNING if status == SeoStatus.WARNING else IssueSeverity.ERROR
        issues.append(issue(
            severity,
            "keyword-consistency",
            f"Top keywords appear only {score} times across title, description and h1",
        ))
    if not consistency["inTitle"] and top_words:
        issues.append(issue(IssueSeverity.INFO, "keyword-title", "Title contains none of the top keywords"))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "topKeywords": top_keywords,
            "totalWords": total,
            "uniqueWords": len(frequency),
            "consistency": consistency,
            "consistencyScore": score,
        },
    )
