"""Content checker: word counts, text-to-HTML ratio and reading level."""

import re

from ..enums import IssueSeverity, SeoStatus
from ..extractor import DocumentFacts
from ..models import CheckResult
from ..scoring import round_half_up
from .base import issue, passed


WORDS_PER_MINUTE = 200
CONTENT_MIN_WORDS_GOOD = 300
CONTENT_MIN_WORDS_WARNING = 100
TEXT_HTML_RATIO_MIN = 25

_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
_VOWEL_GROUP_RE = re.compile(r"[aeiouy]+")
_NON_ALPHA_RE = re.compile(r"[^a-z]")

READING_EASE_LABELS = [
    (90, "Very easy", "5th grade"),
    (80, "Easy", "6th grade"),
    (70, "Fairly easy", "7th grade"),
    (60, "Standard", "8th-9th grade"),
    (50, "Fairly difficult", "10th-12th grade"),
    (30, "Difficult", "College"),
    (0, "Very difficult", "College graduate"),
]


def split_words(text: str) -> list[str]:
    return text.split()


def split_sentences(text: str) -> list[str]:
    return [s for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]


def count_syllables(word: str) -> int:
    """Estimate syllables from vowel groups, dropping a silent trailing e."""
    cleaned = _NON_ALPHA_RE.sub("", word.lower())
    if len(cleaned) <= 3:
        return 1

    count = len(_VOWEL_GROUP_RE.findall(cleaned)) or 1
    if cleaned.endswith("e") and not cleaned.endswith("le"):
        count = max(1, count - 1)
    if cleaned.endswith(("es", "ed")):
        before = cleaned[:-2]
        if not before or before[-1] not in "aeiouy":
            count = max(1, count - 1)
    return max(1, count)


def reading_level(text: str) -> dict:
    """
    Compute Flesch reading ease and Flesch-Kincaid grade for a text.

    Args:
        text: Visible page text

    Returns:
        Dictionary with fleschReadingEase (0-100), fleschKincaidGrade (0-18),
        a label, a target audience and the averages they derive from.
    """
    words = split_words(text)
    word_count = len(words)
    sentence_count = max(1, len(split_sentences(text)))
    if word_count == 0:
        ease, grade, syllables_per_word = 0, 0.0, 0.0
    else:
        syllables_per_word = sum(count_syllables(w) for w in words) / word_count
        words_per_sentence = word_count / sentence_count
        ease = 206.835 - 1.015 * words_per_sentence - 84.6 * syllables_per_word
        ease = max(0, min(100, round_half_up(ease)))
        grade = 0.39 * words_per_sentence + 11.8 * syllables_per_word - 15.59
        grade = max(0.0, min(18.0, round_half_up(grade * 10) / 10))

    label, audience = READING_EASE_LABELS[-1][1:]
    for threshold, threshold_label, threshold_audience in READING_EASE_LABELS:
        if ease >= threshold:
            label, audience = threshold_label, threshold_audience
            break

    return {
        "fleschReadingEase": ease,
        "fleschKincaidGrade": grade,
        "readingEaseLabel": label,
        "targetAudience": audience,
        "avgSyllablesPerWord": round_half_up(syllables_per_word * 100) / 100,
        "avgWordsPerSentence": round_half_up(word_count / sentence_count * 10) / 10,
    }


def check_content(facts: DocumentFacts) -> CheckResult:
    text = facts.body_text
    word_count = len(split_words(text))
    character_count = len(text)
    sentence_count = len(split_sentences(text))
    paragraph_count = len([p for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()])
    avg_words = round_half_up(word_count / sentence_count) if sentence_count else 0
    reading_time = -(-word_count // WORDS_PER_MINUTE)
    ratio = round_half_up(character_count / facts.html_size * 100) if facts.html_size > 0 else 0

    if word_count >= CONTENT_MIN_WORDS_GOOD and ratio >= TEXT_HTML_RATIO_MIN:
        status = SeoStatus.GOOD
    elif word_count >= CONTENT_MIN_WORDS_WARNING:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.ERROR

    issues = []
    checks = []
    if word_count < CONTENT_MIN_WORDS_WARNING:
        issues.append(issue(IssueSeverity.ERROR, "content-thin", f"Page has only {word_count} words"))
    elif word_count < CONTENT_MIN_WORDS_GOOD:
        issues.append(issue(
            IssueSeverity.WARNING,
            "content-short",
            f"Page has {word_count} words; aim for at least {CONTENT_MIN_WORDS_GOOD}",
        ))
    else:
        checks.append(passed("content-length", f"Page has {word_count} words"))
    if ratio < TEXT_HTML_RATIO_MIN:
        issues.append(issue(
            IssueSeverity.WARNING,
            "content-ratio",
            f"Text-to-HTML ratio is {ratio}%; aim for at least {TEXT_HTML_RATIO_MIN}%",
        ))

    return CheckResult(
        status=status,
        issues=tuple(issues),
        passed=tuple(checks),
        details={
            "wordCount": word_count,
            "characterCount": character_count,
            "paragraphCount": paragraph_count,
            "sentenceCount": sentence_count,
            "avgWordsPerSentence": avg_words,
            "readingTimeMinutes": reading_time,
            "textToHtmlRatio": ratio,
            "readingLevel": reading_level(text),
        },
    )
