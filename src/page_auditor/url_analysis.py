"""URL structure and readability analysis."""

import re
from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlsplit

from .enums import SeoStatus
from .scoring import round_half_up


MAX_URL_LENGTH = 100
MAX_PATH_DEPTH = 4
MAX_SEGMENT_LENGTH = 30
MAX_QUERY_PARAMS = 3

# Smaller than the content stop word list; URL segments keep more words.
URL_STOP_WORDS = frozenset({
    "a", "an", "the", "and", "or", "but", "in", "on", "at", "to", "for", "of",
    "with", "by", "from", "as", "is", "was", "are", "were", "been", "be",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "that", "this",
    "these", "those", "it", "its",
})

_SPECIAL_CHARS_RE = re.compile(r"""[!@#$%^&*()+=\[\]{}|\\:;"'<>,?]""")
_WORD_SPLIT_RE = re.compile(r"[-_]")
_NON_LETTERS_RE = re.compile(r"[^a-z]")


@dataclass(frozen=True)
class UrlReadability:
    has_underscores: bool = False
    has_uppercase: bool = False
    has_numbers: bool = False
    has_special_chars: bool = False
    has_keywords: bool = False
    segment_lengths: tuple[int, ...] = ()
    avg_segment_length: int = 0
    is_human_readable: bool = False
    score: int = 0

    def to_dict(self) -> dict:
        return {
            "hasUnderscores": self.has_underscores,
            "hasUppercase": self.has_uppercase,
            "hasNumbers": self.has_numbers,
            "hasSpecialChars": self.has_special_chars,
            "hasKeywords": self.has_keywords,
            "segmentLengths": list(self.segment_lengths),
            "avgSegmentLength": self.avg_segment_length,
            "isHumanReadable": self.is_human_readable,
            "score": self.score,
        }


@dataclass(frozen=True)
class UrlAnalysis:
    """Structure of a page URL with its readability grade."""

    url: str
    status: SeoStatus
    protocol: str = ""
    hostname: str = ""
    pathname: str = ""
    path_segments: tuple[str, ...] = ()
    query_params: dict = field(default_factory=dict)
    hash: str = ""
    length: int = 0
    has_www: bool = False
    has_trailing_slash: bool = False
    uses_https: bool = False
    readability: UrlReadability = field(default_factory=UrlReadability)
    issues: tuple[str, ...] = ()

    @property
    def depth(self) -> int:
        return len(self.path_segments)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "protocol": self.protocol,
            "hostname": self.hostname,
            "pathname": self.pathname,
            "pathSegments": list(self.path_segments),
            "queryParams": dict(self.query_params),
            "hash": self.hash,
            "depth": self.depth,
            "length": self.length,
            "hasWww": self.has_www,
            "hasTrailingSlash": self.has_trailing_slash,
            "usesHttps": self.uses_https,
            "readability": self.readability.to_dict(),
            "issues": list(self.issues),
            "status": self.status.value,
        }


def _is_meaningful(segment: str) -> bool:
    return any(
        len(word) > 2 and word.lower() not in URL_STOP_WORDS
        for word in _WORD_SPLIT_RE.split(segment)
    )


def analyze_readability(pathname: str, segments: list[str]) -> UrlReadability:
    """
    Score how readable a URL path is, from 0 to 100.

    Underscores, uppercase, special characters, long segments, deep paths
    and keyword-free segments cost points; hyphenated paths without
    underscores gain 5.
    """
    has_underscores = "_" in pathname
    has_uppercase = re.search(r"[A-Z]", pathname) is not None
    has_numbers = re.search(r"\d", pathname) is not None
    has_special = _SPECIAL_CHARS_RE.search(pathname) is not None

    lengths = [len(s) for s in segments]
    avg_length = round_half_up(sum(lengths) / len(lengths)) if lengths else 0
    has_keywords = any(_is_meaningful(s) for s in segments)

    score = 100
    if has_underscores:
        score -= 15
    if has_uppercase:
        score -= 10
    if has_special:
        score -= 20
    if avg_length > MAX_SEGMENT_LENGTH:
        score -= 15
    if not has_keywords and segments:
        score -= 10
    if len(segments) > MAX_PATH_DEPTH:
        score -= 10
    if "-" in pathname and not has_underscores:
        score += 5
    score = max(0, min(100, score))

    return UrlReadability(
        has_underscores=has_underscores,
        has_uppercase=has_uppercase,
        has_numbers=has_numbers,
        has_special_chars=has_special,
        has_keywords=has_keywords,
        segment_lengths=tuple(lengths),
        avg_segment_length=avg_length,
        is_human_readable=score >= 60 and not has_special and not has_uppercase,
        score=score,
    )


def analyze_url(url: str) -> UrlAnalysis:
    """
    Analyze the structure and readability of a URL.

    Args:
        url: Absolute URL of the analyzed page

    Returns:
        UrlAnalysis; error when the URL cannot be parsed, has three or more
        issues or is not human readable, warning when it has any issue
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        parts = None
    if parts is None or not parts.scheme or not parts.netloc:
        return UrlAnalysis(url=url, status=SeoStatus.ERROR, length=len(url), issues=("Invalid URL format",))

    hostname = (parts.hostname or "").lower()
    pathname = parts.path or "/"
    segments = [s for s in pathname.split("/") if s]
    query = dict(parse_qsl(parts.query, keep_blank_values=True))
    readability = analyze_readability(pathname, segments)

    issues = []
    if len(url) > MAX_URL_LENGTH:
        issues.append(f"URL length ({len(url)}) exceeds recommended {MAX_URL_LENGTH} characters")
    if len(segments) > MAX_PATH_DEPTH:
        issues.append(f"Path depth ({len(segments)}) exceeds recommended {MAX_PATH_DEPTH} levels")
    if readability.has_underscores:
        issues.append("URL contains underscores - use hyphens instead")
    if readability.has_uppercase:
        issues.append("URL contains uppercase letters - use lowercase for consistency")
    if readability.has_special_chars:
        issues.append("URL contains special characters that may cause issues")
    long_segments = sum(1 for length in readability.segment_lengths if length > MAX_SEGMENT_LENGTH)
    if long_segments:
        issues.append(f"{long_segments} URL segment(s) exceed {MAX_SEGMENT_LENGTH} characters")
    if len(query) > MAX_QUERY_PARAMS:
        issues.append(f"URL has {len(query)} query parameters - consider cleaner URLs")

    if len(issues) >= 3 or not readability.is_human_readable:
        status = SeoStatus.ERROR
    elif issues:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    return UrlAnalysis(
        url=url,
        status=status,
        protocol=f"{parts.scheme.lower()}:",
        hostname=hostname,
        pathname=pathname,
        path_segments=tuple(segments),
        query_params=query,
        hash=f"#{parts.fragment}" if parts.fragment else "",
        length=len(url),
        has_www=hostname.startswith("www."),
        has_trailing_slash=pathname.endswith("/") and pathname != "/",
        uses_https=parts.scheme.lower() == "https",
        readability=readability,
        issues=tuple(issues),
    )


def extract_url_keywords(url: str) -> list[str]:
    """Return unique lowercase words (letters only, >2 chars) from the URL path."""
    try:
        path = urlsplit(url).path
    except ValueError:
        return []

    keywords: dict[str, None] = {}
    for segment in (s for s in path.split("/") if s):
        for word in _WORD_SPLIT_RE.split(segment):
            cleaned = _NON_LETTERS_RE.sub("", word.lower())
            if len(cleaned) > 2 and cleaned not in URL_STOP_WORDS:
                keywords[cleaned] = None
    return list(keywords)
