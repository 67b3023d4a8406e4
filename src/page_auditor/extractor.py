"""
Single-pass extraction of structural facts from an HTML document.

The document is parsed once with BeautifulSoup's tolerant html.parser
tree builder. The extract_* functions below read from the parsed tree
without modifying it, so the same tree can be shared by every checker.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from bs4 import BeautifulSoup
from bs4.element import Doctype, PreformattedString, Tag

from .audit_logger import AuditLogger
from .enums import LogLevel


COMPONENT = "FactExtractor"

# Subtrees that never contribute visible prose
HIDDEN_TEXT_TAGS = frozenset({"script", "style", "noscript", "iframe", "svg"})

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


@dataclass(frozen=True)
class MetaTags:
    """Meta information found in the document head."""

    title: Optional[str] = None
    description: Optional[str] = None
    keywords: Optional[str] = None
    robots: Optional[str] = None
    viewport: Optional[str] = None
    charset: Optional[str] = None
    canonical: Optional[str] = None
    og_title: Optional[str] = None
    og_description: Optional[str] = None
    og_image: Optional[str] = None
    og_type: Optional[str] = None
    og_url: Optional[str] = None
    twitter_card: Optional[str] = None
    twitter_title: Optional[str] = None
    twitter_description: Optional[str] = None
    twitter_image: Optional[str] = None
    author: Optional[str] = None
    language: Optional[str] = None  # <html lang>


@dataclass(frozen=True)
class Heading:
    tag: str  # 'h1'..'h6'
    level: int
    text: str


@dataclass(frozen=True)
class ImageInfo:
    src: str
    alt: Optional[str]  # None when the attribute is absent
    loading: Optional[str]


@dataclass(frozen=True)
class LinkInfo:
    href: str
    text: str
    rel: Optional[str]
    target: Optional[str]


@dataclass(frozen=True)
class DomStats:
    elements: int
    max_depth: int


@dataclass(frozen=True)
class ScriptStats:
    external: int
    inline: int
    async_count: int
    defer_count: int


@dataclass(frozen=True)
class StyleStats:
    external: int
    inline: int


@dataclass(frozen=True)
class TechnicalFlags:
    has_doctype: bool
    has_charset: bool
    has_viewport: bool
    has_favicon: bool
    has_hreflang: bool


@dataclass(frozen=True)
class DocumentFacts:
    """
    Everything the checkers need to know about one page.

    Built exactly once per analysis by extract_facts() and shared read-only
    by all checkers. The parsed document is kept for checkers that need
    selector queries; it is excluded from equality and repr.
    """

    url: str
    raw_html: str
    html_size: int
    meta: MetaTags
    headings: tuple[Heading, ...]
    images: tuple[ImageInfo, ...]
    links: tuple[LinkInfo, ...]
    body_text: str
    json_ld: tuple[Any, ...]
    dom: DomStats
    scripts: ScriptStats
    styles: StyleStats
    technical: TechnicalFlags
    document: BeautifulSoup = field(compare=False, repr=False, hash=False)

    @property
    def h1_texts(self) -> list[str]:
        return [h.text for h in self.headings if h.level == 1]


def parse_html(html: str) -> BeautifulSoup:
    """
    Parse raw HTML into a navigable document.

    Malformed markup is recovered on a best-effort basis; this never raises
    for string input.
    """
    return BeautifulSoup(html, "html.parser")


def attr_text(tag: Tag, name: str) -> Optional[str]:
    """
    Read an attribute as a string.

    Multi-valued attributes such as rel and class come back from
    BeautifulSoup as lists; they are joined with single spaces.
    """
    value = tag.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _meta_by_name(soup: BeautifulSoup, name: str) -> Optional[str]:
    el = soup.select_one(f'meta[name="{name}"]')
    return attr_text(el, "content") if el else None


def _meta_by_property(soup: BeautifulSoup, prop: str) -> Optional[str]:
    el = soup.select_one(f'meta[property="{prop}"]')
    return attr_text(el, "content") if el else None


def _first(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value is not None:
            return value
    return None


def extract_meta_tags(soup: BeautifulSoup) -> MetaTags:
    """Extract title, description, Open Graph, Twitter and related meta data."""
    title_el = soup.find("title")
    charset_el = soup.select_one("meta[charset]")
    canonical_el = soup.select_one('link[rel="canonical"]')
    html_el = soup.find("html")

    def twitter(name: str) -> Optional[str]:
        return _first(_meta_by_name(soup, name), _meta_by_property(soup, name))

    return MetaTags(
        title=title_el.get_text().strip() if title_el else None,
        description=_meta_by_name(soup, "description"),
        keywords=_meta_by_name(soup, "keywords"),
        robots=_meta_by_name(soup, "robots"),
        viewport=_meta_by_name(soup, "viewport"),
        charset=attr_text(charset_el, "charset") if charset_el else None,
        canonical=attr_text(canonical_el, "href") if canonical_el else None,
        og_title=_meta_by_property(soup, "og:title"),
        og_description=_meta_by_property(soup, "og:description"),
        og_image=_meta_by_property(soup, "og:image"),
        og_type=_meta_by_property(soup, "og:type"),
        og_url=_meta_by_property(soup, "og:url"),
        twitter_card=twitter("twitter:card"),
        twitter_title=twitter("twitter:title"),
        twitter_description=twitter("twitter:description"),
        twitter_image=twitter("twitter:image"),
        author=_meta_by_name(soup, "author"),
        language=attr_text(html_el, "lang") if html_el else None,
    )


def extract_headings(soup: BeautifulSoup) -> tuple[Heading, ...]:
    """Return h1-h6 headings in document order."""
    return tuple(
        Heading(tag=el.name, level=int(el.name[1]), text=el.get_text().strip())
        for el in soup.find_all(HEADING_TAGS)
    )


def extract_images(soup: BeautifulSoup) -> tuple[ImageInfo, ...]:
    return tuple(
        ImageInfo(
            src=attr_text(el, "src") or "",
            alt=attr_text(el, "alt"),
            loading=attr_text(el, "loading"),
        )
        for el in soup.find_all("img")
    )


def extract_links(soup: BeautifulSoup) -> tuple[LinkInfo, ...]:
    """Return every anchor that carries an href attribute."""
    return tuple(
        LinkInfo(
            href=attr_text(el, "href") or "",
            text=el.get_text().strip(),
            rel=attr_text(el, "rel"),
            target=attr_text(el, "target"),
        )
        for el in soup.find_all("a", href=True)
    )


def extract_body_text(soup: BeautifulSoup) -> str:
    """
    Return the visible prose of the document body.

    Text inside script, style, noscript, iframe and svg subtrees is skipped,
    as are comments and other markup declarations. Documents without a body
    element fall back to everything outside the head.
    """
    root = soup.body
    excluded = HIDDEN_TEXT_TAGS
    if root is None:
        root = soup
        excluded = HIDDEN_TEXT_TAGS | {"head", "title"}

    parts = []
    for text in root.find_all(string=True):
        if isinstance(text, PreformattedString):
            continue
        if any(parent.name in excluded for parent in text.parents):
            continue
        parts.append(str(text))

    return "".join(parts).strip()


def extract_json_ld(soup: BeautifulSoup, logger: Optional[AuditLogger] = None) -> tuple[Any, ...]:
    """
    Parse every JSON-LD block.

    Blocks that are not valid JSON are skipped.
    """
    data = []
    for script in soup.select('script[type="application/ld+json"]'):
        content = script.get_text()
        if not content:
            continue
        try:
            data.append(json.loads(content))
        except ValueError as e:
            if logger:
                logger.log(LogLevel.DEBUG, COMPONENT, "Skipping invalid JSON-LD block", {
                    "error": str(e),
                })
    return tuple(data)


def analyze_dom(soup: BeautifulSoup) -> DomStats:
    """
    Count elements and the maximum nesting depth in one traversal.

    The <html> element sits at depth 0. Fragments without an <html> element
    treat each top-level element as depth 0.
    """
    root = soup.find("html")
    stack = [(root, 0)] if root is not None else [
        (child, 0) for child in soup.children if isinstance(child, Tag)
    ]

    elements = 0
    max_depth = 0
    while stack:
        node, depth = stack.pop()
        elements += 1
        if depth > max_depth:
            max_depth = depth
        for child in node.children:
            if isinstance(child, Tag):
                stack.append((child, depth + 1))

    return DomStats(elements=elements, max_depth=max_depth)


def extract_scripts(soup: BeautifulSoup) -> ScriptStats:
    external = inline = async_count = defer_count = 0

    for script in soup.find_all("script"):
        if script.get("src"):
            external += 1
            if script.has_attr("async"):
                async_count += 1
            if script.has_attr("defer"):
                defer_count += 1
        elif script.get_text().strip():
            inline += 1

    return ScriptStats(
        external=external,
        inline=inline,
        async_count=async_count,
        defer_count=defer_count,
    )


def extract_stylesheets(soup: BeautifulSoup) -> StyleStats:
    return StyleStats(
        external=len(soup.select('link[rel="stylesheet"]')),
        inline=len(soup.find_all("style")),
    )


def check_technical_elements(soup: BeautifulSoup) -> TechnicalFlags:
    return TechnicalFlags(
        has_doctype=any(isinstance(node, Doctype) for node in soup.contents),
        has_charset=soup.select_one("meta[charset]") is not None,
        has_viewport=soup.select_one('meta[name="viewport"]') is not None,
        has_favicon=soup.select_one('link[rel="icon"], link[rel="shortcut icon"]') is not None,
        has_hreflang=soup.select_one('link[rel="alternate"][hreflang]') is not None,
    )


def extract_facts(
    html: str,
    url: str,
    document: Optional[BeautifulSoup] = None,
    logger: Optional[AuditLogger] = None,
) -> DocumentFacts:
    """
    Parse a page once and extract all facts used by the checkers.

    Args:
        html: Raw HTML
        url: URL the HTML was retrieved from
        document: Already parsed document for html (parsed here when None)
        logger: Optional audit logger

    Returns:
        DocumentFacts for the page
    """
    soup = document if document is not None else parse_html(html)

    facts = DocumentFacts(
        url=url,
        raw_html=html,
        html_size=len(html),
        meta=extract_meta_tags(soup),
        headings=extract_headings(soup),
        images=extract_images(soup),
        links=extract_links(soup),
        body_text=extract_body_text(soup),
        json_ld=extract_json_ld(soup, logger),
        dom=analyze_dom(soup),
        scripts=extract_scripts(soup),
        styles=extract_stylesheets(soup),
        technical=check_technical_elements(soup),
        document=soup,
    )

    if logger:
        logger.log(LogLevel.DEBUG, COMPONENT, "Extracted document facts", {
            "url": url,
            "html_size": facts.html_size,
            "elements": facts.dom.elements,
            "headings": len(facts.headings),
            "images": len(facts.images),
            "links": len(facts.links),
        })

    return facts
