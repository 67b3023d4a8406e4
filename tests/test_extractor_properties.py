"""
Property-based tests for the fact extractor.

Uses Hypothesis for property-based testing to verify correctness properties
defined in the design document.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from page_auditor.extractor import (
    analyze_dom,
    extract_body_text,
    extract_facts,
    extract_json_ld,
    parse_html,
)


word_strategy = st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz"), min_size=1, max_size=12)


@st.composite
def html_page_strategy(draw) -> str:
    """Generate small but varied HTML pages."""
    title = " ".join(draw(st.lists(word_strategy, min_size=0, max_size=6)))
    paragraphs = draw(st.lists(st.lists(word_strategy, min_size=1, max_size=15), min_size=0, max_size=6))
    headings = draw(st.lists(
        st.tuples(st.integers(min_value=1, max_value=6), word_strategy),
        max_size=5,
    ))
    images = draw(st.lists(st.one_of(st.none(), word_strategy), max_size=4))

    body = []
    for level, text in headings:
        body.append(f"<h{level}>{text}</h{level}>")
    for words in paragraphs:
        body.append(f"<p>{' '.join(words)}</p>")
    for alt in images:
        alt_attr = f' alt="{alt}"' if alt is not None else ""
        body.append(f'<img src="/img/{len(body)}.png"{alt_attr}>')

    return (
        "<!DOCTYPE html><html lang=\"en\"><head>"
        f"<title>{title}</title>"
        "</head><body>"
        + "".join(body)
        + "</body></html>"
    )


class TestExtractionProperty:
    """
    Property-based tests for fact extraction.

    **Property 1: Extraction is deterministic and never fails on string input**
    """

    @given(html=html_page_strategy())
    @settings(max_examples=100)
    def test_extraction_is_idempotent(self, html: str) -> None:
        """
        Property 1: Idempotent extraction.

        *For any* HTML page, extracting facts twice SHALL produce equal facts.
        """
        first = extract_facts(html, "https://example.com/")
        second = extract_facts(html, "https://example.com/")

        assert first == second
        assert first.html_size == len(html)

    @given(html=st.text(alphabet=st.sampled_from("abcdiv p<>/=\"'\n"), max_size=300))
    @settings(max_examples=100)
    def test_arbitrary_text_never_raises(self, html: str) -> None:
        """
        Property 2: Tolerant parsing.

        *For any* string, extraction SHALL complete without raising.
        """
        facts = extract_facts(html, "https://example.com/")
        assert facts.dom.elements >= 0

    @given(
        visible=st.lists(word_strategy, min_size=1, max_size=10),
        hidden=st.lists(word_strategy, min_size=1, max_size=10),
    )
    @settings(max_examples=100)
    def test_body_text_excludes_scripts_and_styles(self, visible: list[str], hidden: list[str]) -> None:
        """
        Property 3: Body text is visible prose only.

        *For any* page, text inside script and style elements SHALL NOT
        appear in the body text.
        """
        marker = "zzhiddenzz"
        html = (
            "<html><body>"
            f"<p>{' '.join(visible)}</p>"
            f"<script>var {marker} = '{' '.join(hidden)}';</script>"
            f"<style>.{marker} {{ color: red; }}</style>"
            "</body></html>"
        )
        text = extract_body_text(parse_html(html))

        assert text == " ".join(visible)
        assert marker not in text


class TestExtractor:
    """Example-based tests for individual extractors."""

    def test_meta_tags(self) -> None:
        html = """
        <html lang="de"><head>
          <meta charset="utf-8">
          <title>  Hello World  </title>
          <meta name="description" content="A description">
          <meta name="viewport" content="width=device-width">
          <link rel="canonical" href="https://example.com/">
          <meta property="og:title" content="OG Title">
          <meta property="twitter:card" content="summary">
        </head><body></body></html>
        """
        facts = extract_facts(html, "https://example.com/")

        assert facts.meta.title == "Hello World"
        assert facts.meta.description == "A description"
        assert facts.meta.viewport == "width=device-width"
        assert facts.meta.canonical == "https://example.com/"
        assert facts.meta.og_title == "OG Title"
        assert facts.meta.twitter_card == "summary"
        assert facts.meta.language == "de"
        assert facts.meta.charset == "utf-8"
        assert facts.technical.has_charset
        assert not facts.technical.has_doctype

    def test_malformed_json_ld_is_skipped(self) -> None:
        html = """
        <script type="application/ld+json">{"@type": "Article", "name": "x"}</script>
        <script type="application/ld+json">{not valid json</script>
        <script type="application/ld+json">[{"@type": "Thing"}]</script>
        """
        data = extract_json_ld(parse_html(html))

        assert data == ({"@type": "Article", "name": "x"}, [{"@type": "Thing"}])

    def test_dom_stats(self) -> None:
        stats = analyze_dom(parse_html("<html><body><div><p><span>x</span></p></div></body></html>"))

        assert stats.elements == 5
        assert stats.max_depth == 4

    def test_scripts_and_styles(self) -> None:
        html = """
        <head>
          <script src="/a.js"></script>
          <script src="/b.js" async></script>
          <script src="/c.js" defer></script>
          <script>console.log(1)</script>
          <script></script>
          <link rel="stylesheet" href="/s.css">
          <style>p {}</style>
        </head>
        """
        facts = extract_facts(html, "https://example.com/")

        assert facts.scripts.external == 3
        assert facts.scripts.async_count == 1
        assert facts.scripts.defer_count == 1
        assert facts.scripts.inline == 1
        assert facts.styles.external == 1
        assert facts.styles.inline == 1

    def test_links_keep_multi_valued_rel(self) -> None:
        facts = extract_facts(
            '<a href="/x" rel="nofollow noopener" target="_blank"> Go </a><a>no href</a>',
            "https://example.com/",
        )

        assert len(facts.links) == 1
        assert facts.links[0].rel == "nofollow noopener"
        assert facts.links[0].text == "Go"
        assert facts.links[0].target == "_blank"
