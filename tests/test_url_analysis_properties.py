"""
Property-based tests for URL structure analysis.

Uses Hypothesis for property-based testing to verify correctness properties
defined in the design document.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from page_auditor.enums import SeoStatus
from page_auditor.url_analysis import (
    MAX_PATH_DEPTH,
    analyze_readability,
    analyze_url,
    extract_url_keywords,
)


segment_strategy = st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz-"), min_size=1, max_size=20)


class TestUrlStructureProperty:
    """
    Property-based tests for URL decomposition.

    **Property 1: Segments and depth reflect the path**
    """

    @given(segments=st.lists(segment_strategy, min_size=0, max_size=8))
    @settings(max_examples=100)
    def test_segments_and_depth(self, segments: list[str]) -> None:
        """
        Property 1: Path decomposition.

        *For any* lowercase hyphenated path, the analysis SHALL list its
        segments in order, and a path deeper than four levels SHALL be
        reported as an issue.
        """
        url = "https://www.example.com/" + "/".join(segments)
        result = analyze_url(url)

        assert list(result.path_segments) == segments
        assert result.depth == len(segments)
        assert result.has_www
        assert result.uses_https
        depth_issue = any(i.startswith("Path depth") for i in result.issues)
        assert depth_issue == (len(segments) > MAX_PATH_DEPTH)

    @given(segments=st.lists(segment_strategy, min_size=1, max_size=6))
    @settings(max_examples=100)
    def test_readability_score_bounds(self, segments: list[str]) -> None:
        """
        Property 2: Readability bounds.

        *For any* path, the readability score SHALL lie in 0-100.
        """
        pathname = "/" + "/".join(segments)
        readability = analyze_readability(pathname, segments)

        assert 0 <= readability.score <= 100
        assert not readability.has_uppercase
        assert not readability.has_special_chars


class TestUrlAnalysis:
    """Example-based tests for analyze_url."""

    def test_clean_url_is_good(self) -> None:
        result = analyze_url("https://example.com/blog/growing-tomatoes")

        assert result.status == SeoStatus.GOOD
        assert result.readability.score == 100
        assert result.readability.is_human_readable
        assert result.issues == ()

    def test_messy_url_is_an_error(self) -> None:
        result = analyze_url("http://Example.com/Blog/My_Post!/a/b/c?x=1&y=2&z=3&w=4#top")

        assert result.status == SeoStatus.ERROR
        assert result.hostname == "example.com"
        assert result.hash == "#top"
        assert result.query_params == {"x": "1", "y": "2", "z": "3", "w": "4"}
        assert not result.uses_https
        assert result.readability.has_underscores
        assert result.readability.has_uppercase
        assert len(result.issues) >= 3

    def test_trailing_slash(self) -> None:
        assert analyze_url("https://example.com/docs/").has_trailing_slash
        assert not analyze_url("https://example.com/").has_trailing_slash

    def test_invalid_url(self) -> None:
        result = analyze_url("not a url")

        assert result.status == SeoStatus.ERROR
        assert result.issues == ("Invalid URL format",)
        assert result.to_dict()["status"] == "error"

    def test_extract_url_keywords(self) -> None:
        keywords = extract_url_keywords("https://example.com/blog/how-to-grow-the-best-tomatoes_2026/blog")
        assert keywords == ["blog", "how", "grow", "best", "tomatoes"]
