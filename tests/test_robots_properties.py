"""
Property-based tests for robots.txt and sitemap analysis.

Uses Hypothesis for property-based testing to verify correctness properties
defined in the design document.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from pages import run_async, site_fetcher
from page_auditor.enums import SeoStatus
from page_auditor.robots import (
    BLOCKING_ALL,
    NO_GENERIC_AGENT,
    NO_SITEMAP_DIRECTIVE,
    analyze_robots_txt,
    analyze_sitemaps,
    parse_robots_txt,
    sitemap_type,
)


path_strategy = st.lists(
    st.text(alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz-"), min_size=1, max_size=10),
    min_size=1,
    max_size=3,
).map(lambda parts: "/" + "/".join(parts))


class TestRobotsParsingProperty:
    """
    Property-based tests for robots.txt parsing.

    **Property 1: Rules are attributed to the most recent user-agent**
    """

    @given(
        agent=st.sampled_from(["*", "Googlebot", "Bingbot"]),
        disallowed=st.lists(path_strategy, max_size=5),
        allowed=st.lists(path_strategy, max_size=5),
    )
    @settings(max_examples=100)
    def test_paths_and_agents(self, agent: str, disallowed: list[str], allowed: list[str]) -> None:
        """
        Property 1: Directive attribution.

        *For any* group of allow and disallow rules, the parser SHALL list
        the paths in order and attribute each rule to the group's agent.
        """
        lines = [f"User-agent: {agent}"]
        lines += [f"Disallow: {p}" for p in disallowed]
        lines += [f"allow: {p}" for p in allowed]
        lines.append("Sitemap: https://example.com/sitemap.xml")
        result = parse_robots_txt("\n".join(lines))

        assert result.found
        assert list(result.disallowed_paths) == disallowed
        assert list(result.allowed_paths) == allowed
        assert result.user_agents == (agent,)
        for directive in result.directives:
            if directive.type in ("allow", "disallow"):
                assert directive.user_agent == agent
        if agent == "*":
            assert result.status == SeoStatus.GOOD
        else:
            assert NO_GENERIC_AGENT in result.issues
            assert result.status == SeoStatus.WARNING

    @given(content=st.text(max_size=400))
    @settings(max_examples=100)
    def test_parser_never_raises(self, content: str) -> None:
        """
        Property 2: Tolerant parsing.

        *For any* text, parsing SHALL succeed and produce a status.
        """
        result = parse_robots_txt(content)
        assert result.status in (SeoStatus.GOOD, SeoStatus.WARNING, SeoStatus.ERROR)


class TestRobotsParser:
    """Example-based tests for robots.txt parsing."""

    def test_full_file(self) -> None:
        content = "\n".join([
            "# comment",
            "Disallow: /before-any-agent",
            "User-agent: Googlebot",
            "Crawl-delay: 2.5 seconds",
            "Disallow:",
            "Noindex: /old",
            "garbage line",
            "User-agent: *",
            "Disallow: /",
            "Sitemap: https://example.com/sitemap.xml",
        ])
        result = parse_robots_txt(content)

        assert result.disallowed_paths == ("/before-any-agent", "/")
        assert result.directives[0].user_agent == "*"
        assert result.crawl_delay == 2.5
        assert result.user_agents == ("Googlebot", "*")
        assert result.sitemaps == ("https://example.com/sitemap.xml",)
        assert any(d.type == "other" and d.value == "noindex: /old" for d in result.directives)
        assert result.issues == (BLOCKING_ALL,)
        assert result.status == SeoStatus.ERROR

    def test_missing_sitemap_is_a_warning(self) -> None:
        result = parse_robots_txt("User-agent: *\nDisallow: /private")

        assert result.issues == (NO_SITEMAP_DIRECTIVE,)
        assert result.status == SeoStatus.WARNING

    def test_sitemap_type(self) -> None:
        assert sitemap_type('<?xml version="1.0"?><urlset></urlset>') == "xml"
        assert sitemap_type("<sitemapindex><sitemap/></sitemapindex>") == "index"
        assert sitemap_type("<html></html>") is None

    def test_to_dict(self) -> None:
        data = parse_robots_txt("User-agent: *\nAllow: /").to_dict()

        assert data["found"] is True
        assert data["userAgents"] == ["*"]
        assert data["directives"][1] == {"type": "allow", "value": "/", "userAgent": "*"}
        assert data["crawlDelay"] is None


class TestRobotsFetching:
    """Tests for fetching robots.txt and sitemaps through the provider chain."""

    def test_robots_from_site_root(self) -> None:
        calls: list[str] = []

        async def go():
            async with site_fetcher(
                {"https://example.com/robots.txt": "User-agent: *\nSitemap: https://example.com/s.xml"},
                calls=calls,
            ) as fetcher:
                return await analyze_robots_txt("example.com/deep/page?x=1", fetcher)

        result = run_async(go())

        assert calls == ["https://example.com/robots.txt"]
        assert result.found
        assert result.status == SeoStatus.GOOD

    def test_robots_missing_or_html(self) -> None:
        async def go():
            async with site_fetcher({"https://html.example.com/robots.txt": "<!DOCTYPE html><html></html>"}) as f:
                return (
                    await analyze_robots_txt("https://missing.example.com/", f),
                    await analyze_robots_txt("https://html.example.com/", f),
                    await analyze_robots_txt("https://", f),
                )

        missing, html, invalid = run_async(go())

        assert not missing.found and missing.status == SeoStatus.WARNING
        assert not html.found and html.status == SeoStatus.WARNING
        assert invalid.status == SeoStatus.ERROR
        assert invalid.issues == ("Invalid URL",)

    def test_sitemaps_from_robots_and_default(self) -> None:
        resources = {
            "https://example.com/news.xml": "<sitemapindex></sitemapindex>",
            "https://example.com/broken.xml": "not xml",
            "https://example.com/sitemap.xml": '<?xml version="1.0"?><urlset/>',
        }

        async def go():
            async with site_fetcher(resources) as fetcher:
                return await analyze_sitemaps(
                    "https://example.com/page",
                    fetcher,
                    ["https://example.com/news.xml", "https://example.com/broken.xml", "https://example.com/gone.xml"],
                )

        result = run_async(go())
        by_url = {s.url: s for s in result.sitemaps}

        assert result.found and result.status == SeoStatus.GOOD
        assert by_url["https://example.com/news.xml"].type == "index"
        assert not by_url["https://example.com/broken.xml"].found
        assert by_url["https://example.com/sitemap.xml"].source == "default"
        assert len(result.issues) == 2

    def test_default_sitemap_not_checked_twice(self) -> None:
        calls: list[str] = []

        async def go():
            async with site_fetcher({}, calls=calls) as fetcher:
                return await analyze_sitemaps(
                    "https://example.com/", fetcher, ["https://EXAMPLE.com/sitemap.xml"]
                )

        result = run_async(go())

        assert calls == ["https://EXAMPLE.com/sitemap.xml"]
        assert not result.found
        assert result.status == SeoStatus.WARNING
        assert "No sitemap found" in result.issues
