"""
Property-based tests for the page checkers.

Uses Hypothesis for property-based testing to verify correctness properties
defined in the design document.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from pages import build_page
from page_auditor.checks import (
    DEFAULT_CHECKERS,
    check_accessibility,
    check_anchor_text,
    check_headings,
    check_images,
    check_lazy_content,
    check_links,
    check_meta,
    check_resource_hints,
    check_social_share,
    check_structured_data,
    check_technical,
    worst_status,
)
from page_auditor.enums import IssueSeverity, SeoStatus
from page_auditor.extractor import extract_facts


URL = "https://garden.example.com/"


def facts_for(html: str, url: str = URL):
    return extract_facts(html, url)


class TestImageAltProperty:
    """
    Property-based tests for image alt coverage.

    **Property 1: Missing-alt ratio below 20% is a warning, at or above is an error**
    """

    @given(
        with_alt=st.integers(min_value=0, max_value=20),
        without_alt=st.integers(min_value=0, max_value=20),
    )
    @settings(max_examples=100)
    def test_alt_ratio_thresholds(self, with_alt: int, without_alt: int) -> None:
        """
        Property 1: Alt coverage grading.

        *For any* mix of images with and without alt text, the images status
        SHALL be good when none is missing, warning when the missing ratio is
        below 0.2 and error otherwise.
        """
        html = "".join(
            [f'<img src="/a{i}.png" alt="Picture {i}">' for i in range(with_alt)]
            + [f'<img src="/b{i}.png">' for i in range(without_alt)]
        )
        result = check_images(facts_for(html))
        total = with_alt + without_alt

        if without_alt == 0:
            assert result.status == SeoStatus.GOOD
        elif without_alt / total < 0.2:
            assert result.status == SeoStatus.WARNING
        else:
            assert result.status == SeoStatus.ERROR
        assert result.details["total"] == total
        assert result.details["withoutAlt"] == without_alt

    def test_exact_threshold_is_error(self) -> None:
        html = '<img src="/x.png">' + "".join(f'<img src="/{i}.png" alt="ok">' for i in range(4))
        assert check_images(facts_for(html)).status == SeoStatus.ERROR

    def test_empty_alt_counts_as_missing(self) -> None:
        result = check_images(facts_for('<img src="/DSC_0042.jpg?w=200" alt="  ">'))

        assert result.details["withoutAlt"] == 1
        assert result.details["formats"] == {"jpg": 1}
        assert any(i.rule == "img-filename" for i in result.issues)


class TestHeadingsProperty:
    """
    Property-based tests for heading structure.

    **Property 2: A level jump of more than one breaks the hierarchy**
    """

    @given(levels=st.lists(st.integers(min_value=1, max_value=6), min_size=1, max_size=10))
    @settings(max_examples=100)
    def test_hierarchy_and_h1_count(self, levels: list[int]) -> None:
        """
        Property 2: Heading grading.

        *For any* heading outline, the status SHALL be error without an h1,
        good with exactly one h1 and no skipped levels, and warning otherwise.
        """
        html = "".join(f"<h{level}>Heading {i}</h{level}>" for i, level in enumerate(levels))
        result = check_headings(facts_for(html))

        proper = all(b <= a + 1 for a, b in zip(levels, levels[1:]))
        h1_count = levels.count(1)

        assert result.details["hasProperHierarchy"] == proper
        assert result.details["h1Count"] == h1_count
        if h1_count == 0:
            assert result.status == SeoStatus.ERROR
        elif h1_count == 1 and proper:
            assert result.status == SeoStatus.GOOD
        else:
            assert result.status == SeoStatus.WARNING

    def test_first_heading_may_start_anywhere(self) -> None:
        result = check_headings(facts_for("<h3>Intro</h3><h1>Title</h1><h2>Part</h2>"))
        assert result.details["hasProperHierarchy"]


class TestMetaChecker:
    """Example-based tests for the meta checker."""

    @given(length=st.integers(min_value=0, max_value=120))
    @settings(max_examples=100)
    def test_title_length_grading(self, length: int) -> None:
        """
        *For any* title length, the title SHALL be good inside 30-60
        characters, a warning when present but outside, and an error when
        missing.
        """
        title = "t" * length
        html = f"<title>{title}</title>" if length else ""
        result = check_meta(facts_for(html))
        status = result.details["title"]["status"]

        if 30 <= length <= 60:
            assert status == "good"
        elif length:
            assert status == "warning"
        else:
            assert status == "error"

    def test_perfect_meta(self) -> None:
        result = check_meta(facts_for(build_page()))

        assert result.status == SeoStatus.GOOD
        assert result.details["openGraph"]["status"] == "good"
        assert result.details["canonical"]["matchesUrl"] is True

    def test_noindex_is_a_warning(self) -> None:
        page = build_page(head_extra='<meta name="robots" content="NOINDEX, follow">')
        result = check_meta(facts_for(page))

        assert result.details["robots"]["status"] == "warning"
        assert any(i.rule == "meta-robots-noindex" for i in result.issues)

    def test_missing_viewport_is_an_error(self) -> None:
        result = check_meta(facts_for("<title>A title that is long enough to pass</title>"))

        assert result.status == SeoStatus.ERROR
        assert result.details["viewport"]["status"] == "error"


class TestLinksAndAnchors:
    """Example-based tests for link and anchor text checkers."""

    def test_internal_and_external_counts(self) -> None:
        html = (
            '<a href="/about">About</a>'
            '<a href="https://garden.example.com/shop">Shop</a>'
            '<a href="https://other.example.org/" rel="nofollow">Partner</a>'
            '<a href="#top">Top</a>'
            '<a href="mailto:me@example.com">Mail</a>'
        )
        result = check_links(facts_for(html))

        assert result.status == SeoStatus.GOOD
        assert result.details["internal"] == 2
        assert result.details["external"] == 1
        assert result.details["nofollow"] == 1

    def test_no_internal_links_is_a_warning(self) -> None:
        result = check_links(facts_for('<a href="https://elsewhere.example.org/">Elsewhere</a>'))
        assert result.status == SeoStatus.WARNING

    def test_generic_anchor_majority_is_an_error(self) -> None:
        html = '<a href="/a">click here</a><a href="/b">Read more about it</a><a href="/c">Compost guide</a>'
        result = check_anchor_text(facts_for(html))

        assert result.details["generic"] == 2
        assert result.details["descriptive"] == 1
        assert result.status == SeoStatus.ERROR


class TestAdvisoryCheckers:
    """Example-based tests for advisory categories."""

    def test_accessible_page_is_good(self) -> None:
        result = check_accessibility(facts_for(build_page()))

        assert result.error_count == 0
        assert result.score == 100
        assert result.status == SeoStatus.GOOD
        assert result.score_delta == 0
        assert "scoreDelta" not in result.to_dict()

    def test_accessibility_errors(self) -> None:
        html = (
            "<html><body>"
            '<img src="/x.png">'
            '<input type="text" placeholder="Name">'
            '<a href="/x"></a>'
            "<button></button>"
            '<div tabindex="3">x</div>'
            "</body></html>"
        )
        result = check_accessibility(facts_for(html))
        rules = {i.rule for i in result.issues}

        assert {"img-alt", "form-labels", "link-text", "button-text", "heading-h1", "html-lang"} <= rules
        assert {"placeholder-label", "tabindex-positive", "landmark-main"} <= rules
        assert result.status == SeoStatus.ERROR
        assert result.score == 57
        assert result.score_delta == -43
        assert result.to_dict()["scoreDelta"] == -43
        wcag = [i for i in result.issues if i.rule == "html-lang"][0]
        assert wcag.wcag_criteria == "3.1.1"

    def test_structured_data_previews(self) -> None:
        html = """
        <script type="application/ld+json">
        {"@type": "Product", "name": "Tomato seeds", "image": ["https://x/img.png"],
         "aggregateRating": {"ratingValue": "4.5", "reviewCount": "12"},
         "offers": {"price": 3.5, "priceCurrency": "EUR"}}
        </script>
        """
        result = check_structured_data(facts_for(html))
        preview = result.details["previews"][0]

        assert result.status == SeoStatus.GOOD
        assert preview["type"] == "Product"
        assert preview["name"] == "Tomato seeds"
        assert preview["image"] == "https://x/img.png"
        assert preview["rating"] == {"value": 4.5, "count": 12}
        assert preview["price"] == {"value": "3.5", "currency": "EUR"}

    def test_no_structured_data_is_info(self) -> None:
        assert check_structured_data(facts_for("<p>x</p>")).status == SeoStatus.INFO

    def test_social_share(self) -> None:
        none = check_social_share(facts_for("<p>plain</p>"))
        few = check_social_share(facts_for('<a href="https://www.facebook.com/sharer/sharer.php?u=x">Share</a>'))
        many = check_social_share(facts_for(
            '<a href="https://www.facebook.com/sharer/sharer.php?u=x">f</a>'
            '<a href="https://twitter.com/intent/tweet?url=x">t</a>'
            '<a href="https://www.reddit.com/submit?url=x">r</a>'
        ))

        assert none.status == SeoStatus.INFO
        assert few.status == SeoStatus.WARNING
        assert any(i.rule == "share-options" for i in few.issues)
        assert many.status == SeoStatus.GOOD
        assert not any(i.rule == "share-options" for i in many.issues)

    def test_resource_hints(self) -> None:
        result = check_resource_hints(facts_for('<link rel="preconnect" href="https://cdn.example.com">'))

        assert result.status == SeoStatus.GOOD
        assert result.details["preconnect"] == ["https://cdn.example.com"]

    def test_infinite_scroll_without_pagination(self) -> None:
        result = check_lazy_content(facts_for('<div class="infinite-scroll"></div>'))

        assert result.details["hasInfiniteScroll"]
        assert result.status == SeoStatus.WARNING

    def test_technical_http_page(self) -> None:
        result = check_technical(facts_for(build_page(), url="http://garden.example.com/"))

        assert not result.details["isHttps"]
        assert result.details["passedChecks"] == 5
        assert result.status == SeoStatus.GOOD


class TestEveryChecker:
    """Every registered checker handles real and degenerate pages."""

    def test_all_checkers_produce_serializable_results(self) -> None:
        for html in (build_page(), "", "<p>fragment</p>"):
            facts = facts_for(html)
            for checker in DEFAULT_CHECKERS:
                result = checker.check(facts)
                data = result.to_dict()
                assert data["status"] in {s.value for s in SeoStatus}
                for item in result.issues:
                    assert item.severity in set(IssueSeverity)

    def test_worst_status(self) -> None:
        assert worst_status(SeoStatus.GOOD, SeoStatus.INFO) in (SeoStatus.GOOD, SeoStatus.INFO)
        assert worst_status(SeoStatus.GOOD, SeoStatus.WARNING) == SeoStatus.WARNING
        assert worst_status(SeoStatus.WARNING, SeoStatus.ERROR, SeoStatus.GOOD) == SeoStatus.ERROR
