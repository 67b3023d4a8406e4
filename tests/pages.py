"""Page builders and a fake site shared by the test modules."""

import asyncio
from typing import Optional, Union

import httpx

from page_auditor.fetcher import ResilientFetcher, RetrievalProvider


SENTENCE = "Gardening with tomatoes needs compost and careful watering of seedlings."

PERFECT_TITLE = "Gardening Guide: Tomatoes, Compost and Seedlings"
PERFECT_DESCRIPTION = ("Compost and seedlings guide. " * 5)[:140]


def build_page(
    title: str = PERFECT_TITLE,
    description: str = PERFECT_DESCRIPTION,
    body: str = "",
    head_extra: str = "",
    sentences: int = 35,
) -> str:
    """Build a page that passes every weighted category unless overridden."""
    prose = " ".join([SENTENCE] * sentences)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head>'
        '<meta charset="utf-8">'
        f"<title>{title}</title>"
        f'<meta name="description" content="{description}">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        '<link rel="canonical" href="https://garden.example.com/">'
        '<link rel="icon" href="/favicon.ico">'
        '<meta property="og:title" content="Gardening guide">'
        '<meta property="og:description" content="Tomatoes and compost">'
        '<meta property="og:image" content="https://garden.example.com/og.png">'
        '<meta name="twitter:card" content="summary">'
        f"{head_extra}"
        "</head><body>"
        "<header><nav><a href=\"/about\">About our garden</a></nav></header>"
        "<main>"
        "<h1>Gardening tomatoes</h1>"
        "<h2>Compost</h2>"
        f"<p>{prose}</p>"
        '<img src="/images/tomato-plant.webp" alt="Tomato plant" loading="lazy">'
        f"{body}"
        "</main>"
        "<footer>Garden footer</footer>"
        "</body></html>"
    )


PROXY = RetrievalProvider(name="proxy", url_template="https://proxy.test/raw?url={url}")


def site_transport(
    resources: dict[str, Union[str, int]],
    headers: Optional[dict[str, str]] = None,
    calls: Optional[list[str]] = None,
) -> httpx.MockTransport:
    """
    Serve a fake site behind the test proxy.

    Args:
        resources: Target URL to body (200) or to an HTTP status code
        headers: Response headers for direct HEAD probes; None blocks them
        calls: Optional list collecting every requested target URL
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "proxy.test":
            target = request.url.params["url"]
            if calls is not None:
                calls.append(target)
            value = resources.get(target, 404)
            if isinstance(value, int):
                return httpx.Response(value, text="error")
            return httpx.Response(200, text=value)
        if request.method == "HEAD" and headers is not None:
            return httpx.Response(200, headers=headers)
        raise httpx.ConnectError("blocked", request=request)

    return httpx.MockTransport(handler)


def site_fetcher(
    resources: dict[str, Union[str, int]],
    headers: Optional[dict[str, str]] = None,
    calls: Optional[list[str]] = None,
) -> ResilientFetcher:
    return ResilientFetcher(providers=[PROXY], transport=site_transport(resources, headers, calls))


def run_async(coro):
    """Helper to run async code in tests."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()
