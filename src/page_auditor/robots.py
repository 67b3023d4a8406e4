"""
robots.txt and sitemap analysis.

Runs in the background after a report completes. Both files are
fetched through the same provider fallback as the page itself.
"""

import re
from dataclasses import dataclass, field
from typing import Optional, Sequence

from .enums import SeoStatus
from .fetcher import ResilientFetcher
from .url_utils import normalize_url, site_root


_LEADING_NUMBER_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")

BLOCKING_ALL = "robots.txt blocks all crawlers from the whole site"
NO_SITEMAP_DIRECTIVE = "robots.txt does not reference a sitemap"
NO_GENERIC_AGENT = "robots.txt has no rules for all user agents (*)"


@dataclass(frozen=True)
class RobotsDirective:
    type: str  # 'allow', 'disallow', 'crawl-delay', 'sitemap', 'user-agent' or 'other'
    value: str
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"type": self.type, "value": self.value}
        if self.user_agent is not None:
            data["userAgent"] = self.user_agent
        return data


@dataclass(frozen=True)
class RobotsTxtAnalysis:
    """Parsed robots.txt with the issues found in it."""

    found: bool
    status: SeoStatus
    content: Optional[str] = None
    directives: tuple[RobotsDirective, ...] = ()
    user_agents: tuple[str, ...] = ()
    sitemaps: tuple[str, ...] = ()
    allowed_paths: tuple[str, ...] = ()
    disallowed_paths: tuple[str, ...] = ()
    crawl_delay: Optional[float] = None
    issues: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "status": self.status.value,
            "content": self.content,
            "directives": [d.to_dict() for d in self.directives],
            "userAgents": list(self.user_agents),
            "sitemaps": list(self.sitemaps),
            "allowedPaths": list(self.allowed_paths),
            "disallowedPaths": list(self.disallowed_paths),
            "crawlDelay": self.crawl_delay,
            "issues": list(self.issues),
        }


@dataclass(frozen=True)
class SitemapInfo:
    url: str
    found: bool
    type: str  # 'xml', 'index' or 'unknown'
    source: str  # 'robots.txt' or 'default'

    def to_dict(self) -> dict:
        return {"url": self.url, "found": self.found, "type": self.type, "source": self.source}


@dataclass(frozen=True)
class SitemapAnalysis:
    found: bool
    status: SeoStatus
    sitemaps: tuple[SitemapInfo, ...] = ()
    from_robots_txt: tuple[str, ...] = ()
    issues: tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "found": self.found,
            "status": self.status.value,
            "sitemaps": [s.to_dict() for s in self.sitemaps],
            "fromRobotsTxt": list(self.from_robots_txt),
            "issues": list(self.issues),
        }


def _parse_leading_float(value: str) -> Optional[float]:
    match = _LEADING_NUMBER_RE.match(value)
    return float(match.group(0)) if match else None


def parse_robots_txt(content: str) -> RobotsTxtAnalysis:
    """
    Parse robots.txt content.

    Directive names are case-insensitive; comments, blank lines and lines
    without a colon are skipped. Rules are attributed to the most recent
    user-agent line, '*' before the first one.

    Args:
        content: robots.txt body

    Returns:
        RobotsTxtAnalysis with found=True and a status derived from the issues
    """
    directives: list[RobotsDirective] = []
    user_agents: dict[str, None] = {}
    sitemaps: list[str] = []
    allowed: list[str] = []
    disallowed: list[str] = []
    current_agent = "*"
    crawl_delay: Optional[float] = None

    for line in (raw.strip() for raw in content.split("\n")):
        if not line or line.startswith("#") or ":" not in line:
            continue

        name, _, value = line.partition(":")
        name = name.strip().lower()
        value = value.strip()

        if name == "user-agent":
            current_agent = value
            user_agents[value] = None
            directives.append(RobotsDirective("user-agent", value))
        elif name == "allow":
            allowed.append(value)
            directives.append(RobotsDirective("allow", value, current_agent))
        elif name == "disallow":
            if value:
                disallowed.append(value)
                directives.append(RobotsDirective("disallow", value, current_agent))
        elif name == "crawl-delay":
            delay = _parse_leading_float(value)
            if delay is not None:
                crawl_delay = delay
                directives.append(RobotsDirective("crawl-delay", value, current_agent))
        elif name == "sitemap":
            sitemaps.append(value)
            directives.append(RobotsDirective("sitemap", value))
        else:
            directives.append(RobotsDirective("other", f"{name}: {value}"))

    issues = []
    if "/" in disallowed:
        issues.append(BLOCKING_ALL)
    if not sitemaps:
        issues.append(NO_SITEMAP_DIRECTIVE)
    if user_agents and "*" not in user_agents:
        issues.append(NO_GENERIC_AGENT)

    if BLOCKING_ALL in issues:
        status = SeoStatus.ERROR
    elif issues:
        status = SeoStatus.WARNING
    else:
        status = SeoStatus.GOOD

    return RobotsTxtAnalysis(
        found=True,
        status=status,
        content=content,
        directives=tuple(directives),
        user_agents=tuple(user_agents),
        sitemaps=tuple(sitemaps),
        allowed_paths=tuple(allowed),
        disallowed_paths=tuple(disallowed),
        crawl_delay=crawl_delay,
        issues=tuple(issues),
    )


def looks_like_html(content: str) -> bool:
    return content.startswith("<!DOCTYPE") or content.startswith("<html")


async def analyze_robots_txt(url: str, fetcher: ResilientFetcher) -> RobotsTxtAnalysis:
    """Fetch and parse /robots.txt for the site of url."""
    root = site_root(normalize_url(url))
    if root is None:
        return RobotsTxtAnalysis(found=False, status=SeoStatus.ERROR, issues=("Invalid URL",))

    result = await fetcher.fetch_resource(f"{root}/robots.txt")
    if not result.ok or not result.content:
        return RobotsTxtAnalysis(
            found=False, status=SeoStatus.WARNING, issues=("robots.txt is not accessible",)
        )

    content = result.content.strip()
    if looks_like_html(content):
        return RobotsTxtAnalysis(
            found=False, status=SeoStatus.WARNING, issues=("robots.txt returns an HTML page",)
        )

    return parse_robots_txt(content)


def sitemap_type(content: str) -> Optional[str]:
    """Return 'index' or 'xml' for sitemap XML, None for anything else."""
    if not content.startswith(("<?xml", "<urlset", "<sitemapindex")):
        return None
    return "index" if "<sitemapindex" in content else "xml"


async def analyze_sitemaps(
    url: str,
    fetcher: ResilientFetcher,
    robots_sitemaps: Sequence[str] = (),
) -> SitemapAnalysis:
    """
    Check the sitemaps listed in robots.txt plus the default /sitemap.xml.

    Args:
        url: Analyzed page URL
        fetcher: Fetcher used for the sitemap requests
        robots_sitemaps: Sitemap URLs declared in robots.txt

    Returns:
        SitemapAnalysis, good when at least one sitemap was found
    """
    root = site_root(normalize_url(url))
    if root is None:
        return SitemapAnalysis(found=False, status=SeoStatus.ERROR, issues=("Invalid URL",))

    candidates = [(sitemap, "robots.txt") for sitemap in robots_sitemaps]
    default_sitemap = f"{root}/sitemap.xml"
    if not any(s.lower() == default_sitemap.lower() for s in robots_sitemaps):
        candidates.append((default_sitemap, "default"))

    sitemaps = []
    issues = []
    for sitemap_url, source in candidates:
        result = await fetcher.fetch_resource(sitemap_url)
        if result.ok and result.content:
            kind = sitemap_type(result.content.strip())
            sitemaps.append(SitemapInfo(sitemap_url, kind is not None, kind or "unknown", source))
            if kind is None and source == "robots.txt":
                issues.append(f"Sitemap is not valid XML: {sitemap_url}")
        else:
            sitemaps.append(SitemapInfo(sitemap_url, False, "unknown", source))
            if source == "robots.txt":
                issues.append(f"Sitemap is not accessible: {sitemap_url}")

    found = any(s.found for s in sitemaps)
    if not found:
        issues.append("No sitemap found")

    return SitemapAnalysis(
        found=found,
        status=SeoStatus.GOOD if found else SeoStatus.WARNING,
        sitemaps=tuple(sitemaps),
        from_robots_txt=tuple(robots_sitemaps),
        issues=tuple(issues),
    )
