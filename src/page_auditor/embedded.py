"""
Embedded content analysis for iframes, video and audio elements.

Each media kind is graded on its own; the overall status is the worst of
the three, or info when the page embeds nothing.
"""

from dataclasses import dataclass

from bs4 import BeautifulSoup
from bs4.element import Tag

from .enums import SeoStatus
from .extractor import attr_text


ITEM_LIMIT = 10


@dataclass(frozen=True)
class EmbedSection:
    """Findings for one kind of embedded element."""

    total: int
    items: tuple[dict, ...]
    issues: tuple[str, ...]
    status: SeoStatus

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "items": list(self.items),
            "issues": list(self.issues),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class EmbeddedContentAnalysis:
    iframes: EmbedSection
    videos: EmbedSection
    audios: EmbedSection
    overall_status: SeoStatus

    def to_dict(self) -> dict:
        return {
            "iframes": self.iframes.to_dict(),
            "videos": self.videos.to_dict(),
            "audios": self.audios.to_dict(),
            "overallStatus": self.overall_status.value,
        }


def _section_status(total: int, failing: int, issues: list[str]) -> SeoStatus:
    """Info when empty, error when more than half fail the key check."""
    if total == 0:
        return SeoStatus.INFO
    if failing > total / 2:
        return SeoStatus.ERROR
    if issues:
        return SeoStatus.WARNING
    return SeoStatus.GOOD


def _has_class(tag, name: str) -> bool:
    return isinstance(tag, Tag) and name in (tag.get("class") or [])


def _source_urls(media: Tag) -> list[str]:
    return [attr_text(source, "src") or "" for source in media.find_all("source")]


def analyze_iframes(doc: BeautifulSoup) -> EmbedSection:
    iframes = doc.find_all("iframe")
    items = []
    without_title = 0
    without_lazy = 0

    for iframe in iframes:
        src = attr_text(iframe, "src") or attr_text(iframe, "data-src") or ""
        title = attr_text(iframe, "title")
        width = attr_text(iframe, "width")
        sandbox = attr_text(iframe, "sandbox")
        loading = attr_text(iframe, "loading")

        issues = []
        if not title:
            issues.append("Iframe has no title")
            without_title += 1
        if loading != "lazy":
            without_lazy += 1
        if not sandbox and src.startswith("http"):
            issues.append("External iframe has no sandbox attribute")

        style = attr_text(iframe, "style") or ""
        responsive = (
            "100%" in style
            or width == "100%"
            or _has_class(iframe, "responsive")
            or _has_class(iframe.parent, "responsive")
        )

        items.append({
            "src": src,
            "title": title,
            "width": width,
            "height": attr_text(iframe, "height"),
            "sandbox": sandbox,
            "loading": loading,
            "isResponsive": responsive,
            "issues": issues,
        })

    section_issues = []
    if without_title:
        section_issues.append(f"{without_title} iframes have no title")
    if without_lazy:
        section_issues.append(f"{without_lazy} iframes are not lazy loaded")

    return EmbedSection(
        total=len(iframes),
        items=tuple(items[:ITEM_LIMIT]),
        issues=tuple(section_issues),
        status=_section_status(len(iframes), without_title, section_issues),
    )


def analyze_videos(doc: BeautifulSoup) -> EmbedSection:
    videos = doc.find_all("video")
    items = []
    without_controls = 0
    unmuted_autoplay = 0
    without_captions = 0

    for video in videos:
        has_controls = video.has_attr("controls")
        has_autoplay = video.has_attr("autoplay")
        is_muted = video.has_attr("muted")
        poster = attr_text(video, "poster")
        has_captions = bool(video.select('track[kind="captions"], track[kind="subtitles"]'))

        issues = []
        if not has_controls:
            issues.append("Video has no controls")
            without_controls += 1
        if has_autoplay and not is_muted:
            issues.append("Video autoplays with sound")
            unmuted_autoplay += 1
        if not has_captions:
            issues.append("Video has no captions")
            without_captions += 1
        if not poster:
            issues.append("Video has no poster image")

        items.append({
            "src": attr_text(video, "src"),
            "sources": _source_urls(video),
            "poster": poster,
            "hasControls": has_controls,
            "hasAutoplay": has_autoplay,
            "isMuted": is_muted,
            "hasLoop": video.has_attr("loop"),
            "preload": attr_text(video, "preload"),
            "hasCaptions": has_captions,
            "issues": issues,
        })

    section_issues = []
    if without_controls:
        section_issues.append(f"{without_controls} videos have no controls")
    if unmuted_autoplay:
        section_issues.append(f"{unmuted_autoplay} videos autoplay with sound")
    if without_captions:
        section_issues.append(f"{without_captions} videos have no captions")

    return EmbedSection(
        total=len(videos),
        items=tuple(items[:ITEM_LIMIT]),
        issues=tuple(section_issues),
        status=_section_status(len(videos), without_captions, section_issues),
    )


def analyze_audios(doc: BeautifulSoup) -> EmbedSection:
    audios = doc.find_all("audio")
    items = []
    without_controls = 0
    autoplaying = 0

    for audio in audios:
        has_controls = audio.has_attr("controls")
        has_autoplay = audio.has_attr("autoplay")

        issues = []
        if not has_controls:
            issues.append("Audio has no controls")
            without_controls += 1
        if has_autoplay:
            issues.append("Audio autoplays")
            autoplaying += 1

        items.append({
            "src": attr_text(audio, "src"),
            "sources": _source_urls(audio),
            "hasControls": has_controls,
            "hasAutoplay": has_autoplay,
            "isMuted": audio.has_attr("muted"),
            "hasLoop": audio.has_attr("loop"),
            "preload": attr_text(audio, "preload"),
            "issues": issues,
        })

    section_issues = []
    if without_controls:
        section_issues.append(f"{without_controls} audio elements have no controls")
    if autoplaying:
        section_issues.append(f"{autoplaying} audio elements autoplay")

    return EmbedSection(
        total=len(audios),
        items=tuple(items[:ITEM_LIMIT]),
        issues=tuple(section_issues),
        status=_section_status(len(audios), without_controls, section_issues),
    )


def analyze_embedded_content(doc: BeautifulSoup) -> EmbeddedContentAnalysis:
    """
    Analyze every iframe, video and audio element in the document.

    Args:
        doc: Parsed page document

    Returns:
        EmbeddedContentAnalysis with one section per element kind
    """
    iframes = analyze_iframes(doc)
    videos = analyze_videos(doc)
    audios = analyze_audios(doc)

    statuses = (iframes.status, videos.status, audios.status)
    if SeoStatus.ERROR in statuses:
        overall = SeoStatus.ERROR
    elif SeoStatus.WARNING in statuses:
        overall = SeoStatus.WARNING
    elif iframes.total == 0 and videos.total == 0 and audios.total == 0:
        overall = SeoStatus.INFO
    else:
        overall = SeoStatus.GOOD

    return EmbeddedContentAnalysis(iframes, videos, audios, overall)
