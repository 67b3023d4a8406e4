"""
Page checkers.

Each checker owns one report category. The first eight categories are
weighted into the overall score; the rest are advisory sections that
carry their own status and, where applicable, their own 0-100 score.
"""

from .accessibility import check_accessibility
from .anchor_text import check_anchor_text
from .base import Checker, RegisteredChecker, worst_status
from .content import check_content
from .core_web_vitals import check_core_web_vitals
from .headings import check_headings
from .images import check_images
from .keywords import check_keywords
from .lazy_content import check_lazy_content
from .links import check_links
from .meta import check_meta
from .mobile import check_mobile
from .performance import check_performance
from .rendering import check_rendering
from .resource_hints import check_resource_hints
from .resource_optimization import check_resource_optimization
from .social_analytics import check_social_analytics
from .social_share import check_social_share
from .structured_data import check_structured_data
from .technical import check_technical


DEFAULT_CHECKERS: tuple[RegisteredChecker, ...] = (
    RegisteredChecker("meta", check_meta, weighted=True),
    RegisteredChecker("headings", check_headings, weighted=True),
    RegisteredChecker("images", check_images, weighted=True),
    RegisteredChecker("links", check_links, weighted=True),
    RegisteredChecker("content", check_content, weighted=True),
    RegisteredChecker("keywords", check_keywords, weighted=True),
    RegisteredChecker("performance", check_performance, weighted=True),
    RegisteredChecker("technical", check_technical, weighted=True),
    RegisteredChecker("structuredData", check_structured_data),
    RegisteredChecker("resourceHints", check_resource_hints),
    RegisteredChecker("socialAnalytics", check_social_analytics),
    RegisteredChecker("anchorText", check_anchor_text),
    RegisteredChecker("mobile", check_mobile),
    RegisteredChecker("resourceOptimization", check_resource_optimization),
    RegisteredChecker("rendering", check_rendering),
    RegisteredChecker("lazyContent", check_lazy_content),
    RegisteredChecker("socialShare", check_social_share),
    RegisteredChecker("accessibility", check_accessibility),
    RegisteredChecker("coreWebVitals", check_core_web_vitals),
)

WEIGHTED_CATEGORIES = tuple(c.category for c in DEFAULT_CHECKERS if c.weighted)

__all__ = [
    "Checker",
    "RegisteredChecker",
    "DEFAULT_CHECKERS",
    "WEIGHTED_CATEGORIES",
    "worst_status",
    "check_accessibility",
    "check_anchor_text",
    "check_content",
    "check_core_web_vitals",
    "check_headings",
    "check_images",
    "check_keywords",
    "check_lazy_content",
    "check_links",
    "check_meta",
    "check_mobile",
    "check_performance",
    "check_rendering",
    "check_resource_hints",
    "check_resource_optimization",
    "check_social_analytics",
    "check_social_share",
    "check_structured_data",
    "check_technical",
]
