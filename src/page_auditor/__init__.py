"""
Page Auditor - single-page SEO, accessibility and performance auditor.

This package fetches a page through an ordered list of retrieval providers,
extracts its structural facts once, runs independent checkers over them and
aggregates a weighted 0-100 score. Recent analyses and user preferences are
persisted in versioned, migratable documents.
"""

__version__ = "0.1.0"
__author__ = "Page Auditor Team"

from page_auditor.exceptions import (
    PageAuditorError,
    ValidationError,
    NetworkError,
    AnalysisError,
    PersistenceError,
    ConfigurationError,
)
from page_auditor.enums import (
    SeoStatus,
    FetchErrorType,
    AnalysisState,
    IssueSeverity,
    LogLevel,
    VitalsRating,
    RenderingType,
)
from page_auditor.models import (
    FetchError,
    ProviderAttempt,
    FetchSuccess,
    FetchFailure,
    ResourceResult,
    Issue,
    PassedCheck,
    CheckResult,
    HistoryEntry,
    AnalysisReport,
)
from page_auditor.config import (
    ProviderConfig,
    FetchConfig,
    PersistenceConfig,
    LoggingConfig,
    SystemConfig,
)
from page_auditor.audit_logger import (
    AuditLogger,
    LogEntry,
)
from page_auditor.url_utils import (
    normalize_url,
    is_valid_url,
    extract_domain,
    is_internal_link,
    site_root,
)
from page_auditor.fetcher import (
    RetrievalProvider,
    DEFAULT_PROVIDERS,
    ResilientFetcher,
)
from page_auditor.extractor import (
    DocumentFacts,
    parse_html,
    extract_facts,
)
from page_auditor.checks import (
    Checker,
    RegisteredChecker,
    DEFAULT_CHECKERS,
    WEIGHTED_CATEGORIES,
)
from page_auditor.scoring import (
    ScoreWeights,
    DEFAULT_SCORE_WEIGHTS,
    category_score,
    calculate_overall_score,
)
from page_auditor.analyzer import (
    run_checks,
    analyze_html,
)
from page_auditor.storage import (
    KeyValueStore,
    MemoryKeyValueStore,
    FileKeyValueStore,
)
from page_auditor.persistence import (
    VersionedStore,
    make_storage_key,
)
from page_auditor.history import (
    HistoryStore,
    MAX_HISTORY_ITEMS,
)
from page_auditor.preferences import (
    Preferences,
    PreferencesStore,
)
from page_auditor.robots import (
    parse_robots_txt,
    analyze_robots_txt,
    analyze_sitemaps,
)
from page_auditor.security import analyze_security
from page_auditor.url_analysis import analyze_url
from page_auditor.embedded import analyze_embedded_content
from page_auditor.orchestrator import (
    AnalysisOrchestrator,
    AnalysisSnapshot,
)
from page_auditor.cli import (
    main as cli_main,
    create_parser,
    create_default_config,
    load_config_from_file,
    save_config_to_file,
    apply_env_overrides,
)
from page_auditor.self_test import (
    SelfTest,
    SelfTestResult,
    ProviderTestResult,
    ConfigValidationResult,
    run_self_test,
    validate_config,
)

__all__ = [
    # Exceptions
    "PageAuditorError",
    "ValidationError",
    "NetworkError",
    "AnalysisError",
    "PersistenceError",
    "ConfigurationError",
    # Enums
    "SeoStatus",
    "FetchErrorType",
    "AnalysisState",
    "IssueSeverity",
    "LogLevel",
    "VitalsRating",
    "RenderingType",
    # Models
    "FetchError",
    "ProviderAttempt",
    "FetchSuccess",
    "FetchFailure",
    "ResourceResult",
    "Issue",
    "PassedCheck",
    "CheckResult",
    "HistoryEntry",
    "AnalysisReport",
    # Configuration
    "ProviderConfig",
    "FetchConfig",
    "PersistenceConfig",
    "LoggingConfig",
    "SystemConfig",
    # Audit Logger
    "AuditLogger",
    "LogEntry",
    # URL utilities
    "normalize_url",
    "is_valid_url",
    "extract_domain",
    "is_internal_link",
    "site_root",
    # Fetcher
    "RetrievalProvider",
    "DEFAULT_PROVIDERS",
    "ResilientFetcher",
    # Extraction
    "DocumentFacts",
    "parse_html",
    "extract_facts",
    # Checkers and scoring
    "Checker",
    "RegisteredChecker",
    "DEFAULT_CHECKERS",
    "WEIGHTED_CATEGORIES",
    "ScoreWeights",
    "DEFAULT_SCORE_WEIGHTS",
    "category_score",
    "calculate_overall_score",
    "run_checks",
    "analyze_html",
    # Persistence
    "KeyValueStore",
    "MemoryKeyValueStore",
    "FileKeyValueStore",
    "VersionedStore",
    "make_storage_key",
    "HistoryStore",
    "MAX_HISTORY_ITEMS",
    "Preferences",
    "PreferencesStore",
    # Supplementary analyses
    "parse_robots_txt",
    "analyze_robots_txt",
    "analyze_sitemaps",
    "analyze_security",
    "analyze_url",
    "analyze_embedded_content",
    # Orchestrator
    "AnalysisOrchestrator",
    "AnalysisSnapshot",
    # CLI
    "cli_main",
    "create_parser",
    "create_default_config",
    "load_config_from_file",
    "save_config_to_file",
    "apply_env_overrides",
    # Self-Test
    "SelfTest",
    "SelfTestResult",
    "ProviderTestResult",
    "ConfigValidationResult",
    "run_self_test",
    "validate_config",
]
