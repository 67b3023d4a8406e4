"""
Configuration dataclasses for the page auditor.

This module defines the configuration structures used throughout the
system: retrieval providers and timeouts, persistence, and logging.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass
class ProviderConfig:
    """A retrieval provider defined by a URL template."""

    name: str
    url_template: str  # must contain "{url}", replaced by the encoded target


DEFAULT_PROVIDER_CONFIGS = [
    ProviderConfig(
        name="allorigins",
        url_template="https://api.allorigins.win/raw?url={url}",
    ),
    ProviderConfig(
        name="corsproxy.io",
        url_template="https://corsproxy.io/?{url}",
    ),
    ProviderConfig(
        name="codetabs",
        url_template="https://api.codetabs.com/v1/proxy?quest={url}",
    ),
]


@dataclass
class FetchConfig:
    """Retrieval configuration."""

    providers: list[ProviderConfig] = field(
        default_factory=lambda: list(DEFAULT_PROVIDER_CONFIGS)
    )
    timeout_ms: int = 15000
    resource_timeout_ms: int = 10000
    header_probe_timeout_ms: int = 5000


@dataclass
class PersistenceConfig:
    """Key/value storage configuration."""

    storage_file_path: Path
    hmac_secret: Optional[str] = None  # seal the storage file when set


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "warn"
    output_format: str = "text"  # 'json', 'text', 'both'


@dataclass
class SystemConfig:
    """Main system configuration combining all sub-configurations."""

    fetch: FetchConfig
    persistence: PersistenceConfig
    logging: LoggingConfig
    background_checks: bool = True
