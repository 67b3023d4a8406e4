"""
Command-line interface for the page auditor.

This module provides the main CLI entry point with commands for:
- analyze: Audit a single page (fetched, or read from a saved HTML file)
- history: Show or clear recently analyzed pages
- prefs: Show, change or reset saved preferences
- config: Configuration management
- self-test: Validate configuration and probe every retrieval provider
"""

import argparse
import asyncio
import json
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Mapping, Optional

from bs4 import UnicodeDammit
from dotenv import find_dotenv, load_dotenv

from . import __version__
from .audit_logger import AuditLogger
from .config import (
    DEFAULT_PROVIDER_CONFIGS,
    FetchConfig,
    LoggingConfig,
    PersistenceConfig,
    ProviderConfig,
    SystemConfig,
)
from .enums import AnalysisState, SeoStatus
from .exceptions import ConfigurationError
from .fetcher import ResilientFetcher, RetrievalProvider
from .history import HistoryStore
from .orchestrator import AnalysisOrchestrator, AnalysisSnapshot
from .preferences import OUTPUT_FORMATS, Preferences, PreferencesStore
from .self_test import run_self_test, validate_config
from .storage import FileKeyValueStore


DEFAULT_CONFIG_DIR = Path.home() / ".page_auditor"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.json"
DEFAULT_STORAGE_PATH = DEFAULT_CONFIG_DIR / "storage.json"

ENV_PREFIX = "PAGE_AUDITOR_"

STATUS_SYMBOLS = {
    SeoStatus.GOOD: "✓",
    SeoStatus.INFO: "i",
    SeoStatus.WARNING: "!",
    SeoStatus.ERROR: "✗",
}


def create_default_config(storage_file: Optional[Path] = None) -> SystemConfig:
    """
    Create a default system configuration.

    Args:
        storage_file: Path to the storage file for history and preferences

    Returns:
        SystemConfig with default settings
    """
    return SystemConfig(
        fetch=FetchConfig(providers=list(DEFAULT_PROVIDER_CONFIGS)),
        persistence=PersistenceConfig(storage_file_path=storage_file or DEFAULT_STORAGE_PATH),
        logging=LoggingConfig(),
        background_checks=True,
    )


def load_config_from_file(config_path: Path) -> Optional[SystemConfig]:
    """
    Load configuration from a JSON file.

    Args:
        config_path: Path to the configuration file

    Returns:
        SystemConfig, or None when the file does not exist

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return None
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(
            code="unreadable_config",
            message=f"Could not read config from {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e

    try:
        fetch_data = data.get("fetch", {})
        providers = [
            ProviderConfig(name=p["name"], url_template=p["url_template"])
            for p in fetch_data.get("providers", [])
        ]
        fetch = FetchConfig(
            providers=providers or list(DEFAULT_PROVIDER_CONFIGS),
            timeout_ms=int(fetch_data.get("timeout_ms", 15000)),
            resource_timeout_ms=int(fetch_data.get("resource_timeout_ms", 10000)),
            header_probe_timeout_ms=int(fetch_data.get("header_probe_timeout_ms", 5000)),
        )

        persistence_data = data.get("persistence", {})
        storage_file_path = persistence_data.get("storage_file_path")
        persistence = PersistenceConfig(
            storage_file_path=Path(storage_file_path) if storage_file_path else DEFAULT_STORAGE_PATH,
            hmac_secret=persistence_data.get("hmac_secret"),
        )

        logging_data = data.get("logging", {})
        logging_config = LoggingConfig(
            level=logging_data.get("level", "warn"),
            output_format=logging_data.get("output_format", "text"),
        )

        return SystemConfig(
            fetch=fetch,
            persistence=persistence,
            logging=logging_config,
            background_checks=bool(data.get("background_checks", True)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(
            code="invalid_config",
            message=f"Invalid config in {config_path}: {e}",
            details={"path": str(config_path)},
        ) from e


def save_config_to_file(config: SystemConfig, config_path: Path) -> bool:
    """
    Save configuration to a JSON file.

    Args:
        config: SystemConfig to save
        config_path: Path to save the configuration

    Returns:
        True if successful, False otherwise
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "fetch": {
                "providers": [
                    {"name": p.name, "url_template": p.url_template}
                    for p in config.fetch.providers
                ],
                "timeout_ms": config.fetch.timeout_ms,
                "resource_timeout_ms": config.fetch.resource_timeout_ms,
                "header_probe_timeout_ms": config.fetch.header_probe_timeout_ms,
            },
            "persistence": {
                "storage_file_path": str(config.persistence.storage_file_path),
                "hmac_secret": config.persistence.hmac_secret,
            },
            "logging": {
                "level": config.logging.level,
                "output_format": config.logging.output_format,
            },
            "background_checks": config.background_checks,
        }

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

        return True

    except (OSError, TypeError) as e:
        print(f"Error saving config: {e}", file=sys.stderr)
        return False


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    try:
        return int(environ.get(name, str(default)))
    except ValueError:
        return default


def _bool_env(environ: Mapping[str, str], name: str, default: bool) -> bool:
    value = environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def apply_env_overrides(
    config: SystemConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> SystemConfig:
    """
    Apply PAGE_AUDITOR_* environment variables on top of a configuration.

    Args:
        config: Base configuration
        environ: Variables to read; defaults to os.environ after loading
            a .env file from the working directory

    Returns:
        New SystemConfig with the overrides applied
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    fetch = replace(
        config.fetch,
        timeout_ms=_int_env(environ, f"{ENV_PREFIX}FETCH_TIMEOUT_MS", config.fetch.timeout_ms),
        resource_timeout_ms=_int_env(
            environ, f"{ENV_PREFIX}RESOURCE_TIMEOUT_MS", config.fetch.resource_timeout_ms
        ),
    )

    storage_file = environ.get(f"{ENV_PREFIX}STORAGE_FILE", "").strip()
    persistence = replace(
        config.persistence,
        storage_file_path=Path(storage_file) if storage_file else config.persistence.storage_file_path,
    )

    logging_config = replace(
        config.logging,
        level=(environ.get(f"{ENV_PREFIX}LOG_LEVEL") or config.logging.level).lower(),
        output_format=(environ.get(f"{ENV_PREFIX}LOG_FORMAT") or config.logging.output_format).lower(),
    )

    return replace(
        config,
        fetch=fetch,
        persistence=persistence,
        logging=logging_config,
        background_checks=_bool_env(environ, f"{ENV_PREFIX}BACKGROUND_CHECKS", config.background_checks),
    )


def load_config(config_arg: Optional[str]) -> SystemConfig:
    """
    Resolve the configuration for a command.

    An explicit --config path must exist; the default path is optional.

    Raises:
        ConfigurationError: If the configuration cannot be loaded
    """
    config_path = Path(config_arg) if config_arg else DEFAULT_CONFIG_PATH
    config = load_config_from_file(config_path)
    if config is None:
        if config_arg:
            raise ConfigurationError(
                code="missing_config",
                message=f"Could not load config from {config_path}",
                details={"path": str(config_path)},
            )
        config = create_default_config()
    return apply_env_overrides(config)


def create_logger(config: SystemConfig, verbose: bool = False) -> AuditLogger:
    level = "debug" if verbose else config.logging.level
    return AuditLogger.from_config(level, config.logging.output_format)


def create_storage(config: SystemConfig, logger: Optional[AuditLogger] = None) -> FileKeyValueStore:
    return FileKeyValueStore(
        file_path=config.persistence.storage_file_path,
        hmac_secret=config.persistence.hmac_secret,
        logger=logger,
    )


def create_fetcher(
    config: SystemConfig,
    timeout_ms: int,
    logger: Optional[AuditLogger] = None,
) -> ResilientFetcher:
    return ResilientFetcher(
        providers=[RetrievalProvider.from_config(p) for p in config.fetch.providers],
        timeout_ms=timeout_ms,
        resource_timeout_ms=config.fetch.resource_timeout_ms,
        header_probe_timeout_ms=config.fetch.header_probe_timeout_ms,
        logger=logger,
    )


def _status_line(label: str, status: SeoStatus, score: Optional[int] = None) -> str:
    score_text = f"  ({score}/100)" if score is not None else ""
    return f"  {STATUS_SYMBOLS[status]} {label:<22} {status.value}{score_text}"


def format_snapshot_text(snapshot: AnalysisSnapshot) -> str:
    """Render a completed analysis as plain text."""
    report = snapshot.report
    lines = [
        f"Report for {report.url}",
        f"Overall score: {report.overall_score}/100",
        f"Fetched in {report.fetch_duration_ms:.0f}ms",
        "",
    ]

    for name, result in report.categories.items():
        lines.append(_status_line(name, result.status, result.score))
        for found in result.issues:
            lines.append(f"      - [{found.severity.value}] {found.message}")

    extra_sections = (
        ("urlAnalysis", snapshot.url_analysis),
        ("embeddedContent", snapshot.embedded_content),
        ("robotsTxt", snapshot.robots_txt),
        ("sitemap", snapshot.sitemap),
        ("security", snapshot.security),
    )
    if any(section is not None for _, section in extra_sections):
        lines.append("")
    for label, section in extra_sections:
        if section is None:
            continue
        status = getattr(section, "status", None) or section.overall_status
        score = getattr(section, "overall_score", None)
        lines.append(_status_line(label, status, score))
        for message in getattr(section, "issues", ()):
            lines.append(f"      - {message}")

    return "\n".join(lines)


async def run_analysis(
    target: Optional[str],
    config: SystemConfig,
    preferences: Preferences,
    html: Optional[str] = None,
    output_format: str = "text",
    verbose: bool = False,
) -> int:
    """
    Analyze one page and print the report.

    Args:
        target: URL to fetch, or the URL the manual HTML belongs to
        config: System configuration
        preferences: Effective preferences (timeout, background checks)
        html: Page markup to analyze instead of fetching
        output_format: 'text' or 'json'
        verbose: Enable debug logging

    Returns:
        Exit code (0 when a report was produced, 1 otherwise)
    """
    logger = create_logger(config, verbose)
    history = HistoryStore(create_storage(config, logger), logger=logger)
    fetcher = create_fetcher(config, preferences.fetch_timeout_ms, logger)

    async with AnalysisOrchestrator(
        fetcher=fetcher,
        history=history,
        logger=logger,
        background_checks=preferences.background_checks,
    ) as orchestrator:
        if html is not None:
            orchestrator.analyze_manual_html(html, target)
        else:
            await orchestrator.analyze(target or "")
            await orchestrator.wait_for_background()
        snapshot = orchestrator.snapshot

    if snapshot.state != AnalysisState.COMPLETE:
        message = snapshot.error.message if snapshot.error else "Analysis failed"
        print(f"Error: {message}", file=sys.stderr)
        if snapshot.show_manual_input:
            print("Save the page and retry with --html-file to analyze it offline.", file=sys.stderr)
        return 1

    if output_format == "json":
        print(json.dumps(snapshot.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_snapshot_text(snapshot))
    return 0


def read_html_file(path: Path) -> str:
    """
    Read saved page markup in whatever encoding it was saved with.

    The encoding is taken from a BOM or the document's own charset
    declaration, then guessed; undecodable bytes become U+FFFD.

    Raises:
        OSError: If the file cannot be read
    """
    data = path.read_bytes()
    dammit = UnicodeDammit(data, known_definite_encodings=["utf-8"], is_html=True)
    if dammit.unicode_markup is None:
        return data.decode("utf-8", errors="replace")
    return dammit.unicode_markup


def cmd_analyze(args: argparse.Namespace) -> int:
    """Handle the 'analyze' command."""
    if not args.url and not args.html_file:
        print("Error: Provide a URL or --html-file", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    html = None
    if args.html_file:
        try:
            html = read_html_file(Path(args.html_file))
        except OSError as e:
            print(f"Error reading file: {e}", file=sys.stderr)
            return 1

    defaults = Preferences(
        fetch_timeout_ms=config.fetch.timeout_ms,
        background_checks=config.background_checks,
    )
    preferences = PreferencesStore(create_storage(config)).load(defaults)
    if args.timeout_ms:
        preferences = replace(preferences, fetch_timeout_ms=args.timeout_ms)
    if args.no_background:
        preferences = replace(preferences, background_checks=False)

    return asyncio.run(run_analysis(
        target=args.url,
        config=config,
        preferences=preferences,
        html=html,
        output_format=args.format or preferences.output_format,
        verbose=args.verbose,
    ))


def cmd_history(args: argparse.Namespace) -> int:
    """Handle the 'history' command."""
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    history = HistoryStore(create_storage(config))

    if args.clear:
        history.clear()
        print("History cleared.")
        return 0

    entries = history.entries
    if args.format == "json":
        print(json.dumps([e.to_dict() for e in entries], indent=2, ensure_ascii=False))
        return 0

    if not entries:
        print("No analyses recorded yet.")
        return 0

    for entry in entries:
        print(f"  {entry.overall_score:>3}  {entry.analyzed_at}  {entry.url}")
    return 0


def cmd_prefs(args: argparse.Namespace) -> int:
    """Handle the 'prefs' command."""
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    store = PreferencesStore(create_storage(config))

    if args.action == "reset":
        store.reset()
        print("Preferences reset.")
        return 0

    preferences = store.load()

    if args.action == "set":
        if args.timeout_ms is not None:
            if args.timeout_ms <= 0:
                print("Error: --timeout-ms must be positive", file=sys.stderr)
                return 1
            preferences = replace(preferences, fetch_timeout_ms=args.timeout_ms)
        if args.format is not None:
            preferences = replace(preferences, output_format=args.format)
        if args.background is not None:
            preferences = replace(preferences, background_checks=args.background)
        if not store.save(preferences):
            print("Error: Could not save preferences", file=sys.stderr)
            return 1

    print(f"  Fetch timeout: {preferences.fetch_timeout_ms}ms")
    print(f"  Output format: {preferences.output_format}")
    print(f"  Background checks: {preferences.background_checks}")
    return 0


def cmd_self_test(args: argparse.Namespace) -> int:
    """Handle the 'self-test' command."""
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    result = asyncio.run(run_self_test(config=config, print_output=True))
    return 0 if result.success else 1


def cmd_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    config_path = Path(args.path) if args.path else DEFAULT_CONFIG_PATH

    if args.action == "init":
        if config_path.exists() and not args.force:
            print(f"Configuration already exists at: {config_path}")
            print("Use --force to overwrite.")
            return 1

        if save_config_to_file(create_default_config(), config_path):
            print(f"Configuration created at: {config_path}")
            return 0
        return 1

    try:
        config = load_config_from_file(config_path)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if config is None:
        print(f"No configuration found at: {config_path}")
        print("Use 'config init' to create a default configuration.")
        return 1

    if args.action == "show":
        print(f"Configuration from: {config_path}")
        print(f"  Providers: {', '.join(p.name for p in config.fetch.providers)}")
        print(f"  Fetch timeout: {config.fetch.timeout_ms}ms")
        print(f"  Resource timeout: {config.fetch.resource_timeout_ms}ms")
        print(f"  Storage file: {config.persistence.storage_file_path}")
        print(f"  Log level: {config.logging.level}")
        print(f"  Background checks: {config.background_checks}")
        return 0

    validation = validate_config(config)
    for warning in validation.warnings:
        print(f"  Warning: {warning}")
    if not validation.valid:
        for error in validation.errors:
            print(f"  Error: {error}", file=sys.stderr)
        return 1

    print(f"Configuration at {config_path} is valid.")
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="page-auditor",
        description="Single-page SEO, accessibility and performance auditor",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'analyze' command
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Audit a single page",
    )
    analyze_parser.add_argument(
        "url",
        nargs="?",
        help="URL or bare domain to analyze (e.g., example.com)",
    )
    analyze_parser.add_argument(
        "--html-file",
        help="Analyze saved HTML instead of fetching the page",
    )
    analyze_parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        help="Output format (default: saved preference)",
    )
    analyze_parser.add_argument(
        "--timeout-ms",
        type=int,
        help="Per-provider fetch timeout in milliseconds",
    )
    analyze_parser.add_argument(
        "--no-background",
        action="store_true",
        help="Skip robots.txt, sitemap and security checks",
    )
    analyze_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    analyze_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output",
    )
    analyze_parser.set_defaults(func=cmd_analyze)

    # 'history' command
    history_parser = subparsers.add_parser(
        "history",
        help="Show recently analyzed pages",
    )
    history_parser.add_argument(
        "--clear",
        action="store_true",
        help="Remove all history entries",
    )
    history_parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format (default: text)",
    )
    history_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    history_parser.set_defaults(func=cmd_history)

    # 'prefs' command
    prefs_parser = subparsers.add_parser(
        "prefs",
        help="Manage saved preferences",
    )
    prefs_parser.add_argument(
        "action",
        choices=["show", "set", "reset"],
        help="Preferences action",
    )
    prefs_parser.add_argument(
        "--timeout-ms",
        type=int,
        help="Per-provider fetch timeout in milliseconds",
    )
    prefs_parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        help="Default output format for 'analyze'",
    )
    prefs_parser.add_argument(
        "--background",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run robots.txt, sitemap and security checks after each analysis",
    )
    prefs_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    prefs_parser.set_defaults(func=cmd_prefs)

    # 'config' command
    config_parser = subparsers.add_parser(
        "config",
        help="Configuration management",
    )
    config_parser.add_argument(
        "action",
        choices=["show", "init", "validate"],
        help="Configuration action",
    )
    config_parser.add_argument(
        "--path", "-p",
        help="Path to configuration file",
    )
    config_parser.add_argument(
        "--force",
        action="store_true",
        help="Force overwrite existing configuration",
    )
    config_parser.set_defaults(func=cmd_config)

    # 'self-test' command
    self_test_parser = subparsers.add_parser(
        "self-test",
        help="Validate configuration and probe every retrieval provider",
    )
    self_test_parser.add_argument(
        "--config", "-c",
        help="Path to configuration file",
    )
    self_test_parser.set_defaults(func=cmd_self_test)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
