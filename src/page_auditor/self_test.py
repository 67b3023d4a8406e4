"""
Startup self-test for the page auditor.

Validates the configuration and checks that every configured retrieval
provider can fetch a known page on its own, so a broken provider shows up
before it silently falls through to the next one during an analysis.
"""

import time
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import urlparse

import httpx

from .audit_logger import AuditLogger
from .config import ProviderConfig, SystemConfig
from .enums import LogLevel
from .fetcher import ResilientFetcher, RetrievalProvider


DEFAULT_PROBE_URL = "https://example.com"

VALID_LOG_LEVELS = tuple(level.value for level in LogLevel)
VALID_LOG_FORMATS = ("json", "text", "both")


@dataclass
class ProviderTestResult:
    """Result of fetching the probe page through a single provider."""

    provider: str
    success: bool
    response_time_ms: float
    error: Optional[str] = None


@dataclass
class ConfigValidationResult:
    """Result of configuration validation."""

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class SelfTestResult:
    """Complete self-test result."""

    success: bool
    config_validation: ConfigValidationResult
    provider_results: list[ProviderTestResult] = field(default_factory=list)
    total_duration_ms: float = 0.0

    @property
    def failed_providers(self) -> list[ProviderTestResult]:
        """Return list of failed provider tests."""
        return [r for r in self.provider_results if not r.success]

    @property
    def successful_providers(self) -> list[ProviderTestResult]:
        return [r for r in self.provider_results if r.success]


def _validate_provider(provider: ProviderConfig) -> list[str]:
    errors = []
    if not provider.name:
        errors.append("Provider name is empty")
    label = provider.name or provider.url_template
    if "{url}" not in provider.url_template:
        errors.append(f"Provider '{label}': URL template has no {{url}} placeholder")
    if urlparse(provider.url_template).scheme.lower() != "https":
        errors.append(f"Provider '{label}': URL template must use HTTPS: {provider.url_template}")
    return errors


def validate_config(config: SystemConfig) -> ConfigValidationResult:
    """
    Validate the system configuration.

    Checks:
    - At least one provider is configured
    - Provider templates use HTTPS and contain {url}
    - Timeouts are positive
    - Log level and format are known values

    Returns:
        ConfigValidationResult with validation status
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not config.fetch.providers:
        errors.append("No retrieval providers configured")
    else:
        for provider in config.fetch.providers:
            errors.extend(_validate_provider(provider))
        if len(config.fetch.providers) == 1:
            warnings.append("Only one retrieval provider configured - no fallback available")

    for name in ("timeout_ms", "resource_timeout_ms", "header_probe_timeout_ms"):
        if getattr(config.fetch, name) <= 0:
            errors.append(f"{name} must be positive")

    if config.logging.level.lower() not in VALID_LOG_LEVELS:
        errors.append(f"Unsupported log level: {config.logging.level}")
    if config.logging.output_format not in VALID_LOG_FORMATS:
        errors.append(f"Unsupported log format: {config.logging.output_format}")

    if config.persistence.hmac_secret is None:
        warnings.append("Storage file is not sealed (no HMAC secret configured)")

    return ConfigValidationResult(valid=not errors, errors=errors, warnings=warnings)


class SelfTest:
    """
    Startup self-test for the page auditor.

    Performs:
    1. Configuration validation
    2. A probe fetch through each provider on its own
    """

    COMPONENT = "SelfTest"

    def __init__(
        self,
        config: SystemConfig,
        probe_url: str = DEFAULT_PROBE_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the self-test.

        Args:
            config: System configuration to validate and test
            probe_url: Page fetched through every provider
            transport: Optional httpx transport (used by tests)
            logger: Optional audit logger
        """
        self._config = config
        self._probe_url = probe_url
        self._transport = transport
        self._logger = logger

    async def run(self) -> SelfTestResult:
        """
        Run the complete self-test.

        Providers are only probed when the configuration is valid.
        """
        start_time = time.perf_counter()
        config_result = validate_config(self._config)

        if not config_result.valid:
            return SelfTestResult(
                success=False,
                config_validation=config_result,
                total_duration_ms=self._elapsed_ms(start_time),
            )

        provider_results = [
            await self._test_provider(RetrievalProvider.from_config(p))
            for p in self._config.fetch.providers
        ]

        return SelfTestResult(
            success=all(r.success for r in provider_results),
            config_validation=config_result,
            provider_results=provider_results,
            total_duration_ms=self._elapsed_ms(start_time),
        )

    def validate_config(self) -> ConfigValidationResult:
        return validate_config(self._config)

    async def _test_provider(self, provider: RetrievalProvider) -> ProviderTestResult:
        start_time = time.perf_counter()
        async with ResilientFetcher(
            providers=[provider],
            timeout_ms=self._config.fetch.timeout_ms,
            transport=self._transport,
        ) as fetcher:
            result = await fetcher.fetch(self._probe_url)

        error = None if result.ok else result.error.message
        if self._logger:
            self._logger.log(
                LogLevel.INFO if result.ok else LogLevel.WARN,
                self.COMPONENT,
                f"Provider {provider.name} {'reachable' if result.ok else 'failed'}",
                {"provider": provider.name, "error": error},
            )

        return ProviderTestResult(
            provider=provider.name,
            success=result.ok,
            response_time_ms=self._elapsed_ms(start_time),
            error=error,
        )

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    def print_results(self, result: SelfTestResult) -> None:
        """Print self-test results to stdout."""
        print("Page auditor self-test")
        print("=" * 60)

        print("\nConfiguration")
        if result.config_validation.valid:
            print("  ✓ Configuration is valid")
        else:
            print("  ✗ Configuration is invalid")
            for error in result.config_validation.errors:
                print(f"    - {error}")

        if result.config_validation.warnings:
            print("\n  Warnings:")
            for warning in result.config_validation.warnings:
                print(f"    - {warning}")

        if result.provider_results:
            print("\nProviders")
            for provider_result in result.provider_results:
                status = "✓" if provider_result.success else "✗"
                print(
                    f"  {status} {provider_result.provider} "
                    f"({provider_result.response_time_ms:.0f}ms)"
                )
                if provider_result.error:
                    print(f"      Error: {provider_result.error}")

        print(f"\n{'-' * 60}")
        print("✓ Self-test passed" if result.success else "✗ Self-test failed")
        print(f"  Duration: {result.total_duration_ms:.0f}ms")


async def run_self_test(
    config: SystemConfig,
    print_output: bool = True,
    logger: Optional[AuditLogger] = None,
) -> SelfTestResult:
    """
    Convenience function to run self-test.

    Args:
        config: System configuration to test
        print_output: Whether to print results to stdout
        logger: Optional audit logger

    Returns:
        SelfTestResult with test outcomes
    """
    self_test = SelfTest(config, logger=logger)
    result = await self_test.run()

    if print_output:
        self_test.print_results(result)

    return result
