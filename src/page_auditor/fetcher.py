"""
Resilient retrieval of remote HTML through an ordered list of providers.

Providers are tried strictly one after another. Each attempt gets its own
timeout; the first 2xx response wins and later providers are never
contacted. When every provider fails, the per-provider errors are
aggregated into a single failure so callers can diagnose what happened.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from .audit_logger import AuditLogger
from .config import DEFAULT_PROVIDER_CONFIGS, ProviderConfig
from .enums import FetchErrorType, LogLevel
from .exceptions import NetworkError
from .models import (
    FetchError,
    FetchFailure,
    FetchSuccess,
    ProviderAttempt,
    ResourceResult,
    RetrievalResult,
)
from .url_utils import encode_uri_component, is_valid_url, normalize_url


DEFAULT_TIMEOUT_MS = 15000
RESOURCE_FETCH_TIMEOUT_MS = 10000
HEADER_PROBE_TIMEOUT_MS = 5000

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
RESOURCE_ACCEPT = "text/plain,text/xml,application/xml,*/*"

USER_AGENT = "page-auditor (+https://pypi.org/project/page-auditor/)"


@dataclass(frozen=True)
class RetrievalProvider:
    """One retrieval path, defined by a URL template containing '{url}'."""

    name: str
    url_template: str

    def build_url(self, target: str) -> str:
        """Build the provider request URL for a target page."""
        return self.url_template.replace("{url}", encode_uri_component(target))

    @classmethod
    def from_config(cls, config: ProviderConfig) -> "RetrievalProvider":
        return cls(name=config.name, url_template=config.url_template)


DEFAULT_PROVIDERS: tuple[RetrievalProvider, ...] = tuple(
    RetrievalProvider.from_config(c) for c in DEFAULT_PROVIDER_CONFIGS
)


class _AttemptFailed(Exception):
    """Internal signal carrying a classified provider failure."""

    def __init__(self, error_type: FetchErrorType, reason: str) -> None:
        self.error_type = error_type
        self.reason = reason
        super().__init__(reason)


class ResilientFetcher:
    """
    Async fetcher with ordered provider fallback.

    The fetcher owns a single httpx.AsyncClient, created lazily or when the
    fetcher is entered as an async context manager.
    """

    COMPONENT = "ResilientFetcher"

    def __init__(
        self,
        providers: Optional[Sequence[RetrievalProvider]] = None,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        resource_timeout_ms: int = RESOURCE_FETCH_TIMEOUT_MS,
        header_probe_timeout_ms: int = HEADER_PROBE_TIMEOUT_MS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        """
        Initialize the fetcher.

        Args:
            providers: Ordered providers (defaults to DEFAULT_PROVIDERS)
            timeout_ms: Per-provider timeout for HTML fetches
            resource_timeout_ms: Per-provider timeout for auxiliary resources
            header_probe_timeout_ms: Timeout for direct header probes
            transport: Optional httpx transport (used by tests)
            logger: Optional audit logger
        """
        self._providers = tuple(providers) if providers is not None else DEFAULT_PROVIDERS
        self._timeout_ms = timeout_ms
        self._resource_timeout_ms = resource_timeout_ms
        self._header_probe_timeout_ms = header_probe_timeout_ms
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ResilientFetcher":
        """Async context manager entry."""
        self._get_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            )
        return self._client

    async def fetch(self, url: str, timeout_ms: Optional[int] = None) -> RetrievalResult:
        """
        Fetch a page's HTML through the provider chain.

        Args:
            url: Target URL (a bare domain gets an https:// prefix)
            timeout_ms: Per-provider timeout, defaults to the configured value

        Returns:
            FetchSuccess from the first provider that answered with 2xx, or
            FetchFailure. An invalid URL fails without any network call;
            exhaustion of all providers fails with kind 'cors'.
        """
        target = normalize_url(url)
        if not is_valid_url(target):
            return FetchFailure(
                error=FetchError(FetchErrorType.INVALID_URL, "Invalid URL format"),
            )

        timeout = timeout_ms if timeout_ms is not None else self._timeout_ms
        start_time = time.perf_counter()
        attempts: list[ProviderAttempt] = []

        for provider in self._providers:
            try:
                response = await self._attempt(provider, target, HTML_ACCEPT, timeout)
            except _AttemptFailed as e:
                message = f"{provider.name}: {e.reason}"
                attempts.append(ProviderAttempt(provider.name, e.error_type, message))
                self._log(LogLevel.WARN, "Provider attempt failed", {
                    "provider": provider.name,
                    "url": target,
                    "reason": e.reason,
                })
                continue

            duration_ms = self._elapsed_ms(start_time)
            self._log(LogLevel.INFO, "Fetched page", {
                "provider": provider.name,
                "url": target,
                "duration_ms": round(duration_ms, 1),
                "bytes": len(response.text),
            })
            return FetchSuccess(
                html=response.text,
                duration_ms=duration_ms,
                provider=provider.name,
            )

        message = "All proxies failed: " + "; ".join(a.message for a in attempts)
        if self._logger:
            self._logger.log_error(
                self.COMPONENT,
                "All providers failed",
                request_url=target,
                additional_data={"attempts": [a.message for a in attempts]},
            )
        return FetchFailure(
            error=FetchError(FetchErrorType.CORS, message),
            attempts=tuple(attempts),
        )

    async def fetch_resource(self, url: str, timeout_ms: Optional[int] = None) -> ResourceResult:
        """
        Fetch a plain-text auxiliary resource (robots.txt, sitemap.xml).

        Same ordered fallback as fetch(), with a shorter default timeout and
        a boolean-success result.
        """
        if not is_valid_url(url):
            return ResourceResult(ok=False)

        timeout = timeout_ms if timeout_ms is not None else self._resource_timeout_ms

        for provider in self._providers:
            try:
                response = await self._attempt(provider, url, RESOURCE_ACCEPT, timeout)
            except _AttemptFailed as e:
                self._log(LogLevel.DEBUG, "Resource attempt failed", {
                    "provider": provider.name,
                    "url": url,
                    "reason": e.reason,
                })
                continue
            return ResourceResult(ok=True, content=response.text)

        return ResourceResult(ok=False)

    async def probe_headers(self, url: str, timeout_ms: Optional[int] = None) -> dict[str, str]:
        """
        Send a direct HEAD request and return the response headers.

        Args:
            url: Target URL
            timeout_ms: Probe timeout, defaults to the configured value

        Returns:
            Response headers with lowercase names

        Raises:
            NetworkError: If the probe times out or the transport fails
        """
        timeout = timeout_ms if timeout_ms is not None else self._header_probe_timeout_ms
        seconds = timeout / 1000
        client = self._get_client()

        try:
            response = await asyncio.wait_for(
                client.head(url, timeout=httpx.Timeout(seconds)),
                timeout=seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise NetworkError(
                code="timeout",
                message=f"Header probe timed out after {timeout}ms",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(
                code="network_error",
                message=f"Header probe failed: {e}",
                details={"url": url},
            ) from e

        return {name.lower(): value for name, value in response.headers.items()}

    async def _attempt(
        self,
        provider: RetrievalProvider,
        target: str,
        accept: str,
        timeout_ms: int,
    ) -> httpx.Response:
        """
        Run one provider attempt under its own timeout.

        Raises:
            _AttemptFailed: On non-2xx status, timeout, or transport error
        """
        seconds = timeout_ms / 1000
        client = self._get_client()

        try:
            response = await asyncio.wait_for(
                client.get(
                    provider.build_url(target),
                    headers={"Accept": accept},
                    timeout=httpx.Timeout(seconds),
                ),
                timeout=seconds,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise _AttemptFailed(FetchErrorType.TIMEOUT, "Timeout") from e
        except Exception as e:
            raise _AttemptFailed(FetchErrorType.NETWORK, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise _AttemptFailed(FetchErrorType.NETWORK, f"HTTP {response.status_code}")

        return response

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000

    @property
    def providers(self) -> tuple[RetrievalProvider, ...]:
        """Get the ordered providers."""
        return self._providers

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms
