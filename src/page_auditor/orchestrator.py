"""
Analysis orchestrator for the page auditor.

This module coordinates one analysis from user input to finished report:
- URL normalization and retrieval through the provider fallback
- Fact extraction, checkers and scoring
- History recording
- URL structure and embedded-content analysis on the shared document
- Background robots.txt/sitemap and security analyses

State is exposed as immutable snapshots. Observers are called with every
new snapshot, in the order they subscribed.
"""

import asyncio
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence

from .analyzer import analyze_html
from .audit_logger import AuditLogger
from .checks import DEFAULT_CHECKERS, RegisteredChecker
from .embedded import EmbeddedContentAnalysis, analyze_embedded_content
from .enums import AnalysisState, FetchErrorType, LogLevel
from .exceptions import AnalysisError
from .extractor import DocumentFacts
from .fetcher import ResilientFetcher
from .history import HistoryStore
from .models import AnalysisReport, FetchError
from .robots import RobotsTxtAnalysis, SitemapAnalysis, analyze_robots_txt, analyze_sitemaps
from .scoring import DEFAULT_SCORE_WEIGHTS, ScoreWeights
from .security import SecurityAnalysis, analyze_security
from .url_analysis import UrlAnalysis, analyze_url
from .url_utils import normalize_url


MANUAL_INPUT_URL = "https://manual-input.local"

_LOADING_STATES = (AnalysisState.FETCHING, AnalysisState.ANALYZING)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Everything known about the current analysis at one point in time."""

    state: AnalysisState = AnalysisState.IDLE
    url: str = ""
    report: Optional[AnalysisReport] = None
    error: Optional[FetchError] = None
    show_manual_input: bool = False
    url_analysis: Optional[UrlAnalysis] = None
    embedded_content: Optional[EmbeddedContentAnalysis] = None
    robots_txt: Optional[RobotsTxtAnalysis] = None
    sitemap: Optional[SitemapAnalysis] = None
    security: Optional[SecurityAnalysis] = None
    is_loading_robots: bool = False
    is_loading_security: bool = False

    @property
    def is_loading(self) -> bool:
        return self.state in _LOADING_STATES

    @property
    def has_result(self) -> bool:
        return self.report is not None

    @property
    def has_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict:
        def section(value) -> Optional[dict]:
            return value.to_dict() if value is not None else None

        return {
            "state": self.state.value,
            "url": self.url,
            "report": section(self.report),
            "error": section(self.error),
            "showManualInput": self.show_manual_input,
            "urlAnalysis": section(self.url_analysis),
            "embeddedContent": section(self.embedded_content),
            "robotsTxt": section(self.robots_txt),
            "sitemap": section(self.sitemap),
            "security": section(self.security),
        }


Observer = Callable[[AnalysisSnapshot], None]


class AnalysisOrchestrator:
    """
    State machine driving page analyses.

    idle -> fetching -> analyzing -> complete, with error reachable from
    fetching (all providers failed) and analyzing (a checker raised).
    A new analyze() call supersedes the previous one: results of older
    calls, background results included, are discarded when they arrive.
    """

    COMPONENT = "AnalysisOrchestrator"

    def __init__(
        self,
        fetcher: ResilientFetcher,
        history: HistoryStore,
        logger: Optional[AuditLogger] = None,
        checkers: Sequence[RegisteredChecker] = DEFAULT_CHECKERS,
        weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
        background_checks: bool = True,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            fetcher: Fetcher for pages and auxiliary resources
            history: Store recording completed analyses
            logger: Optional audit logger
            checkers: Checkers run for every page
            weights: Weights for the overall score
            background_checks: Schedule robots/sitemap and security analyses
        """
        self._fetcher = fetcher
        self._history = history
        self._logger = logger
        self._checkers = tuple(checkers)
        self._weights = weights
        self._background_checks = background_checks

        self._snapshot = AnalysisSnapshot()
        self._observers: list[Observer] = []
        self._generation = 0
        self._background_tasks: set[asyncio.Task] = set()

    async def __aenter__(self) -> "AnalysisOrchestrator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        """Cancel outstanding background work and close the fetcher."""
        tasks = list(self._background_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self._fetcher.aclose()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register an observer for state snapshots.

        Returns:
            A callable that removes the observer again
        """
        self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def reset(self) -> None:
        """Return to idle, dropping the current report and all sections."""
        self._generation += 1
        self._set(AnalysisSnapshot())

    async def analyze(self, url: str) -> AnalysisSnapshot:
        """
        Fetch and analyze a page.

        Args:
            url: Bare domain or full URL

        Returns:
            The snapshot once the main report is complete or failed.
            Background sections may still be loading.
        """
        target = normalize_url(url)
        if not target:
            self._update(
                state=AnalysisState.ERROR,
                error=FetchError(FetchErrorType.INVALID_URL, "Please enter a valid URL"),
            )
            return self._snapshot

        self._generation += 1
        generation = self._generation
        self._set(AnalysisSnapshot(state=AnalysisState.FETCHING, url=target))
        self._log(LogLevel.INFO, "Analysis started", {"url": target, "generation": generation})

        result = await self._fetcher.fetch(target)
        if not self._is_current(generation):
            self._log(LogLevel.DEBUG, "Discarding superseded fetch result", {"url": target})
            return self._snapshot

        if not result.ok:
            self._log(LogLevel.WARN, "Fetch failed", {
                "url": target,
                "error": result.error.to_dict(),
            })
            self._update(state=AnalysisState.ERROR, error=result.error, show_manual_input=True)
            return self._snapshot

        self._update(state=AnalysisState.ANALYZING)
        outcome = self._run_analysis(result.html, target, result.duration_ms)
        if outcome is not None and self._background_checks:
            self._schedule_background(target, outcome[1], generation)
        return self._snapshot

    def analyze_manual_html(self, html: str, url: Optional[str] = None) -> Optional[AnalysisReport]:
        """
        Analyze pasted HTML without any network access.

        Args:
            html: Page markup
            url: URL the markup belongs to, defaults to MANUAL_INPUT_URL

        Returns:
            The report, or None when html is blank or a checker failed
        """
        if not html.strip():
            self._update(error=FetchError(FetchErrorType.UNKNOWN, "Please paste HTML content"))
            return None

        target = normalize_url(url or "") or MANUAL_INPUT_URL
        self._generation += 1
        self._set(AnalysisSnapshot(state=AnalysisState.ANALYZING, url=target))

        outcome = self._run_analysis(html, target, 0.0)
        return outcome[0] if outcome is not None else None

    async def wait_for_background(self) -> None:
        """Wait until every scheduled background analysis has finished."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    def clear_history(self) -> None:
        self._history.clear()

    def _run_analysis(
        self, html: str, url: str, fetch_duration_ms: float
    ) -> Optional[tuple[AnalysisReport, DocumentFacts]]:
        try:
            report, facts = analyze_html(
                html,
                url,
                fetch_duration_ms=fetch_duration_ms,
                checkers=self._checkers,
                weights=self._weights,
                logger=self._logger,
            )
        except AnalysisError as e:
            self._update(
                state=AnalysisState.ERROR,
                error=FetchError(FetchErrorType.UNKNOWN, e.message or "Analysis failed"),
            )
            return None

        self._history.add_report(report)
        self._update(
            state=AnalysisState.COMPLETE,
            report=report,
            error=None,
            show_manual_input=False,
            url_analysis=analyze_url(url),
            embedded_content=analyze_embedded_content(facts.document),
        )
        return report, facts

    def _schedule_background(self, url: str, facts: DocumentFacts, generation: int) -> None:
        self._update(is_loading_robots=True, is_loading_security=True)
        for coro in (
            self._load_robots_and_sitemap(url, generation),
            self._load_security(url, facts, generation),
        ):
            task = asyncio.create_task(coro)
            self._background_tasks.add(task)
            task.add_done_callback(self._background_tasks.discard)

    async def _load_robots_and_sitemap(self, url: str, generation: int) -> None:
        try:
            robots = await analyze_robots_txt(url, self._fetcher)
            if self._is_current(generation):
                self._update(robots_txt=robots)
            sitemap = await analyze_sitemaps(url, self._fetcher, robots.sitemaps)
            if self._is_current(generation):
                self._update(sitemap=sitemap)
        except Exception as e:
            self._log_background_failure("robots.txt/sitemap analysis failed", e, url)
        finally:
            if self._is_current(generation):
                self._update(is_loading_robots=False)

    async def _load_security(self, url: str, facts: DocumentFacts, generation: int) -> None:
        try:
            security = await analyze_security(url, facts.document, self._fetcher)
            if self._is_current(generation):
                self._update(security=security)
        except Exception as e:
            self._log_background_failure("Security analysis failed", e, url)
        finally:
            if self._is_current(generation):
                self._update(is_loading_security=False)

    def _log_background_failure(self, message: str, error: Exception, url: str) -> None:
        if self._logger:
            self._logger.log_error(self.COMPONENT, message, error=error, request_url=url)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _update(self, **changes) -> None:
        self._set(replace(self._snapshot, **changes))

    def _set(self, snapshot: AnalysisSnapshot) -> None:
        self._snapshot = snapshot
        for observer in list(self._observers):
            observer(snapshot)

    def _log(self, level: LogLevel, message: str, data: dict) -> None:
        """Log a message if logger is available."""
        if self._logger:
            self._logger.log(level, self.COMPONENT, message, data)

    @property
    def snapshot(self) -> AnalysisSnapshot:
        """Get the current state snapshot."""
        return self._snapshot

    @property
    def state(self) -> AnalysisState:
        return self._snapshot.state

    @property
    def history(self) -> HistoryStore:
        """Get the history store."""
        return self._history

    @property
    def background_checks(self) -> bool:
        return self._background_checks
