"""
Analysis pipeline.

Runs every registered checker over one DocumentFacts instance, in order
and synchronously, then aggregates the weighted core into the overall
score. A checker that raises aborts the whole analysis.
"""

from datetime import datetime, timezone
from typing import Optional, Sequence

from .audit_logger import AuditLogger
from .checks import DEFAULT_CHECKERS, RegisteredChecker
from .enums import LogLevel
from .exceptions import AnalysisError
from .extractor import DocumentFacts, extract_facts
from .models import AnalysisReport, CheckResult
from .scoring import DEFAULT_SCORE_WEIGHTS, ScoreWeights, calculate_overall_score


COMPONENT = "Analyzer"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def run_checks(
    facts: DocumentFacts,
    checkers: Sequence[RegisteredChecker] = DEFAULT_CHECKERS,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
    fetch_duration_ms: float = 0.0,
    logger: Optional[AuditLogger] = None,
    analyzed_at: Optional[str] = None,
) -> AnalysisReport:
    """
    Run checkers over extracted facts and build the report.

    Args:
        facts: Facts extracted once for the page
        checkers: Checkers to run, in report order
        weights: Weights for the overall score
        fetch_duration_ms: Time spent retrieving the HTML
        logger: Optional audit logger
        analyzed_at: ISO-8601 timestamp (defaults to now, UTC)

    Returns:
        AnalysisReport with one result per checker category

    Raises:
        AnalysisError: If any checker raises
    """
    categories: dict[str, CheckResult] = {}

    for checker in checkers:
        try:
            categories[checker.category] = checker.check(facts)
        except Exception as e:
            if logger:
                logger.log_error(
                    COMPONENT,
                    f"Checker '{checker.category}' failed",
                    error=e,
                    request_url=facts.url,
                )
            raise AnalysisError(
                code="checker_failed",
                message=str(e) or type(e).__name__,
                details={"category": checker.category, "error_type": type(e).__name__},
            ) from e

    overall = calculate_overall_score(categories, weights)

    if logger:
        logger.log(LogLevel.INFO, COMPONENT, "Analysis complete", {
            "url": facts.url,
            "overall_score": overall,
            "categories": len(categories),
        })

    return AnalysisReport(
        url=facts.url,
        analyzed_at=analyzed_at or _now_iso(),
        fetch_duration_ms=fetch_duration_ms,
        overall_score=overall,
        categories=categories,
    )


def analyze_html(
    html: str,
    url: str,
    fetch_duration_ms: float = 0.0,
    checkers: Sequence[RegisteredChecker] = DEFAULT_CHECKERS,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
    logger: Optional[AuditLogger] = None,
) -> tuple[AnalysisReport, DocumentFacts]:
    """
    Parse HTML, extract facts and run all checkers.

    Returns the report together with the facts so follow-up analyses can
    reuse the parsed document instead of parsing again.
    """
    facts = extract_facts(html, url, logger=logger)
    report = run_checks(
        facts,
        checkers=checkers,
        weights=weights,
        fetch_duration_ms=fetch_duration_ms,
        logger=logger,
    )
    return report, facts
