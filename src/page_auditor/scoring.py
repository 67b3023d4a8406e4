"""
Overall score aggregation.

Only a fixed core of categories feeds the overall score. Each core
category status maps to a category score, and the overall score is the
weighted sum of those, rounded half-up. Advisory categories keep their
own status and score but never move the overall number.
"""

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

from .enums import SeoStatus
from .exceptions import ValidationError
from .models import CheckResult


WEIGHT_SUM_TOLERANCE = 1e-6

# (good, warning, error) category scores; info counts as good
STATUS_SCORES: dict[str, tuple[int, int, int]] = {
    "headings": (100, 60, 20),
    "images": (100, 60, 30),
    "links": (100, 70, 40),
    "content": (100, 60, 20),
    "keywords": (100, 60, 30),
    "performance": (100, 60, 30),
    "technical": (100, 60, 30),
}
DEFAULT_STATUS_SCORES = (100, 60, 30)

# Meta is scored from its sub-sections: (good, warning, otherwise)
META_PART_SCORES: dict[str, tuple[int, int, int]] = {
    "title": (25, 15, 0),
    "description": (25, 15, 0),
    "openGraph": (25, 10, 10),
    "canonical": (25, 10, 10),
}


@dataclass(frozen=True)
class ScoreWeights:
    """
    Category weights for the overall score.

    Weights must sum to 1.0. Extending the weighted set means passing a
    new, re-normalized mapping.
    """

    weights: Mapping[str, float] = field(default_factory=lambda: {
        "meta": 0.25,
        "headings": 0.10,
        "images": 0.08,
        "links": 0.07,
        "content": 0.15,
        "keywords": 0.10,
        "performance": 0.10,
        "technical": 0.15,
    })

    def __post_init__(self) -> None:
        if any(w < 0 for w in self.weights.values()):
            raise ValidationError(
                code="invalid_weights",
                message="Score weights must not be negative",
                details={"weights": dict(self.weights)},
            )
        total = sum(self.weights.values())
        if abs(total - 1.0) > WEIGHT_SUM_TOLERANCE:
            raise ValidationError(
                code="invalid_weights",
                message=f"Score weights must sum to 1.0, got {total}",
                details={"weights": dict(self.weights)},
            )

    @property
    def categories(self) -> tuple[str, ...]:
        return tuple(self.weights)

    def weight(self, category: str) -> float:
        return self.weights.get(category, 0.0)


DEFAULT_SCORE_WEIGHTS = ScoreWeights()


def _pick(status: Optional[str], scores: tuple[int, int, int]) -> int:
    good, warning, error = scores
    if status in (SeoStatus.GOOD.value, SeoStatus.INFO.value):
        return good
    if status == SeoStatus.WARNING.value:
        return warning
    return error


def meta_score(result: CheckResult) -> int:
    """Sum the title, description, Open Graph and canonical part scores."""
    total = 0
    for part, scores in META_PART_SCORES.items():
        section = result.details.get(part) or {}
        total += _pick(section.get("status"), scores)
    return total


def category_score(category: str, result: CheckResult) -> int:
    """
    Map one category result to its 0-100 contribution before weighting.

    Args:
        category: Report key of the category
        result: Checker result for that category

    Returns:
        Category score
    """
    if category == "meta":
        return meta_score(result)
    scores = STATUS_SCORES.get(category, DEFAULT_STATUS_SCORES)
    return _pick(result.status.value, scores)


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def category_scores(
    categories: Mapping[str, CheckResult],
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
) -> dict[str, int]:
    """Category scores for every weighted category present in the report."""
    return {
        name: category_score(name, categories[name])
        for name in weights.categories
        if name in categories
    }


def calculate_overall_score(
    categories: Mapping[str, CheckResult],
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
) -> int:
    """
    Compute the overall 0-100 score.

    A weighted category missing from the report contributes nothing.
    The result depends only on the category results and the weights.
    """
    scores = category_scores(categories, weights)
    total = sum(score * weights.weight(name) for name, score in scores.items())
    return max(0, min(100, round_half_up(total)))
