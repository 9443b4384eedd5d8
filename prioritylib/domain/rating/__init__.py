"""Pairwise importance rating."""

from prioritylib.domain.rating.rating import (
    RatingOutcome,
    apply_rating,
    expected_score,
    rate_comparison,
    rate_scores,
)

__all__ = [
    "RatingOutcome",
    "apply_rating",
    "expected_score",
    "rate_comparison",
    "rate_scores",
]
