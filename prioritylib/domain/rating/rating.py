"""Pairwise (Elo-style) rating of task importance.

A comparison is a forced choice between two tasks. The winner gains and
the loser drops by the same amount, scaled by how surprising the result
was given their current scores.

Replaying a comparison is deliberately not a no-op: the same pair chosen
twice is two pieces of evidence and moves the scores twice.
"""

import logging

from pydantic import Field

from prioritylib.core.models import StrictBaseModel
from prioritylib.domain.constants import RATING_K_FACTOR, RATING_SCALE
from prioritylib.domain.task.models import TaskRecord

logger = logging.getLogger(__name__)

# 10 ** 300 is still a finite float
MAX_EXPONENT = 300.0


class RatingOutcome(StrictBaseModel):
    """Scores of both participants before and after one comparison."""

    winner_id: str = Field(..., description="Task chosen as more important")
    loser_id: str = Field(..., description="Task not chosen")
    winner_score_before: float
    loser_score_before: float
    winner_score_after: float
    loser_score_after: float
    winner_expected: float = Field(..., description="Expected win probability of the winner")

    @property
    def winner_delta(self) -> float:
        return self.winner_score_after - self.winner_score_before

    @property
    def loser_delta(self) -> float:
        return self.loser_score_after - self.loser_score_before


def expected_score(rating: float, opponent: float, scale: float = RATING_SCALE) -> float:
    """Probability that a task rated ``rating`` beats one rated ``opponent``.

    Saturates at 0 or 1 for score gaps too large to exponentiate.
    """
    exponent = (opponent - rating) / scale
    exponent = max(-MAX_EXPONENT, min(MAX_EXPONENT, exponent))
    return 1.0 / (1.0 + 10.0 ** exponent)


def rate_scores(
    winner_id: str,
    loser_id: str,
    winner_score: float,
    loser_score: float,
    k_factor: float = RATING_K_FACTOR,
    scale: float = RATING_SCALE,
) -> RatingOutcome:
    """Apply one comparison to a pair of scores.

    Scores never drop below zero; a loser already near zero is floored.
    """
    winner_expected = expected_score(winner_score, loser_score, scale)
    loser_expected = 1.0 - winner_expected

    new_winner = winner_score + k_factor * (1.0 - winner_expected)
    new_loser = loser_score + k_factor * (0.0 - loser_expected)
    if new_loser < 0:
        logger.debug(f"Loser score for {loser_id} floored at 0 (was {new_loser:.3f})")
        new_loser = 0.0

    return RatingOutcome(
        winner_id=winner_id,
        loser_id=loser_id,
        winner_score_before=float(winner_score),
        loser_score_before=float(loser_score),
        winner_score_after=float(new_winner),
        loser_score_after=float(new_loser),
        winner_expected=float(winner_expected),
    )


def rate_comparison(
    winner: TaskRecord,
    loser: TaskRecord,
    k_factor: float = RATING_K_FACTOR,
    scale: float = RATING_SCALE,
) -> RatingOutcome:
    return rate_scores(
        winner.id, loser.id, winner.importance_score, loser.importance_score, k_factor, scale
    )


def apply_rating(
    winner: TaskRecord, loser: TaskRecord, outcome: RatingOutcome
) -> tuple[TaskRecord, TaskRecord]:
    """Return copies of both tasks carrying the outcome's new scores."""
    if (winner.id, loser.id) != (outcome.winner_id, outcome.loser_id):
        raise ValueError("Rating outcome does not belong to these tasks")
    return (
        winner.with_importance_score(outcome.winner_score_after),
        loser.with_importance_score(outcome.loser_score_after),
    )
