"""Tests for pairwise importance rating."""

import pytest

from prioritylib.domain.rating.rating import apply_rating, expected_score, rate_comparison, rate_scores
from prioritylib.tests.test_utils import make_task


class TestExpectedScore:
    """Test the expected win probability."""

    def test_equal_scores_are_even(self):
        assert expected_score(1500.0, 1500.0) == pytest.approx(0.5)

    def test_400_points_is_ten_to_one(self):
        assert expected_score(1400.0, 1000.0) == pytest.approx(10 / 11)

    def test_probabilities_are_complementary(self):
        assert expected_score(1100.0, 1300.0) + expected_score(1300.0, 1100.0) == pytest.approx(1.0)


class TestRateScores:
    """Test score updates for one comparison."""

    def test_equal_scores_move_by_sixteen(self):
        outcome = rate_scores("w", "l", 1500.0, 1500.0)

        assert outcome.winner_score_after == pytest.approx(1516.0)
        assert outcome.loser_score_after == pytest.approx(1484.0)
        assert outcome.winner_delta == pytest.approx(16.0)
        assert outcome.loser_delta == pytest.approx(-16.0)

    def test_zero_sum_away_from_floor(self):
        outcome = rate_scores("w", "l", 1050.0, 1380.0)
        assert outcome.winner_delta + outcome.loser_delta == pytest.approx(0.0)

    def test_upset_moves_more_than_expected_win(self):
        upset = rate_scores("w", "l", 1000.0, 1400.0)
        expected = rate_scores("w", "l", 1400.0, 1000.0)

        assert upset.winner_delta > expected.winner_delta
        assert upset.winner_delta == pytest.approx(32 * 10 / 11)

    def test_custom_k_factor(self):
        assert rate_scores("w", "l", 1000.0, 1000.0, k_factor=64.0).winner_delta == pytest.approx(32.0)

    def test_loser_is_floored_at_zero(self):
        outcome = rate_scores("w", "l", 10.0, 5.0)

        assert outcome.loser_score_after == 0.0
        assert outcome.winner_score_after > 10.0

    def test_replaying_a_comparison_is_not_idempotent(self):
        """The same choice twice is two comparisons, and moves the scores twice."""
        first = rate_scores("w", "l", 1000.0, 1000.0)
        second = rate_scores("w", "l", first.winner_score_after, first.loser_score_after)

        assert second.winner_score_after > first.winner_score_after
        assert second.loser_score_after < first.loser_score_after
        assert 0 < second.winner_delta < first.winner_delta


class TestApplyRating:
    """Test applying an outcome to task records."""

    def test_apply_rating_returns_updated_copies(self):
        winner = make_task(importance_score=1500.0)
        loser = make_task(importance_score=1500.0)

        new_winner, new_loser = apply_rating(winner, loser, rate_comparison(winner, loser))

        assert new_winner.importance_score == pytest.approx(1516.0)
        assert new_loser.importance_score == pytest.approx(1484.0)
        assert winner.importance_score == 1500.0

    def test_apply_rating_rejects_foreign_outcome(self):
        winner, loser = make_task(), make_task()
        outcome = rate_scores("x", "y", 1000.0, 1000.0)

        with pytest.raises(ValueError):
            apply_rating(winner, loser, outcome)


class TestExtremeScores:
    """Test rating across score gaps too large to exponentiate."""

    def test_expected_score_saturates(self):
        assert expected_score(1000.0, 1e6) == pytest.approx(0.0)
        assert expected_score(1e6, 1000.0) == pytest.approx(1.0)

    def test_underdog_win_moves_full_k(self):
        outcome = rate_scores("a", "b", 1000.0, 1e6)

        assert outcome.winner_score_after == pytest.approx(1032.0)
        assert outcome.loser_score_after == pytest.approx(1e6 - 32.0)

    def test_favourite_win_moves_nothing(self):
        outcome = rate_scores("a", "b", 1e6, 1000.0)

        assert outcome.winner_delta == pytest.approx(0.0)
        assert outcome.loser_delta == pytest.approx(0.0)
