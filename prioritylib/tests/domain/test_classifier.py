"""Tests for quadrant classification."""

from datetime import datetime, timedelta, timezone

import pytest

from prioritylib.domain.classifier.classifier import (
    QuadrantClassifier,
    classify,
    is_important,
    is_overdue,
    is_urgent,
)
from prioritylib.domain.task.models import Quadrant
from prioritylib.tests.test_utils import NOW, make_task


def _iso(moment: datetime) -> str:
    return moment.isoformat()


class TestUrgency:
    """Test the urgency half of the classification."""

    def test_deadline_in_23_hours_is_urgent(self):
        task = make_task(deadline=_iso(NOW + timedelta(hours=23)))
        assert is_urgent(task, NOW)

    def test_deadline_in_25_hours_is_not_urgent(self):
        task = make_task(deadline=_iso(NOW + timedelta(hours=25)))
        assert not is_urgent(task, NOW)

    def test_deadline_exactly_24_hours_away_is_urgent(self):
        task = make_task(deadline=_iso(NOW + timedelta(hours=24)))
        assert is_urgent(task, NOW)

    def test_no_deadline_is_never_urgent(self):
        assert not is_urgent(make_task(), NOW)
        assert not is_overdue(make_task(), NOW)

    def test_yesterday_is_overdue_and_urgent(self):
        task = make_task(deadline="2025-07-29")

        assert is_overdue(task, NOW)
        assert is_urgent(task, NOW)

    def test_earlier_today_is_not_overdue(self):
        """Overdue compares calendar dates, so a few hours ago today is not overdue."""
        task = make_task(deadline=_iso(NOW - timedelta(hours=3)))

        assert not is_overdue(task, NOW)
        assert not is_urgent(task, NOW)

    def test_date_only_today_at_noon_is_not_urgent(self):
        """A date-only deadline means midnight, which is already behind us at noon."""
        task = make_task(deadline="2025-07-30")

        assert not is_overdue(task, NOW)
        assert not is_urgent(task, NOW)

    def test_date_only_tomorrow_is_urgent(self):
        assert is_urgent(make_task(deadline="2025-07-31"), NOW)

    def test_naive_now_is_read_as_utc(self):
        task = make_task(deadline=_iso(NOW + timedelta(hours=23)))
        assert is_urgent(task, NOW.replace(tzinfo=None))


class TestImportance:
    """Test the importance half of the classification."""

    @pytest.mark.parametrize("score,expected", [(1199.0, False), (1200.0, True), (1500.0, True)])
    def test_threshold(self, score, expected):
        assert is_important(make_task(importance_score=score)) is expected

    def test_custom_threshold(self):
        assert is_important(make_task(importance_score=900.0), important_threshold=800.0)


class TestClassify:
    """Test quadrant placement."""

    @pytest.mark.parametrize(
        "score,hours,expected",
        [
            (1200.0, 23, Quadrant.URGENT_IMPORTANT),
            (1200.0, 25, Quadrant.NOT_URGENT_IMPORTANT),
            (1199.0, 23, Quadrant.URGENT_NOT_IMPORTANT),
            (1199.0, 25, Quadrant.NOT_URGENT_NOT_IMPORTANT),
        ],
    )
    def test_quadrants(self, score, hours, expected):
        task = make_task(importance_score=score, deadline=_iso(NOW + timedelta(hours=hours)))
        assert classify(task, NOW) is expected

    def test_classification_is_deterministic(self):
        task = make_task(importance_score=1300.0, deadline="2025-07-31")
        assert {classify(task, NOW) for _ in range(10)} == {Quadrant.URGENT_IMPORTANT}

    def test_classification_moves_with_time(self):
        task = make_task(deadline=_iso(NOW + timedelta(hours=30)))

        assert classify(task, NOW) is Quadrant.NOT_URGENT_NOT_IMPORTANT
        assert classify(task, NOW + timedelta(hours=7)) is Quadrant.URGENT_NOT_IMPORTANT


class TestQuadrantClassifier:
    """Test the configured classifier object."""

    def test_uses_clock_and_thresholds(self):
        classifier = QuadrantClassifier(important_threshold=1000.0, urgent_hours=48.0, clock=lambda: NOW)
        task = make_task(deadline=_iso(NOW + timedelta(hours=40)))

        assert classifier.now() == NOW
        assert classifier.classify(task) is Quadrant.URGENT_IMPORTANT

    def test_default_clock_is_utc(self):
        assert QuadrantClassifier().now().tzinfo == timezone.utc

    def test_is_overdue(self):
        classifier = QuadrantClassifier(clock=lambda: NOW)
        assert classifier.is_overdue(make_task(deadline="2025-07-01"))
