"""Tests for the statistics calculator."""

from datetime import date, timedelta

import pytest

from ladder.application.stats.metrics_calculator import (
    CategoryProgress,
    QualityBreakdown,
    ReviewStatistics,
    StatisticsCalculator,
    quality_breakdown,
)
from ladder.domain.models import ItemStatus

TODAY = date(2026, 3, 10)


@pytest.fixture
def calculator():
    return StatisticsCalculator()


class TestCompute:
    def test_empty_collection(self, calculator):
        assert calculator.compute([], TODAY) == ReviewStatistics()

    def test_status_counts(self, calculator, make_item):
        items = [
            make_item("a", status=ItemStatus.NEW),
            make_item("b", status=ItemStatus.LEARNING),
            make_item("c", status=ItemStatus.LEARNING),
            make_item("d", status=ItemStatus.MASTERED),
            make_item("e", status=ItemStatus.SUSPENDED),
        ]
        stats = calculator.compute(items, TODAY)

        assert stats.total == 5
        assert (stats.new, stats.learning, stats.mastered, stats.suspended) == (1, 2, 1, 1)

    def test_accuracy_rate(self, calculator, make_item):
        items = [
            make_item("a", quality_history=[3, 3, 2]),
            make_item("b", quality_history=[0, 1]),
        ]
        stats = calculator.compute(items, TODAY)

        # 9 / (5 * 3) = 60%
        assert stats.accuracy_rate == 60.0

    def test_accuracy_rounds_to_one_decimal(self, calculator, make_item):
        stats = calculator.compute([make_item("a", quality_history=[2, 2, 3])], TODAY)
        assert stats.accuracy_rate == 77.8

    def test_due_counts(self, calculator, make_item):
        items = [
            make_item("overdue", next_review_date=TODAY - timedelta(days=3)),
            make_item("today", next_review_date=TODAY),
            make_item("tomorrow", next_review_date=TODAY + timedelta(days=1)),
            make_item("week", next_review_date=TODAY + timedelta(days=7)),
            make_item("later", next_review_date=TODAY + timedelta(days=8)),
            make_item(
                "mastered",
                status=ItemStatus.MASTERED,
                next_review_date=TODAY - timedelta(days=1),
            ),
            make_item(
                "suspended",
                status=ItemStatus.SUSPENDED,
                next_review_date=TODAY + timedelta(days=1),
            ),
        ]
        stats = calculator.compute(items, TODAY)

        assert stats.due_today == 2
        assert stats.due_tomorrow == 1
        assert stats.due_within_7_days == 4

    def test_average_ease(self, calculator, make_item):
        items = [make_item("a", ease_factor=2.5), make_item("b", ease_factor=2.0)]
        assert calculator.compute(items, TODAY).average_ease == 2.25


class TestMasteryEstimate:
    def test_mastered_item_is_today(self, calculator, make_item):
        item = make_item(interval_index=5, status=ItemStatus.MASTERED)
        assert calculator.estimate_mastery_date(item, TODAY) == TODAY

    def test_new_item_sums_remaining_rungs(self, calculator, make_item):
        item = make_item(interval_index=0)
        assert calculator.estimate_mastery_date(item, TODAY) == TODAY + timedelta(days=55)

    def test_struggling_item_is_stretched(self, calculator, make_item):
        item = make_item(
            interval_index=2, status=ItemStatus.LEARNING, quality_history=[3, 1, 1, 2]
        )
        # (7 + 14 + 30) * 1.5 = 76.5 -> 77
        assert calculator.estimate_mastery_date(item, TODAY) == TODAY + timedelta(days=77)

    def test_recent_good_ratings_are_not_stretched(self, calculator, make_item):
        item = make_item(
            interval_index=3, status=ItemStatus.LEARNING, quality_history=[0, 0, 2, 2, 2]
        )
        assert calculator.estimate_mastery_date(item, TODAY) == TODAY + timedelta(days=44)

    def test_suspended_item_has_no_estimate(self, calculator, make_item):
        item = make_item(interval_index=2, status=ItemStatus.SUSPENDED)
        assert calculator.estimate_mastery_date(item, TODAY) is None


def test_category_breakdown(calculator, make_item):
    items = [
        make_item("a", category="vocab", status=ItemStatus.MASTERED),
        make_item("b", category="vocab", status=ItemStatus.LEARNING),
        make_item("c", category="", status=ItemStatus.NEW),
        make_item("d", category="vocab", status=ItemStatus.SUSPENDED),
    ]
    breakdown = calculator.category_breakdown(items)

    assert breakdown["vocab"] == CategoryProgress(new=0, learning=1, mastered=1, total=3)
    assert breakdown["vocab"].mastered_percent == 33
    assert breakdown["other"] == CategoryProgress(new=1, learning=0, mastered=0, total=1)


def test_mastery_timeline(calculator, make_item):
    items = [
        make_item("slow", interval_index=0),
        make_item("fast", interval_index=4, status=ItemStatus.LEARNING, category="vocab"),
        make_item("done", interval_index=5, status=ItemStatus.MASTERED),
        make_item("paused", interval_index=1, status=ItemStatus.SUSPENDED),
    ]
    timeline = calculator.mastery_timeline(items, TODAY)

    assert [p.item_id for p in timeline] == ["fast", "slow"]
    assert timeline[0].category == "vocab"
    assert timeline[0].days_away == 30
    assert timeline[1].category == "other"


def test_mastery_timeline_limit(calculator, make_item):
    items = [make_item(f"item_{i}", interval_index=i % 5) for i in range(15)]
    assert len(calculator.mastery_timeline(items, TODAY)) == 10
    assert len(calculator.mastery_timeline(items, TODAY, limit=3)) == 3


def test_quality_breakdown():
    assert quality_breakdown([0, 2, 2, 3, 1, 3, 3]) == QualityBreakdown(
        forgot=1, hard=1, good=2, easy=3
    )
    assert quality_breakdown([]) == QualityBreakdown()
