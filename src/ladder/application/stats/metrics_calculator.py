"""
Statistics calculator for deriving learning metrics from a snapshot of items.

This is a pure computation module with no I/O.
"""

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from ladder.domain.constants import (
    DEFAULT_CATEGORY,
    DEFAULT_INTERVALS,
    DUE_SOON_DAYS,
    MASTERY_TIMELINE_LIMIT,
    MAX_QUALITY,
    PESSIMISM_FACTOR,
    RECENT_QUALITY_WINDOW,
)
from ladder.domain.models import ItemStatus, LearningItem, Quality


@dataclass
class ReviewStatistics:
    """
    Point-in-time metrics over a collection of items.
    """

    total: int = 0
    new: int = 0
    learning: int = 0
    mastered: int = 0
    suspended: int = 0
    due_today: int = 0
    due_tomorrow: int = 0
    due_within_7_days: int = 0
    accuracy_rate: float = 0.0  # Percent, quality normalized against EASY
    average_ease: float = 0.0  # Informational only


@dataclass
class QualityBreakdown:
    forgot: int = 0
    hard: int = 0
    good: int = 0
    easy: int = 0


@dataclass
class CategoryProgress:
    new: int = 0
    learning: int = 0
    mastered: int = 0
    total: int = 0

    @property
    def mastered_percent(self) -> int:
        if self.total == 0:
            return 0
        return round(self.mastered / self.total * 100)


@dataclass
class MasteryProjection:
    item_id: str
    category: str
    estimated_date: date
    days_away: int


def quality_breakdown(ratings: Iterable[int]) -> QualityBreakdown:
    """Count ratings by level."""
    breakdown = QualityBreakdown()
    for q in ratings:
        if q == Quality.FORGOT:
            breakdown.forgot += 1
        elif q == Quality.HARD:
            breakdown.hard += 1
        elif q == Quality.GOOD:
            breakdown.good += 1
        elif q == Quality.EASY:
            breakdown.easy += 1
    return breakdown


class StatisticsCalculator:
    """
    Computes statistics and projections from LearningItem snapshots.

    Stateless and side-effect free. The caller decides the scope by choosing
    which items to pass in.
    """

    def __init__(self, intervals: Sequence[int] = DEFAULT_INTERVALS):
        self.intervals = tuple(intervals)

    def compute(self, items: Iterable[LearningItem], today: date) -> ReviewStatistics:
        """
        Single pass over the items.
        """
        stats = ReviewStatistics()
        tomorrow = today + timedelta(days=1)
        week_later = today + timedelta(days=DUE_SOON_DAYS)

        total_ease = 0.0
        quality_sum = 0
        quality_count = 0

        for item in items:
            sched = item.schedule
            stats.total += 1

            if sched.status == ItemStatus.NEW:
                stats.new += 1
            elif sched.status == ItemStatus.LEARNING:
                stats.learning += 1
            elif sched.status == ItemStatus.MASTERED:
                stats.mastered += 1
            elif sched.status == ItemStatus.SUSPENDED:
                stats.suspended += 1

            if sched.is_active:
                if sched.next_review_date <= today:
                    stats.due_today += 1
                if sched.next_review_date == tomorrow:
                    stats.due_tomorrow += 1
                if sched.next_review_date <= week_later:
                    stats.due_within_7_days += 1

            quality_sum += sum(sched.quality_history)
            quality_count += len(sched.quality_history)
            total_ease += sched.ease_factor

        if quality_count > 0:
            stats.accuracy_rate = round(quality_sum / (quality_count * MAX_QUALITY) * 100, 1)

        if stats.total > 0:
            stats.average_ease = round(total_ease / stats.total, 2)

        return stats

    def estimate_mastery_date(self, item: LearningItem, today: date) -> date | None:
        """
        Project when an item will be mastered, assuming every future review is GOOD.

        Recent struggling (mean of the last three ratings below GOOD) stretches
        the estimate by half. Suspended items have no projection.
        """
        sched = item.schedule
        last_index = len(self.intervals) - 1

        if sched.status == ItemStatus.MASTERED or sched.interval_index >= last_index:
            return today
        if sched.status == ItemStatus.SUSPENDED:
            return None

        estimated_days: float = sum(self.intervals[sched.interval_index + 1 :])

        recent = sched.quality_history[-RECENT_QUALITY_WINDOW:]
        if recent and sum(recent) / len(recent) < Quality.GOOD:
            estimated_days *= PESSIMISM_FACTOR

        return today + timedelta(days=math.ceil(estimated_days))

    def category_breakdown(self, items: Iterable[LearningItem]) -> dict[str, CategoryProgress]:
        """Per-category progress counts. Blank categories are grouped as 'other'."""
        by_category: dict[str, CategoryProgress] = {}
        for item in items:
            progress = by_category.setdefault(item.category or DEFAULT_CATEGORY, CategoryProgress())
            progress.total += 1
            status = item.schedule.status
            if status == ItemStatus.NEW:
                progress.new += 1
            elif status == ItemStatus.LEARNING:
                progress.learning += 1
            elif status == ItemStatus.MASTERED:
                progress.mastered += 1
        return by_category

    def mastery_timeline(
        self,
        items: Iterable[LearningItem],
        today: date,
        limit: int = MASTERY_TIMELINE_LIMIT,
    ) -> list[MasteryProjection]:
        """
        Earliest projected mastery dates for items not yet mastered.
        """
        projections = []
        for item in items:
            if item.schedule.status == ItemStatus.MASTERED:
                continue
            estimated = self.estimate_mastery_date(item, today)
            if estimated is None:
                continue
            projections.append(
                MasteryProjection(
                    item_id=item.id,
                    category=item.category or DEFAULT_CATEGORY,
                    estimated_date=estimated,
                    days_away=(estimated - today).days,
                )
            )
        projections.sort(key=lambda p: p.estimated_date)
        return projections[:limit]
