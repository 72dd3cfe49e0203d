from datetime import date, timedelta

import pytest

from ladder.application.scheduler import (
    IntervalScheduler,
    NextState,
    days_until_review,
    interval_label,
    is_overdue,
    next_state,
    validate_intervals,
)
from ladder.domain.constants import DEFAULT_INTERVALS
from ladder.domain.errors import InvalidInput, InvalidQuality
from ladder.domain.models import ItemStatus, Quality

TODAY = date(2026, 3, 10)
LAST = len(DEFAULT_INTERVALS) - 1
ALL_INDICES = range(len(DEFAULT_INTERVALS))


@pytest.mark.parametrize("index", ALL_INDICES)
def test_forgot_resets_to_first_rung(index):
    result = next_state(index, Quality.FORGOT, TODAY)

    assert result.next_interval_index == 0
    assert result.status == ItemStatus.LEARNING
    assert result.days_until_review == 0
    assert result.next_review_date == TODAY


@pytest.mark.parametrize("index", ALL_INDICES)
def test_hard_keeps_current_rung(index):
    result = next_state(index, Quality.HARD, TODAY)
    assert result.next_interval_index == index


@pytest.mark.parametrize("index", ALL_INDICES)
def test_good_never_moves_backwards(index):
    result = next_state(index, Quality.GOOD, TODAY)
    assert result.next_interval_index >= index
    assert result.next_interval_index == min(index + 1, LAST)


@pytest.mark.parametrize("index", ALL_INDICES)
def test_easy_advances_two_unless_clamped(index):
    result = next_state(index, Quality.EASY, TODAY)
    assert result.next_interval_index == min(index + 2, LAST)


@pytest.mark.parametrize(
    "quality,expected",
    [
        (Quality.FORGOT, ItemStatus.LEARNING),
        (Quality.HARD, ItemStatus.LEARNING),
        (Quality.GOOD, ItemStatus.MASTERED),
        (Quality.EASY, ItemStatus.MASTERED),
    ],
)
def test_status_at_ceiling(quality, expected):
    assert next_state(LAST, quality, TODAY).status == expected


def test_first_good_review_schedules_tomorrow():
    result = next_state(0, Quality.GOOD, TODAY)

    assert result == NextState(
        next_interval_index=1,
        next_review_date=TODAY + timedelta(days=1),
        status=ItemStatus.LEARNING,
        days_until_review=1,
    )


def test_easy_from_two_week_rung_masters():
    result = next_state(4, Quality.EASY, TODAY)

    assert result.next_interval_index == 5
    assert result.next_review_date == TODAY + timedelta(days=30)
    assert result.status == ItemStatus.MASTERED


def test_good_below_ceiling_is_learning():
    # 14-day rung is one short of the top
    result = next_state(3, Quality.EASY, TODAY)
    assert result.next_interval_index == 5
    assert result.status == ItemStatus.MASTERED

    result = next_state(3, Quality.GOOD, TODAY)
    assert result.next_interval_index == 4
    assert result.status == ItemStatus.LEARNING


def test_plain_ints_are_accepted():
    assert next_state(1, 2, TODAY).next_interval_index == 2


@pytest.mark.parametrize("quality", [-1, 4, 5, 2.0, "2", None, True])
def test_invalid_quality_rejected(quality):
    with pytest.raises(InvalidQuality):
        next_state(0, quality, TODAY)


@pytest.mark.parametrize("index", [-1, len(DEFAULT_INTERVALS)])
def test_out_of_range_index_rejected(index):
    with pytest.raises(InvalidInput):
        next_state(index, Quality.GOOD, TODAY)


def test_custom_interval_table():
    result = next_state(1, Quality.GOOD, TODAY, intervals=(0, 2, 5))
    assert result.next_interval_index == 2
    assert result.days_until_review == 5
    assert result.status == ItemStatus.MASTERED


def test_scheduler_reads_today_from_clock(clock):
    scheduler = IntervalScheduler(clock=clock)
    result = scheduler.next_state(2, Quality.GOOD)
    assert result.next_review_date == clock.today() + timedelta(days=7)


def test_scheduler_remaining_days():
    scheduler = IntervalScheduler()
    assert scheduler.remaining_days(0) == 1 + 3 + 7 + 14 + 30
    assert scheduler.remaining_days(4) == 30
    assert scheduler.remaining_days(5) == 0


@pytest.mark.parametrize("table", [[], [1, 3, 7], [0, 3, 1]])
def test_validate_intervals_rejects_bad_tables(table):
    with pytest.raises(InvalidInput):
        validate_intervals(table)


def test_interval_label():
    assert interval_label(0) == "Today"
    assert interval_label(5) == "Month later"
    assert interval_label(9) == "Unknown"


def test_days_until_review_and_overdue():
    assert days_until_review(TODAY + timedelta(days=3), TODAY) == 3
    assert days_until_review(TODAY - timedelta(days=2), TODAY) == -2
    assert is_overdue(TODAY - timedelta(days=1), TODAY)
    assert not is_overdue(TODAY, TODAY)
