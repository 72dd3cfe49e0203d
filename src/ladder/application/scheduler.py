"""
Interval state machine.

Maps (interval position, recall quality) to the next position, due date and
mastery status. This is a pure computation module with no I/O.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from ladder.domain.constants import DEFAULT_INTERVALS, INTERVAL_LABELS
from ladder.domain.errors import InvalidInput, InvalidQuality
from ladder.domain.models import ItemStatus, Quality
from ladder.domain.ports import Clock, SystemClock


@dataclass(frozen=True)
class NextState:
    """Result of one transition."""

    next_interval_index: int
    next_review_date: date
    status: ItemStatus
    days_until_review: int


def validate_intervals(intervals: Sequence[int]) -> tuple[int, ...]:
    """
    Check an interval table: non-empty, starts at 0, never decreasing.
    """
    table = tuple(int(d) for d in intervals)
    if not table:
        raise InvalidInput("Interval table must not be empty")
    if table[0] != 0:
        raise InvalidInput(f"Interval table must start at 0, got {table[0]}")
    if any(b < a for a, b in zip(table, table[1:])):
        raise InvalidInput(f"Interval table must be non-decreasing: {list(table)}")
    return table


def coerce_quality(quality: object) -> Quality:
    """Return the Quality for a raw rating, raising InvalidQuality outside 0..3."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQuality(quality)
    try:
        return Quality(quality)
    except ValueError:
        raise InvalidQuality(quality) from None


def next_state(
    interval_index: int,
    quality: int,
    today: date,
    intervals: Sequence[int] = DEFAULT_INTERVALS,
) -> NextState:
    """
    Compute the next schedule position for a rating.

    Args:
        interval_index: Current position in the interval table.
        quality: Rating (0=Forgot, 1=Hard, 2=Good, 3=Easy).
        today: The calendar date all offsets are measured from.
        intervals: Day offsets, one per rung.

    Returns:
        NextState with the resulting index, due date and status.
    """
    q = coerce_quality(quality)
    last_index = len(intervals) - 1
    if not 0 <= interval_index <= last_index:
        raise InvalidInput(
            f"Interval index {interval_index} outside 0..{last_index}"
        )

    if q == Quality.FORGOT:
        next_index = 0
    elif q == Quality.HARD:
        next_index = interval_index
    elif q == Quality.GOOD:
        next_index = min(interval_index + 1, last_index)
    else:
        next_index = min(interval_index + 2, last_index)

    # HARD at the ceiling stays learning
    if next_index == last_index and q >= Quality.GOOD:
        status = ItemStatus.MASTERED
    else:
        status = ItemStatus.LEARNING

    offset = intervals[next_index]
    return NextState(
        next_interval_index=next_index,
        next_review_date=today + timedelta(days=offset),
        status=status,
        days_until_review=offset,
    )


class IntervalScheduler:
    """
    Binds an interval table to a clock.

    Stateless apart from its configuration; every call reads "today" once.
    """

    def __init__(
        self,
        intervals: Sequence[int] = DEFAULT_INTERVALS,
        clock: Clock | None = None,
    ):
        self.intervals = validate_intervals(intervals)
        self.clock = clock or SystemClock()

    @property
    def last_index(self) -> int:
        return len(self.intervals) - 1

    def next_state(self, interval_index: int, quality: int) -> NextState:
        return next_state(interval_index, quality, self.clock.today(), self.intervals)

    def remaining_days(self, interval_index: int) -> int:
        """Total days to walk the ladder from interval_index if every review is GOOD."""
        return sum(self.intervals[interval_index + 1 :])


def interval_label(interval_index: int) -> str:
    """Human-readable name for a rung of the default ladder."""
    if 0 <= interval_index < len(INTERVAL_LABELS):
        return INTERVAL_LABELS[interval_index]
    return "Unknown"


def days_until_review(next_review_date: date, today: date) -> int:
    """Days until the item is due; negative when overdue."""
    return (next_review_date - today).days


def is_overdue(next_review_date: date, today: date) -> bool:
    return days_until_review(next_review_date, today) < 0
