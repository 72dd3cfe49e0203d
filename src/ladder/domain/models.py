"""
Domain models for learning items and their scheduling state.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum, IntEnum
from typing import Any

from .constants import DEFAULT_EASE_FACTOR


class Quality(IntEnum):
    """User self-assessment of recall difficulty."""

    FORGOT = 0  # Incorrect - reset to the first rung
    HARD = 1  # Difficult to recall - retry at the same rung
    GOOD = 2  # Correctly recalled - advance one rung
    EASY = 3  # Easily recalled - advance two rungs


class ItemStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"
    SUSPENDED = "suspended"


# Statuses excluded from due selection.
INACTIVE_STATUSES = frozenset({ItemStatus.MASTERED, ItemStatus.SUSPENDED})


@dataclass
class Schedule:
    """
    Scheduling state owned by the engine.

    Attributes:
        next_review_date: Calendar date on/after which the item is due. Always
            supplied by the caller from the injected Clock.
        interval_index: Position in the interval ladder.
        last_reviewed_at: Timestamp of the most recent review, None if never reviewed.
        review_count: Number of recorded reviews.
        quality_history: Most recent ratings, oldest first (bounded window).
        status: Mastery status.
        ease_factor: Carried for data compatibility; not read by any algorithm.
    """

    next_review_date: date
    interval_index: int = 0
    last_reviewed_at: datetime | None = None
    review_count: int = 0
    quality_history: list[int] = field(default_factory=list)
    status: ItemStatus = ItemStatus.NEW
    ease_factor: float = DEFAULT_EASE_FACTOR

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES


@dataclass
class LearningItem:
    """
    A unit of memorizable content plus its scheduling state.

    The content payload is owned by the generation subsystem and treated as
    opaque here; only ``category`` is read (for statistics grouping).
    """

    id: str
    created_at: datetime
    schedule: Schedule
    category: str = ""
    content: dict[str, Any] = field(default_factory=dict)

    def is_due(self, today: date) -> bool:
        return self.schedule.is_active and self.schedule.next_review_date <= today


@dataclass(frozen=True)
class ItemFilter:
    """
    Query filter understood by every ItemStore.

    All criteria are optional and combined with AND.
    """

    due_on_or_before: date | None = None
    due_after: date | None = None
    exclude_statuses: frozenset[ItemStatus] = frozenset()
    status: ItemStatus | None = None
    category: str | None = None

    @classmethod
    def due(cls, today: date) -> "ItemFilter":
        return cls(due_on_or_before=today, exclude_statuses=INACTIVE_STATUSES)

    def matches(self, item: LearningItem) -> bool:
        sched = item.schedule
        if self.due_on_or_before is not None and sched.next_review_date > self.due_on_or_before:
            return False
        if self.due_after is not None and sched.next_review_date <= self.due_after:
            return False
        if sched.status in self.exclude_statuses:
            return False
        if self.status is not None and sched.status != self.status:
            return False
        if self.category is not None and item.category != self.category:
            return False
        return True


def new_learning_item(
    item_id: str,
    created_at: datetime,
    category: str = "",
    content: dict[str, Any] | None = None,
) -> LearningItem:
    """Build an item in its initial state: status new, first rung, due on creation day."""
    return LearningItem(
        id=item_id,
        created_at=created_at,
        category=category,
        content=dict(content or {}),
        schedule=Schedule(next_review_date=created_at.date()),
    )
