from datetime import datetime, timedelta, timezone

import pytest

from ladder.domain.models import ItemStatus, LearningItem, Schedule
from ladder.domain.ports import FixedClock
from ladder.infrastructure.adapters.memory_store import InMemoryItemStore

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
TODAY = NOW.date()


@pytest.fixture
def clock():
    """A clock frozen at 2026-03-10 09:30 UTC."""
    return FixedClock(NOW)


@pytest.fixture
def make_item():
    """Factory for items with a given scheduling state."""

    def _make(
        item_id: str = "item_1",
        interval_index: int = 0,
        status: ItemStatus = ItemStatus.NEW,
        next_review_date=TODAY,
        last_reviewed_at: datetime | None = None,
        created_at: datetime = NOW - timedelta(days=30),
        quality_history: list[int] | None = None,
        review_count: int = 0,
        ease_factor: float = 2.5,
        category: str = "",
    ) -> LearningItem:
        return LearningItem(
            id=item_id,
            created_at=created_at,
            category=category,
            content={"text": f"content of {item_id}"},
            schedule=Schedule(
                interval_index=interval_index,
                next_review_date=next_review_date,
                last_reviewed_at=last_reviewed_at,
                review_count=review_count,
                quality_history=list(quality_history or []),
                status=status,
                ease_factor=ease_factor,
            ),
        )

    return _make


@pytest.fixture
def store():
    return InMemoryItemStore()

