"""
Queue builder for review sessions.

Selects due items from the store and orders them:
1. oldest_first: earliest rung first, then least recently reviewed
2. random: uniform shuffle
"""

import logging
import random
from datetime import date, datetime, timedelta
from typing import Literal

from ladder.domain.constants import DUE_SOON_DAYS
from ladder.domain.models import INACTIVE_STATUSES, ItemFilter, LearningItem
from ladder.domain.ports import ItemStore

logger = logging.getLogger(__name__)

ReviewOrder = Literal["oldest_first", "random"]
REVIEW_ORDERS: tuple[str, ...] = ("oldest_first", "random")


def _last_seen(item: LearningItem) -> datetime:
    # Never-reviewed items fall back to their creation time
    return item.schedule.last_reviewed_at or item.created_at


def order_oldest_first(items: list[LearningItem]) -> list[LearningItem]:
    """
    Stable sort ascending by interval index, then by last review time.
    """
    return sorted(items, key=lambda item: (item.schedule.interval_index, _last_seen(item)))


def order_random(items: list[LearningItem], rng: random.Random | None = None) -> list[LearningItem]:
    """Return a uniformly shuffled copy (Fisher-Yates)."""
    shuffled = list(items)
    (rng or random.Random()).shuffle(shuffled)
    return shuffled


def build_review_queue(
    items: list[LearningItem],
    order: ReviewOrder = "oldest_first",
    limit: int | None = None,
    rng: random.Random | None = None,
) -> list[LearningItem]:
    """
    Order items for a session and cap the result.

    Args:
        items: Candidate items, usually the currently due set.
        order: 'oldest_first' or 'random'.
        limit: Maximum queue length; None or <= 0 means no cap.
        rng: Random source for 'random' order.

    Returns:
        The ordered, truncated queue.
    """
    if order == "oldest_first":
        queue = order_oldest_first(items)
    elif order == "random":
        queue = order_random(items, rng)
    else:
        raise ValueError(f"Unknown review order: {order!r}. Use one of {REVIEW_ORDERS}.")

    if limit is not None and limit > 0:
        queue = queue[:limit]
    return queue


async def load_due_items(store: ItemStore, today: date) -> list[LearningItem]:
    """Items due on or before today, excluding mastered and suspended ones."""
    items = await store.list_items(ItemFilter.due(today))
    logger.debug(f"{len(items)} items due on {today}")
    return items


async def load_upcoming_items(
    store: ItemStore, today: date, days: int = DUE_SOON_DAYS
) -> list[LearningItem]:
    """
    Active items due after today and within the next `days` days, soonest first.
    """
    items = await store.list_items(
        ItemFilter(
            due_after=today,
            due_on_or_before=today + timedelta(days=days),
            exclude_statuses=INACTIVE_STATUSES,
        )
    )
    return sorted(items, key=lambda item: item.schedule.next_review_date)
