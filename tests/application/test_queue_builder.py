import random
from datetime import datetime, timedelta, timezone

import pytest

from ladder.application.queue_builder import (
    build_review_queue,
    load_due_items,
    load_upcoming_items,
)
from ladder.domain.models import ItemStatus

NOW = datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)
TODAY = NOW.date()


def test_oldest_first_orders_by_rung_then_last_seen(make_item):
    items = [
        make_item("c", interval_index=2, last_reviewed_at=NOW - timedelta(days=9)),
        make_item("b", interval_index=1, last_reviewed_at=NOW - timedelta(days=1)),
        make_item("a", interval_index=1, last_reviewed_at=NOW - timedelta(days=4)),
        make_item("new", interval_index=0, created_at=NOW - timedelta(days=2)),
    ]

    queue = build_review_queue(items, "oldest_first")

    assert [i.id for i in queue] == ["new", "a", "b", "c"]


def test_oldest_first_is_stable_for_ties(make_item):
    items = [make_item(f"item_{n}", created_at=NOW) for n in range(4)]
    queue = build_review_queue(items, "oldest_first")
    assert [i.id for i in queue] == ["item_0", "item_1", "item_2", "item_3"]


def test_random_order_is_a_permutation(make_item):
    items = [make_item(f"item_{n}") for n in range(8)]

    queue = build_review_queue(items, "random", rng=random.Random(7))
    again = build_review_queue(items, "random", rng=random.Random(7))

    assert sorted(i.id for i in queue) == sorted(i.id for i in items)
    assert [i.id for i in queue] == [i.id for i in again]


def test_limit_truncates_after_ordering(make_item):
    items = [make_item(f"item_{n}", interval_index=n % 3) for n in range(6)]
    queue = build_review_queue(items, "oldest_first", limit=2)
    assert [i.schedule.interval_index for i in queue] == [0, 0]


@pytest.mark.parametrize("limit", [None, 0, -1])
def test_no_limit(make_item, limit):
    items = [make_item(f"item_{n}") for n in range(3)]
    assert len(build_review_queue(items, limit=limit)) == 3


def test_unknown_order_rejected(make_item):
    with pytest.raises(ValueError, match="Unknown review order"):
        build_review_queue([make_item()], "newest_first")


@pytest.mark.asyncio
async def test_load_due_items(store, make_item):
    await store.add_item(make_item("due", next_review_date=TODAY - timedelta(days=1)))
    await store.add_item(make_item("today", next_review_date=TODAY))
    await store.add_item(make_item("future", next_review_date=TODAY + timedelta(days=1)))
    await store.add_item(
        make_item("done", status=ItemStatus.MASTERED, next_review_date=TODAY)
    )
    await store.add_item(
        make_item("paused", status=ItemStatus.SUSPENDED, next_review_date=TODAY)
    )

    due = await load_due_items(store, TODAY)

    assert sorted(i.id for i in due) == ["due", "today"]


@pytest.mark.asyncio
async def test_load_upcoming_items(store, make_item):
    await store.add_item(make_item("today", next_review_date=TODAY))
    await store.add_item(make_item("in3", next_review_date=TODAY + timedelta(days=3)))
    await store.add_item(make_item("in1", next_review_date=TODAY + timedelta(days=1)))
    await store.add_item(make_item("in9", next_review_date=TODAY + timedelta(days=9)))
    await store.add_item(
        make_item(
            "paused",
            status=ItemStatus.SUSPENDED,
            next_review_date=TODAY + timedelta(days=2),
        )
    )

    upcoming = await load_upcoming_items(store, TODAY)

    assert [i.id for i in upcoming] == ["in1", "in3"]
    assert [i.id for i in await load_upcoming_items(store, TODAY, days=10)] == [
        "in1",
        "in3",
        "in9",
    ]
