"""
Review Recorder — Application layer orchestrator for one scoring event.

Loads an item, applies the interval state machine, persists the new schedule,
and folds the review into the stats ledger.
"""

import logging

from ladder.application.scheduler import IntervalScheduler, coerce_quality, next_state
from ladder.application.stats.service import LedgerService
from ladder.domain.constants import QUALITY_HISTORY_WINDOW
from ladder.domain.errors import ItemNotFound, StoreUnavailable
from ladder.domain.models import ItemStatus, LearningItem
from ladder.domain.ports import Clock, ItemStore, SystemClock

logger = logging.getLogger(__name__)


class ReviewRecorder:
    """
    Application service that owns every write to an item's schedule.

    Follows Dependency Inversion: depends on the ItemStore abstraction,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        store: ItemStore,
        ledger: LedgerService | None = None,
        scheduler: IntervalScheduler | None = None,
        clock: Clock | None = None,
    ):
        """
        Args:
            store: The repository (port) for items and the ledger.
            ledger: Optional ledger service; built on the same store if not provided.
            scheduler: Optional interval scheduler; uses the default ladder if not provided.
            clock: Time source shared with the scheduler when one is built here.
        """
        self._store = store
        self._clock = clock or SystemClock()
        self._ledger = ledger or LedgerService(store)
        self._scheduler = scheduler or IntervalScheduler(clock=self._clock)

    async def record_review(self, item_id: str, quality: int) -> LearningItem:
        """
        Apply one rating to an item.

        Args:
            item_id: Item being reviewed.
            quality: Rating (0=Forgot, 1=Hard, 2=Good, 3=Easy).

        Returns:
            The item with its post-transition schedule.

        Raises:
            InvalidQuality: Rating outside 0..3 (checked before any I/O).
            ItemNotFound: No item with that ID.
            StoreUnavailable: The schedule could not be loaded or saved.
        """
        q = coerce_quality(quality)

        item = await self._get(item_id)
        index = item.schedule.interval_index
        if index > self._scheduler.last_index:
            # Stored under a longer interval table
            logger.warning(
                f"{item_id} is at rung {index}, beyond the configured table; "
                f"treating it as rung {self._scheduler.last_index}"
            )
            index = self._scheduler.last_index

        now = self._clock.now()
        # One instant for both the due date and last_reviewed_at
        result = next_state(index, q, now.date(), self._scheduler.intervals)

        sched = item.schedule
        changes = {
            "interval_index": result.next_interval_index,
            "next_review_date": result.next_review_date,
            "status": result.status,
            "last_reviewed_at": now,
            "review_count": sched.review_count + 1,
            "quality_history": [*sched.quality_history, int(q)][-QUALITY_HISTORY_WINDOW:],
            "ease_factor": sched.ease_factor,
        }

        updated = await self._update(item_id, changes)
        logger.info(
            f"Recorded {q.name} for {item_id}: rung {sched.interval_index} -> "
            f"{result.next_interval_index}, next review {result.next_review_date}"
        )

        # The schedule write is authoritative; ledger drift is tolerated.
        try:
            await self._ledger.touch(now.date())
        except StoreUnavailable as e:
            logger.warning(f"Ledger update failed after review of {item_id}: {e}")

        return updated

    async def suspend(self, item_id: str) -> LearningItem:
        """Exclude an item from due selection."""
        updated = await self._update(item_id, {"status": ItemStatus.SUSPENDED})
        logger.info(f"Suspended {item_id}")
        return updated

    async def resume(self, item_id: str) -> LearningItem:
        """
        Return a suspended item to rotation: learning if it has been reviewed
        before, new otherwise.
        """
        item = await self._get(item_id)
        status = ItemStatus.NEW if item.schedule.review_count == 0 else ItemStatus.LEARNING
        updated = await self._update(item_id, {"status": status})
        logger.info(f"Resumed {item_id} as {status.value}")
        return updated

    async def reset_to_new(self, item_id: str) -> LearningItem:
        """Restart an item's schedule from scratch. The ease factor is kept."""
        updated = await self._update(
            item_id,
            {
                "interval_index": 0,
                "next_review_date": self._clock.today(),
                "last_reviewed_at": None,
                "review_count": 0,
                "quality_history": [],
                "status": ItemStatus.NEW,
            },
        )
        logger.info(f"Reset {item_id} to new")
        return updated

    async def _get(self, item_id: str) -> LearningItem:
        item = await self._store.get_item(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        return item

    async def _update(self, item_id: str, changes: dict) -> LearningItem:
        updated = await self._store.update_schedule(item_id, changes)
        if updated is None:
            # Deleted between load and save
            raise ItemNotFound(item_id)
        return updated
