"""
Ledger Service — Application layer orchestrator for the streak ledger.

Loads the ledger from the store, applies one review day, and saves it back.
"""

import logging
from dataclasses import replace
from datetime import date, timedelta

from ladder.domain.ports import ItemStore
from ladder.domain.stats.models import StatsLedger

logger = logging.getLogger(__name__)


def apply_review_to_ledger(ledger: StatsLedger, day: date) -> StatsLedger:
    """
    Fold one review on `day` into the ledger and return the new ledger.

    Every call counts toward total_reviews; the streak only moves on the first
    review of a day. The input ledger is not modified.
    """
    reviews_by_date = dict(ledger.reviews_by_date)
    reviews_by_date[day] = reviews_by_date.get(day, 0) + 1

    current_streak = ledger.current_streak
    if ledger.last_review_date == day - timedelta(days=1):
        current_streak += 1
    elif ledger.last_review_date != day:
        current_streak = 1

    return replace(
        ledger,
        total_reviews=ledger.total_reviews + 1,
        current_streak=current_streak,
        longest_streak=max(ledger.longest_streak, current_streak),
        last_review_date=day,
        reviews_by_date=reviews_by_date,
    )


class LedgerService:
    """
    Application service for the per-scope StatsLedger.

    Follows Dependency Inversion: depends on the ItemStore abstraction,
    not concrete adapter implementations.
    """

    def __init__(self, store: ItemStore):
        self._store = store

    async def touch(self, day: date) -> StatsLedger:
        """
        Record one review on the given day.

        Returns:
            The ledger as persisted.
        """
        ledger = apply_review_to_ledger(await self._store.get_ledger(), day)
        await self._store.put_ledger(ledger)
        logger.debug(
            f"Ledger touched for {day}: total={ledger.total_reviews} "
            f"streak={ledger.current_streak}"
        )
        return ledger

    async def get(self) -> StatsLedger:
        return await self._store.get_ledger()

    async def reset(self) -> StatsLedger:
        """Replace the ledger with an empty one."""
        ledger = StatsLedger()
        await self._store.put_ledger(ledger)
        logger.info("Stats ledger reset")
        return ledger
