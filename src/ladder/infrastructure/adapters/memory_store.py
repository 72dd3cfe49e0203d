"""
In-Memory Item Store — Infrastructure adapter backed by a dict.

Useful for tests and throwaway sessions. Copies on every read and write so
callers never share mutable state with the store.
"""

import copy
import logging
from dataclasses import replace
from typing import Any

from ladder.domain.models import ItemFilter, LearningItem
from ladder.domain.ports import ItemStore
from ladder.domain.stats.models import StatsLedger

logger = logging.getLogger(__name__)


class InMemoryItemStore(ItemStore):
    def __init__(self, items: list[LearningItem] | None = None):
        self._items: dict[str, LearningItem] = {}
        self._ledger = StatsLedger()
        for item in items or []:
            self._items[item.id] = copy.deepcopy(item)

    async def add_item(self, item: LearningItem) -> LearningItem:
        if item.id in self._items:
            raise ValueError(f"Duplicate item id: {item.id}")
        self._items[item.id] = copy.deepcopy(item)
        return copy.deepcopy(item)

    async def get_item(self, item_id: str) -> LearningItem | None:
        item = self._items.get(item_id)
        return copy.deepcopy(item) if item else None

    async def update_schedule(
        self, item_id: str, changes: dict[str, Any]
    ) -> LearningItem | None:
        item = self._items.get(item_id)
        if item is None:
            logger.debug(f"update_schedule: no item {item_id}")
            return None
        item.schedule = replace(item.schedule, **copy.deepcopy(changes))
        return copy.deepcopy(item)

    async def list_items(self, item_filter: ItemFilter | None = None) -> list[LearningItem]:
        return [
            copy.deepcopy(item)
            for item in self._items.values()
            if item_filter is None or item_filter.matches(item)
        ]

    async def get_ledger(self) -> StatsLedger:
        return copy.deepcopy(self._ledger)

    async def put_ledger(self, ledger: StatsLedger) -> None:
        self._ledger = copy.deepcopy(ledger)
