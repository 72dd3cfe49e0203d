"""
Ports (interfaces) for persistence and time.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timezone
from typing import Any

from .models import ItemFilter, LearningItem
from .stats.models import StatsLedger


class ItemStore(ABC):
    """
    Port for loading and saving learning items and the stats ledger.

    Implementations:
        - InMemoryItemStore: Dict-backed, for tests and ephemeral use.
        - SqliteItemStore: Persists items and the ledger in a SQLite file.

    Every method either completes or raises StoreUnavailable; the store is
    the transaction boundary.
    """

    @abstractmethod
    async def add_item(self, item: LearningItem) -> LearningItem:
        """Insert a new item produced by the generation step."""
        pass

    @abstractmethod
    async def get_item(self, item_id: str) -> LearningItem | None:
        """
        Fetch an item by ID.

        Returns:
            The item, or None if the store has no item with that ID.
        """
        pass

    @abstractmethod
    async def update_schedule(
        self, item_id: str, changes: dict[str, Any]
    ) -> LearningItem | None:
        """
        Merge the given schedule fields into the stored item.

        Args:
            item_id: Item to update.
            changes: Schedule field names mapped to new values. Fields not
                present are left unchanged.

        Returns:
            The updated item, or None if the item does not exist.
        """
        pass

    @abstractmethod
    async def list_items(self, item_filter: ItemFilter | None = None) -> list[LearningItem]:
        """List items matching the filter (all items when None)."""
        pass

    @abstractmethod
    async def get_ledger(self) -> StatsLedger:
        """Return the stats ledger, an empty one if none was saved yet."""
        pass

    @abstractmethod
    async def put_ledger(self, ledger: StatsLedger) -> None:
        pass


class Clock(ABC):
    """Time source. Injected so date arithmetic is deterministic under test."""

    @abstractmethod
    def now(self) -> datetime:
        pass

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """A clock that only moves when told to."""

    def __init__(self, instant: datetime):
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def set(self, instant: datetime) -> None:
        self.instant = instant
