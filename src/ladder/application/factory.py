"""
Store Factory
Centralizes the logic for selecting the item store and wiring the services on top of it.
"""

import logging
from dataclasses import dataclass

from ladder.application.config import AppConfig
from ladder.application.review_recorder import ReviewRecorder
from ladder.application.scheduler import IntervalScheduler
from ladder.application.stats.metrics_calculator import StatisticsCalculator
from ladder.application.stats.service import LedgerService
from ladder.domain.ports import Clock, ItemStore, SystemClock
from ladder.infrastructure.adapters.memory_store import InMemoryItemStore
from ladder.infrastructure.adapters.sqlite_store import SqliteItemStore

logger = logging.getLogger(__name__)


def get_item_store(config: AppConfig) -> ItemStore:
    """
    Returns the ItemStore implementation selected by config.backend.
    """
    if config.backend == "memory":
        logger.debug("Store: in-memory")
        return InMemoryItemStore()

    logger.debug(f"Store: sqlite ({config.db_path})")
    return SqliteItemStore(config.db_path)


@dataclass
class Services:
    """The engine's services, wired to one store and one clock."""

    store: ItemStore
    clock: Clock
    scheduler: IntervalScheduler
    ledger: LedgerService
    recorder: ReviewRecorder
    calculator: StatisticsCalculator


def build_services(
    config: AppConfig,
    store: ItemStore | None = None,
    clock: Clock | None = None,
) -> Services:
    store = store or get_item_store(config)
    clock = clock or SystemClock()
    scheduler = IntervalScheduler(config.intervals, clock=clock)
    ledger = LedgerService(store)
    return Services(
        store=store,
        clock=clock,
        scheduler=scheduler,
        ledger=ledger,
        recorder=ReviewRecorder(store, ledger=ledger, scheduler=scheduler, clock=clock),
        calculator=StatisticsCalculator(scheduler.intervals),
    )
