# Domain Package
from .errors import (
    InvalidInput,
    InvalidQuality,
    ItemNotFound,
    LadderError,
    NotFound,
    SessionError,
    StoreUnavailable,
)
from .models import ItemFilter, ItemStatus, LearningItem, Quality, Schedule, new_learning_item
from .ports import Clock, FixedClock, ItemStore, SystemClock
from .stats import ReviewEvent, StatsLedger

__all__ = [
    "Clock",
    "FixedClock",
    "InvalidInput",
    "InvalidQuality",
    "ItemFilter",
    "ItemNotFound",
    "ItemStatus",
    "ItemStore",
    "LadderError",
    "LearningItem",
    "NotFound",
    "Quality",
    "ReviewEvent",
    "Schedule",
    "SessionError",
    "StatsLedger",
    "StoreUnavailable",
    "SystemClock",
    "new_learning_item",
]
