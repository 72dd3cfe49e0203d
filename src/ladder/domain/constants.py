"""Centralized constants for the ladder scheduling engine.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Interval ladder ----------
# Day offsets from "today": same day / 1 day / 3 days / 1 week / 2 weeks / 1 month
DEFAULT_INTERVALS: tuple[int, ...] = (0, 1, 3, 7, 14, 30)

INTERVAL_LABELS = (
    "Today",
    "Tomorrow",
    "3 days later",
    "Week later",
    "2 weeks later",
    "Month later",
)

# ---------- Scheduling state ----------
QUALITY_HISTORY_WINDOW = 10
DEFAULT_EASE_FACTOR = 2.5
MAX_QUALITY = 3

# ---------- Statistics ----------
DUE_SOON_DAYS = 7
RECENT_QUALITY_WINDOW = 3
PESSIMISM_FACTOR = 1.5
MASTERY_TIMELINE_LIMIT = 10
DEFAULT_CATEGORY = "other"

# ---------- Sessions ----------
DEFAULT_DAILY_REVIEW_LIMIT = 20
DEFAULT_REVIEW_ORDER = "oldest_first"

# ---------- Storage ----------
ITEM_ID_PREFIX = "item_"
LEDGER_ROW_ID = "global"
