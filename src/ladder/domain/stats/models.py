"""
Domain models for review statistics.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime


@dataclass(frozen=True)
class ReviewEvent:
    """
    A single recorded rating.

    Not persisted on its own: its effect is folded into the item's schedule
    and into the StatsLedger.

    Attributes:
        item_id: The item that was reviewed.
        quality: Rating given (0=Forgot, 1=Hard, 2=Good, 3=Easy).
        reviewed_at: When the rating was recorded.
    """

    item_id: str
    quality: int
    reviewed_at: datetime


@dataclass
class StatsLedger:
    """
    Running review totals and streaks, keyed by calendar day.

    Updated only through apply_review_to_ledger.
    """

    total_reviews: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    last_review_date: date | None = None
    reviews_by_date: dict[date, int] = field(default_factory=dict)
