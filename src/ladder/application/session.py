"""
Review session orchestrator.

A ReviewSession is owned by its caller: one object per sitting, so several
sessions (e.g. one per user in a server) never share state.

    IDLE --start()--> IN_PROGRESS --last rating / complete()--> COMPLETE
      ^                                                            |
      +------------------------------ end() -----------------------+
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ladder.application.queue_builder import ReviewOrder, build_review_queue
from ladder.application.review_recorder import ReviewRecorder
from ladder.application.stats.metrics_calculator import QualityBreakdown, quality_breakdown
from ladder.domain.errors import SessionError
from ladder.domain.models import LearningItem
from ladder.domain.ports import Clock, SystemClock
from ladder.domain.stats.models import ReviewEvent

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"


@dataclass(frozen=True)
class SessionProgress:
    current: int  # 1-based position
    total: int
    percentage: float
    remaining: int


@dataclass(frozen=True)
class SessionSummary:
    total_reviews: int
    duration_seconds: int
    duration_minutes: float
    ratings_breakdown: QualityBreakdown
    average_quality: float
    started_at: datetime
    ended_at: datetime


class ReviewSession:
    """
    Steps through an ordered set of due items, recording one rating per item.

    Calls against one session must be serialized: await record_current()
    before calling advance().
    """

    def __init__(
        self,
        recorder: ReviewRecorder,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ):
        self._recorder = recorder
        self._clock = clock or SystemClock()
        self._rng = rng
        self._reset()

    def _reset(self) -> None:
        self.state = SessionState.IDLE
        self.items: list[LearningItem] = []
        self.current_index = 0
        self.started_at: datetime | None = None
        self.ratings: list[ReviewEvent] = []
        self._summary: SessionSummary | None = None

    def start(
        self,
        due_items: list[LearningItem],
        order: ReviewOrder = "oldest_first",
        limit: int | None = None,
    ) -> bool:
        """
        Open the session over the given items.

        Returns:
            False (and no state change) when there is nothing to review.

        Raises:
            SessionError: A session is already in progress; complete() or end() it first.
        """
        if self.state == SessionState.IN_PROGRESS:
            raise SessionError("A review session is already in progress")
        if not due_items:
            return False

        queue = build_review_queue(due_items, order=order, limit=limit, rng=self._rng)

        self.items = queue
        self.current_index = 0
        self.started_at = self._clock.now()
        self.ratings = []
        self._summary = None
        self.state = SessionState.IN_PROGRESS
        logger.info(f"Review session started: {len(queue)} items, order={order}")
        return True

    def current(self) -> LearningItem | None:
        if not self.items:
            return None
        return self.items[self.current_index]

    def has_next(self) -> bool:
        return self.current_index < len(self.items) - 1

    def advance(self) -> LearningItem | None:
        """
        Move to the next item and return it, or None at the end of the queue.
        """
        if not self.has_next():
            return None
        self.current_index += 1
        return self.current()

    async def record_current(self, quality: int) -> LearningItem:
        """
        Rate the current item through the recorder and keep the rating.

        Rating the last item completes the session.
        """
        if self.state != SessionState.IN_PROGRESS:
            raise SessionError(f"Cannot record a rating while the session is {self.state.value}")
        item = self.current()
        if item is None:
            raise SessionError("No item in session")

        updated = await self._recorder.record_review(item.id, quality)
        self.items[self.current_index] = updated
        self.ratings.append(
            ReviewEvent(item_id=item.id, quality=int(quality), reviewed_at=self._clock.now())
        )

        if not self.has_next():
            self.complete()
        return updated

    def progress(self) -> SessionProgress:
        total = len(self.items)
        if total == 0:
            return SessionProgress(current=0, total=0, percentage=0.0, remaining=0)
        position = self.current_index + 1
        return SessionProgress(
            current=position,
            total=total,
            percentage=position / total * 100,
            remaining=total - position,
        )

    def complete(self) -> SessionSummary:
        """
        Finish the session (early or after the last rating) and freeze its summary.
        """
        if self.state == SessionState.COMPLETE and self._summary is not None:
            return self._summary
        if self.state != SessionState.IN_PROGRESS or self.started_at is None:
            raise SessionError("No session in progress")

        ended_at = self._clock.now()
        elapsed = (ended_at - self.started_at).total_seconds()
        qualities = [r.quality for r in self.ratings]

        self._summary = SessionSummary(
            total_reviews=len(self.ratings),
            duration_seconds=round(elapsed),
            duration_minutes=round(elapsed / 60, 1),
            ratings_breakdown=quality_breakdown(qualities),
            average_quality=round(sum(qualities) / len(qualities), 2) if qualities else 0.0,
            started_at=self.started_at,
            ended_at=ended_at,
        )
        self.state = SessionState.COMPLETE
        logger.info(
            f"Review session complete: {self._summary.total_reviews} reviews "
            f"in {self._summary.duration_seconds}s"
        )
        return self._summary

    def summary(self) -> SessionSummary:
        """Summary of a completed session. Must be read before end()."""
        if self.state != SessionState.COMPLETE or self._summary is None:
            raise SessionError("Session summary is only available once the session is complete")
        return self._summary

    def end(self) -> None:
        """Discard the session unconditionally and return to IDLE."""
        self._reset()
