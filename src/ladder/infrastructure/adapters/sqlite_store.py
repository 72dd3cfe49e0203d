"""
SQLite Item Store — Infrastructure adapter for a local SQLite database.

Items keep their scheduling state in a JSON ``schedule`` column (the same
keys as a journal entry's ``srs_data`` record), with ``next_review_date``
and ``status`` mirrored into plain columns for due queries.
"""

import json
import logging
import sqlite3
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path
from typing import Any, NoReturn

from ladder.domain.constants import DEFAULT_EASE_FACTOR, LEDGER_ROW_ID
from ladder.domain.errors import StoreUnavailable
from ladder.domain.models import ItemFilter, ItemStatus, LearningItem, Schedule
from ladder.domain.ports import ItemStore
from ladder.domain.stats.models import StatsLedger

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    created_at TEXT NOT NULL,
    category TEXT NOT NULL DEFAULT '',
    content TEXT NOT NULL DEFAULT '{}',
    schedule TEXT NOT NULL,
    next_review_date TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'new'
);
CREATE TABLE IF NOT EXISTS ledger (
    id TEXT PRIMARY KEY,
    data TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_items_next_review ON items(next_review_date);
CREATE INDEX IF NOT EXISTS idx_items_status ON items(status);
"""


def connect(db_path: Path | str) -> sqlite3.Connection:
    """Connect to the SQLite database and create tables."""
    if str(db_path) != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    return conn


def schedule_to_dict(schedule: Schedule) -> dict[str, Any]:
    return {
        "interval_index": schedule.interval_index,
        "next_review_date": schedule.next_review_date.isoformat(),
        "last_reviewed": (
            schedule.last_reviewed_at.isoformat() if schedule.last_reviewed_at else None
        ),
        "review_count": schedule.review_count,
        "quality_history": list(schedule.quality_history),
        "status": ItemStatus(schedule.status).value,
        "ease_factor": schedule.ease_factor,
    }


def schedule_from_dict(data: dict[str, Any]) -> Schedule:
    last_reviewed = data.get("last_reviewed")
    return Schedule(
        interval_index=int(data.get("interval_index", 0)),
        next_review_date=date.fromisoformat(data["next_review_date"]),
        last_reviewed_at=datetime.fromisoformat(last_reviewed) if last_reviewed else None,
        review_count=int(data.get("review_count", 0)),
        quality_history=[int(q) for q in data.get("quality_history", [])],
        status=ItemStatus(data.get("status", ItemStatus.NEW.value)),
        ease_factor=float(data.get("ease_factor", DEFAULT_EASE_FACTOR)),
    )


def ledger_to_dict(ledger: StatsLedger) -> dict[str, Any]:
    return {
        "total_reviews": ledger.total_reviews,
        "current_streak": ledger.current_streak,
        "longest_streak": ledger.longest_streak,
        "last_review_date": (
            ledger.last_review_date.isoformat() if ledger.last_review_date else None
        ),
        "reviews_by_date": {d.isoformat(): n for d, n in sorted(ledger.reviews_by_date.items())},
    }


def ledger_from_dict(data: dict[str, Any]) -> StatsLedger:
    last = data.get("last_review_date")
    return StatsLedger(
        total_reviews=int(data.get("total_reviews", 0)),
        current_streak=int(data.get("current_streak", 0)),
        longest_streak=int(data.get("longest_streak", 0)),
        last_review_date=date.fromisoformat(last) if last else None,
        reviews_by_date={
            date.fromisoformat(d): int(n) for d, n in data.get("reviews_by_date", {}).items()
        },
    )


class SqliteItemStore(ItemStore):
    """
    Persists items and the stats ledger in a SQLite file.

    Any sqlite3 error is logged and re-raised as StoreUnavailable.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path
        try:
            self.conn = connect(db_path)
        except sqlite3.Error as e:
            logger.error(f"Could not open database {db_path}: {e}")
            raise StoreUnavailable(f"Could not open database {db_path}: {e}") from e

    def close(self) -> None:
        self.conn.close()

    async def add_item(self, item: LearningItem) -> LearningItem:
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO items
                        (id, created_at, category, content, schedule, next_review_date, status)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        item.id,
                        item.created_at.isoformat(),
                        item.category,
                        json.dumps(item.content, ensure_ascii=False),
                        json.dumps(schedule_to_dict(item.schedule)),
                        item.schedule.next_review_date.isoformat(),
                        ItemStatus(item.schedule.status).value,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise ValueError(f"Duplicate item id: {item.id}") from e
        except sqlite3.Error as e:
            self._fail("add_item", e)
        return item

    async def get_item(self, item_id: str) -> LearningItem | None:
        try:
            row = self.conn.execute("SELECT * FROM items WHERE id = ?", (item_id,)).fetchone()
        except sqlite3.Error as e:
            self._fail("get_item", e)
        return self._row_to_item(row) if row else None

    async def update_schedule(
        self, item_id: str, changes: dict[str, Any]
    ) -> LearningItem | None:
        try:
            with self.conn:
                row = self.conn.execute(
                    "SELECT * FROM items WHERE id = ?", (item_id,)
                ).fetchone()
                if row is None:
                    return None
                item = self._row_to_item(row)
                item.schedule = replace(item.schedule, **changes)
                self.conn.execute(
                    """
                    UPDATE items
                    SET schedule = ?, next_review_date = ?, status = ?
                    WHERE id = ?
                    """,
                    (
                        json.dumps(schedule_to_dict(item.schedule)),
                        item.schedule.next_review_date.isoformat(),
                        ItemStatus(item.schedule.status).value,
                        item_id,
                    ),
                )
        except sqlite3.Error as e:
            self._fail("update_schedule", e)
        return item

    async def list_items(self, item_filter: ItemFilter | None = None) -> list[LearningItem]:
        query = "SELECT * FROM items WHERE 1=1"
        params: list = []

        if item_filter is not None:
            if item_filter.due_on_or_before is not None:
                query += " AND next_review_date <= ?"
                params.append(item_filter.due_on_or_before.isoformat())
            if item_filter.due_after is not None:
                query += " AND next_review_date > ?"
                params.append(item_filter.due_after.isoformat())
            if item_filter.exclude_statuses:
                excluded = sorted(ItemStatus(s).value for s in item_filter.exclude_statuses)
                query += f" AND status NOT IN ({', '.join('?' for _ in excluded)})"
                params.extend(excluded)
            if item_filter.status is not None:
                query += " AND status = ?"
                params.append(ItemStatus(item_filter.status).value)
            if item_filter.category is not None:
                query += " AND category = ?"
                params.append(item_filter.category)

        query += " ORDER BY created_at ASC, id ASC"

        try:
            rows = self.conn.execute(query, params).fetchall()
        except sqlite3.Error as e:
            self._fail("list_items", e)
        return [self._row_to_item(row) for row in rows]

    async def get_ledger(self) -> StatsLedger:
        try:
            row = self.conn.execute(
                "SELECT data FROM ledger WHERE id = ?", (LEDGER_ROW_ID,)
            ).fetchone()
        except sqlite3.Error as e:
            self._fail("get_ledger", e)
        if row is None:
            return StatsLedger()
        return ledger_from_dict(json.loads(row["data"]))

    async def put_ledger(self, ledger: StatsLedger) -> None:
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO ledger (id, data) VALUES (?, ?)
                    ON CONFLICT(id) DO UPDATE SET data = excluded.data
                    """,
                    (LEDGER_ROW_ID, json.dumps(ledger_to_dict(ledger))),
                )
        except sqlite3.Error as e:
            self._fail("put_ledger", e)

    def _row_to_item(self, row: sqlite3.Row) -> LearningItem:
        return LearningItem(
            id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            category=row["category"],
            content=json.loads(row["content"]),
            schedule=schedule_from_dict(json.loads(row["schedule"])),
        )

    def _fail(self, operation: str, error: sqlite3.Error) -> NoReturn:
        logger.warning(f"SQLite {operation} failed on {self.db_path}: {error}")
        raise StoreUnavailable(f"{operation} failed: {error}") from error
