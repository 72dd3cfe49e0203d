"""Service for creating items with stable IDs."""

import logging
from typing import Any

from ulid import ULID

from ladder.domain.constants import ITEM_ID_PREFIX
from ladder.domain.models import LearningItem, new_learning_item
from ladder.domain.ports import Clock, ItemStore

logger = logging.getLogger(__name__)


def generate_item_id() -> str:
    """Generate a stable item ID using ULID."""
    return f"{ITEM_ID_PREFIX}{ULID()}"


async def register_item(
    store: ItemStore,
    clock: Clock,
    category: str = "",
    content: dict[str, Any] | None = None,
) -> LearningItem:
    """
    Store an item produced by the generation step in its initial state:
    status new, first rung, due today.
    """
    item = new_learning_item(
        generate_item_id(), clock.now(), category=category, content=content
    )
    await store.add_item(item)
    logger.info(f"Registered {item.id} (category={category or '-'})")
    return item
