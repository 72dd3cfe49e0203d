# Infrastructure Store Adapters Package
from .memory_store import InMemoryItemStore
from .sqlite_store import SqliteItemStore

__all__ = ["InMemoryItemStore", "SqliteItemStore"]
