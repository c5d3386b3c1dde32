"""Record storage backends for mistakes and retests."""

from mistake_tracker.storage.base import RecordRepository
from mistake_tracker.storage.memory import InMemoryRepository
from mistake_tracker.storage.sql import SqlRepository

__all__ = ["InMemoryRepository", "RecordRepository", "SqlRepository"]
