"""Database layer for fastwell."""

from .engine import get_db_path, init_db
from .repositories import (
    AIRequestRepository,
    FastingSessionRepository,
    UserProfileRepository,
    WeightEntryRepository,
)
from .store import DocumentStore

__all__ = [
    "AIRequestRepository",
    "DocumentStore",
    "FastingSessionRepository",
    "get_db_path",
    "init_db",
    "UserProfileRepository",
    "WeightEntryRepository",
]
