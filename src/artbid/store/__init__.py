"""Storage backends."""

from typing import Optional

from ..config import Settings, get_settings
from .base import AuctionStore
from .memory import MemoryStore


def create_store(settings: Optional[Settings] = None) -> AuctionStore:
    """Build the store selected by ``storage_backend``."""
    settings = settings or get_settings()
    if settings.storage_backend == "memory":
        return MemoryStore()

    from .mongo import MongoStore
    return MongoStore()


__all__ = ["AuctionStore", "MemoryStore", "create_store"]
