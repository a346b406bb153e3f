"""Wiring of the store, the bid engine components and the registry."""

import asyncio
from dataclasses import dataclass
from typing import Optional
import structlog

from .auction import AuctionClock, BidLedger, BidService, QueryService, RankEngine
from .config import Settings, get_settings
from .registry import Registry
from .store import AuctionStore, create_store

logger = structlog.get_logger()


@dataclass
class AuctionEngine:
    store: AuctionStore
    clock: AuctionClock
    ledger: BidLedger
    ranks: RankEngine
    bids: BidService
    queries: QueryService
    registry: Registry

    @classmethod
    def from_store(cls, store: AuctionStore, settings: Optional[Settings] = None) -> "AuctionEngine":
        settings = settings or get_settings()
        clock = AuctionClock(store)
        ledger = BidLedger(
            store,
            max_attempts=settings.admit_max_attempts,
            retry_backoff_ms=settings.admit_retry_backoff_ms,
        )
        return cls(
            store=store,
            clock=clock,
            ledger=ledger,
            ranks=RankEngine(ledger),
            bids=BidService(store, clock, ledger),
            queries=QueryService(store, ledger),
            registry=Registry(store),
        )

    async def close(self) -> None:
        await self.store.close()


# Process-wide engine
_engine: Optional[AuctionEngine] = None
_engine_lock = asyncio.Lock()


async def get_engine() -> AuctionEngine:
    """Get the process-wide engine, creating it on first use."""
    global _engine

    async with _engine_lock:
        if _engine is None:
            settings = get_settings()
            store = create_store(settings)
            await store.setup()
            _engine = AuctionEngine.from_store(store, settings)
            logger.info("engine_started", storage_backend=settings.storage_backend)

    return _engine


async def close_engine():
    global _engine
    if _engine:
        await _engine.close()
        _engine = None
        logger.info("engine_stopped")
