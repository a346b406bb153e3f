# tests/conftest.py
"""
Shared pytest fixtures for ArtBid tests.

Provides:
- An in-memory engine per test
- A store that yields to the event loop on every call, so concurrent
  submissions really interleave
- Paintings, bidders and an open auction window
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from artbid.config import Settings
from artbid.engine import AuctionEngine
from artbid.store import MemoryStore


START = datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc)
END = START + timedelta(days=7)
DURING = START + timedelta(days=1)


class YieldingStore(MemoryStore):
    """MemoryStore that hands control back to the loop around reads and writes."""

    async def get_painting(self, painting_id):
        await asyncio.sleep(0)
        return await super().get_painting(painting_id)

    async def bids_for_painting(self, painting_id):
        await asyncio.sleep(0)
        bids = await super().bids_for_painting(painting_id)
        await asyncio.sleep(0)
        return bids

    async def append_bid(self, bid):
        await asyncio.sleep(0)
        await super().append_bid(bid)


# ═══════════════════════════════════════════════════════
# FIXTURES - Engine
# ═══════════════════════════════════════════════════════

@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        storage_backend="memory",
        admin_token="",
        admit_max_attempts=3,
        admit_retry_backoff_ms=0,
    )


@pytest.fixture
def store():
    return YieldingStore()


@pytest.fixture
def engine(store, settings):
    return AuctionEngine.from_store(store, settings)


# ═══════════════════════════════════════════════════════
# FIXTURES - Auction Data
# ═══════════════════════════════════════════════════════

@pytest.fixture
async def open_auction(engine):
    return await engine.clock.configure(START, END)


@pytest.fixture
async def painting(engine):
    return await engine.registry.create_painting("M. F. Husain", "Horses in Motion", 1000)


@pytest.fixture
async def second_painting(engine):
    return await engine.registry.create_painting("S. H. Raza", "Bindu", 5000)


@pytest.fixture
async def bidder(engine):
    return await engine.registry.register_user("Asha", "Rao", "9876543210")


@pytest.fixture
async def other_bidder(engine):
    return await engine.registry.register_user("Vikram", "Singh", "9123456780")
