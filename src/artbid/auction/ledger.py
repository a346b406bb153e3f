"""Per-painting bid ledger and admission control.

A painting's ledger is the append-only list of its accepted bids. ``admit`` is
the only way a bid enters it: the floor is read and the new bid appended while
holding that painting's lock, so two submissions for the same painting are
never judged against the same floor. Locks are keyed by painting id; bids on
different paintings never wait for each other.

When several processes share one MongoDB database the in-process lock is not
enough on its own. Each bid also carries its ledger position (``seq``) and the
store refuses a second bid at the same position; the loser re-reads the
ledger and is judged again against the new floor.
"""

import asyncio
import math
import uuid
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional
import structlog

from ..errors import BidTooLowError, InvalidAmountError, LedgerConflictError, PaintingNotFoundError
from ..models import Bid, as_utc, utcnow
from ..store.base import AuctionStore
from .rank import LedgerSnapshot, current_highest_bid

logger = structlog.get_logger()


def check_amount(amount) -> float:
    """Reject non-numeric, non-finite and non-positive amounts."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise InvalidAmountError(amount)
    if not math.isfinite(amount) or amount <= 0:
        raise InvalidAmountError(amount)
    return float(amount)


class KeyedLock:
    """One asyncio.Lock per key, dropped again once nobody holds or waits on it."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class BidLedger:
    """Authoritative bid history for every painting."""

    def __init__(
        self,
        store: AuctionStore,
        max_attempts: int = 5,
        retry_backoff_ms: int = 10,
    ):
        self._store = store
        self._locks = KeyedLock()
        self._max_attempts = max(1, max_attempts)
        self._retry_backoff_ms = retry_backoff_ms

    async def snapshot(self, painting_id: str) -> LedgerSnapshot:
        """The painting and its accepted bids, in ledger order."""
        painting = await self._store.get_painting(painting_id)
        if painting is None:
            raise PaintingNotFoundError(painting_id)

        bids = await self._store.bids_for_painting(painting_id)
        return LedgerSnapshot(painting=painting, bids=tuple(bids))

    async def admit(
        self,
        painting_id: str,
        user_id: str,
        amount: float,
        now: Optional[datetime] = None,
    ) -> Bid:
        """Append a bid if it beats the painting's current floor."""
        bid, _ = await self.admit_with_snapshot(painting_id, user_id, amount, now)
        return bid

    async def admit_with_snapshot(
        self,
        painting_id: str,
        user_id: str,
        amount: float,
        now: Optional[datetime] = None,
    ) -> tuple[Bid, LedgerSnapshot]:
        """Append a bid if it beats the painting's current floor.

        Args:
            painting_id: Painting being bid on
            user_id: Bidder
            amount: Offered amount, must be finite and positive
            now: Acceptance instant (defaults to the current time)

        Returns:
            The accepted Bid and the ledger as it stood right after the append

        Raises:
            InvalidAmountError: amount is not a finite positive number
            BidTooLowError: amount does not exceed the current floor
            PaintingNotFoundError: painting does not exist
            LedgerConflictError: other writers kept winning the race
        """
        amount = check_amount(amount)
        now = as_utc(now or utcnow())

        backoff_ms = self._retry_backoff_ms
        async with self._locks.hold(painting_id):
            for attempt in range(self._max_attempts):
                snapshot = await self.snapshot(painting_id)
                floor = current_highest_bid(snapshot)
                if amount <= floor:
                    raise BidTooLowError(painting_id, amount, floor)

                # Ledger order and time order must agree even if ``now`` was
                # taken before this request waited for the lock.
                bid_time = now
                if snapshot.bids and snapshot.bids[-1].bid_time > bid_time:
                    bid_time = snapshot.bids[-1].bid_time

                bid = Bid(
                    bid_id=f"bid_{uuid.uuid4().hex[:12]}",
                    painting_id=painting_id,
                    user_id=user_id,
                    amount=amount,
                    bid_time=bid_time,
                    seq=len(snapshot.bids) + 1,
                )

                try:
                    await self._store.append_bid(bid)
                except LedgerConflictError:
                    logger.warning(
                        "ledger_conflict",
                        painting_id=painting_id,
                        seq=bid.seq,
                        attempt=attempt + 1,
                    )
                    await asyncio.sleep(backoff_ms / 1000)
                    backoff_ms *= 2
                    continue

                logger.info(
                    "bid_admitted",
                    bid_id=bid.bid_id,
                    painting_id=painting_id,
                    user_id=user_id,
                    amount=amount,
                    previous_floor=floor,
                    seq=bid.seq,
                )
                return bid, LedgerSnapshot(
                    painting=snapshot.painting,
                    bids=snapshot.bids + (bid,),
                )

        raise LedgerConflictError(painting_id)

    async def bids_for_user(self, user_id: str) -> list[Bid]:
        return await self._store.bids_for_user(user_id)

    async def all_bids(self) -> list[Bid]:
        return await self._store.list_bids()
