"""Bid submission."""

from datetime import datetime
from typing import Optional
import structlog

from ..errors import ArtBidError, AuctionNotOpenError, PaintingNotFoundError, UserNotFoundError
from ..models import AuctionState, BidReceipt, as_utc, utcnow
from ..store.base import AuctionStore
from .clock import AuctionClock
from .ledger import BidLedger, check_amount
from .rank import standing

logger = structlog.get_logger()


class BidService:
    """Runs one bid submission end to end.

    Lookups, the auction window and the amount are all checked before the
    ledger is touched, so a rejected bid leaves no trace except the log line.
    """

    def __init__(self, store: AuctionStore, clock: AuctionClock, ledger: BidLedger):
        self._store = store
        self._clock = clock
        self._ledger = ledger

    async def submit_bid(
        self,
        mobile: str,
        painting_id: str,
        amount: float,
        now: Optional[datetime] = None,
    ) -> BidReceipt:
        """Submit a bid on a painting.

        The auction window is checked against ``now``, the instant the request
        arrived, and ``now`` becomes the bid's time. A request that arrived
        before ``end_date`` is still admitted if it waits for the painting's
        lock past that instant.

        Args:
            mobile: Bidder's registered mobile number
            painting_id: Painting to bid on
            amount: Offered amount
            now: Submission instant (defaults to the current time)

        Returns:
            BidReceipt with the bid's rank and the painting's price facts
        """
        now = as_utc(now or utcnow())
        try:
            receipt = await self._submit(mobile, painting_id, amount, now)
        except ArtBidError as e:
            logger.info(
                "bid_rejected",
                mobile=mobile,
                painting_id=painting_id,
                amount=amount,
                reason=e.code,
            )
            raise

        logger.info(
            "bid_submitted",
            bid_id=receipt.bid_id,
            painting_id=painting_id,
            amount=receipt.amount,
            rank=receipt.rank,
            total_bidders=receipt.total_bidders,
        )
        return receipt

    async def _submit(self, mobile: str, painting_id: str, amount: float, now: datetime) -> BidReceipt:
        user = await self._store.get_user_by_mobile(mobile)
        if not user:
            raise UserNotFoundError(mobile)

        painting = await self._store.get_painting(painting_id)
        if not painting:
            raise PaintingNotFoundError(painting_id)

        state = await self._clock.state(now)
        if state != AuctionState.OPEN:
            raise AuctionNotOpenError(state.value)

        amount = check_amount(amount)

        bid, snapshot = await self._ledger.admit_with_snapshot(
            painting_id, user.user_id, amount, now
        )
        facts = standing(snapshot, bid.bid_id)

        return BidReceipt(
            bid_id=bid.bid_id,
            painting_id=painting_id,
            amount=bid.amount,
            bid_time=bid.bid_time,
            rank=facts.rank,
            current_highest_bid=facts.current_highest_bid,
            total_bidders=facts.total_bidders,
        )
