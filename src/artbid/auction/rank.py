"""Bid ranking over a painting's ledger.

Everything here is derived, never stored: the current price, each bid's rank
and the number of distinct bidders all come from one immutable snapshot of the
painting's ledger, so the three facts always agree with each other.

Because the ledger only admits bids that beat the current highest amount, no
two bids on a painting share an amount and ranks form a dense 1..N sequence.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..errors import BidNotFoundError
from ..models import Bid, BidStanding, Painting

if TYPE_CHECKING:
    from .ledger import BidLedger


@dataclass(frozen=True)
class LedgerSnapshot:
    """A painting and its accepted bids as read at one instant."""
    painting: Painting
    bids: tuple[Bid, ...]

    @property
    def painting_id(self) -> str:
        return self.painting.painting_id


def current_highest_bid(snapshot: LedgerSnapshot) -> float:
    """Highest accepted amount, or the base price when nobody has bid."""
    if not snapshot.bids:
        return snapshot.painting.base_price
    return max(bid.amount for bid in snapshot.bids)


def total_bidders(snapshot: LedgerSnapshot) -> int:
    """Distinct users with at least one accepted bid."""
    return len({bid.user_id for bid in snapshot.bids})


def rank_of(snapshot: LedgerSnapshot, bid_id: str) -> int:
    """1 + the number of bids with a strictly greater amount."""
    for bid in snapshot.bids:
        if bid.bid_id == bid_id:
            return 1 + sum(1 for other in snapshot.bids if other.amount > bid.amount)
    raise BidNotFoundError(bid_id)


def ranked(snapshot: LedgerSnapshot) -> list[tuple[int, Bid]]:
    """All bids with their rank, rank 1 first."""
    ordered = sorted(snapshot.bids, key=lambda b: (-b.amount, b.seq))
    return [(i + 1, bid) for i, bid in enumerate(ordered)]


def standing(snapshot: LedgerSnapshot, bid_id: str) -> BidStanding:
    """Rank, current highest bid and bidder count for one bid."""
    return BidStanding(
        bid_id=bid_id,
        rank=rank_of(snapshot, bid_id),
        current_highest_bid=current_highest_bid(snapshot),
        total_bidders=total_bidders(snapshot),
    )


class RankEngine:
    """Per-painting rank queries, each answered from a single snapshot."""

    def __init__(self, ledger: "BidLedger"):
        self._ledger = ledger

    async def current_highest_bid(self, painting_id: str) -> float:
        return current_highest_bid(await self._ledger.snapshot(painting_id))

    async def rank_of(self, painting_id: str, bid_id: str) -> int:
        return rank_of(await self._ledger.snapshot(painting_id), bid_id)

    async def total_bidders(self, painting_id: str) -> int:
        return total_bidders(await self._ledger.snapshot(painting_id))

    async def standing(self, painting_id: str, bid_id: str) -> BidStanding:
        return standing(await self._ledger.snapshot(painting_id), bid_id)

    async def ranked(self, painting_id: str) -> list[tuple[int, Bid]]:
        return ranked(await self._ledger.snapshot(painting_id))
