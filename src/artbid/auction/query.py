"""Read-only projections for bid history, painting listings and the dashboard."""

from typing import Optional

from ..errors import PaintingNotFoundError, UserNotFoundError
from ..models import (
    AdminBidRow,
    BidderSummary,
    DashboardTotals,
    Painting,
    PaintingSummary,
    PaintingView,
    User,
    UserBidRow,
)
from ..store.base import AuctionStore
from .ledger import BidLedger
from .rank import LedgerSnapshot, current_highest_bid, rank_of, ranked, total_bidders


def _summary(painting: Painting) -> PaintingSummary:
    return PaintingSummary(
        painting_id=painting.painting_id,
        painting_name=painting.painting_name,
        artist_name=painting.artist_name,
        image_url=painting.image_url,
    )


def _view(snapshot: LedgerSnapshot) -> PaintingView:
    painting = snapshot.painting
    return PaintingView(
        painting_id=painting.painting_id,
        artist_name=painting.artist_name,
        painting_name=painting.painting_name,
        base_price=painting.base_price,
        image_url=painting.image_url,
        current_price=current_highest_bid(snapshot),
        total_bidders=total_bidders(snapshot),
        total_bids=len(snapshot.bids),
    )


class QueryService:
    """Read-only views over the ledger. Never mutates anything."""

    def __init__(self, store: AuctionStore, ledger: BidLedger):
        self._store = store
        self._ledger = ledger

    async def _snapshot_or_none(self, painting_id: str) -> Optional[LedgerSnapshot]:
        try:
            return await self._ledger.snapshot(painting_id)
        except PaintingNotFoundError:
            return None

    async def bids_for_user(self, mobile: str) -> list[UserBidRow]:
        """Every bid the user has placed, newest first, with its current rank.

        Rows for the same painting share one snapshot. Bids on paintings that
        have since been removed from the catalog are left out.
        """
        user = await self._store.get_user_by_mobile(mobile)
        if not user:
            raise UserNotFoundError(mobile)

        bids = await self._ledger.bids_for_user(user.user_id)

        snapshots: dict[str, Optional[LedgerSnapshot]] = {}
        rows = []
        for bid in bids:
            if bid.painting_id not in snapshots:
                snapshots[bid.painting_id] = await self._snapshot_or_none(bid.painting_id)
            snapshot = snapshots[bid.painting_id]
            if snapshot is None:
                continue

            rows.append(UserBidRow(
                bid_id=bid.bid_id,
                painting=_summary(snapshot.painting),
                amount=bid.amount,
                bid_time=bid.bid_time,
                rank=rank_of(snapshot, bid.bid_id),
                current_highest_bid=current_highest_bid(snapshot),
            ))

        return rows

    async def painting_view(self, painting_id: str) -> PaintingView:
        return _view(await self._ledger.snapshot(painting_id))

    async def list_paintings(self) -> list[PaintingView]:
        views = []
        for painting in await self._store.list_paintings():
            snapshot = await self._snapshot_or_none(painting.painting_id)
            if snapshot is not None:
                views.append(_view(snapshot))
        return views

    async def all_bids(self) -> list[AdminBidRow]:
        """Every bid grouped by painting, rank 1 first within each painting."""
        users: dict[str, Optional[User]] = {}
        rows = []
        for painting in await self._store.list_paintings():
            snapshot = await self._snapshot_or_none(painting.painting_id)
            if snapshot is None:
                continue

            for rank, bid in ranked(snapshot):
                if bid.user_id not in users:
                    users[bid.user_id] = await self._store.get_user(bid.user_id)
                user = users[bid.user_id]

                rows.append(AdminBidRow(
                    bid_id=bid.bid_id,
                    painting=_summary(snapshot.painting),
                    user=BidderSummary(
                        user_id=user.user_id,
                        first_name=user.first_name,
                        last_name=user.last_name,
                        mobile=user.mobile,
                    ) if user else None,
                    amount=bid.amount,
                    bid_time=bid.bid_time,
                    rank=rank,
                ))

        return rows

    async def dashboard_totals(self) -> DashboardTotals:
        total_bids, total_value = await self._store.bid_totals()
        return DashboardTotals(
            total_paintings=await self._store.count_paintings(),
            total_users=await self._store.count_users(),
            total_bids=total_bids,
            total_bid_value=total_value,
        )
