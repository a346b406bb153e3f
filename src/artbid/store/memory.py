"""In-process store for single-worker deployments, demos and tests."""

from typing import Optional

from ..errors import DuplicateMobileError, LedgerConflictError
from ..models import AuctionSettings, Bid, Painting, User
from .base import AuctionStore


class MemoryStore(AuctionStore):
    """Keeps every collection in dicts owned by the running event loop.

    None of the methods await, so each one runs as a single step on the loop
    and readers never see a half-applied write.
    """

    def __init__(self):
        self._paintings: dict[str, Painting] = {}
        self._users: dict[str, User] = {}
        self._user_ids_by_mobile: dict[str, str] = {}
        self._ledgers: dict[str, list[Bid]] = {}
        self._bids: list[Bid] = []
        self._settings: Optional[AuctionSettings] = None

    # Paintings

    async def create_painting(self, painting: Painting) -> None:
        self._paintings[painting.painting_id] = painting

    async def get_painting(self, painting_id: str) -> Optional[Painting]:
        return self._paintings.get(painting_id)

    async def list_paintings(self) -> list[Painting]:
        return sorted(self._paintings.values(), key=lambda p: p.created_at)

    async def update_painting(self, painting_id: str, updates: dict) -> Optional[Painting]:
        painting = self._paintings.get(painting_id)
        if painting is None:
            return None
        painting = painting.model_copy(update=updates)
        self._paintings[painting_id] = painting
        return painting

    async def delete_painting(self, painting_id: str) -> bool:
        return self._paintings.pop(painting_id, None) is not None

    async def count_paintings(self) -> int:
        return len(self._paintings)

    # Users

    async def create_user(self, user: User) -> None:
        if user.mobile in self._user_ids_by_mobile:
            raise DuplicateMobileError(user.mobile)
        self._users[user.user_id] = user
        self._user_ids_by_mobile[user.mobile] = user.user_id

    async def get_user(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def get_user_by_mobile(self, mobile: str) -> Optional[User]:
        user_id = self._user_ids_by_mobile.get(mobile)
        return self._users.get(user_id) if user_id else None

    async def count_users(self) -> int:
        return len(self._users)

    # Bids

    async def append_bid(self, bid: Bid) -> None:
        ledger = self._ledgers.setdefault(bid.painting_id, [])
        if bid.seq != len(ledger) + 1:
            raise LedgerConflictError(bid.painting_id, bid.seq)
        ledger.append(bid)
        self._bids.append(bid)

    async def bids_for_painting(self, painting_id: str) -> list[Bid]:
        return list(self._ledgers.get(painting_id, ()))

    async def bids_for_user(self, user_id: str) -> list[Bid]:
        bids = [b for b in reversed(self._bids) if b.user_id == user_id]
        return sorted(bids, key=lambda b: b.bid_time, reverse=True)

    async def list_bids(self) -> list[Bid]:
        return list(self._bids)

    async def bid_totals(self) -> tuple[int, float]:
        return len(self._bids), sum(b.amount for b in self._bids)

    # Settings

    async def get_auction_settings(self) -> Optional[AuctionSettings]:
        return self._settings

    async def set_auction_settings(self, settings: AuctionSettings) -> None:
        self._settings = settings
