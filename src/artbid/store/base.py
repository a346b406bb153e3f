"""Abstract storage interface for ArtBid."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import AuctionSettings, Bid, Painting, User


class AuctionStore(ABC):
    """Persistence for paintings, users, bids and the auction window.

    Implementations keep data in process memory or in MongoDB. Bids are
    append-only: there is no update or delete for them.
    """

    # ============================================================
    # Painting Operations
    # ============================================================

    @abstractmethod
    async def create_painting(self, painting: Painting) -> None:
        ...

    @abstractmethod
    async def get_painting(self, painting_id: str) -> Optional[Painting]:
        ...

    @abstractmethod
    async def list_paintings(self) -> list[Painting]:
        """All paintings, oldest first."""
        ...

    @abstractmethod
    async def update_painting(self, painting_id: str, updates: dict) -> Optional[Painting]:
        """Apply field updates; returns the updated painting or None if absent."""
        ...

    @abstractmethod
    async def delete_painting(self, painting_id: str) -> bool:
        ...

    @abstractmethod
    async def count_paintings(self) -> int:
        ...

    # ============================================================
    # User Operations
    # ============================================================

    @abstractmethod
    async def create_user(self, user: User) -> None:
        """Insert a user. Raises DuplicateMobileError if the mobile is taken."""
        ...

    @abstractmethod
    async def get_user(self, user_id: str) -> Optional[User]:
        ...

    @abstractmethod
    async def get_user_by_mobile(self, mobile: str) -> Optional[User]:
        ...

    @abstractmethod
    async def count_users(self) -> int:
        ...

    # ============================================================
    # Bid Operations
    # ============================================================

    @abstractmethod
    async def append_bid(self, bid: Bid) -> None:
        """Append a bid to its painting's ledger.

        Raises LedgerConflictError if the painting already holds a bid with
        the same ``seq``.
        """
        ...

    @abstractmethod
    async def bids_for_painting(self, painting_id: str) -> list[Bid]:
        """A painting's ledger in append order."""
        ...

    @abstractmethod
    async def bids_for_user(self, user_id: str) -> list[Bid]:
        """Every bid a user placed, newest first."""
        ...

    @abstractmethod
    async def list_bids(self) -> list[Bid]:
        """Every bid, oldest first."""
        ...

    @abstractmethod
    async def bid_totals(self) -> tuple[int, float]:
        """(number of bids, sum of bid amounts) across all paintings."""
        ...

    # ============================================================
    # Auction Settings
    # ============================================================

    @abstractmethod
    async def get_auction_settings(self) -> Optional[AuctionSettings]:
        ...

    @abstractmethod
    async def set_auction_settings(self, settings: AuctionSettings) -> None:
        ...

    async def setup(self) -> None:
        """Prepare indexes or other backing structures."""
        pass

    async def close(self) -> None:
        """Clean up resources."""
        pass
