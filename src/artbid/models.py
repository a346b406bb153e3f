"""Pydantic models for all ArtBid collections and projections."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and normalize aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ============================================================
# Enums
# ============================================================

class AuctionState(str, Enum):
    NOT_STARTED = "not_started"
    OPEN = "open"
    CLOSED = "closed"


# ============================================================
# Stored Records
# ============================================================

class Painting(BaseModel):
    """Catalog entry. The current price is derived from the bid ledger."""
    painting_id: str
    artist_name: str
    painting_name: str
    base_price: float
    image_url: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class User(BaseModel):
    """Registered bidder, keyed by mobile number."""
    user_id: str
    first_name: str
    last_name: str
    mobile: str
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Bid(BaseModel):
    """Accepted bid. Never edited or removed once admitted."""
    bid_id: str
    painting_id: str
    user_id: str
    amount: float
    bid_time: datetime
    seq: int  # 1-based position in the painting's ledger

    class Config:
        frozen = True


class AuctionSettings(BaseModel):
    """The single auction window, [start_date, end_date)."""
    start_date: datetime
    end_date: datetime
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("start_date", "end_date", "updated_at")
    @classmethod
    def _normalize_utc(cls, value: datetime) -> datetime:
        return as_utc(value)


# ============================================================
# Derived Views
# ============================================================

class BidStanding(BaseModel):
    """Rank facts for one bid, all taken from the same ledger snapshot."""
    bid_id: str
    rank: int
    current_highest_bid: float
    total_bidders: int


class BidReceipt(BaseModel):
    """Result of an accepted bid submission."""
    bid_id: str
    painting_id: str
    amount: float
    bid_time: datetime
    rank: int
    current_highest_bid: float
    total_bidders: int


class PaintingSummary(BaseModel):
    painting_id: str
    painting_name: str
    artist_name: str
    image_url: Optional[str] = None


class PaintingView(BaseModel):
    """Painting as displayed, with its ledger-derived price facts."""
    painting_id: str
    artist_name: str
    painting_name: str
    base_price: float
    image_url: Optional[str] = None
    current_price: float
    total_bidders: int
    total_bids: int


class UserBidRow(BaseModel):
    """One row of a user's bid history."""
    bid_id: str
    painting: PaintingSummary
    amount: float
    bid_time: datetime
    rank: int
    current_highest_bid: float


class BidderSummary(BaseModel):
    user_id: str
    first_name: str
    last_name: str
    mobile: str


class AdminBidRow(BaseModel):
    """One row of the admin bid table."""
    bid_id: str
    painting: PaintingSummary
    user: Optional[BidderSummary] = None
    amount: float
    bid_time: datetime
    rank: int


class DashboardTotals(BaseModel):
    total_paintings: int
    total_users: int
    total_bids: int
    total_bid_value: float
