"""Error taxonomy for ArtBid.

Every business error carries a stable ``code`` and the HTTP status the API
reports it with. Anything that is not an ``ArtBidError`` is an internal failure
and is reported as an opaque 500.
"""

from typing import Any, Optional


class ArtBidError(Exception):
    """Base class for errors reported back to the caller."""

    code = "artbid_error"
    status_code = 400

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.code,
            "message": self.message,
            **self.details,
        }


# ============================================================
# Bid Admission
# ============================================================

class AuctionNotOpenError(ArtBidError):
    """Bid attempted outside the configured auction window."""

    code = "auction_not_open"
    status_code = 403

    def __init__(self, state: str):
        super().__init__(f"Auction is not open (state: {state})", state=state)
        self.state = state


class BidTooLowError(ArtBidError):
    """Bid does not exceed the painting's current floor."""

    code = "bid_too_low"
    status_code = 409

    def __init__(self, painting_id: str, amount: float, floor: float):
        super().__init__(
            f"Bid of {amount:g} must be higher than the current price {floor:g}",
            painting_id=painting_id,
            amount=amount,
            floor=floor,
        )
        self.painting_id = painting_id
        self.amount = amount
        self.floor = floor


class InvalidAmountError(ArtBidError):
    code = "invalid_amount"
    status_code = 422

    def __init__(self, amount: Any):
        super().__init__(f"Bid amount must be a positive number, got {amount!r}")
        self.amount = amount


class LedgerConflictError(ArtBidError):
    """Another writer appended to the same painting's ledger first."""

    code = "ledger_conflict"
    status_code = 503

    def __init__(self, painting_id: str, seq: Optional[int] = None):
        super().__init__(
            f"Concurrent update on painting {painting_id}, please retry",
            painting_id=painting_id,
        )
        self.painting_id = painting_id
        self.seq = seq


# ============================================================
# Lookups
# ============================================================

class UserNotFoundError(ArtBidError):
    code = "user_not_found"
    status_code = 404

    def __init__(self, mobile: str):
        super().__init__(f"No user registered with mobile {mobile}")
        self.mobile = mobile


class PaintingNotFoundError(ArtBidError):
    code = "painting_not_found"
    status_code = 404

    def __init__(self, painting_id: str):
        super().__init__(f"Painting {painting_id} not found")
        self.painting_id = painting_id


class BidNotFoundError(ArtBidError):
    code = "bid_not_found"
    status_code = 404

    def __init__(self, bid_id: str):
        super().__init__(f"Bid {bid_id} not found")
        self.bid_id = bid_id


# ============================================================
# Registry / Settings Input
# ============================================================

class InvalidMobileError(ArtBidError):
    code = "invalid_mobile"
    status_code = 422

    def __init__(self, mobile: str):
        super().__init__(f"Invalid mobile number: {mobile!r}")
        self.mobile = mobile


class DuplicateMobileError(ArtBidError):
    code = "duplicate_mobile"
    status_code = 409

    def __init__(self, mobile: str):
        super().__init__(f"Mobile {mobile} is already registered")
        self.mobile = mobile


class InvalidPaintingError(ArtBidError):
    code = "invalid_painting"
    status_code = 422


class InvalidAuctionWindowError(ArtBidError):
    code = "invalid_auction_window"
    status_code = 422
