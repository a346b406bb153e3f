"""Bid acceptance and ranking engine."""

from .clock import AuctionClock, auction_state
from .ledger import BidLedger
from .rank import LedgerSnapshot, RankEngine
from .submit import BidService
from .query import QueryService

__all__ = [
    "AuctionClock",
    "auction_state",
    "BidLedger",
    "LedgerSnapshot",
    "RankEngine",
    "BidService",
    "QueryService",
]
