"""Auction window gate."""

from datetime import datetime
from typing import Optional
import structlog

from ..errors import InvalidAuctionWindowError
from ..models import AuctionSettings, AuctionState, as_utc, utcnow
from ..store.base import AuctionStore

logger = structlog.get_logger()


def auction_state(settings: Optional[AuctionSettings], now: datetime) -> AuctionState:
    """Where ``now`` falls relative to the window [start, end).

    An unconfigured window reports CLOSED, so no bid is accepted until an
    administrator sets one.
    """
    if settings is None:
        return AuctionState.CLOSED

    now = as_utc(now)
    if now < settings.start_date:
        return AuctionState.NOT_STARTED
    if now < settings.end_date:
        return AuctionState.OPEN
    return AuctionState.CLOSED


class AuctionClock:
    """Reads the administrator-owned window and decides whether bids are open."""

    def __init__(self, store: AuctionStore):
        self._store = store

    async def settings(self) -> Optional[AuctionSettings]:
        return await self._store.get_auction_settings()

    async def state(self, now: Optional[datetime] = None) -> AuctionState:
        settings = await self._store.get_auction_settings()
        return auction_state(settings, now or utcnow())

    async def is_open(self, now: Optional[datetime] = None) -> bool:
        return await self.state(now) == AuctionState.OPEN

    async def configure(self, start_date: datetime, end_date: datetime) -> AuctionSettings:
        """Replace the auction window (administrator only).

        Naive datetimes are taken as UTC.
        """
        start_date, end_date = as_utc(start_date), as_utc(end_date)
        if end_date <= start_date:
            raise InvalidAuctionWindowError(
                "Auction end must be after its start",
                start_date=start_date.isoformat(),
                end_date=end_date.isoformat(),
            )

        settings = AuctionSettings(start_date=start_date, end_date=end_date)
        await self._store.set_auction_settings(settings)

        logger.info(
            "auction_settings_updated",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )

        return settings
