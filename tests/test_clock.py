# tests/test_clock.py
"""Tests for the auction window gate."""
from datetime import datetime, timedelta, timezone

import pytest

from artbid.auction.clock import auction_state
from artbid.errors import InvalidAuctionWindowError
from artbid.models import AuctionSettings, AuctionState

from .conftest import DURING, END, START


@pytest.fixture
def window():
    return AuctionSettings(start_date=START, end_date=END)


class TestAuctionState:

    def test_unconfigured_window_is_closed(self):
        assert auction_state(None, DURING) == AuctionState.CLOSED

    def test_before_start_is_not_started(self, window):
        assert auction_state(window, START - timedelta(seconds=1)) == AuctionState.NOT_STARTED

    def test_start_instant_is_open(self, window):
        assert auction_state(window, START) == AuctionState.OPEN

    def test_last_instant_before_end_is_open(self, window):
        assert auction_state(window, END - timedelta(microseconds=1)) == AuctionState.OPEN

    def test_end_instant_is_closed(self, window):
        assert auction_state(window, END) == AuctionState.CLOSED

    def test_naive_now_is_read_as_utc(self, window):
        naive = DURING.replace(tzinfo=None)
        assert auction_state(window, naive) == AuctionState.OPEN

    def test_other_timezones_compare_by_instant(self, window):
        ist = timezone(timedelta(hours=5, minutes=30))
        # 15:29 IST is 09:59 UTC, a minute before the window opens
        just_before = datetime(2026, 3, 1, 15, 29, tzinfo=ist)
        assert auction_state(window, just_before) == AuctionState.NOT_STARTED


class TestAuctionClock:

    async def test_clock_closed_until_configured(self, engine):
        assert await engine.clock.settings() is None
        assert await engine.clock.is_open(DURING) is False

    async def test_configure_opens_window(self, engine):
        await engine.clock.configure(START, END)

        assert await engine.clock.is_open(DURING) is True
        assert await engine.clock.state(END) == AuctionState.CLOSED

    async def test_configure_replaces_previous_window(self, engine):
        await engine.clock.configure(START, END)
        await engine.clock.configure(END, END + timedelta(days=1))

        assert await engine.clock.state(DURING) == AuctionState.NOT_STARTED

    async def test_configure_rejects_inverted_window(self, engine):
        with pytest.raises(InvalidAuctionWindowError):
            await engine.clock.configure(END, START)

        assert await engine.clock.settings() is None

    async def test_configure_rejects_empty_window(self, engine):
        with pytest.raises(InvalidAuctionWindowError):
            await engine.clock.configure(START, START)

    async def test_configure_stores_naive_datetimes_as_utc(self, engine):
        settings = await engine.clock.configure(
            START.replace(tzinfo=None), END.replace(tzinfo=None)
        )

        assert settings.start_date == START
        assert settings.start_date.tzinfo is not None
