"""MongoDB store backed by motor."""

from typing import Optional

from pymongo.errors import DuplicateKeyError
import structlog

from ..db import (
    BIDS_COLLECTION,
    PAINTINGS_COLLECTION,
    SETTINGS_COLLECTION,
    USERS_COLLECTION,
    close_db,
    get_collection,
    init_db,
    strip_id,
)
from ..errors import DuplicateMobileError, LedgerConflictError
from ..models import AuctionSettings, Bid, Painting, User
from .base import AuctionStore

logger = structlog.get_logger()

SETTINGS_DOC_ID = "auction"


class MongoStore(AuctionStore):
    """Store backed by the shared MongoDB database.

    Admission across processes relies on the unique ``(painting_id, seq)``
    index created by ``setup_required_indexes``.
    """

    async def setup(self) -> None:
        await init_db()

    # ============================================================
    # Painting Operations
    # ============================================================

    async def create_painting(self, painting: Painting) -> None:
        collection = await get_collection(PAINTINGS_COLLECTION)
        await collection.insert_one(painting.model_dump())

    async def get_painting(self, painting_id: str) -> Optional[Painting]:
        collection = await get_collection(PAINTINGS_COLLECTION)
        doc = await collection.find_one({"painting_id": painting_id})
        return Painting(**strip_id(doc)) if doc else None

    async def list_paintings(self) -> list[Painting]:
        collection = await get_collection(PAINTINGS_COLLECTION)
        cursor = collection.find({}).sort("created_at", 1)

        paintings = []
        async for doc in cursor:
            paintings.append(Painting(**strip_id(doc)))
        return paintings

    async def update_painting(self, painting_id: str, updates: dict) -> Optional[Painting]:
        collection = await get_collection(PAINTINGS_COLLECTION)
        result = await collection.update_one(
            {"painting_id": painting_id},
            {"$set": updates}
        )
        if result.matched_count == 0:
            return None
        return await self.get_painting(painting_id)

    async def delete_painting(self, painting_id: str) -> bool:
        collection = await get_collection(PAINTINGS_COLLECTION)
        result = await collection.delete_one({"painting_id": painting_id})
        return result.deleted_count > 0

    async def count_paintings(self) -> int:
        collection = await get_collection(PAINTINGS_COLLECTION)
        return await collection.count_documents({})

    # ============================================================
    # User Operations
    # ============================================================

    async def create_user(self, user: User) -> None:
        collection = await get_collection(USERS_COLLECTION)
        try:
            await collection.insert_one(user.model_dump())
        except DuplicateKeyError:
            raise DuplicateMobileError(user.mobile)

    async def get_user(self, user_id: str) -> Optional[User]:
        collection = await get_collection(USERS_COLLECTION)
        doc = await collection.find_one({"user_id": user_id})
        return User(**strip_id(doc)) if doc else None

    async def get_user_by_mobile(self, mobile: str) -> Optional[User]:
        collection = await get_collection(USERS_COLLECTION)
        doc = await collection.find_one({"mobile": mobile})
        return User(**strip_id(doc)) if doc else None

    async def count_users(self) -> int:
        collection = await get_collection(USERS_COLLECTION)
        return await collection.count_documents({})

    # ============================================================
    # Bid Operations
    # ============================================================

    async def append_bid(self, bid: Bid) -> None:
        collection = await get_collection(BIDS_COLLECTION)
        try:
            await collection.insert_one(bid.model_dump())
        except DuplicateKeyError:
            logger.warning("ledger_seq_taken", painting_id=bid.painting_id, seq=bid.seq)
            raise LedgerConflictError(bid.painting_id, bid.seq)

    async def bids_for_painting(self, painting_id: str) -> list[Bid]:
        collection = await get_collection(BIDS_COLLECTION)
        cursor = collection.find({"painting_id": painting_id}).sort("seq", 1)

        bids = []
        async for doc in cursor:
            bids.append(Bid(**strip_id(doc)))
        return bids

    async def bids_for_user(self, user_id: str) -> list[Bid]:
        collection = await get_collection(BIDS_COLLECTION)
        cursor = collection.find({"user_id": user_id}).sort([("bid_time", -1), ("seq", -1)])

        bids = []
        async for doc in cursor:
            bids.append(Bid(**strip_id(doc)))
        return bids

    async def list_bids(self) -> list[Bid]:
        collection = await get_collection(BIDS_COLLECTION)
        cursor = collection.find({}).sort("bid_time", 1)

        bids = []
        async for doc in cursor:
            bids.append(Bid(**strip_id(doc)))
        return bids

    async def bid_totals(self) -> tuple[int, float]:
        collection = await get_collection(BIDS_COLLECTION)
        pipeline = [
            {"$group": {"_id": None, "count": {"$sum": 1}, "value": {"$sum": "$amount"}}},
        ]
        async for row in collection.aggregate(pipeline):
            return row["count"], float(row["value"])
        return 0, 0.0

    # ============================================================
    # Auction Settings
    # ============================================================

    async def get_auction_settings(self) -> Optional[AuctionSettings]:
        collection = await get_collection(SETTINGS_COLLECTION)
        doc = await collection.find_one({"_id": SETTINGS_DOC_ID})
        return AuctionSettings(**strip_id(doc)) if doc else None

    async def set_auction_settings(self, settings: AuctionSettings) -> None:
        collection = await get_collection(SETTINGS_COLLECTION)
        await collection.replace_one(
            {"_id": SETTINGS_DOC_ID},
            settings.model_dump(),
            upsert=True,
        )

    async def close(self) -> None:
        await close_db()
