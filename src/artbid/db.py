"""MongoDB connection management for ArtBid."""

from typing import Optional
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase, AsyncIOMotorCollection
import structlog

from .config import get_settings

logger = structlog.get_logger()

# Global client
_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None


# ============================================================
# Collection Names
# ============================================================

PAINTINGS_COLLECTION = "paintings"
USERS_COLLECTION = "users"
BIDS_COLLECTION = "bids"
SETTINGS_COLLECTION = "auction_settings"


def strip_id(doc: Optional[dict]) -> Optional[dict]:
    """Drop MongoDB's ``_id`` so a document maps straight onto a model."""
    if doc is None:
        return None
    doc.pop("_id", None)
    return doc


async def get_db() -> AsyncIOMotorDatabase:
    """Get database connection."""
    global _client, _db

    if _db is None:
        settings = get_settings()

        # tz_aware so bid times come back as aware UTC datetimes
        _client = AsyncIOMotorClient(settings.mongodb_uri, tz_aware=True)
        _db = _client[settings.mongodb_database]
        logger.info("mongodb_connected", database=settings.mongodb_database)

    return _db


async def get_collection(name: str) -> AsyncIOMotorCollection:
    """Get a collection by name."""
    db = await get_db()
    return db[name]


async def close_db():
    """Close database connection."""
    global _client, _db
    if _client:
        _client.close()
        _client = None
        _db = None
        logger.info("mongodb_disconnected")


async def setup_required_indexes():
    """Create the unique indexes admission and registration depend on.

    ``bids (painting_id, seq)`` is what serializes writers from different
    processes; ``users mobile`` keeps one account per number.
    """
    db = await get_db()

    await db[BIDS_COLLECTION].create_index([("painting_id", 1), ("seq", 1)], unique=True)
    await db[USERS_COLLECTION].create_index([("mobile", 1)], unique=True)


async def setup_indexes():
    """Create lookup indexes for all collections."""
    db = await get_db()

    paintings = db[PAINTINGS_COLLECTION]
    await paintings.create_index([("painting_id", 1)], unique=True)
    await paintings.create_index([("created_at", 1)])

    users = db[USERS_COLLECTION]
    await users.create_index([("user_id", 1)], unique=True)

    bids = db[BIDS_COLLECTION]
    await bids.create_index([("bid_id", 1)], unique=True)
    await bids.create_index([("user_id", 1), ("bid_time", -1)])


async def init_db():
    """Initialize database connection and create indexes.

    Raises if the required unique indexes cannot be ensured; the engine must
    not admit bids without them.
    """
    try:
        await setup_required_indexes()
    except Exception as e:
        logger.error("required_index_setup_failed", error=str(e))
        raise

    try:
        await setup_indexes()
    except Exception as e:
        logger.warning("index_setup_failed", error=str(e), note="continuing without lookup indexes")

    logger.info("database_initialized")
