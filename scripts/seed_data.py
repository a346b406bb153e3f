"""Seed ArtBid with demo paintings, bidders and an open auction window."""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from artbid.engine import close_engine, get_engine
from artbid.models import utcnow


PAINTINGS = [
    {"artist_name": "M. F. Husain", "painting_name": "Horses in Motion", "base_price": 150000},
    {"artist_name": "S. H. Raza", "painting_name": "Bindu", "base_price": 220000},
    {"artist_name": "Amrita Sher-Gil", "painting_name": "Three Girls", "base_price": 500000},
    {"artist_name": "Tyeb Mehta", "painting_name": "Kali", "base_price": 180000},
    {"artist_name": "Jamini Roy", "painting_name": "Mother and Child", "base_price": 75000},
]

USERS = [
    ("Asha", "Rao", "9876543210"),
    ("Vikram", "Singh", "9123456780"),
    ("Meera", "Iyer", "9811122233"),
]


async def seed_paintings(engine):
    count = await engine.store.count_paintings()
    if count > 0:
        print(f"  paintings already has {count} documents")
        return

    for painting in PAINTINGS:
        await engine.registry.create_painting(**painting)
    print(f"  Seeded {len(PAINTINGS)} paintings")


async def seed_users(engine):
    created = 0
    for first_name, last_name, mobile in USERS:
        if await engine.registry.is_mobile_registered(mobile):
            continue
        await engine.registry.register_user(first_name, last_name, mobile)
        created += 1
    print(f"  Registered {created} bidders ({len(USERS) - created} already present)")


async def seed_window(engine, days: int = 7):
    now = utcnow()
    settings = await engine.clock.configure(now, now + timedelta(days=days))
    print(f"  Auction open until {settings.end_date.isoformat()}")


async def main():
    print("=" * 50)
    print("ArtBid Seed Data")
    print("=" * 50)

    engine = await get_engine()
    try:
        print("\n[1] Seeding paintings...")
        await seed_paintings(engine)

        print("\n[2] Registering bidders...")
        await seed_users(engine)

        print("\n[3] Opening auction window...")
        await seed_window(engine)
    finally:
        await close_engine()

    print("\n" + "=" * 50)
    print("Seed complete!")
    print("=" * 50)


if __name__ == "__main__":
    asyncio.run(main())
