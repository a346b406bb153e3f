"""ArtBid - mobile-number based art auction.

Example usage:
    from artbid.engine import AuctionEngine
    from artbid.store import MemoryStore

    engine = AuctionEngine.from_store(MemoryStore())
    painting = await engine.registry.create_painting("Raza", "Bindu", 1000)
    user = await engine.registry.register_user("Asha", "Rao", "9876543210")
    await engine.clock.configure(start, end)

    receipt = await engine.bids.submit_bid("9876543210", painting.painting_id, 1200)
"""

__version__ = "0.1.0"
