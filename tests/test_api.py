# tests/test_api.py
"""HTTP API tests: response envelopes, status codes and admin auth."""
from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient

from artbid import auth
from artbid.api import app
from artbid.config import Settings
from artbid.engine import get_engine
from artbid.models import utcnow


@pytest.fixture
async def client(engine, settings, monkeypatch):
    """Async HTTP client bound to the test engine."""
    monkeypatch.setattr(auth, "get_settings", lambda: settings)
    app.dependency_overrides[get_engine] = lambda: engine

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def live_auction(engine):
    """Window around the real clock, since the API bids at the current time."""
    now = utcnow()
    return await engine.clock.configure(now - timedelta(hours=1), now + timedelta(hours=1))


# ═══════════════════════════════════════════════════════
# Public endpoints
# ═══════════════════════════════════════════════════════

class TestHealth:

    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"status": "operational"}}

    async def test_auction_state_unconfigured(self, client):
        data = (await client.get("/api/auction")).json()["data"]

        assert data["settings"] is None
        assert data["state"] == "closed"

    async def test_auction_state_open(self, client, live_auction):
        data = (await client.get("/api/auction")).json()["data"]
        assert data["state"] == "open"


class TestRegistration:

    async def test_register(self, client):
        response = await client.post("/api/auth/register", json={
            "first_name": "Meera", "last_name": "Iyer", "mobile": "9811122233",
        })

        assert response.status_code == 201
        user = response.json()["data"]["user"]
        assert user["mobile"] == "9811122233"
        assert user["user_id"].startswith("usr_")

    async def test_register_duplicate(self, client, bidder):
        response = await client.post("/api/auth/register", json={
            "first_name": "Meera", "last_name": "Iyer", "mobile": bidder.mobile,
        })

        assert response.status_code == 409
        assert response.json()["error"] == "duplicate_mobile"

    async def test_register_invalid_mobile(self, client):
        response = await client.post("/api/auth/register", json={
            "first_name": "Meera", "last_name": "Iyer", "mobile": "12345",
        })

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_mobile"

    async def test_check_mobile(self, client, bidder):
        registered = (await client.get(f"/api/auth/check-mobile/{bidder.mobile}")).json()
        unknown = (await client.get("/api/auth/check-mobile/9000000000")).json()

        assert registered["data"]["registered"] is True
        assert unknown["data"]["registered"] is False


class TestBidding:

    async def test_place_bid(self, client, live_auction, painting, bidder):
        response = await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": painting.painting_id, "amount": 1200,
        })

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["bid"]["rank"] == 1
        assert body["data"]["bid"]["current_highest_bid"] == 1200
        assert body["data"]["bid"]["total_bidders"] == 1

    async def test_bid_too_low(self, client, live_auction, painting, bidder):
        response = await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": painting.painting_id, "amount": 900,
        })

        assert response.status_code == 409
        body = response.json()
        assert body == {
            "success": False,
            "error": "bid_too_low",
            "message": body["message"],
            "painting_id": painting.painting_id,
            "amount": 900,
            "floor": 1000,
        }

    async def test_auction_closed(self, client, painting, bidder):
        response = await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": painting.painting_id, "amount": 1200,
        })

        assert response.status_code == 403
        assert response.json()["error"] == "auction_not_open"
        assert response.json()["state"] == "closed"

    async def test_unknown_user(self, client, live_auction, painting):
        response = await client.post("/api/paintings/bid", json={
            "mobile": "9999999999", "painting_id": painting.painting_id, "amount": 1200,
        })

        assert response.status_code == 404
        assert response.json()["error"] == "user_not_found"

    async def test_unknown_painting(self, client, live_auction, bidder):
        response = await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": "ptg_missing", "amount": 1200,
        })

        assert response.status_code == 404
        assert response.json()["error"] == "painting_not_found"

    async def test_zero_amount(self, client, live_auction, painting, bidder):
        response = await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": painting.painting_id, "amount": 0,
        })

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_amount"

    async def test_malformed_body(self, client, live_auction, painting, bidder):
        response = await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": painting.painting_id, "amount": "lots",
        })

        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert body["errors"][0]["loc"] == ["body", "amount"]


class TestPaintingReads:

    async def test_list_and_detail(self, client, live_auction, painting, bidder):
        await client.post("/api/paintings/bid", json={
            "mobile": bidder.mobile, "painting_id": painting.painting_id, "amount": 1750,
        })

        listing = (await client.get("/api/paintings")).json()["data"]
        detail = (await client.get(f"/api/paintings/{painting.painting_id}")).json()["data"]

        assert listing["count"] == 1
        assert listing["paintings"][0]["current_price"] == 1750
        assert detail["painting"]["current_price"] == 1750
        assert detail["painting"]["total_bidders"] == 1

    async def test_missing_painting(self, client):
        response = await client.get("/api/paintings/ptg_missing")

        assert response.status_code == 404
        assert response.json()["success"] is False

    async def test_user_bids(self, client, live_auction, painting, bidder, other_bidder):
        for mobile, amount in [(bidder.mobile, 1200), (other_bidder.mobile, 1300)]:
            await client.post("/api/paintings/bid", json={
                "mobile": mobile, "painting_id": painting.painting_id, "amount": amount,
            })

        data = (await client.get("/api/paintings/user-bids", params={"mobile": bidder.mobile})).json()["data"]

        assert data["count"] == 1
        assert data["bids"][0]["rank"] == 2
        assert data["bids"][0]["current_highest_bid"] == 1300
        assert data["bids"][0]["painting"]["painting_id"] == painting.painting_id

    async def test_user_bids_requires_mobile(self, client):
        response = await client.get("/api/paintings/user-bids")

        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    async def test_unknown_route(self, client):
        response = await client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    async def test_user_bids_unknown_mobile(self, client):
        response = await client.get("/api/paintings/user-bids", params={"mobile": "9999999999"})

        assert response.status_code == 404
        assert response.json()["error"] == "user_not_found"


# ═══════════════════════════════════════════════════════
# Admin endpoints
# ═══════════════════════════════════════════════════════

class TestAdmin:

    async def test_set_window(self, client):
        now = utcnow()
        response = await client.put("/api/admin/auction-settings", json={
            "start_date": (now - timedelta(minutes=5)).isoformat(),
            "end_date": (now + timedelta(days=1)).isoformat(),
        })

        assert response.status_code == 200
        assert response.json()["data"]["state"] == "open"

    async def test_inverted_window(self, client):
        now = utcnow()
        response = await client.put("/api/admin/auction-settings", json={
            "start_date": now.isoformat(),
            "end_date": (now - timedelta(days=1)).isoformat(),
        })

        assert response.status_code == 422
        assert response.json()["error"] == "invalid_auction_window"

    async def test_painting_lifecycle(self, client):
        created = await client.post("/api/admin/paintings", json={
            "artist_name": "F. N. Souza", "painting_name": "Birth", "base_price": 4000,
        })
        assert created.status_code == 201
        painting_id = created.json()["data"]["painting"]["painting_id"]

        updated = await client.put(f"/api/admin/paintings/{painting_id}", json={"painting_name": "Birth (1955)"})
        assert updated.json()["data"]["painting"]["painting_name"] == "Birth (1955)"

        deleted = await client.delete(f"/api/admin/paintings/{painting_id}")
        assert deleted.json()["data"] == {"painting_id": painting_id, "deleted": True}

        missing = await client.get(f"/api/paintings/{painting_id}")
        assert missing.status_code == 404

    async def test_create_painting_rejects_zero_price(self, client):
        response = await client.post("/api/admin/paintings", json={
            "artist_name": "F. N. Souza", "painting_name": "Birth", "base_price": 0,
        })
        assert response.status_code == 422

    async def test_bids_and_dashboard(self, client, live_auction, painting, bidder, other_bidder):
        for mobile, amount in [(bidder.mobile, 1200), (other_bidder.mobile, 1300)]:
            await client.post("/api/paintings/bid", json={
                "mobile": mobile, "painting_id": painting.painting_id, "amount": amount,
            })

        bids = (await client.get("/api/admin/bids")).json()["data"]
        stats = (await client.get("/api/admin/dashboard-stats")).json()["data"]

        assert [(b["rank"], b["amount"]) for b in bids["bids"]] == [(1, 1300), (2, 1200)]
        assert bids["bids"][0]["user"]["mobile"] == other_bidder.mobile
        assert stats == {
            "total_paintings": 1,
            "total_users": 2,
            "total_bids": 2,
            "total_bid_value": 2500,
        }


class TestAdminAuth:

    @pytest.fixture
    def secured(self, monkeypatch):
        settings = Settings(_env_file=None, storage_backend="memory", admin_token="secret")
        monkeypatch.setattr(auth, "get_settings", lambda: settings)

    async def test_missing_token(self, client, secured):
        response = await client.get("/api/admin/dashboard-stats")
        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json() == {
            "success": False,
            "error": "unauthorized",
            "message": "Admin authentication required",
        }

    async def test_wrong_token(self, client, secured):
        response = await client.get(
            "/api/admin/dashboard-stats", headers={"Authorization": "Bearer nope"}
        )
        assert response.status_code == 401

    async def test_valid_token(self, client, secured):
        response = await client.get(
            "/api/admin/dashboard-stats", headers={"Authorization": "Bearer secret"}
        )
        assert response.status_code == 200

    async def test_public_routes_need_no_token(self, client, secured):
        response = await client.get("/api/paintings")
        assert response.status_code == 200
