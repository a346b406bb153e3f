"""ArtBid HTTP API.

Successful responses are wrapped as ``{"success": true, "data": {...}}``;
business errors as ``{"success": false, "error": <code>, "message": ...}``
with the status code of the error class. Request validation failures and
HTTP errors raised by FastAPI use the same error envelope.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from .auth import AuthenticatedAdmin, require_admin
from .config import get_settings
from .engine import AuctionEngine, close_engine, get_engine
from .errors import ArtBidError
from .models import utcnow

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await get_engine()
    logger.info("artbid_api_started")
    yield
    await close_engine()
    logger.info("artbid_api_stopped")


app = FastAPI(
    title="ArtBid",
    description="Mobile-number based art auction",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def ok(**data: Any) -> dict:
    return {"success": True, "data": jsonable_encoder(data)}


# ============================================================
# Error Handling
# ============================================================

@app.exception_handler(ArtBidError)
async def artbid_error_handler(request: Request, exc: ArtBidError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


HTTP_ERROR_CODES = {
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "validation_error",
            "message": "Request validation failed",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": HTTP_ERROR_CODES.get(exc.status_code, "http_error"),
            "message": str(exc.detail),
        },
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("request_failed", path=request.url.path, method=request.method)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "internal_error", "message": "Internal server error"},
    )


# ============================================================
# Request Models
# ============================================================

class BidRequest(BaseModel):
    mobile: str = Field(min_length=1)
    painting_id: str = Field(min_length=1)
    amount: float


class RegisterRequest(BaseModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    mobile: str


class AuctionSettingsRequest(BaseModel):
    start_date: datetime
    end_date: datetime


class PaintingCreateRequest(BaseModel):
    artist_name: str = Field(min_length=1)
    painting_name: str = Field(min_length=1)
    base_price: float = Field(gt=0)
    image_url: Optional[str] = None


class PaintingUpdateRequest(BaseModel):
    artist_name: Optional[str] = None
    painting_name: Optional[str] = None
    image_url: Optional[str] = None


# ============================================================
# Public Endpoints
# ============================================================

@app.get("/api/health")
async def health():
    return ok(status="operational")


@app.get("/api/auction")
async def auction_status(engine: AuctionEngine = Depends(get_engine)):
    """Current auction window and whether bids are accepted right now."""
    settings = await engine.clock.settings()
    state = await engine.clock.state(utcnow())
    return ok(settings=settings, state=state.value)


@app.get("/api/paintings")
async def list_paintings(engine: AuctionEngine = Depends(get_engine)):
    paintings = await engine.queries.list_paintings()
    return ok(paintings=paintings, count=len(paintings))


@app.get("/api/paintings/user-bids")
async def user_bids(
    mobile: str = Query(..., min_length=1),
    engine: AuctionEngine = Depends(get_engine),
):
    """A bidder's bid history with current ranks. Unknown mobiles get a 404."""
    bids = await engine.queries.bids_for_user(mobile.strip())
    return ok(bids=bids, count=len(bids))


@app.post("/api/paintings/bid")
async def place_bid(request: BidRequest, engine: AuctionEngine = Depends(get_engine)):
    receipt = await engine.bids.submit_bid(
        mobile=request.mobile.strip(),
        painting_id=request.painting_id,
        amount=request.amount,
    )
    return ok(bid=receipt)


@app.get("/api/paintings/{painting_id}")
async def get_painting(painting_id: str, engine: AuctionEngine = Depends(get_engine)):
    painting = await engine.queries.painting_view(painting_id)
    return ok(painting=painting)


@app.post("/api/auth/register", status_code=201)
async def register(request: RegisterRequest, engine: AuctionEngine = Depends(get_engine)):
    user = await engine.registry.register_user(
        first_name=request.first_name,
        last_name=request.last_name,
        mobile=request.mobile,
    )
    return ok(user=user)


@app.get("/api/auth/check-mobile/{mobile}")
async def check_mobile(mobile: str, engine: AuctionEngine = Depends(get_engine)):
    registered = await engine.registry.is_mobile_registered(mobile)
    return ok(mobile=mobile, registered=registered)


# ============================================================
# Admin Endpoints
# ============================================================

@app.get("/api/admin/auction-settings")
async def get_auction_settings(
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    settings = await engine.clock.settings()
    state = await engine.clock.state(utcnow())
    return ok(settings=settings, state=state.value)


@app.put("/api/admin/auction-settings")
async def update_auction_settings(
    request: AuctionSettingsRequest,
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    settings = await engine.clock.configure(request.start_date, request.end_date)
    state = await engine.clock.state(utcnow())
    return ok(settings=settings, state=state.value)


@app.get("/api/admin/dashboard-stats")
async def dashboard_stats(
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    totals = await engine.queries.dashboard_totals()
    return ok(**totals.model_dump())


@app.get("/api/admin/bids")
async def admin_bids(
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    bids = await engine.queries.all_bids()
    return ok(bids=bids, count=len(bids))


@app.get("/api/admin/paintings")
async def admin_paintings(
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    paintings = await engine.queries.list_paintings()
    return ok(paintings=paintings, count=len(paintings))


@app.post("/api/admin/paintings", status_code=201)
async def create_painting(
    request: PaintingCreateRequest,
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    painting = await engine.registry.create_painting(
        artist_name=request.artist_name,
        painting_name=request.painting_name,
        base_price=request.base_price,
        image_url=request.image_url,
    )
    return ok(painting=painting)


@app.put("/api/admin/paintings/{painting_id}")
async def update_painting(
    painting_id: str,
    request: PaintingUpdateRequest,
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    updates = request.model_dump(exclude_unset=True)
    painting = await engine.registry.update_painting(painting_id, updates)
    return ok(painting=painting)


@app.delete("/api/admin/paintings/{painting_id}")
async def delete_painting(
    painting_id: str,
    engine: AuctionEngine = Depends(get_engine),
    admin: AuthenticatedAdmin = Depends(require_admin),
):
    await engine.registry.delete_painting(painting_id)
    return ok(painting_id=painting_id, deleted=True)
