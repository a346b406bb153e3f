"""Painting catalog and bidder registration.

These are the collaborators the bid engine reads from. Registration only
records who a mobile number belongs to; no password or token is kept.
"""

import math
import re
import uuid
from typing import Optional
import structlog

from .errors import InvalidMobileError, InvalidPaintingError, PaintingNotFoundError
from .models import Painting, User
from .store.base import AuctionStore

logger = structlog.get_logger()

# Indian mobile numbers: ten digits, leading 6-9
MOBILE_PATTERN = re.compile(r"^[6-9]\d{9}$")

# Fields an administrator may change after a painting is listed
EDITABLE_PAINTING_FIELDS = {"artist_name", "painting_name", "image_url"}


def normalize_mobile(mobile: str) -> str:
    """Strip whitespace and validate the mobile number format."""
    mobile = (mobile or "").strip()
    if not MOBILE_PATTERN.match(mobile):
        raise InvalidMobileError(mobile)
    return mobile


class Registry:
    """Catalog and identity operations."""

    def __init__(self, store: AuctionStore):
        self._store = store

    # ============================================================
    # Paintings
    # ============================================================

    async def create_painting(
        self,
        artist_name: str,
        painting_name: str,
        base_price: float,
        image_url: Optional[str] = None,
    ) -> Painting:
        """List a new painting.

        Args:
            artist_name: Artist's display name
            painting_name: Title of the work
            base_price: Opening floor; every bid must exceed it
            image_url: Optional image location

        Returns:
            Created Painting
        """
        if not artist_name.strip() or not painting_name.strip():
            raise InvalidPaintingError("Artist and painting name are required")
        if not math.isfinite(base_price) or base_price <= 0:
            raise InvalidPaintingError(
                f"Base price must be a positive number, got {base_price!r}",
                base_price=base_price,
            )

        painting = Painting(
            painting_id=f"ptg_{uuid.uuid4().hex[:12]}",
            artist_name=artist_name.strip(),
            painting_name=painting_name.strip(),
            base_price=float(base_price),
            image_url=image_url,
        )
        await self._store.create_painting(painting)

        logger.info(
            "painting_created",
            painting_id=painting.painting_id,
            painting_name=painting.painting_name,
            base_price=painting.base_price,
        )

        return painting

    async def update_painting(self, painting_id: str, updates: dict) -> Painting:
        """Change a painting's names or image. The base price is fixed."""
        if not updates:
            raise InvalidPaintingError("No fields to update")

        unknown = set(updates) - EDITABLE_PAINTING_FIELDS
        if unknown:
            raise InvalidPaintingError(
                f"Cannot update fields: {', '.join(sorted(unknown))}",
                fields=sorted(unknown),
            )

        painting = await self._store.update_painting(painting_id, updates)
        if painting is None:
            raise PaintingNotFoundError(painting_id)

        logger.info("painting_updated", painting_id=painting_id, fields=sorted(updates))
        return painting

    async def delete_painting(self, painting_id: str) -> None:
        if not await self._store.delete_painting(painting_id):
            raise PaintingNotFoundError(painting_id)
        logger.info("painting_deleted", painting_id=painting_id)

    # ============================================================
    # Users
    # ============================================================

    async def register_user(self, first_name: str, last_name: str, mobile: str) -> User:
        """Register a bidder. Mobile numbers are unique."""
        mobile = normalize_mobile(mobile)

        user = User(
            user_id=f"usr_{uuid.uuid4().hex[:12]}",
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            mobile=mobile,
        )
        await self._store.create_user(user)

        logger.info("user_registered", user_id=user.user_id)
        return user

    async def get_user_by_mobile(self, mobile: str) -> Optional[User]:
        return await self._store.get_user_by_mobile(mobile.strip())

    async def is_mobile_registered(self, mobile: str) -> bool:
        mobile = normalize_mobile(mobile)
        return await self._store.get_user_by_mobile(mobile) is not None
