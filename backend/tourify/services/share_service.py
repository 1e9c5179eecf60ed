"""
Tourify Backend — Share Service (Sharing Sub-model)
====================================================

What:  Issues and maintains a tour's public share descriptor, and serves tour
       documents to anonymous viewers.
How:   Two independent visibility gates:

    GET  /api/view/{tour_id}          → tour.status == "published"
    POST /api/view/shared/{share_id}  → descriptor.is_public, not expired,
                                        password matches (if one is set)

    Both answer NotFoundError with the same message whether the tour is
    missing or merely hidden, so existence does not leak.

Share token:
    secrets.token_hex(16): 128 random bits, 32 hex chars. Generated once per
    tour and never rotated by updates.
"""

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tourify.config import settings
from tourify.exceptions import ForbiddenError, NotFoundError
from tourify.models.tour import ShareDescriptor, TourStatus, utcnow
from tourify.schemas.tour import ShareResponse, ShareUpdate, TourDocument
from tourify.services.passwords import hash_password, verify_password
from tourify.services.tour_repository import TourRepository
from tourify.services.tour_service import load_owned_tour

logger = logging.getLogger(__name__)

SHARE_TOKEN_BYTES = 16


def generate_share_token() -> str:
    return secrets.token_hex(SHARE_TOKEN_BYTES)


def share_url(tour_id: uuid.UUID) -> str:
    return f"{settings.frontend_url.rstrip('/')}/view/{tour_id}"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def is_expired(share: ShareDescriptor, now: Optional[datetime] = None) -> bool:
    if share.expires_at is None:
        return False
    return _as_utc(share.expires_at) <= (now or utcnow())


def _to_response(share: ShareDescriptor) -> ShareResponse:
    return ShareResponse(
        share_id=share.share_id,
        is_public=share.is_public,
        has_password=share.password_hash is not None,
        expires_at=share.expires_at,
        share_url=share_url(share.tour_id),
    )


class ShareService:
    """Owner-side share management plus the two anonymous read paths."""

    async def get_or_create_share(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        requester_id: str,
    ) -> ShareResponse:
        """Return the tour's descriptor, creating a private one on first call."""
        repo = TourRepository(db)
        await load_owned_tour(repo, tour_id, requester_id)

        share = await repo.get_share(tour_id)
        if share is None:
            share = await repo.add_share(
                ShareDescriptor(
                    tour_id=tour_id,
                    share_id=generate_share_token(),
                    is_public=False,
                )
            )
            logger.info("Share descriptor created for tour %s", tour_id)
        return _to_response(share)

    async def update_share(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        requester_id: str,
        update: ShareUpdate,
    ) -> ShareResponse:
        """
        Create or update the descriptor in place.

        A non-empty password replaces the stored hash; an omitted or empty one
        clears it. expires_at is written as given (null removes the expiry).
        """
        repo = TourRepository(db)
        await load_owned_tour(repo, tour_id, requester_id)

        password_hash = hash_password(update.password) if update.password else None

        share = await repo.get_share(tour_id)
        if share is None:
            share = await repo.add_share(
                ShareDescriptor(
                    tour_id=tour_id,
                    share_id=generate_share_token(),
                    is_public=update.is_public,
                    password_hash=password_hash,
                    expires_at=update.expires_at,
                )
            )
        else:
            share.is_public = update.is_public
            share.password_hash = password_hash
            share.expires_at = update.expires_at
            share.updated_at = utcnow()
            await repo.flush()

        logger.info(
            "Share settings for tour %s: public=%s password=%s",
            tour_id,
            share.is_public,
            password_hash is not None,
        )
        return _to_response(share)

    async def public_fetch_tour(self, db: AsyncSession, tour_id: uuid.UUID) -> TourDocument:
        """Anonymous read of a published tour; anything else is a 404."""
        tour = await TourRepository(db).get_tour(tour_id, with_children=True)
        if tour is None or tour.status != TourStatus.PUBLISHED.value:
            raise NotFoundError(resource="tour", resource_id=str(tour_id))
        return TourDocument.model_validate(tour)

    async def fetch_shared_tour(
        self,
        db: AsyncSession,
        share_id: str,
        password: Optional[str] = None,
    ) -> TourDocument:
        """
        Anonymous read through a share token.

        Raises:
            NotFoundError: unknown token, sharing disabled, or link expired
            ForbiddenError: a password is set and `password` does not match
        """
        repo = TourRepository(db)
        share = await repo.get_share_by_token(share_id)
        if share is None or not share.is_public or is_expired(share):
            raise NotFoundError(resource="shared tour", resource_id=share_id)

        if share.password_hash is not None and not verify_password(password, share.password_hash):
            raise ForbiddenError(message="A valid password is required to view this tour.")

        tour = await repo.get_tour(share.tour_id, with_children=True)
        if tour is None:
            raise NotFoundError(resource="shared tour", resource_id=share_id)
        return TourDocument.model_validate(tour)


share_service = ShareService()
