"""
Tourify Backend — Media Registry Service
=========================================

What:  Signs direct browser uploads to Cloudinary and records the metadata of
       completed uploads.
How:   The browser asks for a signature, uploads the file straight to the
       provider, then posts the provider's (public_id, secure_url,
       resource_type) back here. Media bytes never pass through the backend.

Signature:
    cloudinary.utils.api_sign_request over {"timestamp": ts} with the account
    secret; the browser sends the same timestamp with its upload.
"""

import logging
import time
import uuid
from typing import Optional

import cloudinary
import cloudinary.utils
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tourify.config import settings
from tourify.exceptions import DatabaseError, ServiceUnavailableError, ValidationError
from tourify.models.media import MediaAsset, MediaKind
from tourify.schemas.media import (
    MediaAssetListResponse,
    MediaAssetResponse,
    MediaMetadataRequest,
    UploadSignatureResponse,
)

logger = logging.getLogger(__name__)


def configure_cloudinary() -> None:
    """Push the Cloudinary account settings into the SDK's global config."""
    cloudinary.config(
        cloud_name=settings.cloudinary_cloud_name,
        api_key=settings.cloudinary_api_key,
        api_secret=settings.cloudinary_api_secret,
        secure=True,
    )


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(
            message="public_id, secure_url, and resource_type are required",
            field=field,
        )
    return value.strip()


class MediaService:
    """Upload signing and the per-owner asset registry."""

    def generate_signature(self, timestamp: Optional[int] = None) -> UploadSignatureResponse:
        """
        Sign a timestamp for a direct upload.

        Raises:
            ServiceUnavailableError: Cloudinary credentials are not configured
        """
        if not (settings.cloudinary_api_key and settings.cloudinary_api_secret):
            logger.error("Upload signature requested but Cloudinary is not configured")
            raise ServiceUnavailableError(message="Media uploads are not configured")

        timestamp = timestamp if timestamp is not None else int(time.time())
        signature = cloudinary.utils.api_sign_request(
            {"timestamp": timestamp}, settings.cloudinary_api_secret
        )
        return UploadSignatureResponse(
            signature=signature,
            timestamp=timestamp,
            api_key=settings.cloudinary_api_key,
            cloud_name=settings.cloudinary_cloud_name,
        )

    async def save_metadata(
        self,
        db: AsyncSession,
        owner_id: str,
        request: MediaMetadataRequest,
    ) -> MediaAssetResponse:
        public_id = _require(request.public_id, "public_id")
        media_url = _require(request.secure_url, "secure_url")
        resource_type = _require(request.resource_type, "resource_type")
        if resource_type not in MediaKind.values():
            raise ValidationError(
                message=f"Unsupported resource_type '{resource_type}'. Must be image or video.",
                field="resource_type",
                context={"allowed": MediaKind.values()},
            )

        asset = MediaAsset(
            id=uuid.uuid4(),
            owner_id=owner_id,
            public_id=public_id,
            media_url=media_url,
            resource_type=resource_type,
        )
        try:
            db.add(asset)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to save media metadata: %s", e, exc_info=True)
            raise DatabaseError(context={"operation": "save_metadata"})

        logger.info("Metadata saved for media asset %s (%s)", public_id, resource_type)
        return MediaAssetResponse.model_validate(asset)

    async def list_assets(self, db: AsyncSession, owner_id: str) -> MediaAssetListResponse:
        """The owner's uploads, newest first."""
        query = (
            select(MediaAsset)
            .where(MediaAsset.owner_id == owner_id)
            .order_by(MediaAsset.created_at.desc(), MediaAsset.id)
        )
        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to list media assets: %s", e, exc_info=True)
            raise DatabaseError(context={"operation": "list_assets"})
        return MediaAssetListResponse(
            assets=[MediaAssetResponse.model_validate(a) for a in result.scalars().all()]
        )


media_service = MediaService()
