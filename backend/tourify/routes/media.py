"""
Tourify Backend — Media Route Handlers
=======================================

Direct-upload flow:
    1. GET  /api/media/generate-signature  → signature + timestamp + api key
    2. browser uploads the file to Cloudinary with that signature
    3. POST /api/media/save-metadata       → asset row for the requester
    4. GET  /api/media                     → requester's uploads, newest first
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tourify.auth import get_requester_id
from tourify.database import get_db_session
from tourify.schemas.common import ErrorResponse
from tourify.schemas.media import (
    MediaAssetListResponse,
    MediaAssetResponse,
    MediaMetadataRequest,
    UploadSignatureResponse,
)
from tourify.services.media_service import media_service

router = APIRouter(prefix="/api/media", tags=["Media"])


@router.get(
    "/generate-signature",
    response_model=UploadSignatureResponse,
    responses={
        401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
        503: {"description": "Media storage not configured", "model": ErrorResponse},
    },
    summary="Sign a direct upload",
)
async def generate_signature(
    requester_id: str = Depends(get_requester_id),
) -> UploadSignatureResponse:
    return media_service.generate_signature()


@router.post(
    "/save-metadata",
    response_model=MediaAssetResponse,
    status_code=201,
    responses={400: {"description": "Missing or invalid fields", "model": ErrorResponse}},
    summary="Record an uploaded asset",
)
async def save_metadata(
    body: MediaMetadataRequest,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> MediaAssetResponse:
    return await media_service.save_metadata(db=db, owner_id=requester_id, request=body)


@router.get(
    "",
    response_model=MediaAssetListResponse,
    summary="List the requester's uploaded assets",
)
async def list_assets(
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> MediaAssetListResponse:
    return await media_service.list_assets(db=db, owner_id=requester_id)
