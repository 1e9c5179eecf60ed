"""
Tourify Backend — Public Viewer Routes
=======================================

Anonymous, read-only access to tour documents. No bearer token is required
and the owner id is never included in the response.

    GET  /api/view/{tour_id}           published tours only
    POST /api/view/shared/{share_id}   share token (+ password in the body)

The shared path takes the password in the POST body.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tourify.database import get_db_session
from tourify.schemas.common import ErrorResponse
from tourify.schemas.tour import SharedTourAccess, TourDocument
from tourify.services.share_service import share_service

router = APIRouter(prefix="/api/view", tags=["Public"])


@router.get(
    "/{tour_id}",
    response_model=TourDocument,
    responses={404: {"description": "Tour missing or not published", "model": ErrorResponse}},
    summary="View a published tour",
)
async def view_published_tour(
    tour_id: UUID,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> TourDocument:
    result = await share_service.public_fetch_tour(db=db, tour_id=tour_id)
    response.headers["Cache-Control"] = "no-cache"
    return result


@router.post(
    "/shared/{share_id}",
    response_model=TourDocument,
    responses={
        403: {"description": "Password missing or wrong", "model": ErrorResponse},
        404: {"description": "Unknown, disabled or expired share link", "model": ErrorResponse},
    },
    summary="View a tour through its share link",
)
async def view_shared_tour(
    share_id: str,
    body: Optional[SharedTourAccess] = Body(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> TourDocument:
    password = body.password if body else None
    return await share_service.fetch_shared_tour(db=db, share_id=share_id, password=password)
