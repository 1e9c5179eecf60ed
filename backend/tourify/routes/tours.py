"""
Tourify Backend — Tour Route Handlers
======================================

What:  Owner-scoped endpoints for tours, their steps, and their share settings.
How:   Every handler resolves the requester through `get_requester_id`, then
       delegates to TourService / ShareService. Status codes for failures come
       from the global exception handlers in main.py.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from tourify.auth import get_requester_id
from tourify.database import get_db_session
from tourify.schemas.common import ErrorResponse
from tourify.schemas.tour import (
    AnnotationPayload,
    AnnotationResponse,
    MediaAttachRequest,
    ShareResponse,
    ShareUpdate,
    StatusResponse,
    StatusUpdate,
    StepResponse,
    TourListResponse,
    TourPayload,
    TourResponse,
)
from tourify.services.share_service import share_service
from tourify.services.tour_service import tour_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Tours"])

OWNER_ERRORS = {
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    403: {"description": "Requester does not own the tour", "model": ErrorResponse},
    404: {"description": "Tour not found", "model": ErrorResponse},
}


@router.get(
    "/tours",
    response_model=TourListResponse,
    responses={401: OWNER_ERRORS[401]},
    summary="List the requester's tours",
)
async def list_tours(
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> TourListResponse:
    """All tours owned by the requester, newest first, with steps and annotations."""
    return await tour_service.list_tours(db=db, owner_id=requester_id)


@router.get(
    "/tours/{tour_id}",
    response_model=TourResponse,
    responses=OWNER_ERRORS,
    summary="Get one tour document",
)
async def get_tour(
    tour_id: UUID,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> TourResponse:
    return await tour_service.get_tour(db=db, tour_id=tour_id, requester_id=requester_id)


@router.post(
    "/tours",
    response_model=TourResponse,
    status_code=201,
    responses={
        400: {"description": "Missing title or invalid status", "model": ErrorResponse},
        401: OWNER_ERRORS[401],
    },
    summary="Create a tour",
    description=(
        "Creates a tour owned by the requester, optionally with steps. Step order "
        "follows the order of the `steps` array."
    ),
)
async def create_tour(
    payload: TourPayload,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> TourResponse:
    return await tour_service.create_tour(db=db, owner_id=requester_id, payload=payload)


@router.put(
    "/tours/{tour_id}",
    response_model=TourResponse,
    responses={**OWNER_ERRORS, 400: {"description": "Invalid body", "model": ErrorResponse}},
    summary="Replace a tour",
    description=(
        "Overwrites title, description and status and replaces every step. Steps "
        "and annotations not present in the body are deleted."
    ),
)
async def replace_tour(
    tour_id: UUID,
    payload: TourPayload,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> TourResponse:
    return await tour_service.replace_tour(
        db=db, tour_id=tour_id, requester_id=requester_id, payload=payload
    )


@router.patch(
    "/tours/{tour_id}/status",
    response_model=StatusResponse,
    responses={**OWNER_ERRORS, 400: {"description": "Invalid status", "model": ErrorResponse}},
    summary="Change a tour's status",
)
async def update_status(
    tour_id: UUID,
    body: StatusUpdate,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> StatusResponse:
    return await tour_service.set_status(
        db=db, tour_id=tour_id, requester_id=requester_id, status=body.status
    )


@router.delete(
    "/tours/{tour_id}",
    status_code=204,
    response_class=Response,
    responses=OWNER_ERRORS,
    summary="Delete a tour with its steps, annotations and share settings",
)
async def delete_tour(
    tour_id: UUID,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await tour_service.delete_tour(db=db, tour_id=tour_id, requester_id=requester_id)
    return Response(status_code=204)


# ── Steps ─────────────────────────────────────────────────────────────────


@router.put(
    "/tours/{tour_id}/steps/{step_id}/media",
    response_model=StepResponse,
    responses={**OWNER_ERRORS, 400: {"description": "Missing URL or bad kind", "model": ErrorResponse}},
    summary="Attach media to a step",
    description="Sets the step's image or video. Existing annotations are removed.",
)
async def attach_step_media(
    tour_id: UUID,
    step_id: UUID,
    body: MediaAttachRequest,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> StepResponse:
    return await tour_service.attach_step_media(
        db=db, tour_id=tour_id, step_id=step_id, requester_id=requester_id, request=body
    )


@router.post(
    "/tours/{tour_id}/steps/{step_id}/annotations",
    response_model=AnnotationResponse,
    status_code=201,
    responses={**OWNER_ERRORS, 400: {"description": "Empty text", "model": ErrorResponse}},
    summary="Add an annotation to a step",
    description="Coordinates are percentages; values outside 0-100 are clamped.",
)
async def add_annotation(
    tour_id: UUID,
    step_id: UUID,
    body: AnnotationPayload,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> AnnotationResponse:
    return await tour_service.add_step_annotation(
        db=db,
        tour_id=tour_id,
        step_id=step_id,
        requester_id=requester_id,
        text=body.text,
        x=body.x,
        y=body.y,
    )


@router.delete(
    "/tours/{tour_id}/steps/{step_id}/annotations/{annotation_id}",
    status_code=204,
    response_class=Response,
    responses=OWNER_ERRORS,
    summary="Remove an annotation",
)
async def remove_annotation(
    tour_id: UUID,
    step_id: UUID,
    annotation_id: UUID,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await tour_service.remove_step_annotation(
        db=db,
        tour_id=tour_id,
        step_id=step_id,
        annotation_id=annotation_id,
        requester_id=requester_id,
    )
    return Response(status_code=204)


# ── Sharing ───────────────────────────────────────────────────────────────


@router.get(
    "/tours/{tour_id}/share",
    response_model=ShareResponse,
    responses=OWNER_ERRORS,
    summary="Get (or create) the tour's share settings",
)
async def get_share(
    tour_id: UUID,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> ShareResponse:
    return await share_service.get_or_create_share(
        db=db, tour_id=tour_id, requester_id=requester_id
    )


@router.post(
    "/tours/{tour_id}/share",
    response_model=ShareResponse,
    responses=OWNER_ERRORS,
    summary="Update the tour's share settings",
    description="The share token is kept; an omitted or empty password removes password protection.",
)
async def update_share(
    tour_id: UUID,
    body: ShareUpdate,
    requester_id: str = Depends(get_requester_id),
    db: AsyncSession = Depends(get_db_session),
) -> ShareResponse:
    return await share_service.update_share(
        db=db, tour_id=tour_id, requester_id=requester_id, update=body
    )
