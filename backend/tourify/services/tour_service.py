"""
Tourify Backend — Tour Service (Tour Aggregate)
================================================

What:  Owner-scoped operations on tour documents: create, get, list,
       destructive replace, status patch, delete, and the per-step media and
       annotation edits.
How:   Stateless service; each call receives the request's AsyncSession and
       the verified requester id, builds a TourRepository on it and returns
       response schemas.

Check order for every owner-scoped call:
    1. tour missing            → NotFoundError  (404)
    2. requester != owner_id   → ForbiddenError (403)
    3. invalid input           → ValidationError (400)

Replace semantics (PUT):
    Title, description and status are overwritten; every existing step and
    annotation is deleted and the supplied steps are inserted fresh with
    step_order 0..n-1. There is no per-step diffing, and no version check:
    concurrent replaces are last-writer-wins.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tourify.exceptions import ForbiddenError, NotFoundError, ValidationError
from tourify.models.tour import Step, Tour, TourStatus
from tourify.schemas.tour import (
    AnnotationResponse,
    MediaAttachRequest,
    StatusResponse,
    StepPayload,
    StepResponse,
    TourListResponse,
    TourPayload,
    TourResponse,
)
from tourify.services import step_editor
from tourify.services.tour_repository import TourRepository

logger = logging.getLogger(__name__)


def require_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise ValidationError(message="Title is required.", field="title")
    return title.strip()


def require_status(status: Optional[str], default: Optional[str] = None) -> str:
    if status is None and default is not None:
        return default
    if status not in TourStatus.values():
        raise ValidationError(
            message="Invalid status. Must be draft, published, or private.",
            field="status",
            context={"allowed": TourStatus.values()},
        )
    return status


async def load_owned_tour(
    repo: TourRepository,
    tour_id: uuid.UUID,
    requester_id: str,
    with_children: bool = False,
) -> Tour:
    """Fetch a tour and enforce ownership (404 before 403)."""
    tour = await repo.get_tour(tour_id, with_children=with_children)
    if tour is None:
        raise NotFoundError(resource="tour", resource_id=str(tour_id))
    if tour.owner_id != requester_id:
        logger.warning("Requester %s denied access to tour %s", requester_id, tour_id)
        raise ForbiddenError(context={"tour_id": str(tour_id)})
    return tour


def _build_steps(payloads: List[StepPayload]) -> List[Step]:
    return [step_editor.build_step(payload) for payload in payloads]


class TourService:
    """Business rules of the tour aggregate."""

    async def create_tour(
        self,
        db: AsyncSession,
        owner_id: str,
        payload: TourPayload,
    ) -> TourResponse:
        """
        Create a tour, optionally with steps and their annotations.

        Steps receive step_order equal to their index in payload.steps. Tour,
        steps and annotations are written in the request transaction.

        Raises:
            ValidationError: missing title, invalid status, empty annotation text
        """
        title = require_title(payload.title)
        status = require_status(payload.status, default=TourStatus.DRAFT.value)
        steps = _build_steps(payload.steps)

        repo = TourRepository(db)
        tour = await repo.add_tour(
            Tour(
                id=uuid.uuid4(),
                owner_id=owner_id,
                title=title,
                description=payload.description,
                status=status,
            )
        )
        if steps:
            await repo.add_steps(tour.id, steps)

        logger.info("Tour %s created by %s with %d steps", tour.id, owner_id, len(steps))
        return TourResponse.model_validate(await repo.reload_document(tour.id))

    async def get_tour(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        requester_id: str,
    ) -> TourResponse:
        repo = TourRepository(db)
        tour = await load_owned_tour(repo, tour_id, requester_id, with_children=True)
        return TourResponse.model_validate(tour)

    async def list_tours(self, db: AsyncSession, owner_id: str) -> TourListResponse:
        tours = await TourRepository(db).list_tours(owner_id)
        return TourListResponse(tours=[TourResponse.model_validate(t) for t in tours])

    async def replace_tour(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        requester_id: str,
        payload: TourPayload,
    ) -> TourResponse:
        """
        Destructively replace a tour's metadata and all of its steps.

        A missing status falls back to draft, mirroring create. All input is
        validated before the first delete is issued.
        """
        repo = TourRepository(db)
        tour = await load_owned_tour(repo, tour_id, requester_id)

        title = require_title(payload.title)
        status = require_status(payload.status, default=TourStatus.DRAFT.value)
        steps = _build_steps(payload.steps)

        tour.title = title
        tour.description = payload.description
        tour.status = status
        tour.touch()

        await repo.replace_steps(tour.id, steps)
        logger.info("Tour %s replaced with %d steps", tour.id, len(steps))
        return TourResponse.model_validate(await repo.reload_document(tour.id))

    async def set_status(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        requester_id: str,
        status: Optional[str],
    ) -> StatusResponse:
        repo = TourRepository(db)
        tour = await load_owned_tour(repo, tour_id, requester_id)
        tour.status = require_status(status)
        tour.touch()
        await repo.flush()
        logger.info("Tour %s status set to %s", tour.id, tour.status)
        return StatusResponse(id=tour.id, status=tour.status, updated_at=tour.updated_at)

    async def delete_tour(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        requester_id: str,
    ) -> None:
        repo = TourRepository(db)
        await load_owned_tour(repo, tour_id, requester_id)
        await repo.delete_tour(tour_id)
        logger.info("Tour %s deleted by %s", tour_id, requester_id)

    # ── Step-level edits ──────────────────────────────────────────────────

    async def _load_owned_step(
        self,
        repo: TourRepository,
        tour_id: uuid.UUID,
        step_id: uuid.UUID,
        requester_id: str,
    ):
        tour = await load_owned_tour(repo, tour_id, requester_id)
        step = await repo.get_step(tour_id, step_id)
        if step is None:
            raise NotFoundError(resource="step", resource_id=str(step_id))
        return tour, step

    async def attach_step_media(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        step_id: uuid.UUID,
        requester_id: str,
        request: MediaAttachRequest,
    ) -> StepResponse:
        """Swap a step's media; its annotations are removed."""
        repo = TourRepository(db)
        tour, step = await self._load_owned_step(repo, tour_id, step_id, requester_id)
        step_editor.attach_media(step, request.url, request.kind)
        step.touch()
        tour.touch()
        await repo.flush()
        return StepResponse.model_validate(step)

    async def add_step_annotation(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        step_id: uuid.UUID,
        requester_id: str,
        text: Optional[str],
        x: float,
        y: float,
    ) -> AnnotationResponse:
        repo = TourRepository(db)
        tour, step = await self._load_owned_step(repo, tour_id, step_id, requester_id)
        annotation = step_editor.add_annotation(step, text, x, y)
        tour.touch()
        await repo.flush()
        return AnnotationResponse.model_validate(annotation)

    async def remove_step_annotation(
        self,
        db: AsyncSession,
        tour_id: uuid.UUID,
        step_id: uuid.UUID,
        annotation_id: uuid.UUID,
        requester_id: str,
    ) -> None:
        """Idempotent: removing an unknown annotation id succeeds silently."""
        repo = TourRepository(db)
        tour, step = await self._load_owned_step(repo, tour_id, step_id, requester_id)
        if step_editor.remove_annotation(step, annotation_id):
            tour.touch()
            await repo.flush()


tour_service = TourService()
