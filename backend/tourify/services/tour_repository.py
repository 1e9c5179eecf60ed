"""
Tourify Backend — Tour Repository (Persistence Boundary)
=========================================================

What:  Every read and write of tours, steps, annotations and share
       descriptors goes through this class.
How:   Wraps one AsyncSession (the request's transaction). Multi-row writes
       (replace all steps, cascade delete) are issued inside that transaction,
       so a failure rolls the tour back to its previous consistent state.

Cascades:
    Dependents are deleted explicitly, leaves first:
        annotations → tour_steps → tour_shares → tours
    The foreign keys also declare ON DELETE CASCADE; the explicit order keeps
    behaviour identical on databases where FK enforcement is off (SQLite).

Loading:
    Tour documents are read with selectinload (tour → steps → annotations)
    and populate_existing, so a document fetched after a replace never shows
    the deleted steps still cached in the identity map.

Errors:
    SQLAlchemyError is logged and re-raised as DatabaseError.
"""

import logging
import uuid
from typing import Dict, List, Optional, Sequence

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourify.exceptions import DatabaseError
from tourify.models.tour import Annotation, ShareDescriptor, Step, Tour

logger = logging.getLogger(__name__)


def _document_query() -> Select:
    return (
        select(Tour)
        .options(selectinload(Tour.steps).selectinload(Step.annotations))
        .execution_options(populate_existing=True)
    )


class TourRepository:
    """Persistence operations for the tour aggregate, bound to one session."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _fail(self, operation: str, error: Exception, **context) -> DatabaseError:
        logger.error("Database error during %s: %s", operation, error, exc_info=True)
        context.update(operation=operation, error_type=type(error).__name__)
        return DatabaseError(context=context)

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get_tour(self, tour_id: uuid.UUID, with_children: bool = False) -> Optional[Tour]:
        """Tour by id, optionally with ordered steps and their annotations."""
        query = _document_query() if with_children else select(Tour)
        try:
            result = await self.db.execute(query.where(Tour.id == tour_id))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("get_tour", e, tour_id=str(tour_id))

    async def list_tours(self, owner_id: str) -> List[Tour]:
        """All tour documents of an owner, newest first."""
        query = (
            _document_query()
            .where(Tour.owner_id == owner_id)
            .order_by(Tour.created_at.desc(), Tour.id)
        )
        try:
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._fail("list_tours", e)

    async def get_step(self, tour_id: uuid.UUID, step_id: uuid.UUID) -> Optional[Step]:
        """Step of the given tour with its annotations loaded."""
        query = (
            select(Step)
            .options(selectinload(Step.annotations))
            .where(Step.id == step_id, Step.tour_id == tour_id)
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("get_step", e, step_id=str(step_id))

    async def get_share(self, tour_id: uuid.UUID) -> Optional[ShareDescriptor]:
        try:
            result = await self.db.execute(
                select(ShareDescriptor).where(ShareDescriptor.tour_id == tour_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("get_share", e, tour_id=str(tour_id))

    async def get_share_by_token(self, share_id: str) -> Optional[ShareDescriptor]:
        try:
            result = await self.db.execute(
                select(ShareDescriptor).where(ShareDescriptor.share_id == share_id)
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._fail("get_share_by_token", e)

    async def count_by_status(self, owner_id: str) -> Dict[str, int]:
        try:
            result = await self.db.execute(
                select(Tour.status, func.count(Tour.id))
                .where(Tour.owner_id == owner_id)
                .group_by(Tour.status)
            )
            return {status: count for status, count in result.all()}
        except SQLAlchemyError as e:
            raise self._fail("count_by_status", e)

    async def count_children(self, owner_id: str) -> Dict[str, int]:
        """Number of steps and annotations across an owner's tours."""
        owned = select(Tour.id).where(Tour.owner_id == owner_id)
        try:
            steps = await self.db.execute(
                select(func.count(Step.id)).where(Step.tour_id.in_(owned))
            )
            annotations = await self.db.execute(
                select(func.count(Annotation.id))
                .join(Step, Annotation.step_id == Step.id)
                .where(Step.tour_id.in_(owned))
            )
            return {
                "steps": steps.scalar() or 0,
                "annotations": annotations.scalar() or 0,
            }
        except SQLAlchemyError as e:
            raise self._fail("count_children", e)

    # ── Writes ────────────────────────────────────────────────────────────

    async def add_tour(self, tour: Tour) -> Tour:
        try:
            self.db.add(tour)
            await self.db.flush()
            return tour
        except SQLAlchemyError as e:
            raise self._fail("add_tour", e)

    async def add_steps(self, tour_id: uuid.UUID, steps: Sequence[Step]) -> None:
        """
        Insert steps for an existing tour with dense 0-based step_order.

        The order is the position in `steps`; annotations attached to each step
        are inserted with it.
        """
        for position, step in enumerate(steps):
            step.tour_id = tour_id
            step.step_order = position
        try:
            self.db.add_all(steps)
            await self.db.flush()
        except SQLAlchemyError as e:
            raise self._fail("add_steps", e, tour_id=str(tour_id))

    async def delete_steps(self, tour_id: uuid.UUID) -> None:
        """Delete every step of a tour and every annotation of those steps."""
        step_ids = select(Step.id).where(Step.tour_id == tour_id)
        try:
            await self.db.execute(
                delete(Annotation)
                .where(Annotation.step_id.in_(step_ids))
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                delete(Step)
                .where(Step.tour_id == tour_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            raise self._fail("delete_steps", e, tour_id=str(tour_id))

    async def replace_steps(self, tour_id: uuid.UUID, steps: Sequence[Step]) -> None:
        """Destructive replace: drop all current steps, then insert `steps`."""
        await self.delete_steps(tour_id)
        await self.add_steps(tour_id, steps)

    async def add_share(self, share: ShareDescriptor) -> ShareDescriptor:
        try:
            self.db.add(share)
            await self.db.flush()
            return share
        except SQLAlchemyError as e:
            raise self._fail("add_share", e, tour_id=str(share.tour_id))

    async def flush(self) -> None:
        """Persist pending attribute changes on loaded objects."""
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            raise self._fail("flush", e)

    async def delete_tour(self, tour_id: uuid.UUID) -> None:
        """Delete a tour with its steps, annotations and share descriptor."""
        await self.delete_steps(tour_id)
        try:
            await self.db.execute(
                delete(ShareDescriptor)
                .where(ShareDescriptor.tour_id == tour_id)
                .execution_options(synchronize_session=False)
            )
            await self.db.execute(
                delete(Tour)
                .where(Tour.id == tour_id)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            raise self._fail("delete_tour", e, tour_id=str(tour_id))

    async def reload_document(self, tour_id: uuid.UUID) -> Tour:
        """Re-read a tour document after writes in the current transaction."""
        tour = await self.get_tour(tour_id, with_children=True)
        if tour is None:
            raise DatabaseError(
                message="Failed to retrieve the saved tour.",
                context={"tour_id": str(tour_id)},
            )
        return tour
