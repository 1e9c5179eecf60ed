"""
Tourify Backend — Tour Service Tests
=====================================

What:  Tests for the tour aggregate: create, get, list, replace, status,
       delete and the per-step edits.
How:   Runs TourService against the per-test in-memory SQLite database.

What we test:
    ✅ Steps come back ordered 0..n-1 in payload order
    ✅ Replace deletes every previous step and annotation
    ✅ Ownership gate: 404 for unknown tours, 403 for other owners
    ✅ Delete removes steps, annotations and the share descriptor
    ✅ Step edits refresh the tour's updated_at
    ✅ Steps and annotations carry created_at/updated_at
"""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import func, select

from conftest import OWNER, STRANGER
from tourify.exceptions import ForbiddenError, NotFoundError, ValidationError
from tourify.models.tour import Annotation, ShareDescriptor, Step, Tour, utcnow
from tourify.schemas.tour import MediaAttachRequest, TourPayload
from tourify.services.share_service import share_service
from tourify.services.tour_service import TourService


def tour_payload(title="Onboarding", steps=None, **kwargs) -> TourPayload:
    return TourPayload.model_validate({"title": title, "steps": steps or [], **kwargs})


def step(image_url, *annotations):
    return {
        "imageUrl": image_url,
        "annotations": [{"text": text, "x": x, "y": y} for text, x, y in annotations],
    }


async def count(db, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    result = await db.execute(query)
    return result.scalar_one()


class TestCreateAndGet:

    def setup_method(self):
        self.service = TourService()

    @pytest.mark.asyncio
    async def test_create_defaults_to_draft(self, db_session):
        tour = await self.service.create_tour(db_session, OWNER, tour_payload())
        assert tour.status == "draft"
        assert tour.owner_id == OWNER
        assert tour.steps == []

    @pytest.mark.asyncio
    async def test_steps_ordered_by_payload_position(self, db_session):
        payload = tour_payload(steps=[step(f"{i}.png") for i in range(5)])
        created = await self.service.create_tour(db_session, OWNER, payload)

        fetched = await self.service.get_tour(db_session, created.id, OWNER)

        assert [s.step_order for s in fetched.steps] == [0, 1, 2, 3, 4]
        assert [s.image_url for s in fetched.steps] == [f"{i}.png" for i in range(5)]

    @pytest.mark.asyncio
    async def test_annotations_are_clamped_on_create(self, db_session):
        payload = tour_payload(steps=[step("a.png", ("Click here", 150, -10))])
        tour = await self.service.create_tour(db_session, OWNER, payload)

        annotation = tour.steps[0].annotations[0]
        assert (annotation.x, annotation.y) == (100.0, 0.0)
        assert annotation.step_id == tour.steps[0].id

    @pytest.mark.asyncio
    @pytest.mark.parametrize("title", [None, "", "   "])
    async def test_title_required(self, db_session, title):
        with pytest.raises(ValidationError, match="Title is required"):
            await self.service.create_tour(db_session, OWNER, tour_payload(title=title))

    @pytest.mark.asyncio
    async def test_invalid_status_rejected(self, db_session):
        with pytest.raises(ValidationError, match="Invalid status"):
            await self.service.create_tour(db_session, OWNER, tour_payload(status="archived"))
        assert await count(db_session, Tour) == 0

    @pytest.mark.asyncio
    async def test_list_is_owner_scoped_newest_first(self, db_session):
        older = await self.service.create_tour(db_session, OWNER, tour_payload("Older"))
        newer = await self.service.create_tour(db_session, OWNER, tour_payload("Newer"))
        await self.service.create_tour(db_session, STRANGER, tour_payload("Not mine"))

        row = await db_session.get(Tour, older.id)
        row.created_at = row.created_at - timedelta(hours=1)
        await db_session.flush()

        result = await self.service.list_tours(db_session, OWNER)
        assert [t.id for t in result.tours] == [newer.id, older.id]


class TestOwnershipGate:

    def setup_method(self):
        self.service = TourService()

    @pytest.mark.asyncio
    async def test_stranger_is_forbidden(self, db_session):
        tour = await self.service.create_tour(db_session, OWNER, tour_payload())

        with pytest.raises(ForbiddenError):
            await self.service.get_tour(db_session, tour.id, STRANGER)
        with pytest.raises(ForbiddenError):
            await self.service.replace_tour(db_session, tour.id, STRANGER, tour_payload("Hijack"))
        with pytest.raises(ForbiddenError):
            await self.service.set_status(db_session, tour.id, STRANGER, "published")
        with pytest.raises(ForbiddenError):
            await self.service.delete_tour(db_session, tour.id, STRANGER)

        still_there = await self.service.get_tour(db_session, tour.id, OWNER)
        assert still_there.title == "Onboarding"
        assert still_there.status == "draft"

    @pytest.mark.asyncio
    async def test_unknown_tour_is_not_found_for_anyone(self, db_session):
        missing = uuid.uuid4()
        for requester in (OWNER, STRANGER):
            with pytest.raises(NotFoundError):
                await self.service.get_tour(db_session, missing, requester)
            with pytest.raises(NotFoundError):
                await self.service.replace_tour(db_session, missing, requester, tour_payload())
            with pytest.raises(NotFoundError):
                await self.service.set_status(db_session, missing, requester, "draft")
            with pytest.raises(NotFoundError):
                await self.service.delete_tour(db_session, missing, requester)

    @pytest.mark.asyncio
    async def test_not_found_checked_before_validation(self, db_session):
        with pytest.raises(NotFoundError):
            await self.service.set_status(db_session, uuid.uuid4(), OWNER, "bogus")


class TestReplace:

    def setup_method(self):
        self.service = TourService()

    @pytest.mark.asyncio
    async def test_replace_with_fewer_steps_leaves_no_orphans(self, db_session):
        tour = await self.service.create_tour(
            db_session,
            OWNER,
            tour_payload(
                steps=[
                    step("1.png", ("a", 1, 1), ("b", 2, 2)),
                    step("2.png", ("c", 3, 3)),
                    step("3.png"),
                ]
            ),
        )
        old_step_ids = [s.id for s in tour.steps]

        replaced = await self.service.replace_tour(
            db_session,
            tour.id,
            OWNER,
            tour_payload("Renamed", steps=[step("new.png", ("only", 50, 50))], status="private"),
        )

        assert replaced.title == "Renamed"
        assert replaced.status == "private"
        assert [s.image_url for s in replaced.steps] == ["new.png"]
        assert replaced.steps[0].step_order == 0
        assert replaced.steps[0].id not in old_step_ids

        assert await count(db_session, Step, Step.tour_id == tour.id) == 1
        assert await count(db_session, Annotation) == 1

        fetched = await self.service.get_tour(db_session, tour.id, OWNER)
        assert [s.id for s in fetched.steps] == [replaced.steps[0].id]

    @pytest.mark.asyncio
    async def test_replace_with_empty_steps(self, db_session):
        tour = await self.service.create_tour(
            db_session, OWNER, tour_payload(steps=[step("1.png", ("a", 1, 1))])
        )
        replaced = await self.service.replace_tour(db_session, tour.id, OWNER, tour_payload())

        assert replaced.steps == []
        assert await count(db_session, Step) == 0
        assert await count(db_session, Annotation) == 0

    @pytest.mark.asyncio
    async def test_invalid_body_keeps_existing_steps(self, db_session):
        tour = await self.service.create_tour(
            db_session, OWNER, tour_payload(steps=[step("1.png"), step("2.png")])
        )
        with pytest.raises(ValidationError):
            await self.service.replace_tour(
                db_session, tour.id, OWNER, tour_payload(steps=[step("x.png", ("", 1, 1))])
            )
        assert await count(db_session, Step, Step.tour_id == tour.id) == 2

    @pytest.mark.asyncio
    async def test_replace_refreshes_updated_at(self, db_session):
        tour = await self.service.create_tour(db_session, OWNER, tour_payload())
        replaced = await self.service.replace_tour(db_session, tour.id, OWNER, tour_payload("New"))
        assert replaced.updated_at >= tour.updated_at
        assert replaced.created_at == tour.created_at


class TestStatusAndDelete:

    def setup_method(self):
        self.service = TourService()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["published", "private", "draft"])
    async def test_any_transition_allowed(self, db_session, status):
        tour = await self.service.create_tour(
            db_session, OWNER, tour_payload(status="published")
        )
        result = await self.service.set_status(db_session, tour.id, OWNER, status)
        assert result.status == status
        assert result.message == "Tour status updated successfully."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [None, "", "Published", "archived"])
    async def test_invalid_status_rejected(self, db_session, status):
        tour = await self.service.create_tour(db_session, OWNER, tour_payload())
        with pytest.raises(ValidationError):
            await self.service.set_status(db_session, tour.id, OWNER, status)

    @pytest.mark.asyncio
    async def test_delete_cascades(self, db_session):
        tour = await self.service.create_tour(
            db_session,
            OWNER,
            tour_payload(steps=[step("1.png", ("a", 1, 1)), step("2.png", ("b", 2, 2), ("c", 3, 3))]),
        )
        await share_service.get_or_create_share(db_session, tour.id, OWNER)
        other = await self.service.create_tour(
            db_session, OWNER, tour_payload("Keep", steps=[step("k.png", ("k", 1, 1))])
        )

        await self.service.delete_tour(db_session, tour.id, OWNER)

        with pytest.raises(NotFoundError):
            await self.service.get_tour(db_session, tour.id, OWNER)
        assert await count(db_session, Step, Step.tour_id == tour.id) == 0
        assert await count(db_session, ShareDescriptor, ShareDescriptor.tour_id == tour.id) == 0
        assert await count(db_session, Annotation) == 1

        kept = await self.service.get_tour(db_session, other.id, OWNER)
        assert len(kept.steps[0].annotations) == 1


class TestStepEdits:

    def setup_method(self):
        self.service = TourService()

    async def _tour_with_step(self, db_session):
        tour = await self.service.create_tour(
            db_session, OWNER, tour_payload(steps=[step("a.png", ("old", 10, 10))])
        )
        return tour, tour.steps[0].id

    @pytest.mark.asyncio
    async def test_add_annotation_clamps_and_persists(self, db_session):
        tour, step_id = await self._tour_with_step(db_session)

        annotation = await self.service.add_step_annotation(
            db_session, tour.id, step_id, OWNER, "Click here", 150, -10
        )

        assert (annotation.x, annotation.y) == (100.0, 0.0)
        assert annotation.step_id == step_id
        fetched = await self.service.get_tour(db_session, tour.id, OWNER)
        assert {a.text for a in fetched.steps[0].annotations} == {"old", "Click here"}
        assert fetched.updated_at >= tour.updated_at

    @pytest.mark.asyncio
    async def test_attach_media_clears_annotations(self, db_session):
        tour, step_id = await self._tour_with_step(db_session)

        updated = await self.service.attach_step_media(
            db_session, tour.id, step_id, OWNER, MediaAttachRequest(url="demo.mp4", kind="video")
        )

        assert updated.video_url == "demo.mp4"
        assert updated.image_url is None
        assert updated.annotations == []
        assert await count(db_session, Annotation) == 0

    @pytest.mark.asyncio
    async def test_steps_and_annotations_are_timestamped(self, db_session):
        tour, step_id = await self._tour_with_step(db_session)

        annotation = await db_session.scalar(select(Annotation))
        assert annotation.created_at is not None
        assert annotation.updated_at is not None

        row = await db_session.get(Step, step_id)
        assert row.created_at is not None
        stale = utcnow() - timedelta(days=1)
        row.updated_at = stale
        await db_session.flush()

        await self.service.attach_step_media(
            db_session, tour.id, step_id, OWNER, MediaAttachRequest(url="new.png")
        )

        row = await db_session.get(Step, step_id)
        assert row.updated_at > stale

    @pytest.mark.asyncio
    async def test_remove_annotation_is_idempotent(self, db_session):
        tour, step_id = await self._tour_with_step(db_session)
        annotation_id = tour.steps[0].annotations[0].id

        await self.service.remove_step_annotation(db_session, tour.id, step_id, annotation_id, OWNER)
        await self.service.remove_step_annotation(db_session, tour.id, step_id, annotation_id, OWNER)

        assert await count(db_session, Annotation) == 0

    @pytest.mark.asyncio
    async def test_unknown_step_not_found(self, db_session):
        tour, _ = await self._tour_with_step(db_session)
        with pytest.raises(NotFoundError):
            await self.service.add_step_annotation(
                db_session, tour.id, uuid.uuid4(), OWNER, "x", 1, 1
            )

    @pytest.mark.asyncio
    async def test_step_of_other_tour_not_found(self, db_session):
        first, step_id = await self._tour_with_step(db_session)
        second = await self.service.create_tour(db_session, OWNER, tour_payload("Second"))
        with pytest.raises(NotFoundError):
            await self.service.attach_step_media(
                db_session, second.id, step_id, OWNER, MediaAttachRequest(url="x.png")
            )

    @pytest.mark.asyncio
    async def test_stranger_cannot_edit_steps(self, db_session):
        tour, step_id = await self._tour_with_step(db_session)
        with pytest.raises(ForbiddenError):
            await self.service.add_step_annotation(
                db_session, tour.id, step_id, STRANGER, "x", 1, 1
            )
