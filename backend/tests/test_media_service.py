"""
Tourify Backend — Media Registry and Analytics Tests
=====================================================

What:  Upload signing, asset metadata persistence, per-owner counters.
How:   Cloudinary credentials are patched onto the settings object; nothing
       talks to the provider.
"""

from datetime import timedelta

import cloudinary
import cloudinary.utils
import pytest

from conftest import OWNER, STRANGER
from tourify.config import settings
from tourify.exceptions import ServiceUnavailableError, ValidationError
from tourify.models.media import MediaAsset
from tourify.schemas.media import MediaMetadataRequest
from tourify.schemas.tour import TourPayload
from tourify.services.analytics_service import AnalyticsService
from tourify.services.media_service import MediaService, configure_cloudinary
from tourify.services.tour_service import tour_service


@pytest.fixture
def cloudinary_settings(monkeypatch):
    monkeypatch.setattr(settings, "cloudinary_cloud_name", "demo-cloud")
    monkeypatch.setattr(settings, "cloudinary_api_key", "123456")
    monkeypatch.setattr(settings, "cloudinary_api_secret", "abcd")


def metadata(public_id="tours/shot", url="https://res.example/shot.png", kind="image"):
    return MediaMetadataRequest(public_id=public_id, secure_url=url, resource_type=kind)


class TestSignature:

    def test_generate_signature(self, cloudinary_settings):
        result = MediaService().generate_signature(timestamp=1700000000)

        assert result.success is True
        assert result.timestamp == 1700000000
        assert result.api_key == "123456"
        assert result.cloud_name == "demo-cloud"
        assert result.signature == cloudinary.utils.api_sign_request({"timestamp": 1700000000}, "abcd")
        assert result.model_dump(by_alias=True)["apiKey"] == "123456"

    def test_unconfigured_raises_service_unavailable(self, monkeypatch):
        monkeypatch.setattr(settings, "cloudinary_api_secret", "")
        with pytest.raises(ServiceUnavailableError):
            MediaService().generate_signature()

    def test_default_timestamp_is_now(self, cloudinary_settings):
        result = MediaService().generate_signature()

        assert result.timestamp > 1700000000
        assert result.signature == cloudinary.utils.api_sign_request(
            {"timestamp": result.timestamp}, "abcd"
        )

    def test_configure_cloudinary_uses_settings(self, cloudinary_settings):
        configure_cloudinary()

        config = cloudinary.config()
        assert config.cloud_name == "demo-cloud"
        assert config.api_key == "123456"
        assert config.api_secret == "abcd"


class TestMetadata:

    def setup_method(self):
        self.service = MediaService()

    @pytest.mark.asyncio
    async def test_save_and_list(self, db_session):
        saved = await self.service.save_metadata(db_session, OWNER, metadata())
        await self.service.save_metadata(db_session, STRANGER, metadata("other/clip", kind="video"))

        listing = await self.service.list_assets(db_session, OWNER)

        assert [a.id for a in listing.assets] == [saved.id]
        assert saved.media_url == "https://res.example/shot.png"
        assert saved.resource_type == "image"

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_session):
        first = await self.service.save_metadata(db_session, OWNER, metadata("a"))
        second = await self.service.save_metadata(db_session, OWNER, metadata("b"))
        row = await db_session.get(MediaAsset, first.id)
        row.created_at = row.created_at - timedelta(minutes=5)
        await db_session.flush()

        listing = await self.service.list_assets(db_session, OWNER)
        assert [a.id for a in listing.assets] == [second.id, first.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "request_body",
        [
            MediaMetadataRequest(secure_url="u", resource_type="image"),
            MediaMetadataRequest(public_id="p", resource_type="image"),
            MediaMetadataRequest(public_id="p", secure_url="u"),
            MediaMetadataRequest(public_id=" ", secure_url="u", resource_type="image"),
        ],
    )
    async def test_required_fields(self, db_session, request_body):
        with pytest.raises(ValidationError, match="required"):
            await self.service.save_metadata(db_session, OWNER, request_body)

    @pytest.mark.asyncio
    async def test_unsupported_resource_type(self, db_session):
        with pytest.raises(ValidationError, match="Unsupported resource_type"):
            await self.service.save_metadata(db_session, OWNER, metadata(kind="raw"))


class TestAnalytics:

    @pytest.mark.asyncio
    async def test_empty_summary(self, db_session):
        summary = await AnalyticsService().summary(db_session, OWNER)
        assert summary.total_tours == 0
        assert summary.total_steps == 0

    @pytest.mark.asyncio
    async def test_counts_only_owned_tours(self, db_session):
        def payload(status, steps):
            return TourPayload.model_validate({"title": "t", "status": status, "steps": steps})

        two_annotations = {
            "imageUrl": "a.png",
            "annotations": [{"text": "a", "x": 1, "y": 1}, {"text": "b", "x": 2, "y": 2}],
        }
        await tour_service.create_tour(db_session, OWNER, payload("published", [two_annotations, {}]))
        await tour_service.create_tour(db_session, OWNER, payload("draft", [{}]))
        await tour_service.create_tour(db_session, OWNER, payload("private", []))
        await tour_service.create_tour(db_session, STRANGER, payload("published", [two_annotations]))

        summary = await AnalyticsService().summary(db_session, OWNER)

        assert summary.total_tours == 3
        assert summary.published_tours == 1
        assert summary.draft_tours == 1
        assert summary.private_tours == 1
        assert summary.total_steps == 3
        assert summary.total_annotations == 2
