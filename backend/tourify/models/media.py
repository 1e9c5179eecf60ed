"""
Tourify Backend — Media Asset Model
====================================

What:  Metadata for images and videos uploaded directly from the browser to
       the media storage provider (Cloudinary).
How:   The backend never receives media bytes. After a signed upload the
       client posts (public_id, secure_url, resource_type); one row is stored
       per asset so the editor can list the owner's uploads.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from tourify.database import Base
from tourify.models.tour import utcnow


class MediaKind(str, enum.Enum):
    IMAGE = "image"
    VIDEO = "video"

    @classmethod
    def values(cls):
        return [member.value for member in cls]


class MediaAsset(Base):
    __tablename__ = "media_assets"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(Text, nullable=False)
    public_id: Mapped[str] = mapped_column(Text, nullable=False, comment="Provider asset id")
    media_url: Mapped[str] = mapped_column(Text, nullable=False)
    resource_type: Mapped[str] = mapped_column(String(20), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_media_assets_owner_created", "owner_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<MediaAsset(id={self.id}, resource_type='{self.resource_type}')>"
