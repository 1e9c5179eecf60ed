"""
Tourify Backend — Tour Document Models
=======================================

What:  ORM models for the tour document and its sharing descriptor.
How:   Four tables linked by cascading foreign keys:

    tours ──< tour_steps ──< annotations
      │
      └──── tour_shares (at most one per tour)

Ownership:
    Deleting a tour deletes its steps, their annotations and its share row.
    TourRepository performs these deletes explicitly; the ON DELETE CASCADE
    foreign keys enforce the same rule at the database level.

Ordering:
    Tour.steps is ordered by step_order. Writes always assign a dense
    0-based order from the position in the request payload.
    Annotations within a step are unordered.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourify.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TourStatus(str, enum.Enum):
    """Lifecycle status; every transition between the three values is legal."""

    DRAFT = "draft"
    PUBLISHED = "published"
    PRIVATE = "private"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class Tour(Base):
    """
    Top-level shareable document owned by a single user.

    `status == published` is the only gate for GET /api/view/{id}; the share
    descriptor's `is_public` flag gates the share-token path independently.
    """

    __tablename__ = "tours"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Subject of the owner's verified token; never updated after insert
    owner_id: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Identity-provider subject of the tour owner",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=TourStatus.DRAFT.value,
        server_default=text("'draft'"),
        comment="Lifecycle status: draft, published, private",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Refreshed by every mutation of the tour or its steps",
    )

    steps: Mapped[List["Step"]] = relationship(
        back_populates="tour",
        order_by="Step.step_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_tours_owner_created", "owner_id", "created_at"),
    )

    def touch(self) -> None:
        """Refresh updated_at; every mutation path calls this."""
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, owner_id='{self.owner_id}', status='{self.status}')>"


class Step(Base):
    """
    One slide of a tour: a media reference plus its annotations.

    image_url and video_url are both nullable; attach_media keeps at most one
    of them set, but rows written before that rule may carry both.
    """

    __tablename__ = "tour_steps"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tour_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    video_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
        comment="Refreshed when the step's media is swapped",
    )

    tour: Mapped[Tour] = relationship(back_populates="steps")
    annotations: Mapped[List["Annotation"]] = relationship(
        back_populates="step",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def touch(self) -> None:
        self.updated_at = utcnow()

    def __repr__(self) -> str:
        return f"<Step(id={self.id}, tour_id={self.tour_id}, step_order={self.step_order})>"


class Annotation(Base):
    """
    A text callout positioned on a step's media.

    x and y are percentages of the media's bounding box, always in [0, 100],
    so placement survives any rendering size.
    """

    __tablename__ = "annotations"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    step_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tour_steps.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    x: Mapped[float] = mapped_column(Float, nullable=False, comment="Percent from left (0-100)")
    y: Mapped[float] = mapped_column(Float, nullable=False, comment="Percent from top (0-100)")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    step: Mapped[Step] = relationship(back_populates="annotations")

    def __repr__(self) -> str:
        return f"<Annotation(id={self.id}, x={self.x}, y={self.y})>"


class ShareDescriptor(Base):
    """
    Public-access record for a tour.

    share_id is 128 random bits, hex-encoded, generated once and never
    rotated by updates. password_hash uses the format produced by
    tourify.services.passwords.hash_password.
    """

    __tablename__ = "tour_shares"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    tour_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    share_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    is_public: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    password_hash: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<ShareDescriptor(tour_id={self.tour_id}, is_public={self.is_public})>"
