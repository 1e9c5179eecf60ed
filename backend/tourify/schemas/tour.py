"""
Tourify Backend — Tour Request/Response Schemas
================================================

What:  Pydantic models for the tour document API contract.
How:   JSON keys are camelCase (stepOrder, imageUrl, isPublic, ...) to match
       the editor SPA; request bodies also accept snake_case names.

Validation split:
    Schema level (FastAPI → 422): wrong JSON types, non-finite coordinates.
    Service level (ValidationError → 400): missing title, unknown status,
    empty annotation text. Those fields are therefore optional here.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class AnnotationPayload(CamelModel):
    """Annotation as sent by the editor; x/y outside [0, 100] are clamped."""

    text: Optional[str] = Field(default=None, description="Callout text (required, non-empty)")
    x: float = Field(allow_inf_nan=False, description="Percent from the left edge")
    y: float = Field(allow_inf_nan=False, description="Percent from the top edge")


class StepPayload(CamelModel):
    """
    One step of a create/replace body.

    step_order is not accepted: the position in the `steps` array decides it.
    """

    image_url: Optional[str] = None
    video_url: Optional[str] = None
    description: Optional[str] = None
    annotations: List[AnnotationPayload] = Field(default_factory=list)


class TourPayload(CamelModel):
    """Body of POST /api/tours and PUT /api/tours/{id}."""

    title: Optional[str] = Field(default=None, description="Required, non-empty")
    description: Optional[str] = None
    status: Optional[str] = Field(
        default=None,
        description="draft, published or private; defaults to draft",
    )
    steps: List[StepPayload] = Field(default_factory=list)


class StatusUpdate(CamelModel):
    status: Optional[str] = Field(default=None, description="draft, published or private")


class MediaAttachRequest(CamelModel):
    """Replace a step's media; the step's annotations are cleared."""

    url: Optional[str] = None
    kind: str = Field(default="image", description="image or video")


class ShareUpdate(CamelModel):
    is_public: bool = False
    password: Optional[str] = Field(
        default=None,
        description="New share password; omit or send an empty string to remove it",
    )
    expires_at: Optional[datetime] = Field(
        default=None,
        description="Share link expiry (ISO 8601); null disables expiry",
    )

    @field_validator("expires_at")
    @classmethod
    def expires_at_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Offset-less timestamps are read as UTC; all others are converted to UTC."""
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class SharedTourAccess(CamelModel):
    password: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AnnotationResponse(CamelModel):
    id: uuid.UUID
    step_id: uuid.UUID
    text: str
    x: float
    y: float


class StepResponse(CamelModel):
    id: uuid.UUID
    tour_id: uuid.UUID
    step_order: int
    image_url: Optional[str] = None
    video_url: Optional[str] = None
    description: Optional[str] = None
    annotations: List[AnnotationResponse] = Field(default_factory=list)


class TourDocument(CamelModel):
    """
    Full tour document as served to anonymous viewers.

    Steps are already ordered by step_order ascending.
    """

    id: uuid.UUID
    title: str
    description: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime
    steps: List[StepResponse] = Field(default_factory=list)


class TourResponse(TourDocument):
    """Tour document as served to its owner."""

    owner_id: str


class TourListResponse(CamelModel):
    tours: List[TourResponse]


class StatusResponse(CamelModel):
    id: uuid.UUID
    status: str
    updated_at: datetime
    message: str = "Tour status updated successfully."


class ShareResponse(CamelModel):
    share_id: str = Field(description="Unguessable 32-character share token")
    is_public: bool
    has_password: bool
    expires_at: Optional[datetime] = None
    share_url: str
