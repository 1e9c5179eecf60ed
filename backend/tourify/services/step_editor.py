"""
Tourify Backend — Step Aggregate Operations
============================================

What:  The rules that keep a single step consistent: one active media
       reference, non-empty annotation text, coordinates inside [0, 100].
How:   Plain functions over the Step ORM object. They work the same on a
       transient step being assembled from a request body and on a persisted
       step loaded with its annotations (orphaned annotations are deleted on
       flush through the relationship's delete-orphan cascade).

Rules:
    attach_media       → sets the URL for `kind`, clears the other URL and
                         removes every annotation (positions were relative to
                         the old media)
    add_annotation     → rejects blank text, clamps x/y, assigns a fresh id
    remove_annotation  → idempotent; unknown ids are ignored
    Annotations have no order, so there is no reorder operation.
"""

import uuid
from typing import Optional

from tourify.exceptions import ValidationError
from tourify.models.media import MediaKind
from tourify.models.tour import Annotation, Step
from tourify.schemas.tour import StepPayload
from tourify.services.coordinates import clamp_percentage


def attach_media(step: Step, url: Optional[str], kind: str) -> Step:
    if not url or not url.strip():
        raise ValidationError(message="Media URL is required.", field="url")
    if kind not in MediaKind.values():
        raise ValidationError(
            message=f"Invalid media kind '{kind}'. Must be image or video.",
            field="kind",
            context={"allowed": MediaKind.values()},
        )

    url = url.strip()
    if kind == MediaKind.VIDEO.value:
        step.video_url = url
        step.image_url = None
    else:
        step.image_url = url
        step.video_url = None
    step.annotations.clear()
    return step


def add_annotation(step: Step, text: Optional[str], x: float, y: float) -> Annotation:
    if text is None or not text.strip():
        raise ValidationError(message="Annotation text is required.", field="text")

    annotation = Annotation(
        id=uuid.uuid4(),
        text=text,
        x=clamp_percentage(x),
        y=clamp_percentage(y),
    )
    step.annotations.append(annotation)
    return annotation


def remove_annotation(step: Step, annotation_id: uuid.UUID) -> bool:
    """Remove the annotation if present; returns False when nothing matched."""
    for annotation in list(step.annotations):
        if annotation.id == annotation_id:
            step.annotations.remove(annotation)
            return True
    return False


def build_step(payload: StepPayload) -> Step:
    """
    Assemble a transient step from a create/replace body.

    Media URLs are copied as sent (both may be present in older editor
    payloads); annotations go through add_annotation so validation and
    clamping match the per-step endpoints. step_order and tour_id are set by
    the repository on insert.
    """
    step = Step(
        id=uuid.uuid4(),
        image_url=payload.image_url,
        video_url=payload.video_url,
        description=payload.description,
        annotations=[],
    )
    for item in payload.annotations:
        add_annotation(step, item.text, item.x, item.y)
    return step
