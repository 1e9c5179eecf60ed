"""Per-owner tour analytics payload."""

from tourify.schemas.tour import CamelModel


class AnalyticsSummary(CamelModel):
    total_tours: int = 0
    published_tours: int = 0
    draft_tours: int = 0
    private_tours: int = 0
    total_steps: int = 0
    total_annotations: int = 0
