# Importing the models registers every table on Base.metadata (Alembic, tests).
from tourify.models.media import MediaAsset, MediaKind
from tourify.models.tour import Annotation, ShareDescriptor, Step, Tour, TourStatus

__all__ = [
    "Annotation",
    "MediaAsset",
    "MediaKind",
    "ShareDescriptor",
    "Step",
    "Tour",
    "TourStatus",
]
