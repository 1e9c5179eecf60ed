"""Media upload schemas (camelCase on the wire)."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from tourify.schemas.tour import CamelModel


class UploadSignatureResponse(CamelModel):
    success: bool = True
    signature: str
    timestamp: int
    api_key: str
    cloud_name: str


class MediaMetadataRequest(CamelModel):
    """
    Sent by the browser after a successful direct upload.

    Field names follow the provider's upload response (public_id, secure_url,
    resource_type); camelCase spellings are accepted too.
    """

    public_id: Optional[str] = None
    secure_url: Optional[str] = None
    resource_type: Optional[str] = None


class MediaAssetResponse(CamelModel):
    id: uuid.UUID
    public_id: str
    media_url: str
    resource_type: str
    created_at: datetime


class MediaAssetListResponse(CamelModel):
    assets: List[MediaAssetResponse] = Field(default_factory=list)
