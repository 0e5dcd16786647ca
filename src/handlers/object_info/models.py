"""Pydantic models for object info request/response."""

from pydantic import BaseModel, ConfigDict, Field

from core.models.image import ObjectMetadata


class ObjectInfoRequest(BaseModel):
    """Validation model for object info request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    key: str = Field(..., min_length=1, max_length=1024, description="Object key")


class ObjectInfoResponse(BaseModel):
    """Existence flag plus stored headers when the object exists."""

    key: str
    exists: bool
    metadata: ObjectMetadata | None = None
