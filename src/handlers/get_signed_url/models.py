"""Pydantic models for signed URL request/response."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from core.utils.constants import (
    DEFAULT_SIGNED_URL_EXPIRY,
    MAX_SIGNED_URL_EXPIRY,
    MIN_SIGNED_URL_EXPIRY,
)


class SignedUrlRequest(BaseModel):
    """Validation model for signed URL request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    key: str = Field(..., min_length=1, max_length=1024, description="Object key")
    expires_in: int = Field(
        DEFAULT_SIGNED_URL_EXPIRY,
        ge=MIN_SIGNED_URL_EXPIRY,
        le=MAX_SIGNED_URL_EXPIRY,
        description="URL lifetime in seconds",
    )


class SignedUrlResponse(BaseModel):
    """Response model for a generated signed URL."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str
    url: str
    expires_in: int
