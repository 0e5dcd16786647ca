"""Pydantic models for delete image request/response."""

from pydantic import BaseModel, ConfigDict, Field


class DeleteImageRequest(BaseModel):
    """Validation model for delete image request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    key: str = Field(
        ...,
        min_length=1,
        max_length=1024,
        description="Object key to delete, e.g. products/original/<stem>.webp",
    )


class DeleteImageResponse(BaseModel):
    """Response model for image deletion."""

    key: str = Field(..., description="Deleted object key")
    existed: bool = Field(..., description="Whether the object existed before the call")
