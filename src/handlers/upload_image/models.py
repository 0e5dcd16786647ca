"""Pydantic models for single image upload request/response."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.utils.constants import OWNER_ID_PATTERN


class UploadImageRequest(BaseModel):
    """Validation model for the non-file form fields of an upload."""

    model_config = ConfigDict(str_strip_whitespace=True)

    product_id: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        pattern=OWNER_ID_PATTERN,
        description="Product identifier used as the key prefix (alphanumeric, underscore, hyphen)",
    )

    @field_validator("product_id", mode="before")
    @classmethod
    def blank_as_missing(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value
