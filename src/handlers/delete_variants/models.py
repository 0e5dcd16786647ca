"""Pydantic models for delete-all-variants request."""

from pydantic import BaseModel, ConfigDict, Field


class DeleteVariantsRequest(BaseModel):
    """Validation model for delete-all-variants request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    base_key: str = Field(
        ...,
        min_length=1,
        max_length=1024,
        description="Variant stem (<timestamp>-<baseKey>) or any full variant key",
    )
