"""Shared image models for the upload pipeline."""

from collections.abc import Mapping
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    model_validator,
)
from pydantic.alias_generators import to_camel


class ImageProfile(str, Enum):
    """Named size/quality profile applied to every uploaded image.

    Declaration order is the rendering order.
    """

    THUMBNAIL = "thumbnail"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    ORIGINAL = "original"


class ProfileSpec(BaseModel):
    """Bounding box and encoder quality for one profile.

    A spec without a bounding box only re-encodes the source.
    """

    model_config = ConfigDict(frozen=True)

    max_width: StrictInt | None = Field(None, ge=1, description="Maximum width in pixels")
    max_height: StrictInt | None = Field(None, ge=1, description="Maximum height in pixels")
    quality: StrictInt = Field(..., ge=1, le=100, description="Encoder quality (1-100)")

    @model_validator(mode="after")
    def check_bounding_box(self) -> "ProfileSpec":
        if (self.max_width is None) != (self.max_height is None):
            raise ValueError("max_width and max_height must be set together")
        return self

    @property
    def resizes(self) -> bool:
        return self.max_width is not None


class UploadedFile(BaseModel):
    """A file received in a request. Lives only as long as the request."""

    filename: StrictStr = Field("upload", description="Client supplied file name")
    content_type: StrictStr = Field(..., description="Declared MIME type")
    size: StrictInt = Field(..., ge=0, description="Declared size in bytes")
    data: bytes = Field(..., repr=False, description="Raw file content")

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        *,
        content_type: str,
        filename: str = "upload",
    ) -> "UploadedFile":
        return cls(
            filename=filename,
            content_type=content_type,
            size=len(data),
            data=data,
        )


class ImageVariant(BaseModel):
    """One encoded rendition of an uploaded image."""

    profile: ImageProfile
    key: StrictStr = Field(..., description="Object storage key")
    data: bytes = Field(..., repr=False, description="Encoded image bytes")
    content_type: StrictStr
    size: StrictInt = Field(..., ge=0)
    width: StrictInt
    height: StrictInt


class ImageInfo(BaseModel):
    """Basic facts about a decoded image."""

    width: StrictInt
    height: StrictInt
    format: StrictStr | None = None
    has_alpha: bool = False


class VariantUrls(BaseModel):
    """Public URL of every rendition, one field per profile."""

    thumbnail: StrictStr
    small: StrictStr
    medium: StrictStr
    large: StrictStr
    original: StrictStr

    @classmethod
    def from_profiles(cls, urls: Mapping[ImageProfile, str]) -> "VariantUrls":
        return cls(**{profile.value: url for profile, url in urls.items()})

    def for_profile(self, profile: ImageProfile) -> str:
        url: str = getattr(self, profile.value)
        return url


class UploadResult(BaseModel):
    """Outcome of a single image upload, serialized in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: StrictStr = Field(..., description="Key of the original (compressed) rendition")
    url: StrictStr = Field(..., description="Public URL of the original rendition")
    size: StrictInt = Field(..., description="Size of the original rendition in bytes")
    content_type: StrictStr = Field(..., description="Content type shared by all renditions")
    variants: VariantUrls


class DeleteVariantsResult(BaseModel):
    """Which rendition keys were removed and which were already absent."""

    stem: StrictStr = Field(..., description="<timestamp>-<baseKey> shared by the renditions")
    deleted: list[StrictStr] = Field(default_factory=list)
    missing: list[StrictStr] = Field(default_factory=list)


class ObjectMetadata(BaseModel):
    """HEAD response for a stored object."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: StrictStr
    size: StrictInt
    content_type: StrictStr
    last_modified: StrictStr | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
