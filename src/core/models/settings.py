"""Typed runtime configuration for the upload pipeline.

Settings are read from the environment once per Lambda container and then
passed explicitly to the components that need them.
"""

import os
from collections.abc import Mapping
from functools import lru_cache
from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
    field_validator,
)

from core.models.image import ImageProfile, ProfileSpec
from core.utils.constants import (
    ALLOWED_MIME_TYPES,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_CONCURRENT_RENDERS,
    DEFAULT_MAX_CONCURRENT_UPLOADS,
    DEFAULT_MAX_UPLOAD_WORKERS,
    DEFAULT_OUTPUT_FORMAT,
    DEFAULT_READ_TIMEOUT,
    ENV_APP_RUNTIME,
    ENV_AWS_ACCESS_KEY_ID,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_AWS_SECRET_ACCESS_KEY,
    ENV_IMAGE_MAX_CONCURRENT_RENDERS,
    ENV_IMAGE_MAX_FILE_SIZE_MB,
    ENV_IMAGE_MAX_UPLOAD_WORKERS,
    ENV_IMAGE_OUTPUT_FORMAT,
    ENV_IMAGE_S3_BUCKET_NAME,
    MAX_FILE_SIZE,
    MAX_FILES_PER_REQUEST,
    OUTPUT_FORMATS,
)

OutputFormat = Literal["webp", "jpeg", "png"]


def default_profiles() -> dict[ImageProfile, ProfileSpec]:
    """Reference size/quality table for product images."""
    return {
        ImageProfile.THUMBNAIL: ProfileSpec(max_width=150, max_height=150, quality=80),
        ImageProfile.SMALL: ProfileSpec(max_width=300, max_height=300, quality=85),
        ImageProfile.MEDIUM: ProfileSpec(max_width=600, max_height=600, quality=85),
        ImageProfile.LARGE: ProfileSpec(max_width=1200, max_height=1200, quality=90),
        ImageProfile.ORIGINAL: ProfileSpec(quality=90),
    }


class StorageSettings(BaseModel):
    """Object store, validation and rendering configuration."""

    model_config = ConfigDict(frozen=True)

    bucket: StrictStr = Field(..., min_length=1, description="Target S3 bucket")
    region: StrictStr | None = Field(None, description="Bucket region")
    endpoint_url: StrictStr | None = Field(
        None,
        description="Custom endpoint for S3-compatible stores",
    )
    access_key_id: StrictStr | None = Field(None, repr=False)
    secret_access_key: StrictStr | None = Field(None, repr=False)

    max_file_size: int = Field(MAX_FILE_SIZE, ge=1, description="Upload limit in bytes")
    allowed_mime_types: frozenset[str] = ALLOWED_MIME_TYPES
    max_files_per_request: int = Field(MAX_FILES_PER_REQUEST, ge=1)

    output_format: OutputFormat = DEFAULT_OUTPUT_FORMAT
    profiles: dict[ImageProfile, ProfileSpec] = Field(default_factory=default_profiles)

    max_upload_workers: int = Field(DEFAULT_MAX_UPLOAD_WORKERS, ge=1)
    max_concurrent_renders: int = Field(DEFAULT_MAX_CONCURRENT_RENDERS, ge=1)
    max_concurrent_uploads: int = Field(DEFAULT_MAX_CONCURRENT_UPLOADS, ge=1)

    connect_timeout: int = Field(DEFAULT_CONNECT_TIMEOUT, ge=1)
    read_timeout: int = Field(DEFAULT_READ_TIMEOUT, ge=1)
    max_attempts: int = Field(DEFAULT_MAX_ATTEMPTS, ge=1)

    runtime: StrictStr | None = Field(None, description="APP_RUNTIME, e.g. 'localstack'")

    @field_validator("profiles")
    @classmethod
    def validate_profiles(
        cls,
        value: dict[ImageProfile, ProfileSpec],
    ) -> dict[ImageProfile, ProfileSpec]:
        missing = [profile.value for profile in ImageProfile if profile not in value]
        if missing:
            raise ValueError(f"Missing image profiles: {', '.join(missing)}")

        if value[ImageProfile.ORIGINAL].resizes:
            raise ValueError("The original profile must not resize")

        return value

    @field_validator("endpoint_url")
    @classmethod
    def strip_endpoint(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @property
    def output_content_type(self) -> str:
        return OUTPUT_FORMATS[self.output_format][1]

    @property
    def output_extension(self) -> str:
        return OUTPUT_FORMATS[self.output_format][2]

    @property
    def is_localstack(self) -> bool:
        return self.runtime == "localstack"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "StorageSettings":
        """Build settings from environment variables.

        Raises:
            RuntimeError: If the bucket name is not configured
        """
        env = os.environ if environ is None else environ

        bucket = env.get(ENV_IMAGE_S3_BUCKET_NAME)
        if not bucket:
            raise RuntimeError(f"{ENV_IMAGE_S3_BUCKET_NAME} environment variable is not set")

        overrides: dict[str, object] = {}

        if max_mb := env.get(ENV_IMAGE_MAX_FILE_SIZE_MB):
            overrides["max_file_size"] = int(max_mb) * 1024 * 1024
        if output_format := env.get(ENV_IMAGE_OUTPUT_FORMAT):
            overrides["output_format"] = output_format.strip().lower()
        if workers := env.get(ENV_IMAGE_MAX_UPLOAD_WORKERS):
            overrides["max_upload_workers"] = int(workers)
        if renders := env.get(ENV_IMAGE_MAX_CONCURRENT_RENDERS):
            overrides["max_concurrent_renders"] = int(renders)

        return cls(
            bucket=bucket,
            region=env.get(ENV_AWS_REGION) or None,
            endpoint_url=env.get(ENV_AWS_ENDPOINT_URL) or None,
            access_key_id=env.get(ENV_AWS_ACCESS_KEY_ID) or None,
            secret_access_key=env.get(ENV_AWS_SECRET_ACCESS_KEY) or None,
            runtime=env.get(ENV_APP_RUNTIME) or None,
            **overrides,
        )


@lru_cache
def get_settings() -> StorageSettings:
    """Return process-wide settings loaded from the environment."""
    return StorageSettings.from_env()
