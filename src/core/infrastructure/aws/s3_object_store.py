"""S3-backed implementation of ObjectStoreRepository."""

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import (
    ImageDeletionFailedError,
    ImageUploadFailedError,
    NotFoundError,
    PresignedUrlError,
    S3Error,
)
from core.models.image import ObjectMetadata
from core.repositories.storage_repository import ObjectStoreRepository
from core.utils.constants import (
    CACHE_CONTROL_IMMUTABLE,
    DEFAULT_CONTENT_TYPE_BINARY,
    ERROR_CODE_OBJECT_NOT_FOUND,
    ERROR_CODE_OBJECT_PROBE_FAILED,
    S3_NOT_FOUND_CODES,
)
from core.utils.time import to_iso

logger = Logger(UTC=True)


def _is_not_found(exc: ClientError) -> bool:
    error_code = str(exc.response.get("Error", {}).get("Code", ""))
    status = exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return error_code in S3_NOT_FOUND_CODES or status == 404


class S3ObjectStore(ObjectStoreRepository):
    """Object storage backed by Amazon S3 or an S3-compatible endpoint.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: S3AdapterProtocol | None = None) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()

    def put(
        self,
        *,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Upload bytes to S3, replacing any object under the same key."""
        logger.debug(
            "Uploading object",
            extra={"key": key, "size": len(data), "content_type": content_type},
        )

        try:
            self._s3.put_object(
                key=key,
                body=data,
                content_type=content_type,
                metadata=metadata or {},
                cache_control=CACHE_CONTROL_IMMUTABLE,
            )
            logger.info("Object uploaded successfully", extra={"key": key})

        except ClientError as exc:
            logger.error(
                "S3 upload failed",
                extra={"key": key, "error_code": exc.response.get("Error", {}).get("Code")},
            )
            raise ImageUploadFailedError(
                message="Unable to upload image at this time",
                details={"key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading object")
            raise ImageUploadFailedError(
                message="Unable to upload image at this time",
                details={"key": key},
            ) from exc

    def delete(self, *, key: str) -> None:
        """Delete an object from S3. Missing keys are ignored."""
        logger.debug("Deleting object", extra={"key": key})

        try:
            self._s3.delete_object(key=key)
            logger.info("Object deleted successfully", extra={"key": key})

        except ClientError as exc:
            if _is_not_found(exc):
                logger.info("Object already absent", extra={"key": key})
                return

            logger.error("S3 deletion failed", extra={"key": key})
            raise ImageDeletionFailedError(
                message="Unable to delete image at this time",
                details={"key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting object")
            raise ImageDeletionFailedError(
                message="Unable to delete image at this time",
                details={"key": key},
            ) from exc

    def exists(self, *, key: str) -> bool:
        """Probe for an object. Only a definite 404 counts as absence."""
        try:
            self._s3.head_object(key=key)
            return True

        except ClientError as exc:
            if _is_not_found(exc):
                return False

            logger.error("S3 existence probe failed", extra={"key": key})
            raise S3Error(
                message="Unable to check image at this time",
                error_code=ERROR_CODE_OBJECT_PROBE_FAILED,
                details={"key": key},
            ) from exc

        except BotoCoreError as exc:
            logger.exception("S3 existence probe failed", extra={"key": key})
            raise S3Error(
                message="Unable to check image at this time",
                error_code=ERROR_CODE_OBJECT_PROBE_FAILED,
                details={"key": key},
            ) from exc

    def head(self, *, key: str) -> ObjectMetadata:
        """Return stored object headers."""
        try:
            response = self._s3.head_object(key=key)

        except ClientError as exc:
            if _is_not_found(exc):
                raise NotFoundError(
                    message="Image not found",
                    error_code=ERROR_CODE_OBJECT_NOT_FOUND,
                    details={"key": key},
                ) from exc

            logger.error("S3 head_object failed", extra={"key": key})
            raise S3Error(
                message="Unable to read image details at this time",
                error_code=ERROR_CODE_OBJECT_PROBE_FAILED,
                details={"key": key},
            ) from exc

        except BotoCoreError as exc:
            logger.exception("S3 head_object failed", extra={"key": key})
            raise S3Error(
                message="Unable to read image details at this time",
                error_code=ERROR_CODE_OBJECT_PROBE_FAILED,
                details={"key": key},
            ) from exc

        return ObjectMetadata(
            key=key,
            size=int(response.get("ContentLength", 0)),
            content_type=response.get("ContentType") or DEFAULT_CONTENT_TYPE_BINARY,
            last_modified=to_iso(response.get("LastModified")),
            metadata=dict(response.get("Metadata") or {}),
        )

    def signed_url(self, *, key: str, expires_in: int) -> str:
        """Generate a pre-signed S3 URL for reading an object."""
        logger.debug(
            "Generating pre-signed S3 URL",
            extra={"key": key, "expires_in": expires_in},
        )

        try:
            params: dict[str, Any] = {"Key": key}

            url: str = self._s3.generate_presigned_url(
                method="get_object",
                params=params,
                expires_in=expires_in,
            )
            return url

        except (ClientError, BotoCoreError) as exc:
            logger.error("Failed to generate pre-signed URL", extra={"key": key})
            raise PresignedUrlError(
                message="Unable to generate image access URL",
                details={"key": key},
            ) from exc

    def public_url(self, key: str) -> str:
        """Build the unsigned URL for ``key``.

        Custom endpoints are addressed path-style; plain AWS uses the
        virtual-hosted bucket domain.
        """
        endpoint = self._s3.endpoint_url
        bucket = self._s3.bucket

        if endpoint:
            return f"{endpoint.rstrip('/')}/{bucket}/{key}"

        return f"https://{bucket}.s3.amazonaws.com/{key}"
