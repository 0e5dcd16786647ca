"""Upload pipeline for product images.

This module coordinates validation, rendition rendering and concurrent
object storage writes, and the matching cleanup operations. Failures are
translated into domain-specific errors; partially written uploads are
rolled back on a best-effort basis.
"""

import re
import threading
import uuid
from collections.abc import Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from functools import lru_cache

from aws_lambda_powertools import Logger

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.s3_object_store import S3ObjectStore
from core.models.errors import ImageUploadFailedError, ValidationError
from core.models.image import (
    DeleteVariantsResult,
    ImageProfile,
    ImageVariant,
    ObjectMetadata,
    UploadedFile,
    UploadResult,
    VariantUrls,
)
from core.models.settings import StorageSettings, get_settings
from core.processing.image_validator import ImageValidator
from core.processing.variant_renderer import VariantRenderer
from core.repositories.storage_repository import ObjectStoreRepository
from core.utils.constants import (
    DEFAULT_SIGNED_URL_EXPIRY,
    ERROR_CODE_TOO_MANY_FILES,
    LOCALHOST_URL,
    LOCALSTACK_URL,
    MAX_SIGNED_URL_EXPIRY,
    MIN_SIGNED_URL_EXPIRY,
    OWNER_ID_PATTERN,
)
from core.utils.time import next_unique_millis

logger = Logger(UTC=True)


def variant_stem(value: str) -> str:
    """Return the ``<timestamp>-<baseKey>`` stem of a stem or variant key.

    ``products/small/1700000000000-abc.webp`` and ``1700000000000-abc``
    both yield ``1700000000000-abc``.

    Raises:
        ValidationError: If nothing usable remains
    """
    name = value.strip().strip("/").rsplit("/", 1)[-1]

    if "." in name:
        name = name.rsplit(".", 1)[0]

    if not name:
        raise ValidationError(
            message="Image key is required",
            details={"key": value},
        )

    return name


class UploadOrchestrator:
    """Application service for product image uploads.

    This service orchestrates:
    - Size and MIME type validation
    - Rendering one variant per image profile
    - Concurrent upload of the variants to object storage
    - Deletion, signed URL and probe operations on stored objects
    """

    def __init__(
        self,
        *,
        store: ObjectStoreRepository,
        renderer: VariantRenderer,
        validator: ImageValidator,
        settings: StorageSettings,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.validator = validator
        self.settings = settings

        self._render_slots = threading.BoundedSemaphore(settings.max_concurrent_renders)

    # ------------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------------

    def upload_image(
        self,
        file: UploadedFile,
        *,
        owner_id: str | None = None,
    ) -> UploadResult:
        """Validate, render and store one image.

        The upload flow is:
        1. Validate declared size and MIME type
        2. Derive a unique base key
        3. Render all variants, bounded by the render semaphore
        4. Upload variants concurrently
        5. Roll back stored variants if any upload fails

        Args:
            file: Uploaded file
            owner_id: Optional key prefix such as a product id

        Returns:
            Key, URL and size of the original rendition plus all variant URLs

        Raises:
            ValidationError: If the file or owner id is rejected
            ImageDecodeError: If the bytes are not a decodable image
            ImageUploadFailedError: If any variant could not be stored
        """
        # Step 1: Validate before any work is done
        self.validator.ensure_valid(size=file.size, content_type=file.content_type)
        self._check_owner_id(owner_id)

        # Step 2: Base key
        base_key = f"{owner_id or uuid.uuid4().hex}-{next_unique_millis()}"

        logger.debug(
            "Starting image upload",
            extra={"base_key": base_key, "size": file.size, "file_name": file.filename},
        )

        # Step 3: Render
        with self._render_slots:
            variants = self.renderer.render(file.data, base_key)

        # Step 4 and 5: Upload with rollback
        self._put_variants(variants)

        urls = {variant.profile: self.store.public_url(variant.key) for variant in variants}
        original = next(v for v in variants if v.profile is ImageProfile.ORIGINAL)

        logger.info(
            "Image uploaded successfully",
            extra={"key": original.key, "variants": len(variants)},
        )

        return UploadResult(
            key=original.key,
            url=urls[ImageProfile.ORIGINAL],
            size=original.size,
            content_type=original.content_type,
            variants=VariantUrls.from_profiles(urls),
        )

    def upload_images(
        self,
        files: Sequence[UploadedFile],
        *,
        owner_id: str | None = None,
    ) -> list[UploadResult]:
        """Upload several images concurrently.

        Results are returned in input order. The batch is all-or-nothing:
        if any file fails, the files that succeeded are deleted again and
        the first error in input order is raised.

        Raises:
            ValidationError: If the batch is empty, too large, or a file is rejected
            ImageDecodeError: If a file is not a decodable image
            ImageUploadFailedError: If any variant could not be stored
        """
        if not files:
            raise ValidationError(message="No files uploaded")

        limit = self.settings.max_files_per_request
        if len(files) > limit:
            raise ValidationError(
                message=f"Too many files. At most {limit} images can be uploaded at once",
                error_code=ERROR_CODE_TOO_MANY_FILES,
                details={"count": len(files), "max_files": limit},
            )

        # Reject the whole batch before anything is rendered
        for file in files:
            self.validator.ensure_valid(size=file.size, content_type=file.content_type)
        self._check_owner_id(owner_id)

        workers = min(self.settings.max_concurrent_uploads, len(files))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="image-upload") as pool:
            futures = [pool.submit(self.upload_image, file, owner_id=owner_id) for file in files]

        results: list[UploadResult] = []
        first_error: BaseException | None = None

        for future in futures:
            error = future.exception()
            if error is None:
                results.append(future.result())
            elif first_error is None:
                first_error = error

        if first_error is None:
            logger.info("Image batch uploaded successfully", extra={"count": len(results)})
            return results

        logger.warning(
            "Image batch failed, rolling back completed uploads",
            extra={"succeeded": len(results), "count": len(files)},
        )

        for result in results:
            try:
                self.delete_all_variants(result.key)
            except Exception:
                logger.warning(
                    "Failed to roll back uploaded image",
                    extra={"key": result.key},
                )

        raise first_error

    # ------------------------------------------------------------------
    # Deletes
    # ------------------------------------------------------------------

    def delete_image(self, key: str) -> bool:
        """Delete one stored object.

        Returns:
            Whether the object existed before the call

        Raises:
            ValidationError: If the key is empty
            S3Error: If the store cannot be reached
        """
        key = self._require_key(key)

        existed = self.store.exists(key=key)
        self.store.delete(key=key)

        logger.info("Image deleted", extra={"key": key, "existed": existed})
        return existed

    def delete_all_variants(self, base_key: str) -> DeleteVariantsResult:
        """Delete every rendition sharing the stem of ``base_key``.

        ``base_key`` may be a ``<timestamp>-<baseKey>`` stem or any full
        variant key.
        """
        stem = variant_stem(base_key)
        keys = [self.renderer.build_key(profile, stem) for profile in ImageProfile]

        with ThreadPoolExecutor(
            max_workers=min(self.settings.max_upload_workers, len(keys)),
            thread_name_prefix="variant-delete",
        ) as pool:
            outcomes = list(pool.map(self.delete_image, keys))

        result = DeleteVariantsResult(
            stem=stem,
            deleted=[key for key, existed in zip(keys, outcomes) if existed],
            missing=[key for key, existed in zip(keys, outcomes) if not existed],
        )

        logger.info(
            "Image variants deleted",
            extra={"stem": stem, "deleted": len(result.deleted), "missing": len(result.missing)},
        )
        return result

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def signed_url(self, key: str, expires_in: int = DEFAULT_SIGNED_URL_EXPIRY) -> str:
        """Return a time-limited GET URL for ``key``.

        Raises:
            ValidationError: If the key is empty or the expiry is out of range
            PresignedUrlError: If signing fails
        """
        key = self._require_key(key)

        if not MIN_SIGNED_URL_EXPIRY <= expires_in <= MAX_SIGNED_URL_EXPIRY:
            raise ValidationError(
                message=(
                    f"expiresIn must be between {MIN_SIGNED_URL_EXPIRY} "
                    f"and {MAX_SIGNED_URL_EXPIRY} seconds"
                ),
                details={"expires_in": expires_in},
            )

        url = self.store.signed_url(key=key, expires_in=expires_in)

        if self.settings.is_localstack:
            url = url.replace(LOCALSTACK_URL, LOCALHOST_URL, 1)

        return url

    def object_exists(self, key: str) -> bool:
        return self.store.exists(key=self._require_key(key))

    def object_metadata(self, key: str) -> ObjectMetadata:
        return self.store.head(key=self._require_key(key))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _put_variants(self, variants: list[ImageVariant]) -> None:
        workers = min(self.settings.max_upload_workers, len(variants))

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="variant-put") as pool:
            futures: dict[Future[None], ImageVariant] = {
                pool.submit(
                    self.store.put,
                    key=variant.key,
                    data=variant.data,
                    content_type=variant.content_type,
                    metadata={"profile": variant.profile.value},
                ): variant
                for variant in variants
            }

            _, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()

        stored: list[str] = []
        failed: list[str] = []
        first_error: BaseException | None = None

        for future, variant in futures.items():
            if future.cancelled():
                continue

            error = future.exception()
            if error is None:
                stored.append(variant.key)
                continue

            failed.append(variant.key)
            if first_error is None:
                first_error = error

        if first_error is None:
            logger.debug("Variants uploaded", extra={"keys": stored})
            return

        logger.error(
            "Variant upload failed, removing stored variants",
            extra={"failed": failed, "stored": stored},
        )

        # Best-effort cleanup to avoid orphaned renditions
        for key in stored:
            try:
                self.store.delete(key=key)
            except Exception:
                logger.warning(
                    "Failed to clean up variant after upload failure",
                    extra={"key": key},
                )

        raise ImageUploadFailedError(
            message="Unable to upload image at this time",
            details={"failed": failed},
        ) from first_error

    @staticmethod
    def _check_owner_id(owner_id: str | None) -> None:
        if owner_id is not None and not re.fullmatch(OWNER_ID_PATTERN, owner_id):
            raise ValidationError(
                message="productId may only contain letters, digits, '-' and '_'",
                details={"owner_id": owner_id},
            )

    @staticmethod
    def _require_key(key: str) -> str:
        key = (key or "").strip().lstrip("/")
        if not key:
            raise ValidationError(message="Image key is required")
        return key


@lru_cache
def build_upload_orchestrator() -> UploadOrchestrator:
    """Return the process-wide orchestrator wired from environment settings."""
    settings = get_settings()

    return UploadOrchestrator(
        store=S3ObjectStore(S3Adapter(settings)),
        renderer=VariantRenderer(
            profiles=settings.profiles,
            output_format=settings.output_format,
        ),
        validator=ImageValidator(
            max_file_size=settings.max_file_size,
            allowed_mime_types=settings.allowed_mime_types,
        ),
        settings=settings,
    )
