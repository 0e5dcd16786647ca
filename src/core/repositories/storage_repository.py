"""Abstract contract for object storage."""

from abc import ABC, abstractmethod

from core.models.image import ObjectMetadata


class ObjectStoreRepository(ABC):
    """Contract for storing image renditions as blobs.

    Implementations could be S3, any S3-compatible store, GCS, etc.
    Services depend on this interface, not the implementation.
    """

    @abstractmethod
    def put(
        self,
        *,
        key: str,
        data: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> None:
        """Store bytes under ``key``, overwriting any existing object.

        Raises:
            ImageUploadFailedError: If the write fails
        """

    @abstractmethod
    def delete(self, *, key: str) -> None:
        """Delete ``key``. Deleting a missing key is not an error.

        Raises:
            ImageDeletionFailedError: If the store rejects the delete
        """

    @abstractmethod
    def exists(self, *, key: str) -> bool:
        """Return whether ``key`` exists.

        Raises:
            S3Error: If the probe fails for any reason other than absence
        """

    @abstractmethod
    def head(self, *, key: str) -> ObjectMetadata:
        """Return size, content type and user metadata for ``key``.

        Raises:
            NotFoundError: If the object does not exist
            S3Error: If the probe fails
        """

    @abstractmethod
    def signed_url(self, *, key: str, expires_in: int) -> str:
        """Return a time-limited GET URL for ``key`` without network I/O.

        Raises:
            PresignedUrlError: If signing fails
        """

    @abstractmethod
    def public_url(self, key: str) -> str:
        """Return the unsigned public URL for ``key``."""
