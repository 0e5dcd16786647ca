"""
Upload validation for product images.

Checks the declared size and MIME type of an uploaded file against the
configured limits. No I/O is performed and the file content is not read.
"""

from aws_lambda_powertools import Logger
from pydantic import BaseModel

from core.models.errors import FileSizeError, MIMETypeError, ValidationError
from core.utils.constants import (
    ALLOWED_MIME_TYPES,
    ALLOWED_TYPES_LABEL,
    ERROR_CODE_EMPTY_FILE,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_UNSUPPORTED_MIME_TYPE,
    MAX_FILE_SIZE,
    format_file_size,
)
from core.utils.mime import normalize_mime_type

logger = Logger(UTC=True)

_MIB = 1024 * 1024


class ValidationResult(BaseModel):
    """Outcome of validating one file."""

    valid: bool
    reason: str | None = None
    error_code: str | None = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: str, error_code: str) -> "ValidationResult":
        return cls(valid=False, reason=reason, error_code=error_code)


class ImageValidator:
    """Size and MIME type checks for uploaded images."""

    def __init__(
        self,
        *,
        max_file_size: int = MAX_FILE_SIZE,
        allowed_mime_types: frozenset[str] = ALLOWED_MIME_TYPES,
    ) -> None:
        self.max_file_size = max_file_size
        self.allowed_mime_types = frozenset(normalize_mime_type(m) for m in allowed_mime_types)

    @property
    def size_limit_label(self) -> str:
        """Human-readable upload limit, e.g. ``10MB``."""
        if self.max_file_size % _MIB == 0:
            return f"{self.max_file_size // _MIB}MB"
        return format_file_size(self.max_file_size)

    def validate(self, *, size: int, content_type: str | None) -> ValidationResult:
        """Validate a file's declared size and MIME type.

        Size is checked first. A file exactly at the limit is accepted.
        """
        if size <= 0:
            return ValidationResult.invalid("File is empty", ERROR_CODE_EMPTY_FILE)

        if size > self.max_file_size:
            return ValidationResult.invalid(
                f"File size exceeds maximum allowed size of {self.size_limit_label}",
                ERROR_CODE_FILE_SIZE_EXCEEDED,
            )

        if normalize_mime_type(content_type) not in self.allowed_mime_types:
            return ValidationResult.invalid(
                f"Invalid file type. Only {ALLOWED_TYPES_LABEL} images are allowed",
                ERROR_CODE_UNSUPPORTED_MIME_TYPE,
            )

        return ValidationResult.ok()

    def ensure_valid(self, *, size: int, content_type: str | None) -> None:
        """Validate and raise the matching domain error on failure.

        Raises:
            FileSizeError: If the file is larger than the limit
            MIMETypeError: If the MIME type is not allowed
            ValidationError: If the file is empty
        """
        result = self.validate(size=size, content_type=content_type)
        if result.valid:
            return

        reason = result.reason or "Invalid file"
        details = {"size": size, "content_type": content_type}

        logger.warning(
            "Image validation failed",
            extra={"reason": reason, "error_code": result.error_code, **details},
        )

        if result.error_code == ERROR_CODE_FILE_SIZE_EXCEEDED:
            raise FileSizeError(
                message=reason,
                details={**details, "max_file_size": self.max_file_size},
            )

        if result.error_code == ERROR_CODE_UNSUPPORTED_MIME_TYPE:
            raise MIMETypeError(
                message=reason,
                details={**details, "allowed_mime_types": sorted(self.allowed_mime_types)},
            )

        raise ValidationError(
            message=reason,
            error_code=result.error_code or ERROR_CODE_EMPTY_FILE,
            details=details,
        )
