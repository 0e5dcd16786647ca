"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_UNSUPPORTED_MIME_TYPE = "UNSUPPORTED_MIME_TYPE"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_EMPTY_FILE = "EMPTY_FILE"
ERROR_CODE_INVALID_MULTIPART = "INVALID_MULTIPART"
ERROR_CODE_TOO_MANY_FILES = "TOO_MANY_FILES"

# Image Processing Errors
ERROR_CODE_IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"
ERROR_CODE_OBJECT_NOT_FOUND = "OBJECT_NOT_FOUND"

# Storage Errors
ERROR_CODE_S3 = "S3_ERROR"
ERROR_CODE_IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"
ERROR_CODE_IMAGE_DELETE_FAILED = "IMAGE_DELETE_FAILED"
ERROR_CODE_IMAGE_PRESIGNED_URL_FAILED = "PRESIGNED_URL_FAILED"
ERROR_CODE_OBJECT_PROBE_FAILED = "OBJECT_PROBE_FAILED"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB in bytes

MAX_FILES_PER_REQUEST = 10

ALLOWED_MIME_TYPES: Final[frozenset[str]] = frozenset(
    {
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/webp",
        "image/gif",
    }
)

ALLOWED_TYPES_LABEL = "JPEG, PNG, WebP and GIF"

OWNER_ID_PATTERN = r"^[a-zA-Z0-9_-]+$"

DEFAULT_CONTENT_TYPE_BINARY = "application/octet-stream"


# ============================================================================
# Image Rendering
# ============================================================================

# Output format name -> (Pillow format, content type, file extension)
OUTPUT_FORMATS: Final[dict[str, tuple[str, str, str]]] = {
    "webp": ("WEBP", "image/webp", "webp"),
    "jpeg": ("JPEG", "image/jpeg", "jpg"),
    "png": ("PNG", "image/png", "png"),
}

DEFAULT_OUTPUT_FORMAT = "webp"

PRODUCT_IMAGE_PREFIX = "products"

WEBP_METHOD = 6  # slowest encoder, smallest output


# ============================================================================
# Object Storage
# ============================================================================

CACHE_CONTROL_IMMUTABLE = "max-age=31536000"

DEFAULT_SIGNED_URL_EXPIRY = 3600
MIN_SIGNED_URL_EXPIRY = 1
MAX_SIGNED_URL_EXPIRY = 7 * 24 * 3600  # SigV4 ceiling

S3_NOT_FOUND_CODES: Final[frozenset[str]] = frozenset({"404", "NoSuchKey", "NotFound"})

DEFAULT_CONNECT_TIMEOUT = 5
DEFAULT_READ_TIMEOUT = 30
DEFAULT_MAX_ATTEMPTS = 3


# ============================================================================
# Concurrency
# ============================================================================

DEFAULT_MAX_UPLOAD_WORKERS = 5
DEFAULT_MAX_CONCURRENT_RENDERS = 2
DEFAULT_MAX_CONCURRENT_UPLOADS = 4


# ============================================================================
# Multipart Form Fields
# ============================================================================

FIELD_IMAGE = "image"
FIELD_IMAGES = "images"
FIELD_PRODUCT_ID = "productId"


# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
EXPOSE_HEADERS = "Content-Type,Content-Length"
DEFAULT_CONTENT_TYPE = "application/json"

METRICS_NAMESPACE = "ProductImageService"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
ENV_AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
ENV_IMAGE_S3_BUCKET_NAME = "IMAGE_S3_BUCKET_NAME"
ENV_IMAGE_MAX_FILE_SIZE_MB = "IMAGE_MAX_FILE_SIZE_MB"
ENV_IMAGE_OUTPUT_FORMAT = "IMAGE_OUTPUT_FORMAT"
ENV_IMAGE_MAX_UPLOAD_WORKERS = "IMAGE_MAX_UPLOAD_WORKERS"
ENV_IMAGE_MAX_CONCURRENT_RENDERS = "IMAGE_MAX_CONCURRENT_RENDERS"
ENV_APP_RUNTIME = "APP_RUNTIME"
LOCALSTACK_URL = "http://localstack"
LOCALHOST_URL = "http://localhost"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb() -> int:
    """Get maximum file size in megabytes."""
    return MAX_FILE_SIZE // (1024 * 1024)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
