"""
Common decorators and helpers for API Gateway Lambda handlers.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from functools import wraps
from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import (
    FileSizeError,
    ImageDecodeError,
    ImageServiceError,
    NotFoundError,
    S3Error,
    ValidationError,
)
from core.utils.constants import get_max_file_size_mb
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors

logger = Logger(service="api-gateway-handler", UTC=True)

JsonDict = dict[str, Any]


def _get_user_friendly_message(exc: Exception) -> str:
    """
    Convert technical exception messages into user-friendly ones.

    Preserves specific validation messages while making generic errors friendly.
    """
    exc_str = str(exc)

    # If the exception message is already user-friendly (starts with common phrases),
    # keep it as is
    friendly_prefixes = (
        "Invalid",
        "Missing",
        "Required",
        "Must",
        "Cannot",
        "Unable to",
        "Failed to",
        "Image",
        "File",
        "No ",
        "Too many",
    )

    if exc_str and any(exc_str.startswith(prefix) for prefix in friendly_prefixes):
        return exc_str

    if isinstance(exc, (UnicodeDecodeError, UnicodeEncodeError)):
        return "The request contains invalid characters or encoding. Please check the request format."

    if isinstance(exc, ValueError):
        return "The provided data is invalid. Please check your input and try again."

    if isinstance(exc, (KeyError, AttributeError)):
        return "A required field is missing. Please ensure all required fields are provided."

    if isinstance(exc, TypeError):
        return "The data format is incorrect. Please check the request format."

    return "We encountered an issue processing your request. Please try again."


def _log_error(
    message: str,
    *,
    handler_name: str,
    request_id: str | None,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        handler_name: Name of the handler function
        request_id: AWS request ID
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra = {
        "handler": handler_name,
        "request_id": request_id,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if isinstance(exc, ImageServiceError):
        log_extra["error_code"] = exc.error_code

    if level == "exception":
        logger.exception(message, extra=log_extra)
    else:
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


def api_gateway_handler(
    func: Callable[..., JsonDict],
) -> Callable[..., JsonDict]:
    """
    Decorator for API Gateway Lambda handlers.

    Provides:
    - Automatic CORS preflight (OPTIONS) handling
    - Mapping of domain errors to HTTP status codes
    - Request ID tracking and structured logging
    - User-friendly messages for unexpected errors

    Example:
        @api_gateway_handler
        def handler(event, context):
            return ResponseBuilder.ok({"key": "..."})
    """

    @wraps(func)
    def wrapper(
        event: Any,
        context: Any,
        *,
        cors_origin: str | None = None,
    ) -> JsonDict:
        # Handle CORS preflight requests
        if event.get("httpMethod") == "OPTIONS":
            return ResponseBuilder.no_content(cors_origin=cors_origin)

        request_id = getattr(context, "aws_request_id", None)
        handler_name = func.__name__

        try:
            return func(event, context)

        # Client errors (4xx) - Upload too large
        except FileSizeError as exc:
            _log_error("Upload too large", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.payload_too_large(
                exc.message,
                error=exc.error_code,
                details=exc.details,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Client errors (4xx) - Rejected input
        except ValidationError as exc:
            _log_error("Validation error in handler", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.bad_request(
                exc.message,
                error=exc.error_code,
                details=exc.details,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except PydanticValidationError as exc:
            _log_error("Request validation failed", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.validation_error(
                message="Invalid request params",
                details={"errors": sanitize_validation_errors(exc.errors())},
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Client errors (4xx) - Undecodable image
        except ImageDecodeError as exc:
            _log_error("Image could not be processed", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.unprocessable(
                exc.message,
                error=exc.error_code,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Client errors (4xx) - Not Found
        except NotFoundError as exc:
            _log_error("Resource not found", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.not_found(
                exc.message,
                error=exc.error_code,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Server errors (5xx) - Object store failures
        except S3Error as exc:
            _log_error(
                "Object storage error in handler",
                handler_name=handler_name,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.bad_gateway(
                exc.message,
                error=exc.error_code,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        except ImageServiceError as exc:
            _log_error(
                "Service error in handler",
                handler_name=handler_name,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                exc.message,
                error=exc.error_code,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Client errors (4xx) - Bad Request
        except (
            ValueError,           # Invalid values
            KeyError,             # Missing required fields in dicts
            TypeError,            # Wrong data types
            AttributeError,       # Missing attributes on objects
        ) as exc:
            _log_error("Bad request in handler", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.bad_request(
                _get_user_friendly_message(exc),
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Client errors (4xx) - Payload Too Large
        except MemoryError as exc:
            _log_error("Memory error - payload too large", handler_name=handler_name, request_id=request_id, exc=exc)
            return ResponseBuilder.payload_too_large(
                f"The file is too large to process. Maximum size is {get_max_file_size_mb()}MB.",
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Server errors (5xx) - Timeout
        except TimeoutError as exc:
            _log_error(
                "Request timeout",
                handler_name=handler_name,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.error(
                message="The request took too long to process. Please try again.",
                status=HTTPStatus.GATEWAY_TIMEOUT,
                request_id=request_id,
                cors_origin=cors_origin,
            )

        # Catch-all for unexpected errors
        except Exception as exc:
            _log_error(
                "Unexpected error in handler",
                handler_name=handler_name,
                request_id=request_id,
                exc=exc,
                level="exception",
            )
            return ResponseBuilder.internal_error(
                "We're experiencing technical difficulties. Please try again in a few moments.",
                request_id=request_id,
                cors_origin=cors_origin,
            )

    return wrapper
