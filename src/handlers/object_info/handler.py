"""
Lambda handler that reports whether an image object exists and its headers.
"""

from typing import Any
from urllib.parse import unquote

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.models.errors import NotFoundError
from core.services.upload_orchestrator import build_upload_orchestrator
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import ObjectInfoRequest, ObjectInfoResponse

logger = Logger(UTC=True)
tracer = Tracer()


@api_gateway_handler
@tracer.capture_lambda_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle object info requests.

    A missing object is not an error: the response reports
    ``exists: false`` with no metadata.
    """
    logger.info(
        "Received object info request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    path_params = event.get("pathParameters") or {}
    query_params = event.get("queryStringParameters") or {}

    raw_key = path_params.get("key") or query_params.get("key") or ""

    try:
        request = validate_request(ObjectInfoRequest, {"key": unquote(raw_key)})
    except ValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False)},
        )
        return ResponseBuilder.validation_error(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    orchestrator = build_upload_orchestrator()

    try:
        metadata = orchestrator.object_metadata(request.key)
        response = ObjectInfoResponse(key=request.key, exists=True, metadata=metadata)
    except NotFoundError:
        logger.info("Object not found", extra={"key": request.key})
        response = ObjectInfoResponse(key=request.key, exists=False)

    return ResponseBuilder.ok(response.model_dump(by_alias=True))
