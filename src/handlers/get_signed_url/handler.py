"""
Lambda handler responsible for issuing time-limited image URLs.
"""

from typing import Any
from urllib.parse import unquote

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.services.upload_orchestrator import build_upload_orchestrator
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import SignedUrlRequest, SignedUrlResponse

logger = Logger(UTC=True)
tracer = Tracer()


@api_gateway_handler
@tracer.capture_lambda_handler
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle signed URL requests.

    Query parameters:
        key: Object key, unless given as a path parameter
        expiresIn: URL lifetime in seconds (default 3600, max 7 days)

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response with the signed URL
    """
    logger.info(
        "Received signed URL request",
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

    params: dict[str, Any] = {"key": unquote(raw_key)}
    if query_params.get("expiresIn") is not None:
        params["expires_in"] = query_params["expiresIn"]

    try:
        request = validate_request(SignedUrlRequest, params)
    except ValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False)},
        )
        return ResponseBuilder.validation_error(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    url = build_upload_orchestrator().signed_url(request.key, request.expires_in)

    response = SignedUrlResponse(key=request.key, url=url, expires_in=request.expires_in)

    return ResponseBuilder.ok(response.model_dump(by_alias=True))
