"""
Lambda handler responsible for deleting every rendition of an upload.
"""

from typing import Any
from urllib.parse import unquote

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from core.services.upload_orchestrator import build_upload_orchestrator
from core.utils.constants import METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import DeleteVariantsRequest

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle delete-all-variants requests.

    The ``base_key`` path parameter may be a stem or any variant key.
    The response lists which variant keys were removed and which were
    already missing.
    """
    logger.info(
        "Received variant delete request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
        },
    )

    path_params = event.get("pathParameters") or {}

    try:
        request = validate_request(
            DeleteVariantsRequest,
            {"base_key": unquote(path_params.get("base_key") or "")},
        )
    except ValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False)},
        )
        return ResponseBuilder.validation_error(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    result = build_upload_orchestrator().delete_all_variants(request.base_key)

    if result.deleted:
        metrics.add_metric(name="ImageDeleted", unit=MetricUnit.Count, value=len(result.deleted))

    return ResponseBuilder.ok(
        result.model_dump(),
        message="Image variants deleted successfully",
    )
