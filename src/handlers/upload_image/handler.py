"""
Lambda handler responsible for uploading one product image.
"""

from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from core.models.errors import ValidationError
from core.models.image import ImageProfile
from core.services.upload_orchestrator import build_upload_orchestrator
from core.utils.constants import FIELD_IMAGE, FIELD_PRODUCT_ID, METRICS_NAMESPACE
from core.utils.decorators import api_gateway_handler
from core.utils.multipart import parse_multipart_event
from core.utils.response import ResponseBuilder
from core.utils.validators import sanitize_validation_errors, validate_request

from .models import UploadImageRequest

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle single image upload requests.

    The handler parses the multipart body, validates the optional
    ``productId`` field, and hands the ``image`` file to the upload
    orchestrator, which renders and stores every variant.

    Expected API Gateway event structure:
    {
        "headers": {"Content-Type": "multipart/form-data; boundary=..."},
        "body": "<base64 multipart body>",
        "isBase64Encoded": true
    }

    Args:
        event: API Gateway Lambda proxy event containing the upload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response with the stored image URLs
    """
    logger.info(
        "Received image upload request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "request_id": getattr(context, "aws_request_id", None),
            "function_name": getattr(context, "function_name", None),
        },
    )

    form = parse_multipart_event(event)

    try:
        request = validate_request(
            UploadImageRequest,
            {"product_id": form.field(FIELD_PRODUCT_ID)},
        )
    except PydanticValidationError as exc:
        logger.error(
            "Request validation failed",
            extra={"errors": exc.errors(include_url=False)},
        )
        return ResponseBuilder.validation_error(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        )

    file = form.first_file(FIELD_IMAGE)
    if file is None:
        raise ValidationError(message="No file uploaded")

    result = build_upload_orchestrator().upload_image(file, owner_id=request.product_id)

    metrics.add_metric(name="ImageUploaded", unit=MetricUnit.Count, value=1)
    metrics.add_metric(
        name="VariantsUploaded",
        unit=MetricUnit.Count,
        value=len(ImageProfile),
    )

    return ResponseBuilder.ok(
        result.model_dump(by_alias=True),
        message="Image uploaded successfully",
        extra={"url": result.url},
    )
