import base64
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest
from requests_toolbelt.multipart.encoder import MultipartEncoder


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


@pytest.fixture
def multipart_event() -> Callable[..., dict[str, Any]]:
    """
    Build an API Gateway proxy event with a base64 multipart body.

    Usage:
        event = multipart_event([("image", ("a.jpg", data, "image/jpeg"))])
        event = multipart_event([("productId", "abc123"), ...])
    """

    def _build(
        fields: list[tuple[str, Any]],
        *,
        path: str = "/v1/uploads/product",
    ) -> dict[str, Any]:
        encoder = MultipartEncoder(fields=fields)
        body = encoder.to_string()

        return {
            "httpMethod": "POST",
            "path": path,
            "headers": {
                "Content-Type": encoder.content_type,
                "x-api-key": "test-api-key",
            },
            "body": base64.b64encode(body).decode("ascii"),
            "isBase64Encoded": True,
        }

    return _build


@pytest.fixture
def key_event() -> Callable[..., dict[str, Any]]:
    """Build a proxy event carrying path and query parameters."""

    def _build(
        *,
        method: str = "GET",
        path_params: dict[str, str] | None = None,
        query_params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        return {
            "httpMethod": method,
            "path": "/v1/uploads",
            "pathParameters": path_params,
            "queryStringParameters": query_params,
            "headers": {"x-api-key": "test-api-key"},
        }

    return _build
