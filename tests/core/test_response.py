import json
from http import HTTPStatus
from typing import Any, cast

import pytest

from core.utils.response import ResponseBuilder


def parse_body(resp: dict[str, Any]) -> dict[str, Any]:
    body = resp.get("body")
    if not body:
        return {}

    return cast(dict[str, Any], json.loads(body))


def test_ok_response_wraps_data() -> None:
    resp = ResponseBuilder.ok({"foo": "bar"}, request_id="req-1", cors_origin="*")
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.OK
    assert parsed["success"] is True
    assert parsed["data"] == {"foo": "bar"}
    assert parsed["request_id"] == "req-1"
    assert resp["headers"]["Access-Control-Allow-Origin"] == "*"


def test_ok_response_message_and_extra() -> None:
    resp = ResponseBuilder.ok(
        [1, 2],
        message="Done",
        extra={"url": "https://example.com/a.webp"},
    )
    parsed = parse_body(resp)

    assert parsed == {
        "success": True,
        "data": [1, 2],
        "message": "Done",
        "url": "https://example.com/a.webp",
    }


def test_ok_response_without_data() -> None:
    parsed = parse_body(ResponseBuilder.ok(message="Nothing to return"))

    assert parsed == {"success": True, "message": "Nothing to return"}


def test_no_content_response() -> None:
    resp = ResponseBuilder.no_content(cors_origin="https://example.com")

    assert resp["statusCode"] == HTTPStatus.NO_CONTENT
    assert resp["body"] == ""
    assert resp["headers"]["Access-Control-Allow-Origin"] == "https://example.com"


@pytest.mark.parametrize(
    "func,status",
    [
        (ResponseBuilder.bad_request, HTTPStatus.BAD_REQUEST),
        (ResponseBuilder.payload_too_large, HTTPStatus.REQUEST_ENTITY_TOO_LARGE),
        (ResponseBuilder.unprocessable, HTTPStatus.UNPROCESSABLE_ENTITY),
        (ResponseBuilder.not_found, HTTPStatus.NOT_FOUND),
        (ResponseBuilder.bad_gateway, HTTPStatus.BAD_GATEWAY),
        (ResponseBuilder.internal_error, HTTPStatus.INTERNAL_SERVER_ERROR),
    ],
)
def test_error_responses_use_explicit_message(func, status) -> None:
    resp = func("Boom", request_id="req-2")
    parsed = parse_body(resp)

    assert resp["statusCode"] == status
    assert parsed["success"] is False
    # member names differ across Python versions
    assert parsed["error"] == status.name
    assert parsed["message"] == "Boom"
    assert parsed["request_id"] == "req-2"
    assert "timestamp" in parsed


def test_error_response_custom_code_and_details() -> None:
    resp = ResponseBuilder.bad_request(
        "File is empty",
        error="EMPTY_FILE",
        details={"size": 0},
    )
    parsed = parse_body(resp)

    assert parsed["error"] == "EMPTY_FILE"
    assert parsed["details"] == {"size": 0}


def test_validation_error_is_bad_request() -> None:
    resp = ResponseBuilder.validation_error(
        message="Invalid request params",
        details={"errors": [{"field": "key", "message": "This field is required"}]},
    )
    parsed = parse_body(resp)

    assert resp["statusCode"] == HTTPStatus.BAD_REQUEST
    assert parsed["error"] == "VALIDATION_FAILED"
    assert parsed["details"]["errors"][0]["field"] == "key"


def test_headers_always_include_cors_and_json() -> None:
    headers = ResponseBuilder.not_found()["headers"]

    assert headers["Content-Type"] == "application/json"
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert "DELETE" in headers["Access-Control-Allow-Methods"]
