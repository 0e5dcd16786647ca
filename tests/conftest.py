"""
Pytest configuration and fixtures for product image service tests.
Provides AWS mocking, S3 fixtures with proper cleanup, and Pillow-generated images.
"""

import io
import os
from collections.abc import Callable
from typing import Any

# Must be set before handler modules create their powertools objects
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("IMAGE_S3_BUCKET_NAME", "test-product-images")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "product-image-service")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "ProductImageService")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "1")
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("APP_RUNTIME", None)

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws
from PIL import Image

from core.models.settings import get_settings
from core.services.upload_orchestrator import build_upload_orchestrator


@pytest.fixture(autouse=True)
def reset_cached_wiring():
    """Settings and the orchestrator are cached per process; rebuild per test."""
    get_settings.cache_clear()
    build_upload_orchestrator.cache_clear()
    yield
    get_settings.cache_clear()
    build_upload_orchestrator.cache_clear()


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(
                    Bucket=bucket_name, Delete={"Objects": delete_keys}
                )
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    yield s3_client

    _cleanup_s3_objects(s3_client, bucket_name)


@pytest.fixture
def s3_put_object(s3_client) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        s3_put_object("products/original/1-abc.webp", data, "image/webp")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        return s3_client.put_object(
            Bucket=bucket_name, Key=key, Body=body, ContentType=content_type
        )

    return _put


@pytest.fixture
def s3_list_keys(s3_client) -> Callable[[], list[str]]:
    """Helper returning every key in the test bucket, sorted."""

    def _list() -> list[str]:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        response = s3_client.list_objects_v2(Bucket=bucket_name)
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _list


@pytest.fixture
def s3_head_object(s3_client) -> Callable[[str], dict[str, Any]]:
    def _head(key: str) -> dict[str, Any]:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        response: dict[str, Any] = s3_client.head_object(Bucket=bucket_name, Key=key)
        return response

    return _head


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    Factory for encoded test images.

    Usage:
        data = make_image(800, 600, "JPEG")
        data = make_image(64, 64, "PNG", mode="RGBA")
    """

    def _make(
        width: int = 500,
        height: int = 500,
        fmt: str = "JPEG",
        *,
        mode: str = "RGB",
        color: Any = None,
    ) -> bytes:
        fill = color if color is not None else ((30, 120, 200, 128) if mode == "RGBA" else (30, 120, 200))
        image = Image.new(mode, (width, height), fill)
        buffer = io.BytesIO()
        image.save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def jpeg_bytes(make_image) -> bytes:
    return make_image(500, 500, "JPEG")


@pytest.fixture
def png_bytes(make_image) -> bytes:
    return make_image(400, 300, "PNG", mode="RGBA")
