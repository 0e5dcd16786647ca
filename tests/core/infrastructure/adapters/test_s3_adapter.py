import pytest
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, build_client_config
from core.models.settings import StorageSettings, get_settings


class TestBuildClientConfig:
    def test_aws_uses_auto_addressing(self) -> None:
        config = build_client_config(StorageSettings(bucket="b"))

        assert config.s3 == {"addressing_style": "auto"}
        assert config.retries == {"max_attempts": 3, "mode": "standard"}
        assert config.connect_timeout == 5
        assert config.read_timeout == 30

    def test_custom_endpoint_uses_path_addressing(self) -> None:
        config = build_client_config(
            StorageSettings(bucket="b", endpoint_url="http://localhost:4566")
        )

        assert config.s3 == {"addressing_style": "path"}


class TestS3Adapter:
    def test_init_missing_bucket_env(self, monkeypatch):
        monkeypatch.delenv("IMAGE_S3_BUCKET_NAME", raising=False)
        get_settings.cache_clear()

        with pytest.raises(RuntimeError):
            S3Adapter()

    def test_exposes_bucket_and_endpoint(self, aws_mock) -> None:
        adapter = S3Adapter(StorageSettings(bucket="b", endpoint_url="http://minio:9000/"))

        assert adapter.bucket == "b"
        assert adapter.endpoint_url == "http://minio:9000"

    def test_put_and_head_object(self, s3_bucket, s3_head_object) -> None:
        adapter = S3Adapter()

        key = "products/original/1-abc.webp"
        adapter.put_object(
            key=key,
            body=b"image-bytes",
            content_type="image/webp",
            metadata={"profile": "original"},
            cache_control="max-age=31536000",
        )

        head = adapter.head_object(key=key)

        assert head["ContentLength"] == len(b"image-bytes")
        assert head["ContentType"] == "image/webp"
        assert head["Metadata"] == {"profile": "original"}
        assert s3_head_object(key)["CacheControl"] == "max-age=31536000"

    def test_put_without_cache_control(self, s3_bucket, s3_head_object) -> None:
        adapter = S3Adapter()

        adapter.put_object(key="a.webp", body=b"x", content_type="image/webp", metadata={})

        assert "CacheControl" not in s3_head_object("a.webp")

    def test_head_missing_key_raises_client_error(self, s3_bucket) -> None:
        adapter = S3Adapter()

        with pytest.raises(ClientError) as exc:
            adapter.head_object(key="products/missing.webp")

        assert exc.value.response["Error"]["Code"] == "404"

    def test_delete_object(self, s3_bucket, s3_put_object, s3_list_keys) -> None:
        adapter = S3Adapter()
        s3_put_object("products/small/1-abc.webp", b"data", "image/webp")

        adapter.delete_object(key="products/small/1-abc.webp")

        assert s3_list_keys() == []

    def test_generate_presigned_url(self, s3_bucket) -> None:
        adapter = S3Adapter()

        url = adapter.generate_presigned_url(
            method="get_object",
            params={"Key": "products/original/1-abc.webp"},
            expires_in=60,
        )

        assert "test-product-images" in url
        assert "products/original/1-abc.webp" in url
        assert "X-Amz-Expires=60" in url

    def test_put_object_bubbles_client_error(self, monkeypatch, s3_bucket):
        adapter = S3Adapter()

        def raise_error(**_):
            raise ClientError(
                {"Error": {"Code": "InternalError"}},
                "PutObject",
            )

        monkeypatch.setattr(adapter._client, "put_object", raise_error)

        with pytest.raises(ClientError):
            adapter.put_object(
                key="products/x.webp",
                body=b"data",
                content_type="image/webp",
                metadata={},
            )
