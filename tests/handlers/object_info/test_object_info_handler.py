import json

from handlers.object_info.handler import handler


class TestObjectInfoHandler:
    def test_existing_object(self, s3_bucket, s3_put_object, lambda_context, key_event) -> None:
        s3_put_object("products/small/1-a.webp", b"abcd", "image/webp")

        response = handler(key_event(query_params={"key": "products/small/1-a.webp"}), lambda_context)
        data = json.loads(response["body"])["data"]

        assert response["statusCode"] == 200
        assert data["exists"] is True
        assert data["metadata"]["size"] == 4
        assert data["metadata"]["contentType"] == "image/webp"
        assert data["metadata"]["lastModified"]

    def test_missing_object(self, s3_bucket, lambda_context, key_event) -> None:
        response = handler(key_event(query_params={"key": "products/small/2-a.webp"}), lambda_context)
        data = json.loads(response["body"])["data"]

        assert response["statusCode"] == 200
        assert data == {"key": "products/small/2-a.webp", "exists": False, "metadata": None}

    def test_missing_key(self, lambda_context, key_event) -> None:
        response = handler(key_event(), lambda_context)

        assert response["statusCode"] == 400
