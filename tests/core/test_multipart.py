import base64

import pytest
from requests_toolbelt.multipart.encoder import MultipartEncoder

from core.models.errors import ValidationError
from core.utils.multipart import MultipartForm, parse_multipart_event


def build_event(fields, *, base64_body: bool = True) -> dict:
    encoder = MultipartEncoder(fields=fields)
    body = encoder.to_string()

    return {
        "headers": {"content-type": encoder.content_type},
        "body": base64.b64encode(body).decode("ascii") if base64_body else body.decode("utf-8"),
        "isBase64Encoded": base64_body,
    }


class TestParseMultipartEvent:
    def test_files_and_fields(self, jpeg_bytes) -> None:
        event = build_event(
            [
                ("productId", "abc123"),
                ("image", ("photo.jpg", jpeg_bytes, "image/jpeg")),
            ]
        )

        form = parse_multipart_event(event)

        assert form.field("productId") == "abc123"
        file = form.first_file("image")
        assert file is not None
        assert file.filename == "photo.jpg"
        assert file.content_type == "image/jpeg"
        assert file.size == len(jpeg_bytes)
        assert file.data == jpeg_bytes

    def test_repeated_file_field_keeps_order(self, make_image) -> None:
        first = make_image(10, 10, "PNG")
        second = make_image(20, 20, "PNG")
        event = build_event(
            [
                ("images", ("a.png", first, "image/png")),
                ("images", ("b.png", second, "image/png")),
            ]
        )

        files = parse_multipart_event(event).files_for("images")

        assert [f.filename for f in files] == ["a.png", "b.png"]
        assert [f.data for f in files] == [first, second]

    def test_plain_text_body(self) -> None:
        event = build_event([("productId", "p-1")], base64_body=False)

        assert parse_multipart_event(event).field("productId") == "p-1"

    def test_missing_part_content_type_is_sniffed(self, jpeg_bytes) -> None:
        boundary = "testboundary"
        body = (
            f"--{boundary}\r\n"
            'Content-Disposition: form-data; name="image"; filename="x"\r\n'
            "\r\n"
        ).encode() + jpeg_bytes + f"\r\n--{boundary}--\r\n".encode()

        event = {
            "headers": {"Content-Type": f"multipart/form-data; boundary={boundary}"},
            "body": base64.b64encode(body).decode("ascii"),
            "isBase64Encoded": True,
        }

        file = parse_multipart_event(event).first_file("image")

        assert file is not None
        assert file.content_type == "image/jpeg"

    def test_empty_body_gives_empty_form(self) -> None:
        event = {
            "headers": {"Content-Type": "multipart/form-data; boundary=x"},
            "body": None,
        }

        form = parse_multipart_event(event)

        assert form == MultipartForm()
        assert form.first_file("image") is None
        assert form.files_for("images") == []

    def test_rejects_non_multipart_request(self) -> None:
        event = {"headers": {"Content-Type": "application/json"}, "body": "{}"}

        with pytest.raises(ValidationError) as exc:
            parse_multipart_event(event)

        assert exc.value.error_code == "INVALID_MULTIPART"

    def test_rejects_missing_boundary(self) -> None:
        event = {"headers": {"Content-Type": "multipart/form-data"}, "body": "data"}

        with pytest.raises(ValidationError) as exc:
            parse_multipart_event(event)

        assert exc.value.error_code == "INVALID_MULTIPART"

    def test_rejects_invalid_base64(self) -> None:
        event = {
            "headers": {"Content-Type": "multipart/form-data; boundary=x"},
            "body": "!!!not-base64!!!",
            "isBase64Encoded": True,
        }

        with pytest.raises(ValidationError):
            parse_multipart_event(event)
