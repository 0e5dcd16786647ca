import pytest

from core.utils.mime import detect_mime_type, guess_mime_type, normalize_mime_type


def test_detect_jpeg() -> None:
    assert detect_mime_type(b"\xff\xd8\xff\xe0abc") == "image/jpeg"


def test_detect_png() -> None:
    assert detect_mime_type(b"\x89PNG\r\n\x1a\nxxx") == "image/png"


def test_detect_gif() -> None:
    assert detect_mime_type(b"GIF89a....") == "image/gif"


def test_detect_webp_requires_fourcc() -> None:
    assert detect_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "image/webp"

    with pytest.raises(ValueError):
        detect_mime_type(b"RIFF\x00\x00\x00\x00WAVEfmt ")


def test_detect_bmp() -> None:
    assert detect_mime_type(b"BM\x00\x00") == "image/bmp"


def test_unsupported_type() -> None:
    with pytest.raises(ValueError):
        detect_mime_type(b"random-bytes")


def test_guess_falls_back_to_default() -> None:
    assert guess_mime_type(b"random-bytes") == "application/octet-stream"
    assert guess_mime_type(b"random-bytes", default="text/plain") == "text/plain"


def test_guess_detects_real_image(jpeg_bytes) -> None:
    assert guess_mime_type(jpeg_bytes) == "image/jpeg"


@pytest.mark.parametrize(
    "value,expected",
    [
        ("image/JPEG", "image/jpeg"),
        ("image/png; charset=binary", "image/png"),
        ("  image/webp  ", "image/webp"),
        (None, ""),
        ("", ""),
    ],
)
def test_normalize_mime_type(value, expected) -> None:
    assert normalize_mime_type(value) == expected
