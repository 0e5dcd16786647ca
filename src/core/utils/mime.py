from collections.abc import Mapping

from core.utils.constants import DEFAULT_CONTENT_TYPE_BINARY

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
    b"BM": "image/bmp",
}


def detect_mime_type(file_data: bytes) -> str:
    # RIFF is shared with WAV/AVI; the WebP fourcc sits at offset 8
    if file_data[:4] == b"RIFF" and file_data[8:12] == b"WEBP":
        return "image/webp"

    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    raise ValueError("Unsupported or unknown file type")


def guess_mime_type(file_data: bytes, default: str = DEFAULT_CONTENT_TYPE_BINARY) -> str:
    """Sniff the MIME type, falling back to ``default`` for unknown content."""
    try:
        return detect_mime_type(file_data)
    except ValueError:
        return default


def normalize_mime_type(value: str | None) -> str:
    """Lower-case a Content-Type value and drop any parameters."""
    if not value:
        return ""
    return value.split(";", 1)[0].strip().lower()
