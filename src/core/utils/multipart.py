"""Parsing of multipart/form-data bodies from API Gateway proxy events."""

import base64
import binascii
import re
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, Field
from requests_toolbelt.multipart.decoder import (
    ImproperBodyPartContentException,
    MultipartDecoder,
    NonMultipartContentTypeException,
)

from core.models.errors import ValidationError
from core.models.image import UploadedFile
from core.utils.constants import ERROR_CODE_INVALID_MULTIPART
from core.utils.mime import guess_mime_type, normalize_mime_type

logger = Logger(UTC=True)

_DISPOSITION_NAME = re.compile(r'(?:^|;)\s*name="([^"]*)"', re.IGNORECASE)
_DISPOSITION_FILENAME = re.compile(r'(?:^|;)\s*filename="([^"]*)"', re.IGNORECASE)
_BOUNDARY = re.compile(r";\s*boundary=\"?[^\";]+", re.IGNORECASE)


class MultipartForm(BaseModel):
    """Text fields and files of one multipart request."""

    fields: dict[str, str] = Field(default_factory=dict)
    files: dict[str, list[UploadedFile]] = Field(default_factory=dict)

    def field(self, name: str) -> str | None:
        return self.fields.get(name)

    def files_for(self, name: str) -> list[UploadedFile]:
        return list(self.files.get(name, []))

    def first_file(self, name: str) -> UploadedFile | None:
        files = self.files.get(name)
        return files[0] if files else None


def _header(headers: dict[str, Any] | None, name: str) -> str | None:
    for key, value in (headers or {}).items():
        if key.lower() == name.lower():
            return str(value)
    return None


def _raw_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""

    if isinstance(body, bytes):
        return body

    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(
                message="Invalid request body encoding",
                error_code=ERROR_CODE_INVALID_MULTIPART,
            ) from exc

    return body.encode("utf-8")


def parse_multipart_event(event: dict[str, Any]) -> MultipartForm:
    """Decode the multipart body of an API Gateway proxy event.

    Parts with a ``filename`` become files; all other parts become text
    fields. Parts without a Content-Type are sniffed from their content.

    Raises:
        ValidationError: If the request is not multipart/form-data or the
            body cannot be decoded
    """
    content_type = _header(event.get("headers"), "Content-Type") or ""

    if normalize_mime_type(content_type) != "multipart/form-data":
        raise ValidationError(
            message="Invalid request. Expected multipart/form-data",
            error_code=ERROR_CODE_INVALID_MULTIPART,
            details={"content_type": content_type},
        )

    if not _BOUNDARY.search(content_type):
        raise ValidationError(
            message="Invalid request. Multipart boundary is missing",
            error_code=ERROR_CODE_INVALID_MULTIPART,
        )

    body = _raw_body(event)
    if not body:
        return MultipartForm()

    try:
        decoder = MultipartDecoder(body, content_type)
    except (ImproperBodyPartContentException, NonMultipartContentTypeException) as exc:
        logger.warning("Malformed multipart body", extra={"error": str(exc)})
        raise ValidationError(
            message="Invalid multipart request body",
            error_code=ERROR_CODE_INVALID_MULTIPART,
        ) from exc

    form = MultipartForm()

    for part in decoder.parts:
        disposition = part.headers.get(b"Content-Disposition", b"").decode("utf-8", "replace")

        name_match = _DISPOSITION_NAME.search(disposition)
        if not name_match:
            continue

        name = name_match.group(1)
        filename_match = _DISPOSITION_FILENAME.search(disposition)

        if filename_match is None:
            form.fields[name] = part.text
            continue

        # Browsers send an empty, nameless part for an untouched file input
        if not filename_match.group(1) and not part.content:
            continue

        declared = part.headers.get(b"Content-Type", b"").decode("utf-8", "replace")
        form.files.setdefault(name, []).append(
            UploadedFile.from_bytes(
                part.content,
                content_type=normalize_mime_type(declared) or guess_mime_type(part.content),
                filename=filename_match.group(1) or "upload",
            )
        )

    logger.debug(
        "Parsed multipart body",
        extra={
            "field_names": sorted(form.fields),
            "file_counts": {name: len(files) for name, files in form.files.items()},
        },
    )
    return form
