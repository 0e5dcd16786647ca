"""
Rendition generation for product images.

The renderer decodes an uploaded image once and produces one encoded
variant per configured profile, all in the same output format. Rendering
is CPU bound and runs synchronously; callers bound concurrency.
"""

import io
from collections.abc import Mapping

from aws_lambda_powertools import Logger
from PIL import Image, ImageOps

from core.models.errors import ImageDecodeError
from core.models.image import ImageInfo, ImageProfile, ImageVariant, ProfileSpec
from core.utils.constants import (
    DEFAULT_OUTPUT_FORMAT,
    OUTPUT_FORMATS,
    PRODUCT_IMAGE_PREFIX,
    WEBP_METHOD,
)
from core.utils.time import utc_now_millis

logger = Logger(UTC=True)

_ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})


class VariantRenderer:
    """Produces the full set of renditions for one source image.

    Renditions are resized to fit inside the profile's bounding box while
    preserving aspect ratio, and are never enlarged beyond the source size.
    """

    def __init__(
        self,
        *,
        profiles: Mapping[ImageProfile, ProfileSpec],
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        key_prefix: str = PRODUCT_IMAGE_PREFIX,
    ) -> None:
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format: {output_format}")

        missing = [p.value for p in ImageProfile if p not in profiles]
        if missing:
            raise ValueError(f"Missing image profiles: {', '.join(missing)}")

        self._profiles = dict(profiles)
        self._pil_format, self.content_type, self.extension = OUTPUT_FORMATS[output_format]
        self._key_prefix = key_prefix.strip("/")

    def build_key(self, profile: ImageProfile, stem: str) -> str:
        """Return ``<prefix>/<profile>/<stem>.<ext>``."""
        return f"{self._key_prefix}/{profile.value}/{stem}.{self.extension}"

    def render(
        self,
        data: bytes,
        base_key: str,
        *,
        timestamp: int | None = None,
    ) -> list[ImageVariant]:
        """Render every profile for ``data``.

        All variants share the stem ``<timestamp>-<base_key>``.

        Raises:
            ImageDecodeError: If the bytes are not a decodable image. No
                variants are returned in that case.
        """
        source = self._decode(data)
        stamp = utc_now_millis() if timestamp is None else timestamp
        stem = f"{stamp}-{base_key}"

        logger.debug(
            "Rendering image variants",
            extra={
                "stem": stem,
                "source_width": source.width,
                "source_height": source.height,
                "source_mode": source.mode,
            },
        )

        variants: list[ImageVariant] = []
        try:
            for profile in ImageProfile:
                variants.append(self._render_profile(source, profile, stem))
        except (OSError, ValueError) as exc:
            logger.exception("Image encoding failed", extra={"stem": stem})
            raise ImageDecodeError(
                message="Unable to process image",
                details={"stem": stem},
            ) from exc
        finally:
            source.close()

        logger.info(
            "Image variants rendered",
            extra={
                "stem": stem,
                "count": len(variants),
                "total_bytes": sum(v.size for v in variants),
            },
        )
        return variants

    def probe(self, data: bytes) -> ImageInfo:
        """Return dimensions and format of an image without re-encoding it.

        Raises:
            ImageDecodeError: If the bytes are not a decodable image
        """
        try:
            with Image.open(io.BytesIO(data)) as image:
                return ImageInfo(
                    width=image.width,
                    height=image.height,
                    format=image.format,
                    has_alpha=self._has_alpha(image),
                )
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            raise ImageDecodeError(
                message="Uploaded file is not a valid image",
                details={"size": len(data)},
            ) from exc

    def _decode(self, data: bytes) -> Image.Image:
        try:
            with Image.open(io.BytesIO(data)) as image:
                image.load()
                # exif_transpose always hands back a detached copy
                oriented = ImageOps.exif_transpose(image)
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            logger.warning(
                "Uploaded bytes could not be decoded as an image",
                extra={"size": len(data)},
            )
            raise ImageDecodeError(
                message="Uploaded file is not a valid image",
                details={"size": len(data)},
            ) from exc

        return self._prepare_mode(oriented)

    def _prepare_mode(self, image: Image.Image) -> Image.Image:
        target = "RGB"
        if self._pil_format != "JPEG" and self._has_alpha(image):
            target = "RGBA"

        if image.mode == target:
            return image

        converted = image.convert(target)
        image.close()
        return converted

    def _render_profile(
        self,
        source: Image.Image,
        profile: ImageProfile,
        stem: str,
    ) -> ImageVariant:
        spec = self._profiles[profile]
        frame = source.copy()

        try:
            if spec.resizes:
                # thumbnail() keeps the aspect ratio and never upscales
                frame.thumbnail(
                    (spec.max_width, spec.max_height),
                    Image.Resampling.LANCZOS,
                )

            buffer = io.BytesIO()
            frame.save(buffer, format=self._pil_format, **self._save_options(spec))
            width, height = frame.size
        finally:
            frame.close()

        encoded = buffer.getvalue()

        return ImageVariant(
            profile=profile,
            key=self.build_key(profile, stem),
            data=encoded,
            content_type=self.content_type,
            size=len(encoded),
            width=width,
            height=height,
        )

    def _save_options(self, spec: ProfileSpec) -> dict[str, object]:
        if self._pil_format == "WEBP":
            return {"quality": spec.quality, "method": WEBP_METHOD}
        if self._pil_format == "JPEG":
            return {"quality": spec.quality, "optimize": True, "progressive": True}
        # PNG is lossless; quality has no meaning there
        return {"optimize": True, "compress_level": 9}

    @staticmethod
    def _has_alpha(image: Image.Image) -> bool:
        if image.mode in _ALPHA_MODES:
            return True
        return image.mode == "P" and "transparency" in image.info
