#!/usr/bin/env python3
"""
Seed script to populate the bucket with product images via API endpoints.

Sample images are generated with Pillow, so no fixture files are needed.
The stems of the uploaded images are written to ``seed/data/seeded.json``
for ``cleanup_images.py``.

Run:
    poetry run python seed/seed_images.py \
      --api-id <API-ID> \
      --api-key <API-KEY>
"""

import argparse
import io
import json
from pathlib import Path
import sys
from typing import Any, cast

from aws_lambda_powertools import Logger
from PIL import Image, ImageDraw
import requests

logger = Logger(service="seed")


UPLOAD_API_URL = "http://localhost:4566/restapis/{0}/snd/_user_request_/v1/uploads/product"

SEEDED_FILE = Path(__file__).parent / "data" / "seeded.json"

PALETTE = [
    (220, 53, 69),
    (25, 135, 84),
    (13, 110, 253),
    (255, 193, 7),
    (111, 66, 193),
    (32, 201, 151),
]


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed product images via the upload API")

    parser.add_argument(
        "--api-id",
        required=True,
        help="Base API ID (e.g. LocalStack API Gateway ID)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="API key for x-api-key header (optional for local)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=4,
        help="Number of images to seed",
    )
    parser.add_argument(
        "--product-id",
        default="seed-product",
        help="productId form field sent with every image",
    )

    return parser.parse_args()


def render_sample(index: int) -> bytes:
    """Draw a labelled 1600x1200 PNG so every variant profile resizes it."""
    color = PALETTE[index % len(PALETTE)]
    image = Image.new("RGB", (1600, 1200), color)

    draw = ImageDraw.Draw(image)
    draw.rectangle((100, 100, 1500, 1100), outline=(255, 255, 255), width=12)
    draw.text((140, 140), f"Sample product #{index + 1}", fill=(255, 255, 255))

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def stem_of(key: str) -> str:
    return key.rsplit("/", 1)[-1].rsplit(".", 1)[0]


def seed_images() -> None:
    try:
        args = parse_args()

        headers: dict[str, str] = {}
        if args.api_key:
            headers["x-api-key"] = args.api_key

        upload_url = UPLOAD_API_URL.format(args.api_id)

        logger.info(
            "Starting seeding process",
            extra={"api_base_url": upload_url, "limit": args.limit},
        )

        stems: list[str] = []

        for index in range(args.limit):
            file_name = f"sample-{index + 1}.png"

            response = requests.post(
                upload_url,
                headers=headers,
                files={"image": (file_name, render_sample(index), "image/png")},
                data={"productId": args.product_id},
                timeout=60,
            )

            response_json = cast(dict[str, Any], response.json())

            if response.ok:
                data = cast(dict[str, Any], response_json["data"])
                stems.append(stem_of(data["key"]))
                logger.info(
                    "Seeded image",
                    extra={"file_name": file_name, "key": data["key"], "url": data["url"]},
                )
            else:
                logger.error(
                    "Failed to seed image",
                    extra={
                        "file_name": file_name,
                        "status": response.status_code,
                        "response": response_json,
                    },
                )

        SEEDED_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(SEEDED_FILE, "w", encoding="utf-8") as f:
            json.dump({"stems": stems}, f, indent=2)

        logger.info(
            "Seeding completed",
            extra={"seeded": len(stems), "seeded_file": str(SEEDED_FILE)},
        )

    except Exception as exc:
        logger.exception("Seeding failed", exc_info=exc)
        sys.exit(1)


if __name__ == "__main__":
    seed_images()
