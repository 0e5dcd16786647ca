#!/usr/bin/env python3
"""
Cleanup script to remove seeded images and all their variants via API endpoints.

Reads the stems recorded by ``seed_images.py`` unless stems are passed
explicitly.

Run:
    poetry run python seed/cleanup_images.py \
      --api-id <API-ID> \
      --api-key <API-KEY> \
      [--stem <TIMESTAMP-BASEKEY> ...]
"""

import argparse
import json
from pathlib import Path
import sys
from typing import Any, cast
from urllib.parse import quote

from aws_lambda_powertools import Logger
import requests

logger = Logger(service="cleanup")

BASE_API_URL = "http://localhost:4566/restapis/{0}/snd/_user_request_/v1/uploads/variants"

SEEDED_FILE = Path(__file__).parent / "data" / "seeded.json"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Cleanup seeded product images via the upload API")

    parser.add_argument(
        "--api-id",
        required=True,
        help="API Gateway ID (LocalStack)",
    )
    parser.add_argument(
        "--api-key",
        default=None,
        help="API key for x-api-key header (optional for local)",
    )
    parser.add_argument(
        "--stem",
        action="append",
        default=None,
        help="Variant stem to delete; repeatable. Defaults to the seeded stems",
    )

    return parser.parse_args()


def load_seeded_stems() -> list[str]:
    if not SEEDED_FILE.exists():
        return []
    with open(SEEDED_FILE, encoding="utf-8") as f:
        return cast(list[str], cast(dict[str, Any], json.load(f)).get("stems", []))


def cleanup_images() -> None:
    try:
        args = parse_args()

        headers: dict[str, str] = {}
        if args.api_key:
            headers["x-api-key"] = args.api_key

        base_url = BASE_API_URL.format(args.api_id)
        stems = args.stem or load_seeded_stems()

        logger.info(
            "Starting cleanup process",
            extra={"api_base_url": base_url, "count": len(stems)},
        )

        if not stems:
            logger.info("No images found for cleanup")
            return

        for stem in stems:
            delete_resp = requests.delete(
                f"{base_url}/{quote(stem, safe='')}",
                headers=headers,
                timeout=30,
            )

            if delete_resp.ok:
                data = cast(dict[str, Any], delete_resp.json()).get("data", {})
                logger.info(
                    "Deleted image variants",
                    extra={
                        "stem": stem,
                        "deleted": len(data.get("deleted", [])),
                        "missing": len(data.get("missing", [])),
                    },
                )
            else:
                logger.error(
                    "Failed to delete image variants",
                    extra={
                        "stem": stem,
                        "status": delete_resp.status_code,
                        "response": delete_resp.text,
                    },
                )

        if not args.stem and SEEDED_FILE.exists():
            SEEDED_FILE.unlink()

        logger.info("Cleanup completed successfully")

    except Exception as exc:
        logger.exception("Cleanup failed", exc_info=exc)
        sys.exit(1)


if __name__ == "__main__":
    cleanup_images()
