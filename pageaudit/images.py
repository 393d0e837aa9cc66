"""
Image classification and byte download.

Each download runs as its own task with its own timeout; a failed image keeps
its markup facts and simply has no ``base64``/``size``/``format``.
"""

import asyncio
import base64
import logging
import re
from typing import List
from urllib.parse import urljoin

import httpx

from . import config
from .extractor import page_origin
from .models import ImageFact

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"^\s*(\d+)")


def _leading_int(value: str) -> int:
    match = _LEADING_DIGITS.match(value or "")
    return int(match.group(1)) if match else 0


def classify_image(image: ImageFact, index: int) -> ImageFact:
    """Set the logo/hero/product flags. They are not mutually exclusive."""
    src = image.src.lower()
    alt = image.alt.lower()
    css_class = image.css_class.lower()
    element_id = image.element_id.lower()

    is_logo = any("logo" in v for v in (src, alt, css_class, element_id))
    is_hero = index == 0 and (_leading_int(image.width) > 400 or _leading_int(image.height) > 300)
    is_product = (
        any("product" in v for v in (src, alt, css_class))
        or "/p/" in src
        or "/products/" in src
    )
    return image.model_copy(update={"is_logo": is_logo, "is_hero": is_hero, "is_product": is_product})


async def download_image(
    client: httpx.AsyncClient,
    image: ImageFact,
    page_url: str,
    timeout: float = config.IMAGE_TIMEOUT,
) -> ImageFact:
    """Fetch one image and attach its data URL, byte size and format."""
    src = image.src.strip()
    if not src or src.startswith("data:"):
        return image

    absolute = src if src.startswith("http") else urljoin(page_origin(page_url) + "/", src)
    try:
        response = await client.get(absolute, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"Failed to download image {src}: {e}")
        return image

    body = response.content
    mime_type = response.headers.get("content-type", "").split(";")[0].strip() or "application/octet-stream"
    encoded = base64.b64encode(body).decode("ascii")
    return image.model_copy(
        update={
            "base64": f"data:{mime_type};base64,{encoded}",
            "size": len(body),
            "format": mime_type.split("/")[-1] or "unknown",
        }
    )


async def process_images(
    client: httpx.AsyncClient,
    images: List[ImageFact],
    page_url: str,
    download: bool = True,
    timeout: float = config.IMAGE_TIMEOUT,
) -> List[ImageFact]:
    """Classify every image and, when enabled, download all of them concurrently."""
    classified = [classify_image(image, idx) for idx, image in enumerate(images)]
    if not download or not classified:
        return classified
    return list(
        await asyncio.gather(
            *(download_image(client, image, page_url, timeout) for image in classified)
        )
    )
