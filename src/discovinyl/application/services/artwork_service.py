"""Artwork Service - turn cover images into small inline data URLs.

Hey future me - covers are stored INSIDE the spreadsheet (column L) as base64 data URLs, not as
links. That keeps the catalog self-contained (no dead links when a CDN rotates URLs) but a
spreadsheet cell holds at most 50k characters, so every image is shrunk to a 200x200 JPEG
thumbnail before it goes anywhere near the sheet. A typical cover ends up around 8-15 KB.

Two entry points:
- download_as_data_url(url): fetch any image URL (10s timeout) into "data:<mime>;base64,..."
- optimize_data_url(data_url): re-encode to the thumbnail. On ANY failure it returns the
  original untouched - a big cover beats no cover.

Pillow work is CPU-bound, so it runs in a worker thread (asyncio.to_thread) to keep the event
loop free.
"""

import asyncio
import base64
import binascii
import logging
import re
from io import BytesIO

import httpx
from PIL import Image as PILImage

from discovinyl.domain.exceptions import ExternalServiceError
from discovinyl.infrastructure.integrations.http_pool import HttpClientPool

logger = logging.getLogger(__name__)

THUMBNAIL_SIZE = 200
JPEG_QUALITY = 80
DOWNLOAD_TIMEOUT = 10.0
DEFAULT_MIME_TYPE = "image/jpeg"

_DATA_URL = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)


def is_data_url(value: str | None) -> bool:
    return bool(value) and _DATA_URL.match(value or "") is not None


class ArtworkService:
    """Download and shrink cover images."""

    def __init__(self, thumbnail_size: int = THUMBNAIL_SIZE) -> None:
        self.thumbnail_size = thumbnail_size

    async def download_as_data_url(self, url: str) -> str:
        """Download an image and wrap it as a base64 data URL.

        Args:
            url: Absolute http(s) URL of the image

        Returns:
            "data:<content-type>;base64,<payload>"

        Raises:
            ExternalServiceError: If the download fails for any reason
        """
        try:
            client = await HttpClientPool.get_client()
            response = await client.get(url, timeout=DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Image download from %s failed with HTTP %s", url, e.response.status_code
            )
            raise ExternalServiceError(
                f"Image download failed with HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.warning("Image download from %s failed: %s", url, e)
            raise ExternalServiceError(f"Image download failed: {e}") from e

        content_type = response.headers.get("content-type") or DEFAULT_MIME_TYPE
        content_type = content_type.split(";")[0].strip() or DEFAULT_MIME_TYPE
        payload = base64.b64encode(response.content).decode("ascii")
        return f"data:{content_type};base64,{payload}"

    async def optimize_data_url(self, data_url: str) -> str:
        """Re-encode a data URL to a JPEG thumbnail, or return it unchanged on failure."""
        match = _DATA_URL.match(data_url)
        if not match:
            logger.info("Not a base64 data URL, keeping image as-is")
            return data_url

        try:
            raw = base64.b64decode(match.group(2), validate=False)
            optimized = await asyncio.to_thread(
                self._process_image_sync, raw, self.thumbnail_size
            )
        except (
            binascii.Error,
            OSError,
            ValueError,
            PILImage.DecompressionBombError,
        ) as e:
            logger.warning("Image optimization failed, keeping original: %s", e)
            return data_url

        result = "data:image/jpeg;base64," + base64.b64encode(optimized).decode("ascii")
        logger.debug("Image optimized: %d -> %d characters", len(data_url), len(result))
        return result

    async def fetch_thumbnail(self, url: str) -> str:
        """Download then optimize. Download errors propagate, optimize errors don't."""
        data_url = await self.download_as_data_url(url)
        return await self.optimize_data_url(data_url)

    def _process_image_sync(self, image_bytes: bytes, target_size: int) -> bytes:
        """Process image synchronously (runs in thread pool).

        Shrinks to fit inside target_size x target_size (never enlarges) and encodes as
        progressive JPEG.
        """
        with PILImage.open(BytesIO(image_bytes)) as img:
            # JPEG has no alpha channel, so RGBA/P/LA all go through RGB
            if img.mode != "RGB":
                img = img.convert("RGB")

            # Hey - LANCZOS is the highest quality resampling filter
            img.thumbnail((target_size, target_size), PILImage.Resampling.LANCZOS)

            output = BytesIO()
            img.save(
                output,
                format="JPEG",
                quality=JPEG_QUALITY,
                progressive=True,
                optimize=True,
            )
            return output.getvalue()
