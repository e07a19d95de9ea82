"""Media ingestion: download a chat photo, shrink it, and store it."""

import asyncio
import base64
import io
import logging
from dataclasses import dataclass
from typing import Protocol

from PIL import Image, ImageOps

from photo_contest.domain.errors import IngestionError

_logger = logging.getLogger(__name__)


class MediaSource(Protocol):
    """Interface for fetching message content by handle."""

    async def download_file_bytes(self, file_id: str) -> bytes:
        """Download the full content behind a media handle."""


class MediaStore(Protocol):
    """Interface for turning image bytes into a durable reference."""

    async def store(self, image_bytes: bytes, user_id: str) -> str:
        """Persist the image and return its URL."""


class ImageCompressor(Protocol):
    """Interface for local image recompression."""

    def compress(self, image_bytes: bytes) -> bytes:
        """Return recompressed image bytes."""


@dataclass
class PillowImageCompressor(ImageCompressor):
    """Downscale and re-encode images as JPEG with Pillow."""

    max_dimension: int = 1920
    quality: int = 80

    def compress(self, image_bytes: bytes) -> bytes:
        """Fit the image into a max_dimension box and encode it as JPEG."""
        with Image.open(io.BytesIO(image_bytes)) as image:
            image = ImageOps.exif_transpose(image)
            image.thumbnail((self.max_dimension, self.max_dimension))
            if image.mode != "RGB":
                image = image.convert("RGB")
            buffer = io.BytesIO()
            image.save(buffer, format="JPEG", quality=self.quality, optimize=True)
        return buffer.getvalue()


@dataclass
class InlineMediaStore(MediaStore):
    """Store images as self-contained base64 data URLs."""

    async def store(self, image_bytes: bytes, user_id: str) -> str:
        """Return the image encoded as a data URL."""
        return _to_data_url(image_bytes)


@dataclass
class MediaIngestionPipeline:
    """Fetch, optionally recompress, and store a chat photo.

    Nothing is retried here; a failure is reported to the uploader, who sends
    the photo again.
    """

    source: MediaSource
    store: MediaStore
    compressor: ImageCompressor | None = None

    async def ingest(self, media_handle: str, user_id: str) -> str:
        """Return a durable reference for the media behind the handle."""
        try:
            image_bytes = await self.source.download_file_bytes(media_handle)
        except Exception as exc:
            raise IngestionError(f"Failed to download media {media_handle}") from exc
        if not image_bytes:
            raise IngestionError(f"Media {media_handle} is empty")

        image_bytes = await self._compress(image_bytes, media_handle)

        try:
            media_ref = await self.store.store(image_bytes, user_id)
        except Exception as exc:
            raise IngestionError(f"Failed to store media {media_handle}") from exc
        if not media_ref:
            raise IngestionError(f"Store returned no reference for {media_handle}")
        return media_ref

    async def _compress(self, image_bytes: bytes, media_handle: str) -> bytes:
        if self.compressor is None:
            return image_bytes
        try:
            return await asyncio.to_thread(self.compressor.compress, image_bytes)
        except Exception:
            _logger.warning(
                "Image recompression failed, keeping original bytes",
                exc_info=True,
                extra={"file_id": media_handle},
            )
            return image_bytes


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL."""
    mime_type = detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
