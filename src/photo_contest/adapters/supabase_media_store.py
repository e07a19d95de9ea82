"""Supabase Storage-backed media store."""

import asyncio
from dataclasses import dataclass
from uuid import uuid4

from supabase import Client

from photo_contest.services.ingestion import MediaStore, detect_mime_type

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


@dataclass
class SupabaseMediaStore(MediaStore):
    """Upload contest photos to a Supabase Storage bucket."""

    client: Client
    bucket: str

    async def store(self, image_bytes: bytes, user_id: str) -> str:
        """Upload the image and return its public URL."""
        mime_type = detect_mime_type(image_bytes)
        path = f"{user_id}/{uuid4().hex}.{_EXTENSIONS.get(mime_type, 'jpg')}"
        return await asyncio.to_thread(self._upload, path, image_bytes, mime_type)

    def _upload(self, path: str, image_bytes: bytes, mime_type: str) -> str:
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(path, image_bytes, {"content-type": mime_type})
        public_url = bucket.get_public_url(path)
        if not isinstance(public_url, str) or not public_url:
            raise RuntimeError("Supabase returned no public URL")
        return public_url
