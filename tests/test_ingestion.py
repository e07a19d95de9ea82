"""Tests for media ingestion and storage."""

import asyncio
import base64
import io
from dataclasses import dataclass, field

import pytest
from PIL import Image

from photo_contest.adapters.supabase_media_store import SupabaseMediaStore
from photo_contest.domain.errors import IngestionError
from photo_contest.services.ingestion import (
    InlineMediaStore,
    MediaIngestionPipeline,
    PillowImageCompressor,
    detect_mime_type,
)
from tests.conftest import FakeMediaSource, InMemoryMediaStore


def _png_bytes(size: tuple[int, int]) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, (200, 30, 30, 255)).save(buffer, format="PNG")
    return buffer.getvalue()


@dataclass
class FakeBucket:
    public_url: object = "https://storage.test/contest-photos/photo.jpg"
    uploads: list[tuple[str, bytes, dict[str, str]]] = field(default_factory=list)

    def upload(self, path: str, content: bytes, options: dict[str, str]) -> None:
        self.uploads.append((path, content, options))

    def get_public_url(self, path: str) -> object:
        return self.public_url


@dataclass
class FakeStorage:
    bucket: FakeBucket
    requested: list[str] = field(default_factory=list)

    def from_(self, name: str) -> FakeBucket:
        self.requested.append(name)
        return self.bucket


@dataclass
class FakeSupabaseClient:
    storage: FakeStorage


def test_compressor_downscales_and_reencodes_as_jpeg() -> None:
    compressor = PillowImageCompressor(max_dimension=100, quality=70)

    result = compressor.compress(_png_bytes((400, 200)))

    assert detect_mime_type(result) == "image/jpeg"
    with Image.open(io.BytesIO(result)) as image:
        assert image.size == (100, 50)
        assert image.mode == "RGB"


def test_pipeline_uses_compressed_bytes() -> None:
    source = FakeMediaSource(content=_png_bytes((300, 300)))
    store = InMemoryMediaStore()
    pipeline = MediaIngestionPipeline(
        source=source,
        store=store,
        compressor=PillowImageCompressor(max_dimension=64),
    )

    ref = asyncio.run(pipeline.ingest("file-1", "u1"))

    assert ref == "https://cdn.example.com/u1/1.jpg"
    assert source.requested == ["file-1"]
    assert detect_mime_type(store.stored[0][1]) == "image/jpeg"


def test_pipeline_keeps_original_bytes_when_compression_fails() -> None:
    store = InMemoryMediaStore()
    pipeline = MediaIngestionPipeline(
        source=FakeMediaSource(content=b"not-an-image"),
        store=store,
        compressor=PillowImageCompressor(),
    )

    asyncio.run(pipeline.ingest("file-1", "u1"))

    assert store.stored == [("u1", b"not-an-image")]


def test_pipeline_wraps_download_failure() -> None:
    store = InMemoryMediaStore()
    pipeline = MediaIngestionPipeline(source=FakeMediaSource(fail=True), store=store)

    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(pipeline.ingest("file-1", "u1"))

    assert isinstance(exc_info.value.__cause__, RuntimeError)
    assert store.stored == []


def test_pipeline_rejects_empty_download() -> None:
    pipeline = MediaIngestionPipeline(
        source=FakeMediaSource(content=b""), store=InMemoryMediaStore()
    )

    with pytest.raises(IngestionError):
        asyncio.run(pipeline.ingest("file-1", "u1"))


def test_pipeline_wraps_store_failure() -> None:
    pipeline = MediaIngestionPipeline(
        source=FakeMediaSource(), store=InMemoryMediaStore(fail=True)
    )

    with pytest.raises(IngestionError):
        asyncio.run(pipeline.ingest("file-1", "u1"))


def test_inline_store_returns_data_url() -> None:
    content = _png_bytes((2, 2))

    ref = asyncio.run(InlineMediaStore().store(content, "u1"))

    prefix = "data:image/png;base64,"
    assert ref.startswith(prefix)
    assert base64.b64decode(ref[len(prefix) :]) == content


def test_detect_mime_type_signatures() -> None:
    assert detect_mime_type(b"\xff\xd8\xff\xe0rest") == "image/jpeg"
    assert detect_mime_type(b"\x89PNG\r\n\x1a\nrest") == "image/png"
    assert detect_mime_type(b"RIFF\x00\x00\x00\x00WEBPVP8") == "image/webp"
    assert detect_mime_type(b"unknown") == "image/jpeg"


def test_supabase_store_uploads_under_user_folder() -> None:
    bucket = FakeBucket()
    storage = FakeStorage(bucket=bucket)
    store = SupabaseMediaStore(
        client=FakeSupabaseClient(storage=storage),  # type: ignore[arg-type]
        bucket="contest-photos",
    )

    url = asyncio.run(store.store(b"\x89PNG\r\n\x1a\ndata", "u1"))

    assert url == "https://storage.test/contest-photos/photo.jpg"
    assert storage.requested == ["contest-photos"]
    path, content, options = bucket.uploads[0]
    assert path.startswith("u1/")
    assert path.endswith(".png")
    assert content == b"\x89PNG\r\n\x1a\ndata"
    assert options == {"content-type": "image/png"}


def test_supabase_store_requires_public_url() -> None:
    client = FakeSupabaseClient(storage=FakeStorage(bucket=FakeBucket(public_url=None)))
    store = SupabaseMediaStore(
        client=client,  # type: ignore[arg-type]
        bucket="contest-photos",
    )
    pipeline = MediaIngestionPipeline(source=FakeMediaSource(), store=store)

    with pytest.raises(IngestionError):
        asyncio.run(pipeline.ingest("file-1", "u1"))
