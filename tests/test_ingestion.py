from __future__ import annotations

import io
from pathlib import Path

import pytest
from aiohttp import test_utils, web

from cardex.exceptions import IngestError
from cardex.ingestion.image import ImageIngestor
from cardex.models.image import builtin_image

_JPEG = b"\xff\xd8\xff\xe0" + bytes(range(256)) * 600 + b"\xff\xd9"


def _fixed_clock() -> float:
    return 1_700_000_000.123


class _FailingStream(io.BytesIO):
    """Yields one chunk and then fails like a revoked content handle."""

    def __init__(self) -> None:
        super().__init__(b"partial-bytes")
        self._reads = 0

    def read(self, size: int | None = -1) -> bytes:
        self._reads += 1
        if self._reads > 1:
            raise OSError("source revoked")
        return super().read(4)


@pytest.fixture
def source_image(tmp_path: Path) -> Path:
    path = tmp_path / "gallery" / "IMG_0001.heic"
    path.parent.mkdir()
    path.write_bytes(_JPEG)
    return path


@pytest.fixture
def ingestor(tmp_path: Path) -> ImageIngestor:
    return ImageIngestor(tmp_path / "files", clock=_fixed_clock)


class TestIngest:
    def test_copies_bytes_to_timestamped_file(self, ingestor: ImageIngestor, source_image: Path) -> None:
        dest = ingestor.ingest(source_image)

        assert dest.is_absolute()
        assert dest.parent == ingestor.images_dir.resolve()
        assert dest.name == "1700000000123.jpg"
        assert dest.read_bytes() == _JPEG
        assert source_image.read_bytes() == _JPEG

    def test_accepts_string_and_file_uri(self, ingestor: ImageIngestor, source_image: Path) -> None:
        first = ingestor.ingest(str(source_image))
        second = ingestor.ingest(source_image.as_uri())
        assert first.read_bytes() == second.read_bytes() == _JPEG

    def test_name_collision_gets_suffix(self, ingestor: ImageIngestor, source_image: Path) -> None:
        first = ingestor.ingest(source_image)
        second = ingestor.ingest(source_image)
        assert first.name == "1700000000123.jpg"
        assert second.name == "1700000000123-1.jpg"

    def test_accepts_open_stream_and_closes_it(self, ingestor: ImageIngestor) -> None:
        stream = io.BytesIO(_JPEG)
        dest = ingestor.ingest(stream)
        assert dest.read_bytes() == _JPEG
        assert stream.closed

    def test_missing_source_raises(self, ingestor: ImageIngestor, tmp_path: Path) -> None:
        with pytest.raises(IngestError) as exc_info:
            ingestor.ingest(tmp_path / "gone.jpg")
        assert exc_info.value.source.endswith("gone.jpg")
        assert not ingestor.images_dir.exists() or not any(ingestor.images_dir.iterdir())

    def test_empty_source_raises(self, ingestor: ImageIngestor) -> None:
        with pytest.raises(IngestError):
            ingestor.ingest("")

    def test_builtin_reference_rejected(self, ingestor: ImageIngestor) -> None:
        with pytest.raises(IngestError, match="Built-in image references") as exc_info:
            ingestor.ingest(builtin_image("car1"))
        assert exc_info.value.source == builtin_image("car1")

    def test_remote_source_requires_async(self, ingestor: ImageIngestor) -> None:
        with pytest.raises(IngestError):
            ingestor.ingest("https://example.invalid/car.jpg")

    def test_copy_failure_closes_source_and_may_leave_partial(self, ingestor: ImageIngestor) -> None:
        stream = _FailingStream()
        with pytest.raises(IngestError):
            ingestor.ingest(stream)
        assert stream.closed
        leftovers = list(ingestor.images_dir.iterdir())
        assert len(leftovers) == 1
        assert leftovers[0].read_bytes() == b"part"


class TestAsyncIngest:
    @pytest.mark.asyncio
    async def test_local_source(self, ingestor: ImageIngestor, source_image: Path) -> None:
        dest = await ingestor.async_ingest(source_image)
        assert dest.read_bytes() == _JPEG

    @pytest.mark.asyncio
    async def test_local_failure(self, ingestor: ImageIngestor, tmp_path: Path) -> None:
        with pytest.raises(IngestError):
            await ingestor.async_ingest(tmp_path / "gone.jpg")

    @pytest.mark.asyncio
    async def test_http_source(self, ingestor: ImageIngestor) -> None:
        async def handler(request: web.Request) -> web.Response:
            return web.Response(body=_JPEG, content_type="image/jpeg")

        app = web.Application()
        app.router.add_get("/photo.jpg", handler)
        async with test_utils.TestServer(app) as server:
            dest = await ingestor.async_ingest(str(server.make_url("/photo.jpg")))

        assert dest.name == "1700000000123.jpg"
        assert dest.read_bytes() == _JPEG

    @pytest.mark.asyncio
    async def test_http_error_status(self, ingestor: ImageIngestor) -> None:
        app = web.Application()
        async with test_utils.TestServer(app) as server:
            with pytest.raises(IngestError) as exc_info:
                await ingestor.async_ingest(str(server.make_url("/missing.jpg")))
        assert "missing.jpg" in exc_info.value.source


class TestCleanup:
    def test_discard_removes_ingested_copy(self, ingestor: ImageIngestor, source_image: Path) -> None:
        dest = ingestor.ingest(source_image)
        assert ingestor.discard(dest) is True
        assert not dest.exists()
        assert ingestor.discard(dest) is False

    def test_discard_ignores_files_outside_images_dir(self, ingestor: ImageIngestor, source_image: Path) -> None:
        assert ingestor.discard(source_image) is False
        assert source_image.exists()

    def test_collect_orphans(self, ingestor: ImageIngestor, source_image: Path) -> None:
        kept = ingestor.ingest(source_image)
        orphan = ingestor.ingest(source_image)

        removed = ingestor.collect_orphans([builtin_image("car1"), str(kept)])

        assert removed == [orphan]
        assert kept.exists()
        assert not orphan.exists()

    def test_collect_orphans_without_directory(self, tmp_path: Path) -> None:
        assert ImageIngestor(tmp_path / "never-created").collect_orphans([]) == []
