"""Image ingestion: copy a picked image into app-private storage.

The ingestor turns a transient image source (a path handed over by a file
picker, a ``file://`` URI, an already-open stream, or an ``http(s)`` URL
served by a gallery service) into a stable file under ``images_dir`` whose
path is safe to persist as a record's ``image_uri``.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shutil
import time
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import IO, Any, BinaryIO

import aiohttp

from cardex._constants import COPY_CHUNK_SIZE, INGESTED_IMAGE_SUFFIX
from cardex.exceptions import IngestError
from cardex.models.image import image_path, is_builtin_image

_logger = logging.getLogger(__name__)

ImageSource = str | os.PathLike[str] | BinaryIO


def _is_stream(source: Any) -> bool:
    return hasattr(source, "read")


def _is_remote(source: Any) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def _describe(source: Any) -> str:
    if _is_stream(source):
        return str(getattr(source, "name", "<stream>"))
    return os.fspath(source) if isinstance(source, os.PathLike) else str(source)


class ImageIngestor:
    """Copy image bytes into ``images_dir``.

    Destination names are ``<epoch-millis>.jpg``; if that name is already
    taken a ``-<n>`` suffix is added.  Each ingest is a single attempt: a
    failure raises :class:`IngestError` and may leave a partial file
    behind.

    Parameters
    ----------
    images_dir : Path
        App-private directory receiving the copies.  Created on demand.
    clock : callable
        Returns epoch seconds; used to name destination files.
    download_timeout : float
        Total timeout in seconds for ``http(s)`` sources.
    session : aiohttp.ClientSession or None
        Session used for remote sources.  When ``None`` a short-lived
        session is opened per download.
    """

    def __init__(
        self,
        images_dir: Path,
        *,
        clock: Callable[[], float] = time.time,
        download_timeout: float = 30.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._images_dir = Path(images_dir)
        self._clock = clock
        self._download_timeout = download_timeout
        self._http_session = session

    @property
    def images_dir(self) -> Path:
        return self._images_dir

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _open_source(self, source: ImageSource) -> IO[bytes]:
        if _is_stream(source):
            return source  # type: ignore[return-value]
        if _is_remote(source):
            raise IngestError("Remote image sources require async_ingest", source=_describe(source))
        reference = os.fspath(source) if isinstance(source, os.PathLike) else str(source)
        if is_builtin_image(reference):
            raise IngestError("Built-in image references are bundled and cannot be ingested", source=reference)
        path = image_path(reference)
        if path is None:
            raise IngestError("Empty image source", source=reference)
        return path.open("rb")

    def _create_destination(self) -> IO[bytes]:
        self._images_dir.mkdir(parents=True, exist_ok=True)
        stamp = int(self._clock() * 1000)
        attempt = 0
        while True:
            suffix = "" if attempt == 0 else f"-{attempt}"
            candidate = self._images_dir / f"{stamp}{suffix}{INGESTED_IMAGE_SUFFIX}"
            try:
                return candidate.open("xb")
            except FileExistsError:
                attempt += 1

    def _owns(self, path: Path) -> bool:
        try:
            return path.resolve().parent == self._images_dir.resolve()
        except OSError:
            return False

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(self, source: ImageSource) -> Path:
        """Copy *source* into ``images_dir`` and return the absolute copy path.

        Both the source and destination streams are closed whether or not
        the copy succeeds; a stream passed in by the caller is closed too.

        Raises
        ------
        IngestError
            If the source cannot be opened or the copy fails.
        """
        label = _describe(source)
        try:
            with self._open_source(source) as src, self._create_destination() as dest:
                shutil.copyfileobj(src, dest, COPY_CHUNK_SIZE)
                dest_path = Path(dest.name)
        except (OSError, ValueError) as exc:
            raise IngestError(f"Cannot ingest image from {label}: {exc}", source=label) from exc

        dest_path = dest_path.resolve()
        _logger.debug("Ingested image source=%s dest=%s", label, dest_path)
        return dest_path

    async def async_ingest(self, source: ImageSource) -> Path:
        """Async variant of :meth:`ingest`.

        Local sources are copied on a worker thread; ``http(s)`` URLs are
        streamed with aiohttp.  The coroutine completes only once the copy
        has finished or failed.
        """
        if _is_remote(source):
            return await self._download(str(source))
        return await asyncio.to_thread(self.ingest, source)

    async def _download(self, url: str) -> Path:
        timeout = aiohttp.ClientTimeout(total=self._download_timeout)
        session = self._http_session
        owns_session = session is None
        if session is None:
            session = aiohttp.ClientSession(timeout=timeout)
        try:
            async with session.get(url, timeout=timeout) as response:
                response.raise_for_status()
                with self._create_destination() as dest:
                    async for chunk in response.content.iter_chunked(COPY_CHUNK_SIZE):
                        dest.write(chunk)
                    dest_path = Path(dest.name)
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            raise IngestError(f"Cannot download image from {url}: {exc}", source=url) from exc
        finally:
            if owns_session:
                await session.close()

        dest_path = dest_path.resolve()
        _logger.debug("Downloaded image source=%s dest=%s", url, dest_path)
        return dest_path

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def discard(self, path: Path | str) -> bool:
        """Delete an ingested copy.  Returns ``True`` if a file was removed.

        Paths outside ``images_dir`` are never touched.
        """
        target = Path(path)
        if not self._owns(target):
            _logger.debug("Refusing to discard file outside images dir: %s", target)
            return False
        try:
            target.unlink()
        except FileNotFoundError:
            return False
        _logger.debug("Discarded ingested image %s", target)
        return True

    def collect_orphans(self, referenced: Iterable[str]) -> list[Path]:
        """Delete files in ``images_dir`` not named by any of *referenced*.

        *referenced* are image references as stored on records; built-in
        references are ignored.  Returns the removed paths.
        """
        if not self._images_dir.is_dir():
            return []

        keep: set[Path] = set()
        for reference in referenced:
            path = image_path(reference)
            if path is not None:
                keep.add(path.resolve())

        removed: list[Path] = []
        for entry in sorted(self._images_dir.iterdir()):
            if not entry.is_file():
                continue
            resolved = entry.resolve()
            if resolved in keep:
                continue
            entry.unlink()
            removed.append(resolved)
        if removed:
            _logger.debug("Removed %d orphaned image(s) from %s", len(removed), self._images_dir)
        return removed
