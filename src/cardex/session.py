"""Presentation-level session over one catalog.

A session is created once per process start.  It owns the catalog store
and the image ingestor and tracks which view is shown and whether an add
form is open.  Renderers read its state and call its transitions; nothing
here draws anything.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path

from cardex.config import CardexConfig
from cardex.exceptions import CardexStateError, IngestError
from cardex.ingestion.image import ImageIngestor, ImageSource
from cardex.models.vehicle import VehicleRecord
from cardex.state.catalog import AddResult, CatalogStore
from cardex.storage.preferences import JsonFilePreferences

_logger = logging.getLogger(__name__)


class ViewState(StrEnum):
    LIST = "list"
    DETAIL = "detail"


class CatalogSession:
    """List/detail navigation plus the ingest-then-add flow.

    Adding a vehicle is two steps: :meth:`begin_add` ingests the picked
    image and, only if that succeeds, opens the add form;
    :meth:`submit_add` then appends the record.  :meth:`dismiss_add`
    closes the form without touching the catalog.
    """

    def __init__(
        self,
        store: CatalogStore,
        ingestor: ImageIngestor,
        *,
        discard_cancelled_images: bool = True,
    ) -> None:
        self._store = store
        self._ingestor = ingestor
        self._discard_cancelled_images = discard_cancelled_images
        self._selected_index: int | None = None
        self._pending_image: Path | None = None
        self._ingesting = False

    @classmethod
    def open(cls, config: CardexConfig) -> CatalogSession:
        """Build the store and ingestor described by *config* and load the catalog."""
        store = CatalogStore(
            JsonFilePreferences(config.prefs_path),
            key=config.catalog_key,
            seed_on_corrupt=config.seed_on_corrupt,
        )
        ingestor = ImageIngestor(config.images_dir, download_timeout=config.download_timeout)
        session = cls(store, ingestor, discard_cancelled_images=config.discard_cancelled_images)
        store.load()
        return session

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def store(self) -> CatalogStore:
        return self._store

    @property
    def ingestor(self) -> ImageIngestor:
        return self._ingestor

    @property
    def records(self) -> tuple[VehicleRecord, ...]:
        return self._store.records

    @property
    def view(self) -> ViewState:
        return ViewState.LIST if self._selected_index is None else ViewState.DETAIL

    @property
    def selected(self) -> VehicleRecord | None:
        if self._selected_index is None:
            return None
        return self._store.records[self._selected_index]

    @property
    def add_form_open(self) -> bool:
        return self._pending_image is not None

    @property
    def pending_image(self) -> Path | None:
        """Ingested image waiting for the add form to be submitted."""
        return self._pending_image

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select(self, index: int) -> VehicleRecord:
        """Show the detail view for the record at *index*."""
        if self._selected_index is not None:
            raise CardexStateError("A record is already selected; go back to the list first")
        records = self._store.records
        if not 0 <= index < len(records):
            raise IndexError(f"No record at index {index} (catalog has {len(records)})")
        self._selected_index = index
        return records[index]

    def back(self) -> None:
        """Return to the list view.  No-op when already there."""
        self._selected_index = None

    # ------------------------------------------------------------------
    # Add flow
    # ------------------------------------------------------------------

    def _check_can_begin(self) -> None:
        if self._pending_image is not None:
            raise CardexStateError("An add form is already open")
        if self._ingesting:
            raise CardexStateError("An image is already being ingested")

    def _open_form(self, image: Path) -> None:
        self._pending_image = image
        _logger.debug("Add form opened image=%s", image)

    def begin_add(self, source: ImageSource) -> bool:
        """Ingest *source* and open the add form.

        Returns ``False`` when ingestion fails; no form is opened and the
        catalog is untouched.
        """
        self._check_can_begin()
        try:
            image = self._ingestor.ingest(source)
        except IngestError as exc:
            _logger.debug("Add flow not started, ingestion failed: %s", exc)
            return False
        self._open_form(image)
        return True

    async def async_begin_add(self, source: ImageSource) -> bool:
        """Async :meth:`begin_add`; the form opens only after the copy completes."""
        self._check_can_begin()
        self._ingesting = True
        try:
            image = await self._ingestor.async_ingest(source)
        except IngestError as exc:
            _logger.debug("Add flow not started, ingestion failed: %s", exc)
            return False
        finally:
            self._ingesting = False
        self._open_form(image)
        return True

    def submit_add(self, name: str, motor_type: str, max_power: str) -> AddResult:
        """Create a record from the form fields and the pending image and add it."""
        if self._pending_image is None:
            raise CardexStateError("No add form is open")
        record = VehicleRecord(
            name=name,
            motor_type=motor_type,
            max_power=max_power,
            image_uri=str(self._pending_image),
        )
        self._pending_image = None
        return self._store.add(record)

    def dismiss_add(self) -> None:
        """Close the add form without adding anything."""
        image = self._pending_image
        if image is None:
            return
        self._pending_image = None
        if self._discard_cancelled_images:
            self._ingestor.discard(image)
        _logger.debug("Add form dismissed image=%s", image)

    def collect_orphaned_images(self) -> list[Path]:
        """Delete ingested images no record (or open form) refers to.

        Raises
        ------
        CardexStateError
            If the catalog fell back to the seed; the unreadable stored
            catalog may still reference images in ``images_dir``.
        """
        if self._store.fell_back:
            raise CardexStateError("Stored catalog was unreadable; refusing to delete images it may reference")
        if self._ingesting:
            raise CardexStateError("An image is being ingested; try again once it completes")
        referenced = [record.image_uri for record in self._store.records]
        if self._pending_image is not None:
            referenced.append(str(self._pending_image))
        return self._ingestor.collect_orphans(referenced)
