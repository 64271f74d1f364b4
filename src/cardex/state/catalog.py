"""In-memory vehicle catalog mirrored to durable preferences.

This is the only component that mutates the catalog.  Every mutation
re-serializes the full list and writes it under a single key.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from cardex._constants import DEFAULT_CATALOG_KEY, SEED_CATALOG
from cardex.exceptions import CardexStateError, CardexStorageError, CorruptCatalogError
from cardex.models.vehicle import VehicleRecord
from cardex.state.codec import deserialize_catalog, serialize_catalog
from cardex.storage.preferences import KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AddResult:
    """Outcome of :meth:`CatalogStore.add`.

    The record is always appended in memory.  ``persisted`` tells whether
    the durable copy was updated; when it is ``False`` the in-memory and
    durable catalogs differ until a later write succeeds.
    """

    record: VehicleRecord
    index: int
    persisted: bool
    error: CardexStorageError | None = None


class CatalogStore:
    """Ordered, append-only list of :class:`VehicleRecord`.

    Usage::

        store = CatalogStore(JsonFilePreferences(path))
        store.load()
        result = store.add(VehicleRecord(name="Audi RS6", ...))
    """

    def __init__(
        self,
        preferences: KeyValueStore,
        *,
        key: str = DEFAULT_CATALOG_KEY,
        seed_on_corrupt: bool = False,
    ) -> None:
        self._preferences = preferences
        self._key = key
        self._seed_on_corrupt = seed_on_corrupt
        self._records: list[VehicleRecord] = []
        self._loaded = False
        self._fell_back = False
        self._reset_before_write = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def fell_back(self) -> bool:
        """Whether :meth:`load` replaced an unreadable stored catalog with the seed."""
        return self._fell_back

    @property
    def records(self) -> tuple[VehicleRecord, ...]:
        """Snapshot of the catalog in insertion order."""
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def load(self) -> list[VehicleRecord]:
        """Read the catalog from durable storage.

        Returns the seed catalog when nothing is stored yet.

        Raises
        ------
        CorruptCatalogError
            If a stored value exists but cannot be decoded, unless the
            store was built with ``seed_on_corrupt=True``.
        """
        fell_back = False
        reset_before_write = False
        try:
            stored = self._preferences.get_string(self._key)
            records = list(SEED_CATALOG) if stored is None else deserialize_catalog(stored)
        except CardexStorageError as exc:
            if not self._seed_on_corrupt:
                if isinstance(exc, CorruptCatalogError):
                    raise
                raise CorruptCatalogError(str(exc)) from exc
            _logger.warning("Stored catalog under key=%s is unreadable; starting from seed: %s", self._key, exc)
            records = list(SEED_CATALOG)
            fell_back = True
            # The preferences container itself is unreadable, not just our value.
            reset_before_write = not isinstance(exc, CorruptCatalogError)
        else:
            if stored is None:
                _logger.debug("No stored catalog under key=%s; using seed", self._key)
            else:
                _logger.debug("Loaded catalog key=%s records=%d", self._key, len(records))

        self._records = records
        self._loaded = True
        self._fell_back = fell_back
        self._reset_before_write = reset_before_write
        return list(records)

    def _check_loaded(self) -> None:
        if not self._loaded:
            raise CardexStateError("Catalog must be loaded before it is written")

    def add(self, record: VehicleRecord) -> AddResult:
        """Append *record* and write the full catalog back.

        Fields are not validated.  A failed write is logged and reported in
        the result; the in-memory append is kept.

        Raises
        ------
        CardexStateError
            If :meth:`load` has not completed successfully.
        """
        self._check_loaded()
        self._records.append(record)
        index = len(self._records) - 1
        try:
            self._persist()
        except CardexStorageError as exc:
            _logger.warning("Catalog write failed after add index=%d: %s", index, exc)
            return AddResult(record=record, index=index, persisted=False, error=exc)
        return AddResult(record=record, index=index, persisted=True)

    def flush(self) -> bool:
        """Rewrite the full in-memory catalog.  Returns ``True`` on success."""
        self._check_loaded()
        try:
            self._persist()
        except CardexStorageError as exc:
            _logger.warning("Catalog flush failed: %s", exc)
            return False
        return True

    def _persist(self) -> None:
        if self._reset_before_write:
            self._preferences.reset()
            self._reset_before_write = False
            _logger.warning("Replaced unreadable preferences before writing key=%s", self._key)
        self._preferences.put_string(self._key, serialize_catalog(self._records))
        _logger.debug("Persisted catalog key=%s records=%d", self._key, len(self._records))
