"""Catalog (de)serialization.

The persisted form is a JSON array of field-named objects::

    [{"name": "BMW X6", "motorType": "MHEV", "maxPower": "340 HP", "imageUri": "..."}]
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import TypeAdapter, ValidationError

from cardex.exceptions import CorruptCatalogError
from cardex.models.vehicle import VehicleRecord

_CATALOG_ADAPTER: TypeAdapter[list[VehicleRecord]] = TypeAdapter(list[VehicleRecord])


def serialize_catalog(records: Iterable[VehicleRecord]) -> str:
    """Encode the full catalog, preserving order."""
    return _CATALOG_ADAPTER.dump_json(list(records), by_alias=True).decode("utf-8")


def deserialize_catalog(text: str) -> list[VehicleRecord]:
    """Decode a stored catalog.

    Raises
    ------
    CorruptCatalogError
        If *text* is not a JSON array of complete records.  Nothing is
        recovered from a partially valid value.
    """
    try:
        return _CATALOG_ADAPTER.validate_json(text)
    except ValidationError as exc:
        raise CorruptCatalogError(f"Stored catalog is not a valid record list: {exc.error_count()} error(s)") from exc
