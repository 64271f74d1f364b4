"""cardex - Persistent vehicle catalog with gallery image ingestion."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cardex")
except PackageNotFoundError:
    __version__ = "0+local"
from cardex._constants import SEED_CATALOG
from cardex.config import CardexConfig
from cardex.exceptions import (
    CardexConfigError,
    CardexError,
    CardexStateError,
    CardexStorageError,
    CorruptCatalogError,
    IngestError,
)
from cardex.ingestion import ImageIngestor
from cardex.models import VehicleRecord, builtin_image, is_builtin_image, resolve_image
from cardex.session import CatalogSession, ViewState
from cardex.state import AddResult, CatalogStore, deserialize_catalog, serialize_catalog
from cardex.storage import JsonFilePreferences, KeyValueStore, MemoryPreferences

__all__ = [
    "__version__",
    "AddResult",
    "CardexConfig",
    "CardexConfigError",
    "CardexError",
    "CardexStateError",
    "CardexStorageError",
    "CatalogSession",
    "CatalogStore",
    "CorruptCatalogError",
    "ImageIngestor",
    "IngestError",
    "JsonFilePreferences",
    "KeyValueStore",
    "MemoryPreferences",
    "SEED_CATALOG",
    "VehicleRecord",
    "ViewState",
    "builtin_image",
    "deserialize_catalog",
    "is_builtin_image",
    "resolve_image",
    "serialize_catalog",
]
