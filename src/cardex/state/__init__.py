"""State/store layer.

The catalog store owns the in-memory record list and is the single place
where it is mutated and written back to durable storage.
"""

from cardex.state.catalog import AddResult, CatalogStore
from cardex.state.codec import deserialize_catalog, serialize_catalog

__all__ = ["AddResult", "CatalogStore", "deserialize_catalog", "serialize_catalog"]
