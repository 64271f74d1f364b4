"""Durable storage layer.

Holds the string-keyed preferences the catalog is mirrored into.
"""

from cardex.storage.preferences import JsonFilePreferences, KeyValueStore, MemoryPreferences

__all__ = ["JsonFilePreferences", "KeyValueStore", "MemoryPreferences"]
