"""Ingestion layer.

Adapters that bring external data (picked images) into app-private storage.
"""

from cardex.ingestion.image import ImageIngestor, ImageSource

__all__ = ["ImageIngestor", "ImageSource"]
