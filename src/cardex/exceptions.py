"""Custom exception hierarchy for cardex."""

from __future__ import annotations


class CardexError(Exception):
    """Base exception for all cardex errors."""


class CardexConfigError(CardexError):
    """Invalid or missing configuration."""


class CardexStateError(CardexError):
    """Session operation not allowed in the current view or add-flow state."""


class CardexStorageError(CardexError):
    """Durable preferences could not be read or written."""


class CorruptCatalogError(CardexStorageError):
    """A stored catalog value is present but is not a valid record list.

    Raised by :meth:`cardex.state.catalog.CatalogStore.load`.  The whole
    load fails; no partially decoded records are kept.
    """


class IngestError(CardexError):
    """An image source could not be opened or copied into app storage."""

    def __init__(self, message: str, *, source: str = "") -> None:
        self.source = source
        super().__init__(message)
