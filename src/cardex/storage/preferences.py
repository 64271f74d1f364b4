"""Durable string-keyed preferences.

The catalog store only needs "get a string" and "put a string" on a single
key, so the durable layer is a small protocol with a JSON-file
implementation for real use and a dict-backed one for tests.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Protocol

from cardex.exceptions import CardexStorageError

_logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Structural interface used by :class:`cardex.state.catalog.CatalogStore`.

    Implementations raise :class:`CardexStorageError` when the underlying
    storage cannot be read or written.
    """

    def get_string(self, key: str) -> str | None:
        ...

    def put_string(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...

    def reset(self) -> None:
        """Drop all stored values, including ones that could not be read."""
        ...


class MemoryPreferences:
    """Dict-backed preferences.

    Set ``fail_writes`` to make every write raise, which simulates a full
    or read-only disk.
    """

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})
        self.fail_writes = False
        self.write_count = 0

    def get_string(self, key: str) -> str | None:
        return self._values.get(key)

    def put_string(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise CardexStorageError(f"Write rejected for key {key!r}")
        self._values[key] = value
        self.write_count += 1

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def reset(self) -> None:
        if self.fail_writes:
            raise CardexStorageError("Reset rejected")
        self._values.clear()


class JsonFilePreferences:
    """Preferences persisted as one JSON object of string values.

    Every write rewrites the whole file through a temporary file and
    ``os.replace``, so readers see either the old or the new content.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise CardexStorageError(f"Cannot read preferences {self._path}: {exc}") from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CardexStorageError(f"Preferences file {self._path} is not valid JSON") from exc
        if not isinstance(data, dict) or not all(isinstance(v, str) for v in data.values()):
            raise CardexStorageError(f"Preferences file {self._path} is not an object of strings")
        return data

    def _write_all(self, values: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=self._path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(values, fh, ensure_ascii=False)
                os.replace(tmp_name, self._path)
            except BaseException:
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise CardexStorageError(f"Cannot write preferences {self._path}: {exc}") from exc
        _logger.debug("Preferences written to %s keys=%d", self._path, len(values))

    def get_string(self, key: str) -> str | None:
        return self._read_all().get(key)

    def put_string(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    def remove(self, key: str) -> None:
        values = self._read_all()
        if values.pop(key, None) is not None:
            self._write_all(values)

    def reset(self) -> None:
        """Start over with an empty file.

        The previous file is kept next to it as ``<name>.corrupt`` so its
        content can still be recovered by hand.
        """
        backup = self._path.with_name(self._path.name + ".corrupt")
        try:
            os.replace(self._path, backup)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise CardexStorageError(f"Cannot reset preferences {self._path}: {exc}") from exc
        _logger.debug("Preferences %s moved aside to %s", self._path, backup)
