"""Configuration for cardex."""

from __future__ import annotations

import dataclasses
import os
from pathlib import Path
from typing import Any

from cardex._constants import DEFAULT_CATALOG_KEY, DEFAULT_PREFS_NAME
from cardex.exceptions import CardexConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def default_data_dir() -> Path:
    """Per-user data directory (``$XDG_DATA_HOME/cardex``)."""
    base = os.environ.get("XDG_DATA_HOME") or os.path.join(os.path.expanduser("~"), ".local", "share")
    return Path(base) / "cardex"


@dataclasses.dataclass(frozen=True)
class CardexConfig:
    """Catalog configuration.

    Parameters
    ----------
    data_dir : Path
        App-private root.  Preferences live under ``shared_prefs/`` and
        ingested images under ``files/``.
    prefs_name : str
        Preferences file name without extension.
    catalog_key : str
        Key under which the serialized catalog is stored.
    seed_on_corrupt : bool
        When the stored catalog cannot be decoded, start from the seed
        catalog instead of failing the session start.
    discard_cancelled_images : bool
        Delete the ingested image when an add flow is dismissed.
    download_timeout : float
        Total timeout in seconds for fetching ``http(s)`` image sources.
    """

    data_dir: Path = dataclasses.field(default_factory=default_data_dir)
    prefs_name: str = DEFAULT_PREFS_NAME
    catalog_key: str = DEFAULT_CATALOG_KEY
    seed_on_corrupt: bool = False
    discard_cancelled_images: bool = True
    download_timeout: float = 30.0

    def __post_init__(self) -> None:
        if not isinstance(self.data_dir, Path):
            object.__setattr__(self, "data_dir", Path(self.data_dir))
        if not self.catalog_key:
            raise CardexConfigError("catalog_key must be non-empty")
        if not self.prefs_name:
            raise CardexConfigError("prefs_name must be non-empty")
        if self.download_timeout <= 0:
            raise CardexConfigError("download_timeout must be positive")

    @property
    def prefs_path(self) -> Path:
        return self.data_dir / "shared_prefs" / f"{self.prefs_name}.json"

    @property
    def images_dir(self) -> Path:
        return self.data_dir / "files"

    @classmethod
    def from_env(cls, **overrides: Any) -> CardexConfig:
        """Create configuration from environment variables.

        Reads ``CARDEX_DATA_DIR``, ``CARDEX_PREFS_NAME``,
        ``CARDEX_CATALOG_KEY``, ``CARDEX_SEED_ON_CORRUPT``,
        ``CARDEX_DISCARD_CANCELLED_IMAGES`` and ``CARDEX_DOWNLOAD_TIMEOUT``.
        Explicit keyword arguments override environment values.

        Raises
        ------
        CardexConfigError
            If a numeric variable cannot be parsed.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "CARDEX_PREFS_NAME": "prefs_name",
            "CARDEX_CATALOG_KEY": "catalog_key",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        data_dir_env = env.get("CARDEX_DATA_DIR")
        if data_dir_env:
            config_kwargs["data_dir"] = Path(data_dir_env).expanduser()

        config_kwargs["seed_on_corrupt"] = _env_bool(env.get("CARDEX_SEED_ON_CORRUPT"), False)
        config_kwargs["discard_cancelled_images"] = _env_bool(env.get("CARDEX_DISCARD_CANCELLED_IMAGES"), True)

        timeout_env = env.get("CARDEX_DOWNLOAD_TIMEOUT")
        if timeout_env is not None and "download_timeout" not in overrides:
            try:
                config_kwargs["download_timeout"] = float(timeout_env)
            except ValueError as exc:
                raise CardexConfigError(f"CARDEX_DOWNLOAD_TIMEOUT is not a number: {timeout_env!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
