from __future__ import annotations

from pathlib import Path

import pytest

from cardex.config import CardexConfig
from cardex.exceptions import CardexConfigError

_ENV_KEYS = (
    "CARDEX_DATA_DIR",
    "CARDEX_PREFS_NAME",
    "CARDEX_CATALOG_KEY",
    "CARDEX_SEED_ON_CORRUPT",
    "CARDEX_DISCARD_CANCELLED_IMAGES",
    "CARDEX_DOWNLOAD_TIMEOUT",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults(tmp_path: Path) -> None:
    config = CardexConfig(data_dir=tmp_path)
    assert config.catalog_key == "cars"
    assert config.prefs_name == "CarDexPrefs"
    assert config.prefs_path == tmp_path / "shared_prefs" / "CarDexPrefs.json"
    assert config.images_dir == tmp_path / "files"
    assert config.seed_on_corrupt is False
    assert config.discard_cancelled_images is True


def test_default_data_dir_follows_xdg(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert CardexConfig().data_dir == tmp_path / "cardex"


def test_string_data_dir_coerced(tmp_path: Path) -> None:
    config = CardexConfig(data_dir=str(tmp_path))  # type: ignore[arg-type]
    assert isinstance(config.data_dir, Path)


def test_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CARDEX_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CARDEX_CATALOG_KEY", "garage")
    monkeypatch.setenv("CARDEX_SEED_ON_CORRUPT", "yes")
    monkeypatch.setenv("CARDEX_DISCARD_CANCELLED_IMAGES", "off")
    monkeypatch.setenv("CARDEX_DOWNLOAD_TIMEOUT", "5.5")

    config = CardexConfig.from_env()

    assert config.data_dir == tmp_path
    assert config.catalog_key == "garage"
    assert config.seed_on_corrupt is True
    assert config.discard_cancelled_images is False
    assert config.download_timeout == 5.5


def test_overrides_win(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CARDEX_CATALOG_KEY", "garage")
    monkeypatch.setenv("CARDEX_DOWNLOAD_TIMEOUT", "not-a-number")

    config = CardexConfig.from_env(catalog_key="cars", download_timeout=3.0, data_dir=tmp_path)

    assert config.catalog_key == "cars"
    assert config.download_timeout == 3.0


def test_invalid_timeout_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CARDEX_DOWNLOAD_TIMEOUT", "soon")
    with pytest.raises(CardexConfigError):
        CardexConfig.from_env()


@pytest.mark.parametrize(
    "kwargs",
    [{"catalog_key": ""}, {"prefs_name": ""}, {"download_timeout": 0}],
)
def test_invalid_values(tmp_path: Path, kwargs: dict) -> None:
    with pytest.raises(CardexConfigError):
        CardexConfig(data_dir=tmp_path, **kwargs)
