"""Image references carried by catalog records.

A record's ``image_uri`` takes one of two forms:

* a built-in reference ``resource://cardex/drawable/<name>`` naming an
  image bundled with the package (``data/drawable/<name>.png``);
* a filesystem path (or ``file://`` URI) pointing at a copy produced by
  :class:`cardex.ingestion.image.ImageIngestor`.

Renderers call :func:`resolve_image` and read bytes from the result without
caring which form they were handed.
"""

from __future__ import annotations

import importlib.resources
from importlib.resources.abc import Traversable
from pathlib import Path
from urllib.parse import unquote, urlparse

from cardex.exceptions import CardexError

BUILTIN_IMAGE_PREFIX = "resource://cardex/drawable/"

BUILTIN_IMAGES: frozenset[str] = frozenset({"car1", "car2", "car3", "car4"})


def builtin_image(name: str) -> str:
    """Return the built-in reference for bundled image *name*."""
    if name not in BUILTIN_IMAGES:
        raise CardexError(f"Unknown built-in image: {name!r}")
    return BUILTIN_IMAGE_PREFIX + name


def is_builtin_image(reference: str) -> bool:
    return reference.startswith(BUILTIN_IMAGE_PREFIX)


def image_path(reference: str) -> Path | None:
    """Return the filesystem path of a file reference, ``None`` for built-ins."""
    if not reference or is_builtin_image(reference):
        return None
    if reference.startswith("file://"):
        return Path(unquote(urlparse(reference).path))
    return Path(reference)


def resolve_image(reference: str) -> Traversable:
    """Resolve an image reference to something readable.

    Raises
    ------
    CardexError
        If *reference* is empty or names an unknown built-in image.
    """
    if is_builtin_image(reference):
        name = reference[len(BUILTIN_IMAGE_PREFIX) :]
        if name not in BUILTIN_IMAGES:
            raise CardexError(f"Unknown built-in image: {name!r}")
        return importlib.resources.files("cardex").joinpath(f"data/drawable/{name}.png")

    path = image_path(reference)
    if path is None:
        raise CardexError("Empty image reference")
    return path
