"""Data models for the vehicle catalog."""

from cardex.models.image import (
    BUILTIN_IMAGE_PREFIX,
    BUILTIN_IMAGES,
    builtin_image,
    image_path,
    is_builtin_image,
    resolve_image,
)
from cardex.models.vehicle import VehicleRecord

__all__ = [
    "BUILTIN_IMAGE_PREFIX",
    "BUILTIN_IMAGES",
    "VehicleRecord",
    "builtin_image",
    "image_path",
    "is_builtin_image",
    "resolve_image",
]
