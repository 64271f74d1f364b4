"""Fixed keys and the built-in seed catalog."""

from __future__ import annotations

from cardex.models.image import builtin_image
from cardex.models.vehicle import VehicleRecord

#: Preferences file name (without extension) holding the catalog.
DEFAULT_PREFS_NAME = "CarDexPrefs"

#: Key under which the serialized catalog is stored.
DEFAULT_CATALOG_KEY = "cars"

#: Extension given to every ingested image, whatever the source format.
INGESTED_IMAGE_SUFFIX = ".jpg"

#: Chunk size used when streaming image bytes.
COPY_CHUNK_SIZE = 64 * 1024

SEED_CATALOG: tuple[VehicleRecord, ...] = (
    VehicleRecord(name="BMW M8 Competition", motor_type="ICE", max_power="625 HP", image_uri=builtin_image("car1")),
    VehicleRecord(name="BMW X6", motor_type="MHEV", max_power="340 HP", image_uri=builtin_image("car2")),
    VehicleRecord(name="BMW M3 Competition", motor_type="ICE", max_power="510 HP", image_uri=builtin_image("car3")),
    VehicleRecord(name="BMW XM", motor_type="PHEV", max_power="750 HP", image_uri=builtin_image("car4")),
)
