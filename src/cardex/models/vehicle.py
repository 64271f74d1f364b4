"""Vehicle record model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from cardex.models.image import is_builtin_image


class VehicleRecord(BaseModel):
    """One catalog entry.

    All fields are free-form text stored and displayed verbatim.  Field
    names serialize as camelCase (``motorType``, ``maxPower``,
    ``imageUri``), which is the persisted catalog format.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    name: str
    """Display label (e.g. ``"BMW M8 Competition"``)."""
    motor_type: str
    """Category tag such as ``"ICE"``, ``"MHEV"`` or ``"PHEV"``; not validated."""
    max_power: str
    """Power rating with unit (e.g. ``"625 HP"``); never parsed."""
    image_uri: str
    """Built-in image reference or path to an ingested copy."""

    @property
    def has_builtin_image(self) -> bool:
        return is_builtin_image(self.image_uri)
