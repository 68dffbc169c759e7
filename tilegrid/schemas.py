"""
Pydantic schemas for map decorations.

Decorations are positioned sprites attached to a map. They never affect
movement; the grid only stores and persists them in editor order.

Two kinds exist:
- TileSpriteDecoration: ground tiles with a uniform scale and horizontal flip
- FixtureSpriteDecoration: free-standing props with per-axis scale and rotation

Both carry a ColorMultiplier. ``(1, 1, 1, 1)`` is the canonical "no tint"
value and is reported by ``is_one``.

Float fields hold float32 values: anything assigned is rounded to the nearest
float32 on validation, so an in-memory decoration always equals its decoded
archive form. ``order`` is limited to the int32 range.
"""

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .codec import INT32_MAX, INT32_MIN, to_float32


def _approximately(a: float, b: float) -> bool:
    # Same tolerance as a float32 equality check in the editor.
    return math.isclose(a, b, rel_tol=1e-6, abs_tol=1e-6)


class ColorMultiplier(BaseModel):
    """RGBA multiplier applied to a decoration sprite."""

    model_config = ConfigDict(validate_assignment=True)

    red: float = Field(1.0, description="Red channel multiplier")
    green: float = Field(1.0, description="Green channel multiplier")
    blue: float = Field(1.0, description="Blue channel multiplier")
    alpha: float = Field(1.0, description="Alpha channel multiplier")

    @field_validator("red", "green", "blue", "alpha")
    @classmethod
    def _round_to_float32(cls, value: float) -> float:
        return to_float32(value)

    @property
    def is_one(self) -> bool:
        """True when the multiplier leaves the sprite untouched."""
        return all(
            _approximately(channel, 1.0)
            for channel in (self.red, self.green, self.blue, self.alpha)
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.red, self.green, self.blue, self.alpha)


class TileSpriteDecoration(BaseModel):
    """Ground tile sprite placed on a map."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field("", description="Sprite reference id")
    position_x: float = 0.0
    position_y: float = 0.0
    scale: float = 1.0
    order: int = Field(
        0, ge=INT32_MIN, le=INT32_MAX, description="Z-order within the map's tile layer"
    )
    flip_x: bool = Field(False, description="Mirror the sprite horizontally")
    color: ColorMultiplier = Field(default_factory=ColorMultiplier)

    @field_validator("position_x", "position_y", "scale")
    @classmethod
    def _round_to_float32(cls, value: float) -> float:
        return to_float32(value)


class FixtureSpriteDecoration(BaseModel):
    """Free-standing decorative sprite (props, foliage, furniture)."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field("", description="Sprite reference id")
    position_x: float = 0.0
    position_y: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    rotation: float = Field(0.0, description="Rotation in degrees")
    order: int = Field(
        0, ge=INT32_MIN, le=INT32_MAX, description="Z-order within the map's fixture layer"
    )
    color: ColorMultiplier = Field(default_factory=ColorMultiplier)

    @field_validator("position_x", "position_y", "scale_x", "scale_y", "rotation")
    @classmethod
    def _round_to_float32(cls, value: float) -> float:
        return to_float32(value)
