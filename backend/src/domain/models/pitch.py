"""
Pitch coordinate model.
All stored positions live in a 0-100 x 0-100 percentage space that does not
depend on the size the pitch was rendered at.
"""

from dataclasses import dataclass
from typing import Tuple

from core.exceptions import ValidationError

# FIFA pitch, 105m x 75m, scaled to an 800px long surface
PITCH_LENGTH_METERS = 105.0
PITCH_WIDTH_METERS = 75.0
GOAL_WIDTH_METERS = 7.32


@dataclass(frozen=True)
class PitchExtent:
    """Rendered bounds of the pitch surface, in the pointer's coordinate system."""
    width: float
    height: float
    left: float = 0.0
    top: float = 0.0

    def __post_init__(self):
        if self.width <= 0:
            raise ValidationError("width", self.width, "pitch extent must be positive")
        if self.height <= 0:
            raise ValidationError("height", self.height, "pitch extent must be positive")


DEFAULT_PITCH_EXTENT = PitchExtent(width=800.0, height=571.0)


def clamp_percentage(value: float) -> float:
    """Clamp a value into [0, 100]."""
    return max(0.0, min(100.0, float(value)))


def normalize_position(
    pointer_x: float,
    pointer_y: float,
    extent: PitchExtent = DEFAULT_PITCH_EXTENT
) -> Tuple[float, float]:
    """
    Convert a pointer position into clamped pitch percentages.

    Args:
        pointer_x: Horizontal pointer position
        pointer_y: Vertical pointer position
        extent: Rendered bounds of the pitch

    Returns:
        (x, y) in [0, 100] x [0, 100]
    """
    x = (pointer_x - extent.left) / extent.width * 100
    y = (pointer_y - extent.top) / extent.height * 100
    return clamp_percentage(x), clamp_percentage(y)


def to_pixels(
    x: float,
    y: float,
    extent: PitchExtent = DEFAULT_PITCH_EXTENT
) -> Tuple[float, float]:
    """Map pitch percentages back onto a rendered surface."""
    return (
        extent.left + x / 100 * extent.width,
        extent.top + y / 100 * extent.height,
    )
