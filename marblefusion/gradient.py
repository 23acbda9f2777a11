"""Palette handling and the weighted hard-step gradient lookup table."""

import re
from dataclasses import dataclass

import numpy as np

from .errors import InvalidPalette

LUT_SIZE = 256
MIN_STOPS = 2

_HEX_RE = re.compile(r"^#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})$", re.I)


def hex_to_rgb(text):
    """Parse '#rrggbb' (the '#' is optional) into an (r, g, b) tuple."""
    match = _HEX_RE.match(str(text).strip())
    if match is None:
        raise InvalidPalette(f"Not a #rrggbb colour: {text!r}")
    return tuple(int(part, 16) for part in match.groups())


def rgb_to_hex(rgb):
    return "#{:02x}{:02x}{:02x}".format(*rgb)


@dataclass(frozen=True)
class ColorStop:
    """One palette entry: a colour and its relative visual weight."""

    color: tuple
    weight: float
    id: str = ""

    @classmethod
    def from_hex(cls, hex_color, weight, id=""):
        return cls(color=hex_to_rgb(hex_color), weight=float(weight), id=id)

    @property
    def hex(self):
        return rgb_to_hex(self.color)


def validate_palette(stops, min_stops=MIN_STOPS):
    """Check that a palette can be turned into a gradient.

    Args:
        stops: Sequence of ColorStop in gradient order.
        min_stops: Minimum number of stops required.

    Raises:
        InvalidPalette: Too few stops, a negative weight, a colour channel
            outside 0-255, or a total weight that is not positive.
    """
    stops = list(stops)
    if len(stops) < min_stops:
        raise InvalidPalette(
            f"Palette needs at least {min_stops} colour stop(s), "
            f"got {len(stops)}"
        )

    for stop in stops:
        if len(stop.color) != 3 or any(not 0 <= c <= 255 for c in stop.color):
            raise InvalidPalette(f"Colour out of range: {stop.color!r}")
        if not stop.weight >= 0:
            raise InvalidPalette(
                f"Stop weight must be non-negative, got {stop.weight!r}"
            )

    total = sum(stop.weight for stop in stops)
    if not total > 0 or not np.isfinite(total):
        raise InvalidPalette(f"Palette weights must sum above zero, got {total}")


def build_gradient_lut(stops, size=LUT_SIZE):
    """Build a hard-step colour lookup table from weighted stops.

    Each stop owns a contiguous slice of [0, 1] proportional to
    weight / sum(weights), in palette order, and paints it flat. Entry i
    samples the pixel centre (i + 0.5) / size of a size-wide strip.

    Args:
        stops: Sequence of ColorStop in gradient order (at least one).
        size: Number of LUT entries.

    Returns:
        uint8 array of shape (size, 3).
    """
    stops = list(stops)
    validate_palette(stops, min_stops=1)

    weights = np.array([stop.weight for stop in stops], dtype=np.float64)
    colors = np.array([stop.color for stop in stops], dtype=np.uint8)

    # Cumulative end position of every stop
    ends = np.cumsum(weights / weights.sum())

    positions = (np.arange(size, dtype=np.float64) + 0.5) / size
    idx = np.searchsorted(ends, positions, side="right")
    # Rounding can leave the last end fractionally below 1
    idx = np.minimum(idx, len(stops) - 1)

    return colors[idx]


def lookup(lut, values):
    """Map pattern values to LUT colours.

    Values are clamped to [0, 1], NaN maps to 0;
    index = floor(value * (size - 1)).

    Returns:
        uint8 array of shape values.shape + (3,).
    """
    values = np.nan_to_num(np.asarray(values, dtype=np.float64))
    values = np.clip(values, 0.0, 1.0)
    idx = np.floor(values * (len(lut) - 1)).astype(np.intp)
    return lut[idx]
