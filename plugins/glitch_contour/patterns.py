"""
Base Pattern Fields

Each pattern maps grid coordinates to a scalar in [0, 1] using sine waves,
so band edges are soft gradients rather than hard steps. The contrast
stage of the compositor decides how sharp they end up.

Fields are (size, size) float64 arrays indexed field[y, x].
"""

import math
import numpy as np

from .params import InvalidParameter, PatternType


def _wave(t, band_width):
    """Sine wave with period 2 * band_width."""
    return np.sin(t / band_width * math.pi)


def circles(size, band_width):
    """Concentric rings around the canvas center."""
    center = size / 2.0
    Y, X = np.ogrid[:size, :size]
    dist = np.sqrt((X - center) ** 2 + (Y - center) ** 2)
    return _wave(dist, band_width) * 0.5 + 0.5


def checkerboard(size, band_width):
    """Soft checkerboard: sin(x) * sin(y)."""
    Y, X = np.ogrid[:size, :size]
    return _wave(X, band_width) * _wave(Y, band_width) * 0.5 + 0.5


def stripes(size, band_width):
    """Vertical stripes (no y dependence)."""
    Y, X = np.ogrid[:size, :size]
    row = _wave(X, band_width) * 0.5 + 0.5
    return np.broadcast_to(row, (size, size)).copy()


# Registry of all pattern builders
PATTERNS = {
    PatternType.circles: circles,
    PatternType.checkerboard: checkerboard,
    PatternType.stripes: stripes,
}

PATTERN_ORDER = [p.value for p in PATTERNS]


def generate_pattern_field(size, band_width, pattern_type):
    """
    Build the scalar pattern field for one structural key.

    Args:
        size: Side length in pixels
        band_width: Spatial period of the bands/rings
        pattern_type: PatternType or its string value

    Returns:
        (size, size) float64 array with values in [0, 1], read-only
    """
    if size <= 0:
        raise InvalidParameter(f"canvas_size must be > 0, got {size}")
    if not band_width > 0:
        raise InvalidParameter(f"band_width must be > 0, got {band_width}")
    try:
        kind = PatternType(pattern_type)
    except ValueError:
        raise InvalidParameter(
            f"Unknown pattern type: {pattern_type!r}. "
            f"Supported: {PATTERN_ORDER}"
        ) from None

    field = np.asarray(PATTERNS[kind](int(size), float(band_width)), dtype=np.float64)
    field.setflags(write=False)
    return field
