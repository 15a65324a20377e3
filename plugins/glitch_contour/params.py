"""
Render Parameters for Glitch Contour

One frozen pydantic model describes a render: canvas size, base pattern,
warp settings, contrast, the two gradient colors and the texture switches.
Field names are snake_case; the camelCase names used by saved sketch
parameters (canvasSize, bandWidth, ...) are accepted as aliases.

Structural parameters (canvas size, band width, pattern kind) are the
subset that invalidates the cached pattern field; StructuralKey captures
them as a single comparable value.
"""

import enum
import logging
import math
import re
from typing import NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

BLACK = (0, 0, 0)

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


class InvalidParameter(ValueError):
    """Raised when render parameters cannot produce an image."""


class RenderCancelled(Exception):
    """Raised when a render pass is abandoned for a newer request."""


class PatternType(str, enum.Enum):
    """Base pattern kinds."""
    circles = "circles"
    checkerboard = "checkerboard"
    stripes = "stripes"


class StructuralKey(NamedTuple):
    """Parameters the pattern field depends on."""
    canvas_size: int
    band_width: float
    pattern_type: PatternType


def parse_hex_color(value):
    """Parse '#rrggbb' (or 'rrggbb') into an RGB tuple.

    Malformed strings fall back to black rather than failing the render.
    """
    m = _HEX_RE.match(value.strip()) if isinstance(value, str) else None
    if m is None:
        logger.warning("Malformed color %r, falling back to black", value)
        return BLACK
    return tuple(int(g, 16) for g in m.groups())


def format_hex_color(rgb):
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def _coerce_color(value):
    if isinstance(value, str):
        return parse_hex_color(value)
    try:
        channels = tuple(int(round(float(c))) for c in value)
    except (TypeError, ValueError):
        channels = ()
    if len(channels) != 3:
        logger.warning("Malformed color %r, falling back to black", value)
        return BLACK
    return tuple(max(0, min(255, c)) for c in channels)


class RenderParameters(BaseModel):
    """Immutable configuration for one render call."""

    model_config = ConfigDict(
        frozen=True,
        allow_inf_nan=False,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    canvas_size: int = Field(default=800, gt=0, description="Pixel side length")
    pattern_type: PatternType = Field(default=PatternType.circles)
    band_width: float = Field(default=12.0, gt=0, description="Spatial period of the base pattern")
    noise_scale: float = Field(default=0.005, gt=0, description="Spatial frequency fed to the noise")
    displacement_amt: float = Field(default=100.0, ge=0, description="Maximum warp offset in pixels")
    distortion_steps: int = Field(default=1, ge=1)
    seed: float = Field(default=0.0, description="Third noise coordinate")
    turbulence: bool = False
    contrast: float = Field(default=50.0, ge=0, le=100)
    color1: RGB = Field(default=BLACK, description="Ink end of the gradient")
    color2: RGB = Field(default=(255, 255, 255), description="Paper end of the gradient")
    texture_mode: bool = False
    texture_strength: float = Field(default=50.0, ge=0, le=100)
    # Kept for compatibility with saved sketch parameters; inversion is done
    # by swapping color1/color2.
    inverted: bool = False

    @field_validator("color1", "color2", mode="before")
    @classmethod
    def _parse_color(cls, v):
        return _coerce_color(v)

    @field_validator("contrast", "texture_strength", mode="before")
    @classmethod
    def _clamp_percent(cls, v):
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = float(v)
            # NaN and inf fall through to the allow_inf_nan check
            return max(0.0, min(100.0, v)) if math.isfinite(v) else v
        return v

    @property
    def structural_key(self):
        return StructuralKey(self.canvas_size, self.band_width, self.pattern_type)

    def replace(self, **changes):
        """Return a revalidated copy with some fields changed."""
        data = self.model_dump()
        data.update(changes)
        return coerce_params(data)


def coerce_params(params=None, **overrides):
    """Build RenderParameters from a model, a mapping, or keyword overrides.

    Raises:
        InvalidParameter: if any field fails validation.
    """
    if isinstance(params, RenderParameters) and not overrides:
        return params
    if isinstance(params, RenderParameters):
        data = params.model_dump()
    else:
        data = dict(params or {})
    data.update(overrides)
    try:
        return RenderParameters.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidParameter(problems) from e


DEFAULT_PARAMS = RenderParameters()
