"""
Color / Texture Compositor

Turns sampled pattern scalars into RGBA pixels:

1. Contrast: expand (or compress) the scalar around 0.5 and clip to [0, 1]
2. Two-color mix: 0 -> color1 ("ink"), 1 -> color2 ("paper")
3. Texture (optional):
     - grain on every pixel
     - ink bleed on the ink half of the gradient, stronger toward pure ink,
       drawn independently per channel to look like uneven absorption
   plus a small jitter of the sample coordinate before the field lookup
4. Round, clamp to [0, 255], alpha fixed at 255

Texture noise comes from a numpy Generator passed in by the caller.
"""

import numpy as np


CONTRAST_RANGE = 20.0     # contrast=100 -> multiplier 21
GRAIN_AMPLITUDE = 80.0
BLEED_AMPLITUDE = 150.0
JITTER_AMPLITUDE = 1.5


def contrast_multiplier(contrast):
    return 1.0 + (contrast / 100.0) * CONTRAST_RANGE


def apply_contrast(values, contrast):
    """Expand values around the 0.5 midpoint and clip to [0, 1]."""
    adjusted = (np.asarray(values, dtype=np.float64) - 0.5) * contrast_multiplier(contrast) + 0.5
    return np.clip(adjusted, 0.0, 1.0)


def mix_colors(color1, color2, t):
    """Per-channel linear interpolation between two RGB colors.

    Args:
        color1, color2: RGB triples
        t: Scalar or array of mix amounts in [0, 1]

    Returns:
        Float array of shape t.shape + (3,)
    """
    c1 = np.asarray(color1, dtype=np.float64)
    c2 = np.asarray(color2, dtype=np.float64)
    t = np.asarray(t, dtype=np.float64)[..., np.newaxis]
    return c1 + (c2 - c1) * t


def _centered(rng, shape):
    """Uniform samples in [-0.5, 0.5)."""
    return rng.random(shape) - 0.5


def jitter_coordinates(sample_x, sample_y, strength, rng):
    """Nudge traced coordinates by up to +/-0.75 px at full strength."""
    factor = strength / 100.0
    sample_x = sample_x + _centered(rng, np.shape(sample_x)) * JITTER_AMPLITUDE * factor
    sample_y = sample_y + _centered(rng, np.shape(sample_y)) * JITTER_AMPLITUDE * factor
    return sample_x, sample_y


def apply_texture(rgb, adjusted, strength, rng):
    """
    Add grain and ink bleed to mixed colors.

    Args:
        rgb: Float array (..., 3) from mix_colors
        adjusted: Contrast-adjusted scalars, shape rgb.shape[:-1]
        strength: Texture strength 0-100
        rng: numpy Generator

    Returns:
        New float array (..., 3)
    """
    factor = strength / 100.0
    adjusted = np.asarray(adjusted, dtype=np.float64)
    shape = adjusted.shape

    # One grain draw per pixel, shared by all channels
    grain = _centered(rng, shape) * (GRAIN_AMPLITUDE * factor)
    out = rgb + grain[..., np.newaxis]

    bleed = np.where(adjusted < 0.5, (0.5 - adjusted) * 2.0, 0.0)
    bleed_amount = (BLEED_AMPLITUDE * factor) * bleed
    out += _centered(rng, shape + (3,)) * bleed_amount[..., np.newaxis]
    return out


def to_rgba(rgb):
    """Round float RGB to uint8 RGBA with opaque alpha."""
    rgb = np.asarray(rgb, dtype=np.float64)
    out = np.empty(rgb.shape[:-1] + (4,), dtype=np.uint8)
    out[..., :3] = np.clip(np.rint(rgb), 0, 255)
    out[..., 3] = 255
    return out


def composite(sampled, params, rng=None):
    """
    Composite sampled pattern scalars into RGBA pixels.

    Args:
        sampled: Scalar or array of pattern values in [0, 1]
        params: RenderParameters
        rng: numpy Generator for texture noise (fresh unseeded one if None)

    Returns:
        uint8 array of shape sampled.shape + (4,)
    """
    adjusted = apply_contrast(sampled, params.contrast)
    rgb = mix_colors(params.color1, params.color2, adjusted)
    if params.texture_mode:
        if rng is None:
            rng = np.random.default_rng()
        rgb = apply_texture(rgb, adjusted, params.texture_strength, rng)
    return to_rgba(rgb)
