"""
Domain Warp Tracer

For every output pixel, walks a sampling coordinate through
`distortion_steps` noise-driven displacements and returns where the
walk ends. The pattern field is then sampled at that point instead of at
the pixel itself.

Two displacement mappings:
  - linear:     noise in [0, 1] maps affinely to [-amt, amt]
  - turbulence: sin(noise * 2pi) * amt, which centers offsets around zero
                for noise values near 0.5 and folds them into ridges

All functions accept scalars or numpy arrays, so a whole band of pixels
is traced in one call. Nothing is shared between pixels.
"""

import math
import numpy as np


# Offset on the third noise coordinate for the y channel, so the x and y
# displacements are decorrelated.
NOISE_Y_OFFSET = 100.0


def displacement(n, amount, turbulence=False):
    """Map a noise value in [0, 1] to an offset in pixels."""
    if turbulence:
        return np.sin(n * (2.0 * math.pi)) * amount
    return (2.0 * n - 1.0) * amount


def trace(x, y, params, noise):
    """
    Trace sampling coordinates through the iterative warp.

    Args:
        x, y: Pixel coordinates (scalars or arrays of the same shape)
        params: RenderParameters
        noise: Callable noise(x, y, z) returning values in [0, 1]

    Returns:
        (sample_x, sample_y) as floats / float arrays
    """
    tx = np.asarray(x, dtype=np.float64)
    ty = np.asarray(y, dtype=np.float64)
    scale = params.noise_scale
    amount = params.displacement_amt
    seed = params.seed

    for _ in range(params.distortion_steps):
        sx = tx * scale
        sy = ty * scale
        nx = noise(sx, sy, seed)
        ny = noise(sx, sy, seed + NOISE_Y_OFFSET)
        tx = tx + displacement(nx, amount, params.turbulence)
        ty = ty + displacement(ny, amount, params.turbulence)

    if tx.ndim == 0:
        return float(tx), float(ty)
    return tx, ty


def sample_indices(sample_x, sample_y, size):
    """Floor traced coordinates and clamp each axis to [0, size - 1].

    Traces that overflowed (huge displacement amounts) are pinned to the
    nearest edge, NaN to 0.
    """
    ix = np.clip(np.floor(_finite(sample_x, size)), 0, size - 1).astype(np.intp)
    iy = np.clip(np.floor(_finite(sample_y, size)), 0, size - 1).astype(np.intp)
    return ix, iy


def _finite(sample, size):
    return np.nan_to_num(sample, nan=0.0, posinf=size - 1, neginf=0.0)
