"""
Coherent Noise Source

Layered value noise over a 3D integer lattice, using the same lattice
layout and octave scheme as the Processing / p5.js noise() function:
a 4096-entry table of random values, cosine interpolation between
neighbours, 4 octaves with amplitude falloff 0.5.

Evaluation is vectorized: x, y, z may be scalars or numpy arrays of any
broadcast-compatible shape. Output lies in [0, 1) (the octave amplitudes
sum to 0.9375). The lattice is built from a fixed seed so a given
(x, y, z) always maps to the same value.
"""

import numpy as np


PERLIN_YWRAPB = 4
PERLIN_YWRAP = 1 << PERLIN_YWRAPB
PERLIN_ZWRAPB = 8
PERLIN_ZWRAP = 1 << PERLIN_ZWRAPB
PERLIN_SIZE = 4095

DEFAULT_OCTAVES = 4
DEFAULT_FALLOFF = 0.5


def _scaled_cosine(t):
    """Cosine ease from 0 to 1 over t in [0, 1]."""
    return 0.5 * (1.0 - np.cos(t * np.pi))


class PerlinNoise:
    """Deterministic 3-input smooth noise, callable as noise(x, y, z)."""

    def __init__(self, seed=0, octaves=DEFAULT_OCTAVES, falloff=DEFAULT_FALLOFF):
        """
        Args:
            seed: Seed for the lattice table (same seed -> same noise)
            octaves: Number of layered octaves
            falloff: Amplitude multiplier applied per octave
        """
        if octaves < 1:
            raise ValueError(f"octaves must be >= 1, got {octaves}")
        self.seed = seed
        self.octaves = int(octaves)
        self.falloff = float(falloff)
        rng = np.random.default_rng(seed)
        self._lattice = rng.random(PERLIN_SIZE + 1)
        self._lattice.setflags(write=False)

    def __call__(self, x, y=0.0, z=0.0):
        x, y, z = np.broadcast_arrays(
            np.abs(np.asarray(x, dtype=np.float64)),
            np.abs(np.asarray(y, dtype=np.float64)),
            np.abs(np.asarray(z, dtype=np.float64)),
        )
        xi = np.floor(x).astype(np.int64)
        yi = np.floor(y).astype(np.int64)
        zi = np.floor(z).astype(np.int64)
        xf = x - xi
        yf = y - yi
        zf = z - zi

        lat = self._lattice
        result = np.zeros(x.shape, dtype=np.float64)
        ampl = 0.5

        for _ in range(self.octaves):
            of = xi + (yi << PERLIN_YWRAPB) + (zi << PERLIN_ZWRAPB)
            rxf = _scaled_cosine(xf)
            ryf = _scaled_cosine(yf)

            n1 = lat[of & PERLIN_SIZE]
            n1 = n1 + rxf * (lat[(of + 1) & PERLIN_SIZE] - n1)
            n2 = lat[(of + PERLIN_YWRAP) & PERLIN_SIZE]
            n2 = n2 + rxf * (lat[(of + PERLIN_YWRAP + 1) & PERLIN_SIZE] - n2)
            n1 = n1 + ryf * (n2 - n1)

            of = of + PERLIN_ZWRAP
            n2 = lat[of & PERLIN_SIZE]
            n2 = n2 + rxf * (lat[(of + 1) & PERLIN_SIZE] - n2)
            n3 = lat[(of + PERLIN_YWRAP) & PERLIN_SIZE]
            n3 = n3 + rxf * (lat[(of + PERLIN_YWRAP + 1) & PERLIN_SIZE] - n3)
            n2 = n2 + ryf * (n3 - n2)

            n1 = n1 + _scaled_cosine(zf) * (n2 - n1)

            result += n1 * ampl
            ampl *= self.falloff

            # Next octave: double the frequency, carrying the fraction overflow
            xi, xf = _double(xi, xf)
            yi, yf = _double(yi, yf)
            zi, zf = _double(zi, zf)

        if result.ndim == 0:
            return float(result)
        return result


def _double(i, f):
    i = i << 1
    f = f * 2.0
    carry = f >= 1.0
    return i + carry, f - carry


def constant_noise(value):
    """Noise source that always returns `value` (for tests and previews)."""
    def noise(x, y=0.0, z=0.0):
        shape = np.broadcast(np.asarray(x), np.asarray(y), np.asarray(z)).shape
        if not shape:
            return float(value)
        return np.full(shape, float(value))
    return noise
