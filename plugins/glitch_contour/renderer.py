"""
Render Orchestrator

Renderer owns the pattern-field cache and runs the full warp + composite
pass for every render call:

    params -> (regenerate field if the structural key changed)
           -> trace every pixel through the domain warp
           -> [texture jitter] -> floor/clamp -> sample field
           -> composite -> RGBA buffer

The image is processed in horizontal bands. Bands are independent and
write disjoint slices of the output, so they can run on a thread pool
(numpy releases the GIL inside the heavy array ops). Between bands the
optional `cancelled` callable is polled; an abandoned pass raises
RenderCancelled and its partial buffer is dropped.

Usage:
    from glitch_contour.renderer import Renderer
    renderer = Renderer()
    rgba = renderer.render({"canvasSize": 512, "patternType": "stripes"})
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from .compositor import composite, jitter_coordinates
from .noise import PerlinNoise
from .params import RenderCancelled, coerce_params
from .patterns import generate_pattern_field
from .warp import sample_indices, trace

logger = logging.getLogger(__name__)

DEFAULT_BAND_ROWS = 64


class PatternFieldCache:
    """Single-entry cache of the pattern field, keyed by StructuralKey.

    The (key, field) pair is stored as one tuple and swapped in one
    assignment, so readers always see a complete field.
    """

    def __init__(self):
        self._entry = None
        self._lock = threading.Lock()
        self.regenerations = 0

    @property
    def key(self):
        entry = self._entry
        return entry[0] if entry is not None else None

    def get(self, params):
        """Return the field for params, building it if the key changed."""
        key = params.structural_key
        entry = self._entry
        if entry is not None and entry[0] == key:
            return entry[1]
        with self._lock:
            entry = self._entry
            if entry is not None and entry[0] == key:
                return entry[1]
            t0 = time.perf_counter()
            field = generate_pattern_field(key.canvas_size, key.band_width, key.pattern_type)
            self._entry = (key, field)
            self.regenerations += 1
            logger.debug("Regenerated %s field %dx%d (band %.3g) in %.1f ms",
                         key.pattern_type.value, key.canvas_size, key.canvas_size,
                         key.band_width, (time.perf_counter() - t0) * 1000)
            return field

    def clear(self):
        with self._lock:
            self._entry = None


def _band_bounds(size, band_rows):
    return [(y0, min(y0 + band_rows, size)) for y0 in range(0, size, band_rows)]


def render_band(field, params, noise, y0, y1, out, rng=None):
    """Trace, sample and composite rows [y0, y1) into out[y0:y1]."""
    size = params.canvas_size
    Y, X = np.mgrid[y0:y1, 0:size]
    sample_x, sample_y = trace(X, Y, params, noise)
    if params.texture_mode:
        if rng is None:
            rng = np.random.default_rng()
        sample_x, sample_y = jitter_coordinates(
            sample_x, sample_y, params.texture_strength, rng)
    ix, iy = sample_indices(sample_x, sample_y, size)
    out[y0:y1] = composite(field[iy, ix], params, rng)


class Renderer:
    """Renders RenderParameters into RGBA buffers, caching the pattern field."""

    def __init__(self, noise=None, workers=1, band_rows=DEFAULT_BAND_ROWS):
        """
        Args:
            noise: Callable noise(x, y, z) in [0, 1] (default: PerlinNoise())
            workers: Threads used for the band loop (1 = run inline)
            band_rows: Rows per band
        """
        if band_rows < 1:
            raise ValueError(f"band_rows must be >= 1, got {band_rows}")
        self.noise = noise if noise is not None else PerlinNoise()
        self.workers = max(1, int(workers))
        self.band_rows = int(band_rows)
        self.cache = PatternFieldCache()
        self._frame_lock = threading.Lock()
        self._latest_frame = None
        self._pool = None

    def _band_rngs(self, params, n_bands, texture_seed):
        if not params.texture_mode:
            return [None] * n_bands
        if texture_seed is None:
            return [np.random.default_rng() for _ in range(n_bands)]
        return [np.random.default_rng([int(texture_seed), i]) for i in range(n_bands)]

    def render(self, params, texture_seed=None, cancelled=None):
        """
        Run a full render pass.

        Args:
            params: RenderParameters or mapping of parameter values
            texture_seed: Optional int making texture noise reproducible
            cancelled: Optional callable; returning True abandons the pass

        Returns:
            Read-only (size, size, 4) uint8 RGBA array

        Raises:
            InvalidParameter: if params fail validation
            RenderCancelled: if `cancelled` returned True mid-pass
        """
        params = coerce_params(params)
        field = self.cache.get(params)
        size = params.canvas_size

        t0 = time.perf_counter()
        out = np.empty((size, size, 4), dtype=np.uint8)
        bands = _band_bounds(size, self.band_rows)
        rngs = self._band_rngs(params, len(bands), texture_seed)

        def run(i):
            if cancelled is not None and cancelled():
                raise RenderCancelled()
            y0, y1 = bands[i]
            render_band(field, params, self.noise, y0, y1, out, rngs[i])

        if self.workers == 1 or len(bands) == 1:
            for i in range(len(bands)):
                run(i)
        else:
            # list() re-raises the first band failure (including cancellation)
            list(self._get_pool().map(run, range(len(bands))))

        out.setflags(write=False)
        with self._frame_lock:
            self._latest_frame = out
        logger.debug("Rendered %dx%d in %.1f ms", size, size,
                     (time.perf_counter() - t0) * 1000)
        return out

    def _get_pool(self):
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="glitch-band")
        return self._pool

    def get_latest_frame(self):
        """Return the buffer of the last pass this renderer completed, or None.

        This is the last finished pass, not the last requested one. When a
        RenderWorker drives the renderer, a pass can finish after a newer
        submit; the worker drops it, so RenderWorker.get_latest_frame() is
        the frame to present.
        """
        with self._frame_lock:
            return self._latest_frame

    def close(self):
        """Drop the field cache and shut down the band pool."""
        self.cache.clear()
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
