#!/usr/bin/env python3
"""
Tests for contrast shaping, color mixing and texture.
"""

import numpy as np

from glitch_contour.compositor import (
    apply_contrast, apply_texture, composite, contrast_multiplier,
    jitter_coordinates, mix_colors, to_rgba,
)
from glitch_contour.params import RenderParameters


def test_contrast_multiplier_literal_formula():
    assert contrast_multiplier(0) == 1.0
    assert contrast_multiplier(50) == 11.0, "contrast=50 is 1 + 0.5 * 20, not neutral"
    assert contrast_multiplier(100) == 21.0


def test_contrast_50_expands_around_midpoint():
    out = apply_contrast(np.array([0.5, 0.52, 0.48, 0.6, 0.1]), 50)
    assert out[0] == 0.5
    assert np.isclose(out[1], 0.72) and np.isclose(out[2], 0.28)
    assert out[3] == 1.0 and out[4] == 0.0, "Far values should clip"


def test_contrast_zero_is_passthrough():
    v = np.linspace(0, 1, 11)
    assert np.allclose(apply_contrast(v, 0), v)


def test_contrast_monotonic():
    v = np.linspace(0, 1, 1001)
    for c in (0, 10, 50, 73, 100):
        out = apply_contrast(v, c)
        assert np.all(np.diff(out) >= 0), f"Not monotonic at contrast={c}"
        assert out.min() >= 0 and out.max() <= 1


def test_mix_endpoints_exact():
    c1, c2 = (12, 200, 45), (250, 3, 128)
    assert mix_colors(c1, c2, 0.0).tolist() == list(c1)
    assert mix_colors(c1, c2, 1.0).tolist() == list(c2)
    rgba = to_rgba(mix_colors(c1, c2, np.array([0.0, 1.0])))
    assert rgba[0].tolist() == [12, 200, 45, 255]
    assert rgba[1].tolist() == [250, 3, 128, 255]


def test_quarter_gray_without_contrast():
    """black -> white, contrast 0, scalar 0.25 -> 63.75 rounds to 64."""
    params = RenderParameters(color1="#000000", color2="#ffffff", contrast=0)
    px = composite(0.25, params)
    assert px.tolist() == [64, 64, 64, 255], px


def test_to_rgba_clamps_and_sets_alpha():
    rgba = to_rgba(np.array([[-40.0, 127.5, 300.0], [0.4, 254.6, 255.0]]))
    assert rgba.dtype == np.uint8
    assert rgba[0].tolist() == [0, 128, 255, 255]
    assert rgba[1].tolist() == [0, 255, 255, 255]


def test_texture_strength_zero_matches_plain():
    sampled = np.linspace(0, 1, 257).reshape(1, -1)
    plain = RenderParameters(contrast=30, color1="#202040", color2="#f0e0d0")
    textured = plain.replace(texture_mode=True, texture_strength=0)
    rng = np.random.default_rng(1)
    assert np.array_equal(composite(sampled, textured, rng), composite(sampled, plain))

    sx, sy = jitter_coordinates(np.array([3.2, 7.9]), np.array([1.0, 5.5]), 0, rng)
    assert sx.tolist() == [3.2, 7.9] and sy.tolist() == [1.0, 5.5]


def test_grain_bounds_on_paper():
    """Paper side (adjusted >= 0.5) only gets grain: +/-40 at full strength."""
    adjusted = np.ones((64, 64))
    base = mix_colors((0, 0, 0), (128, 128, 128), adjusted)
    out = apply_texture(base, adjusted, 100, np.random.default_rng(3))
    delta = out - base
    assert np.abs(delta).max() <= 40.0
    assert np.abs(delta).max() > 5.0, "Grain should be visible at full strength"
    # one grain draw per pixel, same on every channel
    assert np.array_equal(delta[..., 0], delta[..., 1])
    assert np.array_equal(delta[..., 1], delta[..., 2])


def test_ink_bleed_is_per_channel_and_scaled():
    adjusted = np.zeros((64, 64))
    base = mix_colors((100, 100, 100), (255, 255, 255), adjusted)
    out = apply_texture(base, adjusted, 100, np.random.default_rng(4))
    delta = out - base
    # grain 40 + bleed 75 at pure ink
    assert np.abs(delta).max() <= 115.0
    assert not np.array_equal(delta[..., 0], delta[..., 1]), \
        "Bleed should perturb channels independently"


def test_bleed_fades_toward_midpoint():
    rng = np.random.default_rng(5)
    n = 20000
    ink = apply_texture(np.zeros((n, 3)), np.zeros(n), 100, rng)
    mid = apply_texture(np.zeros((n, 3)), np.full(n, 0.4), 100, rng)
    assert ink.std() > mid.std(), "Bleed should be strongest at pure ink"


def test_jitter_bounds():
    rng = np.random.default_rng(6)
    x = np.zeros(10000)
    jx, jy = jitter_coordinates(x, x, 100, rng)
    assert np.abs(jx).max() <= 0.75 and np.abs(jy).max() <= 0.75
    jx, _ = jitter_coordinates(x, x, 40, rng)
    assert np.abs(jx).max() <= 0.3


def test_composite_shape():
    params = RenderParameters(texture_mode=True)
    out = composite(np.full((3, 5), 0.2), params)
    assert out.shape == (3, 5, 4) and out.dtype == np.uint8
    assert np.all(out[..., 3] == 255)
