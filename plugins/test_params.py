#!/usr/bin/env python3
"""
Tests for render parameter validation.
"""

import pytest

from glitch_contour.params import (
    BLACK, DEFAULT_PARAMS, InvalidParameter, PatternType, RenderParameters,
    StructuralKey, coerce_params, format_hex_color, parse_hex_color,
)


def test_defaults_match_sketch_defaults():
    p = DEFAULT_PARAMS
    assert p.canvas_size == 800
    assert p.noise_scale == 0.005
    assert p.displacement_amt == 100
    assert p.band_width == 12
    assert p.contrast == 50
    assert p.pattern_type is PatternType.circles
    assert p.distortion_steps == 1
    assert p.texture_strength == 50
    assert p.color1 == (0, 0, 0) and p.color2 == (255, 255, 255)
    assert not (p.turbulence or p.texture_mode or p.inverted)


def test_camel_case_aliases():
    p = coerce_params({
        "canvasSize": 256, "patternType": "checkerboard", "bandWidth": 8,
        "noiseScale": 0.02, "displacementAmt": 40, "distortionSteps": 3,
        "textureMode": True, "textureStrength": 20, "color1": "#ff0000",
        "color2": "00ff00",
    })
    assert p.canvas_size == 256
    assert p.pattern_type is PatternType.checkerboard
    assert p.distortion_steps == 3
    assert p.texture_mode and p.texture_strength == 20
    assert p.color1 == (255, 0, 0) and p.color2 == (0, 255, 0)


def test_hex_parsing():
    assert parse_hex_color("#1A2b3C") == (26, 43, 60)
    assert parse_hex_color("ffffff") == (255, 255, 255)
    assert format_hex_color((26, 43, 60)) == "#1a2b3c"


def test_malformed_color_falls_back_to_black():
    p = coerce_params(color1="#12345", color2="not a color")
    assert p.color1 == BLACK and p.color2 == BLACK
    assert coerce_params(color1=(1, 2)).color1 == BLACK
    assert coerce_params(color1=(10, 300, -5)).color1 == (10, 255, 0)


@pytest.mark.parametrize("field, value", [
    ("canvas_size", 0),
    ("canvas_size", -8),
    ("band_width", 0),
    ("band_width", -1.5),
    ("noise_scale", 0),
    ("distortion_steps", 0),
    ("displacement_amt", -1),
    ("pattern_type", "spirals"),
    ("band_width", float("nan")),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(InvalidParameter) as exc:
        coerce_params(**{field: value})
    assert isinstance(exc.value, ValueError)


def test_percent_fields_are_clamped():
    p = coerce_params(contrast=180, texture_strength=-20)
    assert p.contrast == 100 and p.texture_strength == 0


@pytest.mark.parametrize("field", ["contrast", "texture_strength"])
@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_percent_rejected(field, value):
    with pytest.raises(InvalidParameter):
        coerce_params(**{field: value})


def test_frozen_and_replace():
    p = RenderParameters(canvas_size=32)
    with pytest.raises(Exception):
        p.canvas_size = 64
    q = p.replace(seed=4.0)
    assert q.seed == 4.0 and p.seed == 0.0
    with pytest.raises(InvalidParameter):
        p.replace(band_width=0)


def test_structural_key():
    p = RenderParameters(canvas_size=64, band_width=6, pattern_type="stripes")
    assert p.structural_key == StructuralKey(64, 6.0, PatternType.stripes)
    assert p.replace(seed=9, contrast=10, color1="#ff00ff").structural_key == p.structural_key
    assert p.replace(band_width=7).structural_key != p.structural_key
    assert p.replace(pattern_type="circles").structural_key != p.structural_key


def test_coerce_passthrough():
    p = RenderParameters()
    assert coerce_params(p) is p
    assert coerce_params(p, seed=2).seed == 2
