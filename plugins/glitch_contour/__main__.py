"""
Glitch Contour - Entry Point

Usage:
    python -m glitch_contour [options]

Options:
    --size N            Canvas side length in pixels (default 800)
    --pattern KIND      circles | checkerboard | stripes
    --band-width W      Band/ring period in pixels
    --noise-scale S     Noise spatial frequency
    --displacement D    Maximum warp offset in pixels
    --steps N           Number of warp passes
    --seed S            Noise seed (third noise coordinate)
    --turbulence        Sine-folded displacement instead of linear
    --contrast C        Edge sharpness 0-100
    --color1 HEX        Ink color, e.g. #1a1a2e
    --color2 HEX        Paper color, e.g. #f4f1de
    --texture [S]       Grain and ink bleed, optional strength 0-100
    --workers N         Render threads
    --out PATH          Output PNG (default glitch-contour.png)
    --view              Open the preview window instead of writing a file
    -v, --verbose       Debug logging (cache and timing details)

Examples:
    python -m glitch_contour
    python -m glitch_contour --pattern stripes --turbulence --steps 3
    python -m glitch_contour --size 1024 --texture 70 --out ink.png
"""

import logging
import sys
import time

from .params import DEFAULT_PARAMS, InvalidParameter, format_hex_color
from .patterns import PATTERN_ORDER

# option -> (parameter name, converter)
_VALUE_OPTIONS = {
    "--size": ("canvas_size", int),
    "--pattern": ("pattern_type", str),
    "--band-width": ("band_width", float),
    "--noise-scale": ("noise_scale", float),
    "--displacement": ("displacement_amt", float),
    "--steps": ("distortion_steps", int),
    "--seed": ("seed", float),
    "--contrast": ("contrast", float),
    "--color1": ("color1", str),
    "--color2": ("color2", str),
}


def snap(params, out_path, workers=1):
    """Headless mode: render once, save PNG, exit."""
    from .export import save_png
    from .renderer import Renderer

    print(f"Rendering {params.pattern_type.value} "
          f"{format_hex_color(params.color1)}/{format_hex_color(params.color2)} @ "
          f"{params.canvas_size}x{params.canvas_size}...", end="", flush=True)
    t0 = time.perf_counter()
    with Renderer(workers=workers) as renderer:
        frame = renderer.render(params)
    path = save_png(frame, out_path)
    print(f" {time.perf_counter() - t0:.2f}s, saved: {path}")


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    overrides = {}
    out_path = None
    workers = 1
    view = False
    log_level = logging.WARNING

    i = 0
    while i < len(args):
        arg = args[i]
        if arg in _VALUE_OPTIONS and i + 1 < len(args):
            name, conv = _VALUE_OPTIONS[arg]
            try:
                overrides[name] = conv(args[i + 1])
            except ValueError:
                print(f"Bad value for {arg}: {args[i + 1]!r}")
                return 2
            i += 2
        elif arg == "--turbulence":
            overrides["turbulence"] = True
            i += 1
        elif arg == "--texture":
            overrides["texture_mode"] = True
            if i + 1 < len(args) and not args[i + 1].startswith("--"):
                try:
                    overrides["texture_strength"] = float(args[i + 1])
                    i += 1
                except ValueError:
                    # a following short option like -v is not a strength
                    if not args[i + 1].startswith("-"):
                        print(f"Bad value for --texture: {args[i + 1]!r}")
                        return 2
            i += 1
        elif arg == "--workers" and i + 1 < len(args):
            try:
                workers = int(args[i + 1])
            except ValueError:
                print(f"Bad value for --workers: {args[i + 1]!r}")
                return 2
            i += 2
        elif arg == "--out" and i + 1 < len(args):
            out_path = args[i + 1]
            i += 2
        elif arg == "--view":
            view = True
            i += 1
        elif arg in ("--verbose", "-v"):
            log_level = logging.DEBUG
            i += 1
        elif arg in ("--help", "-h"):
            print(__doc__)
            return 0
        else:
            print(f"Unknown argument: {arg}")
            print(f"Patterns: {', '.join(PATTERN_ORDER)}. Use --help for options")
            return 2

    logging.basicConfig(level=log_level, format="[glitch] %(levelname)s %(name)s: %(message)s")

    try:
        params = DEFAULT_PARAMS.replace(**overrides)
    except InvalidParameter as e:
        print(f"Invalid parameters: {e}")
        return 2

    if view:
        from .renderer import Renderer
        from .viewer import Viewer
        Viewer(params, renderer=Renderer(workers=workers)).run()
        return 0

    snap(params, out_path, workers=workers)
    return 0


if __name__ == "__main__":
    sys.exit(main())
