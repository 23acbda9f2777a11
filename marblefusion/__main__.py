"""CLI entry point for MarbleFusion."""

import argparse
import logging
from dataclasses import replace
from pathlib import Path

from .errors import MarbleFusionError
from .gradient import ColorStop
from .pattern import MarbleStyle
from .recipe import DEFAULT_RECIPE, load_recipe, save_recipe
from .renderer import render

logger = logging.getLogger("marblefusion")


def color_stop(text):
    """argparse type for HEX:WEIGHT colour stops."""
    hex_color, sep, weight = text.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(
            f"expected HEX:WEIGHT, got {text!r}")
    try:
        return ColorStop.from_hex(hex_color, weight)
    except (ValueError, MarbleFusionError) as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="marblefusion",
        description="Render procedurally textured marble bead images"
    )
    parser.add_argument(
        "--recipe", "-r", default=None,
        help="Recipe JSON file (default: built-in 'Cosmic Drift')"
    )
    parser.add_argument(
        "--color", "-c", dest="colors", action="append", type=color_stop,
        metavar="HEX:WEIGHT",
        help="Colour stop, repeat for each stop in order (e.g. '#0f172a:80')"
    )
    parser.add_argument(
        "--style", choices=[s.value for s in MarbleStyle], default=None,
        help="Pattern style"
    )
    parser.add_argument(
        "--turbulence", "-t", type=float, default=None,
        help="Colour mixing 0-100"
    )
    parser.add_argument(
        "--scale", type=float, default=None,
        help="Pattern zoom 5-100"
    )
    parser.add_argument(
        "--distortion", "-d", type=float, default=None,
        help="Swirl intensity 0-100"
    )
    parser.add_argument(
        "--roughness", type=float, default=None,
        help="Surface grain 0-100"
    )
    parser.add_argument(
        "--seed", "-s", type=float, default=None,
        help="Noise seed"
    )
    parser.add_argument(
        "--size", nargs=2, type=int, default=(500, 500),
        metavar=("W", "H"),
        help="Canvas size in pixels (default: 500 500)"
    )
    parser.add_argument(
        "--workers", "-j", type=int, default=1,
        help="Threads used for rendering (default: 1)"
    )
    parser.add_argument(
        "--output", "-o", default="bead.png",
        help="Output file path (default: bead.png)"
    )
    parser.add_argument(
        "--save-recipe", default=None, metavar="PATH",
        help="Also write the effective recipe as JSON"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Log progress and timing"
    )
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    recipe = DEFAULT_RECIPE
    if args.recipe:
        loaded = load_recipe(args.recipe)
        if loaded is None:
            logger.warning("Falling back to '%s'", DEFAULT_RECIPE.name)
        else:
            recipe = loaded

    overrides = {
        key: getattr(args, key)
        for key in ("turbulence", "scale", "distortion", "roughness",
                    "seed", "style")
        if getattr(args, key) is not None
    }
    try:
        params = replace(recipe.params, **overrides)
    except MarbleFusionError as exc:
        parser.error(str(exc))
    colors = tuple(args.colors) if args.colors else recipe.colors
    recipe = replace(recipe, colors=colors, params=params.clamped())

    width, height = args.size
    try:
        result = render(recipe.colors, recipe.params, width, height,
                        workers=args.workers)
    except MarbleFusionError as exc:
        parser.error(str(exc))

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    result.to_image().save(str(output))

    if args.save_recipe:
        save_recipe(recipe, args.save_recipe)

    print(f"Saved '{recipe.name}' bead ({result.width}x{result.height}, "
          f"{result.elapsed_ms:.1f}ms) to {output}")
    return 0


if __name__ == "__main__":
    main()
