"""MarbleFusion - Render procedurally textured marble beads."""

from .errors import (InvalidPalette, InvalidParameter, MarbleFusionError,
                     RecipeGenerationFailure, RenderCancelled)
from .gradient import ColorStop
from .pattern import MarbleStyle
from .recipe import DEFAULT_RECIPE, BeadRecipe, load_recipe, parse_recipe
from .renderer import BeadRenderer, FusionParameters, RenderResult, render
from .shader import ShaderConfig

__version__ = "0.1.0"
__all__ = [
    "generate", "render", "BeadRenderer", "BeadRecipe", "ColorStop",
    "FusionParameters", "MarbleStyle", "RenderResult", "ShaderConfig",
    "DEFAULT_RECIPE", "load_recipe", "parse_recipe",
    "MarbleFusionError", "InvalidPalette", "InvalidParameter",
    "RecipeGenerationFailure", "RenderCancelled",
]


def generate(colors=None, size=500, workers=1, **kwargs):
    """Render a bead and return it as an image.

    Args:
        colors: Sequence of ColorStop, or (hex, weight) pairs. Defaults to
            the "Cosmic Drift" palette.
        size: Canvas width and height in pixels.
        workers: Threads used to shade the canvas.
        **kwargs: FusionParameters fields (turbulence, scale, distortion,
            roughness, seed, style).

    Returns:
        PIL Image in RGBA mode.
    """
    if colors is None:
        colors = DEFAULT_RECIPE.colors
    palette = [c if isinstance(c, ColorStop) else ColorStop.from_hex(*c)
               for c in colors]
    params = FusionParameters(**kwargs)
    return render(palette, params, size, size, workers=workers).to_image()
