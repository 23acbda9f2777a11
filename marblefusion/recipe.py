"""Bead recipes: a named palette plus fusion parameters.

Recipes arrive as JSON from the stylist service (or from files on disk).
Parsing never raises to the caller of parse_recipe(): anything unusable is
logged and reported as "no recipe" so the current bead stays on screen.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path

from .errors import MarbleFusionError, RecipeGenerationFailure
from .gradient import ColorStop, validate_palette
from .renderer import FusionParameters

logger = logging.getLogger(__name__)

_PARAM_KEYS = tuple(f.name for f in fields(FusionParameters))


@dataclass(frozen=True)
class BeadRecipe:
    """A named bead design."""

    name: str
    colors: tuple
    params: FusionParameters = field(default_factory=FusionParameters)

    def to_dict(self):
        return {
            "name": self.name,
            "colors": [
                {"id": stop.id, "hex": stop.hex, "weight": stop.weight}
                for stop in self.colors
            ],
            "params": {
                key: (getattr(self.params, key).value if key == "style"
                      else getattr(self.params, key))
                for key in _PARAM_KEYS
            },
        }


DEFAULT_RECIPE = BeadRecipe(
    name="Cosmic Drift",
    colors=(
        ColorStop.from_hex("#0f172a", 80, id="1"),  # slate
        ColorStop.from_hex("#38bdf8", 40, id="2"),  # sky
        ColorStop.from_hex("#e879f9", 30, id="3"),  # fuchsia
    ),
    params=FusionParameters(),
)


def parse_recipe_strict(data):
    """Build a BeadRecipe from the service's JSON payload.

    Accepts the recipe object itself or the service envelope
    ``{"result": {...}}`` / ``{"error": "..."}``.

    Raises:
        RecipeGenerationFailure: The payload reports an error or is not a
            usable recipe.
    """
    if not isinstance(data, dict):
        raise RecipeGenerationFailure(
            f"Recipe must be a JSON object, got {type(data).__name__}"
        )
    if data.get("error"):
        raise RecipeGenerationFailure(f"Stylist error: {data['error']}")
    if "result" in data:
        return parse_recipe_strict(data["result"])

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise RecipeGenerationFailure("Recipe has no name")

    raw_colors = data.get("colors")
    if not isinstance(raw_colors, list):
        raise RecipeGenerationFailure("Recipe colors must be a list")

    raw_params = data.get("params", {})
    if not isinstance(raw_params, dict):
        raise RecipeGenerationFailure("Recipe params must be an object")

    try:
        colors = tuple(
            ColorStop.from_hex(entry["hex"], entry["weight"],
                               id=str(entry.get("id", index)))
            for index, entry in enumerate(raw_colors)
        )
        validate_palette(colors)
        params = FusionParameters(**{
            key: raw_params[key] for key in _PARAM_KEYS if key in raw_params
        }).clamped()
    except (AttributeError, KeyError, TypeError, ValueError,
            MarbleFusionError) as exc:
        raise RecipeGenerationFailure(f"Malformed recipe: {exc}") from exc

    return BeadRecipe(name=name.strip(), colors=colors, params=params)


def parse_recipe(data):
    """Like parse_recipe_strict(), but returns None instead of raising."""
    try:
        return parse_recipe_strict(data)
    except RecipeGenerationFailure as exc:
        logger.warning("Recipe rejected: %s", exc)
        return None


def loads_recipe(text):
    """Parse a recipe from JSON text; None if it is not usable."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Recipe is not valid JSON: %s", exc)
        return None
    return parse_recipe(data)


def load_recipe(path):
    """Read a recipe JSON file; None if it is missing or not usable."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Cannot read recipe %s: %s", path, exc)
        return None
    return loads_recipe(text)


def save_recipe(recipe, path):
    """Write a recipe as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(recipe.to_dict(), indent=2) + "\n",
                    encoding="utf-8")
