"""Bead rendering pipeline.

Builds the gradient once per frame, then shades the canvas in row bands:
circle mask, domain-warped marble pattern, per-pixel grain, gradient lookup
and hemisphere lighting. Bands are independent and can run on a thread pool.
"""

import logging
import math
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields, replace

import numpy as np
from PIL import Image

from .errors import InvalidParameter, RenderCancelled
from .gradient import build_gradient_lut, lookup, validate_palette
from .pattern import MarbleStyle, marble
from .shader import (ShaderConfig, apply_grain, disc_geometry, shade,
                     sphere_normals)

logger = logging.getLogger(__name__)

BAND_ROWS = 32
MAX_SEED = 1e15

# Documented slider ranges: field -> (low, high)
PARAM_RANGES = {
    "turbulence": (0.0, 100.0),
    "scale": (5.0, 100.0),
    "distortion": (0.0, 100.0),
    "roughness": (0.0, 100.0),
}


@dataclass(frozen=True)
class FusionParameters:
    """Physical parameters of the fusion simulation."""

    # How strongly the warped field bends the bands (0-100)
    turbulence: float = 45.0

    # Pattern zoom (5-100)
    scale: float = 25.0

    # Swirl intensity of the domain warp (0-100)
    distortion: float = 30.0

    # Surface grain and specular spread (0-100)
    roughness: float = 20.0

    seed: float = 1234.0
    style: MarbleStyle = MarbleStyle.CLASSIC

    def __post_init__(self):
        for f in fields(self):
            if f.name == "style":
                continue
            value = getattr(self, f.name)
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise InvalidParameter(
                    f"{f.name} must be a number, got {value!r}"
                ) from None
            if not math.isfinite(number):
                raise InvalidParameter(f"{f.name} must be finite, got {value!r}")
            object.__setattr__(self, f.name, number)
        # Larger seeds overflow the lattice hash to inf/NaN
        if abs(self.seed) > MAX_SEED:
            raise InvalidParameter(
                f"seed magnitude must be at most {MAX_SEED:g}, "
                f"got {self.seed:g}"
            )
        object.__setattr__(self, "style", MarbleStyle.parse(self.style))

    @property
    def roughness_fraction(self):
        return self.roughness / 100

    def clamped(self):
        """Return a copy with every slider clamped to its documented range."""
        changes = {}
        for name, (low, high) in PARAM_RANGES.items():
            value = getattr(self, name)
            bounded = min(max(value, low), high)
            if bounded != value:
                logger.warning("%s=%g outside [%g, %g], clamped to %g",
                               name, value, low, high, bounded)
                changes[name] = bounded
        return replace(self, **changes) if changes else self


@dataclass
class RenderResult:
    """Pixels of one frame plus how long it took."""

    pixels: np.ndarray
    elapsed_ms: float

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    def to_image(self):
        """PIL Image in RGBA mode."""
        return Image.fromarray(self.pixels)


def render(palette, params, width, height, config=None, workers=1,
           cancelled=None):
    """Render a marble bead.

    Args:
        palette: Sequence of ColorStop in gradient order (at least 2).
        params: FusionParameters; out-of-range sliders are clamped.
        width: Canvas width in pixels.
        height: Canvas height in pixels.
        config: ShaderConfig instance (defaults used if None).
        workers: Number of threads shading row bands in parallel.
        cancelled: Optional zero-argument callable; when it returns True
            between bands the frame is abandoned.

    Returns:
        RenderResult with a (height, width, 4) uint8 RGBA buffer.

    Raises:
        InvalidPalette: The palette cannot form a gradient.
        InvalidParameter: Non-positive canvas size.
        RenderCancelled: ``cancelled`` reported the frame as stale.
    """
    start = time.perf_counter()

    palette = list(palette)
    validate_palette(palette)
    width, height = _check_size(width, height)
    if config is None:
        config = ShaderConfig()
    params = params.clamped()

    # --- Pipeline ---

    # 1. Gradient lookup table, once per frame
    lut = build_gradient_lut(palette)

    # 2. Output buffer, transparent outside the disc
    pixels = np.zeros((height, width, 4), dtype=np.uint8)

    # 3. Shade the disc band by band
    disc = disc_geometry(width, height, config.padding)
    if disc[2] > 0:
        bands = [(y0, min(y0 + BAND_ROWS, height))
                 for y0 in range(0, height, BAND_ROWS)]

        def run(band):
            if cancelled is not None and cancelled():
                raise RenderCancelled("Frame superseded by a newer render")
            _shade_rows(pixels, band[0], band[1], lut, params, config, disc)

        if workers > 1 and len(bands) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                for _ in pool.map(run, bands):
                    pass
        else:
            for band in bands:
                run(band)

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    logger.debug("Rendered %dx%d %s bead in %.1f ms", width, height,
                 params.style.value, elapsed_ms)
    return RenderResult(pixels=pixels, elapsed_ms=elapsed_ms)


def _check_size(width, height):
    message = f"Canvas size must be integers, got {width!r}x{height!r}"
    if any(isinstance(v, (bool, np.bool_)) for v in (width, height)):
        raise InvalidParameter(message)
    try:
        w, h = float(width), float(height)
    except (TypeError, ValueError):
        raise InvalidParameter(message) from None
    if not (w.is_integer() and h.is_integer()):
        raise InvalidParameter(message)
    w, h = int(w), int(h)
    if w < 1 or h < 1:
        raise InvalidParameter(f"Canvas size must be positive, got {w}x{h}")
    return w, h


def _shade_rows(pixels, y0, y1, lut, params, config, disc):
    """Shade rows [y0, y1) of the buffer in place."""
    height, width = pixels.shape[:2]
    cx, cy, radius = disc

    ys, xs = np.mgrid[y0:y1, 0:width]
    dx = xs - cx
    dy = ys - cy
    inside = np.sqrt(dx * dx + dy * dy) <= radius
    if not inside.any():
        return

    px = xs[inside]
    py = ys[inside]
    roughness = params.roughness_fraction

    value = marble(px / width, py / height, params)
    value = apply_grain(value, px, py, params.seed, roughness,
                        config.grain_amount)
    base = lookup(lut, value)

    normals = sphere_normals(dx[inside], dy[inside], radius)
    rgb = shade(base, normals, roughness, config)

    band = pixels[y0:y1]
    band[inside, :3] = np.rint(rgb).astype(np.uint8)
    band[inside, 3] = 255


class BeadRenderer:
    """Latest-wins front end over render().

    Every call to render() starts a new generation. A frame whose generation
    is no longer current is abandoned between bands and its result dropped,
    so only the newest palette/parameter set ever reaches ``latest``.
    """

    def __init__(self, config=None, workers=1):
        self.config = config
        self.workers = workers
        self.latest = None
        self.recipe_name = None
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def generation(self):
        with self._lock:
            return self._generation

    def cancel(self):
        """Invalidate any frame currently in flight."""
        with self._lock:
            self._generation += 1

    def render(self, palette, params, width, height):
        """Render a frame; returns None if a newer render superseded it."""
        with self._lock:
            self._generation += 1
            generation = self._generation

        def superseded():
            return self.generation != generation

        try:
            result = render(palette, params, width, height,
                            config=self.config, workers=self.workers,
                            cancelled=superseded)
        except RenderCancelled:
            logger.debug("Dropped frame from generation %d", generation)
            return None

        with self._lock:
            if generation != self._generation:
                logger.debug("Discarded stale frame from generation %d",
                             generation)
                return None
            self.latest = result
        return result

    def apply_recipe(self, recipe, width, height):
        """Render a recipe, keeping the last good frame when there is none.

        Args:
            recipe: BeadRecipe, or None when recipe generation failed.
            width: Canvas width in pixels.
            height: Canvas height in pixels.

        Returns:
            The new RenderResult, or the previous ``latest`` frame if the
            recipe is missing or the frame was superseded.
        """
        if recipe is None:
            logger.warning("No recipe received; keeping %s",
                           self.recipe_name or "the current bead")
            return self.latest

        result = self.render(recipe.colors, recipe.params, width, height)
        if result is None:
            return self.latest
        self.recipe_name = recipe.name
        return result
