"""Sphere shading for the bead disc.

The disc is treated as an orthographic view of a hemisphere: normals are
reconstructed from the distance to the disc centre, then lit by a single
directional light with diffuse, specular and grazing-angle darkening terms.
"""

from dataclasses import dataclass

import numpy as np

from .noise import pseudo_random


@dataclass(frozen=True)
class ShaderConfig:
    """Lighting and surface constants."""

    # Directional light (normalized before use)
    light: tuple = (-0.5, -0.5, 0.7)

    # Colour response
    ambient: float = 0.8
    diffuse_gain: float = 0.4
    specular_gain: float = 200.0

    # Specular exponent = shininess + (1 - roughness) * shininess_range
    shininess: float = 20.0
    shininess_range: float = 10.0

    # Grazing-angle darkening exponent on nz
    edge_exponent: float = 0.4

    # Per-pixel grain amplitude at full roughness
    grain_amount: float = 0.2

    # Gap between the disc and the canvas edge, in pixels
    padding: float = 10.0

    def light_vector(self):
        light = np.asarray(self.light, dtype=np.float64)
        return light / np.sqrt(np.sum(light * light))


def disc_geometry(width, height, padding=10.0):
    """Centre and radius of the bead disc on a width x height canvas.

    Returns:
        (cx, cy, radius). The radius may be <= 0 on tiny canvases, in which
        case no pixel is inside the disc.
    """
    return width / 2, height / 2, min(width, height) / 2 - padding


def sphere_normals(dx, dy, radius):
    """Unit hemisphere normals for offsets (dx, dy) from the disc centre.

    Offsets must lie inside the disc (dx^2 + dy^2 <= radius^2).

    Returns:
        (nx, ny, nz) arrays.
    """
    dx = np.asarray(dx, dtype=np.float64)
    dy = np.asarray(dy, dtype=np.float64)
    dist_sq = dx * dx + dy * dy
    nz = np.sqrt(np.maximum(radius * radius - dist_sq, 0.0)) / radius
    return dx / radius, dy / radius, nz


def apply_grain(value, px, py, seed, roughness, amount=0.2):
    """Add per-pixel grain to pattern values and clamp to [0, 1].

    Args:
        value: Pattern value(s).
        px: Integer pixel x coordinate(s).
        py: Integer pixel y coordinate(s).
        seed: Fusion seed.
        roughness: Roughness as a fraction in [0, 1].
        amount: Grain amplitude at full roughness.
    """
    grain = (pseudo_random(px, py, seed) - 0.5) * amount
    return np.clip(value + grain * roughness, 0.0, 1.0)


def shade(base_rgb, normals, roughness, config=None):
    """Light base colours on the hemisphere.

    Args:
        base_rgb: (..., 3) array of gradient colours (0-255).
        normals: (nx, ny, nz) arrays from sphere_normals.
        roughness: Roughness as a fraction in [0, 1]; smoother surfaces get
            a tighter specular highlight.
        config: ShaderConfig (defaults used if None).

    Returns:
        float64 array of shape base_rgb.shape, clamped to [0, 255].
    """
    if config is None:
        config = ShaderConfig()

    nx, ny, nz = normals
    lx, ly, lz = config.light_vector()

    dot = nx * lx + ny * ly + nz * lz
    diffuse = np.maximum(0.0, dot)

    # z component of the light reflected about the normal
    reflect_z = 2 * dot * nz - lz
    exponent = config.shininess + (1 - roughness) * config.shininess_range
    specular = np.maximum(0.0, reflect_z) ** exponent

    edge = nz ** config.edge_exponent

    gain = edge * (config.ambient + config.diffuse_gain * diffuse)
    rgb = (np.asarray(base_rgb, dtype=np.float64) * gain[..., np.newaxis]
           + (specular * config.specular_gain)[..., np.newaxis])
    return np.clip(rgb, 0.0, 255.0)
