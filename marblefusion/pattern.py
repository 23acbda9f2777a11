"""Domain-warped marble patterns.

Two stages of fBm warp the surface coordinates, then one of four style
formulas turns the warped field into a scalar in [0, 1].
"""

import enum

import numpy as np

from .errors import InvalidParameter
from .noise import fbm, smoothstep


class MarbleStyle(enum.Enum):
    """Pattern formula applied after domain warping."""

    CLASSIC = "classic"
    NEBULA = "nebula"
    AGATE = "agate"
    FRACTURE = "fracture"

    @classmethod
    def parse(cls, value):
        """Accept a MarbleStyle or its tag (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            known = ", ".join(s.value for s in cls)
            raise InvalidParameter(
                f"Unknown marble style {value!r} (expected one of: {known})"
            ) from None


def _classic(nx, ny, wx, wy, p_turb, seed):
    f = fbm(wx, wy, 6, 0.6, 2.0, seed)
    mix = (nx + ny) * 0.1 + f * p_turb
    return np.sin(mix * np.pi * 2) * 0.5 + 0.5


def _nebula(nx, ny, wx, wy, p_turb, seed):
    # Soft clouds: the warped field itself, contrast-boosted
    f = fbm(wx, wy, 6, 0.5, 2.0, seed)
    return smoothstep(f)


def _agate(nx, ny, wx, wy, p_turb, seed):
    f = fbm(wx, wy, 6, 0.6, 2.0, seed)
    mix = (nx + ny) * 0.1 + f * p_turb
    return np.sin(mix * np.pi * 12) * 0.5 + 0.5


def _fracture(nx, ny, wx, wy, p_turb, seed):
    f = fbm(wx, wy, 5, 0.5, 2.0, seed)
    mix = (nx + ny) * 0.2 + f * p_turb
    # abs() folds the wave into sharp creases
    return 1 - np.abs(np.sin(mix * np.pi * 3))


_STYLES = {
    MarbleStyle.CLASSIC: _classic,
    MarbleStyle.NEBULA: _nebula,
    MarbleStyle.AGATE: _agate,
    MarbleStyle.FRACTURE: _fracture,
}


def warp_fields(nx, ny, seed):
    """Two-stage domain warp of scaled coordinates.

    Returns:
        (rx, ry) offset fields from the second (feedback) stage.
    """
    qx = fbm(nx + seed, ny + seed, 4, 0.5, 2.0, seed)
    qy = fbm(nx + 5.2 + seed, ny + 1.3 + seed, 4, 0.5, 2.0, seed)

    rx = fbm(nx + 4.0 * qx + 1.7, ny + 4.0 * qy + 9.2, 4, 0.5, 2.0, seed)
    ry = fbm(nx + 4.0 * qx + 8.3, ny + 4.0 * qy + 2.8, 4, 0.5, 2.0, seed)
    return rx, ry


def marble(u, v, params):
    """Compute the marble pattern value at normalized surface coordinates.

    Args:
        u: Horizontal coordinate(s) in [0, 1] (pixel x / width).
        v: Vertical coordinate(s) in [0, 1] (pixel y / height).
        params: FusionParameters (turbulence, scale, distortion, seed, style).

    Returns:
        Pattern value(s), nominally in [0, 1]. Not clamped; callers clamp
        before indexing a gradient.
    """
    style = MarbleStyle.parse(params.style)
    seed = params.seed

    base_scale = params.scale / 20
    nx = np.asarray(u, dtype=np.float64) * base_scale
    ny = np.asarray(v, dtype=np.float64) * base_scale

    p_turb = params.turbulence / 20
    p_dist = params.distortion / 10

    rx, ry = warp_fields(nx, ny, seed)
    wx = nx + p_dist * rx
    wy = ny + p_dist * ry

    return _STYLES[style](nx, ny, wx, wy, p_turb, seed)
