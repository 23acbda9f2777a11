"""Procedural noise: hashed lattice values, value noise and fBm.

Every function accepts Python floats or numpy arrays and broadcasts, so a
whole row of pixels can be evaluated in one call. Results are float64.
"""

import numpy as np


def smoothstep(t):
    """Cubic ease: t^2 (3 - 2t)."""
    return t * t * (3 - 2 * t)


def _lerp(a, b, t):
    return a + t * (b - a)


def pseudo_random(x, y, seed):
    """Deterministic hash of a 2D point into [0, 1).

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        seed: Seed offset mixed into the hash.

    Returns:
        Fractional part of sin(dot) * 43758.5453, same shape as the
        broadcast inputs.
    """
    dot = (np.asarray(x, dtype=np.float64) * 12.9898
           + np.asarray(y, dtype=np.float64) * 78.233
           + seed * 37.719)
    s = np.sin(dot) * 43758.5453
    r = s - np.floor(s)
    # Tiny negative s rounds up to exactly 1.0
    return np.where(r >= 1.0, 0.0, r)


def value_noise_2d(x, y, seed):
    """Smoothed 2D value noise.

    Hashes the four integer lattice corners around (x, y) and blends them
    bilinearly with smoothstep weights: along x on both rows first, then
    along y.

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        seed: Seed passed through to the lattice hash.

    Returns:
        Noise value(s) in [0, 1].
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    # Integer lattice cell and fractional position inside it
    i = np.floor(x)
    j = np.floor(y)
    u = smoothstep(x - i)
    v = smoothstep(y - j)

    v00 = pseudo_random(i, j, seed)
    v10 = pseudo_random(i + 1, j, seed)
    v01 = pseudo_random(i, j + 1, seed)
    v11 = pseudo_random(i + 1, j + 1, seed)

    return _lerp(_lerp(v00, v10, u), _lerp(v01, v11, u), v)


def fbm(x, y, octaves=4, persistence=0.5, lacunarity=2.0, seed=0.0):
    """Fractal Brownian motion (layered value noise).

    Args:
        x: X coordinate(s).
        y: Y coordinate(s).
        octaves: Number of noise layers, at least 1.
        persistence: Amplitude decay per octave.
        lacunarity: Frequency multiplier per octave.
        seed: Seed passed through to every layer.

    Returns:
        Weighted sum of the octaves divided by the total amplitude, so a
        single octave equals value_noise_2d exactly.
    """
    if octaves < 1:
        raise ValueError(f"fbm needs at least one octave, got {octaves}")

    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)

    total = 0.0
    frequency = 1.0
    amplitude = 1.0
    max_value = 0.0

    for _ in range(int(octaves)):
        total = total + value_noise_2d(x * frequency, y * frequency,
                                       seed) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= lacunarity

    return total / max_value
