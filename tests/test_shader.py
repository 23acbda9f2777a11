"""Tests for sphere normals, grain and lighting."""

import math

import numpy as np
import pytest


def test_disc_geometry():
    from marblefusion.shader import disc_geometry
    assert disc_geometry(64, 64, 10) == (32, 32, 22)
    assert disc_geometry(100, 60, 10) == (50, 30, 20)


def test_center_normal_points_at_viewer():
    from marblefusion.shader import sphere_normals
    nx, ny, nz = sphere_normals(0.0, 0.0, 22.0)
    assert nx == 0.0
    assert ny == 0.0
    assert nz == 1.0


def test_normals_are_unit_length():
    from marblefusion.shader import sphere_normals
    angles = np.linspace(0, 2 * np.pi, 17)
    dist = np.linspace(0, 20, 17)
    nx, ny, nz = sphere_normals(dist * np.cos(angles), dist * np.sin(angles),
                                20.0)
    np.testing.assert_allclose(nx * nx + ny * ny + nz * nz, 1.0)


def test_rim_normal_is_flat():
    from marblefusion.shader import sphere_normals
    _, _, nz = sphere_normals(22.0, 0.0, 22.0)
    assert nz == 0.0


def test_light_vector_normalized():
    from marblefusion.shader import ShaderConfig
    light = ShaderConfig().light_vector()
    assert np.linalg.norm(light) == pytest.approx(1.0)
    assert light[0] < 0 and light[1] < 0 and light[2] > 0


def test_shade_at_center():
    from marblefusion.shader import shade, sphere_normals
    lz = 0.7 / math.sqrt(0.99)
    # Normal (0, 0, 1): diffuse = lz, reflected z = lz, exponent 30
    expected = 100 * (0.8 + 0.4 * lz) + lz ** 30 * 200
    rgb = shade(np.array([100.0, 100.0, 100.0]), sphere_normals(0.0, 0.0, 10),
                roughness=0.0)
    np.testing.assert_allclose(rgb, expected)


def test_shade_clamps_to_255():
    from marblefusion.shader import ShaderConfig, shade, sphere_normals
    config = ShaderConfig(specular_gain=10000.0)
    rgb = shade(np.array([255, 255, 255]), sphere_normals(0.0, 0.0, 10),
                roughness=0.0, config=config)
    np.testing.assert_array_equal(rgb, [255.0, 255.0, 255.0])


def test_rough_surface_spreads_highlight():
    from marblefusion.shader import shade, sphere_normals
    normals = sphere_normals(np.array([-3.0]), np.array([-3.0]), 10.0)
    black = np.zeros((1, 3))
    smooth = shade(black, normals, roughness=0.0)
    rough = shade(black, normals, roughness=1.0)
    assert rough[0, 0] > smooth[0, 0] > 0


def test_edges_are_darker():
    from marblefusion.shader import shade, sphere_normals
    base = np.full((2, 3), 200.0)
    # Points on the unlit side of the disc, center vs. near the rim
    normals = sphere_normals(np.array([0.0, 9.5]), np.array([0.0, 0.0]), 10.0)
    rgb = shade(base, normals, roughness=1.0)
    assert rgb[1, 0] < rgb[0, 0]


def test_grain_zero_roughness_is_identity():
    from marblefusion.shader import apply_grain
    values = np.array([0.1, 0.5, 0.9])
    out = apply_grain(values, np.array([1, 2, 3]), np.array([4, 5, 6]),
                      seed=7, roughness=0.0)
    np.testing.assert_array_equal(out, values)


def test_grain_bounded_and_clamped():
    from marblefusion.noise import pseudo_random
    from marblefusion.shader import apply_grain
    px = np.arange(50)
    py = np.arange(50)[::-1]
    out = apply_grain(np.full(50, 0.5), px, py, seed=3, roughness=1.0)
    assert np.all(np.abs(out - 0.5) <= 0.1)
    expected = 0.5 + (pseudo_random(px, py, 3) - 0.5) * 0.2
    np.testing.assert_allclose(out, expected)

    edge = apply_grain(np.array([0.0, 1.0]), np.array([0, 1]),
                       np.array([0, 1]), seed=3, roughness=1.0)
    assert edge.min() >= 0.0 and edge.max() <= 1.0
