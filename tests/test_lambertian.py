"""Unit tests for the Lambertian (diffuse) BRDF.

Tests cover:
- BRDF evaluation (pigment * reflectance / pi)
- Reflectance validation
- Cosine-weighted hemisphere sampling of scattered rays
"""

import math

import pytest

from raykernel.core.color import Color
from raykernel.core.geometry import Normal, Point, Vec, Vec2d
from raykernel.core.pcg import PCG
from raykernel.materials.brdf import SCATTER_T_MIN
from raykernel.materials.lambertian import DiffuseBRDF
from raykernel.materials.pigment import UniformPigment


class TestDiffuseEval:
    """Tests for DiffuseBRDF.eval."""

    def test_eval_value(self):
        """Test that eval returns pigment * reflectance / pi."""
        brdf = DiffuseBRDF(UniformPigment(Color(0.5, 0.5, 0.5)), reflectance=0.8)

        result = brdf.eval(Normal(), Vec(0.0, 0.0, 1.0), Vec(1.0, 0.0, 1.0), Vec2d())

        expected = 0.5 * 0.8 / math.pi
        assert result.is_close(Color(expected, expected, expected))

    def test_eval_independent_of_directions(self):
        """Test that a diffuse surface looks the same from every direction."""
        brdf = DiffuseBRDF()
        a = brdf.eval(Normal(), Vec(0.0, 0.0, 1.0), Vec(0.0, 0.0, 1.0), Vec2d())
        b = brdf.eval(Normal(), Vec(1.0, 0.0, 0.1), Vec(0.0, 1.0, 0.1), Vec2d())

        assert a.is_close(b)

    def test_invalid_reflectance_raises(self):
        """Test that reflectance outside [0, 1] is rejected."""
        with pytest.raises(ValueError):
            DiffuseBRDF(reflectance=1.5)
        with pytest.raises(ValueError):
            DiffuseBRDF(reflectance=-0.1)


class TestDiffuseScatter:
    """Tests for DiffuseBRDF.scatter_ray."""

    def test_scattered_ray_fields(self):
        """Test origin, interval and depth of a scattered ray."""
        brdf = DiffuseBRDF()
        point = Point(1.0, 2.0, 3.0)

        ray = brdf.scatter_ray(PCG(), Vec(0.0, 0.0, -1.0), point, Normal(), depth=4)

        assert ray.origin.is_close(point)
        assert ray.t_min == SCATTER_T_MIN
        assert ray.t_max == math.inf
        assert ray.depth == 4

    def test_scattered_directions_in_hemisphere(self):
        """Test that every scattered direction is a unit vector above the surface."""
        brdf = DiffuseBRDF()
        pcg = PCG()
        normal = Normal(1.0, 1.0, 0.0)

        for _ in range(1000):
            ray = brdf.scatter_ray(pcg, Vec(-1.0, -1.0, 0.0), Point(), normal, depth=1)
            assert ray.dir.norm() == pytest.approx(1.0)
            assert ray.dir.dot(normal) >= 0.0

    def test_cosine_weighted_distribution(self):
        """Test that the mean cosine with the normal is 2/3."""
        brdf = DiffuseBRDF()
        pcg = PCG()
        normal = Normal(0.0, 0.0, 1.0)
        n = 20000

        total = 0.0
        for _ in range(n):
            ray = brdf.scatter_ray(pcg, Vec(0.0, 0.0, -1.0), Point(), normal, depth=1)
            total += ray.dir.dot(normal)

        assert total / n == pytest.approx(2.0 / 3.0, abs=0.01)
