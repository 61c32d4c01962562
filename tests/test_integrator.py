"""Unit tests for the renderers.

Tests cover:
- On/off renderer (visibility only)
- Flat renderer (pigment plus emission)
- Path tracer: furnace test, depth limit, background, Russian roulette
"""

import pytest

from raykernel.camera.orthogonal import OrthogonalCamera
from raykernel.camera.tracer import ImageTracer
from raykernel.core.color import BLACK, WHITE, Color
from raykernel.core.geometry import Point, Vec
from raykernel.core.integrator import FlatRenderer, OnOffRenderer, PathTracer
from raykernel.core.pcg import PCG
from raykernel.core.ray import Ray
from raykernel.core.transformations import scaling, translation
from raykernel.geometry.sphere import Sphere
from raykernel.image.hdr import HdrImage
from raykernel.materials.lambertian import DiffuseBRDF
from raykernel.materials.material import Material
from raykernel.materials.pigment import UniformPigment
from raykernel.scene.world import World


def _small_sphere_world(material=None):
    sphere = Sphere(
        transformation=translation(Vec(2.0, 0.0, 0.0)) * scaling(Vec(0.2, 0.2, 0.2)),
        material=material,
    )
    return World([sphere])


def _furnace(emitted, reflectance):
    material = Material(
        brdf=DiffuseBRDF(UniformPigment(WHITE * reflectance)),
        emitted_radiance=UniformPigment(WHITE * emitted),
    )
    return World([Sphere(material=material)])


class TestOnOffRenderer:
    """Tests for the visibility renderer."""

    def test_on_off(self):
        """Test that only the pixel looking at the sphere is lit."""
        image = HdrImage(3, 3)
        tracer = ImageTracer(image, OrthogonalCamera())
        renderer = OnOffRenderer(_small_sphere_world())

        tracer.fire_all_rays(renderer)

        for row in range(3):
            for col in range(3):
                expected = WHITE if (col, row) == (1, 1) else BLACK
                assert image.get_pixel(col, row).is_close(expected)

    def test_custom_colors(self):
        """Test the background and foreground colors."""
        renderer = OnOffRenderer(World(), background_color=Color(0.1, 0.2, 0.3))

        assert renderer(Ray()).is_close(Color(0.1, 0.2, 0.3))


class TestFlatRenderer:
    """Tests for the flat renderer."""

    def test_flat(self):
        """Test that the center pixel gets the sphere pigment."""
        color = Color(1.0, 2.0, 3.0)
        material = Material(brdf=DiffuseBRDF(UniformPigment(color)))
        image = HdrImage(3, 3)
        tracer = ImageTracer(image, OrthogonalCamera())

        tracer.fire_all_rays(FlatRenderer(_small_sphere_world(material)))

        for row in range(3):
            for col in range(3):
                expected = color if (col, row) == (1, 1) else BLACK
                assert image.get_pixel(col, row).is_close(expected)

    def test_flat_adds_emission(self):
        """Test that emitted radiance is added to the pigment."""
        material = Material(
            brdf=DiffuseBRDF(UniformPigment(Color(0.5, 0.5, 0.5))),
            emitted_radiance=UniformPigment(Color(1.0, 0.0, 0.0)),
        )
        renderer = FlatRenderer(_small_sphere_world(material))

        color = renderer(Ray(origin=Point(0.0, 0.0, 0.0), dir=Vec(1.0, 0.0, 0.0)))

        assert color.is_close(Color(1.5, 0.5, 0.5))


class TestPathTracer:
    """Tests for the Monte Carlo path tracer."""

    def test_furnace(self):
        """Test the closed-form radiance inside a uniformly emitting sphere.

        Every bounce hits the sphere again, so the radiance is the geometric
        series emitted * (1 + r + r^2 + ...) = emitted / (1 - r).
        """
        pcg = PCG()

        for _ in range(5):
            emitted = pcg.random_float()
            reflectance = pcg.random_float() * 0.9
            world = _furnace(emitted, reflectance)
            renderer = PathTracer(
                world,
                BLACK,
                pcg,
                num_of_rays=1,
                max_depth=100,
                russian_roulette_limit=101,
            )
            ray = Ray(origin=Point(0.0, 0.0, 0.0), dir=Vec(1.0, 0.0, 0.0))

            color = renderer(ray)

            expected = emitted / (1.0 - reflectance)
            assert color.r == pytest.approx(expected, rel=1e-3)
            assert color.g == pytest.approx(expected, rel=1e-3)
            assert color.b == pytest.approx(expected, rel=1e-3)

    def test_max_depth(self):
        """Test that rays deeper than max_depth return black."""
        renderer = PathTracer(_furnace(0.5, 0.5), max_depth=0, russian_roulette_limit=10)

        color = renderer(Ray(origin=Point(), dir=Vec(1.0, 0.0, 0.0)))

        assert color.is_close(Color(0.5, 0.5, 0.5))
        assert renderer(Ray(origin=Point(), dir=Vec(1.0, 0.0, 0.0), depth=1)).is_close(BLACK)

    def test_background(self):
        """Test that escaping rays return the background color."""
        renderer = PathTracer(World(), background_color=Color(0.1, 0.2, 0.3))

        assert renderer(Ray()).is_close(Color(0.1, 0.2, 0.3))

    def test_black_surface_stops_recursion(self):
        """Test that a surface with a black pigment only contributes emission."""
        pcg = PCG()
        renderer = PathTracer(_furnace(0.7, 0.0), pcg=pcg, num_of_rays=3)
        state = pcg.state

        color = renderer(Ray(origin=Point(), dir=Vec(1.0, 0.0, 0.0)))

        assert color.is_close(Color(0.7, 0.7, 0.7))
        assert pcg.state == state

    def test_russian_roulette_unbiased(self):
        """Test that Russian roulette keeps the mean radiance of the furnace."""
        pcg = PCG()
        renderer = PathTracer(
            _furnace(0.5, 0.5),
            BLACK,
            pcg,
            num_of_rays=1,
            max_depth=200,
            russian_roulette_limit=0,
        )
        ray = Ray(origin=Point(), dir=Vec(1.0, 0.0, 0.0))
        n = 4000

        mean = sum(renderer(ray).r for _ in range(n)) / n

        assert mean == pytest.approx(1.0, abs=0.05)

    def test_invalid_parameters(self):
        """Test that invalid sampling parameters are rejected."""
        with pytest.raises(ValueError):
            PathTracer(World(), num_of_rays=0)
        with pytest.raises(ValueError):
            PathTracer(World(), max_depth=-1)
