"""Unit tests for pigments and materials."""

import numpy as np
import pytest
import taichi as ti

from raykernel.core.color import BLACK, WHITE, Color
from raykernel.core.geometry import Vec2d
from raykernel.geometry.sphere import Sphere
from raykernel.image.hdr import HdrImage
from raykernel.materials.lambertian import DiffuseBRDF
from raykernel.materials.material import Material
from raykernel.materials.pigment import CheckeredPigment, ImagePigment, UniformPigment, pigment_color
from raykernel.scene.intersection import CompiledScene
from raykernel.scene.world import World


def _two_by_two_image():
    image = HdrImage(2, 2)
    image.set_pixel(0, 0, Color(1.0, 2.0, 3.0))
    image.set_pixel(1, 0, Color(2.0, 3.0, 1.0))
    image.set_pixel(0, 1, Color(2.0, 1.0, 3.0))
    image.set_pixel(1, 1, Color(3.0, 2.0, 1.0))
    return image


class TestUniformPigment:
    """Tests for the constant pigment."""

    def test_same_color_everywhere(self):
        """Test that every coordinate returns the same color."""
        color = Color(1.0, 2.0, 3.0)
        pigment = UniformPigment(color)

        for uv in (Vec2d(0.0, 0.0), Vec2d(1.0, 0.0), Vec2d(0.0, 1.0), Vec2d(1.0, 1.0)):
            assert pigment.get_color(uv).is_close(color)

    def test_default_is_white(self):
        """Test the default color."""
        assert UniformPigment().get_color(Vec2d()).is_close(WHITE)


class TestCheckeredPigment:
    """Tests for the checkerboard pigment."""

    def test_two_steps(self):
        """Test the four cells of a 2x2 checkerboard."""
        color1 = Color(1.0, 2.0, 3.0)
        color2 = Color(10.0, 20.0, 30.0)
        pigment = CheckeredPigment(color1, color2, num_of_steps=2)

        assert pigment.get_color(Vec2d(0.25, 0.25)).is_close(color1)
        assert pigment.get_color(Vec2d(0.75, 0.25)).is_close(color2)
        assert pigment.get_color(Vec2d(0.25, 0.75)).is_close(color2)
        assert pigment.get_color(Vec2d(0.75, 0.75)).is_close(color1)

    def test_invalid_steps_raise(self):
        """Test that a non-positive number of steps is rejected."""
        with pytest.raises(ValueError):
            CheckeredPigment(WHITE, BLACK, num_of_steps=0)


class TestImagePigment:
    """Tests for the image-backed pigment."""

    def test_corners(self):
        """Test that the corners of [0, 1]^2 map onto the corner pixels."""
        image = HdrImage(2, 2)
        image.set_pixel(0, 0, Color(1.0, 2.0, 3.0))
        image.set_pixel(1, 0, Color(2.0, 3.0, 1.0))
        image.set_pixel(0, 1, Color(2.0, 1.0, 3.0))
        image.set_pixel(1, 1, Color(3.0, 2.0, 1.0))
        pigment = ImagePigment(image)

        assert pigment.get_color(Vec2d(0.0, 0.0)).is_close(Color(1.0, 2.0, 3.0))
        assert pigment.get_color(Vec2d(1.0, 0.0)).is_close(Color(2.0, 3.0, 1.0))
        assert pigment.get_color(Vec2d(0.0, 1.0)).is_close(Color(2.0, 1.0, 3.0))
        assert pigment.get_color(Vec2d(1.0, 1.0)).is_close(Color(3.0, 2.0, 1.0))

    def test_interior_points(self):
        """Test that each quarter of [0, 1]^2 selects its own pixel."""
        pigment = ImagePigment(_two_by_two_image())

        assert pigment.get_color(Vec2d(0.25, 0.25)).is_close(Color(1.0, 2.0, 3.0))
        assert pigment.get_color(Vec2d(0.75, 0.25)).is_close(Color(2.0, 3.0, 1.0))
        assert pigment.get_color(Vec2d(0.25, 0.75)).is_close(Color(2.0, 1.0, 3.0))
        assert pigment.get_color(Vec2d(0.75, 0.75)).is_close(Color(3.0, 2.0, 1.0))

    def test_clamping_on_far_edges(self):
        """Test that u = 1 and v = 1 fall on the last column and row."""
        pigment = ImagePigment(_two_by_two_image())

        assert pigment.get_color(Vec2d(1.0, 0.25)).is_close(Color(2.0, 3.0, 1.0))
        assert pigment.get_color(Vec2d(0.25, 1.0)).is_close(Color(2.0, 1.0, 3.0))
        assert pigment.get_color(Vec2d(1.0, 1.0)).is_close(Color(3.0, 2.0, 1.0))

    def test_clamping_outside_unit_square(self):
        """Test that coordinates outside [0, 1] stick to the border pixels."""
        pigment = ImagePigment(_two_by_two_image())

        assert pigment.get_color(Vec2d(1.5, -0.5)).is_close(Color(2.0, 3.0, 1.0))
        assert pigment.get_color(Vec2d(-0.5, 2.0)).is_close(Color(2.0, 1.0, 3.0))


class TestKernelPigments:
    """Tests for pigment_color against the Python pigments."""

    @pytest.mark.parametrize(
        "pigment",
        [
            UniformPigment(Color(0.1, 0.2, 0.3)),
            CheckeredPigment(Color(1.0, 2.0, 3.0), Color(10.0, 20.0, 30.0), num_of_steps=4),
            ImagePigment(_two_by_two_image()),
        ],
        ids=["uniform", "checkered", "image"],
    )
    def test_matches_get_color(self, pigment):
        """Test that the kernel returns the color of get_color at sample coordinates."""
        scene = CompiledScene(World([Sphere(material=Material(brdf=DiffuseBRDF(pigment)))]))
        coords = [(0.0, 0.0), (0.1, 0.6), (0.3, 0.3), (0.55, 0.95), (0.8, 0.2), (1.0, 1.0)]
        n = len(coords)
        uv = ti.Vector.field(2, dtype=ti.f32, shape=n)
        colors = ti.Vector.field(3, dtype=ti.f32, shape=n)
        uv.from_numpy(np.array(coords, dtype=np.float32))

        @ti.kernel
        def test_kernel():
            for i in range(n):
                colors[i] = pigment_color(scene.pigments[0], scene.texels, uv[i])

        test_kernel()
        result = colors.to_numpy()
        for i, (u, v) in enumerate(coords):
            expected = pigment.get_color(Vec2d(u, v))
            assert result[i].tolist() == pytest.approx((expected.r, expected.g, expected.b))


class TestMaterial:
    """Tests for the Material container."""

    def test_defaults(self):
        """Test that the default material is a white, non-emitting diffuser."""
        material = Material()

        assert isinstance(material.brdf, DiffuseBRDF)
        assert material.brdf.pigment.get_color(Vec2d()).is_close(WHITE)
        assert material.emitted_radiance.get_color(Vec2d()).is_close(BLACK)

    def test_defaults_are_not_shared(self):
        """Test that each material gets its own BRDF instance."""
        assert Material().brdf is not Material().brdf
