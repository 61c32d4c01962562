"""Unit tests for the image tracer.

Tests cover:
- Mapping from pixel coordinates to camera rays
- Filling every pixel of an image
- Progress reporting (callback and generator)
- Stratified supersampling
"""

import math

import numpy as np
import pytest

from raykernel.camera.orthogonal import OrthogonalCamera
from raykernel.camera.perspective import PerspectiveCamera
from raykernel.camera.tracer import ImageTracer
from raykernel.core.color import Color
from raykernel.core.geometry import Point
from raykernel.core.pcg import PCG
from raykernel.image.hdr import HdrImage


@pytest.fixture
def tracer():
    """A tracer over a 4x2 image seen by a perspective camera."""
    image = HdrImage(4, 2)
    camera = PerspectiveCamera(distance=1.0, aspect_ratio=2.0)
    return ImageTracer(image, camera)


class TestPixelMapping:
    """Tests for ImageTracer.fire_ray."""

    def test_orientation(self, tracer):
        """Test that pixel (0, 0) is the top-left corner of the screen."""
        top_left = tracer.fire_ray(0, 0, u_pixel=0.0, v_pixel=0.0)
        bottom_right = tracer.fire_ray(3, 1, u_pixel=1.0, v_pixel=1.0)

        assert top_left.at(1.0).is_close(Point(0.0, 2.0, 1.0))
        assert bottom_right.at(1.0).is_close(Point(0.0, -2.0, -1.0))

    def test_uv_sub_mapping(self, tracer):
        """Test that sub-pixel offsets beyond 1 spill into neighbouring pixels."""
        ray1 = tracer.fire_ray(0, 0, u_pixel=2.5, v_pixel=1.5)
        ray2 = tracer.fire_ray(2, 1, u_pixel=0.5, v_pixel=0.5)

        assert ray1.is_close(ray2)

    def test_dimensions(self, tracer):
        """Test the width and height shortcuts."""
        assert tracer.width == 4
        assert tracer.height == 2


class TestFireAllRays:
    """Tests for rendering a whole image."""

    def test_image_coverage(self, tracer):
        """Test that every pixel receives the traced color."""
        tracer.fire_all_rays(lambda ray: Color(1.0, 2.0, 3.0))

        for row in range(tracer.height):
            for col in range(tracer.width):
                assert tracer.image.get_pixel(col, row).is_close(Color(1.0, 2.0, 3.0))

    def test_each_pixel_traced_once(self, tracer):
        """Test that without supersampling each pixel fires one ray."""
        rays = []

        def record(ray):
            rays.append(ray)
            return Color()

        tracer.fire_all_rays(record)

        assert len(rays) == tracer.width * tracer.height

    def test_progress_callback(self, tracer):
        """Test that the callback receives one update per row."""
        updates = []

        tracer.fire_all_rays(lambda ray: Color(), callback=lambda done, total: updates.append((done, total)))

        assert updates == [(1, 2), (2, 2)]

    def test_render_rows_generator(self, tracer):
        """Test the generator variant of rendering."""
        progress = list(tracer.render_rows(lambda ray: Color(0.5, 0.5, 0.5)))

        assert progress == [(1, 2), (2, 2)]
        assert tracer.image.get_pixel(3, 1).is_close(Color(0.5, 0.5, 0.5))

    def test_negative_samples_raise(self):
        """Test that a negative grid size is rejected."""
        with pytest.raises(ValueError):
            ImageTracer(HdrImage(1, 1), OrthogonalCamera(), samples_per_side=-1)


class TestAntialiasing:
    """Tests for stratified supersampling."""

    def test_rays_fill_strata(self):
        """Test that a 10x10 grid fires one ray in each sub-pixel cell."""
        n = 10
        tracer = ImageTracer(HdrImage(1, 1), OrthogonalCamera(), samples_per_side=n)
        cells = []

        def trace_ray(ray):
            point = ray.at(1.0)
            assert point.x == pytest.approx(0.0)
            assert -1.0 <= point.y <= 1.0
            assert -1.0 <= point.z <= 1.0
            u = (1.0 - point.y) / 2.0
            v = (point.z + 1.0) / 2.0
            cells.append((math.floor(u * n), math.floor((1.0 - v) * n)))
            return Color()

        tracer.fire_all_rays(trace_ray)

        assert len(cells) == n * n
        assert sorted(cells) == [(c, r) for c in range(n) for r in range(n)]

    def test_average_of_samples(self):
        """Test that the pixel color is the mean of the sample colors."""
        tracer = ImageTracer(HdrImage(1, 1), OrthogonalCamera(), samples_per_side=4)
        # Left half of the screen white, right half black
        tracer.fire_all_rays(lambda ray: Color(1.0, 1.0, 1.0) if ray.origin.y > 0 else Color())

        color = tracer.image.get_pixel(0, 0)

        assert color.is_close(Color(0.5, 0.5, 0.5))

    def test_edge_noise_shrinks_with_samples(self):
        """Test that denser grids reduce the noise on an edge without biasing it."""

        def edge(ray):
            # Diagonal edge: the region above y + z = 0.2 covers 40.5% of the screen
            return Color(1.0, 1.0, 1.0) if ray.origin.y + ray.origin.z > 0.2 else Color()

        variances = []
        for n in (1, 2, 4):
            values = []
            for seed in range(400):
                tracer = ImageTracer(
                    HdrImage(1, 1), OrthogonalCamera(), samples_per_side=n, pcg=PCG(init_seq=seed)
                )
                tracer.fire_all_rays(edge)
                values.append(tracer.image.get_pixel(0, 0).r)

            assert np.mean(values) == pytest.approx(0.405, abs=0.08)
            variances.append(np.var(values))

        assert variances[0] > variances[1] > variances[2]
