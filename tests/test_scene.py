"""Tests for the Scene container and the demo scene."""

import logging

import pytest

from raykernel.camera.orthogonal import OrthogonalCamera
from raykernel.camera.perspective import PerspectiveCamera
from raykernel.camera.tracer import ImageTracer
from raykernel.core.color import WHITE
from raykernel.core.integrator import OnOffRenderer
from raykernel.geometry.box import AxisAlignedBox
from raykernel.geometry.cylinder import CylinderShell
from raykernel.geometry.plane import Plane
from raykernel.geometry.sphere import Sphere
from raykernel.image.hdr import HdrImage
from raykernel.materials.metal import SpecularBRDF
from raykernel.scene.demo import DemoSceneParams, create_demo_scene
from raykernel.scene.manager import Scene


class TestScene:
    """Tests for Scene."""

    def test_add_shape(self):
        """Test that shapes go into the world."""
        scene = Scene()
        scene.add_shape(Sphere())

        assert len(scene.world) == 1

    def test_default_camera(self, caplog):
        """Test the fallback camera and its warning."""
        scene = Scene()

        with caplog.at_level(logging.WARNING, logger="raykernel"):
            camera = scene.get_camera()

        assert isinstance(camera, PerspectiveCamera)
        assert camera.distance == 1.0
        assert camera.aspect_ratio == 1.0
        assert "No camera defined" in caplog.text

    def test_explicit_camera(self, caplog):
        """Test that a configured camera is returned silently."""
        camera = OrthogonalCamera()
        scene = Scene(camera=camera)

        with caplog.at_level(logging.WARNING, logger="raykernel"):
            assert scene.get_camera() is camera

        assert caplog.text == ""


class TestDemoScene:
    """Tests for create_demo_scene."""

    def test_shapes(self):
        """Test the six demo shapes."""
        scene = create_demo_scene()
        shapes = list(scene.world)

        assert len(shapes) == 6
        assert sum(isinstance(s, Sphere) for s in shapes) == 3
        assert sum(isinstance(s, Plane) for s in shapes) == 1
        assert sum(isinstance(s, AxisAlignedBox) for s in shapes) == 1
        assert sum(type(s) is CylinderShell for s in shapes) == 1
        assert any(isinstance(s.material.brdf, SpecularBRDF) for s in shapes)

    def test_perspective_camera(self):
        """Test the default camera of the demo."""
        scene = create_demo_scene(DemoSceneParams(aspect_ratio=2.0))

        assert isinstance(scene.camera, PerspectiveCamera)
        assert scene.camera.aspect_ratio == 2.0

    def test_orthogonal_camera(self):
        """Test the orthogonal variant."""
        scene = create_demo_scene(DemoSceneParams(orthogonal=True))

        assert isinstance(scene.camera, OrthogonalCamera)

    def test_sky_encloses_camera(self):
        """Test that every camera ray hits something."""
        scene = create_demo_scene(DemoSceneParams(angle_deg=45.0, aspect_ratio=1.0))
        image = HdrImage(4, 4)

        ImageTracer(image, scene.get_camera()).fire_all_rays(OnOffRenderer(scene.world))

        for row in range(4):
            for col in range(4):
                assert image.get_pixel(col, row).is_close(WHITE)

    def test_block_and_pipe_stand_on_ground(self):
        """Test that the block and the pipe rest on the ground plane."""
        scene = create_demo_scene()
        boxes = [
            s.world_bounding_box()
            for s in scene.world
            if isinstance(s, (AxisAlignedBox, CylinderShell))
        ]

        assert len(boxes) == 2
        for box in boxes:
            assert box.p_min.z == pytest.approx(0.0, abs=1e-9)
            assert box.p_max.z > 0.0
