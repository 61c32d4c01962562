"""Unit tests for cylinder shell and solid cylinder intersection.

The fixture ``cylinder_transformation`` places the unit cylinder with its
axis on x = y = 1, from z = 0 to z = 2.
"""

import math

import pytest

from raykernel.core.geometry import VEC_Y, Normal, Point, Vec, Vec2d
from raykernel.core.ray import Ray
from raykernel.core.transformations import rotation_x, scaling, translation
from raykernel.geometry.base import HitRecord
from raykernel.geometry.cylinder import Cylinder, CylinderShell


class TestCylinderShell:
    """Tests for the open lateral surface."""

    def test_hit_lateral_surface(self, cylinder_transformation):
        """Test a horizontal ray hitting the side of the shell."""
        shell = CylinderShell(transformation=cylinder_transformation)
        ray = Ray(origin=Point(-1.0, 1.0, 1.2), dir=Vec(1.0, 0.0, 0.0))

        assert HitRecord(
            world_point=Point(0.0, 1.0, 1.2),
            normal=Normal(-1.0, 0.0, 0.0),
            surface_point=Vec2d(0.5, 0.6),
            t=1.0,
            ray=ray,
        ).is_close(shell.ray_intersection(ray))

    def test_hit_bottom_rim(self, cylinder_transformation):
        """Test an oblique ray hitting the shell on its bottom rim."""
        shell = CylinderShell(transformation=cylinder_transformation)
        ray = Ray(origin=Point(-1.0, 1.0, 0.0), dir=Vec(1.0, 0.5, 0.0))

        assert HitRecord(
            world_point=Point(0.2, 1.6, 0.0),
            normal=Normal(-0.8, 0.6, 0.0),
            surface_point=Vec2d(0.5 - math.acos(0.8) / (2.0 * math.pi), 0.0),
            t=1.2,
            ray=ray,
        ).is_close(shell.ray_intersection(ray))

    def test_miss_below(self, cylinder_transformation):
        """Test a ray passing just under the shell."""
        shell = CylinderShell(transformation=cylinder_transformation)
        ray = Ray(origin=Point(-1.0, 1.0, -1e-10), dir=Vec(1.0, 0.0, 0.0))

        assert shell.ray_intersection(ray) is None
        assert not shell.quick_ray_intersection(ray)

    def test_hit_inner_wall(self, cylinder_transformation):
        """Test a ray entering through the open top and hitting the inside."""
        shell = CylinderShell(transformation=cylinder_transformation)
        ray = Ray(origin=Point(1.0, 1.0, 3.0), dir=Vec(0.0, 0.5, -1.0))

        assert HitRecord(
            world_point=Point(1.0, 2.0, 1.0),
            normal=Normal(0.0, -1.0, 0.0),
            surface_point=Vec2d(0.25, 0.5),
            t=2.0,
            ray=ray,
        ).is_close(shell.ray_intersection(ray))

    def test_miss_outside(self, cylinder_transformation):
        """Test a ray passing beside the shell."""
        shell = CylinderShell(transformation=cylinder_transformation)
        ray = Ray(origin=Point(2.9, 1.0, 3.0), dir=Vec(0.0, 0.5, -1.0))

        assert shell.ray_intersection(ray) is None

    def test_vertical_ray_inside_misses(self, cylinder_transformation):
        """Test that a ray along the axis never touches the open shell."""
        shell = CylinderShell(transformation=cylinder_transformation)
        ray = Ray(origin=Point(1.0, 1.0, 3.0), dir=Vec(0.0, 0.0, -1.0))

        assert shell.ray_intersection(ray) is None

    def test_rotated_shell(self):
        """Test that an explicit rotation and from_endpoints agree on the hit."""
        shell1 = CylinderShell(
            transformation=translation(VEC_Y)
            * rotation_x(45.0)
            * scaling(Vec(1.0, 1.0, math.sqrt(2.0)))
        )
        shell2 = CylinderShell.from_endpoints(1.0, Point(0.0, 1.0, 0.0), Point(0.0, 0.0, 1.0))
        ray = Ray(origin=Point(0.0, 3.0, 0.0), dir=Vec(0.0, -1.0, 0.0))

        expected_point = Point(0.0, 1.0 - math.sqrt(2.0), 0.0)
        expected_normal = Normal(0.0, math.sqrt(2.0) / 2.0, math.sqrt(2.0) / 2.0)
        expected_t = 2.0 + math.sqrt(2.0)

        assert HitRecord(
            world_point=expected_point,
            normal=expected_normal,
            surface_point=Vec2d(0.75, math.sqrt(2.0) / 2.0),
            t=expected_t,
            ray=ray,
        ).is_close(shell1.ray_intersection(ray))
        assert HitRecord(
            world_point=expected_point,
            normal=expected_normal,
            surface_point=Vec2d(0.0, math.sqrt(2.0) / 2.0),
            t=expected_t,
            ray=ray,
        ).is_close(shell2.ray_intersection(ray))

    def test_world_bounding_box(self, cylinder_transformation):
        """Test the bounding box of the placed shell."""
        bbox = CylinderShell(transformation=cylinder_transformation).world_bounding_box()

        assert bbox.p_min.is_close(Point(0.0, 0.0, 0.0))
        assert bbox.p_max.is_close(Point(2.0, 2.0, 2.0))


class TestCylinder:
    """Tests for the solid cylinder with caps."""

    def test_hit_lateral_surface(self, cylinder_transformation):
        """Test that lateral hits map onto the middle band of v."""
        cylinder = Cylinder(transformation=cylinder_transformation)
        ray = Ray(origin=Point(-1.0, 1.0, 1.2), dir=Vec(1.0, 0.0, 0.0))

        assert HitRecord(
            world_point=Point(0.0, 1.0, 1.2),
            normal=Normal(-1.0, 0.0, 0.0),
            surface_point=Vec2d(0.5, 0.55),
            t=1.0,
            ray=ray,
        ).is_close(cylinder.ray_intersection(ray))

    def test_hit_bottom_rim(self, cylinder_transformation):
        """Test that a hit on the rim of the bottom cap gets the cap normal."""
        cylinder = Cylinder(transformation=cylinder_transformation)
        ray = Ray(origin=Point(-1.0, 1.0, 0.0), dir=Vec(1.0, 0.5, 0.0))

        assert HitRecord(
            world_point=Point(0.2, 1.6, 0.0),
            normal=Normal(0.0, 0.0, -0.5),
            surface_point=Vec2d(0.5 - math.acos(0.8) / (2.0 * math.pi), 0.25),
            t=1.2,
            ray=ray,
        ).is_close(cylinder.ray_intersection(ray))

    def test_hit_top_cap_center(self, cylinder_transformation):
        """Test a ray along the axis hitting the center of the top cap."""
        cylinder = Cylinder(transformation=cylinder_transformation)
        ray = Ray(origin=Point(1.0, 1.0, 3.7), dir=Vec(0.0, 0.0, -1.0))

        assert HitRecord(
            world_point=Point(1.0, 1.0, 2.0),
            normal=Normal(0.0, 0.0, 0.5),
            surface_point=Vec2d(0.0, 1.0),
            t=1.7,
            ray=ray,
        ).is_close(cylinder.ray_intersection(ray))
        assert cylinder.quick_ray_intersection(ray)

    def test_hit_top_cap(self, cylinder_transformation):
        """Test an oblique ray hitting the top cap off-center."""
        cylinder = Cylinder(transformation=cylinder_transformation)
        ray = Ray(origin=Point(1.0, 1.0, 3.0), dir=Vec(0.0, 0.5, -1.0))

        assert HitRecord(
            world_point=Point(1.0, 1.5, 2.0),
            normal=Normal(0.0, 0.0, 0.5),
            surface_point=Vec2d(0.25, 0.875),
            t=1.0,
            ray=ray,
        ).is_close(cylinder.ray_intersection(ray))

    def test_hit_bottom_cap_from_below(self, cylinder_transformation):
        """Test a vertical ray coming from below hitting the bottom cap."""
        cylinder = Cylinder(transformation=cylinder_transformation)
        ray = Ray(origin=Point(1.5, 1.0, -1.0), dir=Vec(0.0, 0.0, 1.0))

        hit = cylinder.ray_intersection(ray)

        assert hit is not None
        assert hit.world_point.is_close(Point(1.5, 1.0, 0.0))
        assert hit.world_point.z == pytest.approx(0.0, abs=1e-9)
        assert hit.t == pytest.approx(1.0)
        assert hit.normal.normalize().is_close(Normal(0.0, 0.0, -1.0))
        assert cylinder.quick_ray_intersection(ray)

    def test_miss_below(self, cylinder_transformation):
        """Test a ray passing just under the cylinder."""
        cylinder = Cylinder(transformation=cylinder_transformation)
        ray = Ray(origin=Point(-1.0, 1.0, -1e-10), dir=Vec(1.0, 0.0, 0.0))

        assert cylinder.ray_intersection(ray) is None
        assert not cylinder.quick_ray_intersection(ray)

    def test_antiparallel_endpoints(self):
        """Test a cylinder whose axis points down the z axis."""
        cylinder = Cylinder.from_endpoints(1.0, Point(0.0, 0.0, 1.0), Point(0.0, 0.0, 0.0))
        ray = Ray(origin=Point(0.0, 0.0, 3.0), dir=Vec(0.0, 0.0, -1.0))

        hit = cylinder.ray_intersection(ray)

        assert hit.world_point.is_close(Point(0.0, 0.0, 1.0))
        assert hit.t == pytest.approx(2.0)


class TestCylinderConstruction:
    """Tests for the cylinder factory methods."""

    def test_from_dimensions(self, cylinder_transformation):
        """Test that from_dimensions matches the explicit transformation."""
        cylinder = Cylinder.from_dimensions(1.0, 2.0, Vec(1.0, 1.0, 0.0))

        assert cylinder.transformation.is_close(cylinder_transformation)
        assert isinstance(cylinder, Cylinder)

    def test_from_endpoints_vertical(self, cylinder_transformation):
        """Test that a vertical axis needs no rotation."""
        cylinder = Cylinder.from_endpoints(1.0, Point(1.0, 1.0, 0.0), Point(1.0, 1.0, 2.0))

        assert cylinder.transformation.is_close(cylinder_transformation)

    def test_zero_radius_raises(self):
        """Test that a zero radius is rejected."""
        with pytest.raises(ValueError):
            Cylinder.from_endpoints(0.0, Point(0.0, 0.0, 0.0), Point(0.0, 0.0, 1.0))

    def test_coincident_endpoints_raise(self):
        """Test that coincident endpoints are rejected."""
        with pytest.raises(ValueError):
            CylinderShell.from_endpoints(1.0, Point(1.0, 2.0, 3.0), Point(1.0, 2.0, 3.0))

    def test_zero_height_raises(self):
        """Test that a zero height is rejected."""
        with pytest.raises(ValueError):
            Cylinder.from_dimensions(1.0, 0.0)
