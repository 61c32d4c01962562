"""Pytest configuration for raykernel tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture
def pcg():
    """A generator seeded with the default state and sequence."""
    from raykernel.core.pcg import PCG

    return PCG()


@pytest.fixture
def reference_image():
    """The 3x2 image stored in the reference PFM files."""
    from raykernel.core.color import Color
    from raykernel.image.hdr import HdrImage

    image = HdrImage(3, 2)
    image.set_pixel(0, 0, Color(1.0e1, 2.0e1, 3.0e1))
    image.set_pixel(1, 0, Color(4.0e1, 5.0e1, 6.0e1))
    image.set_pixel(2, 0, Color(7.0e1, 8.0e1, 9.0e1))
    image.set_pixel(0, 1, Color(1.0e2, 2.0e2, 3.0e2))
    image.set_pixel(1, 1, Color(4.0e2, 5.0e2, 6.0e2))
    image.set_pixel(2, 1, Color(7.0e2, 8.0e2, 9.0e2))
    return image


@pytest.fixture
def cylinder_transformation():
    """Unit cylinder moved to (1, 1, 0) and stretched to height 2."""
    from raykernel.core.geometry import Vec
    from raykernel.core.transformations import scaling, translation

    return translation(Vec(1.0, 1.0, 0.0)) * scaling(Vec(1.0, 1.0, 2.0))
