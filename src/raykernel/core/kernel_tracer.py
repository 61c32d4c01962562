"""Taichi rendering kernel: camera rays, supersampling and the three renderers.

KernelTracer fills an HdrImage the way ImageTracer driven by one of the
renderers of ``core.integrator`` does, but the whole per-pixel work runs
inside a ``@ti.kernel`` over the pixels:

    ON_OFF: the foreground color wherever a shape is hit
    FLAT: pigment plus emission of the first hit
    PATH: the Monte Carlo path tracer with Russian roulette

Every pixel owns a PCG seeded with (init_state, init_seq + pixel index),
so a render is reproducible and independent of the thread schedule. The
path tracer keeps the branching estimator of PathTracer, num_of_rays
scattered rays per hit, with an explicit per-pixel stack of path vertices
instead of recursion. Vertices are visited depth first, so each pixel draws
its random numbers in the same order as the recursive renderer.

Rows are rendered in bands of ``rows_per_band`` rows, which bounds the size
of the vertex stack and lets callers follow the progress.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.camera.perspective import PerspectiveCamera
    >>> from raykernel.image.hdr import HdrImage
    >>> from raykernel.scene.demo import create_demo_scene
    >>> scene = create_demo_scene()
    >>> image = HdrImage(160, 120)
    >>> tracer = KernelTracer(image, scene.get_camera(), scene.world)
    >>> tracer.fire_all_rays(callback=lambda done, total: None)
"""

import logging
from collections.abc import Callable, Generator
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from raykernel.camera.base import Camera
from raykernel.camera.orthogonal import OrthogonalCamera
from raykernel.camera.perspective import PerspectiveCamera
from raykernel.core.color import BLACK, WHITE, Color
from raykernel.core.integrator import (
    MAX_DEPTH,
    MIN_TERMINATION_PROBABILITY,
    NUM_OF_RAYS,
    RUSSIAN_ROULETTE_LIMIT,
)
from raykernel.core.pcg import pcg_float, pcg_seed, pcg_step
from raykernel.core.vector import transform_direction, transform_point
from raykernel.image.hdr import HdrImage
from raykernel.materials.brdf import SCATTER_T_MIN
from raykernel.materials.lambertian import scatter_diffuse
from raykernel.materials.material import BrdfKind
from raykernel.materials.metal import scatter_specular
from raykernel.materials.pigment import pigment_color
from raykernel.scene.intersection import CompiledScene
from raykernel.scene.world import World

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Callback receives (completed_rows, total_rows)
ProgressCallback = Callable[[int, int], None]

# =============================================================================
# Rendering Constants
# =============================================================================

# Rows traced by one kernel launch
ROWS_PER_BAND = 16

# t_min of camera rays: they start on the screen
CAMERA_T_MIN = 1.0

# Indices of the colors field
_BACKGROUND = 0
_FOREGROUND = 1


class RenderAlgorithm(IntEnum):
    """The renderers available inside the kernel."""

    ON_OFF = 0
    FLAT = 1
    PATH = 2


class CameraKind(IntEnum):
    ORTHOGONAL = 0
    PERSPECTIVE = 1


ALGORITHM_NAMES = {
    "on-off": RenderAlgorithm.ON_OFF,
    "flat": RenderAlgorithm.FLAT,
    "path": RenderAlgorithm.PATH,
}


@ti.dataclass
class PathVertex:
    """A hit of the path tracer whose scattered rays are still being traced.

    Attributes:
        point: World-space hit point, origin of the scattered rays.
        normal: Unit normal at the hit, oriented against the incoming ray.
        incoming: Direction of the ray that produced the hit.
        weight: Factor applied to the radiance of every scattered ray,
            the product of hit_color / num_of_rays along the path.
        brdf_kind: A BrdfKind value selecting the scattering.
    """

    point: vec3
    normal: vec3
    incoming: vec3
    weight: vec3
    brdf_kind: ti.i32


def camera_kind(camera: Camera) -> CameraKind:
    """Return the tag of ``camera``.

    Raises:
        TypeError: If the camera class has no kernel counterpart.
    """
    if isinstance(camera, OrthogonalCamera):
        return CameraKind.ORTHOGONAL
    if isinstance(camera, PerspectiveCamera):
        return CameraKind.PERSPECTIVE
    raise TypeError(f"Camera {type(camera).__name__} cannot be rendered by the kernel")


@ti.data_oriented
class KernelTracer:
    """Render a World into an HdrImage with a Taichi kernel.

    Must be created after ``ti.init``.

    Attributes:
        image: The pixel buffer being written.
        camera: The camera generating the rays.
        scene: The compiled world.
        algorithm: The RenderAlgorithm used.
        samples_per_side: Sub-pixel grid size for anti-aliasing (0 disables it).
        num_of_rays: Scattered rays traced at each bounce.
        max_depth: Rays deeper than this return black.
        russian_roulette_limit: Depth from which paths may be terminated.
        init_state: State seed shared by all pixel generators.
        init_seq: Sequence of the pixel at (0, 0); pixel (col, row) uses
            init_seq + row * width + col.
    """

    def __init__(
        self,
        image: HdrImage,
        camera: Camera,
        world: World,
        algorithm: str = "path",
        background_color: Color = BLACK,
        color: Color = WHITE,
        samples_per_side: int = 0,
        num_of_rays: int = NUM_OF_RAYS,
        max_depth: int = MAX_DEPTH,
        russian_roulette_limit: int = RUSSIAN_ROULETTE_LIMIT,
        init_state: int = 42,
        init_seq: int = 54,
        rows_per_band: int = ROWS_PER_BAND,
    ) -> None:
        """Compile the scene and allocate the per-pixel buffers.

        Args:
            image: Image to fill.
            camera: Orthogonal or perspective camera.
            world: Shapes to render.
            algorithm: "on-off", "flat" or "path".
            background_color: Color of rays that hit nothing.
            color: Foreground color of the on-off renderer.
            samples_per_side: Stratified samples per pixel side.
            num_of_rays: Scattered rays per bounce (path tracer).
            max_depth: Maximum ray depth (path tracer).
            russian_roulette_limit: Depth where Russian roulette starts.
            init_state: Random generator state.
            init_seq: Random generator sequence of the first pixel.
            rows_per_band: Rows traced by each kernel launch.

        Raises:
            ValueError: If a parameter is out of range or the algorithm is
                unknown.
            TypeError: If the camera or part of the world has no kernel
                counterpart.
        """
        if algorithm not in ALGORITHM_NAMES:
            raise ValueError(
                f"Unknown algorithm {algorithm!r}, expected one of {tuple(ALGORITHM_NAMES)}"
            )
        if samples_per_side < 0:
            raise ValueError(
                f"samples_per_side must be non-negative, got {samples_per_side}"
            )
        if num_of_rays <= 0:
            raise ValueError(f"num_of_rays must be positive, got {num_of_rays}")
        if max_depth < 0 or russian_roulette_limit < 0:
            raise ValueError(
                f"Depths must be non-negative, got max_depth={max_depth}, "
                f"russian_roulette_limit={russian_roulette_limit}"
            )
        if init_state < 0 or init_seq < 0:
            raise ValueError(
                f"Seeds must be non-negative, got init_state={init_state}, init_seq={init_seq}"
            )
        if rows_per_band <= 0:
            raise ValueError(f"rows_per_band must be positive, got {rows_per_band}")

        self.image = image
        self.camera = camera
        self.algorithm = ALGORITHM_NAMES[algorithm]
        self.samples_per_side = samples_per_side
        self.num_of_rays = num_of_rays
        self.max_depth = max_depth
        self.russian_roulette_limit = russian_roulette_limit
        self.init_state = init_state
        self.init_seq = init_seq
        self.width = image.width
        self.height = image.height
        self.rows_per_band = min(rows_per_band, image.height)

        self.scene = CompiledScene(world)

        self.camera_kind = camera_kind(camera)
        self.aspect_ratio = float(camera.aspect_ratio)
        self.distance = float(getattr(camera, "distance", 1.0))
        self._camera_to_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
        self._camera_to_world.from_numpy(camera.transformation.m.astype(np.float32))

        self._colors = ti.Vector.field(3, dtype=ti.f32, shape=2)
        self._colors[_BACKGROUND] = [background_color.r, background_color.g, background_color.b]
        self._colors[_FOREGROUND] = [color.r, color.g, color.b]

        band_shape = (self.width, self.rows_per_band)
        self._rng_state = ti.field(dtype=ti.u64, shape=band_shape)
        self._rng_inc = ti.field(dtype=ti.u64, shape=band_shape)
        self._stack = PathVertex.field(shape=band_shape + (max_depth + 1,))
        self._remaining = ti.field(dtype=ti.i32, shape=band_shape + (max_depth + 1,))

    # -------------------------------------------------------------------------
    # Random numbers
    # -------------------------------------------------------------------------

    @ti.func
    def _random_float(self, col: ti.i32, band_row: ti.i32) -> ti.f32:
        state, value = pcg_step(self._rng_state[col, band_row], self._rng_inc[col, band_row])
        self._rng_state[col, band_row] = state
        return pcg_float(value)

    # -------------------------------------------------------------------------
    # Camera
    # -------------------------------------------------------------------------

    @ti.func
    def _camera_ray(self, u: ti.f32, v: ti.f32):
        """Return the world-space (origin, direction) through screen point (u, v)."""
        origin = vec3(-1.0, (1.0 - 2.0 * u) * self.aspect_ratio, 2.0 * v - 1.0)
        direction = vec3(1.0, 0.0, 0.0)
        if ti.static(self.camera_kind == CameraKind.PERSPECTIVE):
            origin = vec3(-self.distance, 0.0, 0.0)
            direction = vec3(self.distance, (1.0 - 2.0 * u) * self.aspect_ratio, 2.0 * v - 1.0)
        m = self._camera_to_world[None]
        return transform_point(m, origin), transform_direction(m, direction)

    # -------------------------------------------------------------------------
    # Path tracer
    # -------------------------------------------------------------------------

    @ti.func
    def _visit(
        self,
        col: ti.i32,
        band_row: ti.i32,
        origin: vec3,
        direction: vec3,
        t_min: ti.f32,
        depth: ti.i32,
        weight: vec3,
    ):
        """Shade one ray and push its hit if it scatters further.

        Returns:
            Tuple (radiance, top) with the weighted emitted or background
            radiance of the ray, and the stack index of the vertex to
            continue from: ``depth`` if a vertex was pushed, ``depth - 1``
            otherwise.
        """
        radiance = vec3(0.0, 0.0, 0.0)
        top = depth - 1

        if depth <= self.max_depth:
            hit = self.scene.intersect(origin, direction, t_min, tm.inf)
            if hit.hit == 0:
                radiance = weight * self._colors[_BACKGROUND]
            else:
                material = self.scene.materials[hit.material]
                hit_color = pigment_color(
                    self.scene.pigments[material.brdf_pigment], self.scene.texels, hit.uv
                )
                emitted = pigment_color(
                    self.scene.pigments[material.emitted_pigment], self.scene.texels, hit.uv
                )
                lum = ti.max(hit_color.x, ti.max(hit_color.y, hit_color.z))

                survived = 1
                if depth >= self.russian_roulette_limit:
                    q = ti.max(MIN_TERMINATION_PROBABILITY, 1.0 - lum)
                    if self._random_float(col, band_row) > q:
                        hit_color = hit_color / (1.0 - q)
                    else:
                        survived = 0

                radiance = weight * emitted
                if survived == 1 and lum > 0.0:
                    top = depth
                    self._stack[col, band_row, depth] = PathVertex(
                        point=hit.point,
                        normal=hit.normal,
                        incoming=direction,
                        weight=weight * hit_color / self.num_of_rays,
                        brdf_kind=material.brdf_kind,
                    )
                    self._remaining[col, band_row, depth] = self.num_of_rays

        return radiance, top

    @ti.func
    def _trace_path(self, col: ti.i32, band_row: ti.i32, origin: vec3, direction: vec3) -> vec3:
        """Estimate the radiance carried back along a camera ray."""
        radiance, top = self._visit(
            col, band_row, origin, direction, CAMERA_T_MIN, 0, vec3(1.0, 1.0, 1.0)
        )

        while top >= 0:
            if self._remaining[col, band_row, top] > 0:
                self._remaining[col, band_row, top] -= 1
                vertex = self._stack[col, band_row, top]

                new_direction = vec3(0.0, 0.0, 0.0)
                if vertex.brdf_kind == int(BrdfKind.DIFFUSE):
                    xi1 = self._random_float(col, band_row)
                    xi2 = self._random_float(col, band_row)
                    new_direction = scatter_diffuse(vertex.normal, xi1, xi2)
                else:
                    new_direction = scatter_specular(vertex.incoming, vertex.normal)

                contribution, new_top = self._visit(
                    col,
                    band_row,
                    vertex.point,
                    new_direction,
                    SCATTER_T_MIN,
                    top + 1,
                    vertex.weight,
                )
                radiance += contribution
                top = new_top
            else:
                top -= 1

        return radiance

    # -------------------------------------------------------------------------
    # Pixels
    # -------------------------------------------------------------------------

    @ti.func
    def _sample(self, col: ti.i32, band_row: ti.i32, row: ti.i32, u_pixel: ti.f32, v_pixel: ti.f32) -> vec3:
        """Return the color of the camera ray through a point of pixel (col, row)."""
        u = (col + u_pixel) / self.width
        v = 1.0 - (row + v_pixel) / self.height
        origin, direction = self._camera_ray(u, v)

        color = vec3(0.0, 0.0, 0.0)
        if ti.static(self.algorithm == RenderAlgorithm.ON_OFF):
            hit = self.scene.intersect(origin, direction, CAMERA_T_MIN, tm.inf)
            color = self._colors[_BACKGROUND]
            if hit.hit == 1:
                color = self._colors[_FOREGROUND]
        elif ti.static(self.algorithm == RenderAlgorithm.FLAT):
            hit = self.scene.intersect(origin, direction, CAMERA_T_MIN, tm.inf)
            color = self._colors[_BACKGROUND]
            if hit.hit == 1:
                material = self.scene.materials[hit.material]
                color = pigment_color(
                    self.scene.pigments[material.brdf_pigment], self.scene.texels, hit.uv
                ) + pigment_color(
                    self.scene.pigments[material.emitted_pigment], self.scene.texels, hit.uv
                )
        else:
            color = self._trace_path(col, band_row, origin, direction)
        return color

    @ti.func
    def _pixel_color(self, col: ti.i32, band_row: ti.i32, row: ti.i32) -> vec3:
        """Compute the (possibly supersampled) color of one pixel."""
        color = vec3(0.0, 0.0, 0.0)
        n = ti.static(self.samples_per_side)
        if ti.static(n == 0):
            color = self._sample(col, band_row, row, 0.5, 0.5)
        else:
            for inter_row in range(n):
                for inter_col in range(n):
                    u_pixel = (inter_col + self._random_float(col, band_row)) / n
                    v_pixel = (inter_row + self._random_float(col, band_row)) / n
                    color += self._sample(col, band_row, row, u_pixel, v_pixel)
            color /= n * n
        return color

    @ti.kernel
    def _render_band(
        self,
        pixels: ti.types.ndarray(dtype=ti.f32, ndim=3),
        row_start: ti.i32,
        init_state: ti.u64,
        init_seq: ti.u64,
    ):
        """Render rows [row_start, row_start + rows_per_band) into ``pixels``."""
        for col, band_row in ti.ndrange(self.width, self.rows_per_band):
            row = row_start + band_row
            if row < self.height:
                state, inc = pcg_seed(init_state, init_seq + ti.cast(row * self.width + col, ti.u64))
                self._rng_state[col, band_row] = state
                self._rng_inc[col, band_row] = inc

                color = self._pixel_color(col, band_row, row)
                for c in ti.static(range(3)):
                    pixels[row, col, c] = color[c]

    # -------------------------------------------------------------------------
    # Driver
    # -------------------------------------------------------------------------

    def render_rows(self) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        Yields:
            Tuple of (completed_rows, total_rows).
        """
        total_rows = self.height
        for row_start in range(0, total_rows, self.rows_per_band):
            self._render_band(self.image.pixels, row_start, self.init_state, self.init_seq)
            done = min(row_start + self.rows_per_band, total_rows)
            logger.debug("Traced rows %d/%d", done, total_rows)
            yield (done, total_rows)

    def fire_all_rays(self, callback: ProgressCallback | None = None) -> None:
        """Compute the color of every pixel and store it in the image.

        Args:
            callback: Optional function called after each band with
                (completed_rows, total_rows).
        """
        for done, total in self.render_rows():
            if callback is not None:
                callback(done, total)
        ti.sync()

    def __repr__(self) -> str:
        return (
            f"KernelTracer(width={self.width}, height={self.height}, "
            f"algorithm={self.algorithm.name}, samples_per_side={self.samples_per_side})"
        )
