"""Renderers: strategies that turn a ray into a color.

Three integrators share the same interface, ``renderer(ray) -> Color``:

    OnOffRenderer: visibility only, a fixed color wherever something is hit
    FlatRenderer: pigment plus emission of the first hit, no shading
    PathTracer: Monte Carlo estimate of the rendering equation

The path tracer samples scattered rays from each BRDF, so for diffuse
surfaces the cosine and 1/pi terms of the rendering equation cancel against
the sampling density: every bounce just multiplies by the pigment color and
the estimate is averaged over the number of scattered rays.

Example:
    >>> from raykernel.core.pcg import PCG
    >>> from raykernel.scene.world import World
    >>> renderer = PathTracer(World(), pcg=PCG(), num_of_rays=10, max_depth=3)
    >>> # tracer.fire_all_rays(renderer)
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from raykernel.core.color import BLACK, WHITE, Color
from raykernel.core.pcg import PCG
from raykernel.core.ray import Ray
from raykernel.scene.world import World

# =============================================================================
# Rendering Constants
# =============================================================================

# Default number of scattered rays per bounce
NUM_OF_RAYS = 10

# Default maximum ray depth (path length)
MAX_DEPTH = 2

# Default depth from which Russian roulette can terminate paths
RUSSIAN_ROULETTE_LIMIT = 3

# Lower bound of the Russian roulette termination probability
MIN_TERMINATION_PROBABILITY = 0.05


class Renderer(ABC):
    """Base class of all renderers.

    Attributes:
        world: The scene to render.
        background_color: Color returned for rays that hit nothing.
    """

    def __init__(self, world: World, background_color: Color = BLACK) -> None:
        self.world = world
        self.background_color = background_color

    @abstractmethod
    def __call__(self, ray: Ray) -> Color:
        """Return the radiance carried back along ``ray``."""


class OnOffRenderer(Renderer):
    """Paint ``color`` where a shape is hit and the background elsewhere."""

    def __init__(
        self,
        world: World,
        background_color: Color = BLACK,
        color: Color = WHITE,
    ) -> None:
        super().__init__(world, background_color)
        self.color = color

    def __call__(self, ray: Ray) -> Color:
        if self.world.quick_ray_intersection(ray):
            return self.color
        return self.background_color


class FlatRenderer(Renderer):
    """Paint the pigment plus emission of the first hit, without any lighting.

    Meant for previews and debugging of scene geometry.
    """

    def __call__(self, ray: Ray) -> Color:
        hit = self.world.ray_intersection(ray)
        if hit is None:
            return self.background_color

        material = hit.shape.material
        return material.brdf.pigment.get_color(
            hit.surface_point
        ) + material.emitted_radiance.get_color(hit.surface_point)


class PathTracer(Renderer):
    """Monte Carlo path tracer with Russian roulette.

    Attributes:
        pcg: Random generator shared by every sampling decision.
        num_of_rays: Scattered rays traced at each bounce.
        max_depth: Rays deeper than this return black.
        russian_roulette_limit: Depth from which paths may be terminated
            early at random.
    """

    def __init__(
        self,
        world: World,
        background_color: Color = BLACK,
        pcg: PCG | None = None,
        num_of_rays: int = NUM_OF_RAYS,
        max_depth: int = MAX_DEPTH,
        russian_roulette_limit: int = RUSSIAN_ROULETTE_LIMIT,
    ) -> None:
        """Create a path tracer.

        Raises:
            ValueError: If num_of_rays is not positive or a depth is negative.
        """
        if num_of_rays <= 0:
            raise ValueError(f"num_of_rays must be positive, got {num_of_rays}")
        if max_depth < 0 or russian_roulette_limit < 0:
            raise ValueError(
                f"Depths must be non-negative, got max_depth={max_depth}, "
                f"russian_roulette_limit={russian_roulette_limit}"
            )
        super().__init__(world, background_color)
        self.pcg = pcg if pcg is not None else PCG()
        self.num_of_rays = num_of_rays
        self.max_depth = max_depth
        self.russian_roulette_limit = russian_roulette_limit

    def __call__(self, ray: Ray) -> Color:
        if ray.depth > self.max_depth:
            return BLACK

        hit = self.world.ray_intersection(ray)
        if hit is None:
            return self.background_color

        material = hit.shape.material
        hit_color = material.brdf.pigment.get_color(hit.surface_point)
        emitted_radiance = material.emitted_radiance.get_color(hit.surface_point)
        hit_color_lum = hit_color.max_component()

        if ray.depth >= self.russian_roulette_limit:
            q = max(MIN_TERMINATION_PROBABILITY, 1.0 - hit_color_lum)
            if self.pcg.random_float() > q:
                # Survivors are boosted to keep the estimate unbiased
                hit_color = hit_color * (1.0 / (1.0 - q))
            else:
                return emitted_radiance

        cum_radiance = BLACK
        if hit_color_lum > 0.0:
            for _ in range(self.num_of_rays):
                new_ray = material.brdf.scatter_ray(
                    self.pcg,
                    hit.ray.dir,
                    hit.world_point,
                    hit.normal,
                    ray.depth + 1,
                )
                cum_radiance = cum_radiance + hit_color * self(new_ray)

        return emitted_radiance + cum_radiance * (1.0 / self.num_of_rays)
