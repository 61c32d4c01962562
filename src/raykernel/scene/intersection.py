"""Scene-level ray intersection inside the rendering kernel.

A World is compiled once into Taichi struct fields: one ShapeRecord per
shape, carrying a kind tag, the world-to-object matrix and a material
index; one MaterialRecord per distinct material; one PigmentRecord per
distinct pigment, with the pixels of image pigments packed into a shared
texel field. Kernels then find the closest hit by scanning the shape field
in insertion order, as ``World.ray_intersection`` does.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raykernel.geometry.sphere import Sphere
    >>> from raykernel.scene.world import World
    >>> scene = CompiledScene(World([Sphere()]))
    >>> scene.num_shapes
    1
    >>> # Inside a kernel:
    >>> # hit = scene.intersect(origin, direction, t_min, t_max)
"""

import logging
from enum import IntEnum

import numpy as np
import taichi as ti
import taichi.math as tm

from raykernel.core.vector import transform_direction, transform_normal, transform_point
from raykernel.geometry.base import Shape
from raykernel.geometry.box import AxisAlignedBox
from raykernel.geometry.cylinder import Cylinder, CylinderShell
from raykernel.geometry.hits import (
    ShapeHit,
    hit_box,
    hit_cylinder,
    hit_cylinder_shell,
    hit_plane,
    hit_sphere,
)
from raykernel.geometry.plane import Plane
from raykernel.geometry.sphere import Sphere
from raykernel.materials.brdf import BRDF
from raykernel.materials.lambertian import DiffuseBRDF
from raykernel.materials.material import BrdfKind, Material, MaterialRecord
from raykernel.materials.metal import SpecularBRDF
from raykernel.materials.pigment import (
    CheckeredPigment,
    ImagePigment,
    Pigment,
    PigmentKind,
    PigmentRecord,
    UniformPigment,
)
from raykernel.scene.world import World

logger = logging.getLogger(__name__)

# Type aliases for 3D vectors and 4x4 matrices
vec2 = tm.vec2
vec3 = tm.vec3
mat4 = tm.mat4


class ShapeKind(IntEnum):
    """Tag of a ShapeRecord, one per shape class."""

    SPHERE = 0
    PLANE = 1
    BOX = 2
    CYLINDER_SHELL = 3
    CYLINDER = 4


@ti.dataclass
class ShapeRecord:
    """A shape flattened for the rendering kernel.

    Attributes:
        kind: A ShapeKind value.
        to_object: Matrix taking world points to the canonical shape.
        material: Index of the shape material in the material field.
    """

    kind: ti.i32
    to_object: mat4
    material: ti.i32


@ti.dataclass
class SurfaceHit:
    """World-space record of the closest intersection of a ray.

    Attributes:
        hit: 1 if any shape was hit, 0 otherwise.
        t: Ray parameter of the hit.
        point: World-space hit point.
        normal: Unit world-space normal, oriented against the ray.
        uv: Surface coordinate of the hit.
        material: Index of the material of the hit shape, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    uv: vec2
    material: ti.i32


# =============================================================================
# Kind tags of the Python objects
# =============================================================================


def shape_kind(shape: Shape) -> ShapeKind:
    """Return the tag of ``shape``.

    Raises:
        TypeError: If the shape class has no kernel counterpart.
    """
    # Cylinder derives from CylinderShell and must be tested first
    if isinstance(shape, Cylinder):
        return ShapeKind.CYLINDER
    if isinstance(shape, CylinderShell):
        return ShapeKind.CYLINDER_SHELL
    if isinstance(shape, Sphere):
        return ShapeKind.SPHERE
    if isinstance(shape, Plane):
        return ShapeKind.PLANE
    if isinstance(shape, AxisAlignedBox):
        return ShapeKind.BOX
    raise TypeError(f"Shape {type(shape).__name__} cannot be rendered by the kernel")


def brdf_kind(brdf: BRDF) -> BrdfKind:
    """Return the tag of ``brdf``.

    Raises:
        TypeError: If the BRDF class has no kernel counterpart.
    """
    if isinstance(brdf, DiffuseBRDF):
        return BrdfKind.DIFFUSE
    if isinstance(brdf, SpecularBRDF):
        return BrdfKind.SPECULAR
    raise TypeError(f"BRDF {type(brdf).__name__} cannot be rendered by the kernel")


# =============================================================================
# Single shape intersection
# =============================================================================


@ti.func
def intersect_shape(
    shape: ShapeRecord,
    origin: vec3,
    direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SurfaceHit:
    """Intersect a world-space ray with one shape record."""
    o = transform_point(shape.to_object, origin)
    d = transform_direction(shape.to_object, direction)

    local = ShapeHit(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0), uv=vec2(0.0, 0.0))
    if shape.kind == int(ShapeKind.SPHERE):
        local = hit_sphere(o, d, t_min, t_max)
    elif shape.kind == int(ShapeKind.PLANE):
        local = hit_plane(o, d, t_min, t_max)
    elif shape.kind == int(ShapeKind.BOX):
        local = hit_box(o, d, t_min, t_max)
    elif shape.kind == int(ShapeKind.CYLINDER_SHELL):
        local = hit_cylinder_shell(o, d, t_min, t_max)
    elif shape.kind == int(ShapeKind.CYLINDER):
        local = hit_cylinder(o, d, t_min, t_max)

    result = SurfaceHit(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        uv=vec2(0.0, 0.0),
        material=-1,
    )
    if local.hit == 1:
        result = SurfaceHit(
            hit=1,
            t=local.t,
            point=origin + local.t * direction,
            normal=tm.normalize(transform_normal(shape.to_object, local.normal)),
            uv=local.uv,
            material=shape.material,
        )
    return result


# =============================================================================
# Compiled scene
# =============================================================================


@ti.data_oriented
class CompiledScene:
    """The shapes, materials and pigments of a World in Taichi fields.

    Must be created after ``ti.init``. Fields always hold at least one
    record; ``num_shapes`` tells how many shapes are real.

    Attributes:
        num_shapes: Number of shapes of the world.
        shapes: ShapeRecord field.
        materials: MaterialRecord field.
        pigments: PigmentRecord field.
        texels: RGB field with the pixels of every image pigment.
    """

    def __init__(self, world: World) -> None:
        """Compile ``world``.

        Raises:
            TypeError: If a shape, BRDF or pigment has no kernel counterpart.
        """
        self._material_ids: dict[int, int] = {}
        self._pigment_ids: dict[int, int] = {}
        self._material_rows: list[tuple[int, int, int]] = []
        self._pigment_rows: list[Pigment] = []

        kinds = []
        matrices = []
        material_indices = []
        for shape in world:
            kinds.append(int(shape_kind(shape)))
            matrices.append(shape.transformation.invm)
            material_indices.append(self._add_material(shape.material))

        self.num_shapes = len(kinds)
        self.shapes = ShapeRecord.field(shape=max(1, self.num_shapes))
        if self.num_shapes > 0:
            self.shapes.from_numpy(
                {
                    "kind": np.array(kinds, dtype=np.int32),
                    "to_object": np.array(matrices, dtype=np.float32),
                    "material": np.array(material_indices, dtype=np.int32),
                }
            )

        self.materials = MaterialRecord.field(shape=max(1, len(self._material_rows)))
        if self._material_rows:
            rows = np.array(self._material_rows, dtype=np.int32)
            self.materials.from_numpy(
                {
                    "brdf_kind": rows[:, 0].copy(),
                    "brdf_pigment": rows[:, 1].copy(),
                    "emitted_pigment": rows[:, 2].copy(),
                }
            )

        self._compile_pigments()
        logger.debug(
            "Compiled %d shapes, %d materials and %d pigments",
            self.num_shapes,
            len(self._material_rows),
            len(self._pigment_rows),
        )

    def _add_pigment(self, pigment: Pigment) -> int:
        key = id(pigment)
        if key not in self._pigment_ids:
            self._pigment_ids[key] = len(self._pigment_rows)
            self._pigment_rows.append(pigment)
        return self._pigment_ids[key]

    def _add_material(self, material: Material) -> int:
        key = id(material)
        if key not in self._material_ids:
            self._material_ids[key] = len(self._material_rows)
            self._material_rows.append(
                (
                    int(brdf_kind(material.brdf)),
                    self._add_pigment(material.brdf.pigment),
                    self._add_pigment(material.emitted_radiance),
                )
            )
        return self._material_ids[key]

    def _compile_pigments(self) -> None:
        count = max(1, len(self._pigment_rows))
        kinds = np.zeros(count, dtype=np.int32)
        color1 = np.zeros((count, 3), dtype=np.float32)
        color2 = np.zeros((count, 3), dtype=np.float32)
        steps = np.ones(count, dtype=np.int32)
        offsets = np.zeros(count, dtype=np.int32)
        widths = np.ones(count, dtype=np.int32)
        heights = np.ones(count, dtype=np.int32)
        texel_blocks = []
        num_texels = 0

        for i, pigment in enumerate(self._pigment_rows):
            if isinstance(pigment, UniformPigment):
                kinds[i] = PigmentKind.UNIFORM
                color1[i] = pigment.color.r, pigment.color.g, pigment.color.b
            elif isinstance(pigment, CheckeredPigment):
                kinds[i] = PigmentKind.CHECKERED
                color1[i] = pigment.color1.r, pigment.color1.g, pigment.color1.b
                color2[i] = pigment.color2.r, pigment.color2.g, pigment.color2.b
                steps[i] = pigment.num_of_steps
            elif isinstance(pigment, ImagePigment):
                image = pigment.image
                kinds[i] = PigmentKind.IMAGE
                offsets[i] = num_texels
                widths[i] = image.width
                heights[i] = image.height
                texel_blocks.append(image.pixels.reshape(-1, 3))
                num_texels += image.width * image.height
            else:
                raise TypeError(
                    f"Pigment {type(pigment).__name__} cannot be rendered by the kernel"
                )

        self.pigments = PigmentRecord.field(shape=count)
        self.pigments.from_numpy(
            {
                "kind": kinds,
                "color1": color1,
                "color2": color2,
                "num_of_steps": steps,
                "texel_offset": offsets,
                "width": widths,
                "height": heights,
            }
        )

        self.texels = ti.Vector.field(3, dtype=ti.f32, shape=max(1, num_texels))
        if texel_blocks:
            self.texels.from_numpy(np.concatenate(texel_blocks).astype(np.float32))

    @ti.func
    def intersect(self, origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> SurfaceHit:
        """Return the closest hit over all shapes.

        Shapes are scanned in insertion order and a later shape only
        replaces the current hit if it is strictly closer.
        """
        closest_t = t_max
        result = SurfaceHit(
            hit=0,
            t=0.0,
            point=vec3(0.0, 0.0, 0.0),
            normal=vec3(0.0, 0.0, 0.0),
            uv=vec2(0.0, 0.0),
            material=-1,
        )
        for k in range(self.num_shapes):
            rec = intersect_shape(self.shapes[k], origin, direction, t_min, closest_t)
            if rec.hit == 1:
                closest_t = rec.t
                result = rec
        return result

    def __repr__(self) -> str:
        return (
            f"CompiledScene(shapes={self.num_shapes}, "
            f"materials={len(self._material_rows)}, pigments={len(self._pigment_rows)})"
        )
