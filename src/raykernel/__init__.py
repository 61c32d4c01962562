"""Ray tracing kernel in Taichi with an object-based scene front end.

Scenes are described with Python objects: transformed geometric primitives,
pigments, BRDFs and cameras. For rendering, a scene is compiled into Taichi
struct fields and traced by a ``@ti.kernel`` over the pixels, from flat
previews to a Monte Carlo path tracer:
- Vector, point, normal and 4x4 transformation algebra
- Shapes: sphere, plane, axis-aligned box, cylinder shell, solid cylinder
- Pigments and BRDFs (diffuse, specular) combined into materials
- Orthogonal and perspective cameras with stratified supersampling
- A PCG random stream per pixel, so renders are reproducible
- HDR images, PFM I/O, tone mapping and PNG export

Subpackages:
    core: Vectors, transformations, rays, colors, random numbers, renderers
        and the rendering kernel
    geometry: Shape primitives and intersection algorithms
    materials: Pigments, BRDF models and materials
    scene: World container, kernel-side scene, scene description and demo
    camera: Camera models and the image tracer
    image: HDR pixel buffer and PFM codec
    preview: Tone mapping, Matplotlib preview and PNG export
"""

__version__ = "0.1.0"
