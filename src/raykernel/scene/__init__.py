"""Scene module: world container, scene description and demo scene.

Components:
    world: World, the list of shapes and the intersection queries over it
    manager: Scene, a world plus the camera observing it
    demo: Factory of the built-in demo scene
    intersection: A world compiled into Taichi fields
"""

from .demo import DemoSceneParams, create_demo_scene
from .manager import Scene
from .world import World

__all__ = [
    "World",
    "Scene",
    "DemoSceneParams",
    "create_demo_scene",
]
