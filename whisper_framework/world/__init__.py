"""
World module - the shared dependency context and scene objects.

Provides:
- WorldContext and build_world
- Doors and activatable objects addressed by id
"""

from whisper_framework.world.context import WorldContext, build_world
from whisper_framework.world.objects import (
    ActivatableObject,
    ActivatableRegistry,
    Door,
    DoorRegistry,
)

__all__ = [
    "WorldContext",
    "build_world",
    "ActivatableObject",
    "ActivatableRegistry",
    "Door",
    "DoorRegistry",
]
