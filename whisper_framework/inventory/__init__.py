"""
Inventory module - key items and the flashlight.
"""

from whisper_framework.inventory.items import InventoryManager, ItemDefinition
from whisper_framework.inventory.flashlight import FlashlightController

__all__ = [
    "InventoryManager",
    "ItemDefinition",
    "FlashlightController",
]
