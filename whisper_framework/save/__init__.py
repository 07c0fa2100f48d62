"""
Save module - in-memory save slots.
"""

from whisper_framework.save.manager import SaveManager, SaveState

__all__ = ["SaveManager", "SaveState"]
