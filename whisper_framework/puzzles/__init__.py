"""
Puzzles module - solved/failed command lists.
"""

from whisper_framework.puzzles.controller import PuzzleConfig, PuzzleController, has_camera_command

__all__ = ["PuzzleConfig", "PuzzleController", "has_camera_command"]
