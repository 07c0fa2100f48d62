"""
Camera module - logical focus points.
"""

from whisper_framework.camera.focus import CameraFocusController, FocusPoint

__all__ = ["CameraFocusController", "FocusPoint"]
