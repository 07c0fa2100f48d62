"""
Environment module - sky mood transitions.
"""

from whisper_framework.environment.sky import SkyController, BLOOD_SKY, NIGHT_SKY

__all__ = ["SkyController", "BLOOD_SKY", "NIGHT_SKY"]
