"""
Narrative tuning - timing defaults, seed variables and clamps.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from whisper_engine.core.errors import ContentError
from whisper_engine.resources.database import read_json


class NarrativeConfig(BaseModel):
    """
    Core tuning values.

    Attributes:
        end_node_grace_seconds: Auto-close delay for end nodes whose
            display_duration is not positive
        default_sky_duration: Sky transition time when a sky command
            gives none
        default_camera_hold: Focus hold when a cam command gives no
            duration (0 = hold until released)
        post_solve_camera_hold: Delay before a solved puzzle releases
            the camera
        quicksave_slot: Slot used by a bare "save" command
        int_defaults / bool_defaults / string_defaults: Seed values
            applied whenever the variable store is reset
        int_clamps: Inclusive (min, max) bounds enforced on int writes
    """

    model_config = ConfigDict(extra='forbid', validate_assignment=True)

    end_node_grace_seconds: float = Field(default=3.0, gt=0)
    default_sky_duration: float = Field(default=5.0, ge=0)
    default_camera_hold: float = Field(default=0.0, ge=0)
    post_solve_camera_hold: float = Field(default=2.0, ge=0)
    quicksave_slot: int = Field(default=0, ge=0)

    int_defaults: dict[str, int] = Field(default_factory=dict)
    bool_defaults: dict[str, bool] = Field(default_factory=dict)
    string_defaults: dict[str, str] = Field(default_factory=dict)
    int_clamps: dict[str, tuple[int, int]] = Field(
        default_factory=lambda: {"sanity": (0, 100)}
    )

    @field_validator('int_clamps')
    @classmethod
    def _check_clamps(cls, value: dict[str, tuple[int, int]]) -> dict[str, tuple[int, int]]:
        for key, (low, high) in value.items():
            if low > high:
                raise ValueError(f"clamp for '{key}' has min {low} > max {high}")
        return {key.strip().lower(): bounds for key, bounds in value.items()}

    @classmethod
    def from_file(cls, path: Path | str) -> NarrativeConfig:
        """Load a config from JSON, raising ContentError when invalid."""
        data = read_json(path)
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ContentError(f"invalid narrative config: {e}", str(path)) from e
