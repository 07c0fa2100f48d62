"""Content loading and schema validation."""

from whisper_engine.resources.database import ContentDatabase, read_json

__all__ = ["ContentDatabase", "read_json"]
