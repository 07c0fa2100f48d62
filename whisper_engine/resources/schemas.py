"""
Built-in JSON schemas for authored content.

A file named after the schema key in <data_path>/schemas/ overrides
the built-in copy.
"""

from __future__ import annotations

from typing import Any

_COMMAND_LIST = {"type": "array", "items": {"type": "string"}}

IMPACT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["variable", "change"],
    "properties": {
        "variable": {"type": "string", "minLength": 1},
        "change": {"type": "integer"},
        "condition": {"type": ["string", "null"]},
    },
    "additionalProperties": False,
}

CHOICE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["text"],
    "properties": {
        "text": {"type": "string"},
        "next": {"type": ["string", "null"]},
        "condition": {"type": ["string", "null"]},
        "has_condition": {"type": "boolean"},
        "impacts": {"type": "array", "items": IMPACT_SCHEMA},
    },
    "additionalProperties": False,
}

NODE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "speaker": {"type": ["string", "null"]},
        "text": {"type": "string"},
        "voice": {"type": ["string", "null"]},
        "voice_delay": {"type": "number", "minimum": 0},
        "choices": {"type": ["array", "null"], "items": CHOICE_SCHEMA},
        "next": {"type": ["string", "null"]},
        "on_enter": _COMMAND_LIST,
        "on_exit": _COMMAND_LIST,
        "end": {"type": "boolean"},
        "duration": {"type": "number"},
    },
    "additionalProperties": False,
}

DIALOG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "nodes"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "start": {"type": ["string", "null"]},
        "typewriter_speed": {"type": "number", "exclusiveMinimum": 0},
        "auto_advance_single_choice": {"type": "boolean"},
        "speakers": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id"],
                "properties": {
                    "id": {"type": "string"},
                    "name": {"type": "string"},
                    "portrait": {"type": ["string", "null"]},
                },
            },
        },
        "nodes": {"type": "array", "items": NODE_SCHEMA},
    },
}

JOURNAL_PAGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "title": {"type": "string"},
        "sort_order": {"type": "integer"},
        "text": {"type": "string"},
        "unlocked_by_default": {"type": "boolean"},
        "unlock_condition": {"type": "string"},
        "unlock_flag": {"type": "string"},
    },
}

PUZZLE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "on_solved": _COMMAND_LIST,
        "on_failed": _COMMAND_LIST,
        "solved_flag": {"type": ["string", "null"]},
        "reset_delay": {"type": "number", "minimum": 0},
    },
}

BUILTIN_SCHEMAS: dict[str, dict[str, Any]] = {
    "dialog.schema.json": DIALOG_SCHEMA,
    "journal.schema.json": JOURNAL_PAGE_SCHEMA,
    "puzzle.schema.json": PUZZLE_SCHEMA,
}
