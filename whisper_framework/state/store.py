"""
Variable store - the single source of truth for narrative state.

Holds boolean flags, integer variables and string variables. Every
other system reads and writes through it and never caches results.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from whisper_engine.core.events import Signal
from whisper_framework.state.conditions import ConditionEvaluator

logger = logging.getLogger(__name__)


@dataclass
class StoreSnapshot:
    """Copy of all three maps, used by save slots."""
    flags: dict[str, bool] = field(default_factory=dict)
    ints: dict[str, int] = field(default_factory=dict)
    strings: dict[str, str] = field(default_factory=dict)


class VariableStore:
    """
    Typed key/value store with change notifications.

    Keys are case-insensitive. Reading a key that was never written
    returns the type's zero value (False, 0, ""). Blank keys are
    rejected with a warning.

    Signals (callbacks receive key, value):
        on_bool_changed, on_int_changed, on_string_changed

    Usage:
        store = VariableStore()
        sub = store.on_int_changed.subscribe(lambda key, value: ...)
        store.add_int("courage", 10)
        store.evaluate_condition("courage >= 10 && !saw_dolls")
        sub.unsubscribe()
    """

    def __init__(
        self,
        int_defaults: Optional[dict[str, int]] = None,
        bool_defaults: Optional[dict[str, bool]] = None,
        string_defaults: Optional[dict[str, str]] = None,
        int_clamps: Optional[dict[str, tuple[int, int]]] = None,
    ):
        self._flags: dict[str, bool] = {}
        self._ints: dict[str, int] = {}
        self._strings: dict[str, str] = {}

        self._int_defaults = dict(int_defaults or {})
        self._bool_defaults = dict(bool_defaults or {})
        self._string_defaults = dict(string_defaults or {})
        self._int_clamps = {
            self._normalize(k): bounds for k, bounds in (int_clamps or {}).items()
        }

        self.conditions = ConditionEvaluator()

        self.on_bool_changed = Signal("bool_changed")
        self.on_int_changed = Signal("int_changed")
        self.on_string_changed = Signal("string_changed")

        self._apply_defaults()

    @classmethod
    def from_config(cls, config) -> VariableStore:
        """Build a store from a NarrativeConfig."""
        return cls(
            int_defaults=config.int_defaults,
            bool_defaults=config.bool_defaults,
            string_defaults=config.string_defaults,
            int_clamps=config.int_clamps,
        )

    # --- Keys ---

    @staticmethod
    def _normalize(key: str | None) -> str:
        return (key or "").strip().lower()

    def _key(self, key: str | None) -> str | None:
        normalized = self._normalize(key)
        if not normalized:
            logger.warning("Attempted to use an empty variable key")
            return None
        return normalized

    # --- Flags ---

    def set_bool(self, key: str, value: bool) -> None:
        self._set_bool(key, value, notify=True)

    def _set_bool(self, key: str, value: bool, notify: bool) -> None:
        k = self._key(key)
        if k is None:
            return
        self._flags[k] = bool(value)
        if notify:
            logger.debug(f"{k} = {self._flags[k]}")
            self.on_bool_changed.emit(k, self._flags[k])

    def get_bool(self, key: str) -> bool:
        return self._flags.get(self._normalize(key), False)

    def toggle_bool(self, key: str) -> None:
        self.set_bool(key, not self.get_bool(key))

    # --- Integers ---

    def set_int(self, key: str, value: int) -> None:
        self._set_int(key, value, notify=True)

    def _set_int(self, key: str, value: int, notify: bool) -> None:
        k = self._key(key)
        if k is None:
            return

        value = int(value)
        bounds = self._int_clamps.get(k)
        if bounds is not None:
            value = max(bounds[0], min(bounds[1], value))

        self._ints[k] = value
        if notify:
            logger.debug(f"{k} = {value}")
            self.on_int_changed.emit(k, value)

    def add_int(self, key: str, delta: int) -> None:
        self.set_int(key, self.get_int(key) + int(delta))

    def get_int(self, key: str) -> int:
        return self._ints.get(self._normalize(key), 0)

    def has_int(self, key: str) -> bool:
        return self._normalize(key) in self._ints

    # --- Strings ---

    def set_string(self, key: str, value: str | None) -> None:
        self._set_string(key, value, notify=True)

    def _set_string(self, key: str, value: str | None, notify: bool) -> None:
        k = self._key(key)
        if k is None:
            return
        self._strings[k] = value or ""
        if notify:
            logger.debug(f"{k} = '{self._strings[k]}'")
            self.on_string_changed.emit(k, self._strings[k])

    def get_string(self, key: str) -> str:
        return self._strings.get(self._normalize(key), "")

    # --- Conditions ---

    def evaluate_condition(self, expression: str | None) -> bool:
        """Evaluate an expression against current values."""
        return self.conditions.evaluate(expression, self)

    # --- Lifecycle ---

    def clear_all(self) -> None:
        """Reset every variable (new game). Seed defaults are re-applied silently."""
        self._flags.clear()
        self._ints.clear()
        self._strings.clear()
        self._apply_defaults()
        logger.info("Variable store cleared")

    def _apply_defaults(self) -> None:
        for key, value in self._int_defaults.items():
            self._set_int(key, value, notify=False)
        for key, value in self._bool_defaults.items():
            self._set_bool(key, value, notify=False)
        for key, value in self._string_defaults.items():
            self._set_string(key, value, notify=False)

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            flags=dict(self._flags),
            ints=dict(self._ints),
            strings=dict(self._strings),
        )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Replace all values with a snapshot (full overwrite, no events)."""
        self._flags.clear()
        self._ints.clear()
        self._strings.clear()
        for key, value in snapshot.flags.items():
            self._set_bool(key, value, notify=False)
        for key, value in snapshot.ints.items():
            self._set_int(key, value, notify=False)
        for key, value in snapshot.strings.items():
            self._set_string(key, value, notify=False)

    # --- Inspection ---

    @property
    def flags(self) -> dict[str, bool]:
        return dict(self._flags)

    @property
    def ints(self) -> dict[str, int]:
        return dict(self._ints)

    @property
    def strings(self) -> dict[str, str]:
        return dict(self._strings)
