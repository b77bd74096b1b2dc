"""
Preferences - User settings persisted through QSettings.

Values come back from QSettings as strings on some platforms, so every
getter coerces to the expected type and falls back to the default.
"""

from PyQt6.QtCore import QSettings

ORGANIZATION = "CircuitSim"
APPLICATION = "Circuit Sandbox"

DEFAULTS = {
    "history/max_states": 50,
    "simulation/tick_interval_ms": 16,
    "autosave/enabled": True,
    "autosave/interval": 60,
}


class Preferences:
    """Typed access to the sandbox's QSettings keys."""

    def __init__(self):
        self._settings = QSettings(ORGANIZATION, APPLICATION)

    def _get_int(self, key: str) -> int:
        value = self._settings.value(key)
        if value is None:
            return DEFAULTS[key]
        try:
            return int(value)
        except (TypeError, ValueError):
            return DEFAULTS[key]

    def _get_bool(self, key: str) -> bool:
        value = self._settings.value(key)
        if value is None:
            return DEFAULTS[key]
        return value == "true" or value is True

    @property
    def max_history_states(self) -> int:
        return max(1, self._get_int("history/max_states"))

    @max_history_states.setter
    def max_history_states(self, value: int) -> None:
        self._settings.setValue("history/max_states", int(value))

    @property
    def tick_interval_ms(self) -> int:
        return max(1, self._get_int("simulation/tick_interval_ms"))

    @tick_interval_ms.setter
    def tick_interval_ms(self, value: int) -> None:
        self._settings.setValue("simulation/tick_interval_ms", int(value))

    @property
    def autosave_enabled(self) -> bool:
        return self._get_bool("autosave/enabled")

    @autosave_enabled.setter
    def autosave_enabled(self, value: bool) -> None:
        self._settings.setValue("autosave/enabled", bool(value))

    @property
    def autosave_interval(self) -> int:
        """Seconds between auto-saves."""
        return max(1, self._get_int("autosave/interval"))

    @autosave_interval.setter
    def autosave_interval(self, value: int) -> None:
        self._settings.setValue("autosave/interval", int(value))

    def reset(self) -> None:
        for key, value in DEFAULTS.items():
            self._settings.setValue(key, value)
