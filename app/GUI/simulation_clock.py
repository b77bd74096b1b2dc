"""
Qt timers that drive the simulation loop and periodic auto-save.

Both wrap a single lazily created QTimer that is reused across
start/stop cycles.
"""

import logging

from controllers.preferences import Preferences
from PyQt6.QtCore import QTimer

logger = logging.getLogger(__name__)


class SimulationClock:
    """Calls SimulationController.tick() at the configured frame interval."""

    def __init__(self, simulation_ctrl, preferences=None, on_tick=None):
        self.simulation_ctrl = simulation_ctrl
        self.preferences = preferences or Preferences()
        self.on_tick = on_tick
        self._timer = None

    @property
    def interval_ms(self) -> int:
        return self.preferences.tick_interval_ms

    def is_active(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def start(self) -> None:
        """Start ticking; the timer is created on first use."""
        if self._timer is None:
            self._timer = QTimer()
            self._timer.timeout.connect(self._tick)
        self._timer.start(self.interval_ms)
        logger.debug("Simulation clock started at %d ms", self.interval_ms)

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()

    def _tick(self) -> None:
        result = self.simulation_ctrl.tick(self.interval_ms / 1000.0)
        if self.on_tick is not None:
            self.on_tick(result)


class AutoSaveTimer:
    """Periodically writes the recovery file while the circuit is non-empty."""

    def __init__(self, file_ctrl, preferences=None):
        self.file_ctrl = file_ctrl
        self.preferences = preferences or Preferences()
        self._timer = None

    def start(self) -> None:
        """Start or restart using the configured interval; a no-op when disabled."""
        if self._timer is None:
            self._timer = QTimer()
            self._timer.timeout.connect(self.save_now)
        if not self.preferences.autosave_enabled:
            self._timer.stop()
            return
        self._timer.start(self.preferences.autosave_interval * 1000)

    def stop(self) -> None:
        if self._timer is not None:
            self._timer.stop()

    def save_now(self) -> None:
        if not self.file_ctrl.model.components:
            return
        self.file_ctrl.auto_save()
