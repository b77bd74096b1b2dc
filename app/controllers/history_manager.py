"""
HistoryManager - Snapshot based undo/redo.

Each entry is a deep copy of the circuit document. Restoring an entry
stops any running simulation first, then reloads the model in place.
"""

import copy
import json
import logging
from typing import Any, Optional

from models.circuit import CircuitModel

from .preferences import Preferences

logger = logging.getLogger(__name__)

DEFAULT_MAX_STATES = 50

# Controller events that change what gets saved
RECORDED_EVENTS = {
    "component_added",
    "component_removed",
    "component_rotated",
    "component_moved",
    "component_value_changed",
    "wire_added",
    "wire_removed",
    "circuit_cleared",
}


class HistoryManager:
    """
    Bounded list of circuit snapshots with a cursor.

    The initial state of the model is captured on construction, so the
    first undo always returns to it. Loading a document starts a fresh
    history. Without an explicit max_states the capacity comes from
    Preferences.
    """

    def __init__(self, model: CircuitModel, simulation_ctrl=None, circuit_ctrl=None,
                 max_states: Optional[int] = None, preferences=None):
        self.model = model
        self.simulation_ctrl = simulation_ctrl
        self.circuit_ctrl = circuit_ctrl
        if max_states is None:
            max_states = (preferences or Preferences()).max_history_states
        self.max_states = max(1, max_states)
        self._history: list[dict] = []
        self._index = -1
        self._restoring = False

        self.push_state()
        if circuit_ctrl is not None:
            circuit_ctrl.add_observer(self._on_model_event)

    def _on_model_event(self, event: str, data: Any) -> None:
        if event in RECORDED_EVENTS:
            self.push_state()
        elif event == "model_loaded" and not self._restoring:
            self.clear()

    def push_state(self) -> None:
        """
        Capture the current model.

        A snapshot equal to the one under the cursor is not recorded, so an
        edit that fires several events leaves one entry. Any redo entries
        past the cursor are discarded. Once max_states is reached the oldest
        entry is dropped.
        """
        if self._restoring:
            return

        snapshot = self.model.to_dict()
        if self.current_state() == snapshot:
            return

        if self._index < len(self._history) - 1:
            del self._history[self._index + 1:]

        self._history.append(copy.deepcopy(snapshot))

        if len(self._history) > self.max_states:
            self._history.pop(0)
        else:
            self._index += 1

    def undo(self) -> bool:
        """
        Restore the previous snapshot.

        Returns:
            True if an action was undone, False if there was nothing to undo
        """
        if not self.can_undo():
            return False
        self._restore(self._index - 1)
        logger.info("Undo (%d/%d)", self._index + 1, len(self._history))
        return True

    def redo(self) -> bool:
        """
        Restore the next snapshot.

        Returns:
            True if an action was redone, False if there was nothing to redo
        """
        if not self.can_redo():
            return False
        self._restore(self._index + 1)
        logger.info("Redo (%d/%d)", self._index + 1, len(self._history))
        return True

    def _restore(self, index: int) -> None:
        if self.simulation_ctrl is not None and self.simulation_ctrl.is_running:
            self.simulation_ctrl.stop()

        self._restoring = True
        try:
            self._index = index
            self.model.load_dict(copy.deepcopy(self._history[index]))
            if self.circuit_ctrl is not None:
                self.circuit_ctrl._notify("model_loaded", None)
        finally:
            self._restoring = False

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._history) - 1

    def clear(self) -> None:
        """Forget all history and capture the current model as the new start."""
        self._history.clear()
        self._index = -1
        self.push_state()
        logger.info("History cleared")

    def current_state(self) -> Optional[dict]:
        if 0 <= self._index < len(self._history):
            return self._history[self._index]
        return None

    def get_stats(self) -> dict:
        return {
            "history_size": len(self._history),
            "current_index": self._index,
            "can_undo": self.can_undo(),
            "can_redo": self.can_redo(),
            "memory_bytes": len(json.dumps(self._history)),
        }
