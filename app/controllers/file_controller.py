"""
FileController - Handles circuit file I/O and session persistence.

File dialog interaction is the responsibility of the view layer.
Recent files tracking uses QSettings for cross-session persistence.
Every public operation reports through a FileResult instead of raising.
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from models.circuit import CircuitModel
from PyQt6.QtCore import QSettings

from .preferences import APPLICATION, ORGANIZATION

logger = logging.getLogger(__name__)

AUTOSAVE_FILE = ".circuit_sandbox_autosave.json"
MAX_RECENT_FILES = 10
RECENT_FILES_KEY = "file/recent_files"


@dataclass
class FileResult:
    """Outcome of a persistence operation."""

    success: bool
    message: str = ""
    path: Optional[Path] = None

    def __bool__(self) -> bool:
        return self.success


def validate_circuit_data(data) -> None:
    """
    Validate the shape of a circuit document before loading.

    Individual entries of an unknown kind are not an error here; the model
    skips them on load.

    Raises:
        ValueError: with a descriptive message if the shape is wrong.
    """
    if not isinstance(data, dict):
        raise ValueError("File does not contain a valid circuit object.")

    if "components" not in data or not isinstance(data["components"], list):
        raise ValueError("Missing or invalid 'components' list.")
    if "wires" not in data or not isinstance(data["wires"], list):
        raise ValueError("Missing or invalid 'wires' list.")

    for i, comp in enumerate(data["components"]):
        if not isinstance(comp, dict):
            raise ValueError(f"Component #{i + 1} is not an object.")
        for key in ("id", "type"):
            if key not in comp:
                raise ValueError(f"Component #{i + 1} is missing required field '{key}'.")

    for i, wire in enumerate(data["wires"]):
        if not isinstance(wire, dict):
            raise ValueError(f"Wire #{i + 1} is not an object.")
        for key in ("from", "to"):
            if not isinstance(wire.get(key), dict):
                raise ValueError(f"Wire #{i + 1} is missing required field '{key}'.")


class FileController:
    """
    Manages circuit file I/O and session persistence.

    Loading replaces the shared model in place so the engine, validator and
    views keep their references. A running simulation is stopped first.
    """

    def __init__(
        self,
        model: Optional[CircuitModel] = None,
        circuit_ctrl=None,
        simulation_ctrl=None,
        autosave_file=None,
    ):
        self.model = model or CircuitModel()
        self.circuit_ctrl = circuit_ctrl
        self.simulation_ctrl = simulation_ctrl
        self.current_file: Optional[Path] = None
        self._dirty = False
        if autosave_file is None:
            autosave_file = Path.home() / AUTOSAVE_FILE
        self._autosave_file = Path(autosave_file)

        if circuit_ctrl is not None:
            circuit_ctrl.add_observer(self._on_model_event)

    def _on_model_event(self, event: str, data) -> None:
        if event in ("component_added", "component_removed", "component_rotated", "component_moved",
                     "component_value_changed", "wire_added", "wire_removed", "circuit_cleared"):
            self._dirty = True

    def _notify(self, event: str) -> None:
        if self.circuit_ctrl:
            self.circuit_ctrl._notify(event, None)

    def _stop_simulation(self) -> None:
        if self.simulation_ctrl is not None and self.simulation_ctrl.is_running:
            self.simulation_ctrl.stop()

    # --- Document lifecycle ---

    def new_circuit(self) -> None:
        """Clear the circuit and reset file state."""
        self._stop_simulation()
        self.model.clear()
        self.current_file = None
        self._notify("circuit_cleared")
        self._dirty = False

    def save_circuit(self, filepath) -> FileResult:
        """Save circuit to a JSON file and make it the current file."""
        filepath = Path(filepath)
        result = self.export_json(filepath)
        if not result.success:
            return result

        self.current_file = filepath
        self._dirty = False
        self.add_recent_file(filepath)
        logger.info("Saved circuit to %s", filepath)
        self._notify("model_saved")
        return result

    def load_circuit(self, filepath) -> FileResult:
        """
        Load a circuit from a JSON file.

        Validates the document before touching the model, so a bad file
        leaves the current circuit as it was.
        """
        filepath = Path(filepath)
        try:
            data = self._read_document(filepath)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logger.error("Failed to load %s: %s", filepath, e)
            return FileResult(False, f"Could not load circuit: {e}", filepath)

        self._replace_model(data)
        self.current_file = filepath
        self._dirty = False
        self.add_recent_file(filepath)
        logger.info("Loaded circuit from %s", filepath)
        self._notify("model_loaded")
        return FileResult(True, f"Loaded {filepath.name}", filepath)

    def _read_document(self, filepath: Path) -> dict:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
        validate_circuit_data(data)
        return data

    def _replace_model(self, data: dict) -> None:
        self._stop_simulation()
        self.model.load_dict(data)

    # --- JSON export / import ---

    def export_json(self, filepath) -> FileResult:
        """Write the circuit document without changing the current file."""
        filepath = Path(filepath)
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(self.model.to_dict(), f, indent=2)
        except (OSError, TypeError) as e:
            logger.error("Failed to write %s: %s", filepath, e)
            return FileResult(False, f"Could not save circuit: {e}", filepath)
        return FileResult(True, f"Saved {filepath.name}", filepath)

    def import_json(self, text: str) -> FileResult:
        """Load a circuit document from a JSON string (clipboard, paste box)."""
        try:
            data = json.loads(text)
            validate_circuit_data(data)
        except (json.JSONDecodeError, ValueError, TypeError) as e:
            logger.error("Failed to import circuit: %s", e)
            return FileResult(False, f"Invalid circuit data: {e}")

        self._replace_model(data)
        self.current_file = None
        self._dirty = True
        self._notify("model_loaded")
        return FileResult(True, "Circuit imported")

    def to_json(self) -> str:
        return json.dumps(self.model.to_dict(), indent=2)

    # --- Dirty tracking ---

    def has_file(self) -> bool:
        """Return whether a current file path is set (for quick-save)."""
        return self.current_file is not None

    def mark_dirty(self) -> None:
        self._dirty = True

    def mark_clean(self) -> None:
        self._dirty = False

    def has_unsaved_changes(self) -> bool:
        return self._dirty

    def get_window_title(self, base: str = "Circuit Sandbox") -> str:
        """Get window title based on current file; unsaved changes add a '*'."""
        title = f"{base} - {self.current_file.name}" if self.current_file else base
        if self._dirty:
            title += " *"
        return title

    # --- Recent files ---

    def get_recent_files(self) -> List[str]:
        """
        Get list of recently opened files from QSettings.

        Returns:
            List of file paths (most recent first), with non-existent files removed.
        """
        settings = QSettings(ORGANIZATION, APPLICATION)
        recent = settings.value(RECENT_FILES_KEY, [])

        if not isinstance(recent, list):
            recent = []

        existing = [f for f in recent if os.path.exists(f)]
        if len(existing) != len(recent):
            settings.setValue(RECENT_FILES_KEY, existing)

        return existing

    def add_recent_file(self, filepath: Path) -> None:
        """Move a file to the front of the recent files list."""
        filepath_str = str(Path(filepath).absolute())
        recent = self.get_recent_files()

        if filepath_str in recent:
            recent.remove(filepath_str)
        recent.insert(0, filepath_str)

        settings = QSettings(ORGANIZATION, APPLICATION)
        settings.setValue(RECENT_FILES_KEY, recent[:MAX_RECENT_FILES])

    def clear_recent_files(self) -> None:
        settings = QSettings(ORGANIZATION, APPLICATION)
        settings.setValue(RECENT_FILES_KEY, [])

    # ------------------------------------------------------------------
    # Auto-save and crash recovery
    # ------------------------------------------------------------------

    def auto_save(self) -> FileResult:
        """Save circuit to the auto-save recovery file.

        Unlike save_circuit(), this does NOT update current_file, the dirty
        flag or recent files.
        """
        data = self.model.to_dict()
        data["_autosave_source"] = str(self.current_file) if self.current_file else ""
        try:
            with open(self._autosave_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        except (OSError, TypeError) as e:
            logger.error("Auto-save failed: %s", e)
            return FileResult(False, f"Auto-save failed: {e}", self._autosave_file)
        logger.debug("Auto-saved to %s", self._autosave_file)
        return FileResult(True, "Auto-saved", self._autosave_file)

    def has_auto_save(self) -> bool:
        """Return True if an auto-save recovery file exists."""
        return self._autosave_file.exists()

    def load_auto_save(self) -> FileResult:
        """Load circuit from the auto-save recovery file.

        On success, `path` is the file the auto-save was based on, or None
        if it was an unsaved circuit.
        """
        try:
            with open(self._autosave_file, "r", encoding="utf-8") as f:
                data = json.load(f)
            source_path = data.pop("_autosave_source", "") if isinstance(data, dict) else ""
            validate_circuit_data(data)
        except (OSError, json.JSONDecodeError, ValueError) as e:
            logger.error("Failed to recover auto-save: %s", e)
            return FileResult(False, f"Could not recover auto-save: {e}")

        self._replace_model(data)
        self.current_file = Path(source_path) if source_path else None
        self._dirty = True
        self._notify("model_loaded")
        return FileResult(True, "Recovered auto-save", self.current_file)

    def clear_auto_save(self) -> None:
        """Delete the auto-save recovery file if it exists."""
        try:
            self._autosave_file.unlink(missing_ok=True)
        except OSError as e:
            logger.error("Could not remove auto-save file: %s", e)
