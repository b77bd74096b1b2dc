"""
Controllers for Circuit Sandbox.

This package contains controller classes that orchestrate operations
between models and views using an observer pattern. Only the
persistence and preference layers touch Qt (QSettings).
"""

from .circuit_controller import CircuitController
from .file_controller import FileController, FileResult, validate_circuit_data
from .history_manager import HistoryManager
from .preferences import Preferences
from .simulation_controller import SimulationController, TickResult

__all__ = [
    "CircuitController",
    "FileController",
    "FileResult",
    "HistoryManager",
    "Preferences",
    "SimulationController",
    "TickResult",
    "validate_circuit_data",
]
