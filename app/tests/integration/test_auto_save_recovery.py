"""Integration tests for auto-save and crash recovery.

Verifies the round-trip lifecycle through FileController and AutoSaveTimer:
  auto_save -> has_auto_save -> load_auto_save -> clear_auto_save
"""

import json
from unittest.mock import MagicMock

import pytest
from controllers.circuit_controller import CircuitController
from controllers.file_controller import FileController
from controllers.simulation_controller import SimulationController
from GUI.simulation_clock import AutoSaveTimer
from models.circuit import CircuitModel


def _build_session(autosave_file):
    """Build a battery-resistor-ground circuit through the controllers."""
    model = CircuitModel()
    cc = CircuitController(model)
    fc = FileController(model, circuit_ctrl=cc, autosave_file=autosave_file)

    cc.add_component("Battery", (0, 0))
    cc.add_component("Resistor", (100, 0))
    cc.add_component("Ground", (200, 0))
    cc.add_wire("B1", "positive", "R1", "left")
    cc.add_wire("R1", "right", "GND1", "top")
    return model, cc, fc


@pytest.fixture
def autosave_file(tmp_path):
    return tmp_path / "autosave.json"


class TestRecoveryLifecycle:
    def test_full_cycle(self, autosave_file):
        model, _, fc = _build_session(autosave_file)
        assert fc.auto_save().success
        assert fc.has_auto_save()

        recovered_model = CircuitModel()
        recovered = FileController(recovered_model, autosave_file=autosave_file)
        result = recovered.load_auto_save()
        assert result.success
        assert recovered_model.to_dict() == model.to_dict()
        assert recovered.has_unsaved_changes()

        recovered.clear_auto_save()
        assert not autosave_file.exists()

    def test_source_metadata_written(self, autosave_file, tmp_path):
        _, _, fc = _build_session(autosave_file)
        fc.save_circuit(tmp_path / "bench.json")
        fc.auto_save()
        data = json.loads(autosave_file.read_text())
        assert data["_autosave_source"] == str(tmp_path / "bench.json")

    def test_latest_state_wins(self, autosave_file):
        _, cc, fc = _build_session(autosave_file)
        fc.auto_save()
        cc.add_component("LED", (300, 0))
        fc.auto_save()

        recovered = FileController(CircuitModel(), autosave_file=autosave_file)
        recovered.load_auto_save()
        assert "LED1" in recovered.model.components

    def test_corrupted_file_leaves_model_alone(self, autosave_file):
        autosave_file.write_text('{"components": 5}')
        model, _, _ = _build_session(autosave_file.with_name("other.json"))
        fc = FileController(model, autosave_file=autosave_file)
        assert fc.load_auto_save().success is False
        assert len(model.components) == 3


class TestRecoveryWithSimulation:
    def test_recovery_stops_simulation_and_revalidates(self, autosave_file, robot_harness):
        fc = FileController(robot_harness, autosave_file=autosave_file)
        fc.auto_save()

        model = CircuitModel()
        cc = CircuitController(model)
        sim = SimulationController(model, cc)
        recovered = FileController(model, cc, sim)
        recovered._autosave_file = autosave_file
        sim.start()
        sim.tick()

        recovered.load_auto_save()

        assert sim.is_running is False
        assert all(sim.tick().connections)

    def test_timer_save_now_writes_recovery(self, autosave_file):
        _, _, fc = _build_session(autosave_file)
        prefs = MagicMock()
        prefs.autosave_enabled = True
        AutoSaveTimer(fc, prefs).save_now()
        assert fc.has_auto_save()
