"""
Integration tests for editing, ticking and undoing on one shared model.

Everything goes through the controllers the way a view would drive them.
"""

import json

import pytest
from controllers.circuit_controller import CircuitController
from controllers.file_controller import FileController
from controllers.history_manager import HistoryManager
from controllers.simulation_controller import SimulationController
from models.circuit import CircuitModel
from models.effects import EffectKind, EffectLog


@pytest.fixture
def session():
    model = CircuitModel()
    cc = CircuitController(model)
    log = EffectLog()
    sim = SimulationController(model, cc, log)
    history = HistoryManager(model, sim, cc)
    return model, cc, sim, history, log


class TestBuildAndRun:
    def test_build_led_circuit_then_light_it(self, session):
        model, cc, sim, _, _ = session
        cc.add_component("Battery")
        cc.add_component("Resistor")
        cc.add_component("LED")
        cc.add_component("Ground")
        cc.add_wire("B1", "positive", "R1", "left")
        cc.add_wire("R1", "right", "LED1", "anode")
        cc.add_wire("LED1", "cathode", "GND1", "top")
        cc.cycle_voltage("B1")

        sim.start()
        sim.tick()

        led = model.components["LED1"]
        assert led.is_on is True
        assert sim.insights()[0].title == "Perfect!"

    def test_switch_gates_current(self, switched_circuit):
        cc = CircuitController(switched_circuit)
        sim = SimulationController(switched_circuit, cc)
        sim.start()
        assert sim.tick().paths == []

        cc.toggle_switch("S1")
        result = sim.tick()
        assert len(result.paths) == 1
        assert switched_circuit.components["R1"].current > 0

    def test_burnout_then_undo_restores_fresh_led(self, session):
        model, cc, sim, history, log = session
        cc.add_component("Battery")
        cc.add_component("LED")
        cc.add_component("Ground")
        cc.add_wire("B1", "positive", "LED1", "anode")
        cc.add_wire("LED1", "cathode", "GND1", "top")
        cc.cycle_voltage("B1")

        sim.start()
        sim.tick()
        assert model.components["LED1"].damaged is True
        assert EffectKind.SMOKE_PLUME in log.effects[0].kinds()

        history.undo()
        assert sim.is_running is False
        assert model.components["LED1"].damaged is False


class TestRobotFlow:
    def test_gpio_drives_motor(self, robot_harness):
        cc = CircuitController(robot_harness)
        sim = SimulationController(robot_harness, cc)
        sim.start()
        sim.tick()
        assert robot_harness.components["M1"].spinning is False

        cc.toggle_gpio("PI1", "GPIO_A")
        sim.tick()
        assert robot_harness.components["M1"].spinning is True
        assert robot_harness.components["M2"].spinning is False

    def test_removing_wire_updates_checklist(self, robot_harness):
        cc = CircuitController(robot_harness)
        sim = SimulationController(robot_harness, cc)
        sim.tick()
        assert sim.validator.is_complete()

        cc.remove_wire(robot_harness.wires[-1].wire_id)
        sim.tick()
        assert not sim.validator.is_complete()
        assert sim.get_checklist()[-1].connected is False


class TestHistoryAcrossFiles:
    def test_undo_after_load_stays_on_loaded_circuit(self, session, tmp_path):
        model, cc, sim, history, _ = session
        filepath = tmp_path / "led_only.json"
        filepath.write_text(json.dumps({"components": [{"id": "LED1", "type": "led"}], "wires": []}))
        file_ctrl = FileController(model, cc, sim)

        cc.add_component("Battery")
        cc.add_component("Resistor")
        assert file_ctrl.load_circuit(filepath).success

        assert history.undo() is False
        assert list(model.components) == ["LED1"]

        cc.add_component("Ground")
        assert history.undo() is True
        assert list(model.components) == ["LED1"]
        assert history.redo() is True
        assert set(model.components) == {"LED1", "GND1"}
