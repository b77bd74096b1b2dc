"""
Integration tests for saving and loading circuit documents.

Exercises the document format end to end: a hand-written document, a
FileController round trip and reloading into a model the engine and
validator already hold.
"""

import json

import pytest
from controllers.circuit_controller import CircuitController
from controllers.file_controller import FileController
from controllers.simulation_controller import SimulationController
from models.circuit import CircuitModel
from tests.conftest import make_component

BLINK_DOCUMENT = {
    "version": "1.0",
    "components": [
        {"id": "B1", "type": "battery", "x": 0, "y": 0, "rotation": 0, "voltageIndex": 2},
        {"id": "R1", "type": "resistor", "x": 100, "y": 0, "rotation": 90, "resistanceIndex": 4},
        {"id": "LED1", "type": "led", "x": 200, "y": 0, "rotation": 0, "colorIndex": 1, "ledColor": "green"},
        {"id": "GND1", "type": "ground", "x": 300, "y": 0, "rotation": 0},
    ],
    "wires": [
        {"id": "W1", "from": {"componentId": "B1", "terminal": "positive"},
         "to": {"componentId": "R1", "terminal": "left"}, "waypoints": [{"x": 50, "y": -20}]},
        {"id": "W2", "from": {"componentId": "R1", "terminal": "right"},
         "to": {"componentId": "LED1", "terminal": "anode"}, "waypoints": []},
        {"id": "W3", "from": {"componentId": "LED1", "terminal": "cathode"},
         "to": {"componentId": "GND1", "terminal": "top"}, "waypoints": []},
    ],
}


@pytest.fixture
def blink_file(tmp_path):
    filepath = tmp_path / "blink.json"
    filepath.write_text(json.dumps(BLINK_DOCUMENT))
    return filepath


class TestDocumentFormat:
    def test_hand_written_document_loads(self, blink_file):
        ctrl = FileController(CircuitModel())
        assert ctrl.load_circuit(blink_file).success
        model = ctrl.model
        assert model.components["B1"].source_voltage == 9.0
        assert model.components["R1"].resistance == 330
        assert model.components["R1"].rotation == 90
        assert model.components["LED1"].led_color == "green"
        assert model.wires[0].waypoints == [(50.0, -20.0)]

    def test_resave_matches_document(self, blink_file, tmp_path):
        ctrl = FileController(CircuitModel())
        ctrl.load_circuit(blink_file)
        out = tmp_path / "resaved.json"
        ctrl.save_circuit(out)
        saved = json.loads(out.read_text())
        assert [c["id"] for c in saved["components"]] == ["B1", "R1", "LED1", "GND1"]
        assert [w["id"] for w in saved["wires"]] == ["W1", "W2", "W3"]
        assert saved["components"][2]["ledColor"] == "green"

    def test_counters_continue_after_load(self, blink_file):
        model = CircuitModel()
        circuit_ctrl = CircuitController(model)
        FileController(model, circuit_ctrl).load_circuit(blink_file)
        assert circuit_ctrl.add_component("Resistor").component_id == "R2"
        assert circuit_ctrl.add_wire("R2", "left", "GND1", "top").wire_id == "W4"

    def test_unknown_component_and_dangling_wire_skipped(self, tmp_path):
        document = json.loads(json.dumps(BLINK_DOCUMENT))
        document["components"].append({"id": "Q1", "type": "transistor", "x": 0, "y": 0})
        document["wires"].append({"id": "W4", "from": {"componentId": "Q1", "terminal": "base"},
                                  "to": {"componentId": "GND1", "terminal": "top"}})
        filepath = tmp_path / "extra.json"
        filepath.write_text(json.dumps(document))

        ctrl = FileController(CircuitModel())
        assert ctrl.load_circuit(filepath).success
        assert "Q1" not in ctrl.model.components
        assert len(ctrl.model.wires) == 3

    def test_derived_state_not_persisted(self, tmp_path):
        model = CircuitModel()
        led = make_component("LED", "LED1")
        led.damaged = True
        led.current = 0.5
        model.add_component(led)
        ctrl = FileController(model)
        filepath = tmp_path / "led.json"
        ctrl.save_circuit(filepath)

        restored = CircuitModel.from_dict(json.loads(filepath.read_text()))
        assert restored.components["LED1"].damaged is False
        assert restored.components["LED1"].current == 0.0


class TestLoadIntoRunningSession:
    def test_engine_sees_loaded_circuit(self, blink_file):
        model = CircuitModel()
        circuit_ctrl = CircuitController(model)
        sim_ctrl = SimulationController(model, circuit_ctrl)
        file_ctrl = FileController(model, circuit_ctrl, sim_ctrl)

        file_ctrl.load_circuit(blink_file)
        sim_ctrl.start()
        result = sim_ctrl.tick()

        assert [p.component_ids() for p in result.paths] == [["B1", "R1", "LED1", "GND1"]]
        assert model.components["LED1"].is_on is True

    def test_reload_clears_damage(self, led_without_resistor, tmp_path):
        circuit_ctrl = CircuitController(led_without_resistor)
        sim_ctrl = SimulationController(led_without_resistor, circuit_ctrl)
        file_ctrl = FileController(led_without_resistor, circuit_ctrl, sim_ctrl)
        filepath = tmp_path / "burn.json"
        file_ctrl.save_circuit(filepath)

        sim_ctrl.run(2)
        assert led_without_resistor.components["LED1"].damaged is True

        file_ctrl.load_circuit(filepath)
        assert sim_ctrl.is_running is False
        assert led_without_resistor.components["LED1"].damaged is False
