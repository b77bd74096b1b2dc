"""Tests for CircuitModel: ids, cascade removal and document load."""

import logging

import pytest
from models.circuit import CircuitModel
from tests.conftest import make_component, make_wire


@pytest.fixture
def model():
    return CircuitModel()


class TestIds:
    def test_ids_use_type_symbol(self, model):
        assert model.create_component("Battery").component_id == "B1"
        assert model.create_component("Battery").component_id == "B2"
        assert model.create_component("Raspberry Pi").component_id == "PI1"
        assert model.create_component("LED").component_id == "LED1"

    def test_counter_skips_loaded_ids(self, model):
        model.add_component(make_component("Resistor", "R5"))
        assert model.create_component("Resistor").component_id == "R6"

    def test_wire_ids_generated(self, model):
        model.add_component(make_component("Battery", "B1"))
        model.add_component(make_component("Ground", "GND1"))
        wire = model.connect("B1", "positive", "GND1", "top")
        assert wire.wire_id == "W1"


class TestRemoval:
    def test_remove_component_cascades_wires(self, series_led_circuit):
        removed = series_led_circuit.remove_component("R1")
        assert len(removed) == 2
        assert "R1" not in series_led_circuit.components
        assert len(series_led_circuit.wires) == 1

    def test_remove_missing_component(self, model):
        assert model.remove_component("nope") == []

    def test_remove_wire_by_identity(self, series_led_circuit):
        wire = series_led_circuit.wires[0]
        assert series_led_circuit.remove_wire(wire) is True
        assert series_led_circuit.remove_wire(wire) is False

    def test_clear(self, series_led_circuit):
        series_led_circuit.clear()
        assert series_led_circuit.components == {}
        assert series_led_circuit.wires == []


class TestQueries:
    def test_components_of_type(self, robot_harness):
        motors = robot_harness.components_of_type("DC Motor")
        assert [m.component_id for m in motors] == ["M1", "M2"]

    def test_find_wire_end(self, series_led_circuit):
        component, terminal = series_led_circuit.find_wire_end("R1", "right")
        assert component.component_id == "LED1"
        assert terminal == "anode"

    def test_find_wire_end_unconnected(self, series_led_circuit):
        assert series_led_circuit.find_wire_end("B1", "negative") is None


class TestDocument:
    def test_round_trip(self, series_led_circuit):
        data = series_led_circuit.to_dict()
        loaded = CircuitModel.from_dict(data)
        assert list(loaded.components) == ["B1", "R1", "LED1", "GND1"]
        assert len(loaded.wires) == 3
        assert loaded.to_dict() == data

    def test_document_version(self, model):
        assert model.to_dict()["version"] == "1.0"

    def test_unknown_type_skipped(self, caplog):
        data = {
            "components": [
                {"id": "B1", "type": "battery", "x": 0, "y": 0},
                {"id": "Q1", "type": "transistor", "x": 0, "y": 0},
            ],
            "wires": [],
        }
        with caplog.at_level(logging.WARNING):
            loaded = CircuitModel.from_dict(data)
        assert list(loaded.components) == ["B1"]
        assert "transistor" in caplog.text

    def test_wire_to_missing_component_skipped(self):
        data = {
            "components": [{"id": "B1", "type": "battery", "x": 0, "y": 0}],
            "wires": [
                {
                    "id": "W1",
                    "from": {"componentId": "B1", "terminal": "positive"},
                    "to": {"componentId": "GND9", "terminal": "top"},
                }
            ],
        }
        assert CircuitModel.from_dict(data).wires == []

    def test_wire_with_unhashable_endpoint_skipped(self):
        data = {
            "components": [
                {"id": "B1", "type": "battery"},
                {"id": "GND1", "type": "ground"},
            ],
            "wires": [
                {"from": {"componentId": ["B1"], "terminal": "positive"},
                 "to": {"componentId": "GND1", "terminal": "top"}},
                {"from": {"componentId": "B1", "terminal": "negative"},
                 "to": {"componentId": "GND1", "terminal": "top"}},
            ],
        }
        loaded = CircuitModel.from_dict(data)
        assert len(loaded.wires) == 1
        assert loaded.wires[0].start_terminal == "negative"

    def test_numeric_ids_match(self):
        data = {
            "components": [
                {"id": 7, "type": "battery"},
                {"id": 8, "type": "ground"},
            ],
            "wires": [
                {"from": {"componentId": 7, "terminal": "positive"},
                 "to": {"componentId": 8, "terminal": "top"}},
            ],
        }
        loaded = CircuitModel.from_dict(data)
        assert list(loaded.components) == ["7", "8"]
        assert loaded.wires[0].start_component_id == "7"

    def test_load_dict_replaces_in_place(self, series_led_circuit):
        components = series_led_circuit.components
        series_led_circuit.load_dict({"components": [{"id": "S1", "type": "switch", "closed": True}], "wires": []})
        assert series_led_circuit.components is components
        assert list(components) == ["S1"]
        assert components["S1"].closed is True

    def test_load_empty_document(self, series_led_circuit):
        series_led_circuit.load_dict({})
        assert series_led_circuit.components == {}

    def test_add_wire_keeps_explicit_id(self, model):
        model.add_component(make_component("Battery", "B1"))
        model.add_component(make_component("Ground", "GND1"))
        model.add_wire(make_wire("B1", "positive", "GND1", "top", wire_id="W4"))
        assert model.connect("B1", "negative", "GND1", "top").wire_id == "W5"
