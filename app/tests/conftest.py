"""
Shared test fixtures for the Circuit Sandbox test suite.

All fixtures build pure-Python model objects (no Qt dependencies).
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

# Ensure app/ is on sys.path so bare imports (models, simulation, GUI, controllers)
# work when running individual test files (e.g., python -m pytest app/tests/unit/test_foo.py).
_app_dir = str(Path(__file__).resolve().parent.parent)
if _app_dir not in sys.path:
    sys.path.insert(0, _app_dir)

import pytest
from models.circuit import CircuitModel
from models.component import RESISTANCE_OPTIONS, ComponentData
from models.wire import WireData


@pytest.fixture(autouse=True)
def _isolated_settings():
    """Keep recent-files bookkeeping away from the real QSettings store."""
    with patch("controllers.file_controller.QSettings") as mock_qsettings:
        mock_qsettings.return_value = MagicMock()
        mock_qsettings.return_value.value.return_value = []
        yield mock_qsettings


@pytest.fixture(autouse=True)
def _default_preferences():
    """Preferences read as unset, so every key falls back to its default."""
    with patch("controllers.preferences.QSettings") as mock_qsettings:
        mock_qsettings.return_value = MagicMock()
        mock_qsettings.return_value.value.return_value = None
        yield mock_qsettings


def make_component(component_type, component_id, position=(0.0, 0.0), **kwargs):
    """Helper to create a ComponentData with minimal boilerplate."""
    return ComponentData(
        component_id=component_id,
        component_type=component_type,
        position=position,
        **kwargs,
    )


def make_wire(start_id, start_term, end_id, end_term, wire_id=""):
    """Helper to create a WireData."""
    return WireData(
        wire_id=wire_id,
        start_component_id=start_id,
        start_terminal=start_term,
        end_component_id=end_id,
        end_terminal=end_term,
    )


def build_model(components, wires):
    """Put components and wires into a fresh CircuitModel."""
    model = CircuitModel()
    for component in components:
        model.add_component(component)
    for wire in wires:
        model.add_wire(wire)
    return model


def resistor_index(ohms):
    return RESISTANCE_OPTIONS.index(ohms)


@pytest.fixture
def series_led_circuit():
    """
    B1(+) -- R1 -- LED1 -- GND1

    9 V battery, 330 ohm resistor, red LED.
    """
    return build_model(
        [
            make_component("Battery", "B1", (0, 0), voltage_index=2),
            make_component("Resistor", "R1", (100, 0), resistance_index=resistor_index(330)),
            make_component("LED", "LED1", (200, 0)),
            make_component("Ground", "GND1", (300, 0)),
        ],
        [
            make_wire("B1", "positive", "R1", "left"),
            make_wire("R1", "right", "LED1", "anode"),
            make_wire("LED1", "cathode", "GND1", "top"),
        ],
    )


@pytest.fixture
def led_without_resistor():
    """B1(+) -- LED1 -- GND1 with a 9 V battery."""
    return build_model(
        [
            make_component("Battery", "B1", (0, 0), voltage_index=2),
            make_component("LED", "LED1", (100, 0)),
            make_component("Ground", "GND1", (200, 0)),
        ],
        [
            make_wire("B1", "positive", "LED1", "anode"),
            make_wire("LED1", "cathode", "GND1", "top"),
        ],
    )


@pytest.fixture
def switched_circuit():
    """B1(+) -- S1 (open) -- R1 -- GND1."""
    return build_model(
        [
            make_component("Battery", "B1", (0, 0), voltage_index=2),
            make_component("Switch", "S1", (100, 0)),
            make_component("Resistor", "R1", (200, 0), resistance_index=resistor_index(330)),
            make_component("Ground", "GND1", (300, 0)),
        ],
        [
            make_wire("B1", "positive", "S1", "left"),
            make_wire("S1", "right", "R1", "left"),
            make_wire("R1", "right", "GND1", "top"),
        ],
    )


def _harness_wires(motors=2):
    wires = [
        make_wire("BP1", "positive", "PI1", "5V_IN"),
        make_wire("BP1", "negative", "PI1", "GND"),
        make_wire("BP1", "positive", "MC1", "VCC"),
        make_wire("BP1", "negative", "MC1", "GND"),
        make_wire("PI1", "GPIO_A", "MC1", "IN_A"),
        make_wire("PI1", "GPIO_B", "MC1", "IN_B"),
    ]
    if motors >= 1:
        wires += [
            make_wire("MC1", "OUT_A1", "M1", "terminal_1"),
            make_wire("MC1", "OUT_A2", "M1", "terminal_2"),
        ]
    if motors >= 2:
        wires += [
            make_wire("MC1", "OUT_B1", "M2", "terminal_1"),
            make_wire("MC1", "OUT_B2", "M2", "terminal_2"),
        ]
    return wires


@pytest.fixture
def robot_harness():
    """Fully wired pack, Pi, motor controller and two motors."""
    return build_model(
        [
            make_component("Battery Pack", "BP1", (0, 0)),
            make_component("Raspberry Pi", "PI1", (150, 0)),
            make_component("Motor Controller", "MC1", (300, 0)),
            make_component("DC Motor", "M1", (450, -50)),
            make_component("DC Motor", "M2", (450, 50)),
        ],
        _harness_wires(motors=2),
    )


@pytest.fixture
def gpio_led_circuit():
    """
    Powered Pi driving an LED: GPIO_A -- R1 -- LED1 -- Pi GND.

    The pack only feeds the Pi, so no engine path exists.
    """
    return build_model(
        [
            make_component("Battery Pack", "BP1", (0, 0)),
            make_component("Raspberry Pi", "PI1", (150, 0)),
            make_component("Resistor", "R1", (300, 0), resistance_index=resistor_index(330)),
            make_component("LED", "LED1", (400, 0)),
        ],
        [
            make_wire("BP1", "positive", "PI1", "5V_IN"),
            make_wire("BP1", "negative", "PI1", "GND"),
            make_wire("PI1", "GPIO_A", "R1", "left"),
            make_wire("R1", "right", "LED1", "anode"),
            make_wire("LED1", "cathode", "PI1", "GND"),
        ],
    )
