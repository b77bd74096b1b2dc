"""
ComponentData - Pure Python data model for sandbox components.

This module contains no Qt dependencies. All positions are represented as
tuples (x, y).

Component types use display names as canonical identifiers:
'Battery', 'Resistor', 'LED', 'Diode', 'Switch', 'Ground',
'Battery Pack', 'Raspberry Pi', 'Motor Controller', 'DC Motor'

The set of kinds is closed. Kind-specific behaviour (presentation update,
property display, persisted fields) is looked up in the per-type tables
at the bottom of this module rather than through subclassing.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional

# Component type definitions using display names (canonical)
COMPONENT_TYPES = [
    "Battery",
    "Resistor",
    "LED",
    "Diode",
    "Switch",
    "Ground",
    "Battery Pack",
    "Raspberry Pi",
    "Motor Controller",
    "DC Motor",
]

# Prefix used when generating component ids (B1, R2, LED1, ...)
COMPONENT_SYMBOLS = {
    "Battery": "B",
    "Resistor": "R",
    "LED": "LED",
    "Diode": "D",
    "Switch": "S",
    "Ground": "GND",
    "Battery Pack": "BP",
    "Raspberry Pi": "PI",
    "Motor Controller": "MC",
    "DC Motor": "M",
}

# Keys written to the 'type' field of saved circuit documents
_DISPLAY_TO_KEY = {
    "Battery": "battery",
    "Resistor": "resistor",
    "LED": "led",
    "Diode": "diode",
    "Switch": "switch",
    "Ground": "ground",
    "Battery Pack": "batteryPackAA",
    "Raspberry Pi": "raspberryPi",
    "Motor Controller": "motorController",
    "DC Motor": "dcMotor",
}
_KEY_TO_DISPLAY = {key: display for display, key in _DISPLAY_TO_KEY.items()}

ROBOTICS_TYPES = {"Battery Pack", "Raspberry Pi", "Motor Controller", "DC Motor"}

# --- Electrical constants ---

VOLTAGE_OPTIONS = [3.0, 6.0, 9.0]
DEFAULT_VOLTAGE_INDEX = 1

# Standard decade values in ohms
RESISTANCE_OPTIONS = [10, 47, 100, 220, 330, 470, 1000, 2200, 4700, 10000, 47000, 100000]
DEFAULT_RESISTANCE_INDEX = 4

LED_COLORS = ["red", "green", "blue", "yellow", "white"]
LED_RGB = {
    "red": (239, 68, 68),
    "green": (34, 197, 94),
    "blue": (59, 130, 246),
    "yellow": (250, 204, 21),
    "white": (255, 255, 255),
}

BATTERY_PACK_VOLTAGE = 6.0

LED_FORWARD_VOLTAGE = 2.0
LED_MAX_CURRENT = 0.020
LED_BURNOUT_CURRENT = 0.030
LED_ON_THRESHOLD = 0.001

DIODE_FORWARD_VOLTAGE = 0.7
DIODE_FORWARD_RESISTANCE = 1.0
DIODE_REVERSE_RESISTANCE = 1e9
DIODE_MAX_CURRENT = 0.1
DIODE_BURNOUT_CURRENT = 0.15

RESISTOR_MAX_POWER = 0.25
RESISTOR_BURNOUT_POWER = 0.5

SWITCH_CLOSED_RESISTANCE = 0.1
SWITCH_OPEN_RESISTANCE = 1e9

COOLING_RATE = 0.5  # temperature units per second
MOTOR_SPIN_RATE = 5.0  # radians per second
ROTATION_STEP = 45


@dataclass(frozen=True)
class Terminal:
    """A named connection point in the component's local, unrotated frame."""

    name: str
    x: float
    y: float
    polarity: Optional[str] = None


TERMINALS = {
    "Battery": (
        Terminal("positive", 30, 0, "+"),
        Terminal("negative", -30, 0, "-"),
    ),
    "Resistor": (
        Terminal("left", -40, 0),
        Terminal("right", 40, 0),
    ),
    "LED": (
        Terminal("anode", -25, 0, "+"),
        Terminal("cathode", 20, 0, "-"),
    ),
    "Diode": (
        Terminal("anode", -25, 0, "+"),
        Terminal("cathode", 20, 0, "-"),
    ),
    "Switch": (
        Terminal("left", -30, 0),
        Terminal("right", 30, 0),
    ),
    "Ground": (Terminal("top", 0, -20),),
    "Battery Pack": (
        Terminal("positive", 45, 0, "+"),
        Terminal("negative", -45, 0, "-"),
    ),
    "Raspberry Pi": (
        Terminal("5V_IN", -50, -15, "+"),
        Terminal("GND", -50, 15, "-"),
        Terminal("GPIO_A", 50, -15),
        Terminal("GPIO_B", 50, 15),
    ),
    "Motor Controller": (
        Terminal("VCC", -40, -40, "+"),
        Terminal("GND", 40, -40, "-"),
        Terminal("IN_A", -60, -15),
        Terminal("IN_B", -60, 15),
        Terminal("OUT_A1", 60, -30),
        Terminal("OUT_A2", 60, -10),
        Terminal("OUT_B1", 60, 10),
        Terminal("OUT_B2", 60, 30),
    ),
    "DC Motor": (
        Terminal("terminal_1", -30, 0),
        Terminal("terminal_2", 30, 0),
    ),
}


class DriveSource(Enum):
    """Which analysis pass last wrote an LED's current this tick."""

    UNSET = "unset"
    ENGINE = "engine"
    VALIDATOR = "validator"


def normalize_type(raw_type: str) -> Optional[str]:
    """Map a saved 'type' key (or a display name) to the display name, or None if unknown."""
    if raw_type in _KEY_TO_DISPLAY:
        return _KEY_TO_DISPLAY[raw_type]
    if raw_type in _DISPLAY_TO_KEY:
        return raw_type
    return None


def type_key(component_type: str) -> str:
    """Return the serialized 'type' key for a display name."""
    return _DISPLAY_TO_KEY[component_type]


def snap_rotation(rotation) -> int:
    """Snap an angle in degrees to the nearest permitted orientation."""
    try:
        rotation = float(rotation)
    except (TypeError, ValueError):
        return 0
    return int(round(rotation / ROTATION_STEP) * ROTATION_STEP) % 360


def _valid_index(value, options, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if 0 <= value < len(options):
        return value
    return default


@dataclass(eq=False)
class ComponentData:
    """
    Pure Python data class representing a sandbox component.

    Selector indices and the switch / GPIO flags are user-editable and
    persisted. Current, voltage, temperature, damage and the presentation
    flags are derived every tick and never persisted. The powered/signal/
    spinning flags are owned by the robot wiring validator and are left
    alone by reset().
    """

    component_id: str
    component_type: str
    position: tuple[float, float] = (0.0, 0.0)
    rotation: int = 0  # degrees, multiple of 45

    # User selectors
    voltage_index: int = DEFAULT_VOLTAGE_INDEX
    resistance_index: int = DEFAULT_RESISTANCE_INDEX
    color_index: int = 0
    closed: bool = False
    gpio_a: bool = False
    gpio_b: bool = False

    # Derived electrical state
    current: float = 0.0
    voltage: float = 0.0
    temperature: float = 0.0
    damaged: bool = False
    drive_source: DriveSource = DriveSource.UNSET

    # Presentation state
    is_on: bool = False
    brightness: float = 0.0
    is_conducting: bool = False
    spin_angle: float = 0.0

    # Validator-owned state
    powered_on: bool = False
    powered: bool = False
    signal_a: bool = False
    signal_b: bool = False
    spinning: bool = False

    def __post_init__(self):
        if self.component_type not in TERMINALS:
            raise ValueError(f"Unknown component type: {self.component_type!r}")
        self.rotation = snap_rotation(self.rotation)
        if self.component_type == "Battery":
            self.voltage = self.source_voltage

    # --- Kind-specific electrical attributes ---

    @property
    def source_voltage(self) -> float:
        if self.component_type == "Battery":
            return VOLTAGE_OPTIONS[self.voltage_index]
        if self.component_type == "Battery Pack":
            return BATTERY_PACK_VOLTAGE
        return 0.0

    @property
    def resistance(self) -> float:
        """Nominal series resistance in ohms (0 for kinds without one)."""
        if self.component_type == "Resistor":
            return float(RESISTANCE_OPTIONS[self.resistance_index])
        if self.component_type == "Switch":
            return SWITCH_CLOSED_RESISTANCE if self.closed else SWITCH_OPEN_RESISTANCE
        if self.component_type == "Diode":
            return DIODE_FORWARD_RESISTANCE if self.is_conducting else DIODE_REVERSE_RESISTANCE
        return 0.0

    @property
    def forward_voltage(self) -> float:
        if self.component_type == "LED":
            return LED_FORWARD_VOLTAGE
        if self.component_type == "Diode":
            return DIODE_FORWARD_VOLTAGE
        return 0.0

    @property
    def max_current(self) -> float:
        if self.component_type == "LED":
            return LED_MAX_CURRENT
        if self.component_type == "Diode":
            return DIODE_MAX_CURRENT
        return 0.0

    @property
    def burnout_current(self) -> float:
        if self.component_type == "LED":
            return LED_BURNOUT_CURRENT
        if self.component_type == "Diode":
            return DIODE_BURNOUT_CURRENT
        return 0.0

    @property
    def power(self) -> float:
        """Power dissipated in the nominal resistance, I^2 * R."""
        return self.current * self.current * self.resistance

    @property
    def led_color(self) -> str:
        return LED_COLORS[self.color_index]

    def is_switch_open(self) -> bool:
        return self.component_type == "Switch" and not self.closed

    def is_robotics(self) -> bool:
        return self.component_type in ROBOTICS_TYPES

    def get_symbol(self) -> str:
        return COMPONENT_SYMBOLS[self.component_type]

    # --- Terminals ---

    def get_terminals(self) -> tuple[Terminal, ...]:
        return TERMINALS[self.component_type]

    def get_terminal_names(self) -> list[str]:
        return [t.name for t in self.get_terminals()]

    def get_terminal(self, name: str) -> Optional[Terminal]:
        for terminal in self.get_terminals():
            if terminal.name == name:
                return terminal
        return None

    def get_terminal_position(self, name: str) -> Optional[tuple[float, float]]:
        """
        Return a terminal position in world coordinates.

        The local offset is rotated by the component's rotation and then
        translated by its position.
        """
        terminal = self.get_terminal(name)
        if terminal is None:
            return None
        rad = math.radians(self.rotation)
        cos_a = math.cos(rad)
        sin_a = math.sin(rad)
        world_x = self.position[0] + terminal.x * cos_a - terminal.y * sin_a
        world_y = self.position[1] + terminal.x * sin_a + terminal.y * cos_a
        return (world_x, world_y)

    def get_terminal_positions(self) -> dict[str, tuple[float, float]]:
        return {t.name: self.get_terminal_position(t.name) for t in self.get_terminals()}

    def get_other_terminal(self, name: str) -> Optional[str]:
        """For two-terminal parts, return the terminal opposite `name`."""
        names = self.get_terminal_names()
        if len(names) != 2 or name not in names:
            return None
        return names[1] if names[0] == name else names[0]

    # --- User edits ---

    def rotate(self, clockwise: bool = True) -> None:
        delta = ROTATION_STEP if clockwise else -ROTATION_STEP
        self.rotation = (self.rotation + delta) % 360

    def cycle_voltage(self) -> None:
        if self.component_type != "Battery":
            return
        self.voltage_index = (self.voltage_index + 1) % len(VOLTAGE_OPTIONS)
        self.voltage = self.source_voltage

    def cycle_resistance(self) -> None:
        if self.component_type != "Resistor":
            return
        self.resistance_index = (self.resistance_index + 1) % len(RESISTANCE_OPTIONS)

    def cycle_color(self) -> None:
        if self.component_type != "LED":
            return
        self.color_index = (self.color_index + 1) % len(LED_COLORS)

    def toggle(self) -> None:
        if self.component_type == "Switch":
            self.closed = not self.closed

    def toggle_gpio(self, pin: str) -> None:
        if self.component_type != "Raspberry Pi":
            return
        if pin == "GPIO_A":
            self.gpio_a = not self.gpio_a
        elif pin == "GPIO_B":
            self.gpio_b = not self.gpio_b

    # --- Per-tick state ---

    def reset(self) -> None:
        """
        Zero the derived electrical state.

        Damage and validator-owned flags survive; a battery gets its
        selected voltage back.
        """
        self.current = 0.0
        self.voltage = self.source_voltage if self.component_type == "Battery" else 0.0
        self.temperature = 0.0
        self.drive_source = DriveSource.UNSET
        self.is_on = False
        self.brightness = 0.0
        self.is_conducting = False

    def clear_damage(self) -> None:
        self.damaged = False

    def update(self, dt: float) -> None:
        """Advance presentation state by dt seconds using this tick's current."""
        if self.temperature > 0:
            self.temperature = max(0.0, self.temperature - dt * COOLING_RATE)
        updater = _UPDATERS.get(self.component_type)
        if updater is not None:
            updater(self, dt)

    def get_properties(self) -> dict[str, str]:
        """Human-readable property table for the properties panel."""
        props = {"Type": self.component_type, "Rotation": f"{self.rotation}°"}
        describe = _DESCRIBERS.get(self.component_type)
        if describe is not None:
            props.update(describe(self))
        return props

    # --- Serialization ---

    def to_dict(self) -> dict:
        """
        Serialize component to dictionary.

        Only user-editable fields are written; derived state is recomputed
        after load.
        """
        data = {
            "id": self.component_id,
            "type": type_key(self.component_type),
            "x": self.position[0],
            "y": self.position[1],
            "rotation": self.rotation,
        }
        for key, attr in _PERSISTED_FIELDS.get(self.component_type, ()):
            data[key] = getattr(self, attr)
        if self.component_type == "LED":
            data["ledColor"] = self.led_color
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ComponentData":
        """
        Deserialize component from dictionary.

        Raises ValueError for an unknown type. Out-of-range selector indices
        fall back to the default and GPIO pins always load low.
        """
        component_type = normalize_type(data.get("type", ""))
        if component_type is None:
            raise ValueError(f"Unknown component type: {data.get('type')!r}")

        component = cls(
            component_id=str(data["id"]),
            component_type=component_type,
            position=(float(data.get("x", 0.0)), float(data.get("y", 0.0))),
            rotation=snap_rotation(data.get("rotation", 0)),
        )

        if component_type == "Battery":
            component.voltage_index = _valid_index(
                data.get("voltageIndex"), VOLTAGE_OPTIONS, DEFAULT_VOLTAGE_INDEX
            )
            component.voltage = component.source_voltage
        elif component_type == "Resistor":
            component.resistance_index = _valid_index(
                data.get("resistanceIndex"), RESISTANCE_OPTIONS, DEFAULT_RESISTANCE_INDEX
            )
        elif component_type == "LED":
            component.color_index = _valid_index(data.get("colorIndex"), LED_COLORS, 0)
        elif component_type == "Switch":
            component.closed = bool(data.get("closed", False))

        return component

    def __repr__(self) -> str:
        return (
            f"ComponentData(id={self.component_id!r}, type={self.component_type!r}, "
            f"pos={self.position}, rot={self.rotation})"
        )


# --- Per-type dispatch tables ---


def _update_led(component: ComponentData, dt: float) -> None:
    if component.current > LED_ON_THRESHOLD and not component.damaged:
        component.is_on = True
        component.brightness = min(component.current / component.max_current, 1.0)
    else:
        component.is_on = False
        component.brightness = 0.0


def _update_resistor(component: ComponentData, dt: float) -> None:
    power = component.power
    if power > 0:
        component.temperature = (power / RESISTOR_MAX_POWER) * 100


def _update_diode(component: ComponentData, dt: float) -> None:
    component.is_conducting = component.voltage >= component.forward_voltage and not component.damaged


def _update_motor(component: ComponentData, dt: float) -> None:
    if component.spinning:
        component.spin_angle += dt * MOTOR_SPIN_RATE
        if component.spin_angle > 2 * math.pi:
            component.spin_angle -= 2 * math.pi


_UPDATERS = {
    "LED": _update_led,
    "Resistor": _update_resistor,
    "Diode": _update_diode,
    "DC Motor": _update_motor,
}


def _milliamps(value: float) -> str:
    return f"{value * 1000:.1f}mA"


def format_resistance(ohms: float) -> str:
    if ohms >= 1000:
        kilo = ohms / 1000
        return f"{int(kilo)}kΩ" if kilo == int(kilo) else f"{kilo:.1f}kΩ"
    return f"{int(ohms)}Ω" if ohms == int(ohms) else f"{ohms:.2f}Ω"


def _describe_battery(c: ComponentData) -> dict:
    return {
        "Voltage": f"{c.source_voltage:g}V",
        "Current Output": _milliamps(c.current),
        "Power": f"{c.source_voltage * c.current:.2f}W",
    }


def _describe_resistor(c: ComponentData) -> dict:
    if c.damaged:
        status = "Burned Out"
    elif c.temperature > 80:
        status = "Hot"
    else:
        status = "Normal"
    return {
        "Resistance": format_resistance(c.resistance),
        "Voltage Drop": f"{c.voltage:.2f}V",
        "Current": _milliamps(c.current),
        "Power": f"{c.power:.3f}W",
        "Load": f"{c.power / RESISTOR_MAX_POWER * 100:.0f}%",
        "Status": status,
    }


def _describe_led(c: ComponentData) -> dict:
    if c.damaged:
        status = "Burned Out"
    elif c.is_on:
        status = "Lit"
    else:
        status = "Off"
    return {
        "Color": c.led_color.capitalize(),
        "Forward Voltage": f"{c.forward_voltage:g}V",
        "Current": _milliamps(c.current),
        "Max Current": f"{c.max_current * 1000:g}mA",
        "Load": f"{c.current / c.max_current * 100:.0f}%",
        "Brightness": f"{c.brightness * 100:.0f}%",
        "Status": status,
    }


def _describe_diode(c: ComponentData) -> dict:
    if c.damaged:
        state = "Burned Out"
    elif c.is_conducting:
        state = "Conducting (Forward Bias)"
    else:
        state = "Blocking (Reverse Bias)"
    return {
        "Forward Voltage": f"{c.forward_voltage:g}V",
        "Voltage Drop": f"{c.voltage:.2f}V",
        "Current": _milliamps(c.current),
        "Max Current": f"{c.max_current * 1000:g}mA",
        "Load": f"{c.current / c.max_current * 100:.0f}%",
        "State": state,
    }


def _describe_switch(c: ComponentData) -> dict:
    return {
        "State": "Closed" if c.closed else "Open",
        "Resistance": "~0Ω" if c.closed else "∞Ω",
        "Current": _milliamps(c.current) if c.closed else "0mA",
        "Action": "Click to " + ("open" if c.closed else "close"),
    }


def _describe_ground(c: ComponentData) -> dict:
    return {"Voltage": "0V (reference)"}


def _describe_pack(c: ComponentData) -> dict:
    return {"Voltage": f"{BATTERY_PACK_VOLTAGE:g}V", "Cells": "4 x AA"}


def _describe_pi(c: ComponentData) -> dict:
    return {
        "Power": "On" if c.powered_on else "Off",
        "GPIO A": "HIGH" if c.gpio_a else "LOW",
        "GPIO B": "HIGH" if c.gpio_b else "LOW",
    }


def _describe_controller(c: ComponentData) -> dict:
    return {
        "Power": "On" if c.powered else "Off",
        "Signal A": "Active" if c.signal_a else "Idle",
        "Signal B": "Active" if c.signal_b else "Idle",
    }


def _describe_motor(c: ComponentData) -> dict:
    return {"State": "Spinning" if c.spinning else "Stopped"}


_DESCRIBERS = {
    "Battery": _describe_battery,
    "Resistor": _describe_resistor,
    "LED": _describe_led,
    "Diode": _describe_diode,
    "Switch": _describe_switch,
    "Ground": _describe_ground,
    "Battery Pack": _describe_pack,
    "Raspberry Pi": _describe_pi,
    "Motor Controller": _describe_controller,
    "DC Motor": _describe_motor,
}

# (document key, attribute) pairs persisted per type
_PERSISTED_FIELDS = {
    "Battery": (("voltageIndex", "voltage_index"),),
    "Resistor": (("resistanceIndex", "resistance_index"),),
    "LED": (("colorIndex", "color_index"),),
    "Switch": (("closed", "closed"),),
    "Raspberry Pi": (("gpioA", "gpio_a"), ("gpioB", "gpio_b")),
}
