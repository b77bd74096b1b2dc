"""
simulation/robot_wiring_validator.py

Fixed-shape checker for the robot harness: one 4xAA battery pack, one
Raspberry Pi, one motor controller and up to two DC motors.

Ten point-to-point slots are checked against the wire list. From those
and the Pi's GPIO pins the validator derives the powered / signal /
spinning flags, and it also lights LEDs wired straight off a GPIO pin.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from models.circuit import CircuitModel
from models.component import ComponentData, DriveSource
from models.effects import DamageEffect, DamageSink, overheat

logger = logging.getLogger(__name__)

GPIO_LOGIC_VOLTAGE = 3.3
SLOT_COUNT = 10
BASE_SLOT_COUNT = 6
SLOTS_PER_MOTOR = 2
MAX_MOTORS = 2


@dataclass(frozen=True)
class WiringSlot:
    """One required terminal-to-terminal connection."""

    label: str
    start_role: str
    start_terminal: str
    end_role: str
    end_terminal: str
    requires: tuple[str, ...]


HARNESS_SLOTS = (
    WiringSlot("Battery (+) → Pi (5V)", "pack", "positive", "pi", "5V_IN", ("pack", "pi")),
    WiringSlot("Battery (-) → Pi (GND)", "pack", "negative", "pi", "GND", ("pack", "pi")),
    WiringSlot("Battery (+) → Controller (VCC)", "pack", "positive", "controller", "VCC",
               ("pack", "pi", "controller")),
    WiringSlot("Battery (-) → Controller (GND)", "pack", "negative", "controller", "GND",
               ("pack", "pi", "controller")),
    WiringSlot("Pi (GPIO A) → Controller (IN_A)", "pi", "GPIO_A", "controller", "IN_A",
               ("pack", "pi", "controller")),
    WiringSlot("Pi (GPIO B) → Controller (IN_B)", "pi", "GPIO_B", "controller", "IN_B",
               ("pack", "pi", "controller")),
    WiringSlot("Controller (A1) → Motor A (1)", "controller", "OUT_A1", "motor_a", "terminal_1",
               ("pack", "pi", "controller", "motor_a")),
    WiringSlot("Controller (A2) → Motor A (2)", "controller", "OUT_A2", "motor_a", "terminal_2",
               ("pack", "pi", "controller", "motor_a")),
    WiringSlot("Controller (B1) → Motor B (1)", "controller", "OUT_B1", "motor_b", "terminal_1",
               ("pack", "pi", "controller", "motor_b")),
    WiringSlot("Controller (B2) → Motor B (2)", "controller", "OUT_B2", "motor_b", "terminal_2",
               ("pack", "pi", "controller", "motor_b")),
)


@dataclass
class HarnessParts:
    """The first pack, Pi and controller on the canvas, plus every motor."""

    pack: Optional[ComponentData] = None
    pi: Optional[ComponentData] = None
    controller: Optional[ComponentData] = None
    motors: list[ComponentData] = field(default_factory=list)

    @property
    def motor_a(self) -> Optional[ComponentData]:
        return self.motors[0] if len(self.motors) > 0 else None

    @property
    def motor_b(self) -> Optional[ComponentData]:
        return self.motors[1] if len(self.motors) > 1 else None

    def role(self, name: str) -> Optional[ComponentData]:
        return getattr(self, name)

    def any_present(self) -> bool:
        return bool(self.pack or self.pi or self.controller or self.motors)


@dataclass
class ChecklistItem:
    label: str
    connected: bool


class RobotWiringValidator:
    """
    Harness checker over a shared CircuitModel.

    `is_running` reports whether the simulation is running; motors only
    spin, and GPIO LEDs only light, while it returns True.
    """

    def __init__(self, model: CircuitModel,
                 is_running: Optional[Callable[[], bool]] = None,
                 effect_sink: Optional[DamageSink] = None):
        self.model = model
        self._is_running = is_running or (lambda: False)
        self.effect_sink = effect_sink
        self.connections = [False] * SLOT_COUNT
        self._last_wire_count = -1
        self._last_component_count = -1

    def find_components(self) -> HarnessParts:
        parts = HarnessParts()
        for component in self.model.components.values():
            ctype = component.component_type
            if ctype == "Battery Pack" and parts.pack is None:
                parts.pack = component
            elif ctype == "Raspberry Pi" and parts.pi is None:
                parts.pi = component
            elif ctype == "Motor Controller" and parts.controller is None:
                parts.controller = component
            elif ctype == "DC Motor":
                parts.motors.append(component)
        return parts

    def has_robotics_components(self) -> bool:
        return self.find_components().any_present()

    def is_connected(self, comp_a: ComponentData, term_a: str,
                     comp_b: ComponentData, term_b: str) -> bool:
        """True if any wire joins the two terminals, in either direction."""
        return any(
            wire.joins(comp_a.component_id, term_a, comp_b.component_id, term_b)
            for wire in self.model.wires
        )

    def invalidate(self) -> None:
        """Force the slot scan on the next validate() call."""
        self._last_wire_count = -1
        self._last_component_count = -1

    def validate(self) -> list[bool]:
        """
        Refresh slots and derived states.

        The slot scan runs only when the wire or component count changed
        since the last scan; derived states are recomputed on every call.
        """
        parts = self.find_components()
        wire_count = len(self.model.wires)
        component_count = len(self.model.components)

        if wire_count != self._last_wire_count or component_count != self._last_component_count:
            self._last_wire_count = wire_count
            self._last_component_count = component_count
            self._recheck_connections(parts)

        self._apply_states(parts)
        return list(self.connections)

    def _recheck_connections(self, parts: HarnessParts) -> None:
        connections = [False] * SLOT_COUNT
        for index, slot in enumerate(HARNESS_SLOTS):
            if not all(parts.role(name) is not None for name in slot.requires):
                continue
            connections[index] = self.is_connected(
                parts.role(slot.start_role), slot.start_terminal,
                parts.role(slot.end_role), slot.end_terminal,
            )
        if connections != self.connections:
            logger.debug("Harness wiring: %d/%d slots connected", sum(connections), SLOT_COUNT)
        self.connections = connections

    def _apply_states(self, parts: HarnessParts) -> None:
        c = self.connections
        pi, controller = parts.pi, parts.controller

        if pi is None:
            if controller is not None:
                controller.powered = False
                controller.signal_a = False
                controller.signal_b = False
            for motor in parts.motors:
                motor.spinning = False
            self._check_gpio_circuits(parts)
            return

        pi.powered_on = c[0] and c[1]

        if controller is None:
            for motor in parts.motors:
                motor.spinning = False
            self._check_gpio_circuits(parts)
            return

        running = self._is_running()
        controller.powered = c[2] and c[3]
        controller.signal_a = c[4] and pi.powered_on and pi.gpio_a
        controller.signal_b = c[5] and pi.powered_on and pi.gpio_b

        if parts.motor_a is not None:
            parts.motor_a.spinning = running and c[6] and c[7] and controller.powered and controller.signal_a
        if parts.motor_b is not None:
            parts.motor_b.spinning = running and c[8] and c[9] and controller.powered and controller.signal_b
        for motor in parts.motors[MAX_MOTORS:]:
            motor.spinning = False

        self._check_gpio_circuits(parts)

    # --- GPIO driven LEDs ---

    def _check_gpio_circuits(self, parts: HarnessParts) -> None:
        """
        Light LEDs wired as GPIO -> resistor -> LED -> Pi GND or
        GPIO -> LED -> resistor -> Pi GND.

        LEDs lit on an earlier call are released first so a broken
        circuit goes dark on the same tick.
        """
        for led in self.model.components_of_type("LED"):
            if led.drive_source is DriveSource.VALIDATOR:
                led.drive_source = DriveSource.UNSET
                led.current = 0.0
                led.is_on = False
                led.brightness = 0.0

        pi = parts.pi
        if pi is None or not pi.powered_on:
            return
        if not self._is_running():
            return

        for terminal, active in (("GPIO_A", pi.gpio_a), ("GPIO_B", pi.gpio_b)):
            if not active:
                continue
            found = self._trace_gpio_led(pi, terminal)
            if found is not None:
                led, resistor = found
                self._activate_gpio_led(led, resistor.resistance)

    def _trace_gpio_led(self, pi: ComponentData, terminal: str):
        """Return (led, resistor) if the pin feeds one of the two accepted shapes."""
        first = self.model.find_wire_end(pi.component_id, terminal)
        if first is None:
            return None
        part, part_terminal = first

        if part.component_type == "Resistor":
            second = self._through_resistor(part, part_terminal)
            if second is not None and second[0].component_type == "LED" and second[1] == "anode":
                led = second[0]
                if self._lands_on_pi_ground(self.model.find_wire_end(led.component_id, "cathode"), pi):
                    return led, part

        if part.component_type == "LED" and part_terminal == "anode":
            second = self.model.find_wire_end(part.component_id, "cathode")
            if second is not None and second[0].component_type == "Resistor":
                resistor = second[0]
                if self._lands_on_pi_ground(self._through_resistor(resistor, second[1]), pi):
                    return part, resistor

        return None

    def _through_resistor(self, resistor: ComponentData, entered: str):
        other = resistor.get_other_terminal(entered)
        if other is None:
            return None
        return self.model.find_wire_end(resistor.component_id, other)

    @staticmethod
    def _lands_on_pi_ground(end, pi: ComponentData) -> bool:
        return end is not None and end[0] is pi and end[1] == "GND"

    def _activate_gpio_led(self, led: ComponentData, resistance: float) -> None:
        if led.damaged:
            return
        drop = GPIO_LOGIC_VOLTAGE - led.forward_voltage
        if drop <= 0 or resistance <= 0:
            return

        current = drop / resistance
        led.current = current
        led.is_on = True
        led.brightness = min(current / led.max_current, 1.0)
        led.drive_source = DriveSource.VALIDATOR

        if current > led.burnout_current:
            led.damaged = True
            self._emit(overheat(led))

    def _emit(self, effect: DamageEffect) -> None:
        logger.warning("%s %s burned out on a GPIO pin", effect.component_type, effect.component_id)
        if self.effect_sink is None:
            return
        try:
            self.effect_sink(effect)
        except (TypeError, AttributeError, RuntimeError) as e:
            logger.error("Error delivering damage effect: %s", e)

    # --- Progress ---

    def get_progress(self) -> int:
        return sum(1 for connected in self.connections if connected)

    def get_total(self) -> int:
        """Slots that apply: 0 without pack, Pi and controller, else 6 plus 2 per motor."""
        parts = self.find_components()
        if parts.pack is None or parts.pi is None or parts.controller is None:
            return 0
        return BASE_SLOT_COUNT + SLOTS_PER_MOTOR * min(len(parts.motors), MAX_MOTORS)

    def is_complete(self) -> bool:
        total = self.get_total()
        return total > 0 and self.get_progress() == total

    def get_checklist(self) -> list[ChecklistItem]:
        motors = len(self.find_components().motors)
        count = BASE_SLOT_COUNT + SLOTS_PER_MOTOR * min(motors, MAX_MOTORS)
        return [
            ChecklistItem(slot.label, self.connections[i])
            for i, slot in enumerate(HARNESS_SLOTS[:count])
        ]
