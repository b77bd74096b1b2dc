"""
simulation/circuit_insights.py

Educational feedback about the circuit on the canvas: wiring mistakes to
fix before simulating, and live readings once the simulation runs.

Nothing here mutates the model.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models.component import LED_BURNOUT_CURRENT, LED_FORWARD_VOLTAGE, RESISTOR_MAX_POWER, ComponentData
from models.wire import WireData

from .path_finder import CircuitPath

LED_TARGET_CURRENT = 0.02
DEFAULT_BATTERY_VOLTAGE = 9.0

# LED current bands in milliamps
LED_HIGH_MA = 25.0
LED_IDEAL_MA = 18.0
LED_SAFE_MA = 10.0

RESISTOR_HOT_PERCENT = 80.0


class InsightLevel(Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


@dataclass
class Insight:
    level: InsightLevel
    title: str
    text: str = ""

    def to_dict(self) -> dict:
        return {"type": self.level.value, "title": self.title, "text": self.text}


def suggest_series_resistor(source_voltage: float,
                            forward_voltage: float = LED_FORWARD_VOLTAGE,
                            target_current: float = LED_TARGET_CURRENT) -> int:
    """R = (V_source - V_led) / I_target, rounded to whole ohms."""
    return round((source_voltage - forward_voltage) / target_current)


def detect_resistor_bypass(paths: list[CircuitPath],
                           leds: list[ComponentData],
                           resistors: list[ComponentData]) -> bool:
    """
    True when some LED is reachable both through a resistor and around it.

    Needs at least two paths and at least one LED and one resistor.
    """
    if len(paths) < 2 or not leds or not resistors:
        return False

    for led in leds:
        with_led = [p for p in paths if p.contains(led)]
        if len(with_led) >= 2 and any(not p.has_type("Resistor") for p in with_led):
            return True

    with_resistor = [p for p in paths if p.has_type("Resistor")]
    without_resistor = [p for p in paths if not p.has_type("Resistor")]
    if with_resistor and without_resistor:
        for led in leds:
            if any(p.contains(led) for p in with_resistor) and any(p.contains(led) for p in without_resistor):
                return True

    return False


def detect_reverse_biased_diode(diodes: list[ComponentData], wires: list[WireData]) -> bool:
    """True if a diode with two or more wires has one arriving at its cathode."""
    for diode in diodes:
        connected = [w for w in wires if w.connects_component(diode.component_id)]
        if len(connected) < 2:
            continue
        for wire in connected:
            if wire.end_component_id == diode.component_id and wire.end_terminal == "cathode":
                return True
    return False


def _robot_insights(validator) -> list[Insight]:
    parts = validator.find_components()
    if validator.is_complete():
        return [Insight(InsightLevel.SUCCESS, "Robot Circuit Complete!",
                        "All components are properly wired. Your robot is ready to go!")]
    if parts.pack is None:
        return [Insight(InsightLevel.INFO, "Add a 4xAA Battery Pack", "It powers your robot circuit.")]
    if parts.pi is None:
        return [Insight(InsightLevel.INFO, "Add a Raspberry Pi", "It controls your motors.")]
    if parts.controller is None:
        return [Insight(InsightLevel.INFO, "Add a Motor Driver",
                        "It connects between the Pi and the motors.")]
    if not parts.motors:
        return [Insight(InsightLevel.INFO, "Add DC Motors", "One or two motors complete your robot.")]
    return [Insight(InsightLevel.INFO, "Wire your robot!",
                    f"{validator.get_progress()} of {validator.get_total()} connections made. "
                    "Check the wiring checklist for what is missing.")]


def _missing_resistor_insights(battery_voltage: float, level: InsightLevel) -> list[Insight]:
    suggested = suggest_series_resistor(battery_voltage)
    return [
        Insight(level, "LED Protection",
                f"Your LED has no current-limiting resistor. Add a {suggested}Ω resistor to protect it."),
        Insight(InsightLevel.INFO, "Resistor formula",
                f"R = ({battery_voltage:g}V - {LED_FORWARD_VOLTAGE:g}V) / {LED_TARGET_CURRENT:g}A = {suggested}Ω"),
    ]


def _live_led_insights(led: ComponentData, has_resistor: bool, current_ma: float,
                       battery_voltage: float) -> list[Insight]:
    if led.damaged:
        hint = "Try a higher resistance resistor." if has_resistor else "Add a resistor to limit current."
        return [Insight(InsightLevel.DANGER, "LED Burned Out!",
                        f"Current exceeded the {LED_BURNOUT_CURRENT * 1000:g}mA limit. {hint}")]
    if not has_resistor and current_ma > 0:
        return [
            Insight(InsightLevel.DANGER, "Danger! LED has no resistor",
                    f"Current: {current_ma:.1f}mA. LEDs burn out at {LED_BURNOUT_CURRENT * 1000:g}mA."),
            _missing_resistor_insights(battery_voltage, InsightLevel.INFO)[1],
        ]
    if current_ma >= LED_HIGH_MA:
        return [Insight(InsightLevel.WARNING, "High Current",
                        f"{current_ma:.1f}mA is near the LED's limit. Consider a larger resistor.")]
    if current_ma >= LED_IDEAL_MA:
        return [Insight(InsightLevel.SUCCESS, "Perfect!",
                        f"Current: {current_ma:.1f}mA. Ideal LED brightness while staying safe.")]
    if current_ma >= LED_SAFE_MA:
        return [Insight(InsightLevel.SUCCESS, "Safe",
                        f"Current: {current_ma:.1f}mA. The LED is safe but dimmer than maximum.")]
    return [Insight(InsightLevel.WARNING, "Low Brightness",
                    f"Current: {current_ma:.1f}mA. Try a smaller resistor for more brightness.")]


def _live_resistor_insights(resistor: ComponentData) -> list[Insight]:
    power = resistor.power
    percent = power / RESISTOR_MAX_POWER * 100
    if resistor.damaged:
        return [Insight(InsightLevel.DANGER, "Resistor Burned Out!",
                        f"Power exceeded its limit. P = I² × R = {power:.2f}W")]
    if percent > RESISTOR_HOT_PERCENT:
        return [Insight(InsightLevel.WARNING, "Resistor Hot!",
                        f"Using {percent:.0f}% of the power rating ({power:.3f}W / {RESISTOR_MAX_POWER:g}W).")]
    return [Insight(InsightLevel.SUCCESS, "Resistor Safe",
                    f"Power: {power:.3f}W ({percent:.0f}% of the {RESISTOR_MAX_POWER:g}W rating).")]


def build_insights(model, simulator, validator=None, paths: Optional[list[CircuitPath]] = None) -> list[Insight]:
    """
    Ordered insights for the current circuit and simulation state.

    Robotics parts switch to harness guidance only. Otherwise the checks run
    from most to least urgent: reverse diode, incomplete circuit, resistor
    bypass, missing resistor, then live readings while running.
    """
    components = list(model.components.values())
    if validator is not None and validator.has_robotics_components():
        return _robot_insights(validator)

    if not components:
        return [Insight(InsightLevel.INFO, "Build a circuit",
                        "Place components to see real-time analysis and learning tips.")]

    batteries = [c for c in components if c.component_type == "Battery"]
    if not batteries:
        return [Insight(InsightLevel.INFO, "Add a Battery", "A battery provides power to your circuit.")]

    leds = [c for c in components if c.component_type == "LED"]
    resistors = [c for c in components if c.component_type == "Resistor"]
    diodes = [c for c in components if c.component_type == "Diode"]
    switches = [c for c in components if c.component_type == "Switch"]
    battery_voltage = batteries[0].source_voltage or DEFAULT_BATTERY_VOLTAGE
    running = simulator.running

    if paths is None:
        paths = simulator.path_finder.find_all_paths()
    complete = len(paths) > 0

    if detect_reverse_biased_diode(diodes, model.wires):
        title = "Simulation Running - No Current Flow!" if running else "Reverse-Biased Diode Detected!"
        return [
            Insight(InsightLevel.DANGER, title,
                    "Your diode is connected backwards and blocks all current."),
            Insight(InsightLevel.INFO, "Diode direction",
                    "Current flows from anode (+) to cathode (-). Reconnect so current enters the anode."),
        ]

    if not complete:
        if running:
            return [Insight(InsightLevel.INFO, "Simulation Running - No Current Flow.",
                            "Check that the circuit is complete and every part is connected.")]
        insights = [Insight(InsightLevel.INFO, "Connect your components!",
                            "Complete the circuit back to the battery or to a ground.")]
        if leds and not resistors:
            insights.append(_missing_resistor_insights(battery_voltage, InsightLevel.WARNING)[0])
        return insights

    if not running:
        if leds and detect_resistor_bypass(paths, leds, resistors):
            return [
                Insight(InsightLevel.DANGER, "Dangerous Bypass Detected!",
                        "A wire bypasses the resistor, so the LED will draw excessive current and burn out."),
                Insight(InsightLevel.INFO, "Parallel paths",
                        "Make sure every path to the LED goes through a resistor."),
            ]
        if leds and not resistors:
            return _missing_resistor_insights(battery_voltage, InsightLevel.DANGER)
        if leds:
            return [Insight(InsightLevel.SUCCESS, "Circuit Ready!",
                            "Your LED has a current-limiting resistor. Start the simulation to light it.")]
        return [Insight(InsightLevel.SUCCESS, "Circuit Ready!",
                        "Start the simulation to see how your circuit behaves.")]

    reading = simulator.last_path
    if reading is None:
        return [Insight(InsightLevel.INFO, "Simulation Running - No Current Flow.",
                        "Check that the circuit is complete and every part is connected.")]

    insights = []
    current_ma = reading.current * 1000
    if leds:
        insights.extend(_live_led_insights(leds[0], bool(resistors), current_ma, battery_voltage))
        if resistors:
            insights.append(Insight(
                InsightLevel.INFO, "Series Circuit",
                f"Total resistance = {resistors[0].resistance:g}Ω + LED (~100Ω equiv) "
                f"= {reading.resistance:.0f}Ω. The same current flows through every part.",
            ))
    elif resistors:
        insights.extend(_live_resistor_insights(resistors[0]))

    if switches:
        if switches[0].closed:
            insights.append(Insight(InsightLevel.INFO, "Switch Closed",
                                    "Current flows. A closed switch acts like a wire."))
        else:
            insights.append(Insight(InsightLevel.INFO, "Switch Open",
                                    "The circuit is broken here. An open switch has ~1GΩ resistance."))

    if len(insights) < 2:
        insights.append(Insight(
            InsightLevel.INFO, "Ohm's Law in action",
            f"V = I × R: {reading.voltage:.1f}V = {current_ma:.1f}mA × {reading.resistance:.0f}Ω",
        ))
    return insights
