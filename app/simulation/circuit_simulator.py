"""
simulation/circuit_simulator.py

Per-path DC engine. Each tick every path is solved on its own with
Ohm's law over a series-resistance sum; there is no nodal solve, so a
component shared by several paths keeps the value from the last path
processed.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Optional

from models.circuit import CircuitModel
from models.component import RESISTOR_BURNOUT_POWER, ComponentData, DriveSource
from models.effects import DamageEffect, DamageSink, diode_burnout, led_burnout, overheat

from .path_finder import CircuitPath, PathFinder

logger = logging.getLogger(__name__)

# Nominal currents used to turn a fixed forward drop into a series resistance
LED_NOMINAL_CURRENT = 0.020
DIODE_NOMINAL_CURRENT = 0.050

MIN_PATH_RESISTANCE = 0.01  # ohms, a dead short
HIGH_CURRENT_THRESHOLD = 1.0  # amps drawn from one battery


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Problem:
    """An advisory record for the UI; never stops the simulation."""

    severity: Severity
    message: str
    component_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"type": self.severity.value, "message": self.message, "component": self.component_id}


@dataclass
class PathReading:
    """Ohm's-law snapshot of the most recently solved path."""

    voltage: float
    current: float
    resistance: float
    power: float


@dataclass
class SimulationStats:
    is_complete: bool
    path_count: int
    active_components: int
    total_components: int
    total_power: float
    running: bool


@dataclass
class PathSummary:
    index: int
    component_count: int
    component_types: list[str]
    total_resistance: float


@dataclass
class CircuitAnalysis:
    stats: SimulationStats
    problems: list[Problem] = field(default_factory=list)
    path_count: int = 0
    paths: list[PathSummary] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "stats": asdict(self.stats),
            "problems": [p.to_dict() for p in self.problems],
            "path_count": self.path_count,
            "paths": [asdict(p) for p in self.paths],
        }


def series_resistance(path: CircuitPath) -> float:
    """
    Sum the series resistance of a path, clamped to MIN_PATH_RESISTANCE.

    Batteries and grounds add nothing. LEDs and diodes add their forward
    voltage over a nominal current. Every wire adds its own resistance.
    """
    total = 0.0
    for component in path.components:
        ctype = component.component_type
        if ctype in ("Battery", "Ground"):
            continue
        if ctype == "LED":
            total += component.forward_voltage / LED_NOMINAL_CURRENT
        elif ctype == "Diode":
            total += component.forward_voltage / DIODE_NOMINAL_CURRENT
        else:
            total += component.resistance
    for wire in path.wires:
        total += wire.resistance
    return max(total, MIN_PATH_RESISTANCE)


class CircuitSimulator:
    """
    Electrical engine over a shared CircuitModel.

    The model and an optional damage-effect sink are injected. The engine
    only writes derived fields (current, voltage, damage, LED drive source)
    on existing components and wires.
    """

    def __init__(self, model: CircuitModel, effect_sink: Optional[DamageSink] = None):
        self.model = model
        self.effect_sink = effect_sink
        self.path_finder = PathFinder(model)
        self.running = False
        self.last_path: Optional[PathReading] = None

    # --- Run state ---

    def start(self) -> None:
        """Heal every component, then mark the simulation running."""
        self.clear_damage()
        self.running = True
        logger.info("Simulation started")

    def stop(self) -> None:
        """Stop, zero all derived state and heal every component."""
        self.running = False
        self.reset_all_components()
        self.clear_damage()
        self.last_path = None
        logger.info("Simulation stopped")

    def toggle(self) -> bool:
        if self.running:
            self.stop()
        else:
            self.start()
        return self.running

    def reset_all_components(self) -> None:
        """Zero currents and voltages everywhere; damage is kept."""
        for component in self.model.components.values():
            component.reset()
        for wire in self.model.wires:
            wire.current = 0.0

    def clear_damage(self) -> None:
        for component in self.model.components.values():
            component.clear_damage()

    # --- Tick ---

    def simulate(self) -> list[CircuitPath]:
        """
        Recompute all electrical state from scratch.

        Returns the paths that were solved (empty when stopped).
        """
        self.reset_all_components()
        self.last_path = None
        if not self.running:
            return []

        paths = self.path_finder.find_all_paths()
        for path in paths:
            self.simulate_path(path)
        return paths

    def simulate_path(self, path: CircuitPath) -> None:
        """Solve one path: current, voltage drops, then safety limits."""
        battery = path.source
        if battery is None:
            return

        voltage = battery.source_voltage
        resistance = series_resistance(path)
        current = voltage / resistance

        for component in path.components:
            component.current = current
            if component.component_type == "LED":
                component.drive_source = DriveSource.ENGINE
        for wire in path.wires:
            wire.current = current

        self.last_path = PathReading(
            voltage=voltage,
            current=current,
            resistance=resistance,
            power=voltage * current,
        )

        for component in path.components[1:]:
            ctype = component.component_type
            if ctype == "Battery":
                continue
            if ctype == "Ground":
                component.voltage = 0.0
            elif ctype in ("LED", "Diode"):
                component.voltage = component.forward_voltage
            else:
                component.voltage = current * component.resistance

        battery.current = current
        self._check_component_limits(path.components)

    def _check_component_limits(self, components: list[ComponentData]) -> None:
        for component in components:
            if component.damaged:
                continue
            ctype = component.component_type
            if ctype == "LED" and component.current > component.burnout_current:
                component.damaged = True
                component.is_on = False
                self._emit(led_burnout(component))
            elif ctype == "Diode" and component.current > component.burnout_current:
                component.damaged = True
                self._emit(diode_burnout(component))
            elif ctype == "Resistor" and component.power > RESISTOR_BURNOUT_POWER:
                component.damaged = True
                self._emit(overheat(component))

    def _emit(self, effect: DamageEffect) -> None:
        logger.warning("%s %s damaged", effect.component_type, effect.component_id)
        if self.effect_sink is None:
            return
        try:
            self.effect_sink(effect)
        except (TypeError, AttributeError, RuntimeError) as e:
            logger.error("Error delivering damage effect: %s", e)

    # --- Queries ---

    def calculate_path_resistance(self, path: CircuitPath) -> float:
        return series_resistance(path)

    def get_stats(self, paths: Optional[list[CircuitPath]] = None) -> SimulationStats:
        if paths is None:
            paths = self.path_finder.find_all_paths()
        active = self.path_finder.get_active_components(paths)
        total_power = sum(b.source_voltage * b.current for b in self.path_finder.find_sources())
        return SimulationStats(
            is_complete=len(paths) > 0,
            path_count=len(paths),
            active_components=len(active),
            total_components=len(self.model.components),
            total_power=total_power,
            running=self.running,
        )

    def detect_problems(self, paths: Optional[list[CircuitPath]] = None) -> list[Problem]:
        """High-current warnings, one error per damaged part, and an incomplete-circuit note."""
        if paths is None:
            paths = self.path_finder.find_all_paths()
        problems = []
        batteries = self.path_finder.find_sources()

        for battery in batteries:
            if battery.current > HIGH_CURRENT_THRESHOLD:
                problems.append(Problem(
                    Severity.WARNING,
                    "High current detected! Battery may overheat.",
                    battery.component_id,
                ))

        for component in self.model.components.values():
            if component.damaged:
                problems.append(Problem(
                    Severity.ERROR,
                    f"{component.component_type} {component.component_id} is damaged and not functioning.",
                    component.component_id,
                ))

        if not paths and batteries:
            problems.append(Problem(Severity.INFO, "Circuit is not complete. Connect battery to ground."))

        return problems

    def analyze_circuit(self) -> CircuitAnalysis:
        """Bundle stats, problems and per-path summaries from one topology pass."""
        paths = self.path_finder.find_all_paths()
        return CircuitAnalysis(
            stats=self.get_stats(paths),
            problems=self.detect_problems(paths),
            path_count=len(paths),
            paths=[
                PathSummary(
                    index=i,
                    component_count=len(path.components),
                    component_types=path.component_types(),
                    total_resistance=self.calculate_path_resistance(path),
                )
                for i, path in enumerate(paths)
            ],
        )
