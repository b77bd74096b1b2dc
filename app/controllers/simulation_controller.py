"""
SimulationController - Drives the per-frame simulation tick.

This module contains no Qt dependencies. It owns the electrical engine
and the robot wiring validator, injects the shared CircuitModel and the
damage-effect sink into both, and runs each tick in a fixed order:

    1. engine recompute (only while running)
    2. wiring validation
    3. per-component and per-wire presentation update

Presentation must see the values computed in steps 1 and 2 of the same tick.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from models.circuit import CircuitModel
from models.effects import DamageEffect, DamageSink, EffectLog
from simulation.circuit_insights import Insight, build_insights
from simulation.circuit_simulator import CircuitAnalysis, CircuitSimulator
from simulation.path_finder import CircuitPath
from simulation.robot_wiring_validator import RobotWiringValidator

logger = logging.getLogger(__name__)

DEFAULT_DT = 1.0 / 60.0

# Events after which the validator's cached slot scan is stale
_INVALIDATING_EVENTS = {"gpio_toggled", "model_loaded", "circuit_cleared"}


@dataclass
class TickResult:
    """What one tick produced."""

    running: bool
    paths: list[CircuitPath] = field(default_factory=list)
    connections: list[bool] = field(default_factory=list)
    effects: list[DamageEffect] = field(default_factory=list)


class SimulationController:
    """
    Controller for the simulation lifecycle and tick order.

    Damage effects are forwarded to `effect_sink` (an EffectLog by default)
    and announced to CircuitController observers as 'component_damaged'.
    An EffectLog sink is emptied whenever the simulation starts.
    """

    def __init__(self, model: Optional[CircuitModel] = None, circuit_ctrl=None,
                 effect_sink: Optional[DamageSink] = None):
        self.model = model or CircuitModel()
        self.circuit_ctrl = circuit_ctrl
        self.effect_sink = effect_sink if effect_sink is not None else EffectLog()
        self._tick_effects: list[DamageEffect] = []

        self.simulator = CircuitSimulator(self.model, self._on_damage)
        self.validator = RobotWiringValidator(self.model, lambda: self.simulator.running, self._on_damage)

        if circuit_ctrl is not None:
            circuit_ctrl.add_observer(self._on_model_event)

    @property
    def is_running(self) -> bool:
        return self.simulator.running

    def _on_model_event(self, event: str, data: Any) -> None:
        if event in _INVALIDATING_EVENTS:
            self.validator.invalidate()

    def _on_damage(self, effect: DamageEffect) -> None:
        self._tick_effects.append(effect)
        self.effect_sink(effect)
        if self.circuit_ctrl:
            self.circuit_ctrl._notify("component_damaged", effect)

    # --- Lifecycle ---

    def start(self) -> None:
        if self.simulator.running:
            return
        if isinstance(self.effect_sink, EffectLog):
            self.effect_sink.clear()
        self.simulator.start()
        self.validator.invalidate()
        if self.circuit_ctrl:
            self.circuit_ctrl._notify("simulation_started", None)

    def stop(self) -> None:
        """Stop and heal the circuit; motors and GPIO LEDs go idle at once."""
        if not self.simulator.running:
            return
        self.simulator.stop()
        self.validator.validate()
        if self.circuit_ctrl:
            self.circuit_ctrl._notify("simulation_stopped", None)

    def toggle(self) -> bool:
        if self.simulator.running:
            self.stop()
        else:
            self.start()
        return self.simulator.running

    # --- Tick ---

    def tick(self, dt: float = DEFAULT_DT) -> TickResult:
        """Run one frame: engine, then validator, then presentation."""
        self._tick_effects = []

        paths = []
        if self.simulator.running:
            paths = self.simulator.simulate()

        connections = self.validator.validate()

        for component in self.model.components.values():
            component.update(dt)
        for wire in self.model.wires:
            wire.update(dt)

        return TickResult(
            running=self.simulator.running,
            paths=paths,
            connections=connections,
            effects=list(self._tick_effects),
        )

    def run(self, ticks: int, dt: float = DEFAULT_DT) -> TickResult:
        """Start if needed and run a fixed number of ticks; returns the last result."""
        self.start()
        result = TickResult(running=self.simulator.running)
        effects: list[DamageEffect] = []
        for _ in range(max(ticks, 0)):
            result = self.tick(dt)
            effects.extend(result.effects)
        result.effects = effects
        return result

    # --- Queries ---

    def analyze(self) -> CircuitAnalysis:
        return self.simulator.analyze_circuit()

    def insights(self) -> list[Insight]:
        return build_insights(self.model, self.simulator, self.validator)

    def get_checklist(self):
        self.validator.validate()
        return self.validator.get_checklist()
