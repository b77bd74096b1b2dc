"""
CircuitController - Orchestrates component and wire CRUD operations.

This module contains no Qt dependencies. It manages the CircuitModel
and notifies views of changes through an observer pattern.
"""

import logging
from typing import Any, Callable, Optional

from models.circuit import CircuitModel
from models.component import COMPONENT_TYPES, ComponentData
from models.wire import WireData

logger = logging.getLogger(__name__)


class CircuitController:
    """
    Controller for circuit component and wire operations.

    Manages the CircuitModel and notifies registered observers when
    the model changes. Views register callbacks to stay in sync.

    Observer events:
        component_added (ComponentData) - A new component was added
        component_removed (str) - A component was removed (by ID)
        component_rotated (ComponentData) - A component was rotated
        component_moved (ComponentData) - A component was moved
        component_value_changed (ComponentData) - A selector or switch changed
        gpio_toggled (ComponentData) - A Raspberry Pi output pin changed
        wire_added (WireData) - A new wire was added
        wire_removed (WireData) - A wire was removed
        circuit_cleared (None) - The entire circuit was cleared
        model_loaded (None) - Circuit loaded from file or history
        model_saved (None) - Circuit saved to file
        simulation_started (None) - Simulation began
        simulation_stopped (None) - Simulation ended
        component_damaged (DamageEffect) - A part burned out this tick
    """

    def __init__(self, model: Optional[CircuitModel] = None):
        self.model = model or CircuitModel()
        self._observers: list[Callable[[str, Any], None]] = []

    def add_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Register a callback for model change events."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[str, Any], None]) -> None:
        """Unregister a previously registered callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify(self, event: str, data: Any) -> None:
        """Notify all observers of a model change."""
        for observer in list(self._observers):
            try:
                observer(event, data)
            except (TypeError, AttributeError, RuntimeError) as e:
                logger.error("Error notifying observer: %s", e)

    # --- Component operations ---

    def add_component(self, component_type: str,
                      position: tuple[float, float] = (0.0, 0.0)) -> ComponentData:
        """
        Create and add a new component to the circuit.

        Generates a unique ID from the type's symbol (B1, R1, LED1, etc.).

        Raises:
            ValueError: If component_type is not one of COMPONENT_TYPES.
        """
        if component_type not in COMPONENT_TYPES:
            raise ValueError(f"Unknown component type: {component_type!r}")
        component = self.model.create_component(component_type, position)
        self._notify('component_added', component)
        return component

    def remove_component(self, component_id: str) -> None:
        """Remove a component and all connected wires."""
        if component_id not in self.model.components:
            return
        for wire in self.model.remove_component(component_id):
            self._notify('wire_removed', wire)
        self._notify('component_removed', component_id)

    def rotate_component(self, component_id: str, clockwise: bool = True) -> None:
        """Rotate a component 45 degrees."""
        component = self.model.components.get(component_id)
        if component is None:
            return
        component.rotate(clockwise)
        self._notify('component_rotated', component)

    def move_component(self, component_id: str,
                       position: tuple[float, float]) -> None:
        """Move a component to a new position."""
        component = self.model.components.get(component_id)
        if component is None:
            return
        component.position = position
        self._notify('component_moved', component)

    def cycle_voltage(self, component_id: str) -> None:
        """Step a battery to its next voltage option."""
        self._edit(component_id, "Battery", ComponentData.cycle_voltage)

    def cycle_resistance(self, component_id: str) -> None:
        """Step a resistor to its next standard value."""
        self._edit(component_id, "Resistor", ComponentData.cycle_resistance)

    def cycle_color(self, component_id: str) -> None:
        self._edit(component_id, "LED", ComponentData.cycle_color)

    def toggle_switch(self, component_id: str) -> None:
        self._edit(component_id, "Switch", ComponentData.toggle)

    def toggle_gpio(self, component_id: str, pin: str) -> None:
        """Flip a Raspberry Pi output pin ('GPIO_A' or 'GPIO_B')."""
        component = self.model.components.get(component_id)
        if component is None or component.component_type != "Raspberry Pi":
            return
        component.toggle_gpio(pin)
        self._notify('gpio_toggled', component)

    def _edit(self, component_id: str, component_type: str, action) -> None:
        component = self.model.components.get(component_id)
        if component is None or component.component_type != component_type:
            return
        action(component)
        self._notify('component_value_changed', component)

    # --- Wire operations ---

    def add_wire(self, start_comp_id: str, start_term: str,
                 end_comp_id: str, end_term: str,
                 waypoints: Optional[list[tuple[float, float]]] = None) -> WireData:
        """
        Create and add a new wire connection.

        Raises:
            ValueError: If either endpoint is not an existing terminal, or
                both ends are the same terminal.
        """
        for comp_id, term in ((start_comp_id, start_term), (end_comp_id, end_term)):
            component = self.model.components.get(comp_id)
            if component is None:
                raise ValueError(f"No component with id {comp_id!r}")
            if component.get_terminal(term) is None:
                raise ValueError(f"{comp_id} has no terminal {term!r}")
        if start_comp_id == end_comp_id and start_term == end_term:
            raise ValueError("Cannot connect a terminal to itself")

        wire = self.model.connect(start_comp_id, start_term, end_comp_id, end_term, waypoints)
        self._notify('wire_added', wire)
        return wire

    def remove_wire(self, wire_id: str) -> None:
        wire = self.model.get_wire(wire_id)
        if wire is None:
            return
        self.model.remove_wire(wire)
        self._notify('wire_removed', wire)

    def clear_circuit(self) -> None:
        """Remove every component and wire."""
        self.model.clear()
        self._notify('circuit_cleared', None)

    # --- Queries ---

    def get_component(self, component_id: str) -> Optional[ComponentData]:
        return self.model.components.get(component_id)

    def get_properties(self, component_id: str) -> dict[str, str]:
        component = self.model.components.get(component_id)
        if component is None:
            return {}
        return component.get_properties()
