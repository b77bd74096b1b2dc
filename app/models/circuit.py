"""
CircuitModel - Central data store for circuit state.

This module contains no Qt dependencies. It owns the component and wire
collections that the engine, the wiring validator and the controllers all
share.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .component import COMPONENT_SYMBOLS, ComponentData, normalize_type
from .wire import WireData

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "1.0"
WIRE_SYMBOL = "W"

_ID_PATTERN = re.compile(r"^([A-Za-z_]+)(\d+)$")


@dataclass
class CircuitModel:
    """
    Central data store holding all circuit state.

    Components are keyed by id in insertion order; wires are an ordered list.
    Nothing here computes electrical values.
    """

    components: dict[str, ComponentData] = field(default_factory=dict)
    wires: list[WireData] = field(default_factory=list)
    component_counter: dict[str, int] = field(default_factory=dict)

    # --- Id generation ---

    def next_id(self, symbol: str) -> str:
        """Return the next unused id for a prefix (R1, R2, ..., W1, ...)."""
        existing = {c for c in self.components} | {w.wire_id for w in self.wires}
        count = self.component_counter.get(symbol, 0)
        while True:
            count += 1
            candidate = f"{symbol}{count}"
            if candidate not in existing:
                break
        self.component_counter[symbol] = count
        return candidate

    def _bump_counter(self, item_id: str) -> None:
        match = _ID_PATTERN.match(item_id)
        if match is None:
            return
        symbol, number = match.group(1), int(match.group(2))
        if number > self.component_counter.get(symbol, 0):
            self.component_counter[symbol] = number

    # --- Component operations ---

    def add_component(self, component: ComponentData) -> None:
        """Add a component to the circuit."""
        self.components[component.component_id] = component
        self._bump_counter(component.component_id)

    def create_component(self, component_type: str,
                         position: tuple[float, float] = (0.0, 0.0)) -> ComponentData:
        """Build a component of the given type with a fresh id and add it."""
        component = ComponentData(
            component_id=self.next_id(COMPONENT_SYMBOLS[component_type]),
            component_type=component_type,
            position=position,
        )
        self.add_component(component)
        return component

    def remove_component(self, component_id: str) -> list[WireData]:
        """
        Remove a component together with every wire that touches it.

        Returns the removed wires so callers can notify views.
        """
        if component_id not in self.components:
            return []
        removed = [w for w in self.wires if w.connects_component(component_id)]
        self.wires = [w for w in self.wires if not w.connects_component(component_id)]
        del self.components[component_id]
        return removed

    def get_component(self, component_id: str) -> Optional[ComponentData]:
        return self.components.get(component_id)

    def components_of_type(self, component_type: str) -> list[ComponentData]:
        return [c for c in self.components.values() if c.component_type == component_type]

    # --- Wire operations ---

    def add_wire(self, wire: WireData) -> None:
        """Add a wire; a blank id gets a generated one."""
        if not wire.wire_id:
            wire.wire_id = self.next_id(WIRE_SYMBOL)
        else:
            self._bump_counter(wire.wire_id)
        self.wires.append(wire)

    def connect(self, start_id: str, start_terminal: str,
                end_id: str, end_terminal: str,
                waypoints: Optional[list[tuple[float, float]]] = None) -> WireData:
        """Create and add a wire between two terminals."""
        wire = WireData(
            wire_id=self.next_id(WIRE_SYMBOL),
            start_component_id=start_id,
            start_terminal=start_terminal,
            end_component_id=end_id,
            end_terminal=end_terminal,
            waypoints=list(waypoints or []),
        )
        self.wires.append(wire)
        return wire

    def remove_wire(self, wire: WireData) -> bool:
        """Remove a wire by identity. Returns False if it was not present."""
        for i, existing in enumerate(self.wires):
            if existing is wire:
                del self.wires[i]
                return True
        return False

    def get_wire(self, wire_id: str) -> Optional[WireData]:
        for wire in self.wires:
            if wire.wire_id == wire_id:
                return wire
        return None

    def wires_for_component(self, component_id: str) -> list[WireData]:
        return [w for w in self.wires if w.connects_component(component_id)]

    def find_wire_end(self, component_id: str, terminal: str) -> Optional[tuple[ComponentData, str]]:
        """
        Follow the first wire attached to a terminal.

        Returns the (component, terminal) at its far end, or None.
        """
        for wire in self.wires:
            far = wire.other_end(component_id, terminal)
            if far is None:
                continue
            component = self.components.get(far[0])
            if component is not None:
                return component, far[1]
        return None

    def clear(self) -> None:
        """Clear all circuit data."""
        self.components.clear()
        self.wires.clear()
        self.component_counter.clear()

    # --- Serialization ---

    def to_dict(self) -> dict:
        """Serialize circuit to the circuit document format."""
        return {
            "version": DOCUMENT_VERSION,
            "components": [c.to_dict() for c in self.components.values()],
            "wires": [w.to_dict() for w in self.wires],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CircuitModel":
        """
        Deserialize circuit from dictionary.

        Components of an unknown type are skipped, and so is any wire whose
        endpoints do not both resolve to a loaded component. Derived state
        starts at its defaults.
        """
        model = cls()
        model.load_dict(data)
        return model

    def load_dict(self, data: dict) -> None:
        """Replace the contents of this model in place from a document."""
        self.clear()
        if not data:
            return

        for comp_data in data.get("components") or []:
            if not isinstance(comp_data, dict):
                continue
            if normalize_type(comp_data.get("type", "")) is None:
                logger.warning("Skipping component of unknown type %r", comp_data.get("type"))
                continue
            try:
                component = ComponentData.from_dict(comp_data)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed component %r: %s", comp_data.get("id"), e)
                continue
            self.add_component(component)

        for wire_data in data.get("wires") or []:
            try:
                wire = WireData.from_dict(wire_data)
                dangling = (wire.start_component_id not in self.components
                            or wire.end_component_id not in self.components)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                logger.warning("Skipping malformed wire: %s", e)
                continue
            if dangling:
                logger.warning("Skipping wire %r with a missing endpoint", wire.wire_id)
                continue
            self.add_wire(wire)
