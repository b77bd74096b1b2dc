"""
WireData - Pure Python data model for circuit wires.

This module contains no Qt dependencies. Waypoints are stored as
tuples (x, y).
"""

from dataclasses import dataclass, field
from typing import Optional

from .component import ROBOTICS_TYPES

WIRE_RESISTANCE = 0.01  # ohms, near-ideal conductor

# Display colours for harness wiring, keyed by terminal role
_POSITIVE_TERMINALS = {"positive", "VCC", "5V_IN"}
_GROUND_TERMINALS = {"negative", "GND"}
_SIGNAL_TERMINALS = {"GPIO_A", "GPIO_B", "IN_A", "IN_B"}
_MOTOR_TERMINALS = {"OUT_A1", "OUT_A2", "OUT_B1", "OUT_B2", "terminal_1", "terminal_2"}

DEFAULT_WIRE_COLOR = "#95a5a6"


@dataclass(eq=False)
class WireData:
    """
    Pure Python data class representing a wire between two named terminals.

    Topology treats a wire as undirected. The start/end orientation is kept
    because diode polarity depends on which end lands on the cathode.
    """

    wire_id: str
    start_component_id: str
    start_terminal: str
    end_component_id: str
    end_terminal: str

    waypoints: list[tuple[float, float]] = field(default_factory=list)
    current: float = 0.0
    resistance: float = WIRE_RESISTANCE

    def get_terminals(self) -> list[tuple[str, str]]:
        """Return both (component_id, terminal_name) endpoints."""
        return [(self.start_component_id, self.start_terminal), (self.end_component_id, self.end_terminal)]

    def connects_component(self, component_id: str) -> bool:
        """Check if this wire connects to the given component."""
        return self.start_component_id == component_id or self.end_component_id == component_id

    def connects_terminal(self, component_id: str, terminal: str) -> bool:
        """Check if this wire connects to the given terminal."""
        return (self.start_component_id == component_id and self.start_terminal == terminal) or (
            self.end_component_id == component_id and self.end_terminal == terminal
        )

    def joins(self, comp_a: str, term_a: str, comp_b: str, term_b: str) -> bool:
        """True if this wire runs between the two terminals, in either direction."""
        forward = (
            self.start_component_id == comp_a
            and self.start_terminal == term_a
            and self.end_component_id == comp_b
            and self.end_terminal == term_b
        )
        backward = (
            self.start_component_id == comp_b
            and self.start_terminal == term_b
            and self.end_component_id == comp_a
            and self.end_terminal == term_a
        )
        return forward or backward

    def other_component_id(self, component_id: str) -> Optional[str]:
        if self.start_component_id == component_id:
            return self.end_component_id
        if self.end_component_id == component_id:
            return self.start_component_id
        return None

    def other_end(self, component_id: str, terminal: str) -> Optional[tuple[str, str]]:
        """Return the (component_id, terminal) at the far end of a terminal."""
        if self.start_component_id == component_id and self.start_terminal == terminal:
            return (self.end_component_id, self.end_terminal)
        if self.end_component_id == component_id and self.end_terminal == terminal:
            return (self.start_component_id, self.start_terminal)
        return None

    def determine_color(self, start_type: str, end_type: str) -> str:
        """
        Colour for drawing: red power, teal ground, blue signal, orange motor.

        Plain breadboard circuits (no robotics parts on either end) stay grey.
        """
        if start_type not in ROBOTICS_TYPES and end_type not in ROBOTICS_TYPES:
            return DEFAULT_WIRE_COLOR
        terminals = {self.start_terminal, self.end_terminal}
        if terminals & _POSITIVE_TERMINALS:
            return "#e74c3c"
        if terminals & _GROUND_TERMINALS:
            return "#1abc9c"
        if terminals & _SIGNAL_TERMINALS:
            return "#3498db"
        if terminals & _MOTOR_TERMINALS:
            return "#e67e22"
        return DEFAULT_WIRE_COLOR

    def update(self, dt: float) -> None:
        """Presentation hook; wires carry no animated state of their own."""

    def to_dict(self) -> dict:
        """Serialize wire to the circuit document format."""
        return {
            "id": self.wire_id,
            "from": {"componentId": self.start_component_id, "terminal": self.start_terminal},
            "to": {"componentId": self.end_component_id, "terminal": self.end_terminal},
            "waypoints": [{"x": x, "y": y} for x, y in self.waypoints],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WireData":
        """
        Deserialize wire from the circuit document format.

        Endpoint ids and terminals are coerced to str, matching component ids.
        Raises KeyError if either endpoint is missing.
        """
        waypoints = [(float(p["x"]), float(p["y"])) for p in data.get("waypoints") or []]
        return cls(
            wire_id=str(data.get("id", "")),
            start_component_id=str(data["from"]["componentId"]),
            start_terminal=str(data["from"]["terminal"]),
            end_component_id=str(data["to"]["componentId"]),
            end_terminal=str(data["to"]["terminal"]),
            waypoints=waypoints,
        )

    def __repr__(self) -> str:
        return (
            f"WireData({self.wire_id}: {self.start_component_id}[{self.start_terminal}] -> "
            f"{self.end_component_id}[{self.end_terminal}])"
        )
