"""
simulation/path_finder.py

Topology analysis: every conducting path from a battery back to a ground
or to the same battery.

The circuit is treated as an undirected multigraph whose vertices are
components and whose edges are wires. Paths never reuse a wire.
"""

import logging
from dataclasses import dataclass, field

from models.circuit import CircuitModel
from models.component import ComponentData
from models.wire import WireData

logger = logging.getLogger(__name__)

Adjacency = dict[str, list[tuple[ComponentData, WireData]]]


@dataclass
class CircuitPath:
    """Ordered components and wires of one source-to-terminus path."""

    components: list[ComponentData] = field(default_factory=list)
    wires: list[WireData] = field(default_factory=list)

    @property
    def source(self):
        for component in self.components:
            if component.component_type == "Battery":
                return component
        return None

    def contains(self, component: ComponentData) -> bool:
        return any(c is component for c in self.components)

    def has_type(self, component_type: str) -> bool:
        return any(c.component_type == component_type for c in self.components)

    def component_types(self) -> list[str]:
        return [c.component_type for c in self.components]

    def component_ids(self) -> list[str]:
        return [c.component_id for c in self.components]

    def __len__(self) -> int:
        return len(self.components)


def _enters_cathode(components: list[ComponentData], wires: list[WireData]) -> bool:
    """True if any path wire lands on a diode's cathode as its 'to' end."""
    for component in components:
        if component.component_type != "Diode":
            continue
        for wire in wires:
            if wire.end_component_id == component.component_id and wire.end_terminal == "cathode":
                return True
    return False


class PathFinder:
    """
    Finds source-to-terminus paths over a live CircuitModel.

    The model is read on every call; nothing is cached between calls.
    """

    def __init__(self, model: CircuitModel):
        self.model = model
        self._last_logged_path_count = -1

    def find_sources(self) -> list[ComponentData]:
        """Batteries are the only path origins."""
        return self.model.components_of_type("Battery")

    def find_grounds(self) -> list[ComponentData]:
        return self.model.components_of_type("Ground")

    def get_connected_wires(self, component: ComponentData) -> list[WireData]:
        return self.model.wires_for_component(component.component_id)

    def get_adjacent_components(self, component: ComponentData) -> list[tuple[ComponentData, WireData]]:
        """Neighbours reachable over one wire, paired with that wire."""
        adjacent = []
        for wire in self.get_connected_wires(component):
            other = self.model.components.get(wire.other_component_id(component.component_id))
            if other is not None:
                adjacent.append((other, wire))
        return adjacent

    def build_graph(self) -> Adjacency:
        """
        Build the adjacency map keyed by component id.

        Wires whose endpoints are not both in the model are ignored.
        """
        graph: Adjacency = {cid: [] for cid in self.model.components}
        for wire in self.model.wires:
            start = self.model.components.get(wire.start_component_id)
            end = self.model.components.get(wire.end_component_id)
            if start is None or end is None:
                continue
            graph[start.component_id].append((end, wire))
            if end is not start:
                graph[end.component_id].append((start, wire))
        return graph

    def find_all_paths(self) -> list[CircuitPath]:
        """
        Enumerate every valid path from every battery.

        Returns paths grouped by battery in model order.
        """
        graph = self.build_graph()
        paths: list[CircuitPath] = []
        for source in self.find_sources():
            paths.extend(self._find_paths_dfs(source, graph))

        if len(paths) != self._last_logged_path_count:
            logger.debug("Found %d circuit path(s)", len(paths))
            self._last_logged_path_count = len(paths)
        return paths

    def _find_paths_dfs(self, start: ComponentData, graph: Adjacency) -> list[CircuitPath]:
        """
        Iterative depth-first search from one battery.

        A path ends on reaching any ground or returning to `start`. Open
        switches and damaged parts block traversal; the only vertex allowed
        twice is `start` when closing a loop.
        """
        paths = []
        stack = [(start, [start], [])]

        while stack:
            component, path, wires = stack.pop()

            is_terminus = component.component_type == "Ground" or component is start
            if is_terminus and len(path) > 1:
                if _enters_cathode(path, wires):
                    continue
                paths.append(CircuitPath(list(path), list(wires)))
                continue

            for neighbor, wire in graph.get(component.component_id, []):
                if any(w is wire for w in wires):
                    continue
                closes_loop = neighbor is start and len(path) > 1
                if any(c is neighbor for c in path) and not closes_loop:
                    continue
                if neighbor.is_switch_open():
                    continue
                if neighbor.damaged:
                    continue
                if component.damaged:
                    continue
                stack.append((neighbor, path + [neighbor], wires + [wire]))

        return paths

    def has_reverse_biased_diode(self, path: CircuitPath) -> bool:
        """True if current in this path would enter a diode at its cathode."""
        return _enters_cathode(path.components, path.wires)

    def is_circuit_complete(self) -> bool:
        return len(self.find_all_paths()) > 0

    def get_active_components(self, paths=None) -> list[ComponentData]:
        """Components on at least one path, in first-seen order."""
        if paths is None:
            paths = self.find_all_paths()
        seen = {}
        for path in paths:
            for component in path.components:
                seen.setdefault(component.component_id, component)
        return list(seen.values())

    def get_active_wires(self, paths=None) -> list[WireData]:
        """Wires on at least one path, in first-seen order."""
        if paths is None:
            paths = self.find_all_paths()
        active = []
        for path in paths:
            for wire in path.wires:
                if not any(w is wire for w in active):
                    active.append(wire)
        return active
