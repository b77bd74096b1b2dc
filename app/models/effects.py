"""
Damage effect records.

The engine and the wiring validator describe visual feedback for a newly
damaged part as plain data and hand it to an injected sink. How the
requests are drawn is up to whoever consumes them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional


class EffectKind(Enum):
    SPARK_BURST = "sparks"
    SMOKE_PLUME = "smoke"
    EXPLOSION_FLASH = "explosion"


SMOKE_PARTICLES = 10


@dataclass(frozen=True)
class EffectRequest:
    kind: EffectKind
    position: tuple[float, float]
    color: Optional[str] = None
    particle_count: int = 1


@dataclass
class DamageEffect:
    """Everything emitted for one component the moment it is damaged."""

    component_id: str
    component_type: str
    requests: list[EffectRequest] = field(default_factory=list)

    def kinds(self) -> list[EffectKind]:
        return [r.kind for r in self.requests]


DamageSink = Callable[[DamageEffect], None]


def _explosion(position) -> EffectRequest:
    return EffectRequest(EffectKind.EXPLOSION_FLASH, position)


def _sparks(position, count: int) -> EffectRequest:
    return EffectRequest(EffectKind.SPARK_BURST, position, particle_count=count)


def _smoke(position, color: str) -> EffectRequest:
    return EffectRequest(EffectKind.SMOKE_PLUME, position, color=color, particle_count=SMOKE_PARTICLES)


def led_burnout(component) -> DamageEffect:
    pos = component.position
    return DamageEffect(
        component.component_id,
        component.component_type,
        [_explosion(pos), _sparks(pos, 20), _smoke(pos, "#555")],
    )


def diode_burnout(component) -> DamageEffect:
    pos = component.position
    return DamageEffect(
        component.component_id,
        component.component_type,
        [_explosion(pos), _sparks(pos, 15), _smoke(pos, "#666")],
    )


def overheat(component) -> DamageEffect:
    """Resistor overload, also used for LEDs overdriven from a GPIO pin."""
    pos = component.position
    return DamageEffect(
        component.component_id,
        component.component_type,
        [_smoke(pos, "#888"), _sparks(pos, 10)],
    )


class EffectLog:
    """A sink that just remembers what it was sent."""

    def __init__(self):
        self.effects: list[DamageEffect] = []

    def __call__(self, effect: DamageEffect) -> None:
        self.effects.append(effect)

    def __len__(self) -> int:
        return len(self.effects)

    def for_component(self, component_id: str) -> list[DamageEffect]:
        return [e for e in self.effects if e.component_id == component_id]

    def clear(self) -> None:
        self.effects.clear()
