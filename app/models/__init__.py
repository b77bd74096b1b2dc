"""
Pure Python data models for the circuit sandbox.

This package contains Qt-free data classes that represent circuit elements.
All models use only Python standard library types (no PyQt6 dependencies).
"""

from .circuit import CircuitModel
from .component import (
    COMPONENT_SYMBOLS,
    COMPONENT_TYPES,
    RESISTANCE_OPTIONS,
    TERMINALS,
    VOLTAGE_OPTIONS,
    ComponentData,
    DriveSource,
    Terminal,
)
from .effects import DamageEffect, EffectKind, EffectLog, EffectRequest
from .wire import WireData

__all__ = [
    "CircuitModel",
    "ComponentData",
    "COMPONENT_TYPES",
    "COMPONENT_SYMBOLS",
    "TERMINALS",
    "VOLTAGE_OPTIONS",
    "RESISTANCE_OPTIONS",
    "DriveSource",
    "Terminal",
    "WireData",
    "DamageEffect",
    "EffectKind",
    "EffectLog",
    "EffectRequest",
]
