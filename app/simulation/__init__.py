from .circuit_insights import Insight, InsightLevel, build_insights, detect_resistor_bypass
from .circuit_simulator import CircuitAnalysis, CircuitSimulator, Problem, Severity
from .path_finder import CircuitPath, PathFinder
from .robot_wiring_validator import RobotWiringValidator

__all__ = [
    'CircuitAnalysis',
    'CircuitPath',
    'CircuitSimulator',
    'Insight',
    'InsightLevel',
    'PathFinder',
    'Problem',
    'RobotWiringValidator',
    'Severity',
    'build_insights',
    'detect_resistor_bypass',
]
