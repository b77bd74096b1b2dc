from .simulation_clock import AutoSaveTimer, SimulationClock

__all__ = [
    'AutoSaveTimer',
    'SimulationClock',
]
