"""Concurrent market simulator: instruments, price feeds and trading agents."""

from .config import SimulationConfiguration, load_config
from .simulation import Simulation

__all__ = [
    'Simulation',
    'SimulationConfiguration',
    'load_config',
]
