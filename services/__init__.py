"""
Services package for simulation lifecycle management.
"""

from .simulation_service import SimulationNotFoundError, SimulationService, SimulationStateError

__all__ = [
    'SimulationService',
    'SimulationNotFoundError',
    'SimulationStateError'
]
