"""
Custom validation utilities for simulation parameters.
"""

import warnings

from config import settings


def validate_world_size(value: int) -> int:
    """
    Validate a lattice dimension is within acceptable limits.

    Args:
        value: Grid width or height to validate

    Returns:
        Validated dimension

    Raises:
        ValueError: If the dimension is invalid
    """
    if value < 1:
        raise ValueError("World size must be at least 1")
    if value > settings.max_world_size:
        raise ValueError(f"World size cannot exceed {settings.max_world_size}")
    return value


def validate_mortality(value: float) -> float:
    """
    Validate mortality is a usable per-trial death probability.

    Mortality also sets the number of trials per tick, so it must be
    strictly positive.

    Raises:
        ValueError: If mortality is invalid
    """
    if value <= 0.0:
        raise ValueError("Mortality must be greater than 0")
    if value > 1.0:
        raise ValueError("Mortality cannot exceed 1.0")
    if value < 0.01:
        warnings.warn(
            f"Mortality {value} is very low; each tick will run "
            f"{int(1 / value)} trials per site",
            UserWarning
        )
    return value


def validate_probability(value: float, name: str = "Probability") -> float:
    """Validate a value lies in [0, 1]."""
    if value < 0.0:
        raise ValueError(f"{name} cannot be negative")
    if value > 1.0:
        raise ValueError(f"{name} cannot exceed 1.0")
    return value


def validate_simulation_time(value: int) -> int:
    """
    Validate simulation time is within acceptable limits.

    Args:
        value: Simulation time to validate

    Returns:
        Validated simulation time

    Raises:
        ValueError: If simulation time is invalid
    """
    if value < 1:
        raise ValueError("Simulation time must be at least 1 tick")
    if value > settings.max_simulation_time:
        raise ValueError(f"Simulation time cannot exceed {settings.max_simulation_time} ticks")
    return value


def validate_trait_bounds(mean: float, minimum: float, name: str) -> float:
    """
    Check a cost trait mean is reachable given its lower bound.

    A mean well outside [minimum, 1] makes rejection sampling very slow and
    eventually exhausts the sampling attempt limit.

    Returns:
        The mean, unchanged

    Raises:
        ValueError: If the minimum exceeds 1
    """
    if minimum > 1.0:
        raise ValueError(f"Minimum {name} cannot exceed 1.0")
    if mean > 1.0 or mean < minimum:
        warnings.warn(
            f"{name} mean {mean} lies outside [{minimum}, 1]; trait sampling may "
            "fail to find valid values",
            UserWarning
        )
    return mean
