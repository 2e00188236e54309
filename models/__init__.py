"""
Models package for the plasmid population simulation.

This package contains the simulation core:
- Plasmid trait sampling and identity registry
- The host lattice with structured and well-mixed addressing
- Incompatibility resolution at cell division
- The per-tick event engine (lysis, fission, conjugation, immigration)
- Setup-time seeding policies including resistance seeding
- Metrics aggregation, export records and stop predicates
"""

from .traits import PlasmidTraits, TraitConfig, TraitSampler, UnsatisfiableTraitConfigurationError
from .plasmid import Plasmid, PlasmidRegistry
from .lattice import Lattice
from .state import (
    SimulationConfig, SimulationState, TickEvents,
    IncompatibilityPolicy, ResistanceSeeding
)
from .incompatibility import IncompatibilityResolver
from .engine import (
    EventKind, EventProbabilities, TransferOutcome,
    event_probabilities, trials_per_tick, lysis, fission,
    conjugative_transfer, select_donor, immigrate, run_trial, run_tick
)
from .seeding import (
    seed_population, seed_resistance, seed_mean_properties, seed_random_properties,
    seed_many_near_mean_accessory_cost, collapse_to_single_plasmid
)
from .metrics import MetricsSnapshot, PlasmidRecord, StopReason, compute_metrics, export_records, check_stop
from .simulation import Simulation

__all__ = [
    # Traits and plasmids
    "PlasmidTraits", "TraitConfig", "TraitSampler", "UnsatisfiableTraitConfigurationError",
    "Plasmid", "PlasmidRegistry",

    # Lattice and state
    "Lattice", "SimulationConfig", "SimulationState", "TickEvents",
    "IncompatibilityPolicy", "ResistanceSeeding",

    # Engine
    "IncompatibilityResolver",
    "EventKind", "EventProbabilities", "TransferOutcome",
    "event_probabilities", "trials_per_tick", "lysis", "fission",
    "conjugative_transfer", "select_donor", "immigrate", "run_trial", "run_tick",

    # Seeding
    "seed_population", "seed_resistance", "seed_mean_properties", "seed_random_properties",
    "seed_many_near_mean_accessory_cost", "collapse_to_single_plasmid",

    # Metrics and driver
    "MetricsSnapshot", "PlasmidRecord", "StopReason", "compute_metrics", "export_records", "check_stop",
    "Simulation",
]
