"""
Simulation configuration and explicitly owned simulation state.

All mutable run state (lattice, plasmid registry, random stream, tick
counter, antibiotic exposure) lives in a single ``SimulationState`` value
that the engine operations receive and update.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .lattice import Lattice
from .plasmid import PlasmidRegistry
from .traits import TraitConfig, TraitSampler

logger = logging.getLogger(__name__)


class IncompatibilityPolicy(Enum):
    """How incompatible plasmids are sorted out at cell division."""
    RANDOM_DAUGHTER_LOAD = "random-daughter-load"
    IDENTICAL_DAUGHTER_LOAD = "identical-daughter-load"


class ResistanceSeeding(Enum):
    """Setup-time antibiotic resistance seeding modes."""
    NONE = "none"
    MEAN_PROPERTIES = "mean-properties"
    RANDOM_PROPERTIES = "random-properties"
    MANY_RANDOM_NEAR_MEAN_AM = "many-random-with-near-mean-accessory-cost"


@dataclass
class SimulationConfig:
    """Configuration for a plasmid population simulation."""

    # Lattice
    world_width: int = 50
    world_height: int = 50
    mixed_environment: bool = False

    # Population dynamics
    mortality: float = 0.1
    initial_plasmid_density: float = 0.5
    immigration: float = 0.0

    # Plasmid traits
    traits: TraitConfig = field(default_factory=TraitConfig)

    # Inheritance and incompatibility
    seg_prob: float = 0.0
    surface_exclusion: bool = False
    inc_seg_mechanism: IncompatibilityPolicy = IncompatibilityPolicy.RANDOM_DAUGHTER_LOAD

    # Antibiotic pressure
    baa: float = 0.0
    generations_of_antibiotic_presence: int = 0

    # Resistance seeding
    resistance_seeding: ResistanceSeeding = ResistanceSeeding.NONE
    non_conjugative_resistance: bool = False
    arp_prop: float = 0.01
    single_plasmid_dynamics: bool = False

    # Run control
    simulation_time: int = 1000
    stop_when_resistance_is_lost: bool = False
    random_seed: Optional[int] = None

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.inc_seg_mechanism, str):
            self.inc_seg_mechanism = IncompatibilityPolicy(self.inc_seg_mechanism)
        if isinstance(self.resistance_seeding, str):
            self.resistance_seeding = ResistanceSeeding(self.resistance_seeding)
        if isinstance(self.traits, dict):
            self.traits = TraitConfig(**self.traits)

        if self.world_width <= 0 or self.world_height <= 0:
            raise ValueError("Grid dimensions must be positive")
        if not 0 < self.mortality <= 1:
            raise ValueError("Mortality must be in (0, 1]")
        for name in ("initial_plasmid_density", "immigration", "seg_prob", "baa", "arp_prop"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ValueError(f"{name} must be between 0 and 1")
        if self.generations_of_antibiotic_presence < 0:
            raise ValueError("Antibiotic exposure window cannot be negative")
        if self.simulation_time < 1:
            raise ValueError("Simulation time must be at least 1 tick")


@dataclass
class TickEvents:
    """Counts of engine events during one tick."""
    trials: int = 0
    lysis: int = 0
    fission: int = 0
    fission_blocked: int = 0
    transfer_attempts: int = 0
    transfers: int = 0
    transfer_rejected_identity: int = 0
    transfer_rejected_exclusion: int = 0
    segregation_losses: int = 0
    incompatibility_removals: int = 0
    immigrations: int = 0

    def to_dict(self) -> dict:
        return dict(self.__dict__)


@dataclass
class SimulationState:
    """
    Everything that changes during a run.

    Attributes:
        config: Immutable run configuration
        lattice: Site occupancy
        registry: Plasmid instances and identity counter
        rng: The run's single random stream
        sampler: Trait sampler bound to ``config.traits``
        tick: Number of completed ticks
        baa: Current bacteriostatic antibiotic action (resets to 0 after
            the exposure window)
        events: Event counters for the tick in progress / last tick
    """

    config: SimulationConfig
    lattice: Lattice
    registry: PlasmidRegistry
    rng: np.random.Generator
    sampler: TraitSampler
    tick: int = 0
    baa: float = 0.0
    events: TickEvents = field(default_factory=TickEvents)

    @classmethod
    def create(cls, config: SimulationConfig, rng: Optional[np.random.Generator] = None) -> 'SimulationState':
        """
        Build an empty state for a configuration.

        Args:
            config: Run configuration
            rng: Random stream; seeded from ``config.random_seed`` if omitted

        Returns:
            Fresh state with an empty lattice
        """
        if rng is None:
            rng = np.random.default_rng(config.random_seed)
        return cls(
            config=config,
            lattice=Lattice(config.world_width, config.world_height, mixed=config.mixed_environment),
            registry=PlasmidRegistry(),
            rng=rng,
            sampler=TraitSampler(config.traits),
            baa=config.baa,
        )

    def host_burden(self, site) -> float:
        return sum(p.pb for p in self.registry.residents(site))

    def host_fitness(self, site) -> float:
        """Host growth fitness: max(0, 1 - total plasmid burden)."""
        return max(0.0, 1.0 - self.host_burden(site))

    def is_resistant(self, site) -> bool:
        return any(p.res == 1 for p in self.registry.residents(site))
