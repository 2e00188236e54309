"""
Pydantic schemas for simulation API requests and responses.
"""

from pydantic import BaseModel, Field, validator
from typing import List, Dict, Any, Optional

from config import settings
from models.state import IncompatibilityPolicy, ResistanceSeeding, SimulationConfig
from models.traits import TraitConfig
from utils.validation import (
    validate_world_size,
    validate_mortality,
    validate_probability,
    validate_simulation_time,
    validate_trait_bounds
)

VALID_STATUSES = ['initialized', 'running', 'stopped', 'failed']


class SimulationCreateRequest(BaseModel):
    """Request model for creating a new simulation."""

    # Lattice
    world_width: int = Field(default=50, ge=1, description="Grid width in sites")
    world_height: int = Field(default=50, ge=1, description="Grid height in sites")
    mixed_environment: bool = Field(default=False, description="Well-mixed instead of spatially structured")

    # Population dynamics
    mortality: float = Field(default=0.1, gt=0.0, le=1.0, description="Per-trial death probability")
    initial_plasmid_density: float = Field(default=0.5,
                                           description="Fraction of initial hosts carrying a plasmid")
    immigration: float = Field(default=0.0, description="Per-trial immigration probability")

    # Trait distributions (bounds first so mean validators can see them)
    min_rc: float = Field(default=0.0, ge=0.0, le=1.0, description="Minimum replication cost")
    min_cc: float = Field(default=0.0, ge=0.0, le=1.0, description="Minimum conjugation cost")
    rm_mean: float = Field(default=0.05, ge=0.0, description="Mean replication cost")
    am_max: float = Field(default=0.05, ge=0.0, description="Maximum accessory gene cost")
    cm_mean: float = Field(default=0.05, ge=0.0, description="Mean conjugation cost")
    ec_mean: float = Field(default=1.0, ge=0.0, description="Mean conjugation efficiency")
    dev_strength: float = Field(default=0.5, ge=0.0, description="Relative trait deviation")
    inc_numbers: int = Field(default=5, ge=1, description="Number of incompatibility groups")

    # Inheritance
    seg_prob: float = Field(default=0.0, description="Segregation loss probability per fission")
    surface_exclusion: bool = Field(default=False, description="Reject incoming plasmids of a resident group")
    inc_seg_mechanism: IncompatibilityPolicy = Field(default=IncompatibilityPolicy.RANDOM_DAUGHTER_LOAD)

    # Antibiotics and resistance
    baa: float = Field(default=0.0, description="Bacteriostatic antibiotic action")
    generations_of_antibiotic_presence: int = Field(default=0, ge=0,
                                                    description="Ticks of antibiotic exposure")
    resistance_seeding: ResistanceSeeding = Field(default=ResistanceSeeding.NONE)
    non_conjugative_resistance: bool = Field(default=False)
    arp_prop: float = Field(default=0.01, description="Proportion of plasmids made resistant")
    single_plasmid_dynamics: bool = Field(default=False)

    # Run control
    simulation_time: int = Field(default=1000, ge=1, description="Tick budget")
    stop_when_resistance_is_lost: bool = Field(default=False)
    random_seed: Optional[int] = Field(default=None, description="Seed for reproducible runs")

    # Custom validators
    @validator('world_width', 'world_height')
    def validate_world(cls, v):
        return validate_world_size(v)

    @validator('mortality')
    def validate_mort(cls, v):
        return validate_mortality(v)

    @validator('initial_plasmid_density', 'immigration', 'seg_prob', 'baa', 'arp_prop')
    def validate_probabilities(cls, v):
        return validate_probability(v)

    @validator('simulation_time')
    def validate_sim_time(cls, v):
        return validate_simulation_time(v)

    @validator('rm_mean')
    def validate_rm_mean(cls, v, values):
        return validate_trait_bounds(v, values.get('min_rc', 0.0), "rm")

    @validator('cm_mean')
    def validate_cm_mean(cls, v, values):
        return validate_trait_bounds(v, values.get('min_cc', 0.0), "cm")

    def to_config(self) -> SimulationConfig:
        """Build the engine configuration from this request."""
        traits = TraitConfig(
            rm_mean=self.rm_mean,
            am_max=self.am_max,
            cm_mean=self.cm_mean,
            min_rc=self.min_rc,
            min_cc=self.min_cc,
            ec_mean=self.ec_mean,
            dev_strength=self.dev_strength,
            inc_numbers=self.inc_numbers,
            max_sampling_attempts=settings.max_trait_sampling_attempts,
        )
        return SimulationConfig(
            world_width=self.world_width,
            world_height=self.world_height,
            mixed_environment=self.mixed_environment,
            mortality=self.mortality,
            initial_plasmid_density=self.initial_plasmid_density,
            immigration=self.immigration,
            traits=traits,
            seg_prob=self.seg_prob,
            surface_exclusion=self.surface_exclusion,
            inc_seg_mechanism=self.inc_seg_mechanism,
            baa=self.baa,
            generations_of_antibiotic_presence=self.generations_of_antibiotic_presence,
            resistance_seeding=self.resistance_seeding,
            non_conjugative_resistance=self.non_conjugative_resistance,
            arp_prop=self.arp_prop,
            single_plasmid_dynamics=self.single_plasmid_dynamics,
            simulation_time=self.simulation_time,
            stop_when_resistance_is_lost=self.stop_when_resistance_is_lost,
            random_seed=self.random_seed,
        )


class SimulationStepRequest(BaseModel):
    """Request model for advancing a simulation."""

    ticks: int = Field(default=1, ge=1, le=10000, description="Number of ticks to advance")


class MetricsSnapshotModel(BaseModel):
    """Population summary for one tick."""

    tick: int = Field(ge=0)
    Fc: int = Field(ge=0, description="Plasmid-free host count")
    Pc: int = Field(ge=0, description="Plasmid-bearing host count")
    plasmid_count: int = Field(ge=0)
    inc_div: int = Field(ge=0, description="Distinct incompatibility groups")
    plasmid_div: int = Field(ge=0, description="Distinct plasmid identities")
    plasmid_host_div: int = Field(ge=0, description="Distinct host burden sums")
    ARP: int = Field(ge=0, description="Resistant plasmid count")
    ARB: int = Field(ge=0, description="Resistant host count")
    mean_host_fitness: float = Field(ge=0.0, le=1.0)
    fitness_histogram: List[int] = Field(default_factory=list)
    mean_traits: Dict[str, float] = Field(default_factory=dict)
    inc_counts: Dict[str, int] = Field(default_factory=dict)
    host_fitness: Optional[List[float]] = None


class PlasmidRecordModel(BaseModel):
    """Export row for one distinct plasmid identity."""

    run_id: str
    tick: int
    pid: int
    clone_count: int = Field(ge=1)
    x: int
    y: int
    pb: float
    rm: float
    cm: float
    am: float
    ec: float
    tp: float = Field(ge=0.0, le=1.0)
    inc: int = Field(ge=1)
    res: int = Field(ge=0, le=1)


class SimulationStatusResponse(BaseModel):
    """Response model for simulation status."""

    simulation_id: str = Field(description="Unique simulation identifier")
    status: str = Field(description="Current simulation status")
    current_tick: int = Field(default=0, description="Completed ticks")
    stop_reason: Optional[str] = Field(default=None, description="Why the run stopped, if it did")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Simulation parameters")
    latest_metrics: Optional[MetricsSnapshotModel] = None

    @validator('status')
    def validate_status(cls, v):
        if v not in VALID_STATUSES:
            raise ValueError(f"Status must be one of: {', '.join(VALID_STATUSES)}")
        return v

    @validator('current_tick')
    def validate_current_tick(cls, v):
        if v < 0:
            raise ValueError("Current tick cannot be negative")
        return v
