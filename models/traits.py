"""
Plasmid trait model and sampler.

A plasmid is described by four cost/transfer traits:

- ``rm``: replication cost
- ``am``: accessory gene cost
- ``cm``: conjugation machinery cost (0 for non-conjugative plasmids)
- ``ec``: conjugation efficiency

from which the plasmid burden ``pb`` and transfer probability ``tp`` are
derived. The sampler draws trait vectors from configured distributions by
rejection sampling so that every returned vector is within range.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np

logger = logging.getLogger(__name__)


class UnsatisfiableTraitConfigurationError(ValueError):
    """Raised when rejection sampling cannot produce a valid trait value."""


@dataclass
class TraitConfig:
    """Distribution parameters for plasmid trait sampling."""

    rm_mean: float = 0.05
    am_max: float = 0.05
    cm_mean: float = 0.05
    min_rc: float = 0.0
    min_cc: float = 0.0
    ec_mean: float = 1.0
    dev_strength: float = 0.5
    inc_numbers: int = 5

    # None keeps the rejection loops unbounded
    max_sampling_attempts: Optional[int] = 10000

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.rm_mean < 0 or self.cm_mean < 0 or self.ec_mean < 0:
            raise ValueError("Trait means must be non-negative")
        if self.am_max < 0:
            raise ValueError("Maximum accessory cost must be non-negative")
        if self.dev_strength < 0:
            raise ValueError("Deviation strength must be non-negative")
        if not 0 <= self.min_rc <= 1:
            raise ValueError("Minimum replication cost must be between 0 and 1")
        if not 0 <= self.min_cc <= 1:
            raise ValueError("Minimum conjugation cost must be between 0 and 1")
        if self.inc_numbers < 1:
            raise ValueError("Number of incompatibility groups must be at least 1")
        if self.max_sampling_attempts is not None and self.max_sampling_attempts < 1:
            raise ValueError("Maximum sampling attempts must be positive")


@dataclass(frozen=True)
class PlasmidTraits:
    """
    Immutable trait vector of a plasmid.

    Attributes:
        rm: Replication cost
        am: Accessory gene cost
        cm: Conjugation cost (0 means non-conjugative)
        ec: Conjugation efficiency
        inc: Incompatibility group (1..inc_numbers)
        res: 1 if the plasmid confers antibiotic resistance, else 0
    """

    rm: float
    am: float
    cm: float
    ec: float
    inc: int
    res: int = 0

    @property
    def pb(self) -> float:
        """Plasmid burden on the host's growth."""
        return self.rm + self.am + self.cm

    @property
    def tp(self) -> float:
        """Transfer probability, clamped to [0, 1]."""
        return min(1.0, max(0.0, self.cm * self.ec))

    @property
    def is_conjugative(self) -> bool:
        return self.cm > 0

    @property
    def key(self) -> tuple:
        """Value key used to intern plasmid identities."""
        return (self.rm, self.am, self.cm, self.ec, self.inc, self.res)

    def to_dict(self) -> dict:
        """Convert traits to dictionary for serialization."""
        return {
            "pb": self.pb,
            "rm": self.rm,
            "cm": self.cm,
            "am": self.am,
            "ec": self.ec,
            "tp": self.tp,
            "inc": self.inc,
            "res": self.res,
        }


class TraitSampler:
    """
    Draws valid plasmid trait vectors.

    All randomness comes from the numpy ``Generator`` passed to ``sample`` so
    that a run is reproducible from its seed.
    """

    def __init__(self, config: TraitConfig):
        """
        Initialize the sampler.

        Args:
            config: Trait distribution parameters
        """
        self.config = config

    def _rejection_loop(
        self,
        draw: Callable[[], float],
        accept: Callable[[float], bool],
        trait_name: str
    ) -> float:
        """Redraw until ``accept`` holds, bounded by ``max_sampling_attempts``."""
        limit = self.config.max_sampling_attempts
        attempts = 0
        value = draw()
        while not accept(value):
            attempts += 1
            if limit is not None and attempts >= limit:
                raise UnsatisfiableTraitConfigurationError(
                    f"Could not sample a valid '{trait_name}' after {attempts} attempts; "
                    f"check the trait distribution parameters"
                )
            value = draw()
        return value

    def sample_rm(self, rng: np.random.Generator) -> float:
        cfg = self.config
        return self._rejection_loop(
            lambda: float(rng.normal(cfg.rm_mean, cfg.rm_mean * cfg.dev_strength)),
            lambda v: cfg.min_rc <= v <= 1,
            "rm"
        )

    def sample_cm(self, rng: np.random.Generator) -> float:
        """Half of all plasmids are non-conjugative (cm = 0)."""
        cfg = self.config
        if rng.random() < 0.5:
            return 0.0
        return self._rejection_loop(
            lambda: float(rng.normal(cfg.cm_mean, cfg.cm_mean * cfg.dev_strength)),
            lambda v: cfg.min_cc <= v <= 1,
            "cm"
        )

    def sample_am(self, rng: np.random.Generator) -> float:
        return float(rng.uniform(0.0, self.config.am_max))

    def sample_ec(self, rng: np.random.Generator, cm: float) -> float:
        """
        Draw conjugation efficiency such that ``cm * ec`` lies in [0, 1].

        The inner loop rejects negative efficiencies; the outer loop redraws
        until the resulting transfer probability is in range.
        """
        cfg = self.config

        def draw_ec() -> float:
            return self._rejection_loop(
                lambda: float(rng.normal(cfg.ec_mean, cfg.dev_strength)),
                lambda v: v >= 0,
                "ec"
            )

        return self._rejection_loop(
            draw_ec,
            lambda v: 0 <= cm * v <= 1,
            "tp"
        )

    def sample_inc(self, rng: np.random.Generator) -> int:
        return int(rng.integers(1, self.config.inc_numbers + 1))

    def sample(self, rng: np.random.Generator) -> PlasmidTraits:
        """
        Draw one complete, valid trait vector.

        Args:
            rng: Random number generator

        Returns:
            New PlasmidTraits with ``res = 0``

        Raises:
            UnsatisfiableTraitConfigurationError: If a rejection loop exceeds
                the configured attempt limit
        """
        rm = self.sample_rm(rng)
        cm = self.sample_cm(rng)
        am = self.sample_am(rng)
        ec = self.sample_ec(rng, cm)
        inc = self.sample_inc(rng)
        return PlasmidTraits(rm=rm, am=am, cm=cm, ec=ec, inc=inc, res=0)
