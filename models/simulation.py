"""
Simulation driver: setup, tick loop and stop handling.
"""

import logging
from typing import Callable, List, Optional

import numpy as np

from .engine import run_tick
from .incompatibility import IncompatibilityResolver
from .metrics import MetricsSnapshot, StopReason, check_stop, compute_metrics, export_records, PlasmidRecord
from .seeding import collapse_to_single_plasmid, seed_population, seed_resistance
from .state import SimulationConfig, SimulationState, TickEvents

logger = logging.getLogger(__name__)


class Simulation:
    """
    One run of the plasmid population model.

    ``setup`` seeds the population; each ``go`` advances one tick, recomputes
    metrics and evaluates the stop predicates. Once a stop reason is set
    the run is terminal.
    """

    def __init__(self, config: SimulationConfig, run_id: str = "run", rng: Optional[np.random.Generator] = None):
        """
        Initialize a run.

        Args:
            config: Run configuration
            run_id: Identifier used in export records
            rng: Random stream; seeded from the config if omitted
        """
        self.config = config
        self.run_id = run_id
        self._rng = rng
        self.state: Optional[SimulationState] = None
        self.resolver = IncompatibilityResolver(config.inc_seg_mechanism)
        self.history: List[MetricsSnapshot] = []
        self.event_history: List[TickEvents] = []
        self.stop_reason: Optional[StopReason] = None

    def setup(self) -> MetricsSnapshot:
        """
        Reset all state and seed the initial population.

        Returns:
            Metrics at tick 0
        """
        self.state = SimulationState.create(self.config, rng=self._rng)
        self.history = []
        self.event_history = []
        self.stop_reason = None

        seed_population(self.state)
        if self.config.single_plasmid_dynamics:
            collapse_to_single_plasmid(self.state)
        seed_resistance(self.state)

        snapshot = compute_metrics(self.state)
        self.history.append(snapshot)
        logger.info(f"Setup {self.run_id}: {self.config.world_width}x{self.config.world_height}, "
                    f"Fc={snapshot.fc}, Pc={snapshot.pc}, plasmids={snapshot.plasmid_count}")
        return snapshot

    @property
    def is_finished(self) -> bool:
        return self.stop_reason is not None

    @property
    def latest(self) -> Optional[MetricsSnapshot]:
        return self.history[-1] if self.history else None

    def go(self) -> MetricsSnapshot:
        """
        Advance one tick.

        Returns:
            Metrics after the tick

        Raises:
            RuntimeError: If the run was not set up or has already stopped
        """
        if self.state is None:
            raise RuntimeError("Simulation has not been set up")
        if self.is_finished:
            raise RuntimeError(f"Simulation already stopped: {self.stop_reason.value}")

        events = run_tick(self.state, self.resolver)
        snapshot = compute_metrics(self.state)
        self.history.append(snapshot)
        self.event_history.append(events)

        logger.debug(f"Tick {snapshot.tick}: Fc={snapshot.fc}, Pc={snapshot.pc}, "
                     f"plasmids={snapshot.plasmid_count}, ARP={snapshot.arp}")

        self.stop_reason = check_stop(self.state, snapshot)
        if self.stop_reason is not None:
            logger.info(f"Run {self.run_id} stopped at tick {snapshot.tick}: {self.stop_reason.value}")
        return snapshot

    def run(
        self,
        max_ticks: Optional[int] = None,
        callback: Optional[Callable[[MetricsSnapshot], None]] = None
    ) -> Optional[StopReason]:
        """
        Run until a stop condition is met or ``max_ticks`` more ticks elapse.

        Args:
            max_ticks: Optional cap on ticks for this call
            callback: Called with every new snapshot

        Returns:
            Stop reason, or None if interrupted by ``max_ticks``
        """
        if self.state is None:
            self.setup()

        ticks = 0
        while not self.is_finished and (max_ticks is None or ticks < max_ticks):
            snapshot = self.go()
            ticks += 1
            if callback is not None:
                callback(snapshot)
        return self.stop_reason

    def export(self) -> List[PlasmidRecord]:
        """Export rows for the current tick."""
        if self.state is None:
            return []
        return export_records(self.state, self.run_id)
