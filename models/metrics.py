"""
Metrics aggregation, export records and stop predicates.

Summaries are recomputed from scratch after every tick; they are consumed
by stopping rules and by external reporting.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

import numpy as np

from .state import SimulationState

logger = logging.getLogger(__name__)

FITNESS_HISTOGRAM_BINS = 10


class StopReason(Enum):
    """Terminal states of a run."""
    TICK_BUDGET = "tick budget reached"
    PLASMID_EXTINCTION = "plasmid extinction"
    RESISTANCE_LOST = "resistance lost"


@dataclass
class MetricsSnapshot:
    """Population summary at the end of a tick."""

    tick: int = 0
    fc: int = 0
    pc: int = 0
    plasmid_count: int = 0
    inc_div: int = 0
    plasmid_div: int = 0
    plasmid_host_div: int = 0
    arp: int = 0
    arb: int = 0
    host_fitness: List[float] = field(default_factory=list)
    fitness_histogram: List[int] = field(default_factory=list)
    mean_traits: Dict[str, float] = field(default_factory=dict)
    inc_counts: Dict[int, int] = field(default_factory=dict)

    @property
    def occupied(self) -> int:
        return self.fc + self.pc

    @property
    def mean_host_fitness(self) -> float:
        if not self.host_fitness:
            return 0.0
        return float(np.mean(self.host_fitness))

    def to_dict(self, include_distribution: bool = True) -> Dict:
        """Convert snapshot to dictionary for serialization."""
        data = {
            "tick": self.tick,
            "Fc": self.fc,
            "Pc": self.pc,
            "plasmid_count": self.plasmid_count,
            "inc_div": self.inc_div,
            "plasmid_div": self.plasmid_div,
            "plasmid_host_div": self.plasmid_host_div,
            "ARP": self.arp,
            "ARB": self.arb,
            "mean_host_fitness": self.mean_host_fitness,
            "fitness_histogram": self.fitness_histogram,
            "mean_traits": self.mean_traits,
            "inc_counts": {str(k): v for k, v in self.inc_counts.items()},
        }
        if include_distribution:
            data["host_fitness"] = self.host_fitness
        return data


@dataclass
class PlasmidRecord:
    """One export row per distinct plasmid identity."""

    run_id: str
    tick: int
    pid: int
    clone_count: int
    position: tuple
    pb: float
    rm: float
    cm: float
    am: float
    ec: float
    tp: float
    inc: int
    res: int

    def to_dict(self) -> Dict:
        return {
            "run_id": self.run_id,
            "tick": self.tick,
            "pid": self.pid,
            "clone_count": self.clone_count,
            "x": self.position[0],
            "y": self.position[1],
            "pb": self.pb,
            "rm": self.rm,
            "cm": self.cm,
            "am": self.am,
            "ec": self.ec,
            "tp": self.tp,
            "inc": self.inc,
            "res": self.res,
        }


def compute_metrics(state: SimulationState) -> MetricsSnapshot:
    """
    Recompute every population summary.

    Args:
        state: Simulation state

    Returns:
        Snapshot for the current tick
    """
    registry = state.registry
    snapshot = MetricsSnapshot(tick=state.tick)

    burden_sums = set()
    pids = set()
    incs: Counter = Counter()
    traits = {"rm": [], "am": [], "cm": [], "ec": [], "tp": [], "pb": []}

    for site in state.lattice.occupied_sites():
        residents = registry.residents(site)
        burden = sum(sorted(p.pb for p in residents))
        snapshot.host_fitness.append(max(0.0, 1.0 - burden))
        if not residents:
            snapshot.fc += 1
            continue

        snapshot.pc += 1
        snapshot.plasmid_count += len(residents)
        burden_sums.add(round(burden, 12))
        if any(p.res == 1 for p in residents):
            snapshot.arb += 1
        for plasmid in residents:
            pids.add(plasmid.pid)
            incs[plasmid.inc] += 1
            snapshot.arp += plasmid.res
            for name in traits:
                traits[name].append(getattr(plasmid.traits, name))

    snapshot.inc_div = len(incs)
    snapshot.plasmid_div = len(pids)
    snapshot.plasmid_host_div = len(burden_sums)
    snapshot.inc_counts = dict(sorted(incs.items()))
    snapshot.mean_traits = {
        name: float(np.mean(values)) for name, values in traits.items() if values
    }
    histogram, _ = np.histogram(snapshot.host_fitness, bins=FITNESS_HISTOGRAM_BINS, range=(0.0, 1.0))
    snapshot.fitness_histogram = histogram.tolist()
    return snapshot


def export_records(state: SimulationState, run_id: str) -> List[PlasmidRecord]:
    """
    Build one export row per distinct plasmid identity.

    The position reported is that of the first clone encountered.
    """
    counts: Counter = Counter()
    first = {}
    for plasmid in state.registry.all_plasmids():
        counts[plasmid.pid] += 1
        first.setdefault(plasmid.pid, plasmid)

    records = []
    for pid in sorted(counts):
        plasmid = first[pid]
        t = plasmid.traits
        records.append(PlasmidRecord(
            run_id=run_id,
            tick=state.tick,
            pid=pid,
            clone_count=counts[pid],
            position=plasmid.site,
            pb=t.pb, rm=t.rm, cm=t.cm, am=t.am, ec=t.ec, tp=t.tp,
            inc=t.inc, res=t.res,
        ))
    return records


def check_stop(state: SimulationState, snapshot: MetricsSnapshot) -> Optional[StopReason]:
    """
    Evaluate stop predicates at a tick boundary.

    Returns:
        The reason to stop, or None to continue
    """
    if snapshot.pc == 0:
        return StopReason.PLASMID_EXTINCTION
    if state.config.stop_when_resistance_is_lost and snapshot.arp == 0:
        return StopReason.RESISTANCE_LOST
    if state.tick >= state.config.simulation_time:
        return StopReason.TICK_BUDGET
    return None
