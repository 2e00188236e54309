"""
Per-tick stochastic event engine.

Each tick performs many independent site trials. A trial draws one site
uniformly at random (with replacement), decides between lysis, fission and
conjugative transfer from a single uniform draw, applies the outcome, and
then runs an independent immigration check on the same site.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .incompatibility import IncompatibilityResolver
from .plasmid import Plasmid, Site
from .state import SimulationState, TickEvents

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Outcome of a single site trial."""
    LYSIS = "lysis"
    FISSION = "fission"
    TRANSFER = "transfer"
    NONE = "none"


class TransferOutcome(Enum):
    """Result of a conjugative transfer attempt."""
    TRANSFERRED = "transferred"
    NO_DONOR = "no_donor"
    NO_RECIPIENT = "no_recipient"
    REJECTED_IDENTITY = "rejected_identity"
    REJECTED_EXCLUSION = "rejected_exclusion"


@dataclass(frozen=True)
class EventProbabilities:
    """Per-trial event probabilities for an occupied site."""
    mortality: float
    fission: float
    transfer: float

    def choose(self, u: float) -> EventKind:
        """
        Map a uniform draw onto an event.

        Args:
            u: Draw from Uniform(0, 1)

        Returns:
            The event selected by cumulative thresholds
        """
        if u < self.mortality:
            return EventKind.LYSIS
        if u < self.mortality + self.fission:
            return EventKind.FISSION
        if u < self.mortality + self.fission + self.transfer:
            return EventKind.TRANSFER
        return EventKind.NONE


def event_probabilities(state: SimulationState, site: Site) -> EventProbabilities:
    """
    Compute lysis, fission and transfer probabilities for an occupied site.

    Fission is scaled by host fitness, local free space and, for hosts
    without a resistance plasmid, by the bacteriostatic antibiotic action.
    Transfer is the summed plasmid transfer probability scaled by free space.
    """
    residents = state.registry.residents(site)
    availability = state.lattice.resource_availability(site)
    fitness = max(0.0, 1.0 - sum(p.pb for p in residents))
    resistant = 1 if any(p.res == 1 for p in residents) else 0

    fission = fitness * availability * (1.0 - state.baa * (1 - resistant))
    transfer = sum(p.tp for p in residents) * availability
    return EventProbabilities(
        mortality=state.config.mortality,
        fission=fission,
        transfer=transfer,
    )


def trials_per_tick(state: SimulationState) -> int:
    """Number of site trials giving roughly one population turnover per tick."""
    return int(math.ceil(state.lattice.size / state.config.mortality))


def lysis(state: SimulationState, site: Site) -> None:
    """Kill the host at ``site``; a no-op on an empty site."""
    state.registry.clear_site(site)
    state.lattice.vacate(site)


def fission(state: SimulationState, site: Site, resolver: IncompatibilityResolver) -> Optional[Site]:
    """
    Divide the host at ``site`` into an empty target site.

    Plasmids are cloned into the daughter, one plasmid may then be lost to
    segregation, and incompatibility is resolved according to the
    configured policy.

    Args:
        state: Simulation state
        site: Mother site
        resolver: Incompatibility resolver

    Returns:
        Daughter site, or None if there was no room to divide
    """
    lattice, registry, rng = state.lattice, state.registry, state.rng

    target = lattice.random_empty_target(site, rng)
    if target is None:
        state.events.fission_blocked += 1
        return None

    lattice.occupy(target)
    state.events.fission += 1

    if registry.count(site) == 0:
        return target

    if resolver.filters_on_clone:
        state.events.incompatibility_removals += resolver.inherit(registry, site, target)
    else:
        for plasmid in registry.residents(site):
            registry.clone(plasmid, target)

    if rng.random() < state.config.seg_prob:
        pool = registry.residents(site) + registry.residents(target)
        if pool:
            registry.remove(pool[int(rng.integers(len(pool)))])
            state.events.segregation_losses += 1

    state.events.incompatibility_removals += resolver.resolve_after_fission(registry, site, target, rng)
    return target


def select_donor(residents: List[Plasmid], r: float) -> Plasmid:
    """
    Pick the first plasmid whose cumulative transfer probability exceeds ``r``.

    If rounding leaves ``r`` at or above the running total, the last plasmid
    with a positive transfer probability is chosen. At least one resident
    must have ``tp > 0``.
    """
    cumulative = 0.0
    for plasmid in residents:
        cumulative += plasmid.tp
        if cumulative > r:
            return plasmid
    return [p for p in residents if p.tp > 0][-1]


def conjugative_transfer(state: SimulationState, site: Site) -> TransferOutcome:
    """
    Attempt to pass one plasmid from ``site`` to a partner host.

    The donor plasmid is chosen by a single draw weighted by transfer
    probability. The recipient must be a living host that does not already
    carry the same plasmid identity and, with surface exclusion, no plasmid
    of the same incompatibility group.
    """
    lattice, registry, rng = state.lattice, state.registry, state.rng
    state.events.transfer_attempts += 1

    residents = registry.residents(site)
    total = sum(p.tp for p in residents)
    if total <= 0:
        return TransferOutcome.NO_DONOR

    target = lattice.random_partner(site, rng)
    if lattice.is_empty(target):
        return TransferOutcome.NO_RECIPIENT

    donor = select_donor(residents, rng.uniform(0.0, total))

    if registry.has_pid(target, donor.pid):
        state.events.transfer_rejected_identity += 1
        return TransferOutcome.REJECTED_IDENTITY
    if state.config.surface_exclusion and registry.has_inc(target, donor.inc):
        state.events.transfer_rejected_exclusion += 1
        return TransferOutcome.REJECTED_EXCLUSION

    registry.clone(donor, target)
    state.events.transfers += 1
    return TransferOutcome.TRANSFERRED


def immigrate(state: SimulationState, site: Site) -> None:
    """
    Replace whatever lives at ``site`` with a colonizing host.

    The colonizer carries one freshly sampled plasmid with probability equal
    to the initial plasmid density (0.5 when that density is 0), otherwise
    it is plasmid-free.
    """
    registry, rng = state.registry, state.rng
    registry.clear_site(site)
    state.lattice.occupy(site)

    density = state.config.initial_plasmid_density
    if density == 0:
        density = 0.5
    if rng.random() < density:
        registry.create(site, state.sampler.sample(rng))
    state.events.immigrations += 1


def run_trial(state: SimulationState, site: Site, resolver: IncompatibilityResolver) -> EventKind:
    """
    Run one trial at ``site``, followed by the immigration check.

    Returns:
        The event that fired (NONE for empty sites)
    """
    kind = EventKind.NONE
    if state.lattice.is_occupied(site):
        kind = event_probabilities(state, site).choose(state.rng.random())
        if kind == EventKind.LYSIS:
            lysis(state, site)
            state.events.lysis += 1
        elif kind == EventKind.FISSION:
            fission(state, site, resolver)
        elif kind == EventKind.TRANSFER:
            conjugative_transfer(state, site)

    immigration = state.config.immigration
    if immigration > 0 and state.rng.random() < immigration:
        immigrate(state, site)

    return kind


def run_tick(state: SimulationState, resolver: Optional[IncompatibilityResolver] = None) -> TickEvents:
    """
    Advance the simulation by one tick (one generation).

    Args:
        state: Simulation state, updated in place
        resolver: Incompatibility resolver; built from the config if omitted

    Returns:
        Event counts for this tick
    """
    if resolver is None:
        resolver = IncompatibilityResolver(state.config.inc_seg_mechanism)

    if state.baa > 0 and state.tick >= state.config.generations_of_antibiotic_presence:
        logger.info(f"Antibiotic exposure ended at tick {state.tick}")
        state.baa = 0.0

    state.events = TickEvents()
    trials = trials_per_tick(state)
    for _ in range(trials):
        run_trial(state, state.lattice.any_site(state.rng), resolver)
    state.events.trials = trials

    state.tick += 1
    return state.events
