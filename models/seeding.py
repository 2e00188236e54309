"""
Setup-time seeding policies.

These establish the initial host and plasmid population and, optionally,
introduce antibiotic-resistance plasmids before the first tick.
"""

import logging
from dataclasses import replace
from typing import List, Optional

import numpy as np

from .plasmid import Plasmid, Site
from .state import ResistanceSeeding, SimulationState
from .traits import PlasmidTraits

logger = logging.getLogger(__name__)

TAKEOVER_RADIUS = 5.0
TEMPLATE_SEARCH_RADIUS = 3.0


def seed_population(state: SimulationState) -> int:
    """
    Populate the lattice with hosts and initial plasmids.

    Each site is occupied with probability ``1 - mortality``; a fraction
    ``initial_plasmid_density`` of occupied sites, chosen without
    replacement, receives one freshly sampled plasmid.

    Returns:
        Number of plasmids created
    """
    config, lattice, rng = state.config, state.lattice, state.rng

    occupy = rng.random((lattice.width, lattice.height)) < (1.0 - config.mortality)
    for x, y in zip(*np.nonzero(occupy)):
        lattice.occupy((int(x), int(y)))

    occupied = lattice.occupied_sites()
    n_bearers = int(len(occupied) * config.initial_plasmid_density)
    if n_bearers == 0:
        return 0

    chosen = rng.choice(len(occupied), size=n_bearers, replace=False)
    for index in chosen:
        state.registry.create(occupied[int(index)], state.sampler.sample(rng))

    logger.info(f"Seeded {len(occupied)} hosts, {n_bearers} carrying a plasmid")
    return n_bearers


def _takeover(state: SimulationState, center: Site, template: Plasmid) -> int:
    """
    Replace the load of every host within the takeover radius by one clone of ``template``.

    Plasmid-free hosts in the radius are converted too.
    """
    registry, lattice = state.registry, state.lattice
    converted = 0
    for site in lattice.sites_in_radius(center, TAKEOVER_RADIUS):
        if site == template.site or lattice.is_empty(site):
            continue
        registry.clear_site(site)
        registry.clone(template, site)
        converted += 1
    return converted


def _retype(state: SimulationState, plasmid: Plasmid, traits: PlasmidTraits) -> Plasmid:
    """Replace a plasmid by one with new traits (and hence a new identity) at the same site."""
    site = plasmid.site
    state.registry.remove(plasmid)
    return state.registry.create(site, traits)


def _matches_filter(plasmid: Plasmid, non_conjugative: bool) -> bool:
    return (plasmid.traits.cm == 0) if non_conjugative else (plasmid.traits.cm > 0)


def _central_bearers(state: SimulationState) -> List[Site]:
    registry = state.registry
    return [site for site in state.lattice.central_sites() if registry.count(site) > 0]


def seed_mean_properties(state: SimulationState) -> Optional[Plasmid]:
    """
    Plant a resistance plasmid with population-mean traits near the center.

    One plasmid-bearing central host has its first resident replaced by a
    resistant plasmid with mean ``rm, am`` over all plasmids and mean
    ``cm, ec`` over conjugative plasmids only (``cm = 0`` if non-conjugative
    resistance is requested or no plasmid is conjugative); every host within
    the takeover radius then carries a clone of it alone.

    Returns:
        The resistant template, or None if no central host carries a plasmid
    """
    registry, rng = state.registry, state.rng
    plasmids = list(registry.all_plasmids())
    candidates = _central_bearers(state)
    if not plasmids or not candidates:
        logger.warning("No plasmid-bearing host in the central area; resistance not seeded")
        return None

    site = candidates[int(rng.integers(len(candidates)))]
    resident = registry.residents(site)[0]

    conjugative = [p for p in plasmids if p.traits.cm > 0]
    if state.config.non_conjugative_resistance or not conjugative:
        cm = 0.0
        ec = float(np.mean([p.traits.ec for p in plasmids]))
    else:
        cm = float(np.mean([p.traits.cm for p in conjugative]))
        ec = float(np.mean([p.traits.ec for p in conjugative]))
    if cm * ec > 1:
        ec = 1.0 / cm
    traits = PlasmidTraits(
        rm=float(np.mean([p.traits.rm for p in plasmids])),
        am=float(np.mean([p.traits.am for p in plasmids])),
        cm=cm,
        ec=ec,
        inc=resident.inc,
        res=1,
    )

    registry.clear_site(site)
    template = registry.create(site, traits)
    converted = _takeover(state, site, template)
    logger.info(f"Seeded mean-property resistance plasmid pid={template.pid} at {site}, "
                f"{converted} neighbouring hosts taken over")
    return template


def seed_random_properties(state: SimulationState) -> Optional[Plasmid]:
    """
    Plant a resistance plasmid copied from an existing plasmid near the center.

    The template is a random plasmid within the search radius of a central
    plasmid-bearing host that matches the conjugative / non-conjugative
    filter; it is flagged resistant and takes over its neighbourhood.

    Returns:
        The resistant template, or None if no matching plasmid exists
    """
    registry, lattice, rng = state.registry, state.lattice, state.rng
    non_conjugative = state.config.non_conjugative_resistance

    centers = _central_bearers(state)
    for index in rng.permutation(len(centers)):
        center = centers[int(index)]
        pool = [
            plasmid
            for site in lattice.sites_in_radius(center, TEMPLATE_SEARCH_RADIUS)
            for plasmid in registry.residents(site)
            if _matches_filter(plasmid, non_conjugative)
        ]
        if not pool:
            continue

        chosen = pool[int(rng.integers(len(pool)))]
        site = chosen.site
        registry.clear_site(site)
        template = registry.create(site, replace(chosen.traits, res=1))
        converted = _takeover(state, site, template)
        logger.info(f"Seeded random-property resistance plasmid pid={template.pid} at {site}, "
                    f"{converted} neighbouring hosts taken over")
        return template

    logger.warning("No plasmid matching the resistance filter near the center; resistance not seeded")
    return None


def seed_many_near_mean_accessory_cost(state: SimulationState) -> int:
    """
    Flag a diffuse random sample of plasmids as resistant.

    Candidates are plasmids whose accessory cost lies within one standard
    deviation of the population mean; ``arp_prop`` of the plasmid population
    is flagged, without any spatial takeover.

    Returns:
        Number of plasmids flagged resistant
    """
    registry, rng = state.registry, state.rng
    plasmids = list(registry.all_plasmids())
    if not plasmids:
        logger.warning("No plasmids present; resistance not seeded")
        return 0

    am_values = np.array([p.traits.am for p in plasmids])
    mean, sd = float(am_values.mean()), float(am_values.std())
    candidates = [p for p in plasmids if abs(p.traits.am - mean) <= sd]

    count = min(int(state.config.arp_prop * len(plasmids)), len(candidates))
    if count == 0:
        logger.warning("ARP proportion yields no resistant plasmids")
        return 0

    for index in rng.choice(len(candidates), size=count, replace=False):
        plasmid = candidates[int(index)]
        _retype(state, plasmid, replace(plasmid.traits, res=1))

    logger.info(f"Flagged {count} plasmids with near-mean accessory cost as resistant")
    return count


def seed_resistance(state: SimulationState) -> None:
    """Apply the configured resistance seeding mode."""
    mode = state.config.resistance_seeding
    if mode == ResistanceSeeding.MEAN_PROPERTIES:
        seed_mean_properties(state)
    elif mode == ResistanceSeeding.RANDOM_PROPERTIES:
        seed_random_properties(state)
    elif mode == ResistanceSeeding.MANY_RANDOM_NEAR_MEAN_AM:
        seed_many_near_mean_accessory_cost(state)


def collapse_to_single_plasmid(state: SimulationState) -> Optional[Plasmid]:
    """
    Replace every initial plasmid by a clone of one randomly chosen plasmid.

    Returns:
        The surviving template, or None if there are no plasmids
    """
    registry, rng = state.registry, state.rng
    plasmids = list(registry.all_plasmids())
    if not plasmids:
        return None

    template = plasmids[int(rng.integers(len(plasmids)))]
    for site in registry.bearing_sites():
        if site == template.site:
            continue
        registry.clear_site(site)
        registry.clone(template, site)

    for other in registry.residents(template.site):
        if other is not template:
            registry.remove(other)

    logger.info(f"Collapsed initial population to clones of pid={template.pid}")
    return template
