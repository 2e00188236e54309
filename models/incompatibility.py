"""
Incompatibility resolution at cell division.

A host may stably carry at most one plasmid per incompatibility group.
Violations can appear after conjugation when surface exclusion is off, and
are sorted out when the host next divides.
"""

import logging
from collections import OrderedDict
from typing import Dict, List

import numpy as np

from .plasmid import Plasmid, PlasmidRegistry, Site
from .state import IncompatibilityPolicy

logger = logging.getLogger(__name__)


def group_by_inc(residents: List[Plasmid]) -> Dict[int, List[Plasmid]]:
    """Group plasmids by incompatibility group, preserving enumeration order."""
    groups: Dict[int, List[Plasmid]] = OrderedDict()
    for plasmid in residents:
        groups.setdefault(plasmid.inc, []).append(plasmid)
    return groups


def has_incompatible_residents(registry: PlasmidRegistry, site: Site) -> bool:
    """Check whether any incompatibility group is represented twice at a site."""
    incs = [p.inc for p in registry.residents(site)]
    return len(incs) != len(set(incs))


class IncompatibilityResolver:
    """
    Enforces the one-plasmid-per-group rule at fission.

    ``RANDOM_DAUGHTER_LOAD`` clones every plasmid and then keeps one random
    member of each duplicated group, independently at mother and daughter.
    ``IDENTICAL_DAUGHTER_LOAD`` filters while cloning: the daughter receives
    the first plasmid of each group in enumeration order, and the mother is
    trimmed to the same load.
    """

    def __init__(self, policy: IncompatibilityPolicy):
        self.policy = policy

    @property
    def filters_on_clone(self) -> bool:
        return self.policy == IncompatibilityPolicy.IDENTICAL_DAUGHTER_LOAD

    def resolve_site(self, registry: PlasmidRegistry, site: Site, rng: np.random.Generator) -> int:
        """
        Keep one uniformly chosen plasmid per duplicated group at ``site``.

        Args:
            registry: Plasmid registry
            site: Site to resolve
            rng: Random number generator

        Returns:
            Number of plasmids discarded
        """
        removed = 0
        for members in group_by_inc(registry.residents(site)).values():
            if len(members) < 2:
                continue
            keep = int(rng.integers(len(members)))
            for index, plasmid in enumerate(members):
                if index != keep:
                    registry.remove(plasmid)
                    removed += 1
        return removed

    def inherit(self, registry: PlasmidRegistry, mother: Site, daughter: Site) -> int:
        """
        Clone the mother's plasmids into the daughter, one per group.

        A plasmid is cloned only if the daughter does not already carry its
        group; mother plasmids that were not passed on are discarded so both
        cells start with identical loads.

        Returns:
            Number of plasmids discarded from the mother
        """
        removed = 0
        for plasmid in registry.residents(mother):
            if registry.has_inc(daughter, plasmid.inc):
                registry.remove(plasmid)
                removed += 1
            else:
                registry.clone(plasmid, daughter)
        return removed

    def resolve_after_fission(
        self,
        registry: PlasmidRegistry,
        mother: Site,
        daughter: Site,
        rng: np.random.Generator
    ) -> int:
        """Resolve both cells after a fission under the random policy."""
        if self.filters_on_clone:
            return 0
        return (self.resolve_site(registry, mother, rng) +
                self.resolve_site(registry, daughter, rng))
