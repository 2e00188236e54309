"""
Plasmid entities and the registry that tracks where they reside.

Plasmid identity (``pid``) is derived from the trait vector: every plasmid
carrying the same traits shares a ``pid``, which makes clonal lineages
countable. Each plasmid instance belongs to exactly one lattice site.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from .traits import PlasmidTraits

logger = logging.getLogger(__name__)

Site = Tuple[int, int]


@dataclass(eq=False)
class Plasmid:
    """
    A single plasmid copy residing in a host.

    Attributes:
        pid: Trait identity shared by all plasmids with identical traits
        traits: Immutable trait vector
        site: Lattice site of the host carrying this copy
    """

    pid: int
    traits: PlasmidTraits
    site: Site

    @property
    def inc(self) -> int:
        return self.traits.inc

    @property
    def res(self) -> int:
        return self.traits.res

    @property
    def pb(self) -> float:
        return self.traits.pb

    @property
    def tp(self) -> float:
        return self.traits.tp

    def __repr__(self) -> str:
        return f"Plasmid(pid={self.pid}, inc={self.inc}, res={self.res}, site={self.site})"


class PlasmidRegistry:
    """
    Owns every plasmid instance, indexed by residing site.

    Residents of a site are kept in insertion order, which is the fixed
    enumeration order used by weighted transfer selection and by
    clone-order incompatibility resolution.
    """

    def __init__(self):
        self._residents: Dict[Site, List[Plasmid]] = {}
        self._pid_by_key: Dict[tuple, int] = {}
        self.pid_counter = 0

    def identify(self, traits: PlasmidTraits) -> int:
        """
        Return the pid for a trait vector, assigning a new one if unseen.

        Args:
            traits: Trait vector to identify

        Returns:
            Interned plasmid identity
        """
        key = traits.key
        pid = self._pid_by_key.get(key)
        if pid is None:
            self.pid_counter += 1
            pid = self.pid_counter
            self._pid_by_key[key] = pid
        return pid

    def create(self, site: Site, traits: PlasmidTraits) -> Plasmid:
        """Create a plasmid with the given traits at ``site``."""
        plasmid = Plasmid(pid=self.identify(traits), traits=traits, site=site)
        self._residents.setdefault(site, []).append(plasmid)
        return plasmid

    def clone(self, plasmid: Plasmid, target_site: Site) -> Plasmid:
        """Copy a plasmid into ``target_site``; pid and traits are unchanged."""
        copy = Plasmid(pid=plasmid.pid, traits=plasmid.traits, site=target_site)
        self._residents.setdefault(target_site, []).append(copy)
        return copy

    def remove(self, plasmid: Plasmid) -> None:
        """Destroy a single plasmid instance."""
        residents = self._residents.get(plasmid.site)
        if not residents:
            return
        for index, resident in enumerate(residents):
            if resident is plasmid:
                del residents[index]
                break
        if not residents:
            del self._residents[plasmid.site]

    def clear_site(self, site: Site) -> int:
        """
        Remove every plasmid at a site.

        Returns:
            Number of plasmids removed
        """
        residents = self._residents.pop(site, None)
        return len(residents) if residents else 0

    def residents(self, site: Site) -> List[Plasmid]:
        """Plasmids at a site in enumeration order (a copy)."""
        return list(self._residents.get(site, ()))

    def count(self, site: Site) -> int:
        return len(self._residents.get(site, ()))

    def has_pid(self, site: Site, pid: int) -> bool:
        return any(p.pid == pid for p in self._residents.get(site, ()))

    def has_inc(self, site: Site, inc: int) -> bool:
        return any(p.inc == inc for p in self._residents.get(site, ()))

    def bearing_sites(self) -> List[Site]:
        """Sites that currently host at least one plasmid."""
        return list(self._residents.keys())

    def all_plasmids(self) -> Iterator[Plasmid]:
        for residents in self._residents.values():
            yield from residents

    def total(self) -> int:
        return sum(len(residents) for residents in self._residents.values())

    def clear(self) -> None:
        """Drop all plasmids and reset identity counters."""
        self._residents.clear()
        self._pid_by_key.clear()
        self.pid_counter = 0
