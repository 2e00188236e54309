"""
Lattice model for the biofilm simulation.

This module provides the 2D site grid on which bacterial hosts live,
including occupancy tracking, Moore-neighborhood queries and the
well-mixed addressing mode in which every site is a neighbor of every other.
"""

import logging
import math
from typing import List, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Site = Tuple[int, int]

# 8-connected Moore neighborhood
MOORE_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


class Lattice:
    """
    Rectangular grid of sites, each hosting at most one bacterium.

    Edges are hard boundaries: border sites simply have fewer neighbors.
    In well-mixed mode neighbor queries are replaced by uniform draws over
    the whole grid.
    """

    def __init__(self, width: int, height: int, mixed: bool = False):
        """
        Initialize the lattice.

        Args:
            width: Number of columns
            height: Number of rows
            mixed: Use well-mixed addressing instead of spatial neighbors
        """
        if width <= 0 or height <= 0:
            raise ValueError("Lattice dimensions must be positive")

        self.width = width
        self.height = height
        self.mixed = mixed
        self.occupied = np.zeros((width, height), dtype=bool)
        self._occupied_count = 0

        logger.debug(f"Initialized lattice: {width}x{height}, mixed: {mixed}")

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def occupied_count(self) -> int:
        return self._occupied_count

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.width - 1) / 2.0, (self.height - 1) / 2.0)

    def in_bounds(self, site: Site) -> bool:
        x, y = site
        return 0 <= x < self.width and 0 <= y < self.height

    def is_empty(self, site: Site) -> bool:
        return not self.occupied[site]

    def is_occupied(self, site: Site) -> bool:
        return bool(self.occupied[site])

    def occupy(self, site: Site) -> None:
        """Mark a site as hosting a living bacterium."""
        if not self.occupied[site]:
            self.occupied[site] = True
            self._occupied_count += 1

    def vacate(self, site: Site) -> None:
        """Mark a site as empty."""
        if self.occupied[site]:
            self.occupied[site] = False
            self._occupied_count -= 1

    def clear(self) -> None:
        self.occupied[:] = False
        self._occupied_count = 0

    def neighbors(self, site: Site) -> List[Site]:
        """
        Get the Moore neighborhood of a site.

        Args:
            site: Site whose neighbors are requested

        Returns:
            In-bounds neighbor sites (3 to 8 of them)
        """
        x, y = site
        return [
            (x + dx, y + dy)
            for dx, dy in MOORE_OFFSETS
            if 0 <= x + dx < self.width and 0 <= y + dy < self.height
        ]

    def empty_neighbors(self, site: Site) -> List[Site]:
        return [n for n in self.neighbors(site) if not self.occupied[n]]

    def any_site(self, rng: np.random.Generator) -> Site:
        """Uniformly random site, occupied or not."""
        return (int(rng.integers(self.width)), int(rng.integers(self.height)))

    def empty_fraction(self) -> float:
        return (self.size - self._occupied_count) / self.size

    def resource_availability(self, site: Site) -> float:
        """
        Fraction of free space available to the host at ``site``.

        Structured mode uses empty Moore neighbors over 8; well-mixed mode
        uses the population-wide empty fraction.
        """
        if self.mixed:
            return self.empty_fraction()
        return len(self.empty_neighbors(site)) / 8.0

    def random_empty_target(self, site: Site, rng: np.random.Generator) -> Optional[Site]:
        """
        Pick a destination for a daughter cell.

        Args:
            site: Site of the dividing mother
            rng: Random number generator

        Returns:
            A random empty neighbor (structured) or random empty site
            (well-mixed), or None if there is no room
        """
        if self.mixed:
            if self._occupied_count >= self.size:
                return None
            flat = np.flatnonzero(~self.occupied)
            index = int(flat[rng.integers(len(flat))])
            return (index // self.height, index % self.height)

        candidates = self.empty_neighbors(site)
        if not candidates:
            return None
        return candidates[int(rng.integers(len(candidates)))]

    def random_partner(self, site: Site, rng: np.random.Generator) -> Site:
        """Pick a conjugation partner site; it may be empty."""
        if self.mixed:
            return self.any_site(rng)
        candidates = self.neighbors(site)
        return candidates[int(rng.integers(len(candidates)))]

    def occupied_sites(self) -> List[Site]:
        xs, ys = np.nonzero(self.occupied)
        return [(int(x), int(y)) for x, y in zip(xs, ys)]

    def sites_in_radius(self, site: Site, radius: float) -> List[Site]:
        """All in-bounds sites within Euclidean ``radius`` of ``site``, itself included."""
        x, y = site
        reach = int(math.floor(radius))
        result = []
        for i in range(max(0, x - reach), min(self.width, x + reach + 1)):
            for j in range(max(0, y - reach), min(self.height, y + reach + 1)):
                if (i - x) ** 2 + (j - y) ** 2 <= radius ** 2:
                    result.append((i, j))
        return result

    def central_sites(self, radius: Optional[float] = None) -> List[Site]:
        """
        Sites in the central area of the grid.

        Args:
            radius: Distance from the grid center; defaults to a quarter of
                the smaller dimension

        Returns:
            Sites whose distance to the center is within ``radius``
        """
        if radius is None:
            radius = max(1.0, min(self.width, self.height) / 4.0)
        cx, cy = self.center
        return [
            (i, j)
            for i in range(self.width)
            for j in range(self.height)
            if (i - cx) ** 2 + (j - cy) ** 2 <= radius ** 2
        ]
