"""
Tests for population and resistance seeding.
"""

import pytest
import numpy as np

from models.seeding import (
    TAKEOVER_RADIUS, collapse_to_single_plasmid, seed_many_near_mean_accessory_cost,
    seed_mean_properties, seed_population, seed_random_properties, seed_resistance
)
from models.traits import PlasmidTraits, TraitConfig


@pytest.fixture
def seeded_state(make_state):
    """A 20x20 lattice where nearly every host carries one plasmid."""
    def _make(**overrides):
        params = dict(world_width=20, world_height=20, mortality=0.05, initial_plasmid_density=1.0)
        params.update(overrides)
        state = make_state(**params)
        seed_population(state)
        return state
    return _make


def assert_takeover(state, template):
    """Every occupied host within the takeover radius carries exactly one clone."""
    for site in state.lattice.sites_in_radius(template.site, TAKEOVER_RADIUS):
        if state.lattice.is_empty(site):
            continue
        residents = state.registry.residents(site)
        assert [p.pid for p in residents] == [template.pid]


class TestSeedPopulation:
    """Test initial host and plasmid placement."""

    def test_density_controls_bearers(self, make_state):
        state = make_state(world_width=20, world_height=20, mortality=0.2, initial_plasmid_density=0.5)
        created = seed_population(state)

        occupied = state.lattice.occupied_count
        assert created == int(occupied * 0.5)
        assert len(state.registry.bearing_sites()) == created
        assert all(state.registry.count(site) == 1 for site in state.registry.bearing_sites())

    def test_zero_density(self, make_state):
        state = make_state(initial_plasmid_density=0.0)
        assert seed_population(state) == 0
        assert state.registry.total() == 0
        assert state.lattice.occupied_count > 0

    def test_full_mortality_leaves_lattice_empty(self, make_state):
        state = make_state(mortality=1.0)
        seed_population(state)
        assert state.lattice.occupied_count == 0

    def test_plasmids_only_on_occupied_sites(self, seeded_state):
        state = seeded_state()
        for site in state.registry.bearing_sites():
            assert state.lattice.is_occupied(site)


class TestMeanPropertiesSeeding:
    """Test the single central mean-property resistance plasmid."""

    def test_template_has_population_means(self, seeded_state):
        state = seeded_state(resistance_seeding="mean-properties")
        plasmids = list(state.registry.all_plasmids())
        expected_rm = np.mean([p.traits.rm for p in plasmids])
        expected_am = np.mean([p.traits.am for p in plasmids])

        template = seed_mean_properties(state)

        assert template is not None
        assert template.res == 1
        assert template.traits.rm == pytest.approx(expected_rm)
        assert template.traits.am == pytest.approx(expected_am)
        assert template.site in state.lattice.central_sites()
        assert_takeover(state, template)

    def test_non_conjugative_resistance(self, seeded_state):
        state = seeded_state(non_conjugative_resistance=True)
        template = seed_mean_properties(state)
        assert template.traits.cm == 0.0
        assert template.tp == 0.0

    def test_efficiency_clamped(self, make_state):
        """Test mean ec is lowered to 1 / cm when cm * ec exceeds one."""
        state = make_state()
        state.lattice.occupy((5, 5))
        state.registry.create((5, 5), PlasmidTraits(rm=0.1, am=0.0, cm=0.5, ec=3.0, inc=2))

        template = seed_mean_properties(state)
        assert template.traits.ec == pytest.approx(2.0)
        assert template.inc == 2
        assert template.tp == pytest.approx(1.0)

    def test_conjugation_cost_respects_minimum(self, seeded_state):
        """Test the template's cm is averaged over conjugative plasmids only."""
        traits = TraitConfig(cm_mean=0.3, min_cc=0.25, dev_strength=0.1)
        state = seeded_state(world_width=30, world_height=30, traits=traits)
        conjugative = [p for p in state.registry.all_plasmids() if p.traits.cm > 0]
        expected_cm = np.mean([p.traits.cm for p in conjugative])
        expected_ec = np.mean([p.traits.ec for p in conjugative])

        template = seed_mean_properties(state)

        assert template.traits.cm >= traits.min_cc
        assert template.traits.cm == pytest.approx(expected_cm)
        assert template.traits.ec == pytest.approx(expected_ec)

    def test_no_conjugative_plasmids(self, make_state):
        state = make_state()
        state.lattice.occupy((5, 5))
        state.registry.create((5, 5), PlasmidTraits(rm=0.1, am=0.0, cm=0.0, ec=0.8, inc=1))

        template = seed_mean_properties(state)
        assert template.traits.cm == 0.0
        assert template.traits.ec == pytest.approx(0.8)

    def test_takeover_converts_plasmid_free_hosts(self, make_state):
        state = make_state()
        state.lattice.occupy((5, 5))
        state.lattice.occupy((5, 6))
        state.registry.create((5, 5), PlasmidTraits(rm=0.1, am=0.0, cm=0.1, ec=1.0, inc=1))

        template = seed_mean_properties(state)
        assert [p.pid for p in state.registry.residents((5, 6))] == [template.pid]

    def test_no_central_bearer(self, make_state):
        state = make_state()
        state.lattice.occupy((0, 0))
        state.registry.create((0, 0), PlasmidTraits(rm=0.1, am=0.0, cm=0.1, ec=1.0, inc=1))

        assert seed_mean_properties(state) is None
        assert state.registry.residents((0, 0))[0].res == 0


class TestRandomPropertiesSeeding:
    """Test a resistance plasmid copied from an existing central plasmid."""

    def test_conjugative_template(self, seeded_state):
        state = seeded_state()
        template = seed_random_properties(state)

        assert template is not None
        assert template.res == 1
        assert template.traits.cm > 0
        assert_takeover(state, template)

    def test_non_conjugative_template(self, seeded_state):
        state = seeded_state(non_conjugative_resistance=True)
        template = seed_random_properties(state)
        assert template.traits.cm == 0

    def test_no_matching_plasmid(self, make_state):
        state = make_state()
        state.lattice.occupy((5, 5))
        state.registry.create((5, 5), PlasmidTraits(rm=0.1, am=0.0, cm=0.0, ec=1.0, inc=1))

        assert seed_random_properties(state) is None


class TestManyRandomSeeding:
    """Test diffuse flagging of near-mean accessory cost plasmids."""

    def test_flags_proportion_without_takeover(self, seeded_state):
        state = seeded_state(arp_prop=0.1)
        total = state.registry.total()

        flagged = seed_many_near_mean_accessory_cost(state)

        assert flagged > 0
        assert flagged <= int(0.1 * total)
        assert state.registry.total() == total
        assert sum(p.res for p in state.registry.all_plasmids()) == flagged

    def test_flagged_plasmids_near_mean(self, seeded_state):
        state = seeded_state(arp_prop=0.2)
        am = np.array([p.traits.am for p in state.registry.all_plasmids()])
        mean, sd = am.mean(), am.std()

        seed_many_near_mean_accessory_cost(state)
        for plasmid in state.registry.all_plasmids():
            if plasmid.res == 1:
                assert abs(plasmid.traits.am - mean) <= sd + 1e-12

    def test_zero_proportion(self, seeded_state):
        state = seeded_state(arp_prop=0.0)
        assert seed_many_near_mean_accessory_cost(state) == 0


class TestSeedResistanceDispatch:
    def test_none_is_noop(self, seeded_state):
        state = seeded_state()
        seed_resistance(state)
        assert sum(p.res for p in state.registry.all_plasmids()) == 0

    @pytest.mark.parametrize("mode", [
        "mean-properties", "random-properties", "many-random-with-near-mean-accessory-cost"
    ])
    def test_modes_produce_resistance(self, seeded_state, mode):
        state = seeded_state(resistance_seeding=mode, arp_prop=0.05)
        seed_resistance(state)
        assert sum(p.res for p in state.registry.all_plasmids()) > 0


class TestSinglePlasmidDynamics:
    def test_collapse_to_one_identity(self, seeded_state):
        state = seeded_state()
        bearers = len(state.registry.bearing_sites())

        template = collapse_to_single_plasmid(state)

        assert {p.pid for p in state.registry.all_plasmids()} == {template.pid}
        assert len(state.registry.bearing_sites()) == bearers
        assert all(state.registry.count(site) == 1 for site in state.registry.bearing_sites())

    def test_collapse_without_plasmids(self, make_state):
        assert collapse_to_single_plasmid(make_state()) is None
