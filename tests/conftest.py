"""
Pytest fixtures for model, service and API testing.
"""

import pytest
import numpy as np
from fastapi.testclient import TestClient
from main import app
from services.simulation_service import SimulationService
from models.state import SimulationConfig, SimulationState
from models.traits import PlasmidTraits, TraitConfig


@pytest.fixture
def client():
    """FastAPI test client fixture."""
    return TestClient(app)


@pytest.fixture
def simulation_service():
    """Clean simulation service fixture."""
    service = SimulationService()
    service.active_simulations.clear()
    return service


@pytest.fixture
def rng():
    """Reproducible random number generator."""
    return np.random.default_rng(seed=42)


@pytest.fixture
def small_config():
    """Small, fast configuration for engine tests."""
    return SimulationConfig(
        world_width=10,
        world_height=10,
        mortality=0.2,
        initial_plasmid_density=0.5,
        simulation_time=5,
        random_seed=7
    )


@pytest.fixture
def make_state(rng):
    """Factory for empty simulation states sharing the seeded generator."""
    def _make(**overrides):
        params = dict(world_width=10, world_height=10, mortality=0.2, simulation_time=5)
        params.update(overrides)
        return SimulationState.create(SimulationConfig(**params), rng=rng)
    return _make


@pytest.fixture
def conjugative_traits():
    """Factory for conjugative trait vectors with a chosen group."""
    def _make(inc=1, rm=0.01, am=0.01, cm=0.5, ec=1.0, res=0):
        return PlasmidTraits(rm=rm, am=am, cm=cm, ec=ec, inc=inc, res=res)
    return _make


@pytest.fixture
def quick_simulation_params():
    """Quick API simulation parameters for fast testing."""
    return {
        "world_width": 10,
        "world_height": 10,
        "mortality": 0.2,
        "initial_plasmid_density": 0.8,
        "simulation_time": 3,
        "random_seed": 11
    }


@pytest.fixture
def created_simulation(client, quick_simulation_params):
    """Fixture that creates a simulation through the API and returns its ID."""
    response = client.post("/api/simulations/", json=quick_simulation_params)
    assert response.status_code == 201
    return response.json()["data"]["simulation_id"]


@pytest.fixture(autouse=True)
def clean_simulations():
    """Automatically clean up simulations before each test."""
    from routes.simulation import simulation_service
    simulation_service.active_simulations.clear()
    yield
    simulation_service.active_simulations.clear()
