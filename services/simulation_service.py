"""
Simulation service for managing plasmid population simulations.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, AsyncGenerator, Dict, List, Optional

from models.simulation import Simulation
from models.state import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationNotFoundError(Exception):
    """Raised when no simulation is registered under the requested ID."""


class SimulationStateError(Exception):
    """Raised when a simulation cannot be advanced in its current status."""


class SimulationService:
    """Service class for creating, advancing and reporting on simulations."""

    def __init__(self):
        self.active_simulations: Dict[str, Dict[str, Any]] = {}

    def _get(self, simulation_id: str) -> Dict[str, Any]:
        if simulation_id not in self.active_simulations:
            raise SimulationNotFoundError(f"Simulation {simulation_id} not found")
        return self.active_simulations[simulation_id]

    @staticmethod
    def _parameters(config: SimulationConfig) -> Dict[str, Any]:
        params = dict(config.__dict__)
        params["traits"] = dict(config.traits.__dict__)
        params["inc_seg_mechanism"] = config.inc_seg_mechanism.value
        params["resistance_seeding"] = config.resistance_seeding.value
        return params

    def create_simulation(self, simulation_id: str, config: SimulationConfig) -> Dict[str, Any]:
        """
        Create and set up a new simulation.

        Args:
            simulation_id: Unique identifier for the simulation
            config: Engine configuration

        Returns:
            Dictionary containing simulation metadata and tick-0 metrics

        Raises:
            ValueError: If the configuration cannot be seeded
        """
        simulation = Simulation(config, run_id=simulation_id)
        snapshot = simulation.setup()

        now = datetime.utcnow().isoformat()
        self.active_simulations[simulation_id] = {
            "id": simulation_id,
            "status": "initialized",
            "created_at": now,
            "updated_at": now,
            "parameters": self._parameters(config),
            "simulation": simulation,
        }
        logger.info(f"Created simulation {simulation_id}")

        return {
            "simulation_id": simulation_id,
            "status": "initialized",
            "created_at": now,
            "parameters": self._parameters(config),
            "metrics": snapshot.to_dict(include_distribution=False),
        }

    def _advance(self, sim_data: Dict[str, Any], ticks: Optional[int]) -> None:
        simulation: Simulation = sim_data["simulation"]
        if sim_data["status"] == "failed":
            raise SimulationStateError(
                f"Simulation {sim_data['id']} has failed and cannot be advanced: {sim_data.get('error')}"
            )
        sim_data["status"] = "running"
        try:
            simulation.run(max_ticks=ticks)
        except Exception as e:
            sim_data["status"] = "failed"
            sim_data["error"] = str(e)
            sim_data["updated_at"] = datetime.utcnow().isoformat()
            logger.error(f"Simulation {sim_data['id']} failed: {e}")
            raise
        sim_data["status"] = "stopped" if simulation.is_finished else "running"
        sim_data["updated_at"] = datetime.utcnow().isoformat()

    def step_simulation(self, simulation_id: str, ticks: int = 1) -> Dict[str, Any]:
        """
        Advance a simulation by up to ``ticks`` ticks.

        Stepping a stopped simulation leaves it unchanged.

        Raises:
            SimulationNotFoundError: If the simulation does not exist
            SimulationStateError: If the simulation has failed
            ValueError: If trait sampling fails during the ticks
        """
        sim_data = self._get(simulation_id)
        self._advance(sim_data, ticks)
        return self.get_simulation_status(simulation_id)

    def run_simulation(self, simulation_id: str) -> Dict[str, Any]:
        """
        Run a simulation until one of its stop conditions is met.

        Args:
            simulation_id: ID of the simulation to run

        Returns:
            Dictionary containing final status and metrics

        Raises:
            SimulationNotFoundError: If the simulation does not exist
            SimulationStateError: If the simulation has failed
            ValueError: If trait sampling fails during the run
        """
        sim_data = self._get(simulation_id)
        self._advance(sim_data, None)
        return self.get_simulation_status(simulation_id)

    async def run_simulation_async(
        self,
        simulation_id: str,
        report_every: int = 1
    ) -> AsyncGenerator[Dict[str, Any], None]:
        """
        Run a simulation tick by tick, yielding progress updates.

        Args:
            simulation_id: ID of the simulation to run
            report_every: Yield a progress update every this many ticks

        Yields:
            Progress updates, then the final status
        """
        sim_data = self._get(simulation_id)
        simulation: Simulation = sim_data["simulation"]

        while not simulation.is_finished:
            self._advance(sim_data, 1)
            snapshot = simulation.latest
            if snapshot.tick % report_every == 0 or simulation.is_finished:
                yield {
                    "simulation_id": simulation_id,
                    "status": sim_data["status"],
                    "metrics": snapshot.to_dict(include_distribution=False),
                    "events": simulation.event_history[-1].to_dict(),
                }
            # Small delay to allow other operations
            await asyncio.sleep(0)

        yield self.get_simulation_status(simulation_id)

    def get_simulation_status(self, simulation_id: str) -> Dict[str, Any]:
        """
        Get the current status of a simulation.

        Args:
            simulation_id: ID of the simulation

        Returns:
            Dictionary containing simulation status and latest metrics
        """
        sim_data = self._get(simulation_id)
        simulation: Simulation = sim_data["simulation"]
        latest = simulation.latest

        return {
            "simulation_id": simulation_id,
            "status": sim_data["status"],
            "current_tick": simulation.state.tick if simulation.state else 0,
            "stop_reason": simulation.stop_reason.value if simulation.stop_reason else None,
            "created_at": sim_data.get("created_at"),
            "updated_at": sim_data.get("updated_at"),
            "parameters": sim_data["parameters"],
            "latest_metrics": latest.to_dict(include_distribution=False) if latest else None,
        }

    def get_metrics_history(self, simulation_id: str) -> List[Dict[str, Any]]:
        """Per-tick metrics and event counts since setup."""
        simulation: Simulation = self._get(simulation_id)["simulation"]
        history = []
        for index, snapshot in enumerate(simulation.history):
            entry = snapshot.to_dict(include_distribution=False)
            # history[0] is the setup snapshot and has no events
            if index > 0:
                entry["events"] = simulation.event_history[index - 1].to_dict()
            history.append(entry)
        return history

    def get_latest_metrics(self, simulation_id: str) -> Dict[str, Any]:
        """Full latest snapshot, including the per-host fitness distribution."""
        simulation: Simulation = self._get(simulation_id)["simulation"]
        return simulation.latest.to_dict(include_distribution=True)

    def export_simulation(self, simulation_id: str) -> List[Dict[str, Any]]:
        """One export row per distinct plasmid identity at the current tick."""
        simulation: Simulation = self._get(simulation_id)["simulation"]
        return [record.to_dict() for record in simulation.export()]

    def delete_simulation(self, simulation_id: str) -> bool:
        """
        Delete a simulation from memory.

        Args:
            simulation_id: ID of the simulation to delete

        Returns:
            True if deleted successfully, False if not found
        """
        if simulation_id in self.active_simulations:
            del self.active_simulations[simulation_id]
            return True
        return False

    def list_simulations(self) -> Dict[str, Any]:
        """
        List all active simulations.

        Returns:
            Dictionary containing list of simulation summaries
        """
        simulations = []
        for sim_id, sim_data in self.active_simulations.items():
            simulation: Simulation = sim_data["simulation"]
            simulations.append({
                "simulation_id": sim_id,
                "status": sim_data["status"],
                "created_at": sim_data.get("created_at"),
                "updated_at": sim_data.get("updated_at"),
                "current_tick": simulation.state.tick if simulation.state else 0,
                "stop_reason": simulation.stop_reason.value if simulation.stop_reason else None,
            })

        return {
            "active_simulations": len(simulations),
            "simulations": simulations
        }
