"""
Simulation API routes for plasmid population simulations.
"""

from fastapi import APIRouter, HTTPException, status, Query
from fastapi.responses import StreamingResponse
from typing import Dict, Any, Optional
import json
import uuid
from services.simulation_service import SimulationNotFoundError, SimulationService, SimulationStateError
from schemas.simulation import (
    SimulationCreateRequest,
    SimulationStepRequest,
    SimulationStatusResponse
)
from schemas.errors import ERROR_RESPONSES
from utils.data_transform import DataTransformer, ResponseBuilder

router = APIRouter(prefix="/api/simulations", tags=["Simulations"])

# Global simulation service instance
simulation_service = SimulationService()


def _status_payload(result: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a service status dict against the response schema."""
    return SimulationStatusResponse(**result).dict()


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED,
             responses=ERROR_RESPONSES)
async def create_simulation(request: SimulationCreateRequest) -> Dict[str, Any]:
    """
    Create and seed a new plasmid population simulation.

    Args:
        request: Lattice, trait, inheritance, antibiotic and run parameters

    Returns:
        Simulation metadata with unique ID, parameters and tick-0 metrics
    """
    try:
        config = request.to_config()
        simulation_id = str(uuid.uuid4())
        result = simulation_service.create_simulation(simulation_id=simulation_id, config=config)

        return ResponseBuilder.success(
            data=result,
            message="Simulation created successfully"
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.post("/{simulation_id}/step", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def step_simulation(
    simulation_id: str,
    request: Optional[SimulationStepRequest] = None
) -> Dict[str, Any]:
    """
    Advance a simulation by a number of ticks.

    Args:
        simulation_id: ID of the simulation
        request: Number of ticks to advance (default 1)

    Returns:
        Updated simulation status
    """
    ticks = request.ticks if request is not None else 1
    try:
        result = simulation_service.step_simulation(simulation_id, ticks=ticks)
    except SimulationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SimulationStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ResponseBuilder.success(
        data=_status_payload(result),
        message=f"Simulation advanced by up to {ticks} ticks"
    )


@router.post("/{simulation_id}/run", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def run_simulation(simulation_id: str) -> Dict[str, Any]:
    """
    Run a simulation until a stop condition is reached.

    Args:
        simulation_id: ID of the simulation to run

    Returns:
        Final simulation status including the stop reason
    """
    try:
        result = simulation_service.run_simulation(simulation_id)
    except SimulationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SimulationStateError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ResponseBuilder.success(
        data=_status_payload(result),
        message="Simulation completed successfully"
    )


@router.post("/{simulation_id}/run-stream", responses=ERROR_RESPONSES)
async def run_simulation_stream(
    simulation_id: str,
    report_every: int = Query(1, ge=1, description="Ticks between progress events")
):
    """
    Run a simulation with server-sent progress events.

    Args:
        simulation_id: ID of the simulation to run
        report_every: Ticks between progress events

    Returns:
        Event stream with per-tick metrics and the final status
    """
    if simulation_id not in simulation_service.active_simulations:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Simulation {simulation_id} not found"
        )

    async def generate_progress():
        """Generate server-sent events for simulation progress."""
        try:
            async for progress_data in simulation_service.run_simulation_async(simulation_id, report_every):
                payload = DataTransformer.serialize_numpy(progress_data)
                yield f"data: {json.dumps(payload)}\n\n"
        except (SimulationStateError, ValueError) as e:
            error_response = ResponseBuilder.error(str(e), "SIMULATION_ERROR")
            yield f"data: {json.dumps(error_response)}\n\n"

    return StreamingResponse(
        generate_progress(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"}
    )


@router.get("/{simulation_id}/status", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def get_simulation_status(simulation_id: str) -> Dict[str, Any]:
    """
    Get the current status and latest metrics of a simulation.

    Args:
        simulation_id: ID of the simulation

    Returns:
        Current simulation status
    """
    try:
        result = simulation_service.get_simulation_status(simulation_id)
    except SimulationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ResponseBuilder.success(
        data=_status_payload(result),
        message="Simulation status retrieved successfully"
    )


@router.get("/", response_model=Dict[str, Any])
async def list_simulations(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(10, ge=1, le=100, description="Items per page"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status")
) -> Dict[str, Any]:
    """
    List simulations with optional status filtering and pagination.

    Args:
        page: Page number for pagination
        page_size: Number of items per page
        status_filter: Filter simulations by status

    Returns:
        Paginated list of simulations
    """
    simulations = simulation_service.list_simulations()["simulations"]
    if status_filter:
        simulations = [s for s in simulations if s.get("status") == status_filter]

    return ResponseBuilder.success(
        data=DataTransformer.paginate_results(simulations, page, page_size),
        message="Simulations retrieved successfully"
    )


@router.delete("/{simulation_id}", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def delete_simulation(simulation_id: str) -> Dict[str, Any]:
    """
    Delete a simulation from memory.

    Args:
        simulation_id: ID of the simulation to delete

    Returns:
        Deletion confirmation
    """
    if not simulation_service.delete_simulation(simulation_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Simulation {simulation_id} not found"
        )

    return ResponseBuilder.success(
        data={"simulation_id": simulation_id},
        message=f"Simulation {simulation_id} deleted successfully"
    )
