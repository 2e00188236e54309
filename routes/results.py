"""
Results API routes: metric histories, fitness distributions and plasmid export rows.
"""

from fastapi import APIRouter, HTTPException, status, Query
from typing import Dict, Any, Optional
from routes.simulation import simulation_service
from services.simulation_service import SimulationNotFoundError
from schemas.simulation import MetricsSnapshotModel, PlasmidRecordModel
from schemas.errors import ERROR_RESPONSES
from utils.data_transform import DataTransformer, ResponseBuilder

router = APIRouter(prefix="/api/results", tags=["Results"])


@router.get("/{simulation_id}/metrics", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def get_metrics_history(
    simulation_id: str,
    max_points: Optional[int] = Query(None, ge=2, description="Downsample the history to this many ticks")
) -> Dict[str, Any]:
    """
    Get the per-tick metric history of a simulation.

    Args:
        simulation_id: ID of the simulation
        max_points: Optional maximum number of ticks returned

    Returns:
        List of per-tick summaries with event counts
    """
    try:
        history = simulation_service.get_metrics_history(simulation_id)
    except SimulationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    if max_points is not None:
        history = DataTransformer.compress_history(history, max_points)

    return ResponseBuilder.success(
        data={"simulation_id": simulation_id, "history": history},
        message="Metrics history retrieved successfully"
    )


@router.get("/{simulation_id}/metrics/latest", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def get_latest_metrics(simulation_id: str) -> Dict[str, Any]:
    """
    Get the latest snapshot including the per-host fitness distribution.

    Args:
        simulation_id: ID of the simulation

    Returns:
        Latest metrics snapshot
    """
    try:
        snapshot = simulation_service.get_latest_metrics(simulation_id)
    except SimulationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return ResponseBuilder.success(
        data=MetricsSnapshotModel(**snapshot).dict(),
        message="Latest metrics retrieved successfully"
    )


@router.get("/{simulation_id}/export", response_model=Dict[str, Any], responses=ERROR_RESPONSES)
async def export_plasmids(simulation_id: str) -> Dict[str, Any]:
    """
    Export one row per distinct plasmid identity at the current tick.

    Args:
        simulation_id: ID of the simulation

    Returns:
        Export rows with clone counts, positions and trait values
    """
    try:
        rows = simulation_service.export_simulation(simulation_id)
    except SimulationNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    records = [PlasmidRecordModel(**row).dict() for row in rows]
    return ResponseBuilder.success(
        data={"simulation_id": simulation_id, "records": records, "count": len(records)},
        message="Plasmid records exported successfully"
    )
