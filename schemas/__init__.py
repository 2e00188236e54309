"""
Pydantic schemas for request/response validation.
"""

from .simulation import (
    SimulationCreateRequest,
    SimulationStepRequest,
    SimulationStatusResponse,
    MetricsSnapshotModel,
    PlasmidRecordModel
)

__all__ = [
    "SimulationCreateRequest",
    "SimulationStepRequest",
    "SimulationStatusResponse",
    "MetricsSnapshotModel",
    "PlasmidRecordModel"
]
