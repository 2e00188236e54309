"""
Error response schemas for API error handling.
"""

from pydantic import BaseModel, Field
from typing import Optional, Any


class ErrorBody(BaseModel):
    """Error payload inside the response envelope."""

    message: str = Field(description="Error message")
    code: str = Field(description="Machine-readable error code")
    timestamp: str = Field(description="Error timestamp")
    details: Optional[Any] = Field(default=None, description="Additional error details")


class ErrorResponse(BaseModel):
    """Envelope returned for every failed request."""

    success: bool = Field(default=False)
    error: ErrorBody


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid simulation parameters"},
    404: {"model": ErrorResponse, "description": "Simulation not found"},
    409: {"model": ErrorResponse, "description": "Simulation cannot be advanced in its current status"},
    422: {"model": ErrorResponse, "description": "Request validation failed"},
}
