"""
Data transformation utilities for API request/response handling.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np


class DataTransformer:
    """Utility class for transforming simulation data into JSON-friendly form."""

    @staticmethod
    def serialize_numpy(obj: Any) -> Any:
        """
        Convert numpy scalars and arrays, enums, datetimes and tuples to plain
        Python types, recursing into dicts and lists.
        """
        if isinstance(obj, np.generic):
            return obj.item()
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, dict):
            return {key: DataTransformer.serialize_numpy(value) for key, value in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [DataTransformer.serialize_numpy(item) for item in obj]
        return obj

    @staticmethod
    def compress_history(history: List[Dict[str, Any]], max_points: int = 100) -> List[Dict[str, Any]]:
        """
        Reduce a metric history to at most ``max_points`` evenly spaced ticks.

        The first and last entries are always kept.
        """
        if len(history) <= max_points:
            return history

        indices = np.linspace(0, len(history) - 1, max_points, dtype=int)
        return [history[i] for i in indices]

    @staticmethod
    def paginate_results(data: List[Any], page: int = 1, page_size: int = 10) -> Dict[str, Any]:
        """Slice ``data`` to one 1-based page and describe where it sits."""
        total_items = len(data)
        total_pages = -(-total_items // page_size)
        start = (page - 1) * page_size

        return {
            "data": data[start:start + page_size],
            "pagination": {
                "page": page,
                "page_size": page_size,
                "total_items": total_items,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1
            }
        }


class ResponseBuilder:
    """Builds the success and error envelopes shared by every endpoint."""

    @staticmethod
    def _timestamp() -> str:
        return datetime.utcnow().isoformat()

    @staticmethod
    def success(data: Any, message: str = "Success") -> Dict[str, Any]:
        return {
            "success": True,
            "message": message,
            "data": DataTransformer.serialize_numpy(data),
            "timestamp": ResponseBuilder._timestamp()
        }

    @staticmethod
    def error(message: str, error_code: str = "UNKNOWN_ERROR", details: Optional[Any] = None) -> Dict[str, Any]:
        error = {"message": message, "code": error_code, "timestamp": ResponseBuilder._timestamp()}
        if details:
            error["details"] = DataTransformer.serialize_numpy(details)
        return {"success": False, "error": error}
