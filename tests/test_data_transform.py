"""
Tests for response serialization and envelope helpers.
"""

from datetime import datetime

import numpy as np

from models.state import IncompatibilityPolicy
from utils.data_transform import DataTransformer, ResponseBuilder


class TestDataTransformer:
    def test_serialize_nested_values(self):
        raw = {
            "count": np.int64(3),
            "fitness": np.array([0.5, 1.0]),
            "policy": IncompatibilityPolicy.IDENTICAL_DAUGHTER_LOAD,
            "created": datetime(2024, 1, 2, 3, 4, 5),
            "cell": (np.int32(1), 2),
        }
        serialized = DataTransformer.serialize_numpy(raw)

        assert serialized == {
            "count": 3,
            "fitness": [0.5, 1.0],
            "policy": "identical-daughter-load",
            "created": "2024-01-02T03:04:05",
            "cell": [1, 2],
        }
        assert type(serialized["count"]) is int

    def test_paginate_last_partial_page(self):
        page = DataTransformer.paginate_results(list(range(7)), page=3, page_size=3)

        assert page["data"] == [6]
        assert page["pagination"]["total_pages"] == 3
        assert page["pagination"]["has_next"] is False
        assert page["pagination"]["has_prev"] is True

    def test_paginate_empty(self):
        page = DataTransformer.paginate_results([], page=1, page_size=10)
        assert page["data"] == []
        assert page["pagination"]["total_pages"] == 0
        assert page["pagination"]["has_next"] is False


class TestResponseBuilder:
    def test_error_envelope(self):
        response = ResponseBuilder.error("boom", "HTTP_409", details=[{"loc": ("a",)}])

        assert response["success"] is False
        assert response["error"]["code"] == "HTTP_409"
        assert response["error"]["details"] == [{"loc": ["a"]}]

    def test_error_without_details(self):
        assert "details" not in ResponseBuilder.error("boom")["error"]
