"""
Tests for API endpoints.
"""

import json

import pytest
import uuid


class TestRootEndpoints:
    """Test root and health endpoints."""

    def test_root_endpoint(self, client):
        """Test the root endpoint returns correct information."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["data"]["message"] == "Plasmid Biofilm Simulation API"
        assert "version" in data["data"]

    def test_health_endpoint(self, client):
        """Test the health check endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["data"]["status"] == "healthy"
        assert "X-Process-Time" in response.headers

    def test_unknown_route_uses_error_envelope(self, client):
        """Test routing errors are wrapped like route errors."""
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        data = response.json()
        assert data["success"] is False
        assert data["error"]["code"] == "HTTP_404"

        response = client.put("/health")
        assert response.status_code == 405
        assert response.json()["error"]["code"] == "HTTP_405"


class TestSimulationEndpoints:
    """Test simulation API endpoints."""

    def test_create_simulation_success(self, client, quick_simulation_params):
        """Test successful simulation creation."""
        response = client.post("/api/simulations/", json=quick_simulation_params)

        assert response.status_code == 201
        data = response.json()["data"]
        assert "simulation_id" in data
        assert data["status"] == "initialized"
        assert data["parameters"]["world_width"] == 10
        assert data["parameters"]["mortality"] == 0.2
        assert data["metrics"]["tick"] == 0
        assert data["metrics"]["Fc"] + data["metrics"]["Pc"] > 0

    def test_create_simulation_with_policies(self, client, quick_simulation_params):
        payload = dict(quick_simulation_params,
                       inc_seg_mechanism="identical-daughter-load",
                       resistance_seeding="many-random-with-near-mean-accessory-cost",
                       arp_prop=0.2,
                       surface_exclusion=True)
        response = client.post("/api/simulations/", json=payload)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["parameters"]["inc_seg_mechanism"] == "identical-daughter-load"
        assert data["metrics"]["ARP"] > 0

    def test_create_simulation_validation_error(self, client):
        """Test simulation creation with invalid parameters."""
        payload = {"world_width": 0, "mortality": 1.5}
        response = client.post("/api/simulations/", json=payload)

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        fields = {tuple(detail["loc"])[-1] for detail in error["details"]}
        assert {"world_width", "mortality"} <= fields

    def test_create_simulation_unknown_policy(self, client, quick_simulation_params):
        payload = dict(quick_simulation_params, inc_seg_mechanism="newest-wins")
        response = client.post("/api/simulations/", json=payload)
        assert response.status_code == 422

    def test_create_simulation_unsatisfiable_traits(self, client, quick_simulation_params):
        """Test trait distributions that can never be sampled are rejected."""
        payload = dict(quick_simulation_params, rm_mean=5.0, dev_strength=0.0)
        response = client.post("/api/simulations/", json=payload)

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_sampling_failure_during_step(self, client, quick_simulation_params):
        """Test a run that cannot sample immigrant plasmids reports 400, then 409."""
        payload = dict(quick_simulation_params, initial_plasmid_density=0.0, immigration=1.0,
                       cm_mean=5.0, dev_strength=0.0, simulation_time=20)
        response = client.post("/api/simulations/", json=payload)
        assert response.status_code == 201
        simulation_id = response.json()["data"]["simulation_id"]

        response = client.post(f"/api/simulations/{simulation_id}/step")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "HTTP_400"

        status_response = client.get(f"/api/simulations/{simulation_id}/status")
        assert status_response.status_code == 200
        assert status_response.json()["data"]["status"] == "failed"

        for path in ["step", "run"]:
            response = client.post(f"/api/simulations/{simulation_id}/{path}")
            assert response.status_code == 409
            assert response.json()["error"]["code"] == "HTTP_409"

    def test_step_simulation(self, client, created_simulation):
        response = client.post(f"/api/simulations/{created_simulation}/step", json={"ticks": 2})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["simulation_id"] == created_simulation
        assert data["current_tick"] <= 2
        assert data["latest_metrics"]["tick"] == data["current_tick"]

    def test_step_without_body(self, client, created_simulation):
        response = client.post(f"/api/simulations/{created_simulation}/step")
        assert response.status_code == 200
        assert response.json()["data"]["current_tick"] == 1

    def test_run_simulation(self, client, created_simulation):
        response = client.post(f"/api/simulations/{created_simulation}/run")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "stopped"
        assert data["stop_reason"] in ["tick budget reached", "plasmid extinction"]

    def test_run_stream(self, client, created_simulation):
        response = client.post(f"/api/simulations/{created_simulation}/run-stream")

        assert response.status_code == 200
        events = [json.loads(line[len("data: "):]) for line in response.text.splitlines()
                  if line.startswith("data: ")]
        assert events
        assert events[-1]["status"] == "stopped"

    def test_get_simulation_status(self, client, created_simulation):
        response = client.get(f"/api/simulations/{created_simulation}/status")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "initialized"
        assert data["current_tick"] == 0
        assert data["stop_reason"] is None

    def test_nonexistent_simulation(self, client):
        fake_id = str(uuid.uuid4())

        for method, path in [
            ("get", f"/api/simulations/{fake_id}/status"),
            ("post", f"/api/simulations/{fake_id}/step"),
            ("post", f"/api/simulations/{fake_id}/run"),
            ("post", f"/api/simulations/{fake_id}/run-stream"),
            ("delete", f"/api/simulations/{fake_id}"),
        ]:
            response = getattr(client, method)(path)
            assert response.status_code == 404
            assert response.json()["error"]["code"] == "HTTP_404"

    def test_list_simulations(self, client, quick_simulation_params):
        for _ in range(3):
            client.post("/api/simulations/", json=quick_simulation_params)

        response = client.get("/api/simulations/?page=1&page_size=2")
        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["data"]) == 2
        assert data["pagination"]["total_items"] == 3
        assert data["pagination"]["has_next"] is True

    def test_list_simulations_status_filter(self, client, created_simulation, quick_simulation_params):
        client.post("/api/simulations/", json=quick_simulation_params)
        client.post(f"/api/simulations/{created_simulation}/run")

        response = client.get("/api/simulations/?status=stopped")
        simulations = response.json()["data"]["data"]
        assert [s["simulation_id"] for s in simulations] == [created_simulation]

    def test_delete_simulation(self, client, created_simulation):
        response = client.delete(f"/api/simulations/{created_simulation}")
        assert response.status_code == 200

        response = client.get(f"/api/simulations/{created_simulation}/status")
        assert response.status_code == 404


class TestResultsEndpoints:
    """Test metric history and export endpoints."""

    def test_metrics_history(self, client, created_simulation):
        client.post(f"/api/simulations/{created_simulation}/run")
        response = client.get(f"/api/results/{created_simulation}/metrics")

        assert response.status_code == 200
        history = response.json()["data"]["history"]
        assert history[0]["tick"] == 0
        assert all("Fc" in entry and "Pc" in entry for entry in history)

    def test_metrics_history_downsampled(self, client, quick_simulation_params):
        payload = dict(quick_simulation_params, simulation_time=10, mortality=0.1,
                       initial_plasmid_density=1.0)
        simulation_id = client.post("/api/simulations/", json=payload).json()["data"]["simulation_id"]
        client.post(f"/api/simulations/{simulation_id}/run")

        response = client.get(f"/api/results/{simulation_id}/metrics?max_points=3")
        history = response.json()["data"]["history"]
        assert len(history) <= 3
        assert history[0]["tick"] == 0

    def test_latest_metrics(self, client, created_simulation):
        response = client.get(f"/api/results/{created_simulation}/metrics/latest")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["tick"] == 0
        assert len(data["host_fitness"]) == data["Fc"] + data["Pc"]
        assert len(data["fitness_histogram"]) == 10

    def test_export(self, client, created_simulation):
        response = client.get(f"/api/results/{created_simulation}/export")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["count"] == len(data["records"])
        record = data["records"][0]
        for key in ["run_id", "tick", "pid", "clone_count", "x", "y", "pb", "rm",
                    "cm", "am", "ec", "tp", "inc", "res"]:
            assert key in record
        assert record["run_id"] == created_simulation

    @pytest.mark.parametrize("path", ["metrics", "metrics/latest", "export"])
    def test_results_not_found(self, client, path):
        response = client.get(f"/api/results/{uuid.uuid4()}/{path}")
        assert response.status_code == 404
