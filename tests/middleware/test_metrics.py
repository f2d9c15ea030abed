"""Prometheus metrics tests.

The default registry is global and counters never reset, so every
assertion is on the delta around the action.
"""

from __future__ import annotations

from uuid import UUID

from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from tests.conftest import auth


def _get_sample(name: str, labels: dict | None = None) -> float:
    value = REGISTRY.get_sample_value(name, labels=labels or {})
    return value if value is not None else 0.0


def test_request_counter_increments(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/health")
    assert _get_sample("http_requests_total", labels) - before >= 1


def test_endpoint_label_is_route_template(
    client: TestClient, student_token: str, student_id: UUID
) -> None:
    labels = {
        "method": "GET",
        "endpoint": "/statistics/summary/user/{id}",
        "status_code": "200",
    }
    before = _get_sample("http_requests_total", labels)
    client.get(f"/statistics/summary/user/{student_id}", headers=auth(student_token))
    assert _get_sample("http_requests_total", labels) - before == 1


def test_request_duration_histogram_observes(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/health"}
    before = _get_sample("http_request_duration_seconds_count", labels)
    client.get("/health")
    assert _get_sample("http_request_duration_seconds_count", labels) - before >= 1


def test_metrics_endpoint_returns_prometheus_format(client: TestClient) -> None:
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    assert "http_requests_total" in resp.text
    assert "statistic_events_recorded_total" in resp.text


def test_metrics_endpoint_not_self_instrumented(client: TestClient) -> None:
    labels = {"method": "GET", "endpoint": "/metrics", "status_code": "200"}
    before = _get_sample("http_requests_total", labels)
    client.get("/metrics")
    assert _get_sample("http_requests_total", labels) == before


def test_recorded_events_are_counted(client: TestClient, student_token: str) -> None:
    labels = {"event_type": "visit"}
    before = _get_sample("statistic_events_recorded_total", labels)
    client.post("/statistics", json={"eventType": "visit"}, headers=auth(student_token))
    assert _get_sample("statistic_events_recorded_total", labels) - before == 1


def test_rejected_events_are_not_counted(
    client: TestClient, student_token: str
) -> None:
    labels = {"event_type": "material"}
    before = _get_sample("statistic_events_recorded_total", labels)
    client.post(
        "/statistics",
        json={"eventType": "material", "payload": {}},
        headers=auth(student_token),
    )
    assert _get_sample("statistic_events_recorded_total", labels) == before


def test_report_duration_observed(
    client: TestClient, student_token: str, student_id: UUID
) -> None:
    labels = {"report": "progress"}
    before = _get_sample("statistics_report_duration_seconds_count", labels)
    client.get(f"/statistics/progress/user/{student_id}", headers=auth(student_token))
    assert _get_sample("statistics_report_duration_seconds_count", labels) - before == 1


def test_rate_limit_hits_counted(client: TestClient, student_token: str) -> None:
    before = _get_sample("rate_limit_hits_total", {"key_type": "user"})
    for _ in range(65):
        client.post(
            "/statistics", json={"eventType": "visit"}, headers=auth(student_token)
        )
    assert _get_sample("rate_limit_hits_total", {"key_type": "user"}) - before >= 1
