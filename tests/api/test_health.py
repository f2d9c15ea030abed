from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from edustats.api import health


def test_health_returns_ok(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    # Neither backing service is configured under test
    assert data["checks"] == {"redis": "not_configured", "database": "not_configured"}


def test_health_reports_degraded_database(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _down() -> bool:
        return False

    monkeypatch.setattr(health, "engine", object())
    monkeypatch.setattr(health, "ping_database", _down)

    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["checks"]["database"] == "degraded"


def test_ready_returns_200(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200


def test_ready_returns_503_when_database_unreachable(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _down() -> bool:
        return False

    monkeypatch.setattr(health, "engine", object())
    monkeypatch.setattr(health, "ping_database", _down)

    assert client.get("/ready").status_code == 503


def test_health_needs_no_token(client: TestClient) -> None:
    assert client.get("/health").status_code == 200
