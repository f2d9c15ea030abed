"""Bearer tokens must never appear in log output."""

from __future__ import annotations

import logging
from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from edustats.services import token_service
from tests.conftest import auth, mint_token


def _all_log_text(caplog: pytest.LogCaptureFixture) -> str:
    return " ".join(caplog.messages)


def test_valid_token_not_logged(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    token = mint_token(role="student")
    with caplog.at_level(logging.DEBUG):
        client.post("/statistics", json={"eventType": "visit"}, headers=auth(token))
    assert token not in _all_log_text(caplog)


def test_rejected_tokens_not_logged(
    client: TestClient, caplog: pytest.LogCaptureFixture
) -> None:
    expired = token_service.create_access_token(
        sub=str(uuid4()), role="student", ttl=timedelta(seconds=-1)
    )
    tampered = mint_token(role="admin")[:-4] + "AAAA"

    with caplog.at_level(logging.DEBUG):
        client.get("/materials", headers=auth(expired))
        client.get("/materials", headers=auth(tampered))

    text = _all_log_text(caplog)
    assert expired not in text
    assert tampered not in text
    assert "Expired token rejected" in text
