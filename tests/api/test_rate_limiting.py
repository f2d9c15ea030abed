"""Token-bucket rate limiting on the write endpoints.

POST /statistics allows a burst of 60 per caller, POST /practices 20.
Read endpoints are not limited.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, mint_token


def _visit(client: TestClient, token: str):
    return client.post("/statistics", json={"eventType": "visit"}, headers=auth(token))


def test_requests_within_limit_succeed(client: TestClient, student_token: str) -> None:
    for _ in range(5):
        assert _visit(client, student_token).status_code == 201


def test_rate_limit_headers_present(client: TestClient, student_token: str) -> None:
    resp = _visit(client, student_token)
    assert resp.headers["x-ratelimit-limit"] == "60"
    assert int(resp.headers["x-ratelimit-remaining"]) == 59


def test_requests_over_limit_get_429(client: TestClient, student_token: str) -> None:
    statuses = [_visit(client, student_token).status_code for _ in range(65)]
    assert 201 in statuses
    assert 429 in statuses


def test_429_has_retry_after_and_message(
    client: TestClient, student_token: str
) -> None:
    last = None
    for _ in range(70):
        last = _visit(client, student_token)
    assert last is not None
    assert last.status_code == 429
    assert int(last.headers["retry-after"]) > 0
    assert last.headers["x-ratelimit-remaining"] == "0"
    assert last.json() == {"message": "Rate limit exceeded"}


def test_practice_submission_has_tighter_limit(
    client: TestClient, student_token: str
) -> None:
    body = {"code": "P-1", "score": {"correct": 1, "total": 2}}
    statuses = [
        client.post("/practices", json=body, headers=auth(student_token)).status_code
        for _ in range(25)
    ]
    assert statuses[:20] == [201] * 20
    assert 429 in statuses


def test_different_users_have_separate_buckets(client: TestClient) -> None:
    token_a = mint_token(role="student")
    token_b = mint_token(role="student")

    for _ in range(65):
        _visit(client, token_a)

    assert _visit(client, token_b).status_code == 201


def test_report_reads_are_not_limited(
    client: TestClient, student_token: str, student_id
) -> None:
    for _ in range(70):
        resp = client.get(
            f"/statistics/progress/user/{student_id}", headers=auth(student_token)
        )
        assert resp.status_code == 200
