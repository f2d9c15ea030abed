from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from tests.conftest import auth, seed_material

_BODY = {
    "title": "Limits",
    "description": "Behaviour of a function near a point",
    "formula": "lim x->a f(x)",
    "example": "lim x->0 sin(x)/x = 1",
}


def test_create_material(client: TestClient, admin_token: str) -> None:
    resp = client.post("/materials", json=_BODY, headers=auth(admin_token))
    assert resp.status_code == 201
    data = resp.json()
    assert data["message"] == "Material created"
    assert data["material"]["title"] == "Limits"
    assert "createdAt" in data["material"]
    assert "updatedAt" in data["material"]


def test_create_duplicate_title_conflicts(
    client: TestClient, admin_token: str
) -> None:
    client.post("/materials", json=_BODY, headers=auth(admin_token))
    resp = client.post("/materials", json=_BODY, headers=auth(admin_token))
    assert resp.status_code == 409
    assert resp.json() == {"message": "Material with this title already exists"}


def test_create_rejects_empty_title(client: TestClient, admin_token: str) -> None:
    resp = client.post(
        "/materials", json={**_BODY, "title": ""}, headers=auth(admin_token)
    )
    assert resp.status_code == 400
    assert resp.json()["message"].startswith("title")


def test_list_materials_newest_first(
    client: TestClient, student_token: str
) -> None:
    seed_material("First")
    seed_material("Second")
    resp = client.get("/materials", headers=auth(student_token))
    assert resp.status_code == 200
    titles = [m["title"] for m in resp.json()["materials"]]
    assert titles == ["Second", "First"]


def test_get_material(client: TestClient, teacher_token: str) -> None:
    material = seed_material("Limits")
    resp = client.get(f"/materials/{material.id}", headers=auth(teacher_token))
    assert resp.status_code == 200
    assert resp.json()["material"]["id"] == str(material.id)


def test_get_missing_material_returns_404(
    client: TestClient, teacher_token: str
) -> None:
    resp = client.get(f"/materials/{uuid4()}", headers=auth(teacher_token))
    assert resp.status_code == 404
    assert resp.json() == {"message": "Material not found"}


def test_get_malformed_material_id_returns_404(
    client: TestClient, teacher_token: str
) -> None:
    resp = client.get("/materials/xyz", headers=auth(teacher_token))
    assert resp.status_code == 404


def test_update_material_partial(client: TestClient, admin_token: str) -> None:
    material = seed_material("Limits")
    resp = client.put(
        f"/materials/{material.id}",
        json={"formula": "new formula"},
        headers=auth(admin_token),
    )
    assert resp.status_code == 200
    updated = resp.json()["material"]
    assert updated["formula"] == "new formula"
    assert updated["title"] == "Limits"


def test_update_to_existing_title_conflicts(
    client: TestClient, admin_token: str
) -> None:
    seed_material("Limits")
    other = seed_material("Integrals")
    resp = client.put(
        f"/materials/{other.id}", json={"title": "Limits"}, headers=auth(admin_token)
    )
    assert resp.status_code == 409


def test_update_missing_material_returns_404(
    client: TestClient, admin_token: str
) -> None:
    resp = client.put(
        f"/materials/{uuid4()}", json={"title": "X"}, headers=auth(admin_token)
    )
    assert resp.status_code == 404


def test_delete_material(client: TestClient, admin_token: str) -> None:
    material = seed_material("Limits")
    resp = client.delete(f"/materials/{material.id}", headers=auth(admin_token))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Material deleted successfully"}

    again = client.delete(f"/materials/{material.id}", headers=auth(admin_token))
    assert again.status_code == 404


def test_renamed_material_is_reported_under_new_title(
    client: TestClient, admin_token: str, student_token: str, student_id
) -> None:
    material = seed_material("Limits")
    client.post(
        "/statistics",
        json={"eventType": "material", "payload": {"materialRef": str(material.id)}},
        headers=auth(student_token),
    )
    client.put(
        f"/materials/{material.id}",
        json={"title": "Limits and continuity"},
        headers=auth(admin_token),
    )

    summary = client.get(
        f"/statistics/summary/user/{student_id}", headers=auth(student_token)
    ).json()["summary"]
    assert summary["materialAccessCount"] == {"Limits and continuity": 1}
