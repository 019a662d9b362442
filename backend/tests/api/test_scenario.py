"""End-to-end walk through a typical session of one user."""

from __future__ import annotations

from tests.helpers.auth import bearer

API = "/api/v1"


def test_register_log_filter_delete(client):
    resp = client.post(
        f"{API}/auth/register",
        json={"name": "Bob", "email": "bob@example.com", "password": "pw12345678"},
    )
    assert resp.status_code == 201

    login = client.post(
        f"{API}/auth/login", json={"email": "bob@example.com", "password": "pw12345678"}
    )
    assert login.status_code == 200
    headers = bearer(login.get_json()["data"]["access_token"])

    created = client.post(
        f"{API}/onsen_logs",
        json={
            "name": "Kusatsu",
            "springType": "sulfur",
            "rating": 5,
            "visitDate": "2024-01-10",
        },
        headers=headers,
    )
    assert created.status_code == 201
    log_id = created.get_json()["data"]["id"]

    found = client.get(f"{API}/onsen_logs/filter?minRating=5", headers=headers).get_json()
    assert found["meta"]["total"] == 1
    assert found["data"][0]["id"] == log_id

    assert client.delete(f"{API}/onsen_logs/{log_id}", headers=headers).status_code == 204

    listed = client.get(f"{API}/onsen_logs", headers=headers).get_json()
    assert listed["meta"]["total"] == 0
    assert listed["data"] == []
