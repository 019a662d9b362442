from __future__ import annotations

import io

import pytest

from tests.factories.log_entry import LogEntryFactory
from tests.factories.user import UserFactory
from tests.helpers.auth import bearer, issue_token

BASE = "/api/v1/onsen_logs"

PNG = b"\x89PNG\r\n\x1a\nfake-image-bytes"


def _entry_payload(**overrides):
    payload = {
        "name": "Kusatsu",
        "location": "Gunma",
        "springType": "sulfur",
        "features": ["outdoor_bath"],
        "visitDate": "2024-01-10",
        "rating": 5,
        "comment": "Yubatake at night",
    }
    payload.update(overrides)
    return payload


def _image_form(name="photo.png", content_type="image/png", description=None):
    form = {"image": (io.BytesIO(PNG), name, content_type)}
    if description is not None:
        form["description"] = description
    return form


@pytest.fixture()
def owner(session, user):
    session.commit()
    return user


@pytest.fixture()
def entry(session, owner):
    e = LogEntryFactory(owner=owner, name="Beppu", rating=4)
    session.commit()
    return e


# -------------------------------- CRUD ------------------------------------ #
class TestLogCrud:
    def test_create_accepts_camel_case(self, client, owner, auth_header):
        resp = client.post(BASE, json=_entry_payload(), headers=auth_header)

        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["user_id"] == owner.id
        assert data["spring_type"] == "sulfur"
        assert data["visit_date"] == "2024-01-10"
        assert data["images"] == []

    def test_client_supplied_owner_is_ignored(self, client, owner, auth_header):
        other = UserFactory()
        resp = client.post(BASE, json=_entry_payload(user_id=other.id), headers=auth_header)

        assert resp.status_code == 201
        assert resp.get_json()["data"]["user_id"] == owner.id

    @pytest.mark.parametrize(
        "override",
        [{"rating": 0}, {"rating": 6}, {"rating": "5"}, {"springType": "lava"}, {"visitDate": "yesterday"}],
    )
    def test_create_rejects_invalid_fields(self, client, owner, auth_header, override):
        resp = client.post(BASE, json=_entry_payload(**override), headers=auth_header)

        assert resp.status_code == 422
        assert resp.mimetype == "application/problem+json"

    def test_get_update_delete(self, client, entry, auth_header):
        url = f"{BASE}/{entry.id}"

        assert client.get(url, headers=auth_header).get_json()["data"]["name"] == "Beppu"

        updated = client.put(url, json={"rating": 2}, headers=auth_header)
        assert updated.status_code == 200
        body = updated.get_json()["data"]
        assert (body["rating"], body["name"]) == (2, "Beppu")

        assert client.delete(url, headers=auth_header).status_code == 204
        assert client.get(url, headers=auth_header).status_code == 404

    def test_missing_entry(self, client, owner, auth_header):
        resp = client.get(f"{BASE}/999999", headers=auth_header)

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "not_found"

    def test_requires_token(self, client):
        assert client.get(BASE).status_code == 401


# ------------------------------ Ownership --------------------------------- #
class TestOwnership:
    @pytest.mark.parametrize(
        ("method", "suffix", "kwargs"),
        [
            ("get", "", {}),
            ("put", "", {"json": {"name": "stolen"}}),
            ("delete", "", {}),
            ("get", "/images", {}),
        ],
    )
    def test_foreign_entry_is_forbidden(self, app, client, session, entry, method, suffix, kwargs):
        intruder = UserFactory()
        session.commit()
        with app.app_context():
            headers = bearer(issue_token(intruder.id))

        resp = getattr(client, method)(f"{BASE}/{entry.id}{suffix}", headers=headers, **kwargs)

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "forbidden"

    def test_list_is_owner_scoped(self, client, session, owner, auth_header):
        LogEntryFactory.create_batch(2, owner=owner)
        LogEntryFactory.create_batch(2)
        session.commit()

        body = client.get(BASE, headers=auth_header).get_json()

        assert body["meta"]["total"] == 2
        assert {item["user_id"] for item in body["data"]} == {owner.id}


# -------------------------- Listing / filtering --------------------------- #
class TestListing:
    def test_pagination_meta(self, client, session, owner, auth_header):
        LogEntryFactory.create_batch(12, owner=owner)
        session.commit()

        body = client.get(f"{BASE}?page=2&limit=5", headers=auth_header).get_json()

        assert body["meta"] == {"total": 12, "page": 2, "limit": 5, "has_prev": True, "has_next": True}
        assert len(body["data"]) == 5

    def test_bad_pagination_is_normalized(self, client, owner, auth_header):
        body = client.get(f"{BASE}?page=abc&limit=0", headers=auth_header).get_json()

        assert (body["meta"]["page"], body["meta"]["limit"]) == (1, 10)

    @pytest.mark.parametrize("path", [BASE, f"{BASE}/filter"])
    def test_huge_page_returns_empty_page(self, client, entry, auth_header, path):
        resp = client.get(f"{path}?page=99999999999999999999&limit=10", headers=auth_header)

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["data"] == []
        assert body["meta"]["total"] == 1
        assert body["meta"]["has_next"] is False

    def test_filter_combines_criteria(self, client, session, owner, auth_header):
        LogEntryFactory(owner=owner, spring_type="sulfur", rating=5, location="Gunma")
        LogEntryFactory(owner=owner, spring_type="sulfur", rating=2, location="Gunma")
        LogEntryFactory(owner=owner, spring_type="iron", rating=5, location="Hyogo")
        session.commit()

        body = client.get(
            f"{BASE}/filter?springType=sulfur&minRating=4&location=gun", headers=auth_header
        ).get_json()

        assert body["meta"]["total"] == 1
        assert body["data"][0]["rating"] == 5

    def test_filter_rejects_inverted_range(self, client, owner, auth_header):
        resp = client.get(
            f"{BASE}/filter?startDate=2024-02-01&endDate=2024-01-01", headers=auth_header
        )
        assert resp.status_code == 422


# -------------------------------- Export ---------------------------------- #
class TestExport:
    def test_json_is_default(self, client, entry, auth_header):
        resp = client.get(f"{BASE}/export", headers=auth_header)

        assert resp.status_code == 200
        assert resp.mimetype == "application/json"
        assert "onsen_logs.json" in resp.headers["Content-Disposition"]
        assert resp.get_json()[0]["name"] == "Beppu"

    def test_csv(self, client, entry, auth_header):
        resp = client.get(f"{BASE}/export?format=csv", headers=auth_header)

        assert resp.mimetype == "text/csv"
        lines = resp.get_data(as_text=True).splitlines()
        assert lines[0].startswith("ID,Name,Location,Spring Type")
        assert "Beppu" in lines[1]

    def test_unknown_format(self, client, owner, auth_header):
        assert client.get(f"{BASE}/export?format=xml", headers=auth_header).status_code == 422


# -------------------------------- Images ---------------------------------- #
class TestImages:
    def test_upload_list_serve_delete(self, client, entry, auth_header):
        url = f"{BASE}/{entry.id}/images"

        resp = client.post(
            url,
            data=_image_form(description="steam"),
            headers=auth_header,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201
        image = resp.get_json()["data"]
        assert image["description"] == "steam"
        assert image["image_url"].startswith("/uploads/")
        assert image["image_url"].endswith(".png")

        served = client.get(image["image_url"])
        assert served.status_code == 200
        assert served.data == PNG
        served.close()

        listed = client.get(url, headers=auth_header).get_json()["data"]
        assert [i["id"] for i in listed] == [image["id"]]

        gone = client.delete(f"{url}/{image['id']}", headers=auth_header)
        assert gone.status_code == 204
        assert client.get(image["image_url"]).status_code == 404

    def test_html_named_upload_is_served_as_image(self, client, entry, auth_header):
        resp = client.post(
            f"{BASE}/{entry.id}/images",
            data=_image_form(name="x.html", content_type="image/png"),
            headers=auth_header,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 201
        image_url = resp.get_json()["data"]["image_url"]
        assert image_url.endswith(".png")

        served = client.get(image_url)
        assert served.status_code == 200
        assert served.mimetype == "image/png"
        assert served.headers["X-Content-Type-Options"] == "nosniff"
        served.close()

    def test_cap_of_three(self, client, entry, auth_header):
        url = f"{BASE}/{entry.id}/images"
        for _ in range(3):
            ok = client.post(
                url, data=_image_form(), headers=auth_header, content_type="multipart/form-data"
            )
            assert ok.status_code == 201

        resp = client.post(
            url, data=_image_form(), headers=auth_header, content_type="multipart/form-data"
        )

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "capacity_exceeded"
        assert len(client.get(url, headers=auth_header).get_json()["data"]) == 3

    def test_missing_file(self, client, entry, auth_header):
        resp = client.post(
            f"{BASE}/{entry.id}/images",
            data={"description": "no file"},
            headers=auth_header,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 422

    def test_unsupported_type(self, client, entry, auth_header):
        resp = client.post(
            f"{BASE}/{entry.id}/images",
            data=_image_form(name="doc.pdf", content_type="application/pdf"),
            headers=auth_header,
            content_type="multipart/form-data",
        )
        assert resp.status_code == 422
        assert resp.get_json()["details"] == {"field": "image"}
