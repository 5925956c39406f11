"""End-to-end tests for the issue HTTP routes."""

from __future__ import annotations

import pytest

from civicvoice.core.deps import get_extractor, get_guard
from civicvoice.services.authz import AuthorizationGuard

from conftest import auth

BODY = {"issueType": "Pothole", "location": "5th Ave", "severity": "HIGH", "description": "Large pothole"}


@pytest.fixture
def issue_id(client, citizen):
    r = client.post("/issues", json=BODY, headers=auth(citizen))
    assert r.status_code == 201, r.text
    return r.json()["issueId"]


def test_health(client) -> None:
    assert client.get("/health").json() == {"ok": True}


class TestCreateRoute:
    def test_created_payload_is_camel_case(self, client, citizen) -> None:
        r = client.post("/issues", json=BODY, headers=auth(citizen))
        assert r.status_code == 201
        data = r.json()
        assert data["message"] == "Issue submitted successfully"
        issue = data["issue"]
        assert issue["id"] == data["issueId"]
        assert issue["severity"] == "high"
        assert issue["recurrence"] == "new"
        assert issue["status"] == "pending"
        assert issue["forwardedTo"] is None
        assert issue["publicId"].startswith("CV-")
        assert issue["summary"]
        assert issue["departmentUpdates"] == []

    def test_validation_error_shape(self, client, citizen) -> None:
        r = client.post("/issues", json={**BODY, "severity": "extreme"}, headers=auth(citizen))
        assert r.status_code == 400
        assert r.json()["kind"] == "validation"
        assert r.json()["field"] == "severity"

    def test_malformed_body_is_a_validation_error(self, client, citizen) -> None:
        r = client.post("/issues", json={**BODY, "geoLocation": {"latitude": "north"}}, headers=auth(citizen))
        assert r.status_code == 400
        assert r.json()["kind"] == "validation"

    def test_anonymous_rejected_by_default(self, client) -> None:
        r = client.post("/issues", json=BODY)
        assert r.status_code == 403
        assert r.json()["detail"] == "Not authenticated"

    def test_anonymous_allowed_when_enabled(self, app, client) -> None:
        app.dependency_overrides[get_guard] = lambda: AuthorizationGuard(allow_anonymous_intake=True)
        r = client.post("/issues", json=BODY)
        assert r.status_code == 201
        assert r.json()["issue"]["createdBy"] is None

    def test_bad_token(self, client) -> None:
        r = client.post("/issues", json=BODY, headers={"Authorization": "Bearer nope"})
        assert r.status_code == 401

    def test_department_cannot_file(self, client, roads_officer) -> None:
        r = client.post("/issues", json=BODY, headers=auth(roads_officer))
        assert r.status_code == 403


class TestLifecycleRoutes:
    def test_full_round_trip(self, client, issue_id, admin, citizen, roads, roads_officer) -> None:
        r = client.patch(f"/issues/{issue_id}", json={"forwardedTo": roads.id}, headers=auth(admin))
        assert r.status_code == 200, r.text
        assert r.json()["status"] == "pending"
        assert r.json()["forwardedTo"] == roads.id
        assert r.json()["forwardedToName"] == "Roads & Transport"

        r = client.get("/issues/department", headers=auth(roads_officer))
        assert [i["id"] for i in r.json()] == [issue_id]

        r = client.patch(
            f"/issues/{issue_id}/department-update",
            json={"status": "completed", "comment": "Patched", "resolutionEvidence": ["https://cdn/x.jpg"]},
            headers=auth(roads_officer),
        )
        assert r.status_code == 200, r.text
        data = r.json()
        assert data["status"] == "completed"
        assert data["resolutionEvidence"] == ["https://cdn/x.jpg"]
        assert data["departmentUpdates"][-1]["status"] == "completed"
        assert data["departmentUpdates"][-1]["departmentName"] == "Roads & Transport"
        assert data["completedAt"] is not None

        r = client.post(f"/issues/{issue_id}/rate", json={"rating": 4, "review": "ok"}, headers=auth(citizen))
        assert r.status_code == 200
        assert r.json()["rating"] == 4

        r = client.post(f"/issues/{issue_id}/reopen", json={"comment": "still broken"}, headers=auth(citizen))
        assert r.status_code == 200
        assert r.json()["status"] == "reopened"
        assert r.json()["rating"] is None
        assert r.json()["departmentUpdates"][-1]["text"] == "still broken"

        r = client.get(f"/issues/{issue_id}/history", headers=auth(citizen))
        assert [h["toStatus"] for h in r.json()] == ["pending", "pending", "completed", "reopened"]

    def test_conflict_maps_to_409(self, client, issue_id, citizen) -> None:
        r = client.post(f"/issues/{issue_id}/rate", json={"rating": 5}, headers=auth(citizen))
        assert r.status_code == 409
        assert r.json()["kind"] == "conflict"

    def test_not_found_maps_to_404(self, client, admin) -> None:
        r = client.patch("/issues/does-not-exist", json={"status": "in_review"}, headers=auth(admin))
        assert r.status_code == 404

    def test_wrong_department_gets_403(self, client, issue_id, admin, roads, water_officer) -> None:
        client.patch(f"/issues/{issue_id}", json={"forwardedTo": roads.id}, headers=auth(admin))
        r = client.patch(
            f"/issues/{issue_id}/department-update", json={"comment": "mine now"}, headers=auth(water_officer)
        )
        assert r.status_code == 403

    def test_rating_out_of_range(self, client, issue_id, citizen) -> None:
        r = client.post(f"/issues/{issue_id}/rate", json={"rating": 9}, headers=auth(citizen))
        assert r.status_code == 400
        assert r.json()["field"] == "rating"

    def test_delete(self, client, issue_id, admin, citizen) -> None:
        assert client.delete(f"/issues/{issue_id}", headers=auth(citizen)).status_code == 403
        assert client.delete(f"/issues/{issue_id}", headers=auth(admin)).status_code == 200
        assert client.get(f"/issues/{issue_id}", headers=auth(admin)).status_code == 404


class TestListRoutes:
    def test_each_view_pins_its_role(self, client, issue_id, admin, citizen, roads_officer) -> None:
        assert client.get("/issues/admin", headers=auth(citizen)).status_code == 403
        assert client.get("/issues/department", headers=auth(citizen)).status_code == 403
        assert client.get("/issues/mine", headers=auth(admin)).status_code == 403

        assert [i["id"] for i in client.get("/issues/admin", headers=auth(admin)).json()] == [issue_id]
        assert [i["id"] for i in client.get("/issues/mine", headers=auth(citizen)).json()] == [issue_id]
        assert client.get("/issues/department", headers=auth(roads_officer)).json() == []

    def test_lists_require_a_token(self, client) -> None:
        assert client.get("/issues/mine").status_code == 401

    def test_other_citizen_cannot_view(self, client, issue_id, other_citizen) -> None:
        assert client.get(f"/issues/{issue_id}", headers=auth(other_citizen)).status_code == 403


class TestIntakeRoute:
    def test_unavailable_without_extractor(self, client, citizen) -> None:
        r = client.post("/issues/intake", json={"text": "pothole on 5th"}, headers=auth(citizen))
        assert r.status_code == 503

    def test_uses_configured_extractor(self, app, client, citizen) -> None:
        class Extractor:
            def extract(self, text):
                return {"issueType": "Pothole", "location": "5th Ave", "severity": "low", "description": text}

        app.dependency_overrides[get_extractor] = lambda: Extractor()
        r = client.post("/issues/intake", json={"text": "pothole on 5th"}, headers=auth(citizen))
        assert r.status_code == 201, r.text
        assert r.json()["issue"]["description"] == "pothole on 5th"
        assert r.json()["issue"]["severity"] == "low"
