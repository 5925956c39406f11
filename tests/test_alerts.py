"""Tests for public alerts."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from civicvoice.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from civicvoice.models.alert import AlertType
from civicvoice.schemas.alert import AlertIn, AlertPatch
from civicvoice.services.alerts import AlertService

from conftest import auth


@pytest.fixture
def alerts(db, guard, clock):
    return AlertService(db, guard, clock=clock)


class TestAlertService:
    def test_create_defaults(self, alerts, admin) -> None:
        a = alerts.create(AlertIn(title=" Road closure ", message="Main St closed"), admin)
        assert a.title == "Road closure"
        assert a.type is AlertType.info
        assert a.is_active is True
        assert a.created_by == admin.id

    @pytest.mark.parametrize("field", ["title", "message"])
    def test_title_and_message_required(self, alerts, admin, field) -> None:
        data = {"title": "t", "message": "m", field: "  "}
        with pytest.raises(ValidationError) as exc:
            alerts.create(AlertIn(**data), admin)
        assert exc.value.field == field

    def test_admin_only(self, alerts, citizen) -> None:
        with pytest.raises(PermissionDeniedError):
            alerts.create(AlertIn(title="t", message="m"), citizen)
        with pytest.raises(PermissionDeniedError):
            alerts.list(citizen)

    def test_active_filters_and_caps(self, alerts, admin, clock) -> None:
        for n in range(4):
            alerts.create(AlertIn(title=f"a{n}", message="m"), admin)
        expired = alerts.create(
            AlertIn(title="old", message="m", end_date=datetime(2020, 1, 1, tzinfo=timezone.utc)), admin
        )
        future = alerts.create(
            AlertIn(title="later", message="m", start_date=clock.now + timedelta(days=2)), admin
        )
        off = alerts.create(AlertIn(title="off", message="m"), admin)
        alerts.update(off.id, AlertPatch(is_active=False), admin)

        active = alerts.active()
        titles = [a.title for a in active]
        assert titles == ["a3", "a2", "a1"]
        assert expired.title not in titles and future.title not in titles

    def test_update_only_touches_given_fields(self, alerts, admin) -> None:
        a = alerts.create(AlertIn(title="t", message="m", type=AlertType.warning), admin)
        a = alerts.update(a.id, AlertPatch(message="updated"), admin)
        assert (a.title, a.message, a.type) == ("t", "updated", AlertType.warning)
        assert a.updated_at is not None

    def test_update_rejects_blank_title(self, alerts, admin) -> None:
        a = alerts.create(AlertIn(title="t", message="m"), admin)
        with pytest.raises(ValidationError):
            alerts.update(a.id, AlertPatch(title=""), admin)

    def test_delete(self, alerts, admin) -> None:
        a = alerts.create(AlertIn(title="t", message="m"), admin)
        alerts.delete(a.id, admin)
        with pytest.raises(NotFoundError):
            alerts.delete(a.id, admin)


class TestAlertRoutes:
    def test_public_active_list(self, client, admin) -> None:
        r = client.post("/alerts", json={"title": "Water cut", "message": "Ward 5, 10am-2pm", "type": "urgent"},
                        headers=auth(admin))
        assert r.status_code == 201
        assert r.json()["isActive"] is True

        r = client.get("/alerts/active")
        assert r.status_code == 200
        assert [a["title"] for a in r.json()] == ["Water cut"]

    def test_invalid_type_is_400(self, client, admin) -> None:
        r = client.post("/alerts", json={"title": "t", "message": "m", "type": "panic"}, headers=auth(admin))
        assert r.status_code == 400

    def test_admin_crud(self, client, admin, citizen) -> None:
        created = client.post("/alerts", json={"title": "t", "message": "m"}, headers=auth(admin)).json()
        r = client.patch(f"/alerts/{created['id']}", json={"isActive": False}, headers=auth(admin))
        assert r.json()["isActive"] is False
        assert client.get("/alerts/active").json() == []
        assert client.get("/alerts", headers=auth(citizen)).status_code == 403
        assert len(client.get("/alerts", headers=auth(admin)).json()) == 1
        assert client.delete(f"/alerts/{created['id']}", headers=auth(admin)).status_code == 200
        assert client.delete(f"/alerts/{created['id']}", headers=auth(admin)).status_code == 404
