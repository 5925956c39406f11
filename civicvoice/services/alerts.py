# File: civicvoice/services/alerts.py
# Project: civicvoice-backend

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from civicvoice.core.errors import NotFoundError, ValidationError
from civicvoice.models.alert import Alert, AlertType
from civicvoice.schemas.alert import AlertIn, AlertPatch
from civicvoice.services.authz import Action, AuthorizationGuard, Principal

log = logging.getLogger(__name__)

MAX_ACTIVE_ALERTS = 3


def _utc(dt: Optional[datetime]) -> Optional[datetime]:
    if dt is None:
        return None
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def _text(value: Optional[str], field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    return value


class AlertService:
    def __init__(self, db: Session, guard: AuthorizationGuard,
                 clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc)):
        self.db = db
        self.guard = guard
        self.clock = clock

    def active(self) -> list[Alert]:
        now = self.clock()
        stmt = (
            select(Alert)
            .where(
                Alert.is_active.is_(True),
                Alert.start_date <= now,
                or_(Alert.end_date.is_(None), Alert.end_date >= now),
            )
            .order_by(Alert.created_at.desc(), Alert.id.desc())
            .limit(MAX_ACTIVE_ALERTS)
        )
        return list(self.db.scalars(stmt).all())

    def list(self, principal: Optional[Principal]) -> list[Alert]:
        self.guard.ensure(principal, Action.manage_alerts)
        return list(self.db.scalars(select(Alert).order_by(Alert.created_at.desc(), Alert.id.desc())).all())

    def create(self, data: AlertIn, principal: Optional[Principal]) -> Alert:
        self.guard.ensure(principal, Action.manage_alerts)
        now = self.clock()
        alert = Alert(
            title=_text(data.title, "title"),
            message=_text(data.message, "message"),
            type=data.type or AlertType.info,
            is_active=True,
            start_date=_utc(data.start_date) or now,
            end_date=_utc(data.end_date),
            created_by=principal.id,
            created_at=now,
        )
        self.db.add(alert)
        self.db.commit()
        self.db.refresh(alert)
        log.info("alert %s created by %s type=%s", alert.id, principal.id, alert.type.value)
        return alert

    def _get(self, alert_id: int) -> Alert:
        alert = self.db.get(Alert, alert_id)
        if alert is None:
            raise NotFoundError("Alert not found")
        return alert

    def update(self, alert_id: int, data: AlertPatch, principal: Optional[Principal]) -> Alert:
        self.guard.ensure(principal, Action.manage_alerts)
        alert = self._get(alert_id)
        fields = data.model_fields_set
        if "title" in fields:
            alert.title = _text(data.title, "title")
        if "message" in fields:
            alert.message = _text(data.message, "message")
        if "type" in fields and data.type is not None:
            alert.type = data.type
        if "is_active" in fields and data.is_active is not None:
            alert.is_active = data.is_active
        if "end_date" in fields:
            alert.end_date = _utc(data.end_date)
        alert.updated_at = self.clock()
        self.db.commit()
        self.db.refresh(alert)
        log.info("alert %s updated by %s", alert.id, principal.id)
        return alert

    def delete(self, alert_id: int, principal: Optional[Principal]) -> None:
        self.guard.ensure(principal, Action.manage_alerts)
        alert = self._get(alert_id)
        self.db.delete(alert)
        self.db.commit()
        log.info("alert %s deleted by %s", alert_id, principal.id)
