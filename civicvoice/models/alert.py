# File: civicvoice/models/alert.py
# Project: civicvoice-backend

from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import Boolean, String, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column
from civicvoice.db.base import Base

class AlertType(PyEnum):
    info = "info"
    warning = "warning"
    urgent = "urgent"

def _now() -> datetime:
    return datetime.now(timezone.utc)

class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    message: Mapped[str] = mapped_column(String(2000))
    type: Mapped[AlertType] = mapped_column(Enum(AlertType), default=AlertType.info)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_by: Mapped[str] = mapped_column(String(64))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
