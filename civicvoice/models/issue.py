# File: civicvoice/models/issue.py
from __future__ import annotations
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum
from sqlalchemy import String, Float, Enum, Integer, DateTime, JSON, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship
from civicvoice.db.base import Base
from civicvoice.models.department_update import DepartmentUpdate
from civicvoice.models.issue_activity import IssueActivity

class IssueStatus(PyEnum):
    pending = "pending"
    in_review = "in_review"
    forwarded = "forwarded"
    completed = "completed"
    reopened = "reopened"

class Severity(PyEnum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

class Recurrence(PyEnum):
    new = "new"
    recurring = "recurring"
    ongoing = "ongoing"

class ContactMethod(PyEnum):
    phone = "phone"
    email = "email"
    none = "none"

class GeoSource(PyEnum):
    device_location = "device_location"
    map_click = "map_click"
    manual = "manual"
    search = "search"

def new_id() -> str:
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Issue(Base):
    __tablename__ = "issues"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_id)
    issue_type: Mapped[str] = mapped_column(String(120), index=True)
    location: Mapped[str] = mapped_column(String(300))
    landmark: Mapped[str | None] = mapped_column(String(300), nullable=True)
    description: Mapped[str] = mapped_column(String(4000))
    impact: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    severity: Mapped[Severity] = mapped_column(Enum(Severity), index=True)
    recurrence: Mapped[Recurrence] = mapped_column(Enum(Recurrence), default=Recurrence.new)
    status: Mapped[IssueStatus] = mapped_column(Enum(IssueStatus), default=IssueStatus.pending, index=True)

    # geo pair: both set or both null
    lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True)
    geo_accuracy: Mapped[float | None] = mapped_column(Float, nullable=True)
    geo_source: Mapped[GeoSource | None] = mapped_column(Enum(GeoSource), nullable=True)

    evidence_urls: Mapped[list] = mapped_column(JSON, default=list)
    resolution_evidence: Mapped[list] = mapped_column(JSON, default=list)

    contact_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    preferred_contact_method: Mapped[ContactMethod] = mapped_column(Enum(ContactMethod), default=ContactMethod.none)

    summary: Mapped[str] = mapped_column(String(6000))

    created_by: Mapped[str | None] = mapped_column(String(64), index=True, nullable=True)
    forwarded_to: Mapped[str | None] = mapped_column(ForeignKey("departments.id", ondelete="SET NULL"), index=True, nullable=True)

    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    review: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    department_updates: Mapped[list[DepartmentUpdate]] = relationship(
        order_by=DepartmentUpdate.id, cascade="all, delete-orphan", lazy="selectin"
    )
    activity: Mapped[list[IssueActivity]] = relationship(
        order_by=IssueActivity.id, cascade="all, delete-orphan", lazy="selectin"
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def public_id(self) -> str:
        return f"CV-{self.id[-6:].upper()}"

    @property
    def geo_location(self) -> dict | None:
        if self.lat is None or self.lng is None:
            return None
        return {
            "latitude": self.lat,
            "longitude": self.lng,
            "accuracy": self.geo_accuracy,
            "source": self.geo_source.value if self.geo_source else None,
        }

Index("ix_issues_lat_lng", Issue.lat, Issue.lng)
