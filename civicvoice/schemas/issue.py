from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from datetime import datetime

from civicvoice.models.issue import IssueStatus, Severity, Recurrence, ContactMethod


class CamelModel(BaseModel):
    """JSON bodies use camelCase keys; snake_case names are accepted too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class GeoLocationIn(CamelModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    accuracy: Optional[float] = None
    source: Optional[str] = None


class IssueIn(CamelModel):
    """Raw intake fields. Kept loose on purpose: the service does the validation
    so that free-text candidates and HTTP bodies go through the same checks."""
    issue_type: Optional[str] = None
    location: Optional[str] = None
    landmark: Optional[str] = None
    severity: Optional[str] = None
    description: Optional[str] = None
    impact: Optional[str] = None
    recurrence: Optional[str] = None
    geo_location: Optional[GeoLocationIn] = None
    evidence_urls: Union[List[str], str, None] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    preferred_contact_method: Optional[str] = None


class IntakeIn(CamelModel):
    text: str


class StatusPatch(CamelModel):
    status: Optional[str] = None
    forwarded_to: Optional[str] = None


class DepartmentUpdateIn(CamelModel):
    status: Optional[str] = None
    comment: Optional[str] = None
    resolution_evidence: Optional[List[str]] = None


class ReopenIn(CamelModel):
    comment: Optional[str] = None


class RateIn(CamelModel):
    rating: Optional[int] = None
    review: Optional[str] = None


class GeoLocationOut(CamelModel):
    latitude: float
    longitude: float
    accuracy: Optional[float] = None
    source: Optional[str] = None


class DepartmentUpdateOut(CamelModel):
    text: str
    status: Optional[str] = None
    added_by: Optional[str] = None
    department: Optional[str] = None
    department_name: Optional[str] = None
    created_at: datetime


class ActivityOut(CamelModel):
    from_status: Optional[str] = None
    to_status: str
    actor: Optional[str] = None
    at: datetime


class IssueOut(CamelModel):
    id: str
    public_id: str
    issue_type: str
    location: str
    landmark: Optional[str] = None
    description: str
    impact: Optional[str] = None
    severity: Severity
    recurrence: Recurrence
    geo_location: Optional[GeoLocationOut] = None
    evidence_urls: List[str] = []
    resolution_evidence: List[str] = []
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    preferred_contact_method: ContactMethod
    status: IssueStatus
    summary: str
    created_by: Optional[str] = None

    forwarded_to: Optional[str] = None
    # Embedded for UI
    forwarded_to_name: Optional[str] = None
    department_updates: List[DepartmentUpdateOut] = []

    rating: Optional[int] = None
    review: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    created_at: datetime
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class IssueCreatedOut(CamelModel):
    message: str
    issue_id: str
    issue: IssueOut
