#civicvoice/schemas/alert.py
from datetime import datetime
from typing import Optional
from civicvoice.models.alert import AlertType
from civicvoice.schemas.issue import CamelModel

class AlertIn(CamelModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[AlertType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

class AlertPatch(CamelModel):
    title: Optional[str] = None
    message: Optional[str] = None
    type: Optional[AlertType] = None
    is_active: Optional[bool] = None
    end_date: Optional[datetime] = None

class AlertOut(CamelModel):
    id: int
    title: str
    message: str
    type: AlertType
    is_active: bool
    start_date: datetime
    end_date: Optional[datetime] = None
    created_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None
