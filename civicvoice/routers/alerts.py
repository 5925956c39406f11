# File: civicvoice/routers/alerts.py
# Project: civicvoice-backend

from fastapi import APIRouter, Depends
from typing import List
from civicvoice.core.deps import get_alert_service
from civicvoice.core.security import get_current_principal
from civicvoice.schemas.alert import AlertIn, AlertOut, AlertPatch
from civicvoice.services.alerts import AlertService
from civicvoice.services.authz import Principal

router = APIRouter(prefix="/alerts", tags=["alerts"])

@router.get("/active", response_model=List[AlertOut])
def active_alerts(svc: AlertService = Depends(get_alert_service)):
    return svc.active()

@router.get("", response_model=List[AlertOut])
def list_alerts(svc: AlertService = Depends(get_alert_service),
                principal: Principal = Depends(get_current_principal)):
    return svc.list(principal)

@router.post("", response_model=AlertOut, status_code=201)
def create_alert(payload: AlertIn,
                 svc: AlertService = Depends(get_alert_service),
                 principal: Principal = Depends(get_current_principal)):
    return svc.create(payload, principal)

@router.patch("/{alert_id}", response_model=AlertOut)
def update_alert(alert_id: int, payload: AlertPatch,
                 svc: AlertService = Depends(get_alert_service),
                 principal: Principal = Depends(get_current_principal)):
    return svc.update(alert_id, payload, principal)

@router.delete("/{alert_id}")
def delete_alert(alert_id: int,
                 svc: AlertService = Depends(get_alert_service),
                 principal: Principal = Depends(get_current_principal)):
    svc.delete(alert_id, principal)
    return {"id": alert_id, "message": "Alert deleted"}
