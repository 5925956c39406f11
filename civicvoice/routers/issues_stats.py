# File: civicvoice/routers/issues_stats.py
# Project: civicvoice-backend

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from civicvoice.core.security import get_optional_principal
from civicvoice.db.session import get_db
from civicvoice.services.authz import Principal
from civicvoice.services.stats import dashboard_stats

# included before the issues router so /issues/{issue_id} does not shadow it
router = APIRouter(prefix="/issues", tags=["issues:stats"])

@router.get("/dashboard-stats")
def get_dashboard_stats(
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    # per-issue coordinates only for signed-in callers
    return dashboard_stats(db, include_locations=principal is not None)
