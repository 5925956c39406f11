# File: civicvoice/core/deps.py
# Project: civicvoice-backend
"""FastAPI dependency wiring for the workflow services."""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, status
from openai import OpenAI
from sqlalchemy.orm import Session

from civicvoice.core.config import settings
from civicvoice.db.session import get_db
from civicvoice.services.alerts import AlertService
from civicvoice.services.authz import AuthorizationGuard
from civicvoice.services.departments import DepartmentDirectory
from civicvoice.services.extraction import OpenAIIssueExtractor, TextExtractor
from civicvoice.services.issues import IssueService
from civicvoice.services.repository import IssueRepository
from civicvoice.services.storage import EvidenceStore


def get_guard() -> AuthorizationGuard:
    return AuthorizationGuard(allow_anonymous_intake=settings.allow_anonymous_reporting)


def get_directory(db: Session = Depends(get_db)) -> DepartmentDirectory:
    return DepartmentDirectory(db)


@lru_cache
def _openai_extractor() -> OpenAIIssueExtractor:
    return OpenAIIssueExtractor(OpenAI(api_key=settings.openai_api_key), settings.openai_model)


def get_extractor() -> Optional[TextExtractor]:
    if not settings.openai_api_key:
        return None
    return _openai_extractor()


def require_extractor(extractor: Optional[TextExtractor] = Depends(get_extractor)) -> TextExtractor:
    if extractor is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Free-text intake is not configured")
    return extractor


def get_issue_service(
    db: Session = Depends(get_db),
    guard: AuthorizationGuard = Depends(get_guard),
    extractor: Optional[TextExtractor] = Depends(get_extractor),
) -> IssueService:
    return IssueService(
        IssueRepository(db),
        DepartmentDirectory(db),
        guard,
        extractor=extractor,
        max_evidence_files=settings.max_evidence_files,
    )


def get_evidence_store() -> EvidenceStore:
    return EvidenceStore(settings.supabase_url, settings.supabase_service_role, settings.supabase_bucket)


def get_alert_service(db: Session = Depends(get_db), guard: AuthorizationGuard = Depends(get_guard)) -> AlertService:
    return AlertService(db, guard)
