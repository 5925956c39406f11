# File: civicvoice/routers/issues.py
# Project: civicvoice-backend

from fastapi import APIRouter, Depends, Request
from typing import List, Optional

from civicvoice.core.deps import get_directory, get_issue_service, require_extractor
from civicvoice.core.ratelimit import limiter
from civicvoice.core.security import get_current_principal, get_optional_principal
from civicvoice.models.issue import Issue
from civicvoice.schemas.issue import (
    ActivityOut,
    DepartmentUpdateIn,
    IntakeIn,
    IssueCreatedOut,
    IssueIn,
    IssueOut,
    RateIn,
    ReopenIn,
    StatusPatch,
)
from civicvoice.services.authz import Action, Principal
from civicvoice.services.departments import DepartmentDirectory
from civicvoice.services.issues import IssueService

router = APIRouter(prefix="/issues", tags=["issues"])


def _to_out(issues: List[Issue], directory: DepartmentDirectory) -> List[IssueOut]:
    """Read-side projection: department ids resolved to display names."""
    ids = set()
    for i in issues:
        ids.add(i.forwarded_to)
        ids.update(u.department for u in i.department_updates)
    names = directory.names_for(ids)

    out = []
    for i in issues:
        item = IssueOut.model_validate(i)
        item.forwarded_to_name = names.get(i.forwarded_to) if i.forwarded_to else None
        for u in item.department_updates:
            u.department_name = names.get(u.department) if u.department else None
        out.append(item)
    return out


def _one(issue: Issue, directory: DepartmentDirectory) -> IssueOut:
    return _to_out([issue], directory)[0]


@router.post("", response_model=IssueCreatedOut, status_code=201)
@limiter.limit("10/minute")
def create_issue(
    request: Request,
    body: IssueIn,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    issue = svc.create(body, principal)
    return IssueCreatedOut(message="Issue submitted successfully", issue_id=issue.id, issue=_one(issue, directory))


@router.post("/intake", response_model=IssueCreatedOut, status_code=201, dependencies=[Depends(require_extractor)])
@limiter.limit("5/minute")
def create_issue_from_text(
    request: Request,
    body: IntakeIn,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Optional[Principal] = Depends(get_optional_principal),
):
    issue = svc.create_from_text(body.text, principal)
    return IssueCreatedOut(message="Issue submitted successfully", issue_id=issue.id, issue=_one(issue, directory))


# Role-scoped views: each path pins the view it serves.

@router.get("/mine", response_model=List[IssueOut])
def my_issues(
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    return _to_out(svc.list_for_role(principal, Action.view_as_citizen), directory)


@router.get("/department", response_model=List[IssueOut])
def department_issues(
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    return _to_out(svc.list_for_role(principal, Action.view_as_department), directory)


@router.get("/admin", response_model=List[IssueOut])
def admin_issues(
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    return _to_out(svc.list_for_role(principal, Action.view_as_admin), directory)


@router.get("/{issue_id}", response_model=IssueOut)
def get_issue(
    issue_id: str,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    return _one(svc.get(issue_id, principal), directory)


@router.get("/{issue_id}/history", response_model=List[ActivityOut])
def get_issue_history(
    issue_id: str,
    svc: IssueService = Depends(get_issue_service),
    principal: Principal = Depends(get_current_principal),
):
    return svc.history(issue_id, principal)


@router.patch("/{issue_id}", response_model=IssueOut)
def update_issue(
    issue_id: str,
    body: StatusPatch,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    issue = svc.update_status(issue_id, body.status, body.forwarded_to, principal)
    return _one(issue, directory)


@router.patch("/{issue_id}/department-update", response_model=IssueOut)
def department_update(
    issue_id: str,
    body: DepartmentUpdateIn,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    issue = svc.department_update(issue_id, body.status, body.comment, body.resolution_evidence, principal)
    return _one(issue, directory)


@router.post("/{issue_id}/reopen", response_model=IssueOut)
def reopen_issue(
    issue_id: str,
    body: ReopenIn,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    return _one(svc.reopen(issue_id, body.comment, principal), directory)


@router.post("/{issue_id}/rate", response_model=IssueOut)
def rate_issue(
    issue_id: str,
    body: RateIn,
    svc: IssueService = Depends(get_issue_service),
    directory: DepartmentDirectory = Depends(get_directory),
    principal: Principal = Depends(get_current_principal),
):
    return _one(svc.rate(issue_id, body.rating, body.review, principal), directory)


@router.delete("/{issue_id}")
def delete_issue(
    issue_id: str,
    svc: IssueService = Depends(get_issue_service),
    principal: Principal = Depends(get_current_principal),
):
    svc.delete(issue_id, principal)
    return {"message": "Issue deleted"}
