# File: civicvoice/routers/departments.py
# Project: civicvoice-backend

from fastapi import APIRouter, Depends
from typing import List
from civicvoice.core.deps import get_directory, get_guard
from civicvoice.core.security import get_current_principal
from civicvoice.schemas.department import DepartmentIn, DepartmentOut
from civicvoice.services.authz import Action, AuthorizationGuard, Principal
from civicvoice.services.departments import DepartmentDirectory

router = APIRouter(prefix="/admin/departments", tags=["departments"])

@router.get("", response_model=List[DepartmentOut])
def list_departments(
    directory: DepartmentDirectory = Depends(get_directory),
    guard: AuthorizationGuard = Depends(get_guard),
    principal: Principal = Depends(get_current_principal),
):
    guard.ensure(principal, Action.manage_departments)
    return directory.list()

@router.post("", response_model=DepartmentOut, status_code=201)
def create_department(
    payload: DepartmentIn,
    directory: DepartmentDirectory = Depends(get_directory),
    guard: AuthorizationGuard = Depends(get_guard),
    principal: Principal = Depends(get_current_principal),
):
    guard.ensure(principal, Action.manage_departments)
    return directory.create(payload.name, payload.description)
