# civicvoice/services/authz.py
"""Authorization decisions for every issue workflow action.

Each action has exactly one entry in ``RULES``: the roles that may attempt it
and, where the record matters, a relationship predicate over
``(principal, record)``. A new action needs a new entry here and nowhere else.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Callable, Optional

from civicvoice.core.errors import PermissionDeniedError


class Role(PyEnum):
    citizen = "citizen"
    department = "department"
    admin = "admin"


@dataclass(frozen=True)
class Principal:
    """An already-authenticated caller."""

    id: str
    role: Role
    department: Optional[str] = None


class Action(PyEnum):
    create_issue = "createIssue"
    view_as_admin = "viewAsAdmin"
    view_as_department = "viewAsDepartment"
    view_as_citizen = "viewAsCitizen"
    update_status = "updateStatus"
    forward = "forward"
    department_update = "departmentUpdate"
    reopen = "reopen"
    rate = "rate"
    delete = "delete"
    manage_departments = "manageDepartments"
    manage_alerts = "manageAlerts"


# record is None for list-level checks; the query then does the scoping
Relation = Callable[[Principal, object], bool]


def _assigned_department(principal: Principal, record) -> bool:
    if not principal.department:
        return False
    if record is None:
        return True
    return record.forwarded_to == principal.department


def _owner(principal: Principal, record) -> bool:
    if record is None:
        return True
    return record.created_by is not None and record.created_by == principal.id


def _owner_or_admin(principal: Principal, record) -> bool:
    if principal.role is Role.admin:
        return True
    return record is not None and _owner(principal, record)


@dataclass(frozen=True)
class Rule:
    roles: frozenset
    relation: Optional[Relation] = None
    denied: str = "forbidden"


_ADMIN = frozenset({Role.admin})

RULES: dict[Action, Rule] = {
    Action.create_issue: Rule(frozenset({Role.citizen, Role.admin}), denied="Only citizens and admins can file issues"),
    Action.view_as_admin: Rule(_ADMIN, denied="Admin access only"),
    Action.view_as_department: Rule(
        frozenset({Role.department}), _assigned_department,
        denied="Department user and department assignment required",
    ),
    Action.view_as_citizen: Rule(frozenset({Role.citizen}), _owner, denied="Citizen access only"),
    Action.update_status: Rule(_ADMIN, denied="Admin access only"),
    Action.forward: Rule(_ADMIN, denied="Admin access only"),
    Action.department_update: Rule(
        frozenset({Role.department}), _assigned_department,
        denied="Issue is not assigned to your department",
    ),
    Action.reopen: Rule(
        frozenset({Role.citizen, Role.admin}), _owner_or_admin,
        denied="Only the citizen who filed the issue or an admin can reopen it",
    ),
    Action.rate: Rule(
        frozenset({Role.citizen, Role.admin}), _owner_or_admin,
        denied="Only the citizen who filed the issue or an admin can rate it",
    ),
    Action.delete: Rule(_ADMIN, denied="Admin access only"),
    Action.manage_departments: Rule(_ADMIN, denied="Admin access only"),
    Action.manage_alerts: Rule(_ADMIN, denied="Admin access only"),
}

_VIEW_ACTIONS = (Action.view_as_admin, Action.view_as_department, Action.view_as_citizen)


class AuthorizationGuard:
    """Stateless predicate set: ``(principal, action, record) -> allow/deny``."""

    def __init__(self, allow_anonymous_intake: bool = False):
        self.allow_anonymous_intake = allow_anonymous_intake

    def allowed(self, principal: Optional[Principal], action: Action, record=None) -> bool:
        if principal is None:
            return action is Action.create_issue and self.allow_anonymous_intake
        rule = RULES[action]
        if principal.role not in rule.roles:
            return False
        return rule.relation is None or rule.relation(principal, record)

    def ensure(self, principal: Optional[Principal], action: Action, record=None) -> None:
        if not self.allowed(principal, action, record):
            message = "Not authenticated" if principal is None else RULES[action].denied
            raise PermissionDeniedError(message)

    def can_view(self, principal: Optional[Principal], record) -> bool:
        return any(self.allowed(principal, a, record) for a in _VIEW_ACTIONS)
