# civicvoice/services/workflow.py
"""Issue status state machine.

    pending ──admin──▶ in_review / forwarded / completed ──▶ ...
    (any) ──department officer──▶ pending / in_review / completed / reopened
    completed ──owner or admin reopen──▶ reopened
    completed ──owner or admin rate──▶ completed

The machine is cyclic: completed and reopened stay reachable from each
other. Who may attempt a transition is decided in ``authz``; this module only
decides whether the transition itself is legal.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from civicvoice.core.errors import ConflictError, ValidationError
from civicvoice.models.issue import IssueStatus

S = IssueStatus


@dataclass(frozen=True)
class TransitionRule:
    name: str
    sources: frozenset
    targets: frozenset


ADMIN = TransitionRule(
    "admin status update",
    sources=frozenset({S.pending, S.in_review, S.forwarded, S.completed}),
    targets=frozenset({S.pending, S.in_review, S.forwarded, S.completed}),
)
DEPARTMENT = TransitionRule(
    "department update",
    sources=frozenset(S),
    targets=frozenset({S.pending, S.in_review, S.completed, S.reopened}),
)
REOPEN = TransitionRule("reopen", sources=frozenset({S.completed}), targets=frozenset({S.reopened}))
RATE = TransitionRule("rating", sources=frozenset({S.completed}), targets=frozenset({S.completed}))

# statuses a department timeline entry may carry
TIMELINE_STATUSES = frozenset({S.pending, S.in_review, S.completed, S.reopened})


def parse_status(value: Optional[str], rule: TransitionRule, field: str = "status") -> Optional[IssueStatus]:
    """Turn a requested status string into a target of ``rule``; None stays None."""
    if value is None:
        return None
    try:
        status = IssueStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status value: {value!r}", field=field)
    if status not in rule.targets:
        allowed = ", ".join(sorted(s.value for s in rule.targets))
        raise ValidationError(f"Invalid status value for {rule.name}: {value!r} (allowed: {allowed})", field=field)
    return status


def check_source(rule: TransitionRule, current: IssueStatus) -> None:
    if current not in rule.sources:
        allowed = ", ".join(sorted(s.value for s in rule.sources))
        raise ConflictError(f"{rule.name.capitalize()} is not allowed while the issue is {current.value} (requires: {allowed})")


def admin_target(current: IssueStatus, requested: Optional[IssueStatus], forwarding: bool) -> Optional[IssueStatus]:
    """Resolve the status an admin request ends in.

    Forwarding without an explicit status re-triages the issue into the new
    department's queue as ``pending``; that re-triage is allowed from any state.
    """
    if requested is None:
        return S.pending if forwarding else None
    check_source(ADMIN, current)
    return requested


def timeline_status(target: Optional[IssueStatus], current: IssueStatus) -> Optional[str]:
    status = target or current
    return status.value if status in TIMELINE_STATUSES else None
