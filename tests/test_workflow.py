"""Tests for the status transition tables."""

from __future__ import annotations

import pytest

from civicvoice.core.errors import ConflictError, ValidationError
from civicvoice.models.issue import IssueStatus as S
from civicvoice.services import workflow


class TestParseStatus:
    def test_none_stays_none(self) -> None:
        assert workflow.parse_status(None, workflow.ADMIN) is None

    def test_unknown_value_rejected(self) -> None:
        with pytest.raises(ValidationError) as exc:
            workflow.parse_status("resolved", workflow.ADMIN)
        assert exc.value.field == "status"

    def test_admin_cannot_target_reopened(self) -> None:
        with pytest.raises(ValidationError):
            workflow.parse_status("reopened", workflow.ADMIN)

    def test_department_cannot_target_forwarded(self) -> None:
        with pytest.raises(ValidationError):
            workflow.parse_status("forwarded", workflow.DEPARTMENT)

    @pytest.mark.parametrize("value", ["pending", "in_review", "completed", "reopened"])
    def test_department_targets(self, value) -> None:
        assert workflow.parse_status(value, workflow.DEPARTMENT) is S(value)


class TestAdminTarget:
    def test_forward_without_status_goes_to_pending(self) -> None:
        assert workflow.admin_target(S.in_review, None, forwarding=True) is S.pending

    def test_forward_without_status_allowed_from_reopened(self) -> None:
        assert workflow.admin_target(S.reopened, None, forwarding=True) is S.pending

    def test_nothing_requested_nothing_changes(self) -> None:
        assert workflow.admin_target(S.pending, None, forwarding=False) is None

    def test_explicit_status_from_reopened_conflicts(self) -> None:
        with pytest.raises(ConflictError):
            workflow.admin_target(S.reopened, S.in_review, forwarding=False)

    def test_explicit_status_wins_over_forward_default(self) -> None:
        assert workflow.admin_target(S.pending, S.in_review, forwarding=True) is S.in_review


class TestSources:
    @pytest.mark.parametrize("status", [s for s in S if s is not S.completed])
    def test_reopen_and_rate_need_completed(self, status) -> None:
        with pytest.raises(ConflictError):
            workflow.check_source(workflow.REOPEN, status)
        with pytest.raises(ConflictError):
            workflow.check_source(workflow.RATE, status)

    def test_completed_is_a_valid_source(self) -> None:
        workflow.check_source(workflow.REOPEN, S.completed)
        workflow.check_source(workflow.RATE, S.completed)


class TestTimelineStatus:
    def test_target_wins(self) -> None:
        assert workflow.timeline_status(S.completed, S.forwarded) == "completed"

    def test_falls_back_to_current(self) -> None:
        assert workflow.timeline_status(None, S.in_review) == "in_review"

    def test_forwarded_is_not_a_timeline_status(self) -> None:
        assert workflow.timeline_status(None, S.forwarded) is None
