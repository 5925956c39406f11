# civicvoice/services/issues.py
"""Issue lifecycle orchestration.

Every mutating operation follows the same shape: load the record under a
per-record lock, ask the AuthorizationGuard, check the transition against the
state machine, mutate, append to the timeline where applicable, and commit the
status change and timeline entry together. Any error rolls the whole request
back; nothing is half-applied.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Union

import pydantic

from civicvoice.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from civicvoice.models.department_update import DepartmentUpdate
from civicvoice.models.issue import (
    ContactMethod,
    GeoSource,
    Issue,
    IssueStatus,
    Recurrence,
    Severity,
)
from civicvoice.models.issue_activity import IssueActivity
from civicvoice.schemas.issue import IssueIn
from civicvoice.services import workflow
from civicvoice.services.authz import Action, AuthorizationGuard, Principal, Role
from civicvoice.services.departments import DepartmentDirectory
from civicvoice.services.extraction import TextExtractor
from civicvoice.services.repository import IssueRepository
from civicvoice.services.summary import build_summary

log = logging.getLogger(__name__)

MAX_EVIDENCE_FILES = 3

_ROLE_VIEWS = {
    Role.admin: Action.view_as_admin,
    Role.department: Action.view_as_department,
    Role.citizen: Action.view_as_citizen,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _clear_rating(issue: Issue) -> None:
    # a rating belongs to one resolution; leaving completed discards it
    issue.rating = None
    issue.review = None
    issue.reviewed_at = None


def _required(value: Optional[str], field: str) -> str:
    value = _clean(value)
    if not value:
        raise ValidationError(f"{field} is required", field=field)
    return value


def _enum(enum_cls, value: Optional[str], field: str, default=None):
    value = _clean(value)
    if value is None:
        if default is None:
            raise ValidationError(f"{field} is required", field=field)
        return default
    try:
        return enum_cls(value.lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field} value: {value!r} (allowed: {allowed})", field=field)


def _url_list(value) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [u.strip() for u in value if u and u.strip()]


class IssueService:
    def __init__(
        self,
        repo: IssueRepository,
        directory: DepartmentDirectory,
        guard: AuthorizationGuard,
        *,
        extractor: Optional[TextExtractor] = None,
        clock: Callable[[], datetime] = _utcnow,
        max_evidence_files: int = MAX_EVIDENCE_FILES,
    ):
        self.repo = repo
        self.directory = directory
        self.guard = guard
        self.extractor = extractor
        self.clock = clock
        self.max_evidence_files = max_evidence_files

    # ------------------------------------------------------------------
    # intake
    # ------------------------------------------------------------------

    def create(self, data: Union[IssueIn, dict], principal: Optional[Principal]) -> Issue:
        self.guard.ensure(principal, Action.create_issue)
        if not isinstance(data, IssueIn):
            try:
                data = IssueIn.model_validate(data)
            except pydantic.ValidationError as e:
                first = e.errors()[0]
                field = ".".join(str(p) for p in first.get("loc", ())) or None
                raise ValidationError(f"Invalid issue data: {first.get('msg')}", field=field)

        fields = self._validate_intake(data)
        now = self.clock()
        actor = principal.id if principal else None
        issue = Issue(
            **fields,
            status=IssueStatus.pending,
            created_by=actor,
            forwarded_to=None,
            resolution_evidence=[],
            created_at=now,
            summary=build_summary(
                severity=fields["severity"].value,
                issue_type=fields["issue_type"],
                location=fields["location"],
                landmark=fields["landmark"],
                impact=fields["impact"],
                recurrence=fields["recurrence"].value,
                latitude=fields["lat"],
                longitude=fields["lng"],
                evidence_urls=fields["evidence_urls"],
                contact_name=fields["contact_name"],
                contact_phone=fields["contact_phone"],
                contact_email=fields["contact_email"],
            ),
        )
        issue.activity.append(IssueActivity(from_status=None, to_status=IssueStatus.pending.value, actor=actor, at=now))
        self.repo.add(issue)
        self.repo.commit()
        log.info("issue created id=%s type=%r severity=%s by=%s", issue.id, issue.issue_type, issue.severity.value, actor)
        return issue

    def create_from_text(self, text: str, principal: Optional[Principal]) -> Issue:
        """Free-text intake: the extractor's candidate is validated like any other input."""
        self.guard.ensure(principal, Action.create_issue)
        if self.extractor is None:
            raise RuntimeError("No text extractor configured")
        text = _clean(text)
        if not text:
            raise ValidationError("text is required", field="text")
        candidate = self.extractor.extract(text)
        return self.create(candidate, principal)

    def _validate_intake(self, data: IssueIn) -> dict:
        issue_type = _required(data.issue_type, "issueType")
        location = _required(data.location, "location")
        severity = _enum(Severity, data.severity, "severity")
        description = _required(data.description, "description")
        recurrence = _enum(Recurrence, data.recurrence, "recurrence", default=Recurrence.new)
        contact_method = _enum(ContactMethod, data.preferred_contact_method, "preferredContactMethod", default=ContactMethod.none)

        evidence = _url_list(data.evidence_urls)
        if len(evidence) > self.max_evidence_files:
            raise ValidationError(f"At most {self.max_evidence_files} evidence files can be attached", field="evidenceUrls")

        lat = lng = accuracy = source = None
        geo = data.geo_location
        if geo is not None and (geo.latitude is not None or geo.longitude is not None):
            if geo.latitude is None or geo.longitude is None:
                raise ValidationError("geoLocation needs both latitude and longitude", field="geoLocation")
            if not (-90 <= geo.latitude <= 90 and -180 <= geo.longitude <= 180):
                raise ValidationError("geoLocation coordinates are out of range", field="geoLocation")
            if geo.accuracy is not None and geo.accuracy < 0:
                raise ValidationError("geoLocation accuracy cannot be negative", field="geoLocation.accuracy")
            lat, lng, accuracy = geo.latitude, geo.longitude, geo.accuracy
            source = _enum(GeoSource, geo.source, "geoLocation.source")

        return {
            "issue_type": issue_type,
            "location": location,
            "landmark": _clean(data.landmark),
            "severity": severity,
            "description": description,
            "impact": _clean(data.impact),
            "recurrence": recurrence,
            "lat": lat,
            "lng": lng,
            "geo_accuracy": accuracy,
            "geo_source": source,
            "evidence_urls": evidence,
            "contact_name": _clean(data.contact_name),
            "contact_phone": _clean(data.contact_phone),
            "contact_email": _clean(data.contact_email),
            "preferred_contact_method": contact_method,
        }

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def list_for_role(self, principal: Optional[Principal], view: Optional[Action] = None) -> list[Issue]:
        """Issues visible in ``view``; defaults to the view matching the caller's role."""
        if principal is None:
            raise PermissionDeniedError("Not authenticated")
        self.guard.ensure(principal, view or _ROLE_VIEWS[principal.role])
        if principal.role is Role.admin:
            return self.repo.list()
        if principal.role is Role.department:
            return self.repo.list(forwarded_to=principal.department)
        return self.repo.list(created_by=principal.id)

    def get(self, issue_id: str, principal: Optional[Principal]) -> Issue:
        issue = self.repo.get(issue_id)
        if issue is None:
            raise NotFoundError("Issue not found")
        if not self.guard.can_view(principal, issue):
            raise PermissionDeniedError("You cannot view this issue")
        return issue

    def history(self, issue_id: str, principal: Optional[Principal]) -> list[IssueActivity]:
        return list(self.get(issue_id, principal).activity)

    # ------------------------------------------------------------------
    # transitions
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self, issue_id: str) -> Iterator[Issue]:
        issue = self.repo.get_for_update(issue_id)
        if issue is None:
            self.repo.rollback()
            raise NotFoundError("Issue not found")
        try:
            yield issue
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

    def _set_status(self, issue: Issue, target: IssueStatus, principal: Principal, now: datetime) -> None:
        previous = issue.status
        issue.status = target
        if target is IssueStatus.completed:
            issue.completed_at = now
        elif previous is IssueStatus.completed:
            _clear_rating(issue)
        issue.activity.append(
            IssueActivity(from_status=previous.value, to_status=target.value, actor=principal.id, at=now)
        )
        log.info("issue %s status %s -> %s by %s (%s)", issue.id, previous.value, target.value, principal.id, principal.role.value)

    def update_status(
        self,
        issue_id: str,
        status: Optional[str],
        forwarded_to: Optional[str],
        principal: Optional[Principal],
    ) -> Issue:
        """Admin triage: set a status, forward to a department, or both."""
        with self._locked(issue_id) as issue:
            self.guard.ensure(principal, Action.update_status, issue)
            status = _clean(status)
            forwarded_to = _clean(forwarded_to)
            if forwarded_to:
                self.guard.ensure(principal, Action.forward, issue)
            if status is None and forwarded_to is None:
                raise ValidationError("Provide a status or a department to forward to", field="status")

            requested = workflow.parse_status(status, workflow.ADMIN)
            dept = None
            if forwarded_to:
                dept = self.directory.find_by_id(forwarded_to)
                if dept is None:
                    raise ValidationError("Department not found", field="forwardedTo")

            target = workflow.admin_target(issue.status, requested, forwarding=dept is not None)
            destination = dept.id if dept else issue.forwarded_to
            if target is IssueStatus.forwarded and destination is None:
                raise ValidationError("A forwarded issue needs a department", field="forwardedTo")

            now = self.clock()
            if dept is not None:
                issue.forwarded_to = dept.id
                log.info("issue %s forwarded to department %s by %s", issue.id, dept.id, principal.id)
            if target is not None:
                self._set_status(issue, target, principal, now)
            issue.updated_at = now
        return issue

    def department_update(
        self,
        issue_id: str,
        status: Optional[str],
        comment: Optional[str],
        resolution_evidence: Optional[list[str]],
        principal: Optional[Principal],
    ) -> Issue:
        with self._locked(issue_id) as issue:
            # ownership first: the decision must not depend on the payload
            self.guard.ensure(principal, Action.department_update, issue)
            comment = _clean(comment)
            status = _clean(status)
            if comment is None and status is None:
                raise ValidationError("Provide at least a comment or a status update", field="comment")

            target = workflow.parse_status(status, workflow.DEPARTMENT)
            if target is not None:
                workflow.check_source(workflow.DEPARTMENT, issue.status)
            evidence = _url_list(resolution_evidence)
            if evidence and target is not IssueStatus.completed:
                raise ValidationError(
                    "Resolution evidence can only be attached when marking the issue completed",
                    field="resolutionEvidence",
                )

            now = self.clock()
            entry_status = workflow.timeline_status(target, issue.status)
            if target is not None:
                self._set_status(issue, target, principal, now)
            if evidence:
                issue.resolution_evidence = [*(issue.resolution_evidence or []), *evidence]
            if comment:
                issue.department_updates.append(
                    DepartmentUpdate(
                        text=comment,
                        status=entry_status,
                        added_by=principal.id,
                        department=principal.department,
                        created_at=now,
                    )
                )
            issue.updated_at = now
        return issue

    def reopen(self, issue_id: str, comment: Optional[str], principal: Optional[Principal]) -> Issue:
        with self._locked(issue_id) as issue:
            self.guard.ensure(principal, Action.reopen, issue)
            comment = _clean(comment)
            if not comment:
                raise ValidationError("A reason is required to reopen an issue", field="comment")
            workflow.check_source(workflow.REOPEN, issue.status)

            now = self.clock()
            self._set_status(issue, IssueStatus.reopened, principal, now)
            issue.department_updates.append(
                DepartmentUpdate(
                    text=comment,
                    status=IssueStatus.reopened.value,
                    added_by=principal.id,
                    department=issue.forwarded_to,
                    created_at=now,
                )
            )
            issue.updated_at = now
        return issue

    def rate(self, issue_id: str, rating, review: Optional[str], principal: Optional[Principal]) -> Issue:
        with self._locked(issue_id) as issue:
            self.guard.ensure(principal, Action.rate, issue)
            if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
                raise ValidationError("Rating must be an integer between 1 and 5", field="rating")
            workflow.check_source(workflow.RATE, issue.status)
            if issue.rating is not None:
                raise ConflictError("Issue has already been rated", field="rating")

            now = self.clock()
            issue.rating = rating
            issue.review = _clean(review)
            issue.reviewed_at = now
            issue.updated_at = now
            log.info("issue %s rated %s by %s", issue.id, rating, principal.id)
        return issue

    def delete(self, issue_id: str, principal: Optional[Principal]) -> None:
        with self._locked(issue_id) as issue:
            self.guard.ensure(principal, Action.delete, issue)
            self.repo.delete(issue)
            log.info("issue %s deleted by %s", issue_id, principal.id)
