# File: civicvoice/services/stats.py
# Project: civicvoice-backend

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from civicvoice.models.department import Department
from civicvoice.models.issue import Issue, IssueStatus, Recurrence, Severity

TREND_DAYS = 30


def _as_utc(dt: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def _counts(db: Session, column, enum_cls) -> dict:
    out = {m.value: 0 for m in enum_cls}
    for value, n in db.execute(select(column, func.count(Issue.id)).group_by(column)):
        if value is not None:
            out[value.value] = n
    return out


def dashboard_stats(db: Session, now: Optional[datetime] = None, include_locations: bool = True) -> dict:
    """Aggregate counters for the dashboard.

    ``locations`` lists individual issues with their coordinates and is only
    included when ``include_locations`` is set.
    """
    now = now or datetime.now(timezone.utc)
    total = db.scalar(select(func.count(Issue.id))) or 0

    by_type = [
        {"type": t, "count": n}
        for t, n in db.execute(
            select(Issue.issue_type, func.count(Issue.id))
            .group_by(Issue.issue_type)
            .order_by(func.count(Issue.id).desc(), Issue.issue_type)
        )
    ]

    by_department = [
        {"departmentId": dept_id, "departmentName": name or "Unassigned", "count": n}
        for dept_id, name, n in db.execute(
            select(Issue.forwarded_to, Department.name, func.count(Issue.id))
            .outerjoin(Department, Department.id == Issue.forwarded_to)
            .group_by(Issue.forwarded_to, Department.name)
            .order_by(func.count(Issue.id).desc())
        )
    ]

    durations = [
        (_as_utc(done) - _as_utc(created)).total_seconds() / 86400
        for created, done in db.execute(
            select(Issue.created_at, Issue.completed_at).where(
                Issue.status == IssueStatus.completed, Issue.completed_at.is_not(None)
            )
        )
    ]
    avg_resolution_days = round(sum(durations) / len(durations), 1) if durations else None

    today = now.astimezone(timezone.utc).date()
    first_day = today - timedelta(days=TREND_DAYS - 1)
    since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)
    per_day: dict[date, int] = {first_day + timedelta(days=d): 0 for d in range(TREND_DAYS)}
    for (created,) in db.execute(select(Issue.created_at).where(Issue.created_at >= since)):
        day = _as_utc(created).date()
        if day in per_day:
            per_day[day] += 1

    rated_count, rating_avg = db.execute(
        select(func.count(Issue.rating), func.avg(Issue.rating)).where(Issue.rating.is_not(None))
    ).one()

    stats = {
        "total": total,
        "byStatus": _counts(db, Issue.status, IssueStatus),
        "bySeverity": _counts(db, Issue.severity, Severity),
        "byRecurrence": _counts(db, Issue.recurrence, Recurrence),
        "byType": by_type,
        "byDepartment": by_department,
        "avgResolutionDays": avg_resolution_days,
        "issuesPerDay": [{"date": d.isoformat(), "count": n} for d, n in sorted(per_day.items())],
        "ratings": {
            "count": rated_count or 0,
            "average": round(float(rating_avg), 2) if rating_avg is not None else None,
        },
    }
    if include_locations:
        stats["locations"] = [
            {
                "id": i.id,
                "publicId": i.public_id,
                "issueType": i.issue_type,
                "severity": i.severity.value,
                "status": i.status.value,
                "latitude": i.lat,
                "longitude": i.lng,
            }
            for i in db.scalars(select(Issue).where(Issue.lat.is_not(None), Issue.lng.is_not(None)))
        ]
    return stats
