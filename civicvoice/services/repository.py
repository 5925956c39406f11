# civicvoice/services/repository.py
"""Keyed record store for issues, backed by a SQLAlchemy session.

``get_for_update`` takes a row lock (``SELECT ... FOR UPDATE``) and the
``Issue.version`` column turns a lost race into a ``StaleDataError`` at flush
time, so every read-modify-write in IssueService is atomic per record.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from civicvoice.core.errors import ConflictError
from civicvoice.models.issue import Issue


class IssueRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, issue_id: str) -> Optional[Issue]:
        return self.db.get(Issue, issue_id)

    def get_for_update(self, issue_id: str) -> Optional[Issue]:
        stmt = (
            select(Issue)
            .where(Issue.id == issue_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return self.db.scalars(stmt).first()

    def list(self, *, created_by: Optional[str] = None, forwarded_to: Optional[str] = None) -> list[Issue]:
        stmt = select(Issue)
        if created_by is not None:
            stmt = stmt.where(Issue.created_by == created_by)
        if forwarded_to is not None:
            stmt = stmt.where(Issue.forwarded_to == forwarded_to)
        stmt = stmt.order_by(Issue.created_at.desc())
        return list(self.db.scalars(stmt).all())

    def add(self, issue: Issue) -> None:
        self.db.add(issue)

    def delete(self, issue: Issue) -> None:
        self.db.delete(issue)

    def commit(self) -> None:
        try:
            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            raise ConflictError("Issue was modified by another request, reload and retry")

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, issue: Issue) -> None:
        self.db.refresh(issue)
