# File: civicvoice/models/department_update.py
from __future__ import annotations
from datetime import datetime, timezone
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from civicvoice.db.base import Base

class DepartmentUpdate(Base):
    """One entry of an issue's append-only department timeline."""
    __tablename__ = "department_updates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    issue_id: Mapped[str] = mapped_column(ForeignKey("issues.id", ondelete="CASCADE"), index=True, nullable=False)
    text: Mapped[str] = mapped_column(String(4000), nullable=False)
    # pending / in_review / completed / reopened, null when the issue sat in "forwarded"
    status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    added_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    department: Mapped[str | None] = mapped_column(String(32), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
