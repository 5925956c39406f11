# civicvoice/services/departments.py
import logging
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from civicvoice.core.errors import ConflictError, ValidationError
from civicvoice.models.department import Department

log = logging.getLogger(__name__)


class DepartmentDirectory:
    """Lookup and creation of departments, consulted when routing issues."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, department_id: Optional[str]) -> Optional[Department]:
        if not department_id:
            return None
        return self.db.get(Department, department_id)

    def find_by_name(self, name: str) -> Optional[Department]:
        stmt = select(Department).where(func.lower(Department.name) == func.lower(name.strip()))
        return self.db.scalars(stmt).first()

    def list(self) -> list[Department]:
        return list(self.db.scalars(select(Department).order_by(Department.name)).all())

    def create(self, name: Optional[str], description: Optional[str] = None) -> Department:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required", field="name")
        if self.find_by_name(name):
            raise ConflictError("Department already exists", field="name")
        dept = Department(name=name, description=(description or "").strip() or None)
        self.db.add(dept)
        self.db.commit()
        self.db.refresh(dept)
        log.info("department created id=%s name=%r", dept.id, dept.name)
        return dept

    def create_or_find(self, name: str, description: Optional[str] = None) -> Department:
        existing = self.find_by_name(name or "")
        if existing:
            return existing
        return self.create(name, description)

    def names_for(self, ids: Iterable[Optional[str]]) -> dict[str, str]:
        wanted = {i for i in ids if i}
        if not wanted:
            return {}
        rows = self.db.execute(select(Department.id, Department.name).where(Department.id.in_(wanted)))
        return {dept_id: name for dept_id, name in rows}
