# civicvoice/scripts/seed.py
"""Create the default departments and print development tokens.

    python -m civicvoice.scripts.seed
"""
import logging

from civicvoice.core.security import make_token
from civicvoice.db.base import Base
from civicvoice.db.session import SessionLocal, engine
from civicvoice.models import alert, department, department_update, issue, issue_activity  # noqa: F401
from civicvoice.services.departments import DepartmentDirectory

log = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS = [
    ("Roads & Transport", "Potholes, signals, congestion"),
    ("Water & Sewage", "Leaks, contamination, flooding"),
    ("Power", "Outages, streetlights, power safety"),
]


def run(db=None, *, create_schema: bool = True) -> dict:
    if create_schema:
        Base.metadata.create_all(bind=engine)
    own = db is None
    db = db or SessionLocal()
    try:
        directory = DepartmentDirectory(db)
        seeded = {}
        for name, description in DEFAULT_DEPARTMENTS:
            dept = directory.create_or_find(name, description)
            seeded[name] = dept.id
        return seeded
    finally:
        if own:
            db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    departments = run()
    print("Departments:")
    for name, dept_id in departments.items():
        print(f"  {name}: {dept_id}")
    print("\nDevelopment tokens (15 min):")
    print(f"  admin:    {make_token('admin@civicvoice.local', 'admin')}")
    print(f"  citizen:  {make_token('citizen1@civicvoice.local', 'citizen')}")
    roads = departments["Roads & Transport"]
    print(f"  roads:    {make_token('roads@civicvoice.local', 'department', department=roads)}")
