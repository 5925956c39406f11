#civicvoice/schemas/department.py
from typing import Optional
from civicvoice.schemas.issue import CamelModel

class DepartmentIn(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None

class DepartmentOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
