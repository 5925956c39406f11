# File: civicvoice/models/department.py
# Project: civicvoice-backend

import uuid
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from civicvoice.db.base import Base

class Department(Base):
    __tablename__ = "departments"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    name: Mapped[str] = mapped_column(String(120), unique=True, index=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
