# File: civicvoice/db/base.py
# Project: civicvoice-backend

from sqlalchemy.orm import DeclarativeBase

class Base(DeclarativeBase):
    pass
