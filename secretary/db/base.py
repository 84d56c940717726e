"""
Declarative base - every ORM model inherits from Base so that
Base.metadata knows about all tables (used by tests and Alembic).
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass
