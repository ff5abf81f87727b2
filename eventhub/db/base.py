"""
Declarative base and shared column mixins for all ORM models.
"""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Adds a server-assigned creation timestamp."""

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
