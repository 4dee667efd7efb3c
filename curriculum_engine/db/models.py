"""
SQLAlchemy models for plan persistence.

A plan is stored as one JSON document plus an integer version used for
optimistic concurrency.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Integer, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class PlanRecord(Base):
    """Persisted curriculum plan."""

    __tablename__ = "curriculum_plans"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    student_id: Mapped[str] = mapped_column(Text, default="", index=True)
    document: Mapped[dict] = mapped_column(JSON, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(default=func.now())
    updated_at: Mapped[datetime] = mapped_column(default=func.now(), onupdate=func.now())

    def __repr__(self) -> str:
        return f"<PlanRecord id={self.id} student={self.student_id} version={self.version}>"
