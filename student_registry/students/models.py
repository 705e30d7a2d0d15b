"""
Student Registry - Database Models

SQLAlchemy models for the authoritative student store.
"""

from datetime import date

from sqlalchemy import Boolean, Date, Float, Index, Integer, String, true
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all database models."""

    pass


class Student(Base):
    """
    A student row.

    Indexed for the listing queries the UI issues: active students ordered by
    name, by grade and by birth date.
    """

    __tablename__ = "students"

    student_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    birth_date: Mapped[date] = mapped_column(Date, nullable=False)
    average_grade: Mapped[float] = mapped_column(Float, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    __table_args__ = (
        Index("ix_students_is_active", "is_active"),
        Index("ix_students_is_active_full_name", "is_active", "full_name"),
        Index("ix_students_is_active_average_grade", "is_active", "average_grade"),
        Index("ix_students_is_active_birth_date", "is_active", "birth_date"),
    )

    def __repr__(self) -> str:
        return f"Student(student_id={self.student_id!r}, full_name={self.full_name!r})"
