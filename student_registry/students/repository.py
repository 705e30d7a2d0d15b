"""
Student Registry - Student Repository

The authoritative keyed store for students. The record service depends only
on the StudentRepository contract; SqlStudentRepository implements it over
the async SQLAlchemy engine.

Store failures are raised as PersistenceError and are never masked.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from ..errors import PersistenceError
from .database import StudentDatabase
from .models import Student
from .schemas import StudentInput

logger = logging.getLogger(__name__)


class StudentRepository(ABC):
    """Contract of the persistence backend used by the record service."""

    @abstractmethod
    async def query_all(self) -> list[Student]:
        """Return every student ordered by id."""
        pass

    @abstractmethod
    async def query_by_id(self, student_id: int) -> Student | None:
        """Return one student, or None if the id is unknown."""
        pass

    @abstractmethod
    async def insert(self, data: StudentInput) -> Student:
        """Persist a new student and return it with its assigned id."""
        pass

    @abstractmethod
    async def update(self, student_id: int, data: StudentInput) -> bool:
        """Overwrite every mutable field. False if the id is unknown."""
        pass

    @abstractmethod
    async def delete(self, student_id: int) -> bool:
        """Remove a student. False if the id is unknown."""
        pass


@contextmanager
def _persistence_errors(operation: str, **context: object) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            f"Student store {operation} failed: {e}",
            extra={"operation": operation, **context, "error": str(e)},
            exc_info=True,
        )
        raise PersistenceError(
            f"Student store {operation} failed",
            details={"operation": operation, **context, "error": str(e)},
        ) from e


class SqlStudentRepository(StudentRepository):
    """StudentRepository backed by SQLite through SQLAlchemy's async ORM."""

    def __init__(self, database: StudentDatabase):
        self._db = database

    async def query_all(self) -> list[Student]:
        with _persistence_errors("query_all"):
            async with self._db.get_session() as session:
                result = await session.execute(select(Student).order_by(Student.student_id))
                return list(result.scalars().all())

    async def query_by_id(self, student_id: int) -> Student | None:
        with _persistence_errors("query_by_id", student_id=student_id):
            async with self._db.get_session() as session:
                return await session.get(Student, student_id)

    async def insert(self, data: StudentInput) -> Student:
        with _persistence_errors("insert"):
            async with self._db.get_session() as session:
                student = Student(**data.model_dump())
                session.add(student)
                await session.commit()
                await session.refresh(student)
                return student

    async def update(self, student_id: int, data: StudentInput) -> bool:
        with _persistence_errors("update", student_id=student_id):
            async with self._db.get_session() as session:
                student = await session.get(Student, student_id)
                if student is None:
                    return False

                for field, value in data.model_dump().items():
                    setattr(student, field, value)

                await session.commit()
                return True

    async def delete(self, student_id: int) -> bool:
        with _persistence_errors("delete", student_id=student_id):
            async with self._db.get_session() as session:
                student = await session.get(Student, student_id)
                if student is None:
                    return False

                await session.delete(student)
                await session.commit()
                return True
