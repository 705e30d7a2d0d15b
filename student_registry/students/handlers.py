"""
Student Registry - Student Handlers

Maps StudentService outcomes to structured responses carrying a
transport-level status code. Handlers never raise: not-found, invalid input,
store failures and unexpected errors all become error responses.

Handlers take keyword arguments only, since inputs are validated by
``validate_input`` before the handler body runs.
"""

import logging
from datetime import date
from typing import Any

from ..errors import (
    ErrorCode,
    PersistenceError,
    RegistryError,
    ValidationError,
    extract_error_code,
    make_error_response,
)
from ..validation import (
    CreateStudentInput,
    ListStudentsInput,
    StudentIdInput,
    UpdateStudentInput,
    validate_input,
)
from .schemas import StudentInput
from .service import StudentService

logger = logging.getLogger(__name__)


def _not_found(student_id: int) -> dict[str, Any]:
    return make_error_response(
        ErrorCode.NOT_FOUND,
        f"Student with ID {student_id} not found",
        {"student_id": student_id},
        status_code=404,
    )


def _invalid(error: ValidationError) -> dict[str, Any]:
    return make_error_response(ErrorCode.INVALID_INPUT, error.message, error.details, status_code=error.status_code)


def _failed(operation: str, error: Exception) -> dict[str, Any]:
    error_code = extract_error_code(error)
    status_code = error.status_code if isinstance(error, RegistryError) else 500
    if isinstance(error, PersistenceError):
        logger.error(f"Student store failure during {operation}: {error.message}", extra=error.details)
    else:
        logger.error(f"Unexpected error during {operation}: {error}", exc_info=True)

    return make_error_response(
        error_code,
        f"An error occurred while trying to {operation}",
        {"operation": operation, "error_type": type(error).__name__},
        status_code=status_code,
    )


class StudentHandlers:
    """Request handlers for the student CRUD surface."""

    def __init__(self, service: StudentService):
        self._service = service

    @validate_input(ListStudentsInput)
    async def list_students(self) -> dict[str, Any]:
        """Return every student."""
        try:
            students = await self._service.list_all()
        except Exception as e:
            return _failed("list students", e)

        return {
            "success": True,
            "status_code": 200,
            "count": len(students),
            "students": [s.to_payload() for s in students],
        }

    @validate_input(StudentIdInput)
    async def get_student(self, student_id: int) -> dict[str, Any]:
        """Return one student or a NOT_FOUND response."""
        try:
            student = await self._service.get_by_id(student_id)
        except Exception as e:
            return _failed("retrieve the student", e)

        if student is None:
            return _not_found(student_id)

        return {"success": True, "status_code": 200, "student": student.to_payload()}

    @validate_input(CreateStudentInput)
    async def create_student(
        self,
        full_name: str,
        birth_date: date,
        average_grade: float,
        is_active: bool = True,
    ) -> dict[str, Any]:
        """Create a student; the id is assigned by the store."""
        data = StudentInput(
            full_name=full_name,
            birth_date=birth_date,
            average_grade=average_grade,
            is_active=is_active,
        )
        try:
            student = await self._service.create(data)
        except ValidationError as e:
            return _invalid(e)
        except Exception as e:
            return _failed("create the student", e)

        return {"success": True, "status_code": 201, "student": student.to_payload()}

    @validate_input(UpdateStudentInput)
    async def update_student(
        self,
        student_id: int,
        full_name: str,
        birth_date: date,
        average_grade: float,
        is_active: bool = True,
    ) -> dict[str, Any]:
        """Overwrite every mutable field of a student."""
        data = StudentInput(
            full_name=full_name,
            birth_date=birth_date,
            average_grade=average_grade,
            is_active=is_active,
        )
        try:
            student = await self._service.update(student_id, data)
        except ValidationError as e:
            return _invalid(e)
        except Exception as e:
            return _failed("update the student", e)

        if student is None:
            return _not_found(student_id)

        return {"success": True, "status_code": 200, "student": student.to_payload()}

    @validate_input(StudentIdInput)
    async def delete_student(self, student_id: int) -> dict[str, Any]:
        """Delete a student."""
        try:
            deleted = await self._service.delete(student_id)
        except Exception as e:
            return _failed("delete the student", e)

        if not deleted:
            return _not_found(student_id)

        return {"success": True, "status_code": 204, "student_id": student_id}
