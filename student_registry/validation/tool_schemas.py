"""
Student Registry - Tool Input Validation Schemas

Pydantic models for validating handler and tool inputs.
"""

from pydantic import BaseModel, Field

from ..students.schemas import StudentInput


class ListStudentsInput(BaseModel):
    """Input validation for list_students (no parameters)."""

    pass


class StudentIdInput(BaseModel):
    """Input validation for tools addressing one student."""

    student_id: int = Field(..., ge=1, description="Student identifier")


class CreateStudentInput(StudentInput):
    """Input validation for create_student."""

    pass


class UpdateStudentInput(StudentInput):
    """Input validation for update_student: the id plus every mutable field."""

    student_id: int = Field(..., ge=1, description="Student identifier")
