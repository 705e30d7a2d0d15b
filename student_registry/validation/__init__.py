"""
Student Registry - Input Validation Module

Provides Pydantic-based validation for handler and tool inputs.
"""

from .decorators import format_validation_errors, validate_input
from .tool_schemas import (
    CreateStudentInput,
    ListStudentsInput,
    StudentIdInput,
    UpdateStudentInput,
)

__all__ = [
    # Decorator
    "validate_input",
    "format_validation_errors",
    # Input schemas
    "ListStudentsInput",
    "StudentIdInput",
    "CreateStudentInput",
    "UpdateStudentInput",
]
