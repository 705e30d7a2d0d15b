"""
Student Registry - Students Module

The student record store, the cached service in front of it and the handlers
exposing it.
"""

from .database import StudentDatabase
from .models import Student
from .repository import SqlStudentRepository, StudentRepository
from .schemas import StudentDto, StudentInput
from .seed import seed_students
from .service import COLLECTION_KEY, StudentService, record_key

__all__ = [
    "Student",
    "StudentDto",
    "StudentInput",
    "StudentDatabase",
    "StudentRepository",
    "SqlStudentRepository",
    "StudentService",
    "COLLECTION_KEY",
    "record_key",
    "seed_students",
]
