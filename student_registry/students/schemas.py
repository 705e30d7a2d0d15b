"""
Student Registry - Student Schemas

Pydantic models for caller input and for the external-facing record shape.
Both accept snake_case or camelCase field names; StudentDto serializes with
camelCase aliases, which is also the shape stored in the cache.
"""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class StudentInput(BaseModel):
    """Caller-supplied student fields. The id is always assigned by the store."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    full_name: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Full name (2-100 characters)",
    )
    birth_date: date = Field(..., description="Date of birth")
    average_grade: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Average grade (0-100)",
    )
    is_active: bool = Field(default=True, description="Whether the student is currently enrolled")

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Strip surrounding whitespace and reject blank names."""
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Full name must be between 2 and 100 characters")
        return v


class StudentDto(BaseModel):
    """External-facing student record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    student_id: int
    full_name: str
    birth_date: date
    average_grade: float
    is_active: bool

    def to_payload(self) -> dict:
        """JSON-compatible camelCase dict, as cached and returned to callers."""
        return self.model_dump(mode="json", by_alias=True)
