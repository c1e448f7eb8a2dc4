from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CourseCreate(BaseModel):
    """Create course payload."""
    name: str = Field(..., min_length=1, description="Course name")
    department: str = Field(..., min_length=1, description="Department key (e.g. piano)")
    year: int = Field(1, ge=1, le=7, description="Year of study the course is taught in")
    description: str = Field("", description="Free-text description")
    teacher_id: str = Field(..., min_length=1, description="Teaching user id")


class Course(CourseCreate):
    """Course read model."""
    id: str = Field(..., description="Course ID")

    class Config:
        from_attributes = True


class DepartmentCreate(BaseModel):
    """Create department payload."""
    name: str = Field(..., min_length=1, description="Department name")
    description: str = Field(..., min_length=1, description="Department description")
    head_teacher_id: Optional[str] = Field(None, description="Head teacher user id")

    @field_validator("head_teacher_id")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class DepartmentUpdate(BaseModel):
    """Partial department update."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    head_teacher_id: Optional[str] = Field(None)


class Department(DepartmentCreate):
    """Department read model."""
    id: str = Field(..., description="Department ID")

    class Config:
        from_attributes = True
