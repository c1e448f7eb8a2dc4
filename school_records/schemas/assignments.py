from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class AssignmentCreate(BaseModel):
    """
    Create assignment payload.

    Leaving student_id empty broadcasts the assignment to every student.
    teacher_id and year are normally filled in by the service from the acting
    teacher and the course.
    """
    title: str = Field(..., min_length=1, description="Assignment title")
    description: str = Field("", description="Instructions")
    course_id: str = Field(..., min_length=1, description="Course ID")
    due_date: date = Field(..., description="Due date")
    student_id: Optional[str] = Field(None, description="Target student; empty for all students")
    year: Optional[int] = Field(None, ge=1, le=7, description="Year of study; defaults to the course year")
    teacher_id: Optional[str] = Field(None, description="Owning teacher; defaults to the acting teacher")

    @field_validator("student_id", "teacher_id")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class AssignmentUpdate(BaseModel):
    """
    Partial assignment update; only provided fields change.

    Setting `completed` marks the assignment done (stamping submission_date) or
    reopens it (clearing submission_date).
    """
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None)
    due_date: Optional[date] = Field(None)
    student_id: Optional[str] = Field(None)
    year: Optional[int] = Field(None, ge=1, le=7)
    completed: Optional[bool] = Field(None)


class Assignment(BaseModel):
    """Assignment read model."""
    id: str = Field(..., description="Assignment ID")
    title: str = Field(...)
    description: str = Field("")
    course_id: str = Field(...)
    teacher_id: str = Field(...)
    student_id: Optional[str] = Field(None, description="Absent for broadcast assignments")
    year: int = Field(..., ge=1, le=7)
    due_date: date = Field(...)
    completed: bool = Field(False)
    submission_date: Optional[datetime] = Field(None, description="Set only while completed")
    created_at: datetime = Field(...)

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def _submission_only_when_completed(self) -> "Assignment":
        if not self.completed:
            self.submission_date = None
        return self

    @property
    def is_broadcast(self) -> bool:
        return not self.student_id
