from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, Field, computed_field, model_validator


class GradeType(str, Enum):
    HOMEWORK = "homework"
    TEST = "test"
    EXAM = "exam"
    PERFORMANCE = "performance"


def _check_bounds(value: float, max_value: float) -> None:
    if not 0 < value <= max_value:
        raise ValueError("grade value must satisfy 0 < value <= max_value")


class GradeCreate(BaseModel):
    """Create grade payload. teacher_id and year default from the acting teacher and the student."""
    student_id: str = Field(..., min_length=1, description="Graded student")
    course_id: str = Field(..., min_length=1, description="Course ID")
    value: float = Field(..., gt=0, description="Points awarded")
    max_value: float = Field(5, gt=0, description="Maximum points")
    type: GradeType = Field(GradeType.PERFORMANCE, description="Kind of work graded")
    description: str = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=1, le=7)
    teacher_id: Optional[str] = Field(None)

    @model_validator(mode="after")
    def _value_within_max(self) -> "GradeCreate":
        _check_bounds(self.value, self.max_value)
        return self


class Grade(BaseModel):
    """Stored grade."""
    id: str = Field(..., description="Grade ID")
    student_id: str = Field(...)
    course_id: str = Field(...)
    teacher_id: str = Field(...)
    value: float = Field(...)
    max_value: float = Field(...)
    type: GradeType = Field(...)
    description: str = Field(...)
    date: datetime = Field(..., description="When the grade was recorded")
    year: int = Field(..., ge=1, le=7)

    @model_validator(mode="after")
    def _value_within_max(self) -> "Grade":
        _check_bounds(self.value, self.max_value)
        return self


class GradeRead(Grade):
    """Grade read model with derived scores."""

    class Config:
        from_attributes = True

    @computed_field  # type: ignore[misc]
    @property
    def percentage(self) -> int:
        """Share of max_value, rounded to a whole percent."""
        return round(self.value / self.max_value * 100)

    @computed_field  # type: ignore[misc]
    @property
    def five_point(self) -> float:
        """Contribution on the five-point scale."""
        return round(self.value / self.max_value * 5, 1)


class GradeAverage(BaseModel):
    """Average of a set of grades on the five-point scale."""
    count: int = Field(..., description="Number of grades averaged")
    average: float = Field(..., description="Mean five-point score, one decimal")


# PUBLIC_INTERFACE
def average_five_point(grades: Iterable[Grade]) -> float:
    """Mean five-point score of grades rounded to one decimal; 0.0 when there are none."""
    scores = [g.value / g.max_value * 5 for g in grades]
    if not scores:
        return 0.0
    return round(sum(scores) / len(scores), 1)
