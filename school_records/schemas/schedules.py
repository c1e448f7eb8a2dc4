from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Weekday(str, Enum):
    """Teaching days, in timetable order."""
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"


TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ScheduleCreate(BaseModel):
    """Create schedule entry payload. teacher_id and year default from the course."""
    course_id: str = Field(..., min_length=1, description="Course ID")
    day: Weekday = Field(..., description="Weekday")
    time: str = Field(..., pattern=TIME_PATTERN, description="Start time, HH:MM")
    duration: int = Field(45, gt=0, le=24 * 60, description="Length in minutes")
    room: str = Field(..., min_length=1)
    year: Optional[int] = Field(None, ge=1, le=7)
    teacher_id: Optional[str] = Field(None)


class Schedule(BaseModel):
    """Schedule entry read model."""
    id: str = Field(..., description="Schedule entry ID")
    course_id: str = Field(...)
    teacher_id: str = Field(...)
    day: Weekday = Field(...)
    time: str = Field(..., pattern=TIME_PATTERN)
    duration: int = Field(..., gt=0)
    year: int = Field(..., ge=1, le=7)
    room: str = Field(...)

    class Config:
        from_attributes = True
