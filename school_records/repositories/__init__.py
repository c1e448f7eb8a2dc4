"""
Repository layer for data access.

One repository per entity collection. Repositories read and write whole
collections through the RecordStore, hold the collection lock around every
read-modify-write, and never look at who is calling: role checks and scoping
live in school_records.services.
"""

from .assignments import AssignmentRepository
from .courses import CourseRepository, DepartmentRepository
from .grades import GradeRepository
from .schedules import ScheduleRepository
from .users import UserRepository

__all__ = [
    "AssignmentRepository",
    "CourseRepository",
    "DepartmentRepository",
    "GradeRepository",
    "ScheduleRepository",
    "UserRepository",
]
