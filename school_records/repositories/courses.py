from __future__ import annotations

from typing import List, Optional

from school_records.db.store import COURSES, DEPARTMENTS
from school_records.schemas.common import new_id
from school_records.schemas.courses import (
    Course,
    CourseCreate,
    Department,
    DepartmentCreate,
    DepartmentUpdate,
)
from .base import BaseRepository


class CourseRepository(BaseRepository[Course]):
    """Repository for courses. teacher_id is stored as given, never cross-checked here."""

    collection = COURSES
    model = Course

    async def get_by_year(self, year: int) -> List[Course]:
        return await self.filter(lambda c: c.year == year)

    async def get_by_teacher(self, teacher_id: str) -> List[Course]:
        return await self.filter(lambda c: c.teacher_id == teacher_id)

    async def create(self, payload: CourseCreate) -> Course:
        course = self.build(id=new_id(), **payload.model_dump())
        return await self.add(course)


class DepartmentRepository(BaseRepository[Department]):
    """Repository for departments."""

    collection = DEPARTMENTS
    model = Department

    async def create(self, payload: DepartmentCreate) -> Department:
        department = self.build(id=new_id(), **payload.model_dump())
        return await self.add(department)

    async def update(self, department_id: str, payload: DepartmentUpdate) -> Optional[Department]:
        changes = payload.model_dump(exclude_unset=True)
        return await self.replace(department_id, lambda d: self.merge(d, changes))
