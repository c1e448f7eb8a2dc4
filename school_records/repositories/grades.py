from __future__ import annotations

from typing import List

from school_records.core.errors import ValidationError
from school_records.db.store import GRADES
from school_records.schemas.common import new_id, utcnow
from school_records.schemas.grades import Grade, GradeCreate
from .base import BaseRepository


class GradeRepository(BaseRepository[Grade]):
    """Repository for grades."""

    collection = GRADES
    model = Grade

    async def get_by_student(self, student_id: str) -> List[Grade]:
        return await self.filter(lambda g: g.student_id == student_id)

    async def create(self, payload: GradeCreate) -> Grade:
        if not payload.teacher_id:
            raise ValidationError("teacher_id is required")
        if payload.year is None:
            raise ValidationError("year is required")
        grade = self.build(id=new_id(), date=utcnow(), **payload.model_dump())
        return await self.add(grade)
