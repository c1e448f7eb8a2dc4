from __future__ import annotations

from typing import List

from school_records.core.errors import ValidationError
from school_records.db.store import SCHEDULES
from school_records.schemas.common import new_id
from school_records.schemas.schedules import Schedule, ScheduleCreate
from .base import BaseRepository


class ScheduleRepository(BaseRepository[Schedule]):
    """Repository for timetable entries."""

    collection = SCHEDULES
    model = Schedule

    async def get_by_year(self, year: int) -> List[Schedule]:
        return await self.filter(lambda s: s.year == year)

    async def create(self, payload: ScheduleCreate) -> Schedule:
        if not payload.teacher_id:
            raise ValidationError("teacher_id is required")
        if payload.year is None:
            raise ValidationError("year is required")
        schedule = self.build(id=new_id(), **payload.model_dump())
        return await self.add(schedule)
