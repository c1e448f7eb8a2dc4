from __future__ import annotations

from typing import Dict

import pandas as pd

from school_records.db.store import RecordStore
from school_records.schemas.grades import GradeRead
from school_records.services import scoping
from school_records.services.base import BaseService
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

GRADE_REPORT_COLUMNS = [
    "date",
    "year",
    "student",
    "course",
    "teacher",
    "type",
    "value",
    "max_value",
    "percentage",
    "five_point",
    "description",
]


class ReportService(BaseService):
    """Tabular exports built with pandas."""

    def __init__(self, store: RecordStore) -> None:
        super().__init__(store)
        self.records = RecordsService(store)

    # PUBLIC_INTERFACE
    async def grades_frame(self, actor: Actor) -> pd.DataFrame:
        """
        Grades visible to actor joined with student, course and teacher names.

        Dangling references (deleted users, unknown courses) show the raw id.
        Rows are ordered by date, oldest first.
        """
        scoping.require(actor, scoping.REPORTS_VIEW)
        grades = await self.records.list_grades(actor)
        users: Dict[str, str] = {
            u.id: f"{u.name} {u.surname}" for u in await self.records.users.get_all()
        }
        courses: Dict[str, str] = {c.id: c.name for c in await self.records.courses.get_all()}

        rows = []
        for grade in grades:
            read = GradeRead.model_validate(grade.model_dump())
            rows.append(
                {
                    "date": read.date.isoformat(),
                    "year": read.year,
                    "student": users.get(read.student_id, read.student_id),
                    "course": courses.get(read.course_id, read.course_id),
                    "teacher": users.get(read.teacher_id, read.teacher_id),
                    "type": read.type.value,
                    "value": read.value,
                    "max_value": read.max_value,
                    "percentage": read.percentage,
                    "five_point": read.five_point,
                    "description": read.description,
                }
            )
        df = pd.DataFrame(rows, columns=GRADE_REPORT_COLUMNS)
        if not df.empty:
            df = df.sort_values("date", kind="stable").reset_index(drop=True)
        return df
