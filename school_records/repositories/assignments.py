from __future__ import annotations

from typing import Any, Dict, List, Optional

from school_records.core.errors import ValidationError
from school_records.db.store import ASSIGNMENTS
from school_records.schemas.assignments import Assignment, AssignmentCreate
from school_records.schemas.common import new_id, utcnow
from .base import BaseRepository


class AssignmentRepository(BaseRepository[Assignment]):
    """Repository for assignments, including broadcast (no student_id) ones."""

    collection = ASSIGNMENTS
    model = Assignment

    async def get_by_student(self, student_id: str) -> List[Assignment]:
        """Assignments targeted at the student plus every broadcast assignment."""
        return await self.filter(lambda a: a.student_id == student_id or a.is_broadcast)

    async def get_by_teacher(self, teacher_id: str) -> List[Assignment]:
        return await self.filter(lambda a: a.teacher_id == teacher_id)

    async def create(self, payload: AssignmentCreate) -> Assignment:
        if not payload.teacher_id:
            raise ValidationError("teacher_id is required")
        if payload.year is None:
            raise ValidationError("year is required")
        assignment = self.build(
            id=new_id(),
            created_at=utcnow(),
            completed=False,
            submission_date=None,
            **payload.model_dump(),
        )
        return await self.add(assignment)

    async def update(self, assignment_id: str, changes: Dict[str, Any]) -> Optional[Assignment]:
        """
        Merge changes into the assignment.

        Completing stamps submission_date unless one is given (an assignment that
        is already complete keeps its original stamp); reopening clears it.
        Returns None if the id does not exist.
        """

        def _apply(current: Assignment) -> Assignment:
            merged = dict(changes)
            if "completed" in merged:
                if merged["completed"]:
                    if not merged.get("submission_date"):
                        merged["submission_date"] = (
                            current.submission_date if current.completed else None
                        ) or utcnow()
                else:
                    merged["submission_date"] = None
            return self.merge(current, merged)

        return await self.replace(assignment_id, _apply)
