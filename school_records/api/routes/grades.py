from __future__ import annotations

from typing import Iterable, List, Optional

from fastapi import APIRouter, Depends, Query

from school_records.core.deps import get_current_actor, get_records_service
from school_records.schemas.grades import Grade, GradeAverage, GradeCreate, GradeRead, average_five_point
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/grades", tags=["Grades"])


def _to_read(grades: Iterable[Grade]) -> List[GradeRead]:
    return [GradeRead.model_validate(g.model_dump()) for g in grades]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[GradeRead],
    summary="List grades",
    description="Grades visible to the caller (students see only their own), with percentage and five-point scores.",
)
async def list_grades(
    student_id: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> List[GradeRead]:
    return _to_read(await service.list_grades(actor, student_id=student_id))


# PUBLIC_INTERFACE
@router.get(
    "/average",
    response_model=GradeAverage,
    summary="Average grade",
    description="Mean five-point score over the visible grades, rounded to one decimal (0.0 when there are none).",
)
async def grade_average(
    student_id: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> GradeAverage:
    grades = await service.list_grades(actor, student_id=student_id)
    return GradeAverage(count=len(grades), average=average_five_point(grades))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=GradeRead,
    summary="Record grade",
    description="Requires grades:create (teacher, admin). Teachers may only grade their own courses.",
)
async def create_grade(
    payload: GradeCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> GradeRead:
    grade = await service.create_grade(actor, payload)
    return GradeRead.model_validate(grade.model_dump())
