from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from school_records.core.deps import get_current_actor, get_records_service
from school_records.schemas.courses import Course, CourseCreate
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/courses", tags=["Courses"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[Course],
    summary="List courses",
    description="Courses visible to the caller: students see their year, teachers their own courses.",
)
async def list_courses(
    year: Optional[int] = Query(None, ge=1, le=7, description="Year of study"),
    teacher_id: Optional[str] = Query(None, description="Owning teacher"),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> List[Course]:
    return await service.list_courses(actor, year=year, teacher_id=teacher_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Course,
    summary="Create course",
    description="Requires courses:create (admin, director).",
)
async def create_course(
    payload: CourseCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Course:
    return await service.create_course(actor, payload)


# PUBLIC_INTERFACE
@router.get("/{course_id}", response_model=Course, summary="Get course")
async def get_course(
    course_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Course:
    course = await service.get_course(actor, course_id)
    if course is None:
        raise HTTPException(status_code=404, detail="Course not found")
    return course
