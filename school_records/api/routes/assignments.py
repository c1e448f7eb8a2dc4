from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from school_records.core.deps import get_current_actor, get_records_service
from school_records.schemas.assignments import Assignment, AssignmentCreate, AssignmentUpdate
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/assignments", tags=["Assignments"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[Assignment],
    summary="List assignments",
    description=(
        "Assignments visible to the caller. student_id selects that student's own and "
        "broadcast assignments; teacher_id selects assignments set by that teacher."
    ),
)
async def list_assignments(
    student_id: Optional[str] = Query(None),
    teacher_id: Optional[str] = Query(None),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> List[Assignment]:
    return await service.list_assignments(actor, student_id=student_id, teacher_id=teacher_id)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Assignment,
    summary="Create assignment",
    description="Leave student_id empty to set the assignment for every student of the course's year.",
)
async def create_assignment(
    payload: AssignmentCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Assignment:
    return await service.create_assignment(actor, payload)


# PUBLIC_INTERFACE
@router.get("/{assignment_id}", response_model=Assignment, summary="Get assignment")
async def get_assignment(
    assignment_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Assignment:
    assignment = await service.get_assignment(actor, assignment_id)
    if assignment is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return assignment


# PUBLIC_INTERFACE
@router.patch(
    "/{assignment_id}",
    response_model=Assignment,
    summary="Update assignment",
    description=(
        "Partial update. Setting completed marks the assignment done (students only) and "
        "stamps the submission date; every other field is reserved to the owning teacher or an admin."
    ),
)
async def update_assignment(
    payload: AssignmentUpdate,
    assignment_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Assignment:
    updated = await service.update_assignment(actor, assignment_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Assignment not found")
    return updated
