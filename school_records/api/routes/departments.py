from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path

from school_records.core.deps import get_current_actor, get_records_service
from school_records.schemas.courses import Department, DepartmentCreate, DepartmentUpdate
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/departments", tags=["Departments"])


# PUBLIC_INTERFACE
@router.get("", response_model=List[Department], summary="List departments")
async def list_departments(
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> List[Department]:
    return await service.list_departments(actor)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Department,
    summary="Create department",
    description="Requires departments:create (admin, director).",
)
async def create_department(
    payload: DepartmentCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Department:
    return await service.create_department(actor, payload)


# PUBLIC_INTERFACE
@router.patch("/{department_id}", response_model=Department, summary="Update department")
async def update_department(
    payload: DepartmentUpdate,
    department_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Department:
    updated = await service.update_department(actor, department_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="Department not found")
    return updated
