from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from school_records.core.deps import get_current_actor, get_records_service
from school_records.schemas.schedules import Schedule, ScheduleCreate
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/schedules", tags=["Schedules"])


# PUBLIC_INTERFACE
@router.get("", response_model=List[Schedule], summary="List schedule entries")
async def list_schedules(
    year: Optional[int] = Query(None, ge=1, le=7, description="Year of study"),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> List[Schedule]:
    return await service.list_schedules(actor, year=year)


# PUBLIC_INTERFACE
@router.get(
    "/week",
    response_model=Dict[str, List[Schedule]],
    summary="Weekly timetable",
    description="Visible entries grouped by weekday, monday to saturday, each day ordered by start time.",
)
async def weekly_schedule(
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Dict[str, List[Schedule]]:
    return await service.weekly_schedule(actor)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=Schedule,
    summary="Create schedule entry",
    description="Requires schedules:create (teacher, admin).",
)
async def create_schedule(
    payload: ScheduleCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Schedule:
    return await service.create_schedule(actor, payload)
