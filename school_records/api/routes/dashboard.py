from __future__ import annotations

from fastapi import APIRouter, Depends

from school_records.core.deps import get_current_actor, get_dashboard_service
from school_records.schemas.dashboard import DashboardRead
from school_records.services.dashboard import DashboardService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=DashboardRead,
    summary="Dashboard",
    description="Summary counters for the caller's role.",
)
async def read_dashboard(
    actor: Actor = Depends(get_current_actor),
    service: DashboardService = Depends(get_dashboard_service),
) -> DashboardRead:
    return await service.build(actor)
