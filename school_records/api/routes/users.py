from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from school_records.core.deps import get_current_actor, get_records_service
from school_records.schemas.auth import Role, UserCreate, UserRead, UserUpdate
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[Dict[str, Any]],
    summary="List users",
    description=(
        "List users, optionally of a single role. Admins and directors read every field; "
        "teachers and students get id, role, name, surname, year and department."
    ),
)
async def list_users(
    role: Optional[Role] = Query(None, description="Only users of this role"),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> List[Dict[str, Any]]:
    return await service.list_users(actor, role=role)


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserRead,
    summary="Create user",
    description="Create a user. Requires users:create (admin, director).",
)
async def create_user(
    payload: UserCreate,
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> UserRead:
    user = await service.create_user(actor, payload)
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=Dict[str, Any],
    summary="Get user",
)
async def get_user(
    user_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Dict[str, Any]:
    user = await service.get_user(actor, user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


# PUBLIC_INTERFACE
@router.patch(
    "/{user_id}",
    response_model=UserRead,
    summary="Update user",
    description="Merge the provided fields into the user. A new password is re-hashed.",
)
async def update_user(
    payload: UserUpdate,
    user_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> UserRead:
    updated = await service.update_user(actor, user_id, payload)
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete user",
    description="Delete a user. Records referencing the user are kept.",
)
async def delete_user(
    user_id: str = Path(...),
    actor: Actor = Depends(get_current_actor),
    service: RecordsService = Depends(get_records_service),
) -> Response:
    if not await service.delete_user(actor, user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
