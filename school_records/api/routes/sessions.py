from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from school_records.core.deps import get_current_user, get_session_manager
from school_records.core.security import create_access_token
from school_records.schemas.auth import (
    LoginRequest,
    MeRead,
    SessionRead,
    TokenResponse,
    UserRead,
    UserRecord,
)
from school_records.schemas.common import MessageResponse
from school_records.services import scoping
from school_records.services.identity import SessionManager

router = APIRouter(tags=["Sessions"])


def _issue_token(user: UserRecord) -> str:
    return create_access_token(subject=user.id, role=user.role.value)


# PUBLIC_INTERFACE
@router.post(
    "/sessions",
    response_model=SessionRead,
    summary="Login",
    description="Verify email and password, make the user the current session and issue a bearer token.",
)
async def login(
    payload: LoginRequest,
    manager: SessionManager = Depends(get_session_manager),
) -> SessionRead:
    user = await manager.login(payload.email, payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return SessionRead(user=UserRead.model_validate(user), access_token=_issue_token(user))


# PUBLIC_INTERFACE
@router.post(
    "/sessions/token",
    response_model=TokenResponse,
    summary="Login (OAuth2 form)",
    description="OAuth2 password flow for API clients and the docs UI; the username field carries the email.",
)
async def login_for_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    manager: SessionManager = Depends(get_session_manager),
) -> TokenResponse:
    user = await manager.login(form_data.username, form_data.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(access_token=_issue_token(user))


# PUBLIC_INTERFACE
@router.delete(
    "/sessions",
    response_model=MessageResponse,
    summary="Logout",
    description=(
        "Clear the current session if it belongs to the caller. Succeeds when no such "
        "session exists. Bearer tokens stay valid until expiry."
    ),
)
async def logout(
    user: UserRecord = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
) -> MessageResponse:
    await manager.logout(user_id=user.id)
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/sessions/current",
    response_model=UserRead,
    summary="Current session user",
    description="The caller's user if they hold the current session; 404 otherwise.",
)
async def current_session(
    user: UserRecord = Depends(get_current_user),
    manager: SessionManager = Depends(get_session_manager),
) -> UserRead:
    current = await manager.current_user()
    if current is None or current.id != user.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active session")
    return UserRead.model_validate(current)


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=MeRead,
    summary="Read current user",
    description="Return the user behind the bearer token and the operations their role allows.",
)
async def read_me(user: UserRecord = Depends(get_current_user)) -> MeRead:
    operations = sorted(scoping.capability_for(user.role).operations)
    return MeRead(user=UserRead.model_validate(user), operations=operations)
