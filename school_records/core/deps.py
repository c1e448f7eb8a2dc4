from __future__ import annotations

import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from school_records.core.logging import bind_actor
from school_records.core.security import decode_token
from school_records.core.settings import get_app_settings
from school_records.db.store import RecordStore
from school_records.repositories.users import UserRepository
from school_records.schemas.auth import UserRecord
from school_records.services import scoping
from school_records.services.dashboard import DashboardService
from school_records.services.identity import SessionManager
from school_records.services.records import RecordsService
from school_records.services.reports import ReportService
from school_records.services.scoping import Actor

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); form login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/sessions/token")


# PUBLIC_INTERFACE
def get_store(request: Request) -> RecordStore:
    """Return the RecordStore attached to the application at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Storage not ready")
    return store


# PUBLIC_INTERFACE
def get_records_service(store: RecordStore = Depends(get_store)) -> RecordsService:
    settings = get_app_settings()
    return RecordsService(store, enforce_references=settings.ENFORCE_REFERENCES)


# PUBLIC_INTERFACE
def get_session_manager(store: RecordStore = Depends(get_store)) -> SessionManager:
    return SessionManager(store)


# PUBLIC_INTERFACE
def get_dashboard_service(store: RecordStore = Depends(get_store)) -> DashboardService:
    return DashboardService(store)


# PUBLIC_INTERFACE
def get_report_service(store: RecordStore = Depends(get_store)) -> ReportService:
    return ReportService(store)


# PUBLIC_INTERFACE
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    store: RecordStore = Depends(get_store),
) -> UserRecord:
    """
    Resolve and return the current user from the Authorization bearer token.

    The token carries the user id; the user is reloaded on every request so a
    deleted user's token stops working immediately.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id or payload.get("type") != "access":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = await UserRepository(store).get_by_id(str(user_id))
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    bind_actor(user.id, user.role.value)
    return user


# PUBLIC_INTERFACE
async def get_current_actor(user: UserRecord = Depends(get_current_user)) -> Actor:
    """Scoping context of the authenticated user."""
    return Actor.from_user(user)


# PUBLIC_INTERFACE
def require_operation(*required: str):
    """
    Create a dependency that requires the current user's role to allow every
    one of the given operation codes.
    """

    async def _dep(actor: Actor = Depends(get_current_actor)) -> bool:
        missing = [op for op in required if not scoping.can(actor, op)]
        if missing:
            logger.warning("Denied %s for %s %s", ", ".join(missing), actor.role.value, actor.user_id)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return True

    return _dep
