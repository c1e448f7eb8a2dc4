from __future__ import annotations

import logging
from typing import Optional

from school_records.core.security import verify_password
from school_records.db.store import RecordStore
from school_records.repositories.users import UserRepository
from school_records.schemas.auth import UserRecord
from school_records.services.base import BaseService
from school_records.services.scoping import Actor

logger = logging.getLogger(__name__)

CURRENT_SESSION_SLOT = "current_user"


class SessionManager(BaseService):
    """
    Credential verification and the single durable current-session slot.

    The slot holds a user id only; the user record itself stays owned by the
    users collection. There is no expiry: a session lasts until logout or until
    the storage is cleared.
    """

    def __init__(self, store: RecordStore) -> None:
        super().__init__(store)
        self.users = UserRepository(store)

    # PUBLIC_INTERFACE
    async def authenticate(self, email: str, password: str) -> Optional[UserRecord]:
        """
        Return the user whose email and password match, without touching the session.

        Unknown emails and wrong passwords are indistinguishable to the caller.
        """
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("Failed login attempt")
            return None
        return user

    # PUBLIC_INTERFACE
    async def login(self, email: str, password: str) -> Optional[UserRecord]:
        """
        Verify credentials and, on success, make the user the current session.

        On failure returns None and leaves any previous session in place.
        """
        user = await self.authenticate(email, password)
        if user is None:
            return None
        await self.store.write_slot(CURRENT_SESSION_SLOT, user.id)
        logger.info("User %s logged in as %s", user.id, user.role.value)
        return user

    # PUBLIC_INTERFACE
    async def logout(self, user_id: Optional[str] = None) -> bool:
        """
        Clear the current session; calling it with no session is a no-op.

        With user_id, the session is cleared only if it belongs to that user.
        Returns whether a session was cleared.
        """
        current = await self.store.read_slot(CURRENT_SESSION_SLOT)
        if not current or (user_id is not None and current != user_id):
            return False
        await self.store.clear_slot(CURRENT_SESSION_SLOT)
        logger.info("Session of %s cleared", current)
        return True

    # PUBLIC_INTERFACE
    async def current_user(self) -> Optional[UserRecord]:
        """The user of the current session, or None if there is none or the user was deleted."""
        user_id = await self.store.read_slot(CURRENT_SESSION_SLOT)
        if not user_id:
            return None
        return await self.users.get_by_id(user_id)

    # PUBLIC_INTERFACE
    @staticmethod
    def actor_for(user: UserRecord) -> Actor:
        """The explicit scoping context for user."""
        return Actor.from_user(user)
