from __future__ import annotations

from typing import List, Optional

from school_records.core.errors import ValidationError
from school_records.db.store import USERS
from school_records.schemas.auth import Role, UserCreate, UserRecord, UserUpdate
from school_records.schemas.common import new_id, utcnow
from .base import BaseRepository


def _same_email(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


class UserRepository(BaseRepository[UserRecord]):
    """Repository for users. Emails are unique, compared case-insensitively."""

    collection = USERS
    model = UserRecord

    async def get_by_email(self, email: str) -> Optional[UserRecord]:
        for user in await self.load():
            if _same_email(user.email, email):
                return user
        return None

    async def get_by_role(self, role: Role) -> List[UserRecord]:
        return await self.filter(lambda u: u.role == role)

    async def create(self, payload: UserCreate, *, hashed_password: str) -> UserRecord:
        user = self.build(
            id=new_id(),
            created_at=utcnow(),
            password_hash=hashed_password,
            **payload.model_dump(exclude={"password"}),
        )
        async with self.store.locked(self.collection):
            users = await self.load()
            if any(_same_email(u.email, user.email) for u in users):
                raise ValidationError("User with this email already exists")
            users.append(user)
            await self.save(users)
        return user

    async def update(
        self,
        user_id: str,
        payload: UserUpdate,
        *,
        hashed_password: Optional[str] = None,
    ) -> Optional[UserRecord]:
        changes = payload.model_dump(exclude_unset=True, exclude={"password"})
        if hashed_password is not None:
            changes["password_hash"] = hashed_password

        async with self.store.locked(self.collection):
            users = await self.load()
            for idx, user in enumerate(users):
                if user.id != user_id:
                    continue
                new_email = changes.get("email")
                if new_email and any(
                    other.id != user_id and _same_email(other.email, new_email) for other in users
                ):
                    raise ValidationError("User with this email already exists")
                updated = self.merge(user, changes)
                users[idx] = updated
                await self.save(users)
                return updated
        return None

    async def delete(self, user_id: str) -> bool:
        return await self.remove(user_id)
