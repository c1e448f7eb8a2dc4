"""
One-time seeding of a demo school.

Seeds, only when the users collection has never been initialized:
- Four users, one per role (director, admin, teacher, year-3 student)
- Three departments, the first headed by the demo teacher
- Two year-3 courses taught by the demo teacher
- Empty assignments, grades and schedules collections

The check is on existence of the users collection, not on its contents: once
users were saved (even as an empty list) the bootstrap never runs again.

Usage:
  python -m school_records.db.run_migrations upgrade head
  python -m school_records.db.bootstrap
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from school_records.core.security import get_password_hash
from school_records.db.session import dispose_engine, get_session_maker
from school_records.db.store import (
    ASSIGNMENTS,
    COURSES,
    DEPARTMENTS,
    GRADES,
    SCHEDULES,
    USERS,
    RecordStore,
)
from school_records.repositories import CourseRepository, DepartmentRepository, UserRepository
from school_records.schemas.auth import Role, UserCreate, UserRecord
from school_records.schemas.common import new_id, utcnow
from school_records.schemas.courses import Course, CourseCreate, Department, DepartmentCreate

logger = logging.getLogger(__name__)

_BOOTSTRAP_LOCK = "bootstrap"

DEMO_USERS = [
    {
        "email": "director@music-school.ru",
        "password": "director123",
        "role": Role.DIRECTOR,
        "name": "Anna",
        "surname": "Petrova",
        "phone": "+7 (999) 123-45-67",
    },
    {
        "email": "admin@music-school.ru",
        "password": "admin123",
        "role": Role.ADMIN,
        "name": "Mikhail",
        "surname": "Sidorov",
        "phone": "+7 (999) 234-56-78",
    },
    {
        "email": "teacher@music-school.ru",
        "password": "teacher123",
        "role": Role.TEACHER,
        "name": "Elena",
        "surname": "Ivanova",
        "department": "piano",
        "phone": "+7 (999) 345-67-89",
    },
    {
        "email": "student@music-school.ru",
        "password": "student123",
        "role": Role.STUDENT,
        "name": "Dmitry",
        "surname": "Kozlov",
        "year": 3,
        "department": "piano",
        "phone": "+7 (999) 456-78-90",
    },
]


# PUBLIC_INTERFACE
async def bootstrap(store: RecordStore) -> bool:
    """
    Seed the demo school if the users collection was never initialized.

    Every seeded collection is written in one transaction, so a failure leaves
    storage uninitialized and the next call seeds from scratch.

    Returns True if data was written, False if storage was already initialized.
    """
    async with store.locked(_BOOTSTRAP_LOCK):
        if await store.is_initialized(USERS):
            return False

        logger.info("Bootstrapping demo school data")
        users = _demo_users(store)
        teacher_id = next(u.id for u in users if u.role == Role.TEACHER)
        seed = {
            USERS: users,
            DEPARTMENTS: _demo_departments(store, teacher_id),
            COURSES: _demo_courses(store, teacher_id),
        }
        for collection in (ASSIGNMENTS, GRADES, SCHEDULES):
            if not await store.is_initialized(collection):
                seed[collection] = []
        await store.save_many(
            {name: [e.model_dump(mode="json") for e in entities] for name, entities in seed.items()}
        )
        logger.info("Bootstrap completed.")
        return True


def _demo_users(store: RecordStore) -> List[UserRecord]:
    repo = UserRepository(store)
    users = []
    for fields in DEMO_USERS:
        payload = UserCreate(**fields)
        users.append(
            repo.build(
                id=new_id(),
                created_at=utcnow(),
                password_hash=get_password_hash(payload.password),
                **payload.model_dump(exclude={"password"}),
            )
        )
    return users


def _demo_departments(store: RecordStore, teacher_id: str) -> List[Department]:
    repo = DepartmentRepository(store)
    payloads = [
        DepartmentCreate(name="Piano", description="Piano department", head_teacher_id=teacher_id),
        DepartmentCreate(name="Wind instruments", description="Wind instruments department"),
        DepartmentCreate(name="Percussion", description="Percussion department"),
    ]
    return [repo.build(id=new_id(), **p.model_dump()) for p in payloads]


def _demo_courses(store: RecordStore, teacher_id: str) -> List[Course]:
    repo = CourseRepository(store)
    payloads = [
        CourseCreate(
            name="Piano performance",
            department="piano",
            year=3,
            description="Core piano course for the third year of study",
            teacher_id=teacher_id,
        ),
        CourseCreate(
            name="Solfeggio",
            department="theory",
            year=3,
            description="Music theory and ear training",
            teacher_id=teacher_id,
        ),
    ]
    return [repo.build(id=new_id(), **p.model_dump()) for p in payloads]


async def _main() -> None:
    try:
        written = await bootstrap(RecordStore(get_session_maker()))
        if not written:
            logger.info("Storage already initialized; nothing to do.")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    from school_records.core.logging import configure_logging
    from school_records.core.settings import get_app_settings

    configure_logging(get_app_settings().LOG_LEVEL)
    asyncio.run(_main())
