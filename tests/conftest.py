import asyncio
import os

# Cheap hashes and no Alembic run for the app under test; set before any import
# of school_records reads settings.
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["AUTO_BOOTSTRAP"] = "true"

from typing import Dict

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from school_records.api.main import create_app
from school_records.db.bootstrap import bootstrap
from school_records.db.session import build_session_maker, create_schema
from school_records.db.store import RecordStore
from school_records.repositories import UserRepository
from school_records.schemas.auth import Role, UserRecord
from school_records.services.records import RecordsService
from school_records.services.scoping import Actor

PASSWORDS = {
    Role.DIRECTOR: ("director@music-school.ru", "director123"),
    Role.ADMIN: ("admin@music-school.ru", "admin123"),
    Role.TEACHER: ("teacher@music-school.ru", "teacher123"),
    Role.STUDENT: ("student@music-school.ru", "student123"),
}


def _engine(path):
    # NullPool: no connection outlives the event loop that opened it
    return create_async_engine(f"sqlite+aiosqlite:///{path}", poolclass=NullPool)


@pytest.fixture
async def store(tmp_path):
    engine = _engine(tmp_path / "records.db")
    await create_schema(engine)
    yield RecordStore(build_session_maker(engine))
    await engine.dispose()


@pytest.fixture
async def seeded(store):
    await bootstrap(store)
    return store


@pytest.fixture
async def demo_users(seeded) -> Dict[Role, UserRecord]:
    return {u.role: u for u in await UserRepository(seeded).get_all()}


@pytest.fixture
def actors(demo_users) -> Dict[Role, Actor]:
    return {role: Actor.from_user(user) for role, user in demo_users.items()}


@pytest.fixture
def records(seeded) -> RecordsService:
    return RecordsService(seeded)


@pytest.fixture
def client(tmp_path):
    engine = _engine(tmp_path / "api.db")
    asyncio.run(create_schema(engine))
    app = create_app(RecordStore(build_session_maker(engine)))
    with TestClient(app) as c:
        yield c


def auth_headers(client: TestClient, role: Role) -> Dict[str, str]:
    email, password = PASSWORDS[role]
    resp = client.post("/api/v1/sessions", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}
