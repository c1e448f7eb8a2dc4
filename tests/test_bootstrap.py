import pytest

from school_records.db import bootstrap as bootstrap_module
from school_records.db.bootstrap import bootstrap
from school_records.db.store import ASSIGNMENTS, COURSES, DEPARTMENTS, GRADES, SCHEDULES, USERS
from school_records.repositories import CourseRepository, DepartmentRepository, UserRepository
from school_records.schemas.auth import Role
from school_records.services.identity import SessionManager


async def test_bootstrap_seeds_demo_school(store):
    assert await bootstrap(store) is True

    users = await UserRepository(store).get_all()
    assert sorted(u.role.value for u in users) == ["admin", "director", "student", "teacher"]
    assert all(u.password_hash.startswith("$2") for u in users)
    student = next(u for u in users if u.role == Role.STUDENT)
    assert student.year == 3

    departments = await DepartmentRepository(store).get_all()
    teacher = next(u for u in users if u.role == Role.TEACHER)
    assert len(departments) == 3
    assert departments[0].head_teacher_id == teacher.id

    courses = await CourseRepository(store).get_all()
    assert len(courses) == 2
    assert all(c.year == 3 and c.teacher_id == teacher.id for c in courses)

    for collection in (ASSIGNMENTS, GRADES, SCHEDULES):
        assert await store.is_initialized(collection)
        assert await store.load(collection) == []


async def test_bootstrap_runs_once(store):
    assert await bootstrap(store) is True
    assert await bootstrap(store) is False
    assert len(await store.load(USERS)) == 4
    assert len(await store.load(DEPARTMENTS)) == 3
    assert len(await store.load(COURSES)) == 2


async def test_bootstrap_skips_initialized_empty_users(store):
    await store.save(USERS, [])
    assert await bootstrap(store) is False
    assert await store.load(COURSES) == []


async def test_teacher_logs_in_and_finds_their_courses(store):
    await bootstrap(store)
    teacher = await SessionManager(store).login("teacher@music-school.ru", "teacher123")
    assert teacher is not None and teacher.role == Role.TEACHER

    courses = await CourseRepository(store).get_by_teacher(teacher.id)
    assert sorted(c.name for c in courses) == ["Piano performance", "Solfeggio"]
    assert await CourseRepository(store).get_by_teacher("someone-else") == []


async def test_failed_bootstrap_writes_nothing_and_can_be_retried(store, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(bootstrap_module, "_demo_courses", broken)
    with pytest.raises(RuntimeError):
        await bootstrap(store)
    assert await store.is_initialized(USERS) is False
    assert await store.load(USERS) == []

    monkeypatch.undo()
    assert await bootstrap(store) is True
    assert len(await store.load(USERS)) == 4
    assert len(await store.load(DEPARTMENTS)) == 3
    assert len(await store.load(COURSES)) == 2
