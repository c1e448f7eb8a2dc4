import pytest

from school_records.core.errors import PermissionDenied, ValidationError
from school_records.core.security import verify_password
from school_records.repositories import UserRepository
from school_records.schemas.auth import Role, UserCreate, UserUpdate


def _student(**overrides):
    data = {
        "email": "new.student@music-school.ru",
        "password": "secret1",
        "role": Role.STUDENT,
        "name": "Olga",
        "surname": "Smirnova",
        "year": 2,
    }
    data.update(overrides)
    return UserCreate(**data)


async def test_create_assigns_id_and_timestamp(store):
    repo = UserRepository(store)
    user = await repo.create(_student(), hashed_password="hash")
    assert user.id
    assert user.created_at is not None
    assert (await repo.get_by_id(user.id)).email == "new.student@music-school.ru"


async def test_duplicate_email_is_rejected_case_insensitively(store):
    repo = UserRepository(store)
    await repo.create(_student(), hashed_password="hash")
    with pytest.raises(ValidationError):
        await repo.create(_student(email="New.Student@music-school.ru"), hashed_password="hash")
    assert len(await repo.get_all()) == 1


async def test_get_by_email_ignores_case(store):
    repo = UserRepository(store)
    created = await repo.create(_student(), hashed_password="hash")
    found = await repo.get_by_email("NEW.STUDENT@music-school.ru")
    assert found is not None and found.id == created.id


def test_year_dropped_for_staff_and_required_for_students():
    teacher = UserCreate(
        email="t2@music-school.ru", password="secret1", role=Role.TEACHER, name="A", surname="B", year=4
    )
    assert teacher.year is None
    with pytest.raises(ValueError):
        _student(year=None)


async def test_update_merges_and_keeps_other_fields(store):
    repo = UserRepository(store)
    user = await repo.create(_student(phone="+7 000"), hashed_password="hash")
    updated = await repo.update(user.id, UserUpdate(name="Olya"))
    assert updated.name == "Olya"
    assert updated.surname == "Smirnova"
    assert updated.phone == "+7 000"
    assert updated.password_hash == "hash"


async def test_update_rejects_email_of_another_user(store):
    repo = UserRepository(store)
    first = await repo.create(_student(), hashed_password="hash")
    second = await repo.create(_student(email="other@music-school.ru"), hashed_password="hash")
    with pytest.raises(ValidationError):
        await repo.update(second.id, UserUpdate(email=first.email))
    # keeping one's own email is fine
    assert await repo.update(first.id, UserUpdate(email=first.email)) is not None


async def test_update_and_delete_unknown_user(store):
    repo = UserRepository(store)
    assert await repo.update("missing", UserUpdate(name="X")) is None
    assert await repo.delete("missing") is False


async def test_service_rehashes_password_on_update(records, actors, demo_users):
    student = demo_users[Role.STUDENT]
    updated = await records.update_user(actors[Role.ADMIN], student.id, UserUpdate(password="changed1"))
    assert verify_password("changed1", updated.password_hash)
    assert not verify_password("student123", updated.password_hash)


async def test_only_management_roles_manage_users(records, actors, demo_users):
    with pytest.raises(PermissionDenied):
        await records.create_user(actors[Role.TEACHER], _student())
    with pytest.raises(PermissionDenied):
        await records.delete_user(actors[Role.STUDENT], demo_users[Role.TEACHER].id)
    created = await records.create_user(actors[Role.DIRECTOR], _student())
    assert await records.delete_user(actors[Role.ADMIN], created.id) is True


async def test_user_reads_are_projected_by_role(records, actors):
    staff_view = await records.list_users(actors[Role.ADMIN])
    student_view = await records.list_users(actors[Role.STUDENT])
    assert all("email" in u for u in staff_view)
    assert all("email" not in u and "phone" not in u for u in student_view)
    assert all("password_hash" not in u for u in staff_view + student_view)
    assert {u["role"] for u in student_view} == {"director", "admin", "teacher", "student"}
